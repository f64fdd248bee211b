"""Threadline: stateful assistant conversations with persisted history."""

__version__ = "0.1.0"
