"""Threadline API client.

Usage:
    from threadline.client import ThreadlineClient

    async with ThreadlineClient() as client:
        response = await client.chat("a@x.com", "hello")
"""

from threadline.client.client import ThreadlineClient, ThreadlineClientError

__all__ = ["ThreadlineClient", "ThreadlineClientError"]
