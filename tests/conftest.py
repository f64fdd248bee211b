"""Shared test fixtures for the Threadline test suite."""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from threadline.conversation.locks import InMemoryIdentityLock
from threadline.conversation.stores import InMemoryConversationStore
from threadline.providers.assistant import MockThreadClient

# Collaborators built from settings during tests use config/test.toml
os.environ.setdefault("THREADLINE_ENV", "test")


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "staging.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            if self.original_env[key] is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = self.original_env[key]


@pytest.fixture
def env_override() -> Generator[Callable[[dict[str, str]], EnvOverrideContext], None, None]:
    """Context manager for temporarily setting environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"THREADLINE_DEBUG": "true"}):
                # test code here
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    yield _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    from threadline.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeClock:
    """Monotonic clock advanced only by FakeSleep."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


class FakeSleep:
    """Records sleep durations and advances a FakeClock instead of waiting."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.clock.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep(fake_clock: FakeClock) -> FakeSleep:
    return FakeSleep(fake_clock)


@pytest.fixture
def now() -> datetime:
    """Fixed wall-clock time for session and entry timestamps."""
    return datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def thread_client() -> MockThreadClient:
    return MockThreadClient(reply="hi there")


@pytest.fixture
def store() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def identity_lock() -> InMemoryIdentityLock:
    return InMemoryIdentityLock(blocking_timeout=0.5)
