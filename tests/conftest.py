"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before anything imports the settings module,
so no .env file is loaded and the in-memory store backend is used.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"

os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-admin-key-123,test-admin-key-456")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_FORMAT", "plain")

import pytest

from storefront.adapters.kv.in_memory import InMemoryKeyValueStore
from storefront.core import store as store_module


class FakeClock:
    """Deterministic clock returning UNIX seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(clock=clock)


@pytest.fixture(autouse=True)
def _fresh_shared_store():
    """Give every test its own process-wide store instance."""
    store_module.reset_store_state()
    yield
    store_module.reset_store_state()
