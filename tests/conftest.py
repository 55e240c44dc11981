"""
Shared test fixtures and configuration.
"""

import pytest
import os

# Set test environment variables before importing app modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/cropdoctor_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LLM_API_KEY", "")

from cropdoctor.core.session_cache import SessionCache
from cropdoctor.services.chat_session_manager import ChatSessionManager
from cropdoctor.storage.chat_store import ChatStore
from cropdoctor.storage.interface import StorageError
from cropdoctor.storage.local_storage import LocalStorage


class FakeClock:
    """Controllable monotonic clock for cache tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FlakyStorage(LocalStorage):
    """LocalStorage that fails saves or deletes on paths containing a marker."""

    def __init__(self, base_dir: str):
        super().__init__(base_dir)
        self.fail_save_on = None
        self.fail_delete_on = None

    async def save(self, path, content):
        if self.fail_save_on and self.fail_save_on in path:
            raise StorageError("save", path, OSError("simulated save failure"))
        return await super().save(path, content)

    async def delete(self, path):
        if self.fail_delete_on and self.fail_delete_on in path:
            raise StorageError("delete", path, OSError("simulated delete failure"))
        return await super().delete(path)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(tmp_path):
    return FlakyStorage(str(tmp_path / "data"))


@pytest.fixture
def store(storage):
    return ChatStore(storage)


@pytest.fixture
def cache(clock):
    return SessionCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def manager(store, cache):
    return ChatSessionManager(store, cache)
