"""Fixtures for unit tests that build the store without an application."""

import json

import pytest

from src.modules.blob_store import MemoryBlobStore
from src.modules.broadcaster import Broadcaster
from src.modules.fault_policy import always_succeed
from src.modules.fault_policy import no_delay
from src.modules.todo_store import DEFAULT_STORAGE_KEY
from src.modules.todo_store import TodoStore


class CountingBlobStore(MemoryBlobStore):
    """Memory blob store that counts writes."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.write_count = 0

    def set(self, key, value):
        self.write_count += 1
        super().set(key, value)


class FailingBlobStore(MemoryBlobStore):
    """Memory blob store whose writes always fail."""

    def set(self, key, value):
        raise RuntimeError("disk full")


def seeded(lists):
    """Build blob store contents holding ``lists`` (plain dicts)."""
    return {DEFAULT_STORAGE_KEY: json.dumps(lists)}


@pytest.fixture
def blob_store():
    """Blob store starting with an empty list of lists."""
    return CountingBlobStore(seeded([]))


@pytest.fixture
def broadcaster():
    return Broadcaster()


@pytest.fixture
def received(broadcaster):
    """Messages delivered to a listener subscribed before any operation."""
    messages = []
    broadcaster.subscribe(messages.append)
    return messages


@pytest.fixture
def make_store(broadcaster):
    """Factory building a store with deterministic success and no delay."""

    def _make(blob_store, **kwargs):
        kwargs.setdefault("broadcaster", broadcaster)
        kwargs.setdefault("fault_policy", always_succeed())
        kwargs.setdefault("delay_policy", no_delay())
        return TodoStore(blob_store, **kwargs)

    return _make


@pytest.fixture
def store(make_store, blob_store):
    return make_store(blob_store)


@pytest.fixture
def abc_store(make_store):
    """Store whose only list holds items A, B and C."""
    lists = [
        {
            "name": "letters",
            "items": [
                {"description": "A", "done": False},
                {"description": "B", "done": True},
                {"description": "C", "done": False},
            ],
        }
    ]
    return make_store(CountingBlobStore(seeded(lists)))


@pytest.fixture
def failing_blob_store():
    return FailingBlobStore(seeded([{"name": "work", "items": []}]))


@pytest.fixture
def read_persisted():
    """Decode the lists a blob store currently holds."""

    def _read(blob_store):
        return json.loads(blob_store.get(DEFAULT_STORAGE_KEY))

    return _read
