"""Shared fixtures: isolated settings and ready-made sessions."""

import pytest

from splitter.audit import AuditLogger
from splitter.config import get_settings
from splitter.services.storage import InMemoryStateStorage
from splitter.session import SplitterSession


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point storage at a temp dir and reload settings around each test."""
    monkeypatch.setenv("SPLITTER_STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("SPLITTER_SHARING_CLIPBOARD_COMMAND", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def storage():
    return InMemoryStateStorage()


@pytest.fixture
def session(storage):
    return SplitterSession(
        storage=storage,
        audit_logger=AuditLogger(),
        base_url="https://split.example.com/",
    )


@pytest.fixture
def trio(session):
    """Session with Alice, Bob and Carol on the roster."""
    alice = session.add_participant("Alice")
    bob = session.add_participant("Bob")
    carol = session.add_participant("Carol")
    return session, alice, bob, carol
