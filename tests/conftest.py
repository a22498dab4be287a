"""
Shared pytest fixtures for the PocketVault test suite.

Key derivation runs at its real iteration count, so fixtures that build
a vault are cheap but not free; reuse them instead of calling setup() in
every test.
"""

import pytest

from pocketvault.manager import PasswordManager
from pocketvault.storage import FileKeyValueStore, MemoryKeyValueStore

MASTER_PASSWORD = "correct-horse-battery"


@pytest.fixture
def memory_store():
    return MemoryKeyValueStore()


@pytest.fixture
def file_store(tmp_path):
    return FileKeyValueStore(str(tmp_path / "vault" / "vault.json"))


@pytest.fixture
def manager(memory_store):
    """A freshly set-up, unlocked manager over an in-memory store"""
    pm = PasswordManager(memory_store)
    pm.setup(MASTER_PASSWORD)
    yield pm
    pm.lock()
