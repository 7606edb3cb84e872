from __future__ import annotations

from pathlib import Path

import pytest

from nodebucket.config import Settings
from nodebucket.storage import TaskStore, YamlDocumentStore

from .fakes import EMP_ID, CountingDocumentStore


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    d = tmp_path / ".nodebucket"
    d.mkdir()
    return d


@pytest.fixture
def documents(data_dir: Path) -> CountingDocumentStore:
    """A YAML store with employee 1008 provisioned and an empty board."""
    store = YamlDocumentStore(data_dir)
    with store.connect() as session:
        session.insert_one(
            {"empId": EMP_ID, "firstName": "Ravi", "lastName": "Patel", "todo": [], "done": []}
        )
    return CountingDocumentStore(store)


@pytest.fixture
def task_store(documents: CountingDocumentStore) -> TaskStore:
    return TaskStore(documents)


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(data_dir=data_dir, environment="development")


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
