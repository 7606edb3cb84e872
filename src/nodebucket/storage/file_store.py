"""Directory-of-YAML document store.

Each employee document lives in ``<root>/employees/<empId>.yaml`` next to a
``.lock`` file. Every read and every read-modify-write holds that document's
exclusive lock, so a single update is atomic with respect to the document while
operations on different employees never contend.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import yaml
from loguru import logger

from ..constants import DOCUMENT_SUFFIX, EMPLOYEES_DIR, LOCK_SUFFIX, MAX_DOCUMENT_KEY_LENGTH
from ..errors import StoreUnavailable
from ..io_utils import DocumentLock, load_yaml_document, write_yaml_document
from ..logging_utils import preview
from .interfaces import Document, DocumentSession, DocumentStore, Mutation

KEY_FIELD = "empId"

_IO_ERRORS = (OSError, yaml.YAMLError, ValueError)


class _YamlSession(DocumentSession):
    def __init__(self, collection_dir: Path) -> None:
        self._dir = collection_dir
        self._open = True

    def close(self) -> None:
        self._open = False

    def _paths(self, key: int) -> Optional[tuple[Path, Path]]:
        """Document and lock paths for *key*; ``None`` if no file can carry that key."""
        if not self._open:
            raise StoreUnavailable("Document session is closed")
        try:
            name = str(int(key))
        except ValueError:
            return None
        if len(name) > MAX_DOCUMENT_KEY_LENGTH:
            return None
        return self._dir / f"{name}{DOCUMENT_SUFFIX}", self._dir / f"{name}{LOCK_SUFFIX}"

    def find_one(self, key: int) -> Optional[Document]:
        paths = self._paths(key)
        if paths is None:
            return None
        path, lock_path = paths
        with DocumentLock(lock_path, preview(str(key))):
            try:
                return load_yaml_document(path)
            except _IO_ERRORS as exc:
                raise StoreUnavailable(f"Unable to read document {preview(str(key))}: {exc}") from exc

    def update_one(self, key: int, mutate: Mutation) -> bool:
        paths = self._paths(key)
        if paths is None:
            return False
        path, lock_path = paths
        with DocumentLock(lock_path, preview(str(key))):
            try:
                document = load_yaml_document(path)
                if document is None:
                    return False
                mutate(document)
                write_yaml_document(path, document)
                return True
            except _IO_ERRORS as exc:
                raise StoreUnavailable(f"Unable to update document {preview(str(key))}: {exc}") from exc

    def insert_one(self, document: Document) -> bool:
        key = document[KEY_FIELD]
        paths = self._paths(key)
        if paths is None:
            raise StoreUnavailable(f"Key {preview(str(key))} is too long for a document name")
        path, lock_path = paths
        with DocumentLock(lock_path, preview(str(key))):
            try:
                if path.exists():
                    return False
                write_yaml_document(path, document)
                return True
            except _IO_ERRORS as exc:
                raise StoreUnavailable(f"Unable to insert document {preview(str(key))}: {exc}") from exc


class YamlDocumentStore(DocumentStore):
    """File-backed keyed collection of employee documents.

    Parameters
    ----------
    data_dir:
        Root data directory; documents go under ``employees/``.
    """

    def __init__(self, data_dir: Path, collection: str = EMPLOYEES_DIR) -> None:
        self._dir = data_dir / collection

    @property
    def collection_dir(self) -> Path:
        return self._dir

    @contextmanager
    def connect(self) -> Iterator[DocumentSession]:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailable(f"Document store at {self._dir} is unavailable: {exc}") from exc
        session = _YamlSession(self._dir)
        logger.debug(f"Connected to document store {self._dir}")
        try:
            yield session
        finally:
            session.close()
            logger.debug(f"Disconnected from document store {self._dir}")
