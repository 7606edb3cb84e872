"""File locking and atomic YAML document I/O for the document store."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from .constants import WINDOWS_LOCK_BYTES
from .errors import StoreUnavailable


def _lock(handle: Any) -> None:
    try:
        import fcntl
    except ImportError:
        import msvcrt
        handle.seek(0)
        handle.truncate(WINDOWS_LOCK_BYTES)
        handle.flush()
        msvcrt.locking(handle.fileno(), msvcrt.LK_LOCK, WINDOWS_LOCK_BYTES)
    else:
        fcntl.flock(handle, fcntl.LOCK_EX)


def _unlock(handle: Any) -> None:
    try:
        import fcntl
    except ImportError:
        import msvcrt
        handle.seek(0)
        msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, WINDOWS_LOCK_BYTES)
    else:
        fcntl.flock(handle, fcntl.LOCK_UN)


class DocumentLock:
    """Exclusive lock on one document, held through its sidecar ``.lock`` file.

    Failing to open or acquire the lock means the document cannot be reached,
    so it surfaces as :class:`StoreUnavailable` naming the document.
    """

    def __init__(self, lock_path: Path, document: str):
        self.lock_path = lock_path
        self.document = document
        self._handle: Optional[Any] = None

    def __enter__(self) -> "DocumentLock":
        try:
            handle = open(self.lock_path, "w")
        except OSError as exc:
            raise StoreUnavailable(f"Unable to lock document {self.document}: {exc}") from exc
        try:
            _lock(handle)
        except OSError as exc:
            handle.close()
            raise StoreUnavailable(f"Unable to lock document {self.document}: {exc}") from exc
        self._handle = handle
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            _unlock(handle)
        finally:
            handle.close()


def load_yaml_document(path: Path) -> Optional[dict[str, Any]]:
    """Read one YAML mapping from *path*.

    Returns ``None`` when the file does not exist. Parse errors and non-mapping
    content propagate so callers never overwrite a corrupted document.
    """
    if not path.exists():
        return None
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"{path.name}: expected mapping, got {type(data).__name__}")
    return data


def write_yaml_document(path: Path, document: dict[str, Any]) -> None:
    """Replace *path* with *document* in one rename; a failed write leaves the old file."""
    tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as handle:
            yaml.safe_dump(document, handle, sort_keys=False, allow_unicode=True)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def load_optional_yaml(path: Path) -> tuple[dict[str, Any], str | None]:
    """
    Load a YAML mapping and return (data, error_message).

    A missing file yields ``({}, None)``; unreadable or malformed content yields
    ``({}, message)`` so configuration loading can fall back to defaults.
    """
    if not path.exists():
        return {}, None
    try:
        data = load_yaml_document(path)
    except OSError as exc:
        return {}, f"{path.name}: {exc.__class__.__name__}: {exc}"
    except yaml.YAMLError as exc:
        return {}, f"{path.name}: YAMLError: {exc}"
    except ValueError as exc:
        return {}, str(exc)
    return data or {}, None
