from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Callable, Optional

Document = dict[str, Any]
Mutation = Callable[[Document], None]


class DocumentSession(ABC):
    """An open connection to one keyed collection of documents."""

    @abstractmethod
    def find_one(self, key: int) -> Optional[Document]:
        raise NotImplementedError

    @abstractmethod
    def update_one(self, key: int, mutate: Mutation) -> bool:
        """Apply *mutate* to the document atomically; ``False`` if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def insert_one(self, document: Document) -> bool:
        """Store a new document; ``False`` if its key is already taken."""
        raise NotImplementedError


class DocumentStore(ABC):
    @abstractmethod
    def connect(self) -> AbstractContextManager[DocumentSession]:
        """Acquire a session that is released when the context exits."""
        raise NotImplementedError
