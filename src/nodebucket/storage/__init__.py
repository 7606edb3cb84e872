from .file_store import YamlDocumentStore
from .interfaces import DocumentSession, DocumentStore
from .task_store import TaskStore

__all__ = ["DocumentSession", "DocumentStore", "TaskStore", "YamlDocumentStore"]
