"""Persistência de documentos do blockci (pipelines, executions, builds)."""

from .store import DocumentStore, InMemoryDocumentStore, JsonDirectoryStore

__all__ = ["DocumentStore", "InMemoryDocumentStore", "JsonDirectoryStore"]
