"""
DocumentClient: the operations the access layer needs from a document store.

Implementations address resources by link (see `cosmoskit.db.links`) and
scope every call to a partition key value.  A missing resource must surface
as `DocumentNotFoundError`; every other failure propagates as raised.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from cosmoskit.query.spec import QuerySpec


class DocumentClient(ABC):

    @abstractmethod
    def create_document(self, collection_link: str, document: dict[str, Any], partition: str) -> dict[str, Any]:
        """Insert a new document; fails if the id already exists."""

    @abstractmethod
    def read_document(self, document_link: str, partition: str) -> dict[str, Any]:
        """Return the stored document or raise DocumentNotFoundError."""

    @abstractmethod
    def replace_document(self, document_link: str, document: dict[str, Any], partition: str) -> dict[str, Any]:
        """Replace an existing document or raise DocumentNotFoundError."""

    @abstractmethod
    def upsert_document(self, collection_link: str, document: dict[str, Any], partition: str) -> dict[str, Any]:
        """Insert or replace by id."""

    @abstractmethod
    def delete_document(self, document_link: str, partition: str) -> None:
        """Delete a document or raise DocumentNotFoundError."""

    @abstractmethod
    def query_documents(self, collection_link: str, query_spec: QuerySpec, partition: str) -> list[dict[str, Any]]:
        """Run a compiled query inside one partition."""

    @abstractmethod
    def create_database_if_not_exists(self, database: str) -> None: ...

    @abstractmethod
    def create_collection_if_not_exists(self, database: str, collection: str, partition_key_path: str) -> None: ...
