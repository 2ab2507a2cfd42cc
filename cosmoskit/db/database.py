"""
CosmosDatabase -- CRUD and query access to the collections of one database.

Every document lives under a partition.  Writes stamp the partition value
into the `_partition` field; reads and queries are scoped to it.  When no
partition is given, the collection name is used.

Usage:
    db = CosmosAccount(conn_str).get_database("Database1")

    db.upsert("Users", user)
    user = db.read("Users", "id001").to_object(User)

    users = db.find(
        "Data",
        filter={"fullName.last": "Hanks", "id": ["id001", "id003", "id005"]},
        sort={"_ts": "DESC"},
        offset=0,
        limit=10,
        partition="Users",
    ).to_list(User)
"""
from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from cosmoskit.core.config import get_settings
from cosmoskit.core.exceptions import CosmosValidationError, DocumentNotFoundError
from cosmoskit.core.logging import get_logger
from cosmoskit.db.client import DocumentClient
from cosmoskit.db.document import CosmosDocument, CosmosDocumentList
from cosmoskit.db.links import get_collection_link, get_document_link
from cosmoskit.db.serializer import DocumentSerializer
from cosmoskit.query.compiler import DEFAULT_OFFSET, build_query_spec
from cosmoskit.query.spec import QueryMode

logger = get_logger(__name__)

PARTITION_KEY = "_partition"
DEFAULT_SORT: dict[str, str] = {"_ts": "DESC"}


def _check_collection(collection: str) -> None:
    if not isinstance(collection, str) or not collection.strip():
        raise CosmosValidationError.blank("collection")


def _check_id(doc_id: str) -> None:
    if not isinstance(doc_id, str) or not doc_id.strip():
        raise CosmosValidationError.blank("id")


class CosmosDatabase:
    """Document access for one database through a DocumentClient.

    Parameters
    ----------
    client : DocumentClient
        Store collaborator (e.g. CosmosDocumentClient).
    database : str
        Database id.
    serializer : DocumentSerializer, optional
        Object <-> document mapper.  Defaults to the pydantic based one.
    """

    def __init__(
        self,
        client: DocumentClient,
        database: str,
        serializer: DocumentSerializer | None = None,
    ):
        if not isinstance(database, str) or not database.strip():
            raise CosmosValidationError.blank("database")
        self.client = client
        self.database = database
        self.serializer = serializer or DocumentSerializer()

    def _to_document(self, data: Any, partition: str) -> dict[str, Any]:
        document = self.serializer.to_document(data)
        document[PARTITION_KEY] = partition
        return document

    def _wrap(self, resource: dict[str, Any]) -> CosmosDocument:
        return CosmosDocument(resource, self.serializer)

    # ── CRUD ────────────────────────────────────────────

    def create(self, collection: str, data: Any, partition: str | None = None) -> CosmosDocument:
        _check_collection(collection)
        partition = partition or collection

        document = self._to_document(data, partition)
        collection_link = get_collection_link(self.database, collection)

        resource = self.client.create_document(collection_link, document, partition)
        logger.info("created Document: %s/docs/%s, partition:%s", collection_link, document.get("id"), partition)
        return self._wrap(resource)

    def read(self, collection: str, id: str, partition: str | None = None) -> CosmosDocument:
        """Raises DocumentNotFoundError if the document does not exist."""
        _check_id(id)
        _check_collection(collection)
        partition = partition or collection

        document_link = get_document_link(self.database, collection, id)
        resource = self.client.read_document(document_link, partition)
        logger.debug("readDocument: %s, partition:%s", document_link, partition)
        return self._wrap(resource)

    def update(self, collection: str, id: str, data: Any, partition: str | None = None) -> CosmosDocument:
        """Replace an existing document.  Raises DocumentNotFoundError if it does not exist."""
        _check_id(id)
        _check_collection(collection)
        partition = partition or collection

        document_link = get_document_link(self.database, collection, id)
        document = self._to_document(data, partition)
        document.setdefault("id", id)

        resource = self.client.replace_document(document_link, document, partition)
        logger.info("updated Document: %s, partition:%s", document_link, partition)
        return self._wrap(resource)

    def upsert(self, collection: str, data: Any, id: str = "", partition: str | None = None) -> CosmosDocument:
        """Create the document if absent, replace it otherwise.

        `id` overrides the id carried by `data`; one of the two must be non-blank.
        """
        _check_collection(collection)
        partition = partition or collection

        document = self._to_document(data, partition)
        if id and id.strip():
            document["id"] = id
        if not str(document.get("id") or "").strip():
            raise CosmosValidationError.blank("id")

        collection_link = get_collection_link(self.database, collection)
        resource = self.client.upsert_document(collection_link, document, partition)
        logger.info("upserted Document: %s/docs/%s, partition:%s", collection_link, document["id"], partition)
        return self._wrap(resource)

    def delete(self, collection: str, id: str, partition: str | None = None) -> None:
        """Delete a document.  Does nothing if it does not exist."""
        _check_id(id)
        _check_collection(collection)
        partition = partition or collection

        document_link = get_document_link(self.database, collection, id)
        try:
            self.client.delete_document(document_link, partition)
        except DocumentNotFoundError:
            logger.info("delete is skipped due to not found. Document: %s, partition:%s", document_link, partition)
            return
        logger.info("deleted Document: %s, partition:%s", document_link, partition)

    # ── Queries ─────────────────────────────────────────

    def find(
        self,
        collection: str,
        filter: Mapping[str, Any] | None = None,
        sort: Mapping[str, str] | None = None,
        offset: int = DEFAULT_OFFSET,
        limit: int | None = None,
        partition: str | None = None,
    ) -> CosmosDocumentList:
        """Find documents in one partition.

        `sort` defaults to newest first (_ts DESC); pass an empty mapping for
        store order. `limit` defaults to settings.default_page_limit.
        """
        _check_collection(collection)
        partition = partition or collection
        if limit is None:
            limit = get_settings().default_page_limit
        if sort is None:
            sort = DEFAULT_SORT

        t0 = time.perf_counter()
        query_spec = build_query_spec(filter, sort, offset, limit, QueryMode.FIND)
        items = self.client.query_documents(
            get_collection_link(self.database, collection), query_spec, partition,
        )
        latency = int((time.perf_counter() - t0) * 1000)

        logger.info(
            "find Document: collection: %s, filter: %s, sort: %s, offset: %d, limit: %d, partition:%s | %d docs in %d ms",
            collection, dict(filter or {}), dict(sort), offset, limit, partition, len(items), latency,
        )
        return CosmosDocumentList(items, self.serializer)

    def count(
        self,
        collection: str,
        filter: Mapping[str, Any] | None = None,
        partition: str | None = None,
    ) -> int:
        """Number of documents in the partition matching `filter`."""
        _check_collection(collection)
        partition = partition or collection

        t0 = time.perf_counter()
        query_spec = build_query_spec(filter, mode=QueryMode.COUNT)
        rows = self.client.query_documents(
            get_collection_link(self.database, collection), query_spec, partition,
        )
        latency = int((time.perf_counter() - t0) * 1000)

        # SELECT COUNT(1) yields one row: {"$1": n}
        total = int(rows[0]["$1"]) if rows else 0
        logger.info(
            "count Document: collection: %s, filter: %s, partition:%s | %d in %d ms",
            collection, dict(filter or {}), partition, total, latency,
        )
        return total

    # ── Provisioning ────────────────────────────────────

    def create_if_not_exist(self, database: str | None = None, collection: str = "") -> "CosmosDatabase":
        """Create the database and, unless `collection` is blank, the collection.

        Collections are partitioned on /_partition.
        """
        database = database or self.database
        if collection.strip():
            self.client.create_collection_if_not_exists(database, collection, f"/{PARTITION_KEY}")
        else:
            self.client.create_database_if_not_exists(database)
        return self
