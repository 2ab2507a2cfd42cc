"""
DocumentClient backed by the azure-cosmos SDK (Core / SQL API).

Links are resolved to ContainerProxy objects; the SDK owns connection
pooling, retries and timeouts.  Only CosmosResourceNotFoundError is
translated; every other SDK error reaches the caller unchanged.
"""
from __future__ import annotations

from typing import Any

from azure.cosmos import CosmosClient, PartitionKey
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from cosmoskit.core.exceptions import DocumentNotFoundError
from cosmoskit.core.logging import get_logger
from cosmoskit.db.client import DocumentClient
from cosmoskit.db.links import parse_link
from cosmoskit.query.spec import QuerySpec

logger = get_logger(__name__)


class CosmosDocumentClient(DocumentClient):
    """Adapter from link-addressed calls to azure-cosmos container calls.

    Parameters
    ----------
    client : azure.cosmos.CosmosClient
        An already authenticated SDK client.
    """

    def __init__(self, client: CosmosClient):
        self._client = client

    # ── Resolution ──────────────────────────────────────

    def _container(self, link: str):
        ref = parse_link(link)
        if ref.collection is None:
            raise ValueError(f"Link does not address a collection: '{link}'")
        return self._client.get_database_client(ref.database).get_container_client(ref.collection)

    def _document(self, link: str) -> tuple[Any, str]:
        ref = parse_link(link)
        if ref.document_id is None:
            raise ValueError(f"Link does not address a document: '{link}'")
        container = self._client.get_database_client(ref.database).get_container_client(ref.collection)
        return container, ref.document_id

    # ── Documents ───────────────────────────────────────

    def create_document(self, collection_link: str, document: dict[str, Any], partition: str) -> dict[str, Any]:
        return self._container(collection_link).create_item(body=document)

    def read_document(self, document_link: str, partition: str) -> dict[str, Any]:
        container, doc_id = self._document(document_link)
        try:
            return container.read_item(item=doc_id, partition_key=partition)
        except CosmosResourceNotFoundError as exc:
            raise DocumentNotFoundError(document_link, exc) from exc

    def replace_document(self, document_link: str, document: dict[str, Any], partition: str) -> dict[str, Any]:
        container, doc_id = self._document(document_link)
        try:
            return container.replace_item(item=doc_id, body=document)
        except CosmosResourceNotFoundError as exc:
            raise DocumentNotFoundError(document_link, exc) from exc

    def upsert_document(self, collection_link: str, document: dict[str, Any], partition: str) -> dict[str, Any]:
        return self._container(collection_link).upsert_item(body=document)

    def delete_document(self, document_link: str, partition: str) -> None:
        container, doc_id = self._document(document_link)
        try:
            container.delete_item(item=doc_id, partition_key=partition)
        except CosmosResourceNotFoundError as exc:
            raise DocumentNotFoundError(document_link, exc) from exc

    def query_documents(self, collection_link: str, query_spec: QuerySpec, partition: str) -> list[dict[str, Any]]:
        container = self._container(collection_link)
        spec = query_spec.to_cosmos()
        return list(container.query_items(
            query=spec["query"],
            parameters=spec["parameters"],
            partition_key=partition,
        ))

    # ── Provisioning ────────────────────────────────────

    def create_database_if_not_exists(self, database: str) -> None:
        self._client.create_database_if_not_exists(id=database)
        logger.info("Ensured database: %s", database)

    def create_collection_if_not_exists(self, database: str, collection: str, partition_key_path: str) -> None:
        db = self._client.create_database_if_not_exists(id=database)
        db.create_container_if_not_exists(
            id=collection,
            partition_key=PartitionKey(path=partition_key_path),
        )
        logger.info("Ensured collection: db=%s coll=%s partitionKey=%s", database, collection, partition_key_path)
