"""
CosmosAccount -- entry point holding one SDK client per account.

Usage:
    account = CosmosAccount("AccountEndpoint=https://xxx.documents.azure.com:443/;AccountKey=xxx==;")
    db = account.get_database("Database1")
    db.upsert("Users", user)

Connection-string parsing is left to azure-cosmos.
"""
from __future__ import annotations

import re
from functools import lru_cache

from azure.cosmos import CosmosClient

from cosmoskit.core.config import get_settings
from cosmoskit.core.exceptions import CosmosValidationError
from cosmoskit.core.logging import get_logger
from cosmoskit.db.client import DocumentClient
from cosmoskit.db.cosmos_client import CosmosDocumentClient
from cosmoskit.db.database import CosmosDatabase
from cosmoskit.db.serializer import DocumentSerializer

logger = get_logger(__name__)

_ENDPOINT_RE = re.compile(r"AccountEndpoint=([^;]+)", re.IGNORECASE)


def _endpoint_of(connection_string: str) -> str:
    m = _ENDPOINT_RE.search(connection_string)
    return m.group(1) if m else "<unknown>"


class CosmosAccount:
    """One Cosmos account.

    Parameters
    ----------
    connection_string : str, optional
        Account connection string.  Defaults to COSMOSDB_CONNECTION_STRING.
    consistency_level : str, optional
        Defaults to the configured level ("Session").
    client : DocumentClient, optional
        Use this collaborator instead of building one from the connection string.
    serializer : DocumentSerializer, optional
        Passed on to every CosmosDatabase this account hands out.
    """

    def __init__(
        self,
        connection_string: str | None = None,
        consistency_level: str | None = None,
        client: DocumentClient | None = None,
        serializer: DocumentSerializer | None = None,
    ):
        self.serializer = serializer or DocumentSerializer()

        if client is not None:
            self.client = client
            return

        settings = get_settings()
        if connection_string is None:
            connection_string = settings.cosmosdb_connection_string
        if not connection_string or not connection_string.strip():
            raise CosmosValidationError.blank("connection string")

        sdk_client = CosmosClient.from_connection_string(
            connection_string,
            consistency_level=consistency_level or settings.cosmos_consistency_level,
        )
        logger.info("Cosmos client created  endpoint=%s", _endpoint_of(connection_string))
        self.client = CosmosDocumentClient(sdk_client)

    def get_database(self, database: str) -> CosmosDatabase:
        if not isinstance(database, str) or not database.strip():
            raise CosmosValidationError.blank("database")
        return CosmosDatabase(self.client, database, self.serializer)

    def create_if_not_exist(self, database: str, collection: str = "") -> CosmosDatabase:
        """Create the database (and the collection, if given) when missing."""
        return self.get_database(database).create_if_not_exist(database, collection)


@lru_cache
def get_account() -> CosmosAccount:
    """Return the shared account built from settings (lazy-created, cached)."""
    return CosmosAccount()
