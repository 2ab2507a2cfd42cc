"""
Resource links in the Cosmos addressing scheme:

    /dbs/{db}
    /dbs/{db}/colls/{coll}
    /dbs/{db}/colls/{coll}/docs/{id}
"""
from __future__ import annotations

from typing import NamedTuple


class ResourceLink(NamedTuple):
    database: str
    collection: str | None = None
    document_id: str | None = None


def get_database_link(db: str) -> str:
    return f"/dbs/{db}"


def get_collection_link(db: str, coll: str) -> str:
    return f"/dbs/{db}/colls/{coll}"


def get_document_link(db: str, coll: str, doc_id: str) -> str:
    return f"/dbs/{db}/colls/{coll}/docs/{doc_id}"


def parse_link(link: str) -> ResourceLink:
    """Split a database, collection or document link into its ids.

    Raises ValueError for anything that is not one of the three shapes.
    """
    parts = link.strip("/").split("/")
    if len(parts) not in (2, 4, 6) or any(not p for p in parts):
        raise ValueError(f"Malformed resource link: '{link}'")

    keys = parts[0::2]
    ids = parts[1::2]
    if keys != ["dbs", "colls", "docs"][: len(keys)]:
        raise ValueError(f"Malformed resource link: '{link}'")

    return ResourceLink(*ids)
