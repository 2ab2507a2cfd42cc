"""
Thin wrappers around documents returned by the store.
"""
from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any, TypeVar

from cosmoskit.db.serializer import DocumentSerializer

T = TypeVar("T")


class CosmosDocument:
    """One stored document.

    Usage:
        user = db.read("Data", "id001", "Users").to_object(User)
    """

    def __init__(self, data: dict[str, Any], serializer: DocumentSerializer):
        self.data = data
        self._serializer = serializer

    def to_object(self, cls: type[T]) -> T:
        return self._serializer.from_document(self.data, cls)

    def to_map(self) -> dict[str, Any]:
        return dict(self.data)

    def to_json(self) -> str:
        return json.dumps(self.data, ensure_ascii=False)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, CosmosDocument) and other.data == self.data

    def __repr__(self) -> str:
        return f"CosmosDocument({self.data!r})"


class CosmosDocumentList:
    """Documents returned by find(), in store order."""

    def __init__(self, items: list[dict[str, Any]], serializer: DocumentSerializer):
        self.items = items
        self._serializer = serializer

    def to_list(self, cls: type[T]) -> list[T]:
        return [self._serializer.from_document(item, cls) for item in self.items]

    def to_json(self) -> str:
        return json.dumps(self.items, ensure_ascii=False)

    def __iter__(self) -> Iterator[CosmosDocument]:
        return (CosmosDocument(item, self._serializer) for item in self.items)

    def __len__(self) -> int:
        return len(self.items)
