"""
Conversion between domain objects and plain JSON documents, via pydantic.

Accepted inputs: pydantic models, dataclasses and mappings.  Reading back
ignores store metadata (_rid, _etag, _ts, _partition, ...) that the target
type does not declare.
"""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter

from cosmoskit.core.exceptions import CosmosValidationError

T = TypeVar("T")


@lru_cache(maxsize=128)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


class DocumentSerializer:
    """Default object <-> document mapper.  Pass a subclass to CosmosDatabase to change it."""

    def to_document(self, data: Any) -> dict[str, Any]:
        if isinstance(data, BaseModel):
            return data.model_dump(mode="json", by_alias=True)
        if dataclasses.is_dataclass(data) and not isinstance(data, type):
            return _adapter(type(data)).dump_python(data, mode="json", by_alias=True)
        if isinstance(data, Mapping):
            return _adapter(dict).dump_python(dict(data), mode="json")
        raise CosmosValidationError(
            f"Cannot convert {type(data).__name__} to a document: "
            "expected a pydantic model, a dataclass or a mapping"
        )

    def from_document(self, document: Mapping[str, Any], cls: type[T]) -> T:
        if cls is dict:
            return dict(document)  # type: ignore[return-value]
        return _adapter(cls).validate_python(dict(document))
