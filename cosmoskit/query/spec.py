"""
Query inputs and output.

FilterDocument / SortDocument are the ordered inputs to the compiler;
QuerySpec is what it hands to the document store: query text plus
ordered bind parameters.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cosmoskit.core.exceptions import QueryValidationError


class QueryMode(str, Enum):
    FIND = "find"
    COUNT = "count"


class _OrderedDocument(Mapping):
    """Insertion-ordered field-path mapping with a fluent setter.

    A repeated field path keeps its first position and takes the last value.
    """

    def __init__(self, entries: Mapping[str, Any] | None = None):
        self._entries: dict[str, Any] = {}
        for path, value in (entries or {}).items():
            self._set(path, value)

    def _set(self, path: str, value: Any) -> None:
        if not isinstance(path, str) or not path.strip():
            raise QueryValidationError(f"Field path must be a non-empty string, got {path!r}")
        self._entries[path] = value

    def __getitem__(self, path: str) -> Any:
        return self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._entries!r})"


class FilterDocument(_OrderedDocument):
    """Field path -> scalar (equality) or list of scalars (membership).

    >>> FilterDocument().where("fullName.last", "Hanks").where("id", ["id001", "id002"])
    """

    def where(self, path: str, value: Any) -> "FilterDocument":
        self._set(path, value)
        return self


class SortDocument(_OrderedDocument):
    """Field path -> 'ASC' | 'DESC' (any case)."""

    def by(self, path: str, direction: str) -> "SortDocument":
        self._set(path, direction)
        return self

    def asc(self, path: str) -> "SortDocument":
        return self.by(path, "ASC")

    def desc(self, path: str) -> "SortDocument":
        return self.by(path, "DESC")


class SqlParameter(BaseModel):
    """One named bind parameter, e.g. ('@fullName__last', 'Hanks')."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Parameter name including the '@' sigil")
    value: Any = Field(None, description="Scalar bound at execution time")


class QuerySpec(BaseModel):
    """Compiled, parameterized query ready for the document store."""

    model_config = ConfigDict(frozen=True)

    query_text: str = Field(..., description="SELECT ... FROM doc [WHERE ...] [ORDER BY ...] [OFFSET n LIMIT m]")
    parameters: tuple[SqlParameter, ...] = Field(default_factory=tuple)

    def to_cosmos(self) -> dict[str, Any]:
        """Shape accepted by azure-cosmos query_items(query=..., parameters=...)."""
        return {
            "query": self.query_text,
            "parameters": [{"name": p.name, "value": p.value} for p in self.parameters],
        }
