"""
Query compiler: turns a FilterDocument / SortDocument plus paging into a
parameterized Cosmos SQL QuerySpec.

Every filter value is bound through a named parameter; the only caller text
that reaches the query string is the field path, which is checked segment by
segment first.

    filter {"fullName.last": "Hanks", "id": ["id001", "id002"]}, sort {"_ts": "DESC"}
    -> SELECT * FROM doc WHERE (doc.fullName.last = @fullName__last)
       AND (doc.id IN (@id__0, @id__1)) ORDER BY doc._ts DESC OFFSET 0 LIMIT 100

Null filter values bind as JSON null with the same `=` form.  Cosmos treats
`doc.x = null` as true only where the field is present and null; documents
without the field do not match.

Two field paths that normalise to the same parameter stem (`a.b` and `a__b`)
would collide; callers must not mix such paths in one filter.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from cosmoskit.core.exceptions import QueryConfigurationError, QueryValidationError
from cosmoskit.core.logging import get_logger
from cosmoskit.query.spec import (
    FilterDocument,
    QueryMode,
    QuerySpec,
    SortDocument,
    SqlParameter,
)

logger = get_logger(__name__)

ROOT_ALIAS = "doc"
DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 100

_SEGMENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SCALAR_TYPES = (str, int, float, bool, type(None))
_LIST_TYPES = (list, tuple)
_DIRECTIONS = ("ASC", "DESC")

# "member of the empty set" never holds; IN () is not valid Cosmos SQL
_ALWAYS_FALSE = "(1 = 0)"


# ── Input checks ─────────────────────────────────────────

def _check_path(path: Any) -> str:
    if not isinstance(path, str) or not path:
        raise QueryValidationError(f"Field path must be a non-empty string, got {path!r}")
    if not all(_SEGMENT_RE.fullmatch(segment) for segment in path.split(".")):
        raise QueryValidationError(
            f"Invalid field path '{path}': segments must start with a letter or '_' and contain only letters, digits and '_'"
        )
    return path


def _check_scalar(path: str, value: Any) -> Any:
    if not isinstance(value, _SCALAR_TYPES):
        raise QueryValidationError(
            f"Filter '{path}' has unsupported value type {type(value).__name__}: "
            "expected str, int, float, bool, None or a list of those"
        )
    return value


def _check_paging(offset: Any, limit: Any) -> None:
    for name, val in (("offset", offset), ("limit", limit)):
        if isinstance(val, bool) or not isinstance(val, int):
            raise QueryValidationError(f"{name} must be an integer, got {val!r}")
        if val < 0:
            raise QueryValidationError(f"{name} must be >= 0, got {val}")


# ── Clause builders ──────────────────────────────────────

def param_name(path: str) -> str:
    """fullName.last -> @fullName__last"""
    return "@" + path.replace(".", "__")


def _build_in_clause(path: str, stem: str, values: list | tuple, params: list[SqlParameter]) -> str:
    """( doc.id IN (@id__0, @id__1, ...) ), one parameter per element in list order."""
    if not values:
        return _ALWAYS_FALSE

    names: list[str] = []
    for index, value in enumerate(values):
        name = f"{stem}__{index}"
        params.append(SqlParameter(name=name, value=_check_scalar(path, value)))
        names.append(name)
    return f"({ROOT_ALIAS}.{path} IN ({', '.join(names)}))"


def _build_where(filter_doc: FilterDocument, params: list[SqlParameter]) -> str:
    parts: list[str] = []

    for path, value in filter_doc.items():
        _check_path(path)
        stem = param_name(path)

        if isinstance(value, _LIST_TYPES):
            parts.append(_build_in_clause(path, stem, value, params))
        else:
            parts.append(f"({ROOT_ALIAS}.{path} = {stem})")
            params.append(SqlParameter(name=stem, value=_check_scalar(path, value)))

    return "".join(
        f" {'WHERE' if index == 0 else 'AND'} {clause}"
        for index, clause in enumerate(parts)
    )


def _build_order_by(sort_doc: SortDocument) -> str:
    parts: list[str] = []
    for path, direction in sort_doc.items():
        _check_path(path)
        normalized = direction.upper() if isinstance(direction, str) else direction
        if normalized not in _DIRECTIONS:
            raise QueryConfigurationError.from_direction(path, direction)
        parts.append(f"{ROOT_ALIAS}.{path} {normalized}")
    return " ORDER BY " + ", ".join(parts)


# ── Entry point ──────────────────────────────────────────

def build_query_spec(
    filter: Mapping[str, Any] | None = None,
    sort: Mapping[str, str] | None = None,
    offset: int = DEFAULT_OFFSET,
    limit: int = DEFAULT_LIMIT,
    mode: QueryMode | str = QueryMode.FIND,
) -> QuerySpec:
    """Compile filter / sort / paging into a parameterized QuerySpec.

    Parameters
    ----------
    filter : Mapping or FilterDocument, optional
        Field path -> scalar or list of scalars.  Order decides clause and
        parameter order.
    sort : Mapping or SortDocument, optional
        Field path -> 'ASC' / 'DESC'.  Ignored in COUNT mode.
    offset, limit : int
        Paging window, both >= 0.  Ignored in COUNT mode.
    mode : QueryMode
        FIND projects '*' and pages; COUNT projects COUNT(1) only.

    Raises
    ------
    QueryConfigurationError
        A sort direction other than ASC / DESC.
    QueryValidationError
        Malformed field path, filter value, paging value or mode.
    """
    try:
        mode = QueryMode(mode)
    except ValueError as exc:
        raise QueryValidationError(f"Unknown query mode {mode!r}") from exc

    filter_doc = filter if isinstance(filter, FilterDocument) else FilterDocument(filter)
    sort_doc = sort if isinstance(sort, SortDocument) else SortDocument(sort)
    _check_paging(offset, limit)

    projection = "COUNT(1)" if mode is QueryMode.COUNT else "*"
    params: list[SqlParameter] = []

    query_text = f"SELECT {projection} FROM {ROOT_ALIAS}"
    query_text += _build_where(filter_doc, params)

    if mode is QueryMode.FIND:
        if sort_doc:
            query_text += _build_order_by(sort_doc)
        query_text += f" OFFSET {offset} LIMIT {limit}"

    logger.info("Compiled query: %s  params=%d", query_text, len(params))
    return QuerySpec(query_text=query_text, parameters=tuple(params))
