"""
Unit tests -- query compiler: filter / sort / paging -> parameterized Cosmos SQL.
"""
import pytest

from cosmoskit.core.exceptions import QueryConfigurationError, QueryValidationError
from cosmoskit.query.compiler import build_query_spec, param_name
from cosmoskit.query.spec import FilterDocument, QueryMode, SortDocument


# ── Helpers ──────────────────────────────────────────────

def _hanks_filter() -> dict:
    return {
        "fullName.last": "Hanks",
        "id": ["id001", "id002", "id005"],
        "age": 30,
    }


def _params(q) -> list[tuple]:
    return [(p.name, p.value) for p in q.parameters]


# ── Worked examples ──────────────────────────────────────

def test_find_full_query():
    q = build_query_spec(_hanks_filter(), {"_ts": "DESC"}, offset=10, limit=20)
    assert q.query_text == (
        "SELECT * FROM doc WHERE (doc.fullName.last = @fullName__last)"
        " AND (doc.id IN (@id__0, @id__1, @id__2))"
        " AND (doc.age = @age)"
        " ORDER BY doc._ts DESC OFFSET 10 LIMIT 20"
    )
    assert _params(q) == [
        ("@fullName__last", "Hanks"),
        ("@id__0", "id001"),
        ("@id__1", "id002"),
        ("@id__2", "id005"),
        ("@age", 30),
    ]


def test_count_full_query():
    q = build_query_spec(_hanks_filter(), {"_ts": "DESC"}, offset=10, limit=20, mode=QueryMode.COUNT)
    assert q.query_text == (
        "SELECT COUNT(1) FROM doc WHERE (doc.fullName.last = @fullName__last)"
        " AND (doc.id IN (@id__0, @id__1, @id__2))"
        " AND (doc.age = @age)"
    )
    assert len(q.parameters) == 5


def test_empty_find_defaults():
    q = build_query_spec()
    assert q.query_text == "SELECT * FROM doc OFFSET 0 LIMIT 100"
    assert q.parameters == ()


def test_invalid_direction_raises():
    with pytest.raises(QueryConfigurationError, match="ASC or DESC"):
        build_query_spec({"name": "Tom"}, {"_ts": "UP"})


# ── Parameter naming ─────────────────────────────────────

def test_param_name_nested():
    assert param_name("fullName.last") == "@fullName__last"


def test_param_name_flat():
    assert param_name("age") == "@age"


def test_param_name_deep():
    assert param_name("a.b.c") == "@a__b__c"


# ── Filter clauses ───────────────────────────────────────

def test_empty_filter_has_no_where():
    q = build_query_spec({}, {"_ts": "ASC"})
    assert "WHERE" not in q.query_text


def test_single_equality():
    q = build_query_spec({"name": "Tom"}, {})
    assert q.query_text == "SELECT * FROM doc WHERE (doc.name = @name) OFFSET 0 LIMIT 100"


def test_second_clause_joined_with_and():
    q = build_query_spec({"a": 1, "b": 2}, {})
    assert " WHERE (doc.a = @a) AND (doc.b = @b) " in q.query_text
    assert q.query_text.count("WHERE") == 1


def test_null_binds_as_parameter():
    """None uses the same '=' form and binds JSON null."""
    q = build_query_spec({"deletedAt": None}, {})
    assert "(doc.deletedAt = @deletedAt)" in q.query_text
    assert "IS NULL" not in q.query_text
    assert _params(q) == [("@deletedAt", None)]
    assert q.to_cosmos()["parameters"] == [{"name": "@deletedAt", "value": None}]


def test_bool_and_float_values():
    q = build_query_spec({"active": True, "score": 1.5}, {})
    assert _params(q) == [("@active", True), ("@score", 1.5)]


# ── IN clauses ───────────────────────────────────────────

def test_list_becomes_in_clause():
    q = build_query_spec({"status": ["new", "open"]}, {})
    assert "(doc.status IN (@status__0, @status__1))" in q.query_text
    assert _params(q) == [("@status__0", "new"), ("@status__1", "open")]


def test_tuple_becomes_in_clause():
    q = build_query_spec({"n": (3, 1, 2)}, {})
    assert "(doc.n IN (@n__0, @n__1, @n__2))" in q.query_text
    assert [p.value for p in q.parameters] == [3, 1, 2]


def test_nested_path_in_clause():
    q = build_query_spec({"fullName.first": ["Tom", "Matt"]}, {})
    assert "(doc.fullName.first IN (@fullName__first__0, @fullName__first__1))" in q.query_text


def test_empty_list_is_always_false():
    q = build_query_spec({"id": []}, {})
    assert q.query_text == "SELECT * FROM doc WHERE (1 = 0) OFFSET 0 LIMIT 100"
    assert q.parameters == ()


def test_empty_list_between_other_clauses():
    q = build_query_spec({"a": 1, "id": [], "b": 2}, {})
    assert " WHERE (doc.a = @a) AND (1 = 0) AND (doc.b = @b) " in q.query_text
    assert _params(q) == [("@a", 1), ("@b", 2)]


# ── Sort clauses ─────────────────────────────────────────

def test_sort_case_insensitive():
    q = build_query_spec({}, {"name": "asc"})
    assert q.query_text == "SELECT * FROM doc ORDER BY doc.name ASC OFFSET 0 LIMIT 100"


def test_multiple_sort_keys_in_order():
    q = build_query_spec({}, {"lastName": "Asc", "_ts": "desc"})
    assert " ORDER BY doc.lastName ASC, doc._ts DESC " in q.query_text


def test_empty_sort_has_no_order_by():
    q = build_query_spec({"a": 1}, {})
    assert "ORDER BY" not in q.query_text


def test_non_string_direction_raises():
    with pytest.raises(QueryConfigurationError):
        build_query_spec({}, {"_ts": 1})


def test_count_ignores_sort_entirely():
    """COUNT never builds ORDER BY, so a bad direction is not even looked at."""
    q = build_query_spec({}, {"_ts": "UP"}, mode=QueryMode.COUNT)
    assert q.query_text == "SELECT COUNT(1) FROM doc"


# ── Mode handling ────────────────────────────────────────

def test_count_has_no_paging():
    q = build_query_spec({"a": 1}, {"_ts": "DESC"}, offset=5, limit=5, mode="count")
    for kw in ("ORDER BY", "OFFSET", "LIMIT"):
        assert kw not in q.query_text


def test_find_always_pages():
    q = build_query_spec({"a": 1}, None, mode="find")
    assert q.query_text.endswith("OFFSET 0 LIMIT 100")


def test_limit_zero_allowed():
    q = build_query_spec(limit=0)
    assert q.query_text.endswith("OFFSET 0 LIMIT 0")


def test_unknown_mode_raises():
    with pytest.raises(QueryValidationError, match="mode"):
        build_query_spec(mode="sum")


# ── Builders as input ────────────────────────────────────

def test_accepts_builder_documents():
    f = FilterDocument().where("fullName.last", "Hanks").where("id", ["id001", "id002", "id005"]).where("age", 30)
    s = SortDocument().desc("_ts")
    from_builders = build_query_spec(f, s, offset=10, limit=20)
    from_dicts = build_query_spec(_hanks_filter(), {"_ts": "DESC"}, offset=10, limit=20)
    assert from_builders == from_dicts


# ── Properties ───────────────────────────────────────────

def test_deterministic():
    a = build_query_spec(_hanks_filter(), {"_ts": "DESC", "id": "ASC"}, 3, 7)
    b = build_query_spec(_hanks_filter(), {"_ts": "DESC", "id": "ASC"}, 3, 7)
    assert a.query_text == b.query_text
    assert _params(a) == _params(b)


def test_values_never_in_query_text():
    hostile = ["x') OR 1=1 --", "Robert'); DROP TABLE doc;--", "@secret", "\" OR \"\"=\""]
    q = build_query_spec({"name": hostile[0], "tags": hostile[1:]}, {})
    for value in hostile:
        assert value not in q.query_text


def test_parameter_order_follows_filter_then_list_order():
    q = build_query_spec({"z": 1, "a": ["p", "q"], "m": 2}, {})
    assert [p.name for p in q.parameters] == ["@z", "@a__0", "@a__1", "@m"]


def test_every_parameter_referenced_once():
    q = build_query_spec(_hanks_filter(), {"_ts": "DESC"})
    for p in q.parameters:
        assert q.query_text.count(p.name + ")") + q.query_text.count(p.name + ",") == 1


# ── Input validation ─────────────────────────────────────

def test_dict_value_rejected():
    with pytest.raises(QueryValidationError, match="unsupported value type"):
        build_query_spec({"fullName": {"last": "Hanks"}}, {})


def test_set_value_rejected():
    with pytest.raises(QueryValidationError):
        build_query_spec({"id": {"a", "b"}}, {})


def test_nested_list_rejected():
    with pytest.raises(QueryValidationError):
        build_query_spec({"id": [["a"]]}, {})


@pytest.mark.parametrize("path", ["", "a..b", "name; DROP", "a.b)", "x OR 1=1", ".a", "age\n", "0", "1abc.x"])
def test_bad_field_path_rejected(path):
    with pytest.raises(QueryValidationError):
        build_query_spec({path: 1}, {})


def test_underscore_and_trailing_digits_allowed():
    q = build_query_spec({"_meta.v2_id": 1}, {"_ts": "DESC"})
    assert "(doc._meta.v2_id = @_meta__v2_id)" in q.query_text


def test_bad_sort_path_rejected():
    with pytest.raises(QueryValidationError):
        build_query_spec({}, {"_ts DESC, doc.x": "ASC"})


@pytest.mark.parametrize("offset,limit", [(-1, 10), (0, -1), (True, 10), (0, "10"), (1.5, 10)])
def test_bad_paging_rejected(offset, limit):
    with pytest.raises(QueryValidationError):
        build_query_spec(offset=offset, limit=limit)
