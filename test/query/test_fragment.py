import pandas as pd
import pytest

from tracequery.query import AllOf, AnyOf, Column, Compare, Contains, In, QueryFragment


@pytest.fixture
def frame():
    return pd.DataFrame([
        dict(record_id="n1", region_id="a", label="AA0001", citation="10.1101/abc", node_count=3,
             soma_x=0.0, soma_y=0.0, soma_z=0.0),
        dict(record_id="n2", region_id="b", label="AA0002", citation="", node_count=0,
             soma_x=1.0, soma_y=1.0, soma_z=1.0),
        dict(record_id="n3", region_id=None, label="BB0100", citation="10.1101/100%_sure",
             node_count=7, soma_x=2.0, soma_y=2.0, soma_z=2.0),
    ])


def test_to_sql_in():
    fragment = QueryFragment((In(Column.REGION_ID, ("a", "b")),))
    assert fragment.to_sql() == ('"region_id" IN %(p0)s', {"p0": ("a", "b")})


def test_to_sql_conjunction():
    fragment = QueryFragment((
        In(Column.COLLECTION_ID, ("c1",)),
        AnyOf((Compare(Column.BRANCH_COUNT, "gt", 1), Compare(Column.END_COUNT, "eq", 2))),
    ))
    sql, params = fragment.to_sql()
    assert sql == (
        '"collection_id" IN %(p0)s AND ("branch_count" > %(p1)s OR "end_count" = %(p2)s)'
    )
    assert params == {"p0": ("c1",), "p1": 1, "p2": 2}


def test_to_sql_empty():
    assert QueryFragment().to_sql() == ("TRUE", {})


def test_to_sql_empty_in():
    assert QueryFragment((In(Column.REGION_ID, ()),)).to_sql() == ("FALSE", {})


def test_to_sql_contains_escapes_wildcards():
    sql, params = QueryFragment((Contains(Column.CITATION, "100%_sure"),)).to_sql()
    assert sql == '"citation" ILIKE %(p0)s'
    assert params == {"p0": "%100\\%\\_sure%"}


def test_compare_rejects_unknown_symbol():
    with pytest.raises(ValueError):
        Compare(Column.NODE_COUNT, "ge", 0)


@pytest.mark.parametrize("constraint, expected", [
    (In(Column.REGION_ID, ("a", "b")), ["n1", "n2"]),
    (In(Column.REGION_ID, ()), []),
    (Compare(Column.NODE_COUNT, "gt", 0), ["n1", "n3"]),
    (Compare(Column.NODE_COUNT, "lt", 3), ["n2"]),
    (Compare(Column.NODE_COUNT, "eq", 7), ["n3"]),
    (Contains(Column.LABEL, "aa00"), ["n1", "n2"]),
    (Contains(Column.CITATION, "100%_"), ["n3"]),
    (AnyOf(()), []),
    (AllOf(()), ["n1", "n2", "n3"]),
    (AnyOf((In(Column.LABEL, ("AA0002",)), Compare(Column.NODE_COUNT, "gt", 5))), ["n2", "n3"]),
    (AllOf((Contains(Column.LABEL, "AA"), Compare(Column.NODE_COUNT, "gt", 0))), ["n1"]),
])
def test_mask(frame, constraint, expected):
    assert list(frame.loc[constraint.mask(frame), "record_id"]) == expected


def test_apply_selects_columns(frame):
    result = QueryFragment((Compare(Column.NODE_COUNT, "gt", 0),)).apply(frame)
    assert list(result.columns) == ["record_id", "region_id"]
    assert list(result["record_id"]) == ["n1", "n3"]


def test_apply_with_soma(frame):
    result = QueryFragment(include_soma=True).apply(frame)
    assert list(result.columns) == ["record_id", "region_id", "soma_x", "soma_y", "soma_z"]
    assert len(result) == 3
