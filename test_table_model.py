import pytest

import table_model as tm
from table_errors import OutOfRange
from table_model import Table


def _table(headers, rows):
    return Table.from_lists(headers, rows)


def test_delete_column_scenario():
    t = _table(["a", "b"], [["1", "2"]])
    result = tm.delete_column(t, 0)
    assert result == _table(["b"], [["2"]])


def test_add_column_scenario():
    t = _table(["a"], [["x"], ["y"]])
    result = tm.add_column(t)
    assert result.headers == ("a", "Column 2")
    assert result.rows == (("x", ""), ("y", ""))


def test_add_column_names_from_header_count():
    t = _table(["x", "y", "z"], [])
    assert tm.add_column(t).headers[-1] == "Column 4"


def test_set_cell_returns_new_table_and_keeps_input():
    t = _table(["a", "b"], [["1", "2"], ["3", "4"]])
    result = tm.set_cell(t, 1, 0, "x")
    assert result.rows == (("1", "2"), ("x", "4"))
    assert t.rows == (("1", "2"), ("3", "4"))


def test_set_header_changes_only_that_position():
    t = _table(["a", "a"], [["1", "2"]])
    result = tm.set_header(t, 1, "b")
    assert result.headers == ("a", "b")
    assert result.rows == t.rows


def test_add_row_uses_header_width():
    t = _table(["a", "b", "c"], [["1", "2", "3"]])
    assert tm.add_row(t).rows[-1] == ("", "", "")


def test_delete_row_preserves_order():
    t = _table(["a"], [["1"], ["2"], ["3"]])
    assert tm.delete_row(t, 1).rows == (("1",), ("3",))


def test_delete_column_pads_short_rows_first():
    t = Table(("a", "b", "c"), (("1",), ("1", "2", "3")))
    result = tm.delete_column(t, 2)
    assert result.headers == ("a", "b")
    assert result.rows == (("1", ""), ("1", "2"))


@pytest.mark.parametrize(
    "op, args",
    [
        (tm.set_cell, (2, 0, "v")),
        (tm.set_cell, (0, 2, "v")),
        (tm.set_cell, (-1, 0, "v")),
        (tm.set_header, (2, "v")),
        (tm.delete_row, (2,)),
        (tm.delete_column, (2,)),
        (tm.delete_column, (-1,)),
    ],
)
def test_out_of_range_leaves_table_untouched(op, args):
    t = _table(["a", "b"], [["1", "2"], ["3", "4"]])
    before = t.to_lists()
    with pytest.raises(OutOfRange):
        op(t, *args)
    assert t.to_lists() == before


def test_normalize_truncates_and_pads():
    t = Table(("a", "b"), (("1", "2", "3"), ("4",), ("5", "6")))
    result = tm.normalize(t)
    assert result.rows == (("1", "2"), ("4", ""), ("5", "6"))
    assert tm.normalize(result) == result


@pytest.mark.parametrize(
    "op, args",
    [
        (tm.add_row, ()),
        (tm.add_column, ()),
        (tm.delete_row, (0,)),
        (tm.delete_column, (0,)),
        (tm.delete_column, (1,)),
        (tm.set_cell, (0, 1, "z")),
        (tm.set_header, (0, "h")),
    ],
)
def test_structural_ops_settle_ragged_input(op, args):
    ragged = Table(("a", "b", "c"), (("1",), ("1", "2", "3", "4"), ()))
    result = tm.normalize(op(ragged, *args))
    assert result.is_settled()
    for row in result.rows:
        assert len(row) == len(result.headers)


def test_dataframe_round_trip_keeps_duplicate_headers():
    t = _table(["a", "a"], [["1", "2"]])
    df = t.to_dataframe()
    assert list(df.columns) == ["a", "a"]
    assert Table.from_dataframe(df) == t


def test_from_lists_turns_missing_values_into_empty_strings():
    t = Table.from_lists(["a", None], [[None, 3]])
    assert t.headers == ("a", "")
    assert t.rows == (("", "3"),)
