from dataclasses import dataclass
from typing import Iterable, Sequence

import pandas as pd

from table_errors import OutOfRange


def _cell(value) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value)


@dataclass(frozen=True)
class Table:
    """Canonical headers + rows value. Immutable, so history can hold it as-is."""

    headers: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()

    @classmethod
    def from_lists(cls, headers: Iterable, rows: Iterable[Iterable]) -> "Table":
        return cls(
            headers=tuple(_cell(h) for h in headers),
            rows=tuple(tuple(_cell(v) for v in row) for row in rows),
        )

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "Table":
        return cls.from_lists(list(df.columns), df.itertuples(index=False, name=None))

    def to_lists(self) -> tuple[list[str], list[list[str]]]:
        return list(self.headers), [list(row) for row in self.rows]

    def to_dataframe(self) -> pd.DataFrame:
        settled = normalize(self)
        return pd.DataFrame(
            [list(row) for row in settled.rows],
            columns=list(settled.headers),
            dtype=object,
        )

    @property
    def shape(self) -> tuple[int, int]:
        return len(self.rows), len(self.headers)

    def is_settled(self) -> bool:
        width = len(self.headers)
        return all(len(row) == width for row in self.rows)


def _fit(row: Sequence[str], width: int) -> tuple[str, ...]:
    if len(row) > width:
        return tuple(row[:width])
    if len(row) < width:
        return tuple(row) + ("",) * (width - len(row))
    return tuple(row)


def _check(kind: str, index: int, size: int):
    if not isinstance(index, int) or index < 0 or index >= size:
        raise OutOfRange(kind, index, size)


def normalize(table: Table) -> Table:
    """Truncate or right-pad every row to the header count."""
    if table.is_settled():
        return table
    width = len(table.headers)
    return Table(table.headers, tuple(_fit(row, width) for row in table.rows))


def set_cell(table: Table, row: int, col: int, value: str) -> Table:
    _check("row", row, len(table.rows))
    _check("column", col, len(table.headers))
    table = normalize(table)
    target = list(table.rows[row])
    target[col] = _cell(value)
    rows = table.rows[:row] + (tuple(target),) + table.rows[row + 1 :]
    return Table(table.headers, rows)


def set_header(table: Table, col: int, value: str) -> Table:
    _check("column", col, len(table.headers))
    headers = table.headers[:col] + (_cell(value),) + table.headers[col + 1 :]
    return normalize(Table(headers, table.rows))


def add_row(table: Table) -> Table:
    table = normalize(table)
    blank = ("",) * len(table.headers)
    return Table(table.headers, table.rows + (blank,))


def delete_row(table: Table, row: int) -> Table:
    _check("row", row, len(table.rows))
    table = normalize(table)
    return Table(table.headers, table.rows[:row] + table.rows[row + 1 :])


def add_column(table: Table) -> Table:
    table = normalize(table)
    name = f"Column {len(table.headers) + 1}"
    return Table(
        table.headers + (name,),
        tuple(row + ("",) for row in table.rows),
    )


def delete_column(table: Table, col: int) -> Table:
    width = len(table.headers)
    _check("column", col, width)
    # short rows are padded first so every row has a cell at `col`
    padded = [row if len(row) >= width else _fit(row, width) for row in table.rows]
    headers = table.headers[:col] + table.headers[col + 1 :]
    rows = tuple(tuple(row[:col]) + tuple(row[col + 1 :]) for row in padded)
    return normalize(Table(headers, rows))
