"""
Result checks used by query steps.

Query engines do not guarantee row order, so row comparisons are done on
sorted, canonicalised renderings of the rows. Error expectations compare the
status code exactly and the message by substring.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

import pyarrow as pa

from stepharness.errors import ExpectationError, QueryError, QueryErrorCode

logger = logging.getLogger(__name__)

QueryResult = Union[pa.Table, pa.RecordBatch, Sequence[Any], None]


# =============================================================================
# Result normalisation
# =============================================================================


def _column_values(column: Union[pa.Array, pa.ChunkedArray]) -> list[Any]:
    # Timestamps, durations and time64 values can carry nanosecond precision
    # that datetime cannot hold; compare them as their raw integer values.
    t = column.type
    if pa.types.is_timestamp(t) or pa.types.is_duration(t) or pa.types.is_time64(t):
        column = column.cast(pa.int64())
    return column.to_pylist()


def _arrow_rows(data: Union[pa.Table, pa.RecordBatch]) -> list[dict[str, Any]]:
    """
    Rows of an Arrow table or record batch as ``{column: value}`` dicts, in
    column order. Timestamp columns come out as integers in the column's own
    unit, so a ``timestamp[ns]`` value of 100 renders as ``time=100``.
    """
    names = data.column_names
    values = [_column_values(column) for column in data.columns]
    return [
        {name: column[i] for name, column in zip(names, values)}
        for i in range(data.num_rows)
    ]


def rows_from_result(result: QueryResult) -> list[Any]:
    """
    Flatten whatever the cluster returned for a query into a list of rows.

    Arrow tables and record batches become lists of ``{column: value}`` dicts
    (see ``_arrow_rows`` for how temporal columns are rendered); plain
    sequences of rows are passed through (mappings copied to dicts).
    """
    if result is None:
        return []
    if isinstance(result, (pa.Table, pa.RecordBatch)):
        return _arrow_rows(result)

    rows: list[Any] = []
    for item in result:
        if isinstance(item, (pa.Table, pa.RecordBatch)):
            rows.extend(_arrow_rows(item))
        elif isinstance(item, Mapping):
            rows.append(dict(item))
        else:
            rows.append(item)
    return rows


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def normalize_row(row: Any) -> str:
    """
    Canonical one-line rendering of a row.

    Mappings render in their own key order, which for query results is the
    result's column order; expected rows must list columns in that order.

    - ``"tag=a  value=1 time=100"`` -> ``"tag=a value=1 time=100"``
    - ``{"tag": "a", "value": 1, "time": 100}`` -> ``"tag=a value=1 time=100"``
    - ``("a", 1, 100)`` -> ``"a 1 100"``
    """
    if isinstance(row, str):
        return " ".join(row.split())
    if isinstance(row, Mapping):
        return " ".join(f"{k}={_format_value(v)}" for k, v in row.items())
    if isinstance(row, Iterable):
        return " ".join(_format_value(v) for v in row)
    return _format_value(row)


# =============================================================================
# Pretty tables
# =============================================================================


def _is_table_expectation(expected: Sequence[Any]) -> bool:
    return bool(expected) and all(isinstance(line, str) for line in expected) and (
        expected[0].lstrip().startswith("+")
    )


def pretty_format_rows(rows: Sequence[Mapping[str, Any]]) -> list[str]:
    """
    Render rows as an ASCII table, one list entry per line::

        +-----+-------+------+
        | tag | value | time |
        +-----+-------+------+
        | a   | 1     | 100  |
        +-----+-------+------+
    """
    columns: list[str] = []
    for row in rows:
        for name in row:
            if name not in columns:
                columns.append(name)
    if not columns:
        return ["++", "++"]

    cells = [[_format_value(row.get(c)) for c in columns] for row in rows]
    widths = [
        max([len(c)] + [len(r[i]) for r in cells]) for i, c in enumerate(columns)
    ]

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def _line(values: Sequence[str]) -> str:
        return "|" + "|".join(f" {v:<{w}} " for v, w in zip(values, widths)) + "|"

    lines = [border, _line(columns), border]
    lines.extend(_line(r) for r in cells)
    lines.append(border)
    return lines


def sort_table_lines(lines: Sequence[str]) -> list[str]:
    """Sort the body of a pretty table, leaving header and borders in place."""
    lines = [line.strip() for line in lines]
    if len(lines) <= 4:
        return lines
    return lines[:3] + sorted(lines[3:-1]) + lines[-1:]


# =============================================================================
# Assertions
# =============================================================================


def assert_rows_sorted_eq(expected: Sequence[Any], actual: Sequence[Any]) -> None:
    """
    Assert that ``actual`` holds the same rows as ``expected``, in any order.

    ``expected`` is either a list of rows (strings, mappings or sequences,
    compared after ``normalize_row``) or the lines of a pretty table as
    produced by ``pretty_format_rows``.

    Raises:
        ExpectationError: The row multisets differ.
    """
    if _is_table_expectation(expected):
        expected_lines = sort_table_lines(expected)
        actual_lines = sort_table_lines(
            pretty_format_rows([r for r in actual if isinstance(r, Mapping)])
        )
    else:
        expected_lines = sorted(normalize_row(r) for r in expected)
        actual_lines = sorted(normalize_row(r) for r in actual)

    if expected_lines != actual_lines:
        expected_text = "\n".join(expected_lines)
        actual_text = "\n".join(actual_lines)
        raise ExpectationError(
            "query results differ\n\n"
            f"expected:\n{expected_text}\n\n"
            f"actual:\n{actual_text}\n"
        )


def check_query_error(
    err: QueryError,
    expected_error_code: QueryErrorCode,
    expected_message: Optional[str] = None,
) -> None:
    """
    Assert that ``err`` carries exactly ``expected_error_code`` and, if given,
    a message containing ``expected_message``.

    Raises:
        ExpectationError: Code or message does not match.
    """
    expected_error_code = QueryErrorCode(expected_error_code)
    if err.code != expected_error_code:
        raise ExpectationError(
            f"expected query error code {expected_error_code.value}, "
            f"got {err.code.value} (message: {err.message!r})"
        )
    if expected_message is not None and expected_message not in err.message:
        raise ExpectationError(
            f"expected query error message to contain {expected_message!r}, "
            f"got {err.message!r}"
        )
    logger.debug("Query failed as expected with %s: %s", err.code.value, err.message)
