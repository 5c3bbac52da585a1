"""
CLI Output Helpers.

Table and JSON rendering shared by every command. Tables are built with
Rich; JSON goes straight to stdout so it can be piped.
"""

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

from sdc_cli.core.exceptions import OutputFormatError


def split_fields(value: str | Sequence[str]) -> list[str]:
    """Accept 'a,b,c' or ['a', 'b'] and return a clean list of names."""
    if isinstance(value, str):
        value = value.split(",")
    return [name.strip() for name in value if name.strip()]


def check_fields(kind: str, names: list[str], valid_fields: Iterable[str] | None) -> None:
    """Raise OutputFormatError if any of ``names`` is not in ``valid_fields``."""
    if valid_fields is None:
        return
    valid = set(valid_fields)
    unknown = [name for name in names if name not in valid]
    if unknown:
        raise OutputFormatError(
            f"invalid {kind} field(s): {', '.join(unknown)} (valid: {', '.join(sorted(valid))})"
        )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _sort_key(fields: list[str], rows: list[Mapping[str, Any]]):
    """Sort key over ``fields``. None sorts first.

    A field whose values are all numbers sorts numerically; any other field
    sorts by the string form of its values.
    """
    numeric = set()
    for name in fields:
        values = [row.get(name) for row in rows if row.get(name) is not None]
        if values and all(_is_number(value) for value in values):
            numeric.add(name)

    def key(item: Mapping[str, Any]) -> tuple:
        parts = []
        for name in fields:
            value = item.get(name)
            if value is None:
                parts.append((False, ""))
            elif name in numeric:
                parts.append((True, value))
            else:
                parts.append((True, str(value)))
        return tuple(parts)

    return key


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def tabulate(
    items: Iterable[Mapping[str, Any]],
    columns: str | Sequence[str],
    sort: str | Sequence[str] | None = None,
    valid_fields: Iterable[str] | None = None,
) -> Table:
    """
    Build a table of ``items``.

    Args:
        items: Rows as mappings
        columns: Column names, in display order
        sort: Fields to sort by, ascending, in priority order
        valid_fields: If given, columns and sort fields must come from it

    Raises:
        OutputFormatError: On an unknown column or sort field
    """
    column_names = split_fields(columns)
    sort_names = split_fields(sort) if sort else []
    check_fields("column", column_names, valid_fields)
    check_fields("sort", sort_names, valid_fields)

    rows = list(items)
    if sort_names:
        rows.sort(key=_sort_key(sort_names, rows))

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    for name in column_names:
        table.add_column(name.upper())
    for row in rows:
        table.add_row(*(_cell(row.get(name)) for name in column_names))
    return table


def print_json(console: Console, data: Any) -> None:
    """Print ``data`` as indented JSON without Rich markup or highlighting."""
    console.print(json.dumps(data, indent=4, default=str), markup=False, highlight=False, soft_wrap=True)
