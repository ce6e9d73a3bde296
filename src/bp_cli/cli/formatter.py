"""Output formatter shared by every listing and lookup command.

Supported shapes
----------------
* ``table`` — Rich table (Field/Value rows for a single record).
* ``json``  — JSON array / object.
* ``csv``   — header row plus one row per record.
* ``yaml``  — YAML sequence / mapping (PyYAML).
* ``ids``   — space-separated ``id`` values (lists only).
* ``count`` — number of records (lists only).

Records are plain dicts; ``fields`` selects and orders the columns.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Mapping, Sequence
from typing import Any

import yaml
from rich.table import Table
from rich.text import Text

from bp_cli.cli import console
from bp_cli.exceptions import InvalidInputError

ITEM_FORMATS: tuple[str, ...] = ("table", "json", "csv", "yaml")
LIST_FORMATS: tuple[str, ...] = ITEM_FORMATS + ("ids", "count")


def parse_fields(raw: str | Sequence[str] | None, default: Sequence[str]) -> list[str]:
    """Turn ``"id,subject"`` (or a sequence) into a field list."""
    if raw is None or raw == "":
        return list(default)
    if isinstance(raw, str):
        return [part.strip() for part in raw.split(",") if part.strip()]
    return list(raw)


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


class Formatter:
    """Render records in the selected output shape.

    Parameters
    ----------
    format:
        One of :data:`LIST_FORMATS`.
    fields:
        Columns to render, in order.
    """

    def __init__(self, format: str, fields: Sequence[str]) -> None:
        if format not in LIST_FORMATS:
            raise InvalidInputError(
                f"Invalid format: {format}",
                hint=f"Choose one of: {', '.join(LIST_FORMATS)}.",
            )
        if not fields:
            raise InvalidInputError("At least one field is required.")
        self.format: str = format
        self.fields: list[str] = list(fields)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def display_items(self, items: Sequence[Mapping[str, Any]]) -> None:
        """Render a list of records."""
        if self.format == "count":
            console.line(len(items))
            return
        if self.format == "ids":
            console.line(" ".join(_scalar(item.get("id")) for item in items))
            return

        rows = [self._select(item) for item in items]
        if self.format == "json":
            console.line(json.dumps(rows))
        elif self.format == "yaml":
            console.line(yaml.safe_dump(rows, sort_keys=False).rstrip("\n"))
        elif self.format == "csv":
            console.line(self._csv([self.fields] + [
                [_scalar(row[field]) for field in self.fields] for row in rows
            ]))
        else:
            table = Table(show_header=True, header_style="bold cyan", border_style="dim")
            for field in self.fields:
                table.add_column(field)
            for row in rows:
                table.add_row(*(Text(_scalar(row[field])) for field in self.fields))
            console.get_stdout_console().print(table)

    def display_item(self, item: Mapping[str, Any]) -> None:
        """Render one record."""
        if self.format not in ITEM_FORMATS:
            raise InvalidInputError(
                f"Invalid format for a single item: {self.format}",
                hint=f"Choose one of: {', '.join(ITEM_FORMATS)}.",
            )

        row = self._select(item)
        if self.format == "json":
            console.line(json.dumps(row))
        elif self.format == "yaml":
            console.line(yaml.safe_dump(row, sort_keys=False).rstrip("\n"))
        elif self.format == "csv":
            console.line(self._csv(
                [["Field", "Value"]] + [[field, _scalar(value)] for field, value in row.items()]
            ))
        else:
            table = Table(show_header=True, header_style="bold cyan", border_style="dim")
            table.add_column("Field", style="bold")
            table.add_column("Value")
            for field, value in row.items():
                table.add_row(field, Text(_scalar(value)))
            console.get_stdout_console().print(table)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _select(self, item: Mapping[str, Any]) -> dict[str, Any]:
        missing = [field for field in self.fields if field not in item]
        if missing:
            raise InvalidInputError(
                f"Invalid field: {', '.join(missing)}.",
                hint=f"Available fields: {', '.join(item)}.",
            )
        return {field: item[field] for field in self.fields}

    @staticmethod
    def _csv(rows: Sequence[Sequence[str]]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerows(rows)
        return buffer.getvalue().rstrip("\n")
