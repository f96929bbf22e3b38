"""
Flow record parsing.

Turns the collector's whitespace-aligned text table into a header
schema and typed rows. Each line yields either an Accepted row or a
Rejected outcome, so malformed-line handling is explicit.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from typing import Union

from ..errors import HeaderParseError, RecordMalformed

logger = logging.getLogger(__name__)

FOOTER_MARKER = "for a total of:"
MAX_ROWS = 1000
MIN_FIELDS = 2

SRC_PATTERN = re.compile(r"^SRC.*(IP|HOST)", re.IGNORECASE)
DST_PATTERN = re.compile(r"^DST.*(IP|HOST)", re.IGNORECASE)

_BYTE_UNITS = ["B", "KB", "MB", "GB", "TB"]
_INTEGER = re.compile(r"[0-9]+")


def is_byte_count(value: str) -> bool:
    """True for a plain run of ASCII digits."""
    return _INTEGER.fullmatch(value) is not None


def format_bytes(count: int) -> str:
    """Humanize a byte count with base-1024 units, e.g. 1536 -> '1.5 KB'."""
    value = float(count)
    unit = 0
    while unit < len(_BYTE_UNITS) - 1 and round(value, 2) >= 1024:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_BYTE_UNITS[unit]}"


@dataclass(frozen=True)
class HeaderSchema:
    """Column names of a collector table and the offsets of known columns."""
    columns: tuple[str, ...]
    bytes_col: int = -1
    src_col: int = -1
    dst_col: int = -1

    @property
    def width(self) -> int:
        return len(self.columns)

    @classmethod
    def from_line(
        cls,
        line: str,
        bytes_columns: set[str] | None = None,
        src_pattern: re.Pattern = SRC_PATTERN,
        dst_pattern: re.Pattern = DST_PATTERN,
    ) -> HeaderSchema:
        columns = tuple(line.split())
        if not columns:
            raise HeaderParseError("Header line has no columns")

        wanted = {c.upper() for c in (bytes_columns or {"BYTES"})}
        bytes_col = src_col = dst_col = -1
        for i, name in enumerate(columns):
            if bytes_col < 0 and name.upper() in wanted:
                bytes_col = i
            elif src_col < 0 and src_pattern.search(name):
                src_col = i
            elif dst_col < 0 and dst_pattern.search(name):
                dst_col = i

        return cls(columns=columns, bytes_col=bytes_col, src_col=src_col, dst_col=dst_col)


@dataclass(frozen=True)
class ParsedRow:
    """One accepted flow line: machine fields and their display form."""
    raw: tuple[str, ...]
    display: tuple[str, ...]

    def column(self, index: int) -> str:
        return self.raw[index] if 0 <= index < len(self.raw) else ""


@dataclass(frozen=True)
class Accepted:
    row: ParsedRow


@dataclass(frozen=True)
class Rejected:
    error: RecordMalformed


@dataclass(frozen=True)
class Footer:
    """A collector summary line, dropped without counting as malformed."""
    text: str


LineOutcome = Union[Accepted, Rejected, Footer]


@dataclass
class ParsedTable:
    """Parser output: the schema, accepted rows, and what was dropped."""
    schema: HeaderSchema
    rows: list[ParsedRow] = field(default_factory=list)
    rejected: list[RecordMalformed] = field(default_factory=list)
    truncated: int = 0  # accepted lines dropped by the row cap


class FlowRecordParser:
    """Parses collector output lines into a ParsedTable."""

    def __init__(
        self,
        bytes_columns: set[str] | None = None,
        src_pattern: re.Pattern = SRC_PATTERN,
        dst_pattern: re.Pattern = DST_PATTERN,
        max_rows: int = MAX_ROWS,
        min_fields: int = MIN_FIELDS,
    ):
        self.bytes_columns = bytes_columns or {"BYTES"}
        self.src_pattern = src_pattern
        self.dst_pattern = dst_pattern
        self.max_rows = max_rows
        self.min_fields = min_fields

    def parse(self, lines: list[str]) -> ParsedTable:
        it = iter(enumerate(lines, start=1))
        header_line = None
        for _, line in it:
            if line.strip():
                header_line = line
                break
        if header_line is None:
            raise HeaderParseError("Collector output has no header line")

        schema = HeaderSchema.from_line(
            header_line, self.bytes_columns, self.src_pattern, self.dst_pattern
        )
        table = ParsedTable(schema=schema)

        for number, line in it:
            if not line.strip():
                continue
            outcome = self.parse_line(schema, line, number)
            if isinstance(outcome, Footer):
                continue
            if isinstance(outcome, Rejected):
                logger.warning(f"Skipping malformed collector line: {outcome.error}")
                table.rejected.append(outcome.error)
                continue
            if len(table.rows) >= self.max_rows:
                table.truncated += 1
                continue
            table.rows.append(outcome.row)

        logger.info(
            f"Parsed {len(table.rows)} rows ({len(table.rejected)} rejected, "
            f"{table.truncated} over the row cap)"
        )
        return table

    def parse_line(self, schema: HeaderSchema, line: str, number: int = 0) -> LineOutcome:
        stripped = line.strip()
        if stripped.lower().startswith(FOOTER_MARKER):
            return Footer(stripped)

        fields = stripped.split()
        if len(fields) > schema.width:
            return Rejected(RecordMalformed(number, len(fields), f"more fields than the {schema.width} header columns"))
        if len(fields) < min(self.min_fields, schema.width):
            return Rejected(RecordMalformed(number, len(fields), f"fewer than {self.min_fields} fields"))

        raw = tuple(fields) + ("",) * (schema.width - len(fields))
        return Accepted(ParsedRow(raw=raw, display=self.display_fields(schema, raw)))

    def display_fields(self, schema: HeaderSchema, raw: tuple[str, ...]) -> tuple[str, ...]:
        display = []
        for i, value in enumerate(raw):
            if i == schema.bytes_col and is_byte_count(value):
                value = format_bytes(int(value))
            display.append(html.escape(value, quote=True))
        return tuple(display)
