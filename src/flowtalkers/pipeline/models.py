"""
Pipeline data models.

The ClassificationResult is the only thing handed to the presentation
layer; it is always well formed, even when it holds no rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..diagnostics import Message, Severity
from ..sources.registry import DataSource
from ..zones.models import EXTERNAL, Colour


@dataclass(frozen=True)
class FlowRecord:
    """A parsed flow line with the zone colours of its addresses."""
    raw: tuple[str, ...]
    display: tuple[str, ...]
    source_colour: Colour = EXTERNAL
    dest_colour: Colour = EXTERNAL
    src_info: str = ""  # lookup annotation for external addresses
    dst_info: str = ""


@dataclass
class FlowRequest:
    """Parameters of one classification request."""
    source: str = ""

    @classmethod
    def from_args(cls, args: dict[str, Any] | None) -> FlowRequest:
        args = args or {}
        source = args.get("source") or ""
        return cls(source=str(source).strip())


@dataclass
class ClassificationResult:
    headers: list[str] = field(default_factory=list)
    records: list[FlowRecord] = field(default_factory=list)
    bytes_col: int = -1
    src_col: int = -1
    dst_col: int = -1
    diagnostics: list[Message] = field(default_factory=list)
    catalog: dict[str, DataSource] = field(default_factory=dict)
    selected_source: str = ""

    def add(self, severity: Severity, text: str) -> None:
        self.diagnostics.append(Message(severity, text))

    @property
    def errors(self) -> list[Message]:
        return [m for m in self.diagnostics if m.severity == Severity.ERROR]

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error_msg(self) -> str | None:
        errors = self.errors
        if not errors:
            return None
        return "; ".join(m.text for m in errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "headers": self.headers,
            "rows": [list(r.display) for r in self.records],
            "raw_rows": [list(r.raw) for r in self.records],
            "colours": [
                {"src": r.source_colour.value, "dst": r.dest_colour.value}
                for r in self.records
            ],
            "info": [{"src": r.src_info, "dst": r.dst_info} for r in self.records],
            "bytes_col": self.bytes_col,
            "src_ip_col": self.src_col,
            "dst_ip_col": self.dst_col,
            "error_msg": self.error_msg,
            "messages": [m.to_dict() for m in self.diagnostics],
            "sources": [s.to_dict() for s in self.catalog.values()],
            "selected_source": self.selected_source,
        }
