"""Severity-tagged diagnostic messages attached to every result."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Message:
    severity: Severity
    text: str
    kind: str = ""  # error class name when built from an exception

    @classmethod
    def from_error(cls, error: Exception, severity: Severity = Severity.ERROR) -> Message:
        return cls(severity=severity, text=str(error), kind=type(error).__name__)

    def to_dict(self) -> dict[str, Any]:
        return {"severity": self.severity.value, "text": self.text, "kind": self.kind}
