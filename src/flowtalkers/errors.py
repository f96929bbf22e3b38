"""
Error taxonomy for FlowTalkers.

Every failure the ingestion pipeline can meet has its own type so the
pipeline can turn it into a severity-tagged diagnostic instead of a fault.
"""

from __future__ import annotations


class FlowTalkersError(Exception):
    """Base class for all FlowTalkers errors."""


class SettingsError(FlowTalkersError):
    """The settings file is missing, malformed, or has a wrongly typed value."""


class ConfigUnavailable(FlowTalkersError):
    """No readable collector configuration and no fallback source present."""


class SourceInvalid(FlowTalkersError):
    """A declared source failed its existence, permission, or type check."""

    def __init__(self, source_id: str, path: str, reason: str):
        super().__init__(f"Source {source_id} ({path}): {reason}")
        self.source_id = source_id
        self.path = path
        self.reason = reason


class CollectorError(FlowTalkersError):
    """The collector query command could not produce a snapshot."""

    def __init__(self, message: str, returncode: int | None = None, reason: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.reason = reason


class ProcessLaunchError(CollectorError):
    """The collector binary could not be started."""


class ProcessExitError(CollectorError):
    """The collector binary started but exited with a non-zero status."""


class ProcessTimeoutError(CollectorError):
    """The collector binary did not finish within the query timeout."""


class HeaderParseError(FlowTalkersError):
    """The collector output contains no usable header line."""


class RecordMalformed(FlowTalkersError):
    """A flow line has a field count outside the tolerated range."""

    def __init__(self, line_number: int, field_count: int, reason: str):
        super().__init__(f"Line {line_number}: {reason} ({field_count} fields)")
        self.line_number = line_number
        self.field_count = field_count
        self.reason = reason
