"""Collector invocation and output parsing for FlowTalkers."""

from .invoker import CollectorInvoker
from .parser import FlowRecordParser, HeaderSchema, format_bytes

__all__ = ["CollectorInvoker", "FlowRecordParser", "HeaderSchema", "format_bytes"]
