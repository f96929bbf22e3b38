"""Collector data source discovery for FlowTalkers."""

from .registry import DataSource, SourceRegistry, discover, validate_source

__all__ = ["DataSource", "SourceRegistry", "discover", "validate_source"]
