"""REST API for FlowTalkers."""

from .app import create_app

__all__ = ["create_app"]
