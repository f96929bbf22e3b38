"""
FlowTalkers: live top-talker tables from flow accounting snapshots

Queries the collector's in-memory tables, parses its text output into
typed records, and colours every address by its network zone.
"""

__version__ = "0.1.0"
__author__ = "Corey A. Wade"
