"""
Top-talker aggregation over a classification result.

Totals raw byte counts per address and per zone pair so the busiest
hosts and zone crossings can be listed without re-querying.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from ..collector.parser import format_bytes, is_byte_count
from ..zones.models import Colour
from .models import ClassificationResult


def _byte_counts(result: ClassificationResult) -> np.ndarray:
    # object dtype: exact Python ints of any size
    counts = np.zeros(len(result.records), dtype=object)
    for i, record in enumerate(result.records):
        value = record.raw[result.bytes_col]
        if is_byte_count(value):
            counts[i] = int(value)
    return counts


def top_talkers(
    result: ClassificationResult, n: int = 10, by: str = "src"
) -> list[dict[str, Any]]:
    """Return the n addresses moving the most bytes, busiest first."""
    if by not in ("src", "dst"):
        raise ValueError(f"by must be 'src' or 'dst', not {by!r}")
    col = result.src_col if by == "src" else result.dst_col
    if col < 0 or result.bytes_col < 0 or not result.records:
        return []

    counts = _byte_counts(result)
    addresses = [r.raw[col] for r in result.records]
    keys, inverse = np.unique(np.array(addresses, dtype=object), return_inverse=True)
    totals = np.zeros(len(keys), dtype=object)
    np.add.at(totals, inverse, counts)
    flows = np.bincount(inverse, minlength=len(keys))

    colours: dict[str, Colour] = {}
    for record, address in zip(result.records, addresses):
        colours.setdefault(address, record.source_colour if by == "src" else record.dest_colour)

    order = np.argsort(-totals, kind="stable")[:n]
    return [
        {
            "address": str(keys[i]),
            "colour": colours[keys[i]].value,
            "bytes": int(totals[i]),
            "display_bytes": format_bytes(int(totals[i])),
            "flows": int(flows[i]),
        }
        for i in order
    ]


def zone_matrix(result: ClassificationResult) -> dict[str, dict[str, int]]:
    """Total bytes per (source colour, destination colour) pair."""
    if result.bytes_col < 0 or not result.records:
        return {}

    colours = list(Colour)
    idx = {c: i for i, c in enumerate(colours)}
    matrix = np.zeros((len(colours), len(colours)), dtype=object)
    counts = _byte_counts(result)
    for record, count in zip(result.records, counts):
        matrix[idx[record.source_colour]][idx[record.dest_colour]] += count

    out: dict[str, dict[str, int]] = {}
    for i, src in enumerate(colours):
        for j, dst in enumerate(colours):
            if matrix[i][j]:
                out.setdefault(src.value, {})[dst.value] = int(matrix[i][j])
    return out
