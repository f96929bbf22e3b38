"""
Zone classification by longest-prefix match.

The classifier parses the table's networks once and scans them in the
table's order for every address, so the first containing network is
the most specific one.
"""

from __future__ import annotations

import ipaddress
import logging
import re
from collections import OrderedDict
from typing import Callable

from .models import EXTERNAL, Colour, ZoneTable

logger = logging.getLogger(__name__)

_DOTTED_QUAD = re.compile(r"(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})", re.ASCII)


def is_ipv4_literal(address: str) -> bool:
    """True for four dot-separated decimal octets, each 0-255."""
    if not isinstance(address, str):
        return False
    m = _DOTTED_QUAD.fullmatch(address)
    if m is None:
        return False
    return all(int(octet) <= 255 for octet in m.groups())


class ZoneClassifier:
    """Classifies IPv4 addresses against a prebuilt ZoneTable."""

    def __init__(self, table: ZoneTable):
        self.table = table
        self._networks: list[tuple[ipaddress.IPv4Network, Colour]] = []
        for entry in table:
            try:
                net = ipaddress.IPv4Network(entry.network, strict=True)
            except ValueError:
                logger.warning(f"Zone entry {entry.network} is not a proper CIDR, ignored")
                continue
            self._networks.append((net, entry.colour))

    def classify(self, address: str) -> Colour:
        if not is_ipv4_literal(address):
            return EXTERNAL
        ip = ipaddress.IPv4Address(".".join(str(int(o)) for o in address.split(".")))
        for net, colour in self._networks:
            if ip in net:
                return colour
        return EXTERNAL

    def classify_many(self, addresses: list[str]) -> dict[str, Colour]:
        return {a: self.classify(a) for a in addresses}


def classify(table: ZoneTable, address: str) -> Colour:
    """One-off classification. Prefer a ZoneClassifier when classifying many rows."""
    return ZoneClassifier(table).classify(address)


class AddressCache:
    """
    Process-wide memo of external address lookups (AS name, location).

    Advisory only: entries may be evicted or recomputed at any time and
    concurrent inserts of the same key are harmless.
    """

    def __init__(self, maxsize: int = 4096):
        self.maxsize = maxsize
        self._data: OrderedDict[str, str] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, address: str) -> str | None:
        value = self._data.get(address)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, address: str, value: str) -> None:
        self._data[address] = value
        while len(self._data) > self.maxsize:
            try:
                self._data.popitem(last=False)
            except KeyError:
                break

    def lookup(self, address: str, resolver: Callable[[str], str | None]) -> str:
        """Return the cached annotation for address, resolving it on a miss."""
        cached = self.get(address)
        if cached is not None:
            return cached
        try:
            value = resolver(address) or ""
        except Exception as e:
            # A failed lookup yields no annotation and is not cached
            logger.warning(f"Address lookup failed for {address}: {e}")
            return ""
        logger.debug(f"Resolved {address} -> {value!r}")
        self.put(address, value)
        return value

    def clear(self) -> None:
        self._data.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._data)


address_cache = AddressCache()
