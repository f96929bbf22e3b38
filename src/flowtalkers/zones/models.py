"""Network zone data models."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class Colour(str, Enum):
    GREEN = "green"  # internal LAN
    BLUE = "blue"  # wireless
    ORANGE = "orange"  # DMZ
    RED = "red"  # external / untrusted
    FIREWALL = "firewall"  # the firewall's own addresses
    MULTICAST = "multicast"
    IPSEC = "ipsec"
    OVPN = "ovpn"
    WIREGUARD = "wireguard"


EXTERNAL = Colour.RED


@dataclass(frozen=True)
class ZoneNetwork:
    """A zone's network address and dotted netmask as configured."""
    address: str
    netmask: str

    def cidr(self) -> str | None:
        """Return the normalized CIDR, or None if the pair is not valid IPv4."""
        try:
            net = ipaddress.IPv4Network(f"{self.address}/{self.netmask}", strict=False)
        except (ipaddress.AddressValueError, ipaddress.NetmaskValueError, ValueError):
            return None
        return str(net)


@dataclass(frozen=True)
class ZoneEntry:
    """One network of the zone table and its colour."""
    network: str  # CIDR, e.g. "10.0.0.0/8"
    colour: Colour

    @property
    def prefixlen(self) -> int:
        return int(self.network.rsplit("/", 1)[1])


@dataclass(frozen=True)
class ZoneTable:
    """Zone entries ordered most specific first."""
    entries: tuple[ZoneEntry, ...] = ()

    def __iter__(self) -> Iterator[ZoneEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_list(self) -> list[dict[str, str]]:
        return [{"network": e.network, "colour": e.colour.value} for e in self.entries]


@dataclass
class ZoneInputs:
    """Everything the zone table is built from, as read from the host configuration."""
    zones: dict[Colour, ZoneNetwork] = field(default_factory=dict)
    red_address: str = ""
    alias_addresses: list[str] = field(default_factory=list)
    vpn_subnets: list[str] = field(default_factory=list)
    ovpn_subnet: str = ""
    wg_subnet: str = ""
