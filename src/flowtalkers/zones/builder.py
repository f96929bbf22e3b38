"""
Zone table construction.

Turns zone, VPN and firewall-address configuration into an ordered
table of networks, most specific first, so a linear scan finds the
longest-prefix match. Missing or invalid inputs are skipped: the
table only drives display colours.
"""

from __future__ import annotations

import ipaddress
import logging

from .models import Colour, ZoneEntry, ZoneInputs, ZoneNetwork, ZoneTable

logger = logging.getLogger(__name__)

LOOPBACK_NETWORK = "127.0.0.0/8"
MULTICAST_NETWORK = "224.0.0.0/4"


class ZoneTableBuilder:
    """Collects zone entries and produces an immutable ZoneTable."""

    def __init__(self):
        self._entries: dict[str, ZoneEntry] = {}
        self.skipped: list[str] = []

    def add_network(self, network: str, colour: Colour) -> bool:
        """Add a CIDR. The first insertion of a given network wins."""
        cidr = _normalize(network)
        if cidr is None:
            logger.warning(f"Skipping invalid {colour.value} network: {network!r}")
            self.skipped.append(network)
            return False
        if cidr in self._entries:
            logger.debug(f"Duplicate network {cidr} ({colour.value}) ignored")
            return False
        self._entries[cidr] = ZoneEntry(network=cidr, colour=colour)
        return True

    def add_zone(self, zone: ZoneNetwork | None, colour: Colour) -> bool:
        if zone is None or not zone.address or not zone.netmask:
            return False
        cidr = zone.cidr()
        if cidr is None:
            logger.warning(
                f"Skipping {colour.value} zone with invalid address/mask "
                f"{zone.address}/{zone.netmask}"
            )
            return False
        return self.add_network(cidr, colour)

    def add_host(self, address: str, colour: Colour) -> bool:
        """Add a single address as a /32 host route."""
        address = address.strip()
        if not address:
            return False
        return self.add_network(f"{address}/32", colour)

    def build(self) -> ZoneTable:
        # sorted() is stable, so equal prefixes keep insertion order
        ordered = sorted(self._entries.values(), key=lambda e: e.prefixlen, reverse=True)
        return ZoneTable(entries=tuple(ordered))


def _normalize(network: str) -> str | None:
    network = network.strip()
    if not network:
        return None
    try:
        return str(ipaddress.IPv4Network(network, strict=False))
    except (ipaddress.AddressValueError, ipaddress.NetmaskValueError, ValueError):
        return None


def build_zone_table(
    zone_config: dict[Colour, ZoneNetwork | None] | None = None,
    red_address: str = "",
    alias_addresses: list[str] | None = None,
    vpn_subnets: list[str] | None = None,
    ovpn_subnet: str = "",
    wg_subnet: str = "",
) -> ZoneTable:
    """Build the zone table for one request. Never raises."""
    builder = ZoneTableBuilder()

    builder.add_network(LOOPBACK_NETWORK, Colour.FIREWALL)
    builder.add_network(MULTICAST_NETWORK, Colour.MULTICAST)

    for colour, zone in (zone_config or {}).items():
        builder.add_zone(zone, Colour(colour))

    if red_address:
        builder.add_host(red_address, Colour.FIREWALL)
    for alias in alias_addresses or []:
        builder.add_host(alias, Colour.FIREWALL)

    for subnet in vpn_subnets or []:
        if subnet.strip():
            builder.add_network(subnet, Colour.IPSEC)
    if ovpn_subnet:
        builder.add_network(ovpn_subnet, Colour.OVPN)
    if wg_subnet:
        builder.add_network(wg_subnet, Colour.WIREGUARD)

    table = builder.build()
    logger.debug(f"Zone table built with {len(table)} entries")
    return table


def build_from_inputs(inputs: ZoneInputs) -> ZoneTable:
    return build_zone_table(
        zone_config=inputs.zones,
        red_address=inputs.red_address,
        alias_addresses=inputs.alias_addresses,
        vpn_subnets=inputs.vpn_subnets,
        ovpn_subnet=inputs.ovpn_subnet,
        wg_subnet=inputs.wg_subnet,
    )
