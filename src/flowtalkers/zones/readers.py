"""
Readers for the host's zone and VPN configuration files.

These are thin: each returns an empty value when its file is missing
or unreadable, because an absent zone is never an error for display.
"""

from __future__ import annotations

import csv
import logging
import os

from ..config import Settings
from .models import Colour, ZoneInputs, ZoneNetwork

logger = logging.getLogger(__name__)

ZONE_PREFIXES = {
    Colour.GREEN: "GREEN",
    Colour.BLUE: "BLUE",
    Colour.ORANGE: "ORANGE",
}

IPSEC_SUBNET_FIELD = 12


def _read_lines(path: str) -> list[str]:
    if not path or not os.path.isfile(path):
        return []
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read().splitlines()
    except OSError as e:
        logger.warning(f"Cannot read {path}: {e}")
        return []


def read_settings_file(path: str) -> dict[str, str]:
    """Parse KEY=VALUE lines. Quotes around values are stripped."""
    result = {}
    for line in _read_lines(path):
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        result[key.strip()] = value.strip().strip("'\"")
    return result


def read_zone_networks(path: str) -> dict[Colour, ZoneNetwork]:
    values = read_settings_file(path)
    zones = {}
    for colour, prefix in ZONE_PREFIXES.items():
        address = values.get(f"{prefix}_NETADDRESS", "")
        netmask = values.get(f"{prefix}_NETMASK", "")
        if address and netmask:
            zones[colour] = ZoneNetwork(address=address, netmask=netmask)
    return zones


def read_red_address(path: str) -> str:
    for line in _read_lines(path):
        if line.strip():
            return line.strip()
    return ""


def read_aliases(path: str) -> list[str]:
    """Enabled alias addresses from 'address,on|off,name' rows."""
    aliases = []
    for row in csv.reader(_read_lines(path)):
        if len(row) < 2 or row[1].strip() != "on":
            continue
        address = row[0].strip().split("/", 1)[0]
        if address:
            aliases.append(address)
    return aliases


def read_ipsec_subnets(path: str) -> list[str]:
    """Remote subnets of every IPsec connection (13th field, '|'-separated)."""
    subnets = []
    for row in csv.reader(_read_lines(path)):
        if len(row) <= IPSEC_SUBNET_FIELD:
            continue
        for subnet in row[IPSEC_SUBNET_FIELD].split("|"):
            subnet = subnet.strip()
            if subnet:
                subnets.append(subnet)
    return subnets


def read_ovpn_subnet(path: str) -> str:
    return read_settings_file(path).get("DOVPN_SUBNET", "")


def read_wireguard_subnet(path: str) -> str:
    return read_settings_file(path).get("CLIENT_POOL", "")


def load_zone_inputs(settings: Settings) -> ZoneInputs:
    """Read every zone collaborator named in the settings."""
    return ZoneInputs(
        zones=read_zone_networks(settings.ethernet_settings),
        red_address=read_red_address(settings.red_address_file),
        alias_addresses=read_aliases(settings.aliases_file),
        vpn_subnets=read_ipsec_subnets(settings.ipsec_config),
        ovpn_subnet=read_ovpn_subnet(settings.ovpn_settings),
        wg_subnet=read_wireguard_subnet(settings.wireguard_settings),
    )
