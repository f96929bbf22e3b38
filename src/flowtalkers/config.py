"""
Settings for FlowTalkers.

All tunables live in one dataclass. Values can be loaded from a YAML
file; anything not given keeps its default, which matches a stock
IPFire installation running pmacct.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any

import yaml

from .errors import SettingsError

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Runtime settings for source discovery, querying and zone inputs."""
    # Collector
    collector_binary: str = "pmacct"
    collector_config: str = "/etc/pmacct/pmacctd.conf"
    default_source: str = "/tmp/collect.pipe"
    query_timeout: float = 10.0
    daemon_names: list[str] = field(
        default_factory=lambda: ["pmacctd", "nfacctd", "sfacctd", "uacctd"]
    )
    proc_root: str = "/proc"

    # Parser
    max_rows: int = 1000
    min_fields: int = 2
    bytes_columns: list[str] = field(default_factory=lambda: ["BYTES"])

    # Zone collaborators
    ethernet_settings: str = "/var/ipfire/ethernet/settings"
    red_address_file: str = "/var/ipfire/red/local-ipaddress"
    aliases_file: str = "/var/ipfire/ethernet/aliases"
    ipsec_config: str = "/var/ipfire/vpn/config"
    ovpn_settings: str = "/var/ipfire/ovpn/settings"
    wireguard_settings: str = "/var/ipfire/wireguard/settings"

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def export_yaml(self) -> str:
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        if not isinstance(data, dict):
            raise SettingsError("Settings document must be a mapping")

        defaults = cls()
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}

        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown setting: {key}")
                continue
            values[key] = _coerce(key, value, getattr(defaults, key))

        return cls(**values)


def _coerce(key: str, value: Any, default: Any) -> Any:
    """Check a loaded value against the type of its default."""
    if isinstance(default, list):
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise SettingsError(f"Setting {key} must be a list of strings")
        return value
    if isinstance(default, (int, float)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SettingsError(f"Setting {key} must be a number")
        if value < 0:
            raise SettingsError(f"Setting {key} must not be negative")
        return type(default)(value)
    if not isinstance(value, str):
        raise SettingsError(f"Setting {key} must be a string")
    return value


def load_settings(path: str | None = None) -> Settings:
    """Load settings from a YAML file, or return defaults when no path is given."""
    if path is None:
        return Settings()
    if not os.path.isfile(path):
        raise SettingsError(f"Settings file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f.read())
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(f"Cannot read settings file {path}: {e}") from e

    if data is None:
        return Settings()
    return Settings.from_dict(data)
