"""Shared test fixtures for FlowTalkers."""

import os
import stat

import pytest

from flowtalkers.config import Settings
from flowtalkers.pipeline import ClassificationPipeline
from flowtalkers.zones.classifier import AddressCache
from flowtalkers.zones.models import Colour, ZoneInputs, ZoneNetwork
from flowtalkers.zones.builder import build_from_inputs


SAMPLE_OUTPUT = [
    "",
    "SRC_IP           DST_IP           SRC_PORT  DST_PORT  PROTOCOL  PACKETS  BYTES",
    "192.168.1.10     93.184.216.34    51234     443       tcp       120      1048576",
    "93.184.216.34    192.168.1.10     443       51234     tcp       80       2048",
    "10.8.0.6         192.168.1.20     40000     22        tcp       10       500",
    "127.0.0.1        127.0.0.1        5000      5001      udp       1        64",
    "",
    "For a total of: 4 entries",
]


def write_script(path, body: str) -> str:
    """Write an executable /bin/sh script standing in for the collector binary."""
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


def emit_script(tmp_path, lines, name="pmacct") -> str:
    data = tmp_path / f"{name}.out"
    data.write_text("\n".join(lines) + "\n")
    return write_script(tmp_path / name, f'cat "{data}"')


@pytest.fixture
def zone_inputs():
    return ZoneInputs(
        zones={
            Colour.GREEN: ZoneNetwork("192.168.1.0", "255.255.255.0"),
            Colour.BLUE: ZoneNetwork("192.168.2.0", "255.255.255.0"),
            Colour.ORANGE: ZoneNetwork("172.16.0.0", "255.255.0.0"),
        },
        red_address="203.0.113.5",
        alias_addresses=["203.0.113.6"],
        vpn_subnets=["10.20.0.0/16", "10.21.0.0/16"],
        ovpn_subnet="10.8.0.0/255.255.255.0",
        wg_subnet="10.9.0.0/24",
    )


@pytest.fixture
def zone_table(zone_inputs):
    return build_from_inputs(zone_inputs)


@pytest.fixture
def fifo(tmp_path):
    path = tmp_path / "plugin1.pipe"
    os.mkfifo(path)
    return str(path)


@pytest.fixture
def collector_config(tmp_path, fifo):
    path = tmp_path / "pmacctd.conf"
    path.write_text(
        "! pmacctd configuration\n"
        "daemonize: true\n"
        "plugins: memory[plugin1], print[disk]\n"
        f"imt_path[plugin1]: {fifo}\n"
        "aggregate[plugin1]: src_host, dst_host\n"
    )
    return str(path)


@pytest.fixture
def settings(tmp_path, collector_config):
    return Settings(
        collector_binary=emit_script(tmp_path, SAMPLE_OUTPUT),
        collector_config=collector_config,
        default_source=str(tmp_path / "collect.pipe"),
        query_timeout=5.0,
        daemon_names=[],
        ethernet_settings=str(tmp_path / "missing-ethernet"),
        red_address_file=str(tmp_path / "missing-red"),
        aliases_file=str(tmp_path / "missing-aliases"),
        ipsec_config=str(tmp_path / "missing-vpn"),
        ovpn_settings=str(tmp_path / "missing-ovpn"),
        wireguard_settings=str(tmp_path / "missing-wg"),
    )


@pytest.fixture
def pipeline(settings, zone_inputs):
    return ClassificationPipeline(
        settings=settings,
        zone_inputs=lambda: zone_inputs,
        cache=AddressCache(),
    )
