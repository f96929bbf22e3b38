"""Tests for CLI."""

import json

import pytest
import yaml
from click.testing import CliRunner

from flowtalkers.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path, settings):
    ethernet = tmp_path / "ethernet"
    ethernet.write_text("GREEN_NETADDRESS=192.168.1.0\nGREEN_NETMASK=255.255.255.0\n")
    settings.ethernet_settings = str(ethernet)
    path = tmp_path / "flowtalkers.yaml"
    path.write_text(settings.export_yaml())
    return str(path)


class TestCLI:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "FlowTalkers" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_missing_config(self, runner, tmp_path):
        result = runner.invoke(cli, ["--config", str(tmp_path / "nope.yaml"), "zones"])
        assert result.exit_code != 0
        assert "not found" in result.output

    def test_sources(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "sources"])
        assert result.exit_code == 0
        assert "plugin1" in result.output

    def test_query(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "query"])
        assert result.exit_code == 0
        assert "Rows: 4" in result.output
        assert "1 MB" in result.output

    def test_query_json(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "query", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["colours"][0] == {"src": "green", "dst": "red"}

    def test_classify(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "classify", "192.168.1.7", "1.1.1.1"])
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0].split() == ["192.168.1.7", "green"]
        assert lines[1].split() == ["1.1.1.1", "red"]

    def test_talkers(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "talkers", "-n", "2"])
        assert result.exit_code == 0
        assert "Top 2 Talkers" in result.output
        assert "192.168.1.10" in result.output

    def test_zones(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "zones"])
        assert result.exit_code == 0
        assert "192.168.1.0/24" in result.output

    def test_env_config(self, runner, config_file):
        result = runner.invoke(cli, ["zones"], env={"FLOWTALKERS_CONFIG": config_file})
        assert result.exit_code == 0
        assert "192.168.1.0/24" in result.output

    def test_config_roundtrip(self, config_file):
        with open(config_file) as f:
            data = yaml.safe_load(f)
        assert data["max_rows"] == 1000
