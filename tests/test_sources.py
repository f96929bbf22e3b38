"""Tests for source discovery."""

import os
import socket

import pytest

from flowtalkers.diagnostics import Severity
from flowtalkers.errors import SourceInvalid
from flowtalkers.sources import DataSource, SourceRegistry, discover, validate_source
from flowtalkers.sources.registry import collector_running, parse_collector_config


class TestParseCollectorConfig:
    def test_memory_plugins_and_paths(self):
        config = parse_collector_config([
            "! comment",
            "# another comment",
            "",
            "plugins: memory[plugin1], memory[plugin2], print[disk]",
            "imt_path[plugin1]: /tmp/p1.pipe",
            "imt_path[plugin2]: /tmp/p2.pipe",
        ])
        assert config.plugins == ["plugin1", "plugin2"]
        assert config.paths == {"plugin1": "/tmp/p1.pipe", "plugin2": "/tmp/p2.pipe"}

    def test_unnamed_memory_plugin(self):
        config = parse_collector_config(["plugins: memory", "imt_path: /tmp/collect.pipe"])
        assert config.plugins == ["memory"]
        assert config.paths == {"memory": "/tmp/collect.pipe"}

    def test_commented_directives_ignored(self):
        config = parse_collector_config(["! plugins: memory[old]", "#imt_path[old]: /x"])
        assert config.plugins == []
        assert config.paths == {}


class TestValidateSource:
    def test_fifo_ok(self, fifo):
        validate_source(DataSource("plugin1", "plugin1", fifo))

    def test_socket_ok(self, tmp_path):
        path = str(tmp_path / "s.sock")
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.bind(path)
            validate_source(DataSource("sock", "sock", path))
        finally:
            sock.close()

    def test_missing(self, tmp_path):
        with pytest.raises(SourceInvalid, match="does not exist"):
            validate_source(DataSource("p", "p", str(tmp_path / "nope")))

    def test_regular_file_rejected(self, tmp_path):
        path = tmp_path / "regular"
        path.write_text("x")
        with pytest.raises(SourceInvalid, match="neither"):
            validate_source(DataSource("p", "p", str(path)))


class TestSourceRegistry:
    def test_discover(self, collector_config, fifo, tmp_path):
        catalog, messages = discover(collector_config, str(tmp_path / "collect.pipe"))
        assert list(catalog) == ["plugin1"]
        assert catalog["plugin1"].path == fifo
        assert catalog["plugin1"].display_name == f"plugin1 ({fifo})"
        assert not [m for m in messages if m.severity == Severity.ERROR]

    def test_invalid_source_dropped_with_warning(self, tmp_path, fifo):
        config = tmp_path / "multi.conf"
        config.write_text(
            "plugins: memory[plugin1], memory[plugin2]\n"
            f"imt_path[plugin1]: {fifo}\n"
            f"imt_path[plugin2]: {tmp_path / 'gone.pipe'}\n"
        )
        catalog, messages = discover(str(config), str(tmp_path / "collect.pipe"))
        assert list(catalog) == ["plugin1"]
        warnings = [m for m in messages if m.severity == Severity.WARNING]
        assert any(m.kind == "SourceInvalid" and "plugin2" in m.text for m in warnings)

    def test_plugin_without_path_dropped(self, tmp_path, fifo):
        config = tmp_path / "nopath.conf"
        config.write_text(
            "plugins: memory[plugin1], memory[orphan]\n"
            f"imt_path[plugin1]: {fifo}\n"
        )
        catalog, messages = discover(str(config), str(tmp_path / "collect.pipe"))
        assert list(catalog) == ["plugin1"]
        assert any("orphan" in m.text for m in messages)

    def test_all_sources_invalid_is_error(self, tmp_path):
        config = tmp_path / "bad.conf"
        config.write_text("plugins: memory[p1]\nimt_path[p1]: /nonexistent/p1.pipe\n")
        catalog, messages = discover(str(config), str(tmp_path / "collect.pipe"))
        assert catalog == {}
        assert messages[-1].severity == Severity.ERROR
        assert messages[-1].kind == "ConfigUnavailable"

    def test_fallback_to_default_source(self, tmp_path):
        default = tmp_path / "collect.pipe"
        os.mkfifo(default)
        catalog, messages = discover(str(tmp_path / "missing.conf"), str(default))
        assert list(catalog) == ["default"]
        assert catalog["default"].path == str(default)
        assert messages == []

    def test_no_config_and_no_default(self, tmp_path):
        catalog, messages = discover(str(tmp_path / "missing.conf"), str(tmp_path / "missing.pipe"))
        assert catalog == {}
        assert len(messages) == 1
        assert messages[0].severity == Severity.ERROR

    def test_catalog_sorted(self, tmp_path):
        paths = {}
        for name in ["zeta", "alpha"]:
            paths[name] = tmp_path / f"{name}.pipe"
            os.mkfifo(paths[name])
        config = tmp_path / "sorted.conf"
        config.write_text(
            "plugins: memory[zeta], memory[alpha]\n"
            f"imt_path[zeta]: {paths['zeta']}\n"
            f"imt_path[alpha]: {paths['alpha']}\n"
        )
        catalog, _ = discover(str(config), str(tmp_path / "collect.pipe"))
        assert list(catalog) == ["alpha", "zeta"]

    def test_daemon_not_running_is_info(self, collector_config, tmp_path):
        proc = tmp_path / "proc"
        (proc / "1").mkdir(parents=True)
        (proc / "1" / "comm").write_text("init\n")
        registry = SourceRegistry(
            collector_config, str(tmp_path / "collect.pipe"),
            daemon_names=["pmacctd"], proc_root=str(proc),
        )
        catalog, messages = registry.discover()
        assert "plugin1" in catalog
        assert [m.severity for m in messages] == [Severity.INFO]


class TestCollectorRunning:
    def test_found(self, tmp_path):
        (tmp_path / "42").mkdir()
        (tmp_path / "42" / "comm").write_text("pmacctd\n")
        (tmp_path / "self").mkdir()
        assert collector_running(["pmacctd"], str(tmp_path)) is True

    def test_not_found(self, tmp_path):
        (tmp_path / "42").mkdir()
        assert collector_running(["pmacctd"], str(tmp_path)) is False

    def test_unreadable_proc(self, tmp_path):
        assert collector_running(["pmacctd"], str(tmp_path / "missing")) is None
