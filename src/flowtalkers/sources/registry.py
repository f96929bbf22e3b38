"""
Data source discovery.

Finds the collector's in-memory plugin pipes from its configuration,
checks that each one is a readable FIFO or socket, and offers the
survivors as a catalog keyed by plugin name.
"""

from __future__ import annotations

import logging
import os
import re
import stat
from dataclasses import dataclass

from ..errors import ConfigUnavailable, SourceInvalid
from ..diagnostics import Message, Severity

logger = logging.getLogger(__name__)

SOURCE_ID_PATTERN = re.compile(r"[A-Za-z0-9]+")
DEFAULT_SOURCE_ID = "default"
UNNAMED_MEMORY_ID = "memory"

_PLUGINS_RE = re.compile(r"^plugins\s*:\s*(.*)$", re.IGNORECASE)
_MEMORY_RE = re.compile(r"^memory(?:\[([^\]]*)\])?$", re.IGNORECASE)
_IMT_PATH_RE = re.compile(r"^imt_path(?:\[([^\]]*)\])?\s*:\s*(\S+)", re.IGNORECASE)


@dataclass(frozen=True)
class DataSource:
    """A pipe or socket the collector can be queried through."""
    id: str
    display_name: str
    path: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.display_name, "path": self.path}


SourceCatalog = dict[str, DataSource]


@dataclass
class CollectorConfig:
    """Memory plugins and pipe paths declared in a collector configuration."""
    plugins: list[str]
    paths: dict[str, str]


def parse_collector_config(lines: list[str]) -> CollectorConfig:
    """
    Extract memory plugin names and their imt_path values.

    An unnamed 'memory' plugin is reported under the id 'memory'; an
    unnamed 'imt_path:' line is its path.
    """
    plugins: list[str] = []
    paths: dict[str, str] = {}

    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("!") or line.startswith("#"):
            continue

        m = _PLUGINS_RE.match(line)
        if m:
            for token in m.group(1).split(","):
                pm = _MEMORY_RE.match(token.strip())
                if pm is None:
                    continue
                name = pm.group(1) or UNNAMED_MEMORY_ID
                if name not in plugins:
                    plugins.append(name)
            continue

        m = _IMT_PATH_RE.match(line)
        if m:
            name = m.group(1) or UNNAMED_MEMORY_ID
            paths[name] = m.group(2)

    return CollectorConfig(plugins=plugins, paths=paths)


def validate_source(source: DataSource) -> None:
    """Raise SourceInvalid unless the path is an existing, readable FIFO or socket."""
    try:
        st = os.stat(source.path)
    except FileNotFoundError:
        raise SourceInvalid(source.id, source.path, "does not exist")
    except OSError as e:
        raise SourceInvalid(source.id, source.path, f"cannot be inspected: {e.strerror}")

    if not os.access(source.path, os.R_OK):
        raise SourceInvalid(source.id, source.path, "is not readable")
    if not (stat.S_ISFIFO(st.st_mode) or stat.S_ISSOCK(st.st_mode)):
        raise SourceInvalid(source.id, source.path, "is neither a named pipe nor a socket")


def collector_running(names: list[str], proc_root: str = "/proc") -> bool | None:
    """
    Check the process table for any of the collector daemons.

    Returns None when the process table cannot be read.
    """
    try:
        pids = [p for p in os.listdir(proc_root) if p.isdigit()]
    except OSError:
        return None

    wanted = set(names)
    for pid in pids:
        try:
            with open(os.path.join(proc_root, pid, "comm")) as f:
                if f.read().strip() in wanted:
                    return True
        except OSError:
            continue  # process exited while scanning
    return False


class SourceRegistry:
    """Discovers and validates the collector's queryable sources."""

    def __init__(
        self,
        config_path: str,
        default_source_path: str,
        daemon_names: list[str] | None = None,
        proc_root: str = "/proc",
    ):
        self.config_path = config_path
        self.default_source_path = default_source_path
        self.daemon_names = daemon_names or []
        self.proc_root = proc_root
        self._config_read = False

    def discover(self) -> tuple[SourceCatalog, list[Message]]:
        messages: list[Message] = []
        candidates = self._candidates(messages)

        catalog: SourceCatalog = {}
        for source in candidates:
            try:
                validate_source(source)
            except SourceInvalid as e:
                logger.warning(str(e))
                messages.append(Message.from_error(e, Severity.WARNING))
                continue
            catalog[source.id] = source

        if not catalog:
            if candidates:
                error = ConfigUnavailable("No usable flow data source: every declared source failed validation")
            elif self._config_read:
                error = ConfigUnavailable(
                    f"Collector configuration {self.config_path} declares no usable memory plugin"
                )
            else:
                error = ConfigUnavailable(
                    f"Collector configuration {self.config_path} is unavailable "
                    f"and default source {self.default_source_path} does not exist"
                )
            logger.error(str(error))
            messages.append(Message.from_error(error, Severity.ERROR))

        if self.daemon_names:
            running = collector_running(self.daemon_names, self.proc_root)
            if running is False:
                messages.append(Message(
                    Severity.INFO,
                    f"No collector daemon ({', '.join(self.daemon_names)}) appears to be running",
                ))

        return dict(sorted(catalog.items())), messages

    def _candidates(self, messages: list[Message]) -> list[DataSource]:
        lines = self._read_config()
        self._config_read = lines is not None
        if lines is None:
            logger.info(f"Collector configuration {self.config_path} unavailable, trying default source")
            if os.path.exists(self.default_source_path):
                return [_make_source(DEFAULT_SOURCE_ID, self.default_source_path)]
            return []

        config = parse_collector_config(lines)
        candidates = []
        for plugin in config.plugins:
            path = config.paths.get(plugin)
            if path is None and plugin == UNNAMED_MEMORY_ID:
                path = self.default_source_path
            if path is None:
                text = f"Memory plugin {plugin} has no imt_path, ignored"
                logger.warning(text)
                messages.append(Message(Severity.WARNING, text))
                continue
            if not SOURCE_ID_PATTERN.fullmatch(plugin):
                text = f"Memory plugin name {plugin!r} is not alphanumeric, ignored"
                logger.warning(text)
                messages.append(Message(Severity.WARNING, text))
                continue
            candidates.append(_make_source(plugin, path))
        return candidates

    def _read_config(self) -> list[str] | None:
        try:
            with open(self.config_path, encoding="utf-8", errors="replace") as f:
                return f.read().splitlines()
        except OSError:
            return None


def _make_source(source_id: str, path: str) -> DataSource:
    return DataSource(id=source_id, display_name=f"{source_id} ({path})", path=path)


def discover(
    config_path: str, default_source_path: str
) -> tuple[SourceCatalog, list[Message]]:
    return SourceRegistry(config_path, default_source_path).discover()
