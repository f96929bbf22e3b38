"""
Classification pipeline.

Per request: build the zone table once, discover sources, pick one,
query the collector, parse its output and colour every row's
addresses. Every failure becomes a diagnostic on the result; run()
never raises.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..collector.invoker import CollectorInvoker
from ..collector.parser import FlowRecordParser, ParsedTable
from ..config import Settings
from ..diagnostics import Message, Severity
from ..errors import FlowTalkersError
from ..sources.registry import SOURCE_ID_PATTERN, DataSource, SourceRegistry
from ..zones.builder import build_from_inputs
from ..zones.classifier import AddressCache, ZoneClassifier, address_cache
from ..zones.models import EXTERNAL, ZoneInputs, ZoneTable
from ..zones.readers import load_zone_inputs
from .models import ClassificationResult, FlowRecord, FlowRequest

logger = logging.getLogger(__name__)


class ClassificationPipeline:
    """
    Orchestrates source discovery, collector query, parsing and zone
    classification for one request at a time.

    Collaborators are injectable; by default they are built from Settings.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        registry: SourceRegistry | None = None,
        invoker: CollectorInvoker | None = None,
        parser: FlowRecordParser | None = None,
        zone_inputs: Callable[[], ZoneInputs] | None = None,
        resolver: Callable[[str], str | None] | None = None,
        cache: AddressCache | None = None,
    ):
        self.settings = settings or Settings()
        s = self.settings
        self.registry = registry or SourceRegistry(
            s.collector_config,
            s.default_source,
            daemon_names=s.daemon_names,
            proc_root=s.proc_root,
        )
        self.invoker = invoker or CollectorInvoker(s.collector_binary, s.query_timeout)
        self.parser = parser or FlowRecordParser(
            bytes_columns=set(s.bytes_columns),
            max_rows=s.max_rows,
            min_fields=s.min_fields,
        )
        self.zone_inputs = zone_inputs or (lambda: load_zone_inputs(s))
        self.resolver = resolver
        self.cache = cache if cache is not None else address_cache

    def zone_table(self) -> ZoneTable:
        return build_from_inputs(self.zone_inputs())

    def discover(self) -> tuple[dict[str, DataSource], list[Message]]:
        return self.registry.discover()

    def run(self, request: FlowRequest | dict[str, Any] | None = None) -> ClassificationResult:
        if not isinstance(request, FlowRequest):
            request = FlowRequest.from_args(request)

        result = ClassificationResult()
        try:
            self._run(request, result)
        except FlowTalkersError as e:
            logger.warning(f"Request failed: {e}")
            result.diagnostics.append(Message.from_error(e))
            result.records = []
        except Exception as e:
            logger.exception("Unexpected error while classifying flows")
            result.diagnostics.append(Message(
                Severity.ERROR, f"Internal error: {e}", kind=type(e).__name__
            ))
            result.records = []
        return result

    def _run(self, request: FlowRequest, result: ClassificationResult) -> None:
        classifier = ZoneClassifier(self.zone_table())

        catalog, messages = self.discover()
        result.catalog = catalog
        result.diagnostics.extend(messages)
        if not catalog:
            return

        source = self.select_source(catalog, request.source, result)
        result.selected_source = source.id
        logger.info(f"Querying source {source.id} at {source.path}")

        lines, error = self.invoker.query(source.path)
        if error is not None:
            result.diagnostics.append(Message.from_error(error))
            return
        if not lines:
            result.add(Severity.INFO, f"No flows are currently tracked by source {source.id}")
            return

        table = self.parser.parse(lines)
        self._report_parse(table, result)

        schema = table.schema
        result.headers = list(schema.columns)
        result.bytes_col = schema.bytes_col
        result.src_col = schema.src_col
        result.dst_col = schema.dst_col

        for row in table.rows:
            src = row.column(schema.src_col)
            dst = row.column(schema.dst_col)
            src_colour = classifier.classify(src) if schema.src_col >= 0 else EXTERNAL
            dst_colour = classifier.classify(dst) if schema.dst_col >= 0 else EXTERNAL
            result.records.append(FlowRecord(
                raw=row.raw,
                display=row.display,
                source_colour=src_colour,
                dest_colour=dst_colour,
                src_info=self._annotate(src, src_colour),
                dst_info=self._annotate(dst, dst_colour),
            ))

    def select_source(
        self, catalog: dict[str, DataSource], requested: str, result: ClassificationResult
    ) -> DataSource:
        """Use the requested source if valid, else the lexicographically first one."""
        if requested:
            if SOURCE_ID_PATTERN.fullmatch(requested) and requested in catalog:
                return catalog[requested]
            result.add(Severity.WARNING, f"Unknown source {requested!r}, using {min(catalog)}")
        return catalog[min(catalog)]

    def _report_parse(self, table: ParsedTable, result: ClassificationResult) -> None:
        if table.rejected:
            result.add(
                Severity.WARNING,
                f"Skipped {len(table.rejected)} malformed collector line(s)",
            )
        if table.schema.src_col < 0 or table.schema.dst_col < 0:
            result.add(Severity.INFO, "Collector output has no address columns to colour")

    def _annotate(self, address: str, colour) -> str:
        if self.resolver is None or colour != EXTERNAL or not address:
            return ""
        return self.cache.lookup(address, self.resolver)
