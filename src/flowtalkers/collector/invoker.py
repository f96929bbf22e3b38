"""
Collector query invocation.

Runs `<binary> -p <source> -s` without a shell and returns its stdout
as lines. The child is always drained and reaped before returning,
including on timeout.
"""

from __future__ import annotations

import logging
import subprocess

from ..errors import (
    CollectorError,
    ProcessExitError,
    ProcessLaunchError,
    ProcessTimeoutError,
)

logger = logging.getLogger(__name__)


class CollectorInvoker:
    """Queries the collector's in-memory table through one source pipe."""

    def __init__(self, binary: str = "pmacct", timeout: float | None = 10.0):
        self.binary = binary
        self.timeout = timeout

    def command(self, source_path: str) -> list[str]:
        return [self.binary, "-p", source_path, "-s"]

    def run(self, source_path: str) -> list[str]:
        """Return the collector's stdout lines or raise a CollectorError."""
        cmd = self.command(source_path)
        logger.debug(f"Running {cmd}")

        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessLaunchError(
                f"Cannot start collector {self.binary}: {e.strerror or e}",
                reason=e.strerror or str(e),
            ) from e

        with proc:
            try:
                out, err = proc.communicate(timeout=self.timeout)
            except subprocess.TimeoutExpired:
                proc.kill()
                out, err = proc.communicate()
                raise ProcessTimeoutError(
                    f"Collector query on {source_path} timed out after {self.timeout}s",
                    returncode=proc.returncode,
                    reason="timeout",
                )

        stderr = err.decode("utf-8", errors="replace").strip()
        if stderr:
            logger.debug(f"Collector stderr: {stderr}")

        if proc.returncode != 0:
            raise ProcessExitError(
                f"Collector query on {source_path} exited with status {proc.returncode}"
                + (f": {stderr.splitlines()[-1]}" if stderr else ""),
                returncode=proc.returncode,
                reason=stderr,
            )

        lines = out.decode("utf-8", errors="replace").splitlines()
        if not lines:
            logger.info(f"Collector returned no output for {source_path}")
        return lines

    def query(self, source_path: str) -> tuple[list[str], CollectorError | None]:
        """Like run(), but returns the error instead of raising it."""
        try:
            return self.run(source_path), None
        except CollectorError as e:
            logger.warning(str(e))
            return [], e
