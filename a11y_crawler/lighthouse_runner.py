"""
Lighthouse Accessibility Runner

Runs Google Lighthouse via CLI against the Chromium instance the crawler
already drives, attaching through its remote-debugging port.
"""

from __future__ import annotations

import asyncio
import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict

from a11y_crawler.browser import DebugConnection
from a11y_crawler.errors import ScoreAnalysisFailure

logger = logging.getLogger(__name__)


class LighthouseRunner:
    """Runs Lighthouse accessibility audits and returns the raw report."""

    def __init__(
        self,
        command: str = "lighthouse",
        timeout: float = 120.0,
        only_categories: list[str] | None = None,
    ):
        """
        Initialize the Lighthouse runner.

        Args:
            command: Lighthouse executable (must be on PATH or absolute)
            timeout: Timeout for one Lighthouse execution in seconds
            only_categories: Categories to run; accessibility unless overridden
        """
        self.command = command
        self.timeout = timeout
        self.only_categories = only_categories or ["accessibility"]

    def build_command(self, url: str, connection: DebugConnection, output_path: str) -> list[str]:
        """Build the CLI invocation for one audit."""
        cmd = [
            self.command,
            url,
            "--output=json",
            f"--output-path={output_path}",
            f"--port={connection.port}",
            f"--hostname={connection.host}",
            "--quiet",
        ]
        for category in self.only_categories:
            cmd.append(f"--only-categories={category}")
        return cmd

    async def audit(self, url: str, connection: DebugConnection) -> Dict[str, Any]:
        """
        Run Lighthouse on a URL and return the parsed JSON report (the "lhr").

        Raises:
            ScoreAnalysisFailure: the CLI is missing, exits non-zero, times out,
                or writes a report that cannot be read.
        """
        logger.debug("Running Lighthouse on %s via port %d", url, connection.port)

        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".json", delete=False
        ) as tmp_file:
            output_path = tmp_file.name

        try:
            cmd = self.build_command(url, connection, output_path)
            try:
                process = await asyncio.create_subprocess_exec(
                    *cmd,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as e:
                raise ScoreAnalysisFailure(f"Could not start {self.command}: {e}") from e

            try:
                _, stderr = await asyncio.wait_for(
                    process.communicate(), timeout=self.timeout
                )
            except asyncio.TimeoutError as e:
                process.kill()
                await process.wait()
                raise ScoreAnalysisFailure(
                    f"Lighthouse timeout for {url} after {self.timeout}s"
                ) from e

            if process.returncode != 0:
                message = stderr.decode("utf-8", errors="replace").strip()
                raise ScoreAnalysisFailure(
                    f"Lighthouse failed for {url} (exit {process.returncode}): {message}"
                )

            try:
                with open(output_path, "r", encoding="utf-8") as f:
                    lhr = json.load(f)
            except (OSError, ValueError) as e:
                raise ScoreAnalysisFailure(
                    f"Unreadable Lighthouse report for {url}: {e}"
                ) from e

            logger.debug("Lighthouse completed for %s", url)
            return lhr
        finally:
            Path(output_path).unlink(missing_ok=True)
