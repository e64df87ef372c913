"""
Cogniscope Client Facade

Single entry point for programmatic use.  Wraps directory analysis,
single-source scoring, and configuration behind an instance-based API
with async variants.

Usage::

    from cogniscope import Cogniscope

    # From environment variables
    client = Cogniscope()

    # With explicit configuration
    from cogniscope.core.config import CogniscopeConfig
    client = Cogniscope(config=CogniscopeConfig(max_workers=8))

    # Analyze a project
    result = client.analyze("./myproject")
    for entry in result.report.vital_few():
        print(entry.rank, entry.path, entry.total, entry.tier.label)

    # Score a snippet
    report = client.analyze_source("def f(x):\\n    if x:\\n        return 1\\n")
    print(report.total)

    # Async variants (for FastAPI / Django async views)
    result = await client.aanalyze("./myproject")
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, List

from cogniscope.core.analyzer import AnalysisPipeline, AnalysisResult
from cogniscope.core.config import CogniscopeConfig
from cogniscope.core.engine import ComplexityScore, ScoreAccumulator, score_function_tree
from cogniscope.core.parser import PythonSyntaxProvider
from cogniscope.core.report import FileReport, aggregate_file
from cogniscope.exceptions import AnalysisError, ParseError

logger = logging.getLogger(__name__)


class Cogniscope:
    """
    High-level Cogniscope client.

    Each instance carries its own :class:`CogniscopeConfig` and never
    touches global state.

    Args:
        config: Explicit configuration object.  When *None*, a config is
            built from environment variables or keyword overrides.
        **kwargs: Forwarded to :class:`CogniscopeConfig` when *config* is
            ``None`` (e.g. ``max_workers=1``).

    Raises:
        ConfigError: If the resulting configuration is invalid.  Checked
            here so bad thresholds surface before any analysis.
    """

    def __init__(self, config: CogniscopeConfig | None = None, **kwargs):
        if config is not None:
            self._config = config
        elif kwargs:
            # Build a config from env, then overlay keyword overrides
            base = CogniscopeConfig.from_env()
            merged = {
                f.name: kwargs.get(f.name, getattr(base, f.name))
                for f in base.__dataclass_fields__.values()
            }
            self._config = CogniscopeConfig(**merged)
        else:
            self._config = CogniscopeConfig.from_env()

        self._config.validate()

    # ── Configuration ─────────────────────────────────────────────

    @property
    def config(self) -> CogniscopeConfig:
        """The active configuration for this client."""
        return self._config

    # ── Analysis ──────────────────────────────────────────────────

    def analyze(
        self,
        directory: str | Path,
        *,
        show_progress: bool = False,
        parallel: bool = True,
    ) -> AnalysisResult:
        """
        Analyze every supported source file under *directory*.

        Args:
            directory: Root directory to analyze.
            show_progress: Show tqdm progress bars.
            parallel: Score on the worker pool (False scores sequentially).

        Returns:
            :class:`AnalysisResult` with counts and the classified
            :class:`~cogniscope.core.report.ProjectReport`.

        Raises:
            AnalysisError: If *directory* is not a directory.
        """
        root = Path(directory).resolve()
        if not root.is_dir():
            raise AnalysisError(f"'{directory}' is not a directory.")
        pipeline = AnalysisPipeline(
            root_dir=root,
            config=self._config,
            show_progress=show_progress,
            parallel=parallel,
        )
        return pipeline.run()

    def analyze_files(self, paths: Iterable[str | Path], *,
                      parallel: bool = True) -> AnalysisResult:
        """Analyze an explicit list of files (paths are reported as given)."""
        pipeline = AnalysisPipeline(config=self._config, parallel=parallel)
        return pipeline.analyze_paths([Path(p) for p in paths])

    def analyze_source(self, source: str, path: str = "<string>") -> FileReport:
        """
        Score Python *source* held in memory.

        Raises:
            ParseError: If the source is not valid Python.
        """
        parsed = PythonSyntaxProvider().parse(path, source)
        if not parsed.ok:
            raise ParseError(f"{path}: {parsed.error}")
        accumulator = ScoreAccumulator(self._config.separate_nested_scopes)
        scores: List[ComplexityScore] = []
        for request in parsed.scopes:
            scores.extend(score_function_tree(request.node, accumulator, request.qualname))
        return aggregate_file(path, scores)

    # ── Async variants ────────────────────────────────────────────
    # These use asyncio.to_thread() to run sync operations off the
    # event loop. They raise the same exceptions as the sync methods.

    async def aanalyze(
        self,
        directory: str | Path,
        *,
        parallel: bool = True,
    ) -> AnalysisResult:
        """Async variant of :meth:`analyze`. Raises same exceptions as sync."""
        return await asyncio.to_thread(self.analyze, directory, parallel=parallel)

    async def aanalyze_source(self, source: str, path: str = "<string>") -> FileReport:
        """Async variant of :meth:`analyze_source`. Raises same exceptions as sync."""
        return await asyncio.to_thread(self.analyze_source, source, path)

    # ── Health (for agents / status endpoints) ─────────────────────

    def health(self) -> Dict[str, object]:
        """Return a small status dict for agents or readiness checks."""
        from cogniscope import __version__

        return {
            "version": __version__,
            "separate_nested_scopes": self._config.separate_nested_scopes,
            "file_thresholds": list(self._config.file_thresholds.as_tuple()),
            "function_thresholds": list(self._config.function_thresholds.as_tuple()),
        }
