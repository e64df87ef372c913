"""
Cogniscope Analysis Pipeline

Crawls a directory, parses each source file into syntax trees, scores
every function scope on a worker pool, then aggregates and classifies
the results.

- One scoring task per top-level function; nested scopes found by a task
  are submitted as tasks of their own.
- Parse failures are recorded per file and never stop the run.
- Aggregation runs only after every task has finished, and sorts its
  input, so thread scheduling never changes the report.
- Source files are only read, never modified.
"""

import logging
import os
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from tqdm import tqdm

from cogniscope.core.config import CogniscopeConfig
from cogniscope.core.engine import ComplexityScore, ScoreAccumulator, score_function_tree
from cogniscope.core.parser import ParsedFile, provider_for, scan_directory
from cogniscope.core.report import (
    ProjectReport,
    SkippedFile,
    aggregate_file,
    aggregate_project,
)
from cogniscope.exceptions import AnalysisError

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Typed result returned by :meth:`AnalysisPipeline.run`.

    Counts mirror the report so callers can print "N files scored, M
    skipped" without walking it.
    """
    files_scanned: int = 0
    files_scored: int = 0
    files_skipped: int = 0
    functions_scored: int = 0
    warnings: int = 0
    total: int = 0
    root_dir: str = ""
    elapsed_seconds: float = 0.0
    report: Optional[ProjectReport] = None

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict for API/agent pipelines."""
        return {
            "files_scanned": self.files_scanned,
            "files_scored": self.files_scored,
            "files_skipped": self.files_skipped,
            "functions_scored": self.functions_scored,
            "warnings": self.warnings,
            "total": self.total,
            "root_dir": self.root_dir,
            "elapsed_seconds": round(self.elapsed_seconds, 4),
            "report": self.report.to_dict() if self.report is not None else None,
        }


# =============================================================================
# Analysis Pipeline
# =============================================================================

class AnalysisPipeline:
    """
    Orchestrates a full analysis run.

    Args:
        root_dir: Directory to analyze (needed by :meth:`run`; optional
            for :meth:`analyze_paths`).
        config: Explicit configuration.  Defaults to
            :meth:`CogniscopeConfig.from_env`.  Validated here, before any
            file is read, so bad thresholds fail fast.
        show_progress: Show tqdm progress bars.
        parallel: Score on a thread pool.  False (or ``max_workers=1``)
            scores sequentially; the report is identical either way.

    Raises:
        ConfigError: If the configuration is invalid.
    """

    def __init__(self, root_dir: Path | None = None,
                 config: CogniscopeConfig | None = None,
                 show_progress: bool = False, parallel: bool = True):
        self.config = config or CogniscopeConfig.from_env()
        self.config.validate()

        self.root_dir = Path(root_dir) if root_dir is not None else None
        self.show_progress = show_progress
        self.parallel = parallel and self.config.max_workers > 1

        self.accumulator = ScoreAccumulator(
            separate_nested_scopes=self.config.separate_nested_scopes,
        )
        self.classifier = self.config.classifier()

    # ── Entry points ─────────────────────────────────────────────

    def run(self) -> AnalysisResult:
        """
        Execute the full pipeline over :attr:`root_dir`.

        Steps:
          1. Scan directories for source files
          2. Parse each file (failures become skipped files)
          3. Score every function scope on the worker pool
          4. Aggregate per file and per project, then classify
        """
        if self.root_dir is None or not self.root_dir.is_dir():
            raise AnalysisError(f"Not a directory: {self.root_dir}")

        logger.info("─" * 60)
        logger.info("  COGNISCOPE — Analyzer")
        logger.info("─" * 60)
        logger.info(f"  Root   : {self.root_dir}")
        logger.info(f"  Workers: {self.config.max_workers if self.parallel else 1}")
        if not self.config.separate_nested_scopes:
            logger.info("  Flags  : fold-nested")
        logger.info("─" * 60)

        logger.info("[1/4] Scanning for source files...")
        source_files = scan_directory(self.root_dir, self.config)
        logger.info(f"  Found {len(source_files):,} source files")
        if not source_files:
            logger.warning("No source files found to analyze.")

        return self.analyze_paths(source_files)

    def analyze_paths(self, paths: Sequence[Path]) -> AnalysisResult:
        """Analyze an explicit list of files (steps 2-4 of :meth:`run`)."""
        t0 = time.perf_counter()

        # One file reached through two spellings (``a.py``, ``./a.py``)
        # is analyzed once.
        unique: Dict[str, Path] = {}
        for path in paths:
            unique.setdefault(self._display_path(path), path)
        if len(unique) < len(paths):
            logger.warning(f"Ignoring {len(paths) - len(unique)} duplicate path(s)")
        paths = list(unique.values())

        logger.info("[2/4] Parsing source files...")
        parsed = self._parse_all(paths)

        logger.info("[3/4] Scoring function scopes...")
        scores = self._score_all([p for p in parsed if p.ok])

        logger.info("[4/4] Aggregating and classifying...")
        report = self.build_report(parsed, scores)

        result = AnalysisResult(
            files_scanned=len(paths),
            files_scored=report.files_scored,
            files_skipped=report.files_skipped,
            functions_scored=report.functions_scored,
            warnings=report.warning_count,
            total=report.total,
            root_dir=str(self.root_dir) if self.root_dir is not None else "",
            elapsed_seconds=time.perf_counter() - t0,
            report=report,
        )
        self._log_statistics(result)
        return result

    def build_report(self, parsed: Iterable[ParsedFile],
                     scores: Dict[str, List[ComplexityScore]]) -> ProjectReport:
        """Aggregate collected scores and annotate severity tiers."""
        files = []
        skipped = []
        for parsed_file in parsed:
            if parsed_file.ok:
                files.append(aggregate_file(parsed_file.path, scores.get(parsed_file.path, ())))
            else:
                skipped.append(SkippedFile(parsed_file.path, parsed_file.error))
        return self.classifier.annotate(aggregate_project(files, skipped))

    # ── Parsing ──────────────────────────────────────────────────

    def _display_path(self, path: Path) -> str:
        if self.root_dir is not None:
            try:
                return Path(os.path.relpath(path, self.root_dir)).as_posix()
            except ValueError:
                # Different drive on Windows
                pass
        return Path(path).as_posix()

    def _parse_file(self, path: Path) -> ParsedFile:
        display = self._display_path(path)
        provider = provider_for(path)
        if provider is None:
            return ParsedFile(path=display, error=f"Unsupported file type: {Path(path).suffix}")
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            return ParsedFile(path=display, error=f"Cannot read file: {e}")
        return provider.parse(display, data)

    def _parse_all(self, paths: Sequence[Path]) -> List[ParsedFile]:
        with tqdm(total=len(paths), desc="Parsing files", unit="file",
                  disable=not self.show_progress) as pbar:
            if not self.parallel:
                parsed = []
                for path in paths:
                    parsed.append(self._parse_file(path))
                    pbar.update(1)
                return parsed

            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                parsed = []
                for parsed_file in executor.map(self._parse_file, paths):
                    parsed.append(parsed_file)
                    pbar.update(1)
                return parsed

    # ── Scoring ──────────────────────────────────────────────────

    def _score_all(self, parsed: Sequence[ParsedFile]) -> Dict[str, List[ComplexityScore]]:
        """Score every scope of every parsed file; returns scores per path."""
        scores: Dict[str, List[ComplexityScore]] = {p.path: [] for p in parsed}
        requests = [(p.path, request) for p in parsed for request in p.scopes]

        with tqdm(total=len(requests), desc="Scoring functions", unit="fn",
                  disable=not self.show_progress) as pbar:
            if not self.parallel:
                for path, request in requests:
                    found = score_function_tree(request.node, self.accumulator, request.qualname)
                    scores[path].extend(found)
                    pbar.total += len(found) - 1
                    pbar.update(len(found))
                return scores

            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                pending = {
                    executor.submit(self.accumulator.score, request.node, request.qualname): path
                    for path, request in requests
                }
                while pending:
                    done, _ = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        path = pending.pop(future)
                        try:
                            result = future.result()
                        except Exception as e:
                            for other in pending:
                                other.cancel()
                            raise AnalysisError(f"Scoring failed in {path}: {e}") from e
                        scores[path].append(result.score)
                        for request in result.nested:
                            nested_future = executor.submit(
                                self.accumulator.score, request.node, request.qualname,
                            )
                            pending[nested_future] = path
                        pbar.total += len(result.nested)
                        pbar.update(1)
        return scores

    # ── Reporting ────────────────────────────────────────────────

    def _log_statistics(self, result: AnalysisResult) -> None:
        report = result.report
        for skipped in report.skipped:
            logger.warning(f"  ✗ {skipped.path}  ({skipped.diagnostic})")
        logger.info("=" * 60)
        logger.info(
            f"  {result.files_scored:,} files scored, {result.files_skipped:,} skipped, "
            f"{result.functions_scored:,} functions, total complexity {result.total:,}"
        )
        vital = report.vital_few(self.config.pareto_percent)
        if vital:
            logger.info(
                f"  {len(vital):,} of {report.files_scored:,} files carry "
                f"{vital[-1].cumulative_percent:.1f}% of the complexity"
            )
        if result.warnings:
            logger.info(f"  {result.warnings:,} unrecognized-node warnings")
        logger.info(f"  Completed in {result.elapsed_seconds:.3f} seconds")
