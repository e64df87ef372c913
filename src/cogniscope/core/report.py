"""
Cogniscope Aggregation

Builds per-file and per-project reports from independently computed
:class:`~cogniscope.core.engine.ComplexityScore` objects.

Everything here is order-independent: scores may arrive from any thread
in any order and the resulting :class:`ProjectReport` is identical,
because the ordering is decided by sorting (total descending, then path
ascending) rather than by arrival.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from cogniscope.core.engine import ComplexityScore

logger = logging.getLogger(__name__)


# =============================================================================
# Data Models
# =============================================================================

@dataclass(frozen=True)
class FileReport:
    """All function scores for one source file."""
    path: str
    functions: Tuple[ComplexityScore, ...] = ()

    @property
    def total(self) -> int:
        return sum(fn.total for fn in self.functions)

    @property
    def function_count(self) -> int:
        return len(self.functions)

    @property
    def max_function(self) -> Optional[ComplexityScore]:
        """The most complex function (first by line on ties), or None."""
        if not self.functions:
            return None
        return max(self.functions, key=lambda fn: (fn.total, -fn.line))

    @property
    def warning_count(self) -> int:
        return sum(len(fn.warnings) for fn in self.functions)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "total": self.total,
            "functions": [fn.to_dict() for fn in self.functions],
        }


@dataclass(frozen=True)
class SkippedFile:
    """A file whose syntax tree could not be produced."""
    path: str
    diagnostic: str

    def to_dict(self) -> dict:
        return {"path": self.path, "diagnostic": self.diagnostic}


@dataclass(frozen=True)
class ParetoEntry:
    """One ranked row of a :class:`ProjectReport`.

    ``tier`` and ``function_tiers`` stay empty until a
    :class:`~cogniscope.core.severity.SeverityClassifier` annotates the
    report.
    """
    rank: int
    file: FileReport
    cumulative_total: int
    cumulative_percent: float
    tier: Optional[object] = None
    function_tiers: Tuple[object, ...] = ()

    @property
    def path(self) -> str:
        return self.file.path

    @property
    def total(self) -> int:
        return self.file.total

    def to_dict(self) -> dict:
        functions = []
        for index, fn in enumerate(self.file.functions):
            obj = fn.to_dict()
            if index < len(self.function_tiers):
                obj["tier"] = self.function_tiers[index].label
            functions.append(obj)
        return {
            "rank": self.rank,
            "path": self.file.path,
            "total": self.file.total,
            "tier": self.tier.label if self.tier is not None else None,
            "cumulative_total": self.cumulative_total,
            "cumulative_percent": round(self.cumulative_percent, 2),
            "functions": functions,
        }


@dataclass(frozen=True)
class ProjectReport:
    """Files ranked by complexity with their running (Pareto) share."""
    entries: Tuple[ParetoEntry, ...] = ()
    skipped: Tuple[SkippedFile, ...] = field(default=())

    @property
    def total(self) -> int:
        return sum(entry.file.total for entry in self.entries)

    @property
    def files(self) -> Tuple[FileReport, ...]:
        return tuple(entry.file for entry in self.entries)

    @property
    def files_scored(self) -> int:
        return len(self.entries)

    @property
    def files_skipped(self) -> int:
        return len(self.skipped)

    @property
    def functions_scored(self) -> int:
        return sum(entry.file.function_count for entry in self.entries)

    @property
    def warning_count(self) -> int:
        return sum(entry.file.warning_count for entry in self.entries)

    def vital_few(self, percent: float = 80.0) -> Tuple[ParetoEntry, ...]:
        """
        Shortest ranked prefix of files that accounts for at least
        *percent* of the project total.  Empty when the total is 0.
        """
        if self.total == 0:
            return ()
        selected: List[ParetoEntry] = []
        for entry in self.entries:
            selected.append(entry)
            if entry.cumulative_percent >= percent:
                break
        return tuple(selected)

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict for reporting layers."""
        return {
            "total": self.total,
            "files_scored": self.files_scored,
            "files_skipped": self.files_skipped,
            "functions_scored": self.functions_scored,
            "files": [entry.to_dict() for entry in self.entries],
            "skipped": [s.to_dict() for s in self.skipped],
        }


# =============================================================================
# Aggregation
# =============================================================================

def aggregate_file(path: str, scores: Iterable[ComplexityScore]) -> FileReport:
    """Collect function scores for *path*, ordered by line then name."""
    ordered = sorted(scores, key=lambda fn: (fn.line, fn.function, fn.total, len(fn.breakdown)))
    return FileReport(path=str(path), functions=tuple(ordered))


def aggregate_project(files: Iterable[FileReport],
                      skipped: Iterable[SkippedFile] = ()) -> ProjectReport:
    """
    Rank *files* by total (descending, ties by path) and compute the
    running total and percentage of the project total.

    Raises:
        ValueError: If the same path appears twice.
    """
    ranked = sorted(files, key=lambda f: (-f.total, f.path))
    seen = set()
    for report in ranked:
        if report.path in seen:
            raise ValueError(f"Duplicate file in project aggregation: {report.path}")
        seen.add(report.path)

    project_total = sum(f.total for f in ranked)
    entries: List[ParetoEntry] = []
    running = 0
    for rank, report in enumerate(ranked, start=1):
        running += report.total
        percent = (running * 100.0 / project_total) if project_total else 0.0
        entries.append(ParetoEntry(
            rank=rank,
            file=report,
            cumulative_total=running,
            cumulative_percent=percent,
        ))

    skipped_sorted = tuple(sorted(skipped, key=lambda s: s.path))
    logger.debug(
        f"Aggregated {len(entries)} files (total {project_total}), "
        f"{len(skipped_sorted)} skipped"
    )
    return ProjectReport(entries=tuple(entries), skipped=skipped_sorted)
