"""
Cogniscope Severity Classification

Maps complexity totals onto the ordered tiers Low < Medium < High <
Critical.  Thresholds are inclusive upper bounds for the first three
tiers; anything above ``high`` is Critical, so every non-negative total
maps to exactly one tier and a higher total never maps to a lower tier.

Files and functions use separate threshold sets (a function at 20 is a
problem, a file at 20 usually is not).
"""

import logging
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Tuple

from cogniscope.exceptions import ConfigError

logger = logging.getLogger(__name__)


class SeverityTier(IntEnum):
    """Ordered severity tiers; comparison follows the tier order."""
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        return self.name.title()


@dataclass(frozen=True)
class SeverityThresholds:
    """Inclusive upper bounds for Low, Medium and High."""
    low: int
    medium: int
    high: int

    def validate(self) -> "SeverityThresholds":
        """Raise :class:`ConfigError` unless bounds are non-negative ints in strictly ascending order."""
        bounds = self.as_tuple()
        for name, value in zip(("low", "medium", "high"), bounds):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"Threshold '{name}' must be an integer, got {value!r}.")
            if value < 0:
                raise ConfigError(f"Threshold '{name}' must be >= 0, got {value}.")
        if not (self.low < self.medium < self.high):
            raise ConfigError(
                f"Thresholds must be strictly ascending (low < medium < high), "
                f"got {self.low}/{self.medium}/{self.high}."
            )
        return self

    def classify(self, total: int) -> SeverityTier:
        if total <= self.low:
            return SeverityTier.LOW
        if total <= self.medium:
            return SeverityTier.MEDIUM
        if total <= self.high:
            return SeverityTier.HIGH
        return SeverityTier.CRITICAL

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.low, self.medium, self.high)

    def describe(self) -> dict:
        """Human-readable ranges per tier, e.g. ``{"Low": "0-5", ...}``."""
        return {
            SeverityTier.LOW.label: f"0-{self.low}",
            SeverityTier.MEDIUM.label: f"{self.low + 1}-{self.medium}",
            SeverityTier.HIGH.label: f"{self.medium + 1}-{self.high}",
            SeverityTier.CRITICAL.label: f">{self.high}",
        }

    @classmethod
    def parse(cls, text: str) -> "SeverityThresholds":
        """Parse ``"5,15,25"`` into thresholds (validated)."""
        parts = [p.strip() for p in str(text).split(",") if p.strip()]
        if len(parts) != 3:
            raise ConfigError(
                f"Expected three comma-separated thresholds (low,medium,high), got '{text}'."
            )
        try:
            low, medium, high = (int(p) for p in parts)
        except ValueError:
            raise ConfigError(f"Thresholds must be integers, got '{text}'.") from None
        return cls(low, medium, high).validate()


DEFAULT_FILE_THRESHOLDS = SeverityThresholds(low=5, medium=15, high=25)
DEFAULT_FUNCTION_THRESHOLDS = SeverityThresholds(low=5, medium=10, high=20)


class SeverityClassifier:
    """
    Pure classification of file and function totals.

    :meth:`annotate` is the annotation pass over an aggregated
    :class:`~cogniscope.core.report.ProjectReport`: it returns a new
    report with tiers filled in and leaves its input untouched.
    """

    def __init__(self,
                 file_thresholds: SeverityThresholds = DEFAULT_FILE_THRESHOLDS,
                 function_thresholds: SeverityThresholds = DEFAULT_FUNCTION_THRESHOLDS):
        self.file_thresholds = file_thresholds.validate()
        self.function_thresholds = function_thresholds.validate()

    def classify_file(self, total: int) -> SeverityTier:
        return self.file_thresholds.classify(total)

    def classify_function(self, total: int) -> SeverityTier:
        return self.function_thresholds.classify(total)

    def annotate(self, report):
        entries = tuple(
            replace(
                entry,
                tier=self.classify_file(entry.file.total),
                function_tiers=tuple(
                    self.classify_function(fn.total) for fn in entry.file.functions
                ),
            )
            for entry in report.entries
        )
        counts = {}
        for entry in entries:
            counts[entry.tier.label] = counts.get(entry.tier.label, 0) + 1
        logger.debug(f"Severity distribution: {counts}")
        return replace(report, entries=entries)
