"""
Cogniscope Configuration Module

Instance-based configuration for the scoring pipeline.  Each
``CogniscopeConfig`` is self-contained and passed through the call stack,
so several configurations (e.g. a strict CI profile and a lenient report
profile) can live in one process.

Severity thresholds are validated before any scoring begins: a
non-ascending table would make classification meaningless, so it is the
one error that stops a run.
"""

import os
from dataclasses import dataclass
from typing import Optional

from cogniscope.core.severity import (
    DEFAULT_FILE_THRESHOLDS,
    DEFAULT_FUNCTION_THRESHOLDS,
    SeverityClassifier,
    SeverityThresholds,
)
from cogniscope.exceptions import ConfigError

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


@dataclass
class CogniscopeConfig:
    """
    Configuration for Cogniscope.

    Create from environment variables::

        config = CogniscopeConfig.from_env()

    Or with explicit values::

        config = CogniscopeConfig(
            file_thresholds=SeverityThresholds(10, 20, 40),
            separate_nested_scopes=False,
        )
    """

    # ── Severity ──────────────────────────────────────────────────
    file_thresholds: SeverityThresholds = DEFAULT_FILE_THRESHOLDS
    function_thresholds: SeverityThresholds = DEFAULT_FUNCTION_THRESHOLDS

    # ── Scoring ───────────────────────────────────────────────────
    separate_nested_scopes: bool = True
    """Score nested functions as their own scopes (False folds them into the parent)."""

    # ── Concurrency ───────────────────────────────────────────────
    max_workers: int = 4

    # ── File Processing ───────────────────────────────────────────
    target_extensions: frozenset = frozenset((".py",))
    exclude_dirs: frozenset = frozenset((
        "__pycache__", ".git", ".hg", ".venv", "venv", ".tox",
        ".mypy_cache", ".pytest_cache", "node_modules", "dist", "build",
    ))
    max_file_size_mb: int = 5

    # ── Reporting ─────────────────────────────────────────────────
    pareto_percent: float = 80.0

    # ── Logging ───────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ── Factory ───────────────────────────────────────────────────

    @classmethod
    def from_env(cls) -> "CogniscopeConfig":
        """Build a config snapshot from current environment variables.

        Reads :envvar:`COGNISCOPE_FILE_THRESHOLDS` and
        :envvar:`COGNISCOPE_FUNCTION_THRESHOLDS` (``"low,medium,high"``),
        :envvar:`COGNISCOPE_SEPARATE_NESTED` (1/true/yes/on or
        0/false/no/off), :envvar:`COGNISCOPE_MAX_WORKERS`,
        :envvar:`COGNISCOPE_PARETO_PERCENT` and
        :envvar:`COGNISCOPE_LOG_LEVEL`.

        Raises :class:`~cogniscope.exceptions.ConfigError` on malformed values.
        """
        defaults = cls()
        file_raw = os.getenv("COGNISCOPE_FILE_THRESHOLDS")
        function_raw = os.getenv("COGNISCOPE_FUNCTION_THRESHOLDS")
        return cls(
            file_thresholds=(
                SeverityThresholds.parse(file_raw) if file_raw else defaults.file_thresholds
            ),
            function_thresholds=(
                SeverityThresholds.parse(function_raw) if function_raw
                else defaults.function_thresholds
            ),
            separate_nested_scopes=_env_bool(
                "COGNISCOPE_SEPARATE_NESTED", defaults.separate_nested_scopes
            ),
            max_workers=_env_int("COGNISCOPE_MAX_WORKERS", defaults.max_workers),
            pareto_percent=_env_float("COGNISCOPE_PARETO_PERCENT", defaults.pareto_percent),
            log_level=os.getenv("COGNISCOPE_LOG_LEVEL", defaults.log_level).upper(),
        )

    # ── Validation & Accessors ────────────────────────────────────

    def validate(self) -> bool:
        """
        Check thresholds, worker count and Pareto cutoff.

        Raises :class:`~cogniscope.exceptions.ConfigError` on failure.
        """
        for label, thresholds in (("file", self.file_thresholds),
                                  ("function", self.function_thresholds)):
            if not isinstance(thresholds, SeverityThresholds):
                raise ConfigError(
                    f"{label}_thresholds must be a SeverityThresholds, got {thresholds!r}"
                )
            try:
                thresholds.validate()
            except ConfigError as exc:
                raise ConfigError(f"Invalid {label} thresholds: {exc}") from exc

        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int) \
                or self.max_workers < 1:
            raise ConfigError(f"max_workers must be a positive integer, got {self.max_workers!r}.")

        if not 0.0 < float(self.pareto_percent) <= 100.0:
            raise ConfigError(
                f"pareto_percent must be in (0, 100], got {self.pareto_percent!r}."
            )

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Unknown log level '{self.log_level}'.")
        return True

    def classifier(self) -> SeverityClassifier:
        """A :class:`SeverityClassifier` using this config's thresholds."""
        return SeverityClassifier(self.file_thresholds, self.function_thresholds)

    def max_file_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    def to_dict(self) -> dict:
        return {
            "file_thresholds": self.file_thresholds.describe(),
            "function_thresholds": self.function_thresholds.describe(),
            "separate_nested_scopes": self.separate_nested_scopes,
            "max_workers": self.max_workers,
            "pareto_percent": self.pareto_percent,
            "target_extensions": sorted(self.target_extensions),
        }


# =============================================================================
# Environment helpers
# =============================================================================

def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"{name} must be one of {', '.join(_TRUTHY + _FALSY)}, got '{raw}'.")


def _env_int(name: str, default: int) -> int:
    raw: Optional[str] = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'.") from None


def _env_float(name: str, default: float) -> float:
    raw: Optional[str] = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{raw}'.") from None
