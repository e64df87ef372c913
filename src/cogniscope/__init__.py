"""
Cogniscope — Cognitive Complexity scoring with Pareto hot-spot analysis.

The ``cogniscope`` package scores every function of a code base for how
hard it is to read (nesting, boolean chains, recursion), rolls the scores
up per file and per project, sorts files into severity tiers, and shows
which few files carry most of the complexity.

Quick start (programmatic API)::

    from cogniscope import Cogniscope

    client = Cogniscope()                       # reads env vars
    result = client.analyze("./src")
    for entry in result.report.vital_few(80):
        print(entry.path, entry.total, entry.tier.label)

Quick start (CLI)::

    cogniscope analyze ./src
    cogniscope check ./src --max-function 15

Configuration override::

    from cogniscope import Cogniscope, CogniscopeConfig, SeverityThresholds

    config = CogniscopeConfig(file_thresholds=SeverityThresholds(10, 30, 60))
    client = Cogniscope(config=config)
"""

__version__ = "1.0.0"

# Primary public API: the Cogniscope facade
from cogniscope.client import Cogniscope

# Configuration
from cogniscope.core.config import CogniscopeConfig
from cogniscope.core.severity import SeverityThresholds, SeverityTier

# Core data types that callers interact with
from cogniscope.core.analyzer import AnalysisResult
from cogniscope.core.engine import ComplexityScore
from cogniscope.core.report import FileReport, ProjectReport

# Exception hierarchy
from cogniscope.exceptions import (
    AnalysisError,
    CogniscopeError,
    ConfigError,
    ParseError,
)


def health(config: CogniscopeConfig | None = None) -> dict:
    """
    Return a small status dict for agents or health checks (no analysis).

    When *config* is None, uses :meth:`CogniscopeConfig.from_env()`.
    """
    cfg = config or CogniscopeConfig.from_env()
    return {
        "version": __version__,
        "separate_nested_scopes": cfg.separate_nested_scopes,
        "max_workers": cfg.max_workers,
    }


__all__ = [
    "__version__",
    # Facade
    "Cogniscope",
    # Config
    "CogniscopeConfig",
    "SeverityThresholds",
    "SeverityTier",
    # Data types
    "AnalysisResult",
    "ComplexityScore",
    "FileReport",
    "ProjectReport",
    # Exceptions
    "CogniscopeError",
    "ConfigError",
    "ParseError",
    "AnalysisError",
    # Status
    "health",
]
