"""
Cogniscope Core — syntax model, scoring, aggregation, severity, pipeline.

Re-exports the primary classes for convenience::

    from cogniscope.core import ScoreAccumulator, aggregate_project
"""

from cogniscope.core.config import CogniscopeConfig
from cogniscope.core.engine import (
    ComplexityScore,
    Diagnostic,
    Increment,
    Rule,
    Scope,
    ScoreAccumulator,
    score_function_tree,
)
from cogniscope.core.nodes import NodeKind, SourceLocation, SyntaxNode
from cogniscope.core.report import (
    FileReport,
    ParetoEntry,
    ProjectReport,
    SkippedFile,
    aggregate_file,
    aggregate_project,
)
from cogniscope.core.severity import SeverityClassifier, SeverityThresholds, SeverityTier

__all__ = [
    "CogniscopeConfig",
    "ComplexityScore",
    "Diagnostic",
    "Increment",
    "Rule",
    "Scope",
    "ScoreAccumulator",
    "score_function_tree",
    "NodeKind",
    "SourceLocation",
    "SyntaxNode",
    "FileReport",
    "ParetoEntry",
    "ProjectReport",
    "SkippedFile",
    "aggregate_file",
    "aggregate_project",
    "SeverityClassifier",
    "SeverityThresholds",
    "SeverityTier",
]
