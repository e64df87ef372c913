"""
Cogniscope Exception Hierarchy

Structured exceptions for clear error handling across CLI, API, and MCP
consumers.  Only configuration problems and unusable inputs are raised;
per-file parse failures and per-node oddities are recorded on the report
instead, so a run over a large tree never dies on one bad file.

Usage::

    from cogniscope.exceptions import CogniscopeError, ConfigError

    try:
        result = client.analyze("./src")
    except ConfigError as exc:
        print(f"Bad thresholds: {exc}")
    except CogniscopeError as exc:
        print(f"Cogniscope error: {exc}")
"""


class CogniscopeError(Exception):
    """Base exception for all Cogniscope errors."""


class ConfigError(CogniscopeError, ValueError):
    """Configuration is invalid (e.g. non-ascending severity thresholds).

    Inherits from ``ValueError`` so callers that already catch
    ``ValueError`` from argument parsing keep working.
    """


class ParseError(CogniscopeError):
    """Source text could not be turned into a syntax tree.

    Only raised by single-source entry points; directory analysis records
    the failure as a skipped file instead.
    """


class AnalysisError(CogniscopeError):
    """Fatal error during the analysis pipeline (e.g. root is not a directory)."""
