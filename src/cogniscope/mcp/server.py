"""
Cogniscope MCP Server

Exposes Cogniscope analysis as tools that AI agents can invoke natively
via the Model Context Protocol, so an agent can ask "where is this code
base hardest to read?" before deciding what to refactor.

Also exposes a **resource** with the active severity thresholds and a
**prompt template** for reviewing hot spots.

Start with::

    cogniscope mcp                              # stdio transport (default)
    cogniscope mcp --transport streamable-http  # HTTP for remote agents

Or programmatically::

    from cogniscope.mcp.server import create_server
    server = create_server()
    server.run()
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

# FastMCP uses pydantic for validation, so Field is available whenever
# the mcp extra is installed
from pydantic import Field  # type: ignore[import-untyped]

from cogniscope.core.config import CogniscopeConfig

logger = logging.getLogger(__name__)


def create_server(config: CogniscopeConfig | None = None):
    """
    Build and return a configured FastMCP server instance.

    Uses a **single config for the whole server**: every tool invocation
    shares the same thresholds and scoring mode.

    Args:
        config: Instance-based configuration.  Defaults to
            ``CogniscopeConfig.from_env()`` so that the server respects
            the same environment variables as the CLI.

    Raises ``ImportError`` if ``fastmcp`` is not installed (install via
    ``pip install 'cogniscope[mcp]'``).
    """
    from fastmcp import FastMCP  # type: ignore[import-untyped]

    from cogniscope import __version__
    from cogniscope.client import Cogniscope

    cfg = config or CogniscopeConfig.from_env()
    client = Cogniscope(config=cfg)

    mcp = FastMCP("Cogniscope")

    # ==================================================================
    # Tool: analyze_directory
    # ==================================================================

    @mcp.tool()
    def analyze_directory(
        path: Annotated[
            str,
            Field(default=".", description="Directory to analyze. Defaults to the current working directory ('.'). Every supported source file below it is scored.")
        ] = ".",
        top: Annotated[
            int | None,
            Field(default=None, description="Only return the N most complex files. If None, returns the 'vital few' files that together carry the Pareto share (default 80%) of the total.")
        ] = None,
        include_functions: Annotated[
            bool,
            Field(default=True, description="If True, include per-function scores and rule breakdowns for each returned file. Set to False for a compact ranking.")
        ] = True,
    ) -> str:
        """Score every function under a directory and rank files by
        Cognitive Complexity, with severity tiers and cumulative share.

        **When to use this tool:**
        - You want to know which files are hardest to understand
        - You are planning a refactor and need to prioritise
        - You want evidence that a change made code simpler or harder

        Returns:
            JSON with project totals, the ranked files (rank, path, total,
            tier, cumulative_percent, optionally functions) and any files
            that could not be parsed.
        """
        root = Path(path).resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"'{path}' is not a directory.")

        result = client.analyze(root, parallel=True)
        report = result.report
        entries = report.entries[:top] if top is not None else report.vital_few(cfg.pareto_percent)

        files = []
        for entry in entries:
            obj = entry.to_dict()
            if not include_functions:
                obj.pop("functions", None)
            files.append(obj)

        return json.dumps({
            "total": report.total,
            "files_scored": report.files_scored,
            "files_skipped": report.files_skipped,
            "functions_scored": report.functions_scored,
            "files": files,
            "skipped": [s.to_dict() for s in report.skipped],
        }, indent=2, allow_nan=False)

    # ==================================================================
    # Tool: score_source
    # ==================================================================

    @mcp.tool()
    def score_source(
        source: Annotated[
            str,
            Field(description="Python source code to score (a whole module, or one or more function definitions).")
        ],
        filename: Annotated[
            str,
            Field(default="<string>", description="Name reported in locations, e.g. 'app/views.py'.")
        ] = "<string>",
    ) -> str:
        """Score Python source held in memory, function by function.

        Useful for checking a proposed edit before writing it to disk.

        Returns:
            JSON with the file total and each function's score, tier and
            increment breakdown, or an ``error`` key when the source does
            not parse.
        """
        from cogniscope.exceptions import ParseError

        try:
            report = client.analyze_source(source, filename)
        except ParseError as e:
            return json.dumps({"error": str(e), "functions": []}, allow_nan=False)

        classifier = cfg.classifier()
        functions = []
        for fn in report.functions:
            obj = fn.to_dict()
            obj["tier"] = classifier.classify_function(fn.total).label
            functions.append(obj)
        return json.dumps({
            "path": report.path,
            "total": report.total,
            "tier": classifier.classify_file(report.total).label,
            "functions": functions,
        }, indent=2, allow_nan=False)

    # ==================================================================
    # Tool: health (readiness check)
    # ==================================================================

    @mcp.tool()
    def health() -> str:
        """Check that the Cogniscope MCP server is running and responsive.

        Returns:
            JSON with status, version and scoring mode.
        """
        return json.dumps({
            "status": "ok",
            "version": __version__,
            "separate_nested_scopes": cfg.separate_nested_scopes,
        })

    # ==================================================================
    # Resource: active thresholds
    # ==================================================================

    @mcp.resource("cogniscope://thresholds")
    def thresholds() -> str:
        """Return the active file and function severity thresholds."""
        return json.dumps(cfg.to_dict(), indent=2)

    # ==================================================================
    # Prompt templates
    # ==================================================================

    @mcp.prompt()
    def review_hotspots(path: str = ".", top: int = 5) -> str:
        """Pre-built prompt: review the most complex files of a project."""
        return (
            f"Call analyze_directory for '{path}' with top={top}. For each "
            "returned file, open its highest-scoring functions and explain "
            "what makes them hard to follow (deep nesting, long boolean "
            "chains, recursion). Suggest one concrete refactoring per "
            "function, such as extracting a helper or returning early, and "
            "estimate how much it would lower the score."
        )

    return mcp
