"""
Cogniscope CLI

Command-line interface for scoring code and finding complexity hot spots.

Usage::

    cogniscope analyze ./src                   # Ranked report with tiers
    cogniscope analyze ./src -f json           # Machine-readable report
    cogniscope check ./src --max-function 15   # CI gate (exit 1 on violation)
    cogniscope thresholds                      # Show active configuration
    cogniscope mcp                             # Start the MCP server
"""

import dataclasses
import logging
import time
from pathlib import Path

import click

from cogniscope.core.config import CogniscopeConfig
from cogniscope.core.formatting import ReportFormatter
from cogniscope.core.severity import SeverityThresholds
from cogniscope.exceptions import CogniscopeError, ConfigError


# ---------------------------------------------------------------------------
# Logging helpers
# ---------------------------------------------------------------------------

def _configure_logging(verbose: bool, config: CogniscopeConfig | None = None) -> None:
    """Set up logging for the CLI session."""
    level_name = config.log_level if config is not None else "WARNING"
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.WARNING)
    fmt = config.log_format if config is not None else CogniscopeConfig.log_format
    logging.basicConfig(level=level, format=fmt)


# ---------------------------------------------------------------------------
# Config helpers
# ---------------------------------------------------------------------------

def _load_config(**overrides) -> CogniscopeConfig:
    """Environment config with CLI overrides applied; exits 1 if invalid."""
    try:
        config = CogniscopeConfig.from_env()
        changes = {key: value for key, value in overrides.items() if value is not None}
        if changes:
            config = dataclasses.replace(config, **changes)
        config.validate()
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)
    return config


def _parse_thresholds(ctx, param, value):
    """click callback: turn ``"5,15,25"`` into :class:`SeverityThresholds`."""
    if value is None:
        return None
    try:
        return SeverityThresholds.parse(value)
    except ConfigError as exc:
        raise click.BadParameter(str(exc))


# ---------------------------------------------------------------------------
# Top-level group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(package_name="cogniscope")
@click.pass_context
def cli(ctx: click.Context):
    """Cogniscope — Cognitive Complexity scoring and Pareto hot spots."""
    ctx.ensure_object(dict)


# ---------------------------------------------------------------------------
# cogniscope analyze
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("directory", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("-f", "--format", "fmt",
              type=click.Choice(["console", "json", "csv", "compact"]),
              default="console", help="Output format.")
@click.option("-n", "--top", type=click.IntRange(min=1), default=None,
              help="Only show the N most complex files (console format).")
@click.option("--file-thresholds", callback=_parse_thresholds, default=None,
              help="File tier bounds as 'low,medium,high' (default 5,15,25).")
@click.option("--function-thresholds", callback=_parse_thresholds, default=None,
              help="Function tier bounds as 'low,medium,high' (default 5,10,20).")
@click.option("--fold-nested", is_flag=True,
              help="Score nested functions as part of their enclosing function.")
@click.option("-w", "--workers", type=int, default=None,
              help="Worker threads (default: $COGNISCOPE_MAX_WORKERS or 4).")
@click.option("--progress", is_flag=True, help="Show progress bars.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def analyze(directory: str, fmt: str, top: int | None,
            file_thresholds: SeverityThresholds | None,
            function_thresholds: SeverityThresholds | None,
            fold_nested: bool, workers: int | None, progress: bool, verbose: bool):
    """Score every function under DIRECTORY and rank files by complexity."""
    config = _load_config(
        file_thresholds=file_thresholds,
        function_thresholds=function_thresholds,
        separate_nested_scopes=False if fold_nested else None,
        max_workers=workers,
    )
    _configure_logging(verbose, config)
    t0 = time.perf_counter()

    # Imported here so `cogniscope --help` stays instant
    from cogniscope.core.analyzer import AnalysisPipeline  # noqa: E402

    try:
        pipeline = AnalysisPipeline(
            root_dir=Path(directory).resolve(),
            config=config,
            show_progress=progress,
        )
        result = pipeline.run()
    except CogniscopeError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    elapsed = time.perf_counter() - t0
    formatter = ReportFormatter()

    if fmt == "json":
        click.echo(formatter.format_json(result.report))
    elif fmt == "csv":
        click.echo(formatter.format_csv(result.report), nl=False)
    elif fmt == "compact":
        click.echo(formatter.format_compact(result.report))
    else:
        click.echo(formatter.format_console(
            result.report,
            top=top,
            pareto_percent=config.pareto_percent,
            elapsed_time=elapsed,
        ))


# ---------------------------------------------------------------------------
# cogniscope check
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--max-function", type=click.IntRange(min=0), default=15, show_default=True,
              help="Highest allowed score for a single function.")
@click.option("--max-file", type=click.IntRange(min=0), default=None,
              help="Highest allowed total for a single file.")
@click.option("--fold-nested", is_flag=True,
              help="Score nested functions as part of their enclosing function.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def check(path: str, max_function: int, max_file: int | None,
          fold_nested: bool, verbose: bool):
    """Fail (exit 1) when a function or file under PATH is too complex.

    PATH may be a directory or a single source file.  Files that cannot
    be parsed are reported but do not fail the check.
    """
    config = _load_config(separate_nested_scopes=False if fold_nested else None)
    _configure_logging(verbose, config)

    from cogniscope.core.analyzer import AnalysisPipeline  # noqa: E402

    target = Path(path).resolve()
    try:
        if target.is_dir():
            result = AnalysisPipeline(root_dir=target, config=config).run()
        else:
            result = AnalysisPipeline(root_dir=target.parent, config=config).analyze_paths([target])
    except CogniscopeError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    violations = []
    for report in result.report.files:
        for fn in report.functions:
            if fn.total > max_function:
                violations.append(
                    f"{report.path}:{fn.line}: {fn.function} has cognitive complexity "
                    f"{fn.total} (max {max_function})"
                )
        if max_file is not None and report.total > max_file:
            violations.append(
                f"{report.path}: file total {report.total} (max {max_file})"
            )

    for skipped in result.report.skipped:
        click.echo(f"warning: skipped {skipped.path} ({skipped.diagnostic})", err=True)

    if violations:
        for line in violations:
            click.echo(line)
        click.echo(f"\n{len(violations)} complexity violation(s) found.", err=True)
        raise SystemExit(1)

    click.echo(
        f"OK: {result.functions_scored} function(s) in {result.files_scored} file(s) "
        f"within limits."
    )


# ---------------------------------------------------------------------------
# cogniscope thresholds
# ---------------------------------------------------------------------------

@cli.command()
def thresholds():
    """Show the active severity thresholds and scoring settings."""
    config = _load_config()
    click.echo("─" * 50)
    click.echo("  COGNISCOPE — Active Configuration")
    click.echo("─" * 50)
    for label, table in (("File", config.file_thresholds),
                         ("Function", config.function_thresholds)):
        bounds = table.describe()
        click.echo(f"  {label} tiers")
        for tier, bound in bounds.items():
            click.echo(f"    {tier:<9} {bound}")
    click.echo()
    click.echo(f"  Nested functions  {'separate' if config.separate_nested_scopes else 'folded'}")
    click.echo(f"  Worker threads    {config.max_workers}")
    click.echo(f"  Pareto cutoff     {config.pareto_percent:g}%")
    click.echo("─" * 50)


# ---------------------------------------------------------------------------
# cogniscope mcp
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--transport", type=click.Choice(["stdio", "sse", "streamable-http"]),
              default="stdio", help="MCP transport (default: stdio).")
@click.option("-v", "--verbose", is_flag=True)
def mcp(transport: str, verbose: bool):
    """Start the Cogniscope MCP server for agent integration."""
    config = _load_config()
    _configure_logging(verbose, config)
    try:
        from cogniscope.mcp.server import create_server  # noqa: E402
    except ImportError:
        click.echo(
            "Error: MCP dependencies not installed.\n"
            "Install with:  pip install 'cogniscope[mcp]'",
            err=True,
        )
        raise SystemExit(1)

    server = create_server(config)
    server.run(transport=transport)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
