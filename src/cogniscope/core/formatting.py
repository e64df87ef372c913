"""
Cogniscope Report Formatting

Renders a :class:`~cogniscope.core.report.ProjectReport` for terminals,
machines (JSON), spreadsheets (CSV), and grep-like pipelines (compact).
"""

import csv
import io
import json
import shutil
from typing import List, Optional

from cogniscope.core.report import ProjectReport


class ReportFormatter:
    """Format project reports for different output modes."""

    # ── Helpers ───────────────────────────────────────────────────

    @staticmethod
    def _sanitize_path(s: str) -> str:
        """Normalise backslashes and strip control characters so output stays portable."""
        if not s:
            return s
        s = s.replace("\\", "/")
        return "".join(c for c in s if (ord(c) >= 32 and ord(c) != 127) or c in "\t")

    @staticmethod
    def _tier_label(tier) -> str:
        return tier.label if tier is not None else "-"

    # ── Console (human-friendly) ──────────────────────────────────

    @staticmethod
    def format_console(report: ProjectReport, top: Optional[int] = None,
                       show_functions: int = 3, pareto_percent: float = 80.0,
                       elapsed_time: Optional[float] = None) -> str:
        """
        Ranked table with tiers, cumulative share and the worst functions
        of each file.

        Args:
            report: The (classified) project report.
            top: Only show the first *top* files.  ``None`` shows all.
            show_functions: Number of worst functions listed under each file.
            pareto_percent: Cutoff used for the "vital few" summary line.
            elapsed_time: Optional analysis time in seconds for the header.
        """
        width = min(shutil.get_terminal_size().columns, 78)
        thin = "─" * width

        header = (
            f"  COGNISCOPE — {report.files_scored} file{'s' if report.files_scored != 1 else ''}, "
            f"total complexity {report.total}"
        )
        if elapsed_time is not None:
            header += f" in {elapsed_time:.3f}s".replace(",", ".")

        out: List[str] = [f"\n{thin}", header, thin]

        if not report.entries:
            out.append("\n  No functions found.")

        entries = report.entries if top is None else report.entries[:top]
        for entry in entries:
            out.append("")
            out.append(
                f"  #{entry.rank:<4} {entry.total:>6}  {ReportFormatter._tier_label(entry.tier):<8} "
                f"{entry.cumulative_percent:>6.1f}%  {ReportFormatter._sanitize_path(entry.path)}"
            )
            worst = sorted(
                enumerate(entry.file.functions),
                key=lambda pair: (-pair[1].total, pair[1].line),
            )[:show_functions]
            for index, fn in worst:
                if fn.total == 0:
                    continue
                tier = (
                    entry.function_tiers[index].label
                    if index < len(entry.function_tiers) else "-"
                )
                rules = ", ".join(f"{rule} {amount}" for rule, amount in fn.by_rule().items())
                out.append(f"          {fn.total:>4}  {tier:<8} L{fn.line:<5} {fn.function}  ({rules})")

        if top is not None and len(report.entries) > top:
            out.append(f"\n  ... {len(report.entries) - top} more file(s)")

        vital = report.vital_few(pareto_percent)
        if vital:
            out.append("")
            out.append(
                f"  Pareto: {len(vital)} of {report.files_scored} files "
                f"({len(vital) * 100.0 / report.files_scored:.0f}%) carry "
                f"{vital[-1].cumulative_percent:.1f}% of the complexity"
            )

        if report.skipped:
            out.append("")
            out.append(f"  Skipped {report.files_skipped} file(s):")
            for skipped in report.skipped:
                out.append(f"    ✗ {ReportFormatter._sanitize_path(skipped.path)}  ({skipped.diagnostic})")

        out.append(f"\n{thin}")
        return "\n".join(out)

    # ── JSON ──────────────────────────────────────────────────────

    @staticmethod
    def format_json(report: ProjectReport) -> str:
        """Full report as JSON: ordered files with tier, share and per-function breakdown."""
        data = report.to_dict()
        for entry in data["files"]:
            entry["path"] = ReportFormatter._sanitize_path(entry["path"])
        return json.dumps(data, indent=2, allow_nan=False)

    # ── CSV (one row per function) ────────────────────────────────

    CSV_COLUMNS = (
        "rank", "path", "file_total", "file_tier", "cumulative_percent",
        "function", "line", "function_total", "function_tier",
    )

    @staticmethod
    def format_csv(report: ProjectReport) -> str:
        """One row per function; files without functions get a single row."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(ReportFormatter.CSV_COLUMNS)
        for entry in report.entries:
            common = [
                entry.rank,
                ReportFormatter._sanitize_path(entry.path),
                entry.total,
                ReportFormatter._tier_label(entry.tier),
                f"{entry.cumulative_percent:.2f}",
            ]
            if not entry.file.functions:
                writer.writerow(common + ["", "", "", ""])
                continue
            for index, fn in enumerate(entry.file.functions):
                tier = entry.function_tiers[index] if index < len(entry.function_tiers) else None
                writer.writerow(common + [
                    fn.function, fn.line, fn.total, ReportFormatter._tier_label(tier),
                ])
        return buffer.getvalue()

    # ── Compact (grep-like, one line per file) ────────────────────

    @staticmethod
    def format_compact(report: ProjectReport) -> str:
        """``path:total:tier:cumulative%`` per file, ranked."""
        lines = [
            f"{ReportFormatter._sanitize_path(e.path)}:{e.total}:"
            f"{ReportFormatter._tier_label(e.tier)}:{e.cumulative_percent:.1f}%"
            for e in report.entries
        ]
        return "\n".join(lines)
