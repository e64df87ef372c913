"""
Tests for cogniscope.core.severity — thresholds, tiers, report annotation.
"""

import pytest

from cogniscope.core.engine import ComplexityScore, Increment, Rule
from cogniscope.core.nodes import SourceLocation
from cogniscope.core.report import aggregate_file, aggregate_project
from cogniscope.core.severity import (
    DEFAULT_FILE_THRESHOLDS,
    DEFAULT_FUNCTION_THRESHOLDS,
    SeverityClassifier,
    SeverityThresholds,
    SeverityTier,
)
from cogniscope.exceptions import ConfigError


# =============================================================================
# Tiers
# =============================================================================

class TestSeverityTier:

    def test_tiers_are_ordered(self):
        assert SeverityTier.LOW < SeverityTier.MEDIUM < SeverityTier.HIGH < SeverityTier.CRITICAL

    def test_labels(self):
        assert [t.label for t in SeverityTier] == ["Low", "Medium", "High", "Critical"]


# =============================================================================
# Thresholds
# =============================================================================

class TestSeverityThresholds:

    @pytest.mark.parametrize("total,tier", [
        (0, SeverityTier.LOW),
        (5, SeverityTier.LOW),
        (6, SeverityTier.MEDIUM),
        (15, SeverityTier.MEDIUM),
        (16, SeverityTier.HIGH),
        (25, SeverityTier.HIGH),
        (26, SeverityTier.CRITICAL),
        (1000, SeverityTier.CRITICAL),
    ])
    def test_default_file_bounds(self, total, tier):
        assert DEFAULT_FILE_THRESHOLDS.classify(total) is tier

    @pytest.mark.parametrize("total,tier", [
        (5, SeverityTier.LOW),
        (10, SeverityTier.MEDIUM),
        (11, SeverityTier.HIGH),
        (20, SeverityTier.HIGH),
        (21, SeverityTier.CRITICAL),
    ])
    def test_default_function_bounds(self, total, tier):
        assert DEFAULT_FUNCTION_THRESHOLDS.classify(total) is tier

    def test_monotonic(self):
        table = SeverityThresholds(2, 7, 9)
        tiers = [table.classify(total) for total in range(0, 40)]
        assert tiers == sorted(tiers)

    @pytest.mark.parametrize("bounds", [(5, 5, 10), (10, 5, 20), (1, 2, 2), (3, 2, 1)])
    def test_non_ascending_rejected(self, bounds):
        with pytest.raises(ConfigError, match="strictly ascending"):
            SeverityThresholds(*bounds).validate()

    def test_negative_rejected(self):
        with pytest.raises(ConfigError, match=">= 0"):
            SeverityThresholds(-1, 2, 3).validate()

    def test_non_integer_rejected(self):
        with pytest.raises(ConfigError, match="integer"):
            SeverityThresholds(1.5, 2, 3).validate()

    def test_describe(self):
        assert SeverityThresholds(5, 15, 25).describe() == {
            "Low": "0-5", "Medium": "6-15", "High": "16-25", "Critical": ">25",
        }

    def test_parse(self):
        assert SeverityThresholds.parse(" 4, 8 ,12") == SeverityThresholds(4, 8, 12)

    @pytest.mark.parametrize("text", ["5,15", "a,b,c", "1,2,3,4", "9,8,7", ""])
    def test_parse_rejects_bad_input(self, text):
        with pytest.raises(ConfigError):
            SeverityThresholds.parse(text)


# =============================================================================
# Classifier
# =============================================================================

def _file(path, *totals):
    scores = []
    for i, total in enumerate(totals):
        loc = SourceLocation(path, i + 1)
        breakdown = (Increment(Rule.BRANCH, total, loc),) if total else ()
        scores.append(ComplexityScore(f"f{i}", loc, total, breakdown))
    return aggregate_file(path, scores)


class TestSeverityClassifier:

    def test_invalid_thresholds_rejected_at_construction(self):
        with pytest.raises(ConfigError):
            SeverityClassifier(SeverityThresholds(3, 2, 1))

    def test_annotate_sets_file_and_function_tiers(self):
        report = aggregate_project([_file("a.py", 12, 3), _file("b.py", 30)])
        annotated = SeverityClassifier().annotate(report)

        by_path = {e.path: e for e in annotated.entries}
        assert by_path["b.py"].tier is SeverityTier.CRITICAL
        assert by_path["b.py"].function_tiers == (SeverityTier.CRITICAL,)
        # File total 15 is Medium; the 12-point function alone is High.
        assert by_path["a.py"].tier is SeverityTier.MEDIUM
        assert by_path["a.py"].function_tiers == (SeverityTier.HIGH, SeverityTier.LOW)

    def test_annotate_leaves_input_untouched(self):
        report = aggregate_project([_file("a.py", 12)])
        SeverityClassifier().annotate(report)
        assert report.entries[0].tier is None

    def test_annotate_keeps_order_and_percentages(self):
        report = aggregate_project([_file("a.py", 1), _file("b.py", 3)])
        annotated = SeverityClassifier().annotate(report)
        assert [e.path for e in annotated.entries] == [e.path for e in report.entries]
        assert [e.cumulative_percent for e in annotated.entries] == \
            [e.cumulative_percent for e in report.entries]

    def test_custom_thresholds(self):
        classifier = SeverityClassifier(SeverityThresholds(0, 1, 2), SeverityThresholds(0, 1, 2))
        assert classifier.classify_file(3) is SeverityTier.CRITICAL
        assert classifier.classify_function(1) is SeverityTier.MEDIUM
