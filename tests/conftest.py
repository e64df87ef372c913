"""
Shared fixtures for the Cogniscope test suite.
"""

import sys
import warnings
from pathlib import Path

import pytest

# Filter deprecation warnings from pytest-asyncio; we cannot fix the library.
warnings.filterwarnings(
    "ignore",
    category=DeprecationWarning,
    module="pytest_asyncio",
)

# Ensure the src/ directory is on the import path so that
# cogniscope.core.engine / cogniscope.core.report / etc. can be imported.
SRC_ROOT = Path(__file__).resolve().parent.parent / "src"
sys.path.insert(0, str(SRC_ROOT))


_COGNISCOPE_ENV = (
    "COGNISCOPE_FILE_THRESHOLDS",
    "COGNISCOPE_FUNCTION_THRESHOLDS",
    "COGNISCOPE_SEPARATE_NESTED",
    "COGNISCOPE_MAX_WORKERS",
    "COGNISCOPE_PARETO_PERCENT",
    "COGNISCOPE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep a developer's COGNISCOPE_* settings out of the tests."""
    for name in _COGNISCOPE_ENV:
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Fixtures: sample source code
# =============================================================================

@pytest.fixture
def python_source() -> str:
    """Module with one function scoring 6 and one scoring 0.

    ``check``: if (+1), ``or`` (+1), ``not`` (+1), for (+1),
    nested if (+2).  ``identity`` has no control flow.
    """
    return (
        "import os\n"
        "\n"
        "def check(items, flag):\n"
        "    if flag or not items:\n"
        "        return None\n"
        "    for item in items:\n"
        "        if item > 0:\n"
        "            continue\n"
        "    return items\n"
        "\n"
        "\n"
        "def identity(value):\n"
        "    return value\n"
    )


@pytest.fixture
def nested_source() -> str:
    """A function with a closure and a recursive call.

    Separate scopes: ``walk`` = if (+1) + recursion (+1) = 2,
    ``walk.visit`` = for (+1) + nested if (+2) = 3.
    Folded: the closure body sits one level deeper, so the for scores
    +2 and its if +3, giving 2 + 5 = 7.
    """
    return (
        "def walk(tree):\n"
        "    def visit(children):\n"
        "        for child in children:\n"
        "            if child:\n"
        "                print(child)\n"
        "    if tree:\n"
        "        walk(tree.left)\n"
        "    visit(tree)\n"
    )


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """
    Temporary project with three scored files, one broken file and an
    excluded directory.

    Totals: ``pkg/heavy.py`` 6, ``pkg/light.py`` 1, ``flat.py`` 0.
    """
    pkg = tmp_path / "pkg"
    pkg.mkdir()
    (pkg / "heavy.py").write_text(
        "def heavy(rows):\n"
        "    for row in rows:\n"              # +1
        "        if row:\n"                   # +2
        "            while row.next:\n"       # +3
        "                row = row.next\n",
        encoding="utf-8",
    )
    (pkg / "light.py").write_text(
        "def light(x):\n"
        "    if x:\n"                         # +1
        "        return 1\n"
        "    return 0\n",
        encoding="utf-8",
    )
    (tmp_path / "flat.py").write_text(
        "def flat():\n"
        "    return 42\n",
        encoding="utf-8",
    )
    (tmp_path / "broken.py").write_text(
        "def broken(:\n"
        "    pass\n",
        encoding="utf-8",
    )

    # Excluded directory (should be ignored)
    excluded = tmp_path / "__pycache__"
    excluded.mkdir()
    (excluded / "cached.py").write_text("def cached():\n    if x:\n        pass\n", encoding="utf-8")

    return tmp_path
