"""
Tests for the Cogniscope client API (cogniscope.client.Cogniscope).

Covers the public facade: analyze(), analyze_files(), analyze_source(),
async variants, config construction, and the error types it raises.
"""

import pytest

import cogniscope
from cogniscope import (
    AnalysisError,
    Cogniscope,
    CogniscopeConfig,
    ConfigError,
    ParseError,
    SeverityThresholds,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def config():
    """CogniscopeConfig with test defaults."""
    return CogniscopeConfig(max_workers=2)


@pytest.fixture
def client(config):
    """Cogniscope client with explicit config."""
    return Cogniscope(config=config)


# =============================================================================
# Construction
# =============================================================================

class TestCogniscopeConstruction:
    """Client construction from config, kwargs and env."""

    def test_construct_with_explicit_config(self, config):
        client = Cogniscope(config=config)
        assert client.config is config

    def test_construct_from_kwargs_overrides_env(self, monkeypatch):
        monkeypatch.setenv("COGNISCOPE_MAX_WORKERS", "7")
        client = Cogniscope(separate_nested_scopes=False)
        assert client.config.separate_nested_scopes is False
        assert client.config.max_workers == 7

    def test_construct_from_env(self, monkeypatch):
        monkeypatch.setenv("COGNISCOPE_FILE_THRESHOLDS", "1,2,3")
        assert Cogniscope().config.file_thresholds == SeverityThresholds(1, 2, 3)

    def test_invalid_config_rejected(self):
        with pytest.raises(ConfigError):
            Cogniscope(config=CogniscopeConfig(max_workers=0))

    def test_invalid_kwargs_rejected(self):
        with pytest.raises(ConfigError):
            Cogniscope(file_thresholds=SeverityThresholds(3, 3, 3))


# =============================================================================
# analyze() / analyze_files()
# =============================================================================

class TestAnalyze:

    def test_analyze_directory(self, client, tmp_project):
        result = client.analyze(tmp_project)
        assert result.total == 7
        assert result.report.entries[0].path == "pkg/heavy.py"

    def test_analyze_accepts_str(self, client, tmp_project):
        assert client.analyze(str(tmp_project)).files_scored == 3

    def test_analyze_sequential_matches_parallel(self, client, tmp_project):
        assert client.analyze(tmp_project, parallel=False).report == \
            client.analyze(tmp_project).report

    def test_analyze_rejects_non_directory(self, client, tmp_project):
        with pytest.raises(AnalysisError, match="is not a directory"):
            client.analyze(tmp_project / "flat.py")

    def test_analyze_files(self, client, tmp_project):
        result = client.analyze_files([tmp_project / "pkg" / "light.py",
                                       tmp_project / "broken.py"])
        assert result.files_scored == 1
        assert result.files_skipped == 1
        assert result.total == 1

    def test_analyze_files_same_file_twice(self, client, tmp_project):
        light = tmp_project / "pkg" / "light.py"
        result = client.analyze_files([light, f"{tmp_project}/pkg/./light.py"])
        assert result.files_scored == 1
        assert result.total == 1


# =============================================================================
# analyze_source()
# =============================================================================

class TestAnalyzeSource:

    def test_scores_each_function(self, client, python_source):
        report = client.analyze_source(python_source, "sample.py")
        assert report.path == "sample.py"
        assert [(fn.function, fn.total) for fn in report.functions] == [
            ("check", 6), ("identity", 0),
        ]
        assert report.total == 6

    def test_nested_scopes_follow_config(self, nested_source):
        separate = Cogniscope(config=CogniscopeConfig()).analyze_source(nested_source)
        folded = Cogniscope(config=CogniscopeConfig(separate_nested_scopes=False)) \
            .analyze_source(nested_source)
        assert [fn.function for fn in separate.functions] == ["walk", "walk.visit"]
        assert separate.total == 5
        assert [fn.function for fn in folded.functions] == ["walk"]
        assert folded.total == 7

    def test_default_path(self, client):
        report = client.analyze_source("def f():\n    pass\n")
        assert report.path == "<string>"
        assert report.functions[0].location.file == "<string>"

    def test_syntax_error_raises_parse_error(self, client):
        with pytest.raises(ParseError, match="snippet.py"):
            client.analyze_source("def f(:\n", "snippet.py")


# =============================================================================
# Async variants
# =============================================================================

class TestAsyncApi:
    """Async methods: aanalyze, aanalyze_source."""

    @pytest.mark.asyncio
    async def test_aanalyze_returns_same_as_analyze(self, client, tmp_project):
        sync_result = client.analyze(tmp_project)
        async_result = await client.aanalyze(tmp_project)
        assert async_result.report == sync_result.report

    @pytest.mark.asyncio
    async def test_aanalyze_raises_on_missing_directory(self, client, tmp_path):
        with pytest.raises(AnalysisError):
            await client.aanalyze(tmp_path / "missing")

    @pytest.mark.asyncio
    async def test_aanalyze_source(self, client, python_source):
        report = await client.aanalyze_source(python_source, "sample.py")
        assert report.total == 6

    @pytest.mark.asyncio
    async def test_aanalyze_source_raises_parse_error(self, client):
        with pytest.raises(ParseError):
            await client.aanalyze_source("if\n")


# =============================================================================
# Health
# =============================================================================

class TestHealth:

    def test_client_health(self, client):
        status = client.health()
        assert status["version"] == cogniscope.__version__
        assert status["file_thresholds"] == [5, 15, 25]
        assert status["function_thresholds"] == [5, 10, 20]

    def test_module_health(self):
        status = cogniscope.health(CogniscopeConfig(max_workers=3))
        assert status == {
            "version": cogniscope.__version__,
            "separate_nested_scopes": True,
            "max_workers": 3,
        }
