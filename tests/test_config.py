"""
Tests for cogniscope.core.config — CogniscopeConfig defaults, env, validation.
"""

import pytest

from cogniscope.core.config import CogniscopeConfig
from cogniscope.core.severity import SeverityThresholds
from cogniscope.exceptions import CogniscopeError, ConfigError


# =============================================================================
# Defaults
# =============================================================================

class TestDefaults:

    def test_default_config_is_valid(self):
        assert CogniscopeConfig().validate() is True

    def test_default_thresholds(self):
        cfg = CogniscopeConfig()
        assert cfg.file_thresholds.as_tuple() == (5, 15, 25)
        assert cfg.function_thresholds.as_tuple() == (5, 10, 20)

    def test_nested_scopes_separate_by_default(self):
        assert CogniscopeConfig().separate_nested_scopes is True

    def test_exclude_dirs_has_common_entries(self):
        for d in ("__pycache__", ".git", "dist", "build"):
            assert d in CogniscopeConfig().exclude_dirs

    def test_python_is_a_target(self):
        assert ".py" in CogniscopeConfig().target_extensions

    def test_max_file_bytes(self):
        assert CogniscopeConfig(max_file_size_mb=2).max_file_bytes() == 2 * 1024 * 1024

    def test_to_dict(self):
        data = CogniscopeConfig().to_dict()
        assert data["file_thresholds"]["Critical"] == ">25"
        assert data["separate_nested_scopes"] is True
        assert data["target_extensions"] == [".py"]

    def test_classifier_uses_config_thresholds(self):
        cfg = CogniscopeConfig(file_thresholds=SeverityThresholds(1, 2, 3))
        assert cfg.classifier().file_thresholds == SeverityThresholds(1, 2, 3)


# =============================================================================
# Environment
# =============================================================================

class TestFromEnv:

    def test_no_env_gives_defaults(self):
        assert CogniscopeConfig.from_env() == CogniscopeConfig()

    def test_thresholds_from_env(self, monkeypatch):
        monkeypatch.setenv("COGNISCOPE_FILE_THRESHOLDS", "10,20,30")
        monkeypatch.setenv("COGNISCOPE_FUNCTION_THRESHOLDS", "3, 6, 9")
        cfg = CogniscopeConfig.from_env()
        assert cfg.file_thresholds == SeverityThresholds(10, 20, 30)
        assert cfg.function_thresholds == SeverityThresholds(3, 6, 9)

    def test_bad_thresholds_from_env(self, monkeypatch):
        monkeypatch.setenv("COGNISCOPE_FILE_THRESHOLDS", "30,20,10")
        with pytest.raises(ConfigError, match="ascending"):
            CogniscopeConfig.from_env()

    @pytest.mark.parametrize("raw,expected", [
        ("0", False), ("false", False), ("No", False), ("off", False),
        ("1", True), ("TRUE", True), ("yes", True), ("on", True),
    ])
    def test_separate_nested_from_env(self, monkeypatch, raw, expected):
        monkeypatch.setenv("COGNISCOPE_SEPARATE_NESTED", raw)
        assert CogniscopeConfig.from_env().separate_nested_scopes is expected

    def test_bad_bool_from_env(self, monkeypatch):
        monkeypatch.setenv("COGNISCOPE_SEPARATE_NESTED", "maybe")
        with pytest.raises(ConfigError, match="COGNISCOPE_SEPARATE_NESTED"):
            CogniscopeConfig.from_env()

    def test_workers_from_env(self, monkeypatch):
        monkeypatch.setenv("COGNISCOPE_MAX_WORKERS", "8")
        assert CogniscopeConfig.from_env().max_workers == 8

    def test_bad_workers_from_env(self, monkeypatch):
        monkeypatch.setenv("COGNISCOPE_MAX_WORKERS", "many")
        with pytest.raises(ConfigError, match="integer"):
            CogniscopeConfig.from_env()

    def test_pareto_and_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("COGNISCOPE_PARETO_PERCENT", "90")
        monkeypatch.setenv("COGNISCOPE_LOG_LEVEL", "debug")
        cfg = CogniscopeConfig.from_env()
        assert cfg.pareto_percent == 90.0
        assert cfg.log_level == "DEBUG"

    def test_bad_pareto_from_env(self, monkeypatch):
        monkeypatch.setenv("COGNISCOPE_PARETO_PERCENT", "most")
        with pytest.raises(ConfigError, match="number"):
            CogniscopeConfig.from_env()


# =============================================================================
# Validation
# =============================================================================

class TestValidate:

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)
        assert issubclass(ConfigError, CogniscopeError)

    def test_non_ascending_file_thresholds(self):
        cfg = CogniscopeConfig(file_thresholds=SeverityThresholds(10, 10, 20))
        with pytest.raises(ConfigError, match="Invalid file thresholds"):
            cfg.validate()

    def test_non_ascending_function_thresholds(self):
        cfg = CogniscopeConfig(function_thresholds=SeverityThresholds(5, 4, 20))
        with pytest.raises(ConfigError, match="Invalid function thresholds"):
            cfg.validate()

    def test_thresholds_wrong_type(self):
        cfg = CogniscopeConfig(file_thresholds=(5, 15, 25))
        with pytest.raises(ConfigError, match="SeverityThresholds"):
            cfg.validate()

    @pytest.mark.parametrize("workers", [0, -2, True, 2.5])
    def test_bad_max_workers(self, workers):
        with pytest.raises(ConfigError, match="max_workers"):
            CogniscopeConfig(max_workers=workers).validate()

    @pytest.mark.parametrize("percent", [0, -1, 100.5])
    def test_bad_pareto_percent(self, percent):
        with pytest.raises(ConfigError, match="pareto_percent"):
            CogniscopeConfig(pareto_percent=percent).validate()

    def test_bad_log_level(self):
        with pytest.raises(ConfigError, match="log level"):
            CogniscopeConfig(log_level="LOUD").validate()
