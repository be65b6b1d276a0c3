"""Tests for config.py - defaults, validation and source merging."""

import os

import pytest

from code_archaeologist.config import AnalysisConfig, ThresholdConfig, load_config
from code_archaeologist.exceptions import ConfigurationError, InvalidConfigError


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """No global/project config files and no ARCH_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("ARCH_"):
            monkeypatch.delenv(key)
    return tmp_path


class TestDefaults:
    def test_analysis_defaults(self):
        config = AnalysisConfig()
        assert config.history_depth == 10
        assert config.search_depth == 50
        assert config.related_depth == 20
        assert config.related_limit == 5
        assert config.top_n == 10
        assert config.git_binary == "git"
        assert config.max_concurrent_git == 16
        assert "fix" in config.search_keywords

    def test_threshold_defaults(self):
        thresholds = ThresholdConfig()
        assert thresholds.dead_code_days == 365
        assert thresholds.suspicious_factor == 0.7
        assert thresholds.days_per_month == 30

    def test_frozen(self):
        with pytest.raises(Exception):
            AnalysisConfig().history_depth = 5


class TestValidation:
    def test_non_positive_depth(self):
        with pytest.raises(ValueError):
            AnalysisConfig(history_depth=0)

    def test_bad_timeout(self):
        with pytest.raises(ValueError):
            AnalysisConfig(git_timeout_seconds=0)

    def test_bad_git_concurrency(self):
        with pytest.raises(ValueError):
            AnalysisConfig(max_concurrent_git=0)

    def test_bad_suspicious_factor(self):
        with pytest.raises(ValueError):
            ThresholdConfig(suspicious_factor=1.5)

    def test_inverted_bands(self):
        with pytest.raises(ValueError):
            ThresholdConfig(velocity_medium=10.0, velocity_high=5.0)

    def test_negative_penalty(self):
        with pytest.raises(ValueError):
            ThresholdConfig(bug_penalty_low=-1)


class TestLoadConfig:
    """Merging of files, environment and overrides."""

    def test_plain_defaults(self):
        assert load_config() == AnalysisConfig()

    def test_overrides_ignore_none(self):
        config = load_config(history_depth=None, top_n=3)
        assert config.history_depth == 10
        assert config.top_n == 3

    def test_verbose_and_quiet_flags(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False).verbosity == "normal"

    def test_project_file(self, isolated_config):
        (isolated_config / "code-archaeologist.toml").write_text(
            'history_depth = 25\nurgent_pattern = "oops"\n\n[thresholds]\ndead_code_days = 90\n'
        )
        config = load_config()
        assert config.history_depth == 25
        assert config.urgent_pattern == "oops"
        assert config.thresholds.dead_code_days == 90

    def test_explicit_file_beats_project_file(self, isolated_config):
        (isolated_config / "code-archaeologist.toml").write_text("top_n = 4\n")
        explicit = isolated_config / "custom.toml"
        explicit.write_text("top_n = 7\n")
        assert load_config(config_file=explicit).top_n == 7

    def test_global_file(self, isolated_config):
        (isolated_config / "home" / ".code-archaeologist.toml").write_text("related_limit = 2\n")
        assert load_config().related_limit == 2

    def test_env_beats_files(self, isolated_config, monkeypatch):
        (isolated_config / "code-archaeologist.toml").write_text("history_depth = 25\n")
        monkeypatch.setenv("ARCH_HISTORY_DEPTH", "40")
        monkeypatch.setenv("ARCH_GIT_TIMEOUT_SECONDS", "2.5")
        config = load_config()
        assert config.history_depth == 40
        assert config.git_timeout_seconds == 2.5

    def test_override_beats_env(self, monkeypatch):
        monkeypatch.setenv("ARCH_TOP_N", "5")
        assert load_config(top_n=8).top_n == 8

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("ARCH_HISTORY_DEPTH", "many")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_missing_file(self, isolated_config):
        with pytest.raises(ConfigurationError):
            load_config(config_file=isolated_config / "absent.toml")

    def test_malformed_toml(self, isolated_config):
        bad = isolated_config / "bad.toml"
        bad.write_text("history_depth = = 3\n")
        with pytest.raises(ConfigurationError):
            load_config(config_file=bad)

    def test_unknown_key(self, isolated_config):
        bad = isolated_config / "bad.toml"
        bad.write_text("colour = 'blue'\n")
        with pytest.raises(ConfigurationError):
            load_config(config_file=bad)

    def test_invalid_value(self):
        with pytest.raises(InvalidConfigError):
            load_config(history_depth=0)

    def test_invalid_threshold(self, isolated_config):
        bad = isolated_config / "bad.toml"
        bad.write_text("[thresholds]\nsuspicious_factor = 3.0\n")
        with pytest.raises(InvalidConfigError):
            load_config(config_file=bad)
