"""Configuration loading and management for Code Archaeologist.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig / ThresholdConfig)
    2. Global config (~/.code-archaeologist.toml)
    3. Project config (./code-archaeologist.toml)
    4. Explicit config file
    5. Environment variables (ARCH_* prefix)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(history_depth=25)
    >>> config.history_depth
    25
    >>> config.thresholds.dead_code_days
    365
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

GLOBAL_CONFIG_NAME = ".code-archaeologist.toml"
PROJECT_CONFIG_NAME = "code-archaeologist.toml"
ENV_PREFIX = "ARCH_"

DEFAULT_SEARCH_KEYWORDS = ("fix", "bug", "hotfix", "urgent", "hack", "todo", "temporary")
DEFAULT_URGENT_PATTERN = r"fix|bug|hotfix|urgent|critical"


@dataclass(frozen=True)
class ThresholdConfig:
    """Scoring thresholds and penalties.

    Attributes:
        Dead code:
            dead_code_days: Files untouched for longer than this are dead
            suspicious_factor: Fraction of dead_code_days above which a file
                is suspicious

        Change velocity (commits per month):
            days_per_month: Month length used to convert a day span
            velocity_high / velocity_medium: Strict lower bounds of the bands

        Complexity estimate:
            complexity_high / complexity_medium: Strict lower bounds of the bands

        Stability (commit count touching an entity):
            stability_few / stability_some / stability_many: Inclusive lower
                bounds of the "few", "some" and "many changes" bands

        Health score:
            bug_ratio_high/medium/low: Bug-fix ratio bands (percent)
            bug_penalty_high/medium/low: Points subtracted for each band
            concentration_high/medium: Change concentration bands (percent)
            concentration_penalty_high/medium: Points subtracted for each band
            decreasing_trend_penalty: Points subtracted when activity drops
            health_good / health_fair: Strict lower bounds of the bands

        Activity trend:
            trend_window_months: Months in each compared window
            trend_change_pct: Relative change (percent) that counts as a trend

        Insights and recommendations:
            insight_bug_ratio: Bug-fix ratio that triggers a quality warning
            insight_concentration: Concentration that triggers a hotspot warning
            insight_urgent_count: Urgent commit count that triggers a process warning
            stale_days: Days since last touch for a dead-code recommendation
            maintenance_days: Days since last touch for a maintenance recommendation
            legacy_days: File age beyond which maintenance is not suggested
            max_contributors: Blame contributors before documentation is suggested
            max_related_commits: Related commits before a stability warning
            max_urgent_related: Urgent related commits before a quality warning
            significant_change_lines: Changed lines that tie a commit to a function
    """

    # === Dead code ===
    dead_code_days: int = 365
    suspicious_factor: float = 0.7

    # === Change velocity ===
    days_per_month: int = 30
    velocity_high: float = 5.0
    velocity_medium: float = 2.0

    # === Complexity ===
    complexity_high: int = 10
    complexity_medium: int = 5

    # === Stability ===
    stability_few: int = 2
    stability_some: int = 5
    stability_many: int = 15

    # === Health score ===
    bug_ratio_high: float = 30.0
    bug_ratio_medium: float = 20.0
    bug_ratio_low: float = 10.0
    bug_penalty_high: int = 30
    bug_penalty_medium: int = 20
    bug_penalty_low: int = 10
    concentration_high: float = 50.0
    concentration_medium: float = 30.0
    concentration_penalty_high: int = 20
    concentration_penalty_medium: int = 10
    decreasing_trend_penalty: int = 15
    health_good: int = 70
    health_fair: int = 40

    # === Activity trend ===
    trend_window_months: int = 3
    trend_change_pct: float = 20.0

    # === Insights / recommendations ===
    insight_bug_ratio: float = 20.0
    insight_concentration: float = 40.0
    insight_urgent_count: int = 10
    stale_days: int = 365
    maintenance_days: int = 180
    legacy_days: int = 730
    max_contributors: int = 3
    max_related_commits: int = 10
    max_urgent_related: int = 2
    significant_change_lines: int = 10

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        if self.dead_code_days < 0:
            raise ValueError("dead_code_days must be non-negative")
        if not 0.0 < self.suspicious_factor <= 1.0:
            raise ValueError("suspicious_factor must be in (0.0, 1.0]")
        if self.days_per_month < 1:
            raise ValueError("days_per_month must be at least 1")
        if self.velocity_medium > self.velocity_high:
            raise ValueError("velocity_medium must not exceed velocity_high")
        if self.complexity_medium > self.complexity_high:
            raise ValueError("complexity_medium must not exceed complexity_high")
        if not 1 < self.stability_few <= self.stability_some <= self.stability_many:
            raise ValueError("stability bands must satisfy 1 < few <= some <= many")
        if not self.bug_ratio_low <= self.bug_ratio_medium <= self.bug_ratio_high:
            raise ValueError("bug_ratio bands must be ascending (low <= medium <= high)")
        if self.concentration_medium > self.concentration_high:
            raise ValueError("concentration_medium must not exceed concentration_high")
        if self.health_fair > self.health_good:
            raise ValueError("health_fair must not exceed health_good")
        if self.trend_window_months < 1:
            raise ValueError("trend_window_months must be at least 1")

        penalty_fields = [
            "bug_penalty_high",
            "bug_penalty_medium",
            "bug_penalty_low",
            "concentration_penalty_high",
            "concentration_penalty_medium",
            "decreasing_trend_penalty",
        ]
        for field_name in penalty_fields:
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must be non-negative")


DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for analysis execution.

    Attributes:
        History depth:
            history_depth: Commits fetched for a file history
            search_depth: Commits scanned by keyword search
            related_depth: Commits scanned for co-changed files
            related_limit: Co-changed files reported
            function_history_depth: Commits fetched for a function analysis

        Repository report:
            top_n: Entries in top files / top contributors
            timeline_months: Months kept in the reported timeline
            max_urgent_commits: Urgent commits kept in the report

        Keyword matching:
            search_keywords: Substrings that flag a commit in keyword search
            urgent_pattern: Regex (case-insensitive) for urgent commit messages

        Git:
            git_binary: Executable used for history queries
            git_timeout_seconds: Per-call timeout (None = wait indefinitely)
            max_concurrent_git: git processes allowed to run at the same time

        Output control:
            verbosity: Logging verbosity level
    """

    history_depth: int = 10
    search_depth: int = 50
    related_depth: int = 20
    related_limit: int = 5
    function_history_depth: int = 50

    top_n: int = 10
    timeline_months: int = 12
    max_urgent_commits: int = 20

    search_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_SEARCH_KEYWORDS))
    urgent_pattern: str = DEFAULT_URGENT_PATTERN

    git_binary: str = "git"
    git_timeout_seconds: Optional[float] = None
    max_concurrent_git: int = 16

    verbosity: Verbosity = "normal"

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        positive_fields = [
            "history_depth",
            "search_depth",
            "related_depth",
            "related_limit",
            "function_history_depth",
            "top_n",
            "timeline_months",
            "max_urgent_commits",
            "max_concurrent_git",
        ]
        for field_name in positive_fields:
            if getattr(self, field_name) < 1:
                raise ValueError(f"{field_name} must be at least 1")

        if self.git_timeout_seconds is not None and self.git_timeout_seconds <= 0:
            raise ValueError("git_timeout_seconds must be positive")
        if not self.search_keywords:
            raise ValueError("search_keywords must not be empty")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options keep file/env values.

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
        InvalidConfigError: If a merged value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / GLOBAL_CONFIG_NAME
    if global_config.exists():
        merged.update(_load_toml_checked(global_config, "global config"))

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        merged.update(_load_toml_checked(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_checked(config_file, "config file"))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    thresholds_dict = merged.pop("thresholds", None)
    if thresholds_dict is not None:
        if isinstance(thresholds_dict, dict):
            try:
                merged["thresholds"] = ThresholdConfig(**thresholds_dict)
            except TypeError as e:
                raise ConfigurationError(f"Invalid [thresholds] config: {e}")
            except ValueError as e:
                raise InvalidConfigError("thresholds", thresholds_dict, str(e))
        elif isinstance(thresholds_dict, ThresholdConfig):
            merged["thresholds"] = thresholds_dict

    try:
        return AnalysisConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise InvalidConfigError("analysis", merged, str(e))


def _load_toml_checked(path: Path, label: str) -> dict:
    try:
        return _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ARCH_* environment variables.

    Each scalar AnalysisConfig field maps to ``ARCH_<FIELD_NAME>``, e.g.
    ``ARCH_HISTORY_DEPTH=25`` or ``ARCH_GIT_TIMEOUT_SECONDS=30``. List and
    nested fields are not configurable from the environment.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that cannot be expressed in a single variable.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            # Python < 3.11 ships without tomllib
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or the 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
