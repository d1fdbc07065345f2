"""Load srcverify configuration from YAML, environment and CLI overrides.

Precedence, lowest to highest: built-in defaults, ``.srcverify.yaml`` (or an
explicit ``--config`` file), environment variables, CLI flags.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Literal

import yaml  # type: ignore[import-untyped]

from srcverify.errors import ConfigError
from srcverify.paths import determine_reports_directory

TimestampMode = Literal["deterministic", "wallclock"]

DEFAULT_CONFIG_FILENAME = ".srcverify.yaml"
DIFF_BACKENDS: tuple[str, ...] = ("difflib", "git")
TIMESTAMP_MODES: tuple[str, ...] = ("deterministic", "wallclock")

ENV_GITHUB_TOKEN = "SRCVERIFY_GITHUB_TOKEN"
ENV_GITHUB_TOKEN_FALLBACK = "GITHUB_TOKEN"
ENV_REPORTS_DIR = "SRCVERIFY_REPORTS_DIR"

_KNOWN_KEYS = frozenset(
    {
        "ignore_source",
        "ignore_artifact",
        "github_token",
        "diff_backend",
        "diff_workers",
        "batch_workers",
        "timestamp_mode",
        "reports_dir",
        "http_timeout",
    }
)


@dataclass(frozen=True)
class VerifyConfig:
    """Normalized verification settings."""

    ignore_source: tuple[str, ...] = ()
    ignore_artifact: tuple[str, ...] = ()
    github_token: str | None = None
    diff_backend: str = "difflib"
    diff_workers: int = 1
    batch_workers: int = 4
    timestamp_mode: TimestampMode = "wallclock"
    reports_dir: Path = field(default_factory=determine_reports_directory)
    http_timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VerifyConfig:
        """Validate a parsed config mapping."""
        unknown = sorted(set(data) - _KNOWN_KEYS)
        if unknown:
            raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key in ("ignore_source", "ignore_artifact"):
            if key in data:
                values[key] = _string_tuple(key, data[key])
        if data.get("github_token") is not None:
            values["github_token"] = str(data["github_token"])
        if "diff_backend" in data:
            values["diff_backend"] = _choice("diff_backend", data["diff_backend"], DIFF_BACKENDS)
        if "timestamp_mode" in data:
            values["timestamp_mode"] = _choice("timestamp_mode", data["timestamp_mode"], TIMESTAMP_MODES)
        for key in ("diff_workers", "batch_workers"):
            if key in data:
                values[key] = _positive_int(key, data[key])
        if "http_timeout" in data:
            try:
                values["http_timeout"] = float(data["http_timeout"])
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"http_timeout must be a number, got {data['http_timeout']!r}") from exc
        if data.get("reports_dir") is not None:
            values["reports_dir"] = Path(str(data["reports_dir"])).expanduser()
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> VerifyConfig:
        """Apply non-empty overrides; extra ignore patterns are appended."""
        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if key in ("ignore_source", "ignore_artifact"):
                extra = tuple(value)
                if extra:
                    changes[key] = getattr(self, key) + extra
                continue
            changes[key] = value
        return replace(self, **changes) if changes else self


def _string_tuple(key: str, value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{key} must be a list of strings")
    return tuple(value)


def _choice(key: str, value: Any, allowed: tuple[str, ...]) -> str:
    normalized = str(value).strip().lower()
    if normalized not in allowed:
        raise ConfigError(f"{key} must be one of: {', '.join(allowed)} (got {value!r})")
    return normalized


def _positive_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{key} must be a positive integer, got {value!r}")
    return value


def load_config(path: Path | None = None, *, cwd: Path | None = None) -> VerifyConfig:
    """Load config from ``path`` or ``<cwd>/.srcverify.yaml`` and apply env overrides."""
    explicit = path is not None
    config_path = path or (cwd or Path.cwd()) / DEFAULT_CONFIG_FILENAME

    config = VerifyConfig()
    if config_path.exists():
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Malformed YAML config at {config_path}: {exc}") from exc
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config at {config_path} must be a mapping at top level")
        config = VerifyConfig.from_dict(raw)
    elif explicit:
        raise ConfigError(f"Config file not found: {config_path}")

    return apply_env(config)


def apply_env(config: VerifyConfig, environ: dict[str, str] | None = None) -> VerifyConfig:
    env = os.environ if environ is None else environ
    token = env.get(ENV_GITHUB_TOKEN, "").strip() or env.get(ENV_GITHUB_TOKEN_FALLBACK, "").strip()
    reports_dir = env.get(ENV_REPORTS_DIR, "").strip()
    return config.with_overrides(
        github_token=token or None,
        reports_dir=Path(reports_dir).expanduser() if reports_dir else None,
    )
