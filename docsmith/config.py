"""Configuration loading for docsmith (.docsmith.yml and the user credential store)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".docsmith.yml"
API_KEY_ENV = "DOCSMITH_API_KEY"

DEFAULT_EXCLUDE_PATTERNS: Tuple[str, ...] = (
    r"^\.git$",
    r"^node_modules$",
    r"^\.DS_Store$",
    r".*\.lock$",
    r".*\.log$",
    r"^dist$",
    r"^build$",
    r"^coverage$",
    r"^\.env.*",
    r"^__pycache__$",
    r"^\.venv$",
    r"^package-lock\.json$",
)


@dataclass(frozen=True)
class ScannerConfig:
    """Exclusion rules applied to entry base names while scanning."""

    exclude_patterns: Tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS


@dataclass(frozen=True)
class BadgeConfig:
    """Style defaults for badge synthesis."""

    style: Optional[str] = None
    default_style: str = "flat-square"
    popular_star_threshold: int = 1000


@dataclass(frozen=True)
class LLMConfig:
    """Generation backend settings from .docsmith.yml."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None


@dataclass(frozen=True)
class ReadmeConfig:
    output: str = "README.md"
    extra_instructions: Optional[str] = None


@dataclass(frozen=True)
class DocsmithConfig:
    """Represents the settings defined in .docsmith.yml."""

    root: Path
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    badges: BadgeConfig = field(default_factory=BadgeConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    readme: ReadmeConfig = field(default_factory=ReadmeConfig)


def load_config(config_path: Path) -> DocsmithConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocsmithConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    scanner_data = _as_dict(data.get("scanner"))
    patterns = list(DEFAULT_EXCLUDE_PATTERNS)
    if "exclude" in scanner_data:
        patterns = _as_str_list(scanner_data.get("exclude"))
    patterns.extend(_as_str_list(scanner_data.get("extra_exclude")))
    scanner = ScannerConfig(exclude_patterns=tuple(patterns))

    badge_data = _as_dict(data.get("badges"))
    threshold = _as_int(badge_data.get("popular_star_threshold"))
    badges = BadgeConfig(
        style=_as_str(badge_data.get("style")),
        default_style=_as_str(badge_data.get("default_style")) or BadgeConfig.default_style,
        popular_star_threshold=(
            threshold if threshold is not None else BadgeConfig.popular_star_threshold
        ),
    )

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        temperature=_as_float(llm_data.get("temperature")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
    )

    readme_data = _as_dict(data.get("readme"))
    readme = ReadmeConfig(
        output=_as_str(readme_data.get("output")) or ReadmeConfig.output,
        extra_instructions=_as_str(readme_data.get("extra_instructions")),
    )

    return DocsmithConfig(root=root, scanner=scanner, badges=badges, llm=llm, readme=readme)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


# User credential store


def user_config_path() -> Path:
    """Return the JSON file holding the user's API key."""
    base = os.getenv("XDG_CONFIG_HOME")
    config_dir = Path(base) if base else Path.home() / ".config"
    return config_dir / "docsmith" / "config.json"


def save_api_key(api_key: str, path: Path | None = None) -> Path:
    """Persist the API key for later runs and return the file it was written to."""
    api_key = api_key.strip()
    if not api_key:
        raise ConfigError("API key cannot be empty")
    target = path or user_config_path()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "api_key": api_key,
            "configured_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        target.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to save API key: {exc}") from exc
    return target


def load_api_key(path: Path | None = None, *, environ: Mapping[str, str] | None = None) -> str:
    """Return the API key from the environment or the user credential store."""
    env = os.environ if environ is None else environ
    from_env = env.get(API_KEY_ENV)
    if from_env:
        return from_env

    source = path or user_config_path()
    hint = 'Run "docsmith configure" to set up your API key.'
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError("API key not configured.", hint=hint) from exc
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Failed to read API key: {exc}", hint=hint) from exc

    api_key = payload.get("api_key") if isinstance(payload, dict) else None
    if not isinstance(api_key, str) or not api_key.strip():
        raise ConfigError("API key not found in configuration.", hint=hint)
    return api_key


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "API_KEY_ENV",
    "BadgeConfig",
    "CONFIG_FILENAME",
    "DEFAULT_EXCLUDE_PATTERNS",
    "DocsmithConfig",
    "LLMConfig",
    "ReadmeConfig",
    "ScannerConfig",
    "load_api_key",
    "load_config",
    "save_api_key",
    "user_config_path",
]
