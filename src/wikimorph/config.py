"""
Runtime settings.

Settings come from (lowest to highest precedence) the dataclass defaults, an
optional YAML file, and WIKIMORPH_* environment variables:

    WIKIMORPH_MAX_DEPTH     recursion bound for decomposition
    WIKIMORPH_API_URL       MediaWiki api.php endpoint
    WIKIMORPH_USER_AGENT    User-Agent sent to the API
    WIKIMORPH_TIMEOUT       request timeout in seconds
    WIKIMORPH_CACHE_DIR     directory holding the local snapshot
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from wikimorph.errors import ConfigError


DEFAULT_MAX_DEPTH = 30
DEFAULT_API_URL = "https://en.wiktionary.org/w/api.php"
DEFAULT_DUMP_RSS_URL = (
    "https://dumps.wikimedia.org/enwiktionary/latest/"
    "enwiktionary-latest-pages-articles.xml.bz2-rss.xml"
)
USER_AGENT = "wikimorph/0.1 (English morpheme splitter; python-requests)"

ENV_OVERRIDES = {
    "WIKIMORPH_MAX_DEPTH": "max_depth",
    "WIKIMORPH_API_URL": "api_url",
    "WIKIMORPH_USER_AGENT": "user_agent",
    "WIKIMORPH_TIMEOUT": "timeout",
    "WIKIMORPH_CACHE_DIR": "cache_dir",
}


def default_cache_dir() -> Path:
    xdg = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg) if xdg else Path.home() / ".cache"
    return base / "wikimorph"


@dataclass(frozen=True)
class Settings:
    max_depth: int = DEFAULT_MAX_DEPTH
    api_url: str = DEFAULT_API_URL
    user_agent: str = USER_AGENT
    timeout: float = 30.0
    retries: int = 2
    retry_delay: float = 1.0
    cache_dir: Optional[Path] = None
    snapshot_name: str = "wikitext_en.jsonl"
    dump_rss_url: str = DEFAULT_DUMP_RSS_URL

    def __post_init__(self):
        if self.cache_dir is None:
            object.__setattr__(self, "cache_dir", default_cache_dir())
        if self.max_depth < 1:
            raise ConfigError(f"max_depth must be >= 1, got {self.max_depth}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.retries < 0:
            raise ConfigError(f"retries must be >= 0, got {self.retries}")

    @property
    def snapshot_path(self) -> Path:
        return self.cache_dir / self.snapshot_name


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw YAML/env value to the type of the Settings field."""
    if name in ("max_depth", "retries"):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{name} must be an integer, got {value!r}")
    if name in ("timeout", "retry_delay"):
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{name} must be a number, got {value!r}")
    if name == "cache_dir":
        return Path(value).expanduser()
    return str(value)


def settings_from_mapping(values: Mapping[str, Any], base: Optional[Settings] = None) -> Settings:
    """Apply a mapping of overrides to `base` (or the defaults)."""
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")
    coerced = {k: _coerce(k, v) for k, v in values.items() if v is not None}
    return replace(base or Settings(), **coerced)


def load_settings(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Load settings from an optional YAML file plus environment overrides.

    Args:
        path: YAML file with a mapping of setting names to values
        environ: Environment to read overrides from (defaults to os.environ)

    Raises:
        ConfigError: if the file is missing, not a mapping, or has bad values
    """
    settings = Settings()

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {path}")
        settings = settings_from_mapping(data, settings)

    env = os.environ if environ is None else environ
    overrides = {field: env[var] for var, field in ENV_OVERRIDES.items() if env.get(var)}
    if overrides:
        settings = settings_from_mapping(overrides, settings)

    return settings
