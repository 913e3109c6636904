"""Runtime configuration for slangdex.

Settings come from environment variables, optionally overlaid by a YAML
file whose path is given in ``SLANGDEX_CONFIG``.  Keys in the YAML file use
the :class:`Settings` field names::

    data_dir: /var/lib/slangdex
    trending_window_hours: 24
    classifier_timeout: 5
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from slangdex import __version__
from slangdex.errors import ValidationError

DEFAULT_DATA_DIR = Path.home() / ".slangdex"
DEFAULT_MODERATION_URL = "https://api.openai.com/v1"
DEFAULT_PROFANITY_MODEL = "claude-3-5-haiku-20241022"

# env var -> Settings field
_ENV_VARS: dict[str, str] = {
    "SLANGDEX_DATA_DIR": "data_dir",
    "SLANGDEX_TRENDING_WINDOW_HOURS": "trending_window_hours",
    "SLANGDEX_SPAM_TOKEN_RATIO": "spam_token_ratio",
    "SLANGDEX_MAX_CONTENT_LENGTH": "max_content_length",
    "SLANGDEX_CATEGORY_THRESHOLD": "category_threshold",
    "SLANGDEX_CLASSIFIER_TIMEOUT": "classifier_timeout",
    "SLANGDEX_MODERATION_URL": "moderation_url",
    "OPENAI_API_KEY": "openai_api_key",
    "ANTHROPIC_API_KEY": "anthropic_api_key",
    "SLANGDEX_PROFANITY_MODEL": "profanity_model",
    "SLANGDEX_SESSION_HOURS": "session_hours",
    "SLANGDEX_DEFAULT_PAGE_SIZE": "default_page_size",
    "SLANGDEX_MAX_PAGE_SIZE": "max_page_size",
    "SLANGDEX_TRUST_FORWARDED_FOR": "trust_forwarded_for",
    "SLANGDEX_LOG_LEVEL": "log_level",
    "GITHUB_URL": "github_url",
    "ABOUT_TEXT": "about_text",
    "AUTHOR_NAME": "author_name",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """All tunables for the glossary engine and web backend."""

    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)

    # Trending
    trending_window_hours: int = 24

    # Moderation pipeline
    spam_token_ratio: float = 0.3
    max_content_length: int = 300
    category_threshold: float = 0.1
    classifier_timeout: float = 10.0
    moderation_url: str = DEFAULT_MODERATION_URL
    openai_api_key: str = field(default="", repr=False)
    anthropic_api_key: str = field(default="", repr=False)
    profanity_model: str = DEFAULT_PROFANITY_MODEL

    # Web
    session_hours: int = 24
    default_page_size: int = 25
    max_page_size: int = 100
    trust_forwarded_for: bool = False
    log_level: str = "INFO"

    # About page
    github_url: str = "https://github.com/yourusername"
    about_text: str = "A community-driven dictionary of tech terms and slang"
    author_name: str = "Your Name"
    version: str = __version__

    def __post_init__(self) -> None:
        if self.trending_window_hours <= 0:
            raise ValidationError("trending_window_hours must be positive")
        if not 0 < self.spam_token_ratio <= 1:
            raise ValidationError("spam_token_ratio must be in (0, 1]")
        if self.max_content_length <= 0:
            raise ValidationError("max_content_length must be positive")
        if not 0 <= self.category_threshold <= 1:
            raise ValidationError("category_threshold must be in [0, 1]")
        if self.classifier_timeout <= 0:
            raise ValidationError("classifier_timeout must be positive")
        if not 1 <= self.default_page_size <= self.max_page_size:
            raise ValidationError("default_page_size must be between 1 and max_page_size")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValidationError(f"Unknown log level: {self.log_level}")


def _coerce(name: str, raw: Any) -> Any:
    """Convert a raw env/YAML value to the type of the named field."""
    default = getattr(Settings(), name)
    try:
        if isinstance(default, bool):
            if isinstance(raw, bool):
                return raw
            return str(raw).strip().lower() in _TRUE_VALUES
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
        if isinstance(default, Path):
            return Path(raw).expanduser()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid value for {name}: {raw!r}") from exc
    return str(raw)


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise ValidationError(f"Cannot read config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"Config file {path} must contain a mapping")
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValidationError(f"Unknown config keys in {path}: {', '.join(unknown)}")
    return data


def load_settings(environ: Optional[dict[str, str]] = None) -> Settings:
    """Build :class:`Settings` from the environment (and optional YAML file)."""
    env = os.environ if environ is None else environ

    values: dict[str, Any] = {}
    for var, name in _ENV_VARS.items():
        if env.get(var):
            values[name] = _coerce(name, env[var])

    config_path = env.get("SLANGDEX_CONFIG")
    if config_path:
        for name, raw in _load_yaml(Path(config_path).expanduser()).items():
            values[name] = _coerce(name, raw)

    return replace(Settings(), **values)


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )
