"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- RewriteConfig: Values consumed by the video embedding rules
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container

Environment variables take precedence over the YAML file:
YOUTUBE_EMBED_URL_OVERRIDE, INVIDIOUS_INSTANCE and LOG_LEVEL.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


@dataclass
class RewriteConfig:
    """Configuration for the content rewrite rules.

    Attributes:
        youtube_embed_url_override: Prefix the video ID is appended to for YouTube embeds
        invidious_instance: Hostname of the Invidious instance used as alternate player
    """

    youtube_embed_url_override: str = "https://www.youtube-nocookie.com/embed/"
    invidious_instance: str = "yewtu.be"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        rich_tracebacks: Whether the console handler renders rich tracebacks
    """

    level: str = "WARNING"
    console: bool = True
    rich_tracebacks: bool = True


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    rewrite: RewriteConfig = field(default_factory=RewriteConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


ENV_OVERRIDES = (
    ("YOUTUBE_EMBED_URL_OVERRIDE", "rewrite", "youtube_embed_url_override"),
    ("INVIDIOUS_INSTANCE", "rewrite", "invidious_instance"),
    ("LOG_LEVEL", "logging", "level"),
)


def load_config(path: str | None = None) -> AppConfig:
    """Load configuration from a YAML file with defaults and env overrides."""
    raw: dict[str, Any] = {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    return _apply_env(_merge_config(AppConfig(), raw))


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
    return _fromdict(data)


def _apply_env(cfg: AppConfig) -> AppConfig:
    """Override config values with non-empty environment variables."""
    for env_name, section, attr in ENV_OVERRIDES:
        value = os.getenv(env_name, "").strip()
        if value:
            setattr(getattr(cfg, section), attr, value)
    return cfg


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "rewrite": {
            "youtube_embed_url_override": cfg.rewrite.youtube_embed_url_override,
            "invidious_instance": cfg.rewrite.invidious_instance,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "rich_tracebacks": cfg.logging.rich_tracebacks,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        rewrite=RewriteConfig(**data["rewrite"]),
        logging=LoggingConfig(**data["logging"]),
    )
