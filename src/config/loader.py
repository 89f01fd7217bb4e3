"""YAML sweep configuration merged with environment settings.

Configuration is layered (later layers win):

  1. Built-in defaults on :class:`DiggingConfig`
  2. ``config/config.yaml`` -- the ``digging:`` section (tags, page size,
     intervals), checked into the repo
  3. Environment values from :class:`~src.config.settings.Settings`
     (API key, HTTP timeout)

The result is a frozen :class:`DiggingConfig` value object that is handed
to the scheduler.  Nothing in the ingestion code reads the environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.config.settings import Settings
from src.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TAGS: tuple[str, ...] = (
    "jazz",
    "electronic",
    "90s",
    "soul",
    "ambient",
    "hip hop",
    "rnb",
    "rock",
)


class DiggingConfig(BaseModel):
    """Everything one ingestion worker needs to know about its sweeps."""

    model_config = ConfigDict(frozen=True)

    tags: tuple[str, ...] = Field(default=DEFAULT_TAGS, min_length=1)
    api_key: str = ""
    page_size: int = Field(default=5, ge=1, le=50)
    max_page: int = Field(default=19, ge=1)
    warmup_seconds: float = Field(default=10.0, ge=0)
    politeness_seconds: float = Field(default=2.0, ge=0)
    cycle_seconds: float = Field(default=3600.0, ge=0)
    recovery_seconds: float = Field(default=60.0, ge=0)
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        tags = tuple(tag.strip() for tag in value)
        if any(not tag for tag in tags):
            raise ValueError("tags must not be blank")
        return tags


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.info("digging_config_file_missing", path=str(path))
        return {}
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning("digging_config_file_ignored", path=str(path), reason="not a mapping")
        return {}
    section = data.get("digging") or {}
    return section if isinstance(section, dict) else {}


def clean_tags(raw: Any) -> tuple[str, ...]:
    """Strip tag entries and drop blank ones; non-sequences yield ``()``."""
    if not isinstance(raw, (list, tuple)):
        return ()
    tags = [str(tag).strip() for tag in raw if tag is not None]
    return tuple(tag for tag in tags if tag)


def load_digging_config(
    settings: Settings | None = None,
    path: str | None = None,
) -> DiggingConfig:
    """Build a :class:`DiggingConfig` from YAML and environment settings.

    Args:
        settings: Environment settings.  A fresh ``Settings()`` when omitted.
        path: YAML file path.  Defaults to ``settings.digging_config_path``.

    Returns:
        The resolved configuration.  An empty or missing tag list falls back
        to :data:`DEFAULT_TAGS` with a warning.
    """
    settings = settings or Settings()
    section = _read_yaml(Path(path or settings.digging_config_path))

    tags = clean_tags(section.get("tags"))
    if not tags:
        logger.warning("digging_tags_missing", fallback=list(DEFAULT_TAGS))
        tags = DEFAULT_TAGS

    values: dict[str, Any] = {
        key: section[key]
        for key in (
            "page_size",
            "max_page",
            "warmup_seconds",
            "politeness_seconds",
            "cycle_seconds",
            "recovery_seconds",
        )
        if section.get(key) is not None
    }
    values["tags"] = tags
    values["api_key"] = settings.lastfm_api_key.strip()
    values["http_timeout_seconds"] = settings.http_timeout_seconds

    config = DiggingConfig(**values)
    logger.debug("digging_config_loaded", tags=list(config.tags), page_size=config.page_size)
    return config
