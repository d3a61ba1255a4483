from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from .errors import ConfigInvalid

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_MESSAGE = "Select an S3 object"


@dataclass(frozen=True)
class PromptConfig:
    """Options fixed for the lifetime of one prompt session.

    ``bucket``/``prefix`` choose where browsing starts. With
    ``allow_bucket_switch`` disabled the user can never leave ``bucket``.
    ``allow_folder_select`` adds a "Select Current Folder" entry to every
    menu and ``allow_object_select`` makes file entries terminal.
    """

    bucket: Optional[str] = None
    prefix: Optional[str] = None
    allow_bucket_switch: bool = True
    allow_folder_select: bool = False
    allow_object_select: bool = True
    profile: Optional[str] = None
    region: Optional[str] = None
    page_size: int = DEFAULT_PAGE_SIZE
    message: str = DEFAULT_MESSAGE

    def __post_init__(self) -> None:
        bucket = _clean(self.bucket)
        prefix = _normalize_prefix(self.prefix)
        object.__setattr__(self, "bucket", bucket)
        object.__setattr__(self, "prefix", prefix)
        if prefix and not bucket:
            raise ConfigInvalid(
                "You cannot specify a prefix without a bucket."
            )
        if not self.allow_bucket_switch and not bucket:
            raise ConfigInvalid(
                "You must specify a bucket or enable bucket switching."
            )
        if int(self.page_size) < 1:
            raise ConfigInvalid("page_size must be a positive integer.")
        object.__setattr__(self, "page_size", int(self.page_size))

    @classmethod
    def from_sources(
        cls, file_values: Optional[dict[str, object]] = None, **overrides
    ) -> PromptConfig:
        """Merge config file values with explicit overrides.

        Overrides set to ``None`` fall through to the file value, and the
        file value falls through to the dataclass default.
        """
        known = {field.name for field in fields(cls)}
        values: dict[str, object] = {}
        for key, value in (file_values or {}).items():
            if key in known and value is not None:
                values[key] = value
        for key, value in overrides.items():
            if key not in known:
                raise ConfigInvalid(f"Unknown option: {key}")
            if value is not None:
                values[key] = value
        return cls(**values)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalize_prefix(value: Optional[str]) -> Optional[str]:
    text = _clean(value)
    if text is None:
        return None
    text = text.lstrip("/")
    if not text:
        return None
    if not text.endswith("/"):
        text = f"{text}/"
    return text


def config_base_dir() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        base = Path(config_home).expanduser()
    else:
        base = Path.home() / ".config"
    return base / "s3prompt"


def default_config_path() -> Path:
    return config_base_dir() / "config.json"


_BOOL_KEYS = ("allow_bucket_switch", "allow_folder_select", "allow_object_select")
_STR_KEYS = ("bucket", "prefix", "profile", "region", "message")


def load_config_file(path: Optional[Path] = None) -> dict[str, object]:
    config_path = path or default_config_path()
    try:
        payload = json.loads(config_path.read_text())
    except FileNotFoundError:
        return {}
    except Exception as exc:
        logger.warning("Ignoring unreadable config file %s: %s", config_path, exc)
        return {}
    if not isinstance(payload, dict):
        logger.warning("Ignoring config file %s: not a JSON object", config_path)
        return {}
    values: dict[str, object] = {}
    for key in _STR_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            values[key] = value.strip()
    for key in _BOOL_KEYS:
        if key in payload:
            values[key] = bool(payload[key])
    page_size = payload.get("page_size")
    if isinstance(page_size, int) and not isinstance(page_size, bool):
        values["page_size"] = page_size
    return values
