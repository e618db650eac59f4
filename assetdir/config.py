# assetdir/config.py
"""
Store configuration.

Values come from, in increasing precedence: the defaults below, an optional
YAML file, then ASSETDIR_* environment variables.

    ASSETDIR_DEFAULT_LOCALE   default locale tag (en_us)
    ASSETDIR_SUFFIX           record file suffix (.yml)
    ASSETDIR_STRICT           1/true/yes to reject incomplete records
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .files import normalize_suffix

DEFAULT_LOCALE = "en_us"
DEFAULT_SUFFIX = ".yml"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class StoreConfig:
    """
    Settings shared by every manager a factory creates.

    Attributes:
        default_locale: Locale used when a record has none, and the
            fallback partition for lookups
        suffix: File suffix scanned on reload and used by add()
        fail_on_null_field: Reject records with missing or null fields
    """
    default_locale: str = DEFAULT_LOCALE
    suffix: str = DEFAULT_SUFFIX
    fail_on_null_field: bool = False

    def __post_init__(self):
        if not self.default_locale or not self.default_locale.strip():
            raise ValueError("default_locale cannot be empty")
        object.__setattr__(self, "default_locale", self.default_locale.strip().lower())
        object.__setattr__(self, "suffix", normalize_suffix(self.suffix))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_locale": self.default_locale,
            "suffix": self.suffix,
            "fail_on_null_field": self.fail_on_null_field,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StoreConfig":
        return cls(
            default_locale=data.get("default_locale", DEFAULT_LOCALE),
            suffix=data.get("suffix", DEFAULT_SUFFIX),
            fail_on_null_field=_parse_bool(data.get("fail_on_null_field", False), "fail_on_null_field"),
        )

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> "StoreConfig":
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping")
        return cls.from_dict(data)

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        """Copy with ASSETDIR_* overrides applied."""
        env = os.environ if environ is None else environ
        changes: Dict[str, Any] = {}
        if env.get("ASSETDIR_DEFAULT_LOCALE", "").strip():
            changes["default_locale"] = env["ASSETDIR_DEFAULT_LOCALE"]
        if env.get("ASSETDIR_SUFFIX", "").strip():
            changes["suffix"] = env["ASSETDIR_SUFFIX"]
        if "ASSETDIR_STRICT" in env:
            changes["fail_on_null_field"] = _parse_bool(env["ASSETDIR_STRICT"], "ASSETDIR_STRICT")
        return replace(self, **changes) if changes else self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        return cls().with_env(environ)


def load_config(path: Optional[Path | str] = None, environ: Optional[Mapping[str, str]] = None) -> StoreConfig:
    """Defaults, then ``path`` (if given and present), then the environment."""
    config = StoreConfig()
    if path is not None and Path(path).exists():
        config = StoreConfig.from_yaml_file(path)
    return config.with_env(environ)
