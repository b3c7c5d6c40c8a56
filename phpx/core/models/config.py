"""
PhpxConfig — user configuration (``~/.config/phpx/config.yml``).

Every field has a default, so an empty or missing file is a valid
configuration.  Paths accept ``~`` and are expanded on load.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CACHE_TTL = 7 * 24 * 60 * 60      # 7 days
DEFAULT_MAX_CACHE_SIZE = 1024 * 1024 * 1024  # 1 GiB


def _default_cache_dir() -> Path:
    return Path.home() / ".cache" / "phpx"


def _expand(value: object) -> object:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        return Path(value).expanduser()
    if isinstance(value, Path):
        return value.expanduser()
    return value


class PhpxConfig(BaseModel):
    """Validated configuration."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    cache_dir: Path = Field(default_factory=_default_cache_dir)
    cache_ttl: int = Field(default=DEFAULT_CACHE_TTL, ge=0)
    max_cache_size: int = Field(default=DEFAULT_MAX_CACHE_SIZE, ge=0)
    skip_verify: bool = False
    default_php_path: Path | None = None
    composer_path: Path | None = None
    registry_url: str = "https://packagist.org"
    github_api_url: str = "https://api.github.com"
    http_timeout: int = Field(default=30, gt=0)

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _expand_cache_dir(cls, value: object) -> object:
        expanded = _expand(value)
        return _default_cache_dir() if expanded is None else expanded

    @field_validator("default_php_path", "composer_path", mode="before")
    @classmethod
    def _expand_optional_path(cls, value: object) -> object:
        return _expand(value)

    @field_validator("registry_url", "github_api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def to_file_dict(self) -> dict:
        """Serializable form for writing back to YAML (paths as strings)."""
        data = self.model_dump(mode="json")
        return {k: v for k, v in data.items() if v is not None}
