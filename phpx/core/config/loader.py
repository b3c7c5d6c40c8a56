"""
Configuration loader — reads config.yml into a PhpxConfig.

Resolution order for the config file:
    --config flag  >  PHPX_CONFIG env var  >  ~/.config/phpx/config.yml

A missing file yields defaults.  A malformed file is a configuration
error that is *recovered*: it is logged and defaults are used, so a bad
config never prevents running a tool.  ``save_config`` is strict.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from phpx.core.errors import ConfigError
from phpx.core.models.config import PhpxConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PHPX_CONFIG"
CONFIG_FILE = "config.yml"


def default_config_path(env: dict[str, str] | None = None) -> Path:
    """Return the config path from PHPX_CONFIG or the per-user default."""
    env = os.environ if env is None else env
    explicit = env.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".config" / "phpx" / CONFIG_FILE


def _read_mapping(path: Path) -> dict[str, Any]:
    """Read a YAML mapping or raise ConfigError."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def load_config(path: Path | None = None) -> PhpxConfig:
    """Load configuration, falling back to defaults on any problem.

    Args:
        path: Explicit config path.  If None, uses ``default_config_path()``.

    Returns:
        A validated PhpxConfig (defaults when the file is absent or bad).
    """
    path = path or default_config_path()

    if not path.is_file():
        logger.debug("No config file at %s — using defaults", path)
        return PhpxConfig()

    try:
        data = _read_mapping(path)
        config = PhpxConfig.model_validate(data)
    except ConfigError as e:
        logger.warning("%s — using default configuration", e)
        return PhpxConfig()
    except ValidationError as e:
        logger.warning("Invalid configuration in %s: %s — using defaults", path, e)
        return PhpxConfig()

    logger.debug("Loaded config from %s (cache_dir=%s)", path, config.cache_dir)
    return config


def save_config(config: PhpxConfig, path: Path | None = None) -> Path:
    """Write configuration as YAML (atomic write).

    Returns:
        The path written.
    """
    path = path or default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    content = yaml.safe_dump(config.to_file_dict(), sort_keys=True, default_flow_style=False)

    try:
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".config_", suffix=".tmp")
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        raise ConfigError(f"Cannot write {path}: {e}") from e

    logger.debug("Config saved to %s", path)
    return path


def get_config_value(config: PhpxConfig, key: str) -> Any:
    """Return one configuration value by field name."""
    if key not in PhpxConfig.model_fields:
        raise ConfigError(f"Unknown config key: {key}")
    return getattr(config, key)


def set_config_value(config: PhpxConfig, key: str, value: str) -> PhpxConfig:
    """Return a copy of ``config`` with ``key`` set from a string value.

    The string is parsed as YAML first (so ``true``, ``3600`` and ``null``
    get their natural types) and then validated by the model.
    """
    if key not in PhpxConfig.model_fields:
        raise ConfigError(f"Unknown config key: {key}")

    try:
        parsed = yaml.safe_load(value) if value.strip() else None
    except yaml.YAMLError:
        parsed = value

    data = config.model_dump()
    data[key] = parsed
    try:
        return PhpxConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
