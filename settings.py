"""
Configuration for stash-zip.

Settings come from a YAML file merged over built-in defaults, followed by
environment overrides of the form STASH_<SECTION>_<KEY>=value.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from colored_logger import get_colored_logger
from io_ops.path_utils import DEFAULT_FOLDER_NAME

logger = get_colored_logger(__name__)

ENV_PREFIX = "STASH_"

DEFAULT_CONFIG: Dict[str, Any] = {
    "general": {
        "default_folder_name": DEFAULT_FOLDER_NAME,
        "log_level": "INFO",
        "color": True,
    },
    "archive": {
        "compression_level": 9,
        "verify": True,
    },
    "pipeline": {
        "keep_originals_on_archive_failure": False,
        "confirm_before_delete": True,
        "check_free_space": True,
    },
}


class SettingsError(Exception):
    """Raised when an explicitly requested configuration cannot be used."""

    pass


def candidate_config_paths() -> List[Path]:
    """Places searched, in order, when no configuration path is given."""
    return [
        Path.cwd() / "stash-zip.yml",
        Path.cwd() / ".stash-zip.yml",
        Path.home() / ".config" / "stash-zip" / "config.yml",
    ]


def _read_yaml(config_file: Path) -> Dict[str, Any]:
    with open(config_file, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("top level of the configuration must be a mapping")
    return data


def load_config(
    config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Load configuration from YAML with fallback to defaults.

    Args:
        config_path: Explicit configuration file. Missing or invalid files
            raise SettingsError; auto-discovered ones only log a warning.
        environ: Environment used for overrides (defaults to os.environ).

    Returns:
        Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_file = Path(config_path).expanduser()
        if not config_file.is_file():
            raise SettingsError(f"Configuration file not found: {config_file}")
        try:
            config = _deep_merge(config, _read_yaml(config_file))
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise SettingsError(f"Invalid configuration file {config_file}: {e}") from e
        logger.debug("Configuration loaded from %s", config_file)
    else:
        for config_file in candidate_config_paths():
            if not config_file.is_file():
                continue
            try:
                config = _deep_merge(config, _read_yaml(config_file))
                logger.debug("Configuration loaded from %s", config_file)
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(
                    "Failed to load config from %s: %s. Using defaults.", config_file, e
                )
            break

    return _apply_env_overrides(config, os.environ if environ is None else environ)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _apply_env_overrides(config: Dict[str, Any], environ) -> Dict[str, Any]:
    """
    STASH_ARCHIVE_COMPRESSION_LEVEL=6 sets config["archive"]["compression_level"].
    The first word after the prefix is the section, the rest is the key.
    """
    for env_key, env_value in environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        section, _, key = env_key[len(ENV_PREFIX) :].lower().partition("_")
        if not section or not key:
            continue

        config.setdefault(section, {})[key] = _convert_env_value(env_value)

    return config


def _convert_env_value(value: str) -> Any:
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "on", "1")
    return bool(value)


class Settings:
    """
    Typed view over the merged configuration dictionary.
    """

    def __init__(self, raw: Optional[Dict[str, Any]] = None) -> None:
        self.raw = raw if raw is not None else copy.deepcopy(DEFAULT_CONFIG)

        general = self.raw.get("general", {})
        self.default_folder_name: str = str(
            general.get("default_folder_name") or DEFAULT_FOLDER_NAME
        )
        self.log_level: str = str(general.get("log_level", "INFO")).upper()
        self.color: bool = _as_bool(general.get("color", True))

        archive = self.raw.get("archive", {})
        self.compression_level: int = int(archive.get("compression_level", 9))
        self.verify_archive: bool = _as_bool(archive.get("verify", True))

        pipeline = self.raw.get("pipeline", {})
        self.keep_originals_on_archive_failure: bool = _as_bool(
            pipeline.get("keep_originals_on_archive_failure", False)
        )
        self.confirm_before_delete: bool = _as_bool(
            pipeline.get("confirm_before_delete", True)
        )
        self.check_free_space: bool = _as_bool(pipeline.get("check_free_space", True))

        if not 0 <= self.compression_level <= 9:
            raise SettingsError(
                f"archive.compression_level must be 0-9, got {self.compression_level}"
            )


def load_settings(
    config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None
) -> Settings:
    try:
        return Settings(load_config(config_path, environ))
    except (AttributeError, TypeError, ValueError) as e:
        raise SettingsError(f"Invalid configuration value: {e}") from e
