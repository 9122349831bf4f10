"""Configuration loading for icsctl."""

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from icsctl.exceptions import ConfigurationError

CONFIG_ENV_VAR = 'ICSCTL_CONFIG'
DEFAULT_CONFIG_PATH = Path.home() / '.icsctl.conf'

SORT_ORDERS = ('name', 'state')
SCOPES = ('all', 'enabled')
LOG_LEVELS = ('debug', 'info', 'warning', 'error', 'critical')


@dataclass
class Settings:
    """Settings read from the [status] and [logging] sections"""
    sort: str = 'name'
    scope: str = 'all'
    strict: bool = True
    log_level: str = 'INFO'
    log_file: Optional[Path] = None


def resolve_config_path(explicit: Optional[str] = None) -> tuple[Path, bool]:
    """
    Pick the configuration file to read.

    Returns:
        (path, required): ``required`` is True when the path was named
        explicitly, on the command line or through ICSCTL_CONFIG.
    """
    if explicit:
        return Path(explicit), True
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path), True
    return DEFAULT_CONFIG_PATH, False


def _choice(config: configparser.ConfigParser, section: str, option: str, choices: tuple, default: str) -> str:
    value = config.get(section, option, fallback=default).strip().lower()
    if value not in choices:
        raise ConfigurationError(
            f"Invalid value '{value}' for [{section}] {option}. Expected one of: {', '.join(choices)}"
        )
    return value


def load_settings(explicit: Optional[str] = None) -> Settings:
    path, required = resolve_config_path(explicit)
    if not path.exists():
        if required:
            raise ConfigurationError(f"Configuration file {path} does not exist")
        return Settings()

    config = configparser.ConfigParser()
    try:
        config.read(path, encoding='utf-8')
    except configparser.Error as e:
        raise ConfigurationError(f"Cannot parse configuration file {path}: {e}") from e

    try:
        strict = config.getboolean('status', 'strict', fallback=True)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for [status] strict: {e}") from e

    log_file = config.get('logging', 'file', fallback='').strip()
    return Settings(
        sort=_choice(config, 'status', 'sort', SORT_ORDERS, 'name'),
        scope=_choice(config, 'status', 'scope', SCOPES, 'all'),
        strict=strict,
        log_level=_choice(config, 'logging', 'level', LOG_LEVELS, 'info').upper(),
        log_file=Path(log_file).expanduser() if log_file else None,
    )
