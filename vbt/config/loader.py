import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from vbt.config.models import AppConfig

logger = logging.getLogger(__name__)

SPEED_ENV_VAR = "SPEED_X"

class ConfigError(Exception):
    """Raised when the configuration file cannot be parsed or validated."""

def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load configuration from a YAML file.
    A missing file yields the defaults; a malformed one raises ConfigError.
    SPEED_X from the environment overrides general.speed_factor.
    """
    data = {}
    if config_path is not None and Path(config_path).exists():
        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping at the top level")
    elif config_path is not None:
        logger.debug(f"Config file {config_path} not found, using defaults")

    try:
        config = AppConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}:\n{e}") from e

    env_speed = os.environ.get(SPEED_ENV_VAR)
    if env_speed:
        try:
            config.general.speed_factor = float(env_speed)
        except ValueError:
            logger.warning(f"Ignoring non-numeric {SPEED_ENV_VAR}={env_speed!r}")

    return config
