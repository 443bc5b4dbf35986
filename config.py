# config.py

import os
import yaml
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


class HookerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    hook_path: str
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    log_db_path: Optional[str] = "logs.db"


def load_config(path: Optional[str] = None) -> HookerConfig:
    """
    Load configuration from the YAML file given, or the one named by the
    CONFIG_PATH environment variable, or the default path.

    Returns:
        HookerConfig: Validated, immutable configuration.
    """
    config_path = path or os.getenv("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    if not os.path.exists(config_path):
        logger.error(f"Configuration file '{config_path}' not found.")
        raise FileNotFoundError(f"Configuration file '{config_path}' not found.")

    try:
        with open(config_path, 'r') as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file '{config_path}': {e}")
        raise

    # Override the hook root with an environment variable (e.g., for containers)
    if os.getenv("HOOK_PATH"):
        raw["hook_path"] = os.environ["HOOK_PATH"]

    config = HookerConfig(**raw)
    logger.info(f"Configuration loaded successfully from '{config_path}'.")
    logger.info(f"Hook path: {config.hook_path}")
    logger.info(f"Bind address: {config.host}:{config.port}")
    return config
