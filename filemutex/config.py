"""Configuration handler for filemutex"""

import os
import logging
import yaml
from typing import Optional, Dict

from .errors import ConfigError
from .lock import RETRY_POLICIES

logger = logging.getLogger(__name__)

LOCK_PATH_ENV = 'FILEMUTEX_LOCK_PATH'


class Config:
    """Configuration handler"""

    DEFAULT_CONFIG_FILE = '.filemutex.yml'

    @staticmethod
    def load_config(config_path: Optional[str] = None) -> Dict:
        """Load configuration from YAML file.

        `config_path` may name the file itself or a directory holding
        DEFAULT_CONFIG_FILE; the current directory is used when omitted.
        """
        if config_path is None:
            config_path = os.getcwd()
        if os.path.isdir(config_path):
            config_path = os.path.join(config_path, Config.DEFAULT_CONFIG_FILE)
        if not os.path.exists(config_path):
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {config_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {config_path}: expected a mapping")
            return {}
        return data

    @staticmethod
    def merge_config(file_config: Dict, cli_args: Dict) -> Dict:
        """Merge file config with CLI arguments, CLI args take precedence"""
        config = {
            'lock_path': (cli_args.get('lock') or file_config.get('lock-path')
                          or os.environ.get(LOCK_PATH_ENV)),
            'retry_policy': cli_args.get('retry_policy') or file_config.get('retry-policy'),
            'retry_interval': (cli_args.get('retry_interval')
                               if cli_args.get('retry_interval') is not None
                               else file_config.get('retry-interval')),
        }

        # Remove None values
        return {k: v for k, v in config.items() if v is not None}

    @staticmethod
    def validate(config: Dict) -> Dict:
        """Check merged values, raising ConfigError on the first bad one"""
        lock_path = config.get('lock_path')
        if lock_path is not None and not isinstance(lock_path, str):
            raise ConfigError(f"lock-path must be a string, got {lock_path!r}")

        policy = config.get('retry_policy')
        if policy is not None and policy not in RETRY_POLICIES:
            raise ConfigError(
                f"retry-policy must be one of {', '.join(RETRY_POLICIES)}, got {policy!r}")

        interval = config.get('retry_interval')
        if interval is not None:
            if isinstance(interval, bool) or not isinstance(interval, (int, float)):
                raise ConfigError(f"retry-interval must be a number, got {interval!r}")
            if interval < 0:
                raise ConfigError(f"retry-interval must not be negative, got {interval}")

        return config
