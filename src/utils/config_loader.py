"""
Configuration Loader

Loads alarm configuration from YAML files with environment variable substitution.
"""

import yaml
import os
from pathlib import Path
from typing import Dict, Any, Union
import re
import logging


class ConfigLoader:
    """
    Loads configuration from YAML files with environment variable support.

    Supports:
    - Environment variable substitution ${VAR_NAME} and ${VAR_NAME:-default}
    - Dot-notation lookups
    - Validation of the alarm section
    """

    ENV_PATTERN = re.compile(r'\$\{([^}:]+)(?::-([^}]*))?\}')

    def __init__(self, config_path: Union[str, Path]):
        """
        Initialize config loader.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path)
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config: Dict[str, Any] = {}

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from file.

        Returns:
            Configuration dictionary

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the document is not a mapping
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                content = f.read()

            content = self._substituteEnvVars(content)

            loaded = yaml.safe_load(content)
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing configuration: {e}")
            raise ValueError(f"Invalid YAML in {self.config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Expected a mapping at the top of {self.config_path}")

        self.config = loaded
        self.logger.info(f"Configuration loaded from {self.config_path}")
        return self.config

    def _substituteEnvVars(self, content: str) -> str:
        """
        Substitute environment variables in format ${VAR_NAME}.

        Unset variables without a default are left as written.
        """
        def replacer(match):
            var_name = match.group(1)
            default = match.group(2)
            value = os.environ.get(var_name)
            if value is None:
                if default is not None:
                    return default
                self.logger.warning(f"Environment variable not found: {var_name}")
                return match.group(0)
            return value

        return self.ENV_PATTERN.sub(replacer, content)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key not found
        """
        value = self.config

        for k in key.split('.'):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def validate(self) -> bool:
        if not isinstance(self.config.get('alarm'), dict):
            self.logger.error("Missing required configuration section: alarm")
            return False

        if not self.get('alarm.sender_list'):
            self.logger.error("alarm.sender_list must name at least one channel")
            return False

        return True
