"""Configuration management service"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from ..api.exceptions import ConfigError
from ..constants import PROJECT_CONFIG_FILE
from ..models.config import DeployOptions

logger = logging.getLogger(__name__)


class ConfigService:
    """Service for loading project deploy options"""

    def __init__(self, project_root: Path):
        """Initialize config service

        Args:
            project_root: Project root directory
        """
        self.project_root = Path(project_root)
        self.config_path = self.project_root / PROJECT_CONFIG_FILE
        self._options: Optional[DeployOptions] = None

    @property
    def options(self) -> DeployOptions:
        """Get current options (lazy load)"""
        if self._options is None:
            self.load_options()
        return self._options

    def load_options(self) -> DeployOptions:
        """Load options from the project configuration file

        A missing file yields the defaults. Environment overrides are applied
        last.

        Returns:
            Loaded options
        """
        data = {}
        if self.config_path.exists():
            with open(self.config_path, 'r', encoding='utf-8') as f:
                content = f.read()

            # Simple environment variable expansion
            content = os.path.expandvars(content)

            try:
                data = yaml.safe_load(content) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid configuration file {self.config_path}: {e}")

            if not isinstance(data, dict):
                raise ConfigError(f"Configuration file {self.config_path} must contain a mapping")
            logger.debug(f"Loaded configuration from {self.config_path}")

        # Options may sit under a top-level 'deploy' key
        section = data.get("deploy", data)
        if not isinstance(section, dict):
            raise ConfigError("'deploy' section must be a mapping")

        try:
            options = DeployOptions.from_dict(section, project_root=self.project_root)
        except ValueError as e:
            raise ConfigError(str(e))

        self._options = options.with_env_overrides()
        return self._options
