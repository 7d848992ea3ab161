"""Configuration data models"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..constants import (
    DEFAULT_SF_CLI_PATH,
    DEFAULT_API_VERSION,
    DEFAULT_CACHE_DIR,
    DEFAULT_DEPLOY_FILE,
    DEFAULT_DELTA_DIR,
    DEFAULT_SOURCE_DIR,
    DELTA_MANIFEST_RELATIVE_PATH,
    ENV_SF_CLI_PATH,
    ENV_API_VERSION,
)


@dataclass(frozen=True)
class DeployOptions:
    """Options shared by every deployment of a project

    Relative paths are interpreted against ``project_root``.
    """

    sf_cli_path: str = DEFAULT_SF_CLI_PATH
    api_version: str = DEFAULT_API_VERSION
    cache_path: str = DEFAULT_CACHE_DIR
    deploy_file: str = DEFAULT_DEPLOY_FILE
    delta_dir: str = DEFAULT_DELTA_DIR
    source_dir: str = DEFAULT_SOURCE_DIR
    project_root: str = "."

    @property
    def root(self) -> Path:
        return Path(self.project_root)

    @property
    def cache_dir(self) -> Path:
        """Absolute cache directory"""
        return self._resolve(self.cache_path)

    @property
    def deploy_file_path(self) -> Path:
        """File receiving the raw JSON of the last deployment"""
        return self.cache_dir / self.deploy_file

    @property
    def delta_path(self) -> Path:
        """Output directory of the change-detection tool"""
        return self.cache_dir / self.delta_dir

    @property
    def delta_manifest_path(self) -> Path:
        """Manifest written by the change-detection tool"""
        return self.delta_path.joinpath(*DELTA_MANIFEST_RELATIVE_PATH)

    @property
    def source_path(self) -> Path:
        return self._resolve(self.source_dir)

    def _resolve(self, path: Union[str, Path]) -> Path:
        path = Path(path).expanduser()
        if path.is_absolute():
            return path
        return (self.root / path).resolve()

    def with_env_overrides(self, environ: Optional[Dict[str, str]] = None) -> 'DeployOptions':
        """Apply SF_DEPLOY_* environment overrides"""
        environ = os.environ if environ is None else environ
        overrides = {}
        if environ.get(ENV_SF_CLI_PATH):
            overrides["sf_cli_path"] = environ[ENV_SF_CLI_PATH]
        if environ.get(ENV_API_VERSION):
            overrides["api_version"] = environ[ENV_API_VERSION]
        return replace(self, **overrides) if overrides else self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "sf_cli_path": self.sf_cli_path,
            "api_version": self.api_version,
            "cache_path": self.cache_path,
            "deploy_file": self.deploy_file,
            "delta_dir": self.delta_dir,
            "source_dir": self.source_dir,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], project_root: Union[str, Path] = ".") -> 'DeployOptions':
        """Create from dictionary, ignoring unknown keys"""
        known = {f.name for f in fields(cls)} - {"project_root"}
        values = {}
        for key, value in (data or {}).items():
            if key not in known:
                continue
            if not isinstance(value, (str, int, float)):
                raise ValueError(f"Option '{key}' must be a scalar, got {type(value).__name__}")
            values[key] = str(value)
        return cls(project_root=str(project_root), **values)
