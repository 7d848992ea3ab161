"""Argument lists for the external CLI commands"""

from pathlib import Path
from typing import List, Union

from ..constants import (
    DEPLOY_CMD,
    DEPLOY_ARG_SOURCE_DIR,
    DEPLOY_ARG_MANIFEST,
    DEPLOY_ARG_JSON,
    DEPLOY_ARG_API_VERSION,
    DEPLOY_ARG_IGNORE_CONFLICTS,
    DELTA_CMD,
    DELTA_ARG_COMPARE,
    DELTA_ARG_FROM,
    DELTA_ARG_OUTPUT_DIR,
    DELTA_HEAD_REF,
)


def _deploy_args(target_flag: str, target: Union[str, Path], api_version: str, force: bool) -> List[str]:
    args = [*DEPLOY_CMD, target_flag, str(target), DEPLOY_ARG_JSON, DEPLOY_ARG_API_VERSION, api_version]
    if force:
        args.append(DEPLOY_ARG_IGNORE_CONFLICTS)
    return args


def current_file_deploy_args(current_file: Union[str, Path], api_version: str,
                             force: bool = False) -> List[str]:
    """sf project deploy start -d <file> --json --api-version <v> [--ignore-conflicts]"""
    return _deploy_args(DEPLOY_ARG_SOURCE_DIR, current_file, api_version, force)


def manifest_deploy_args(manifest_path: Union[str, Path], api_version: str,
                         force: bool = False) -> List[str]:
    """sf project deploy start --manifest <path> --json --api-version <v> [--ignore-conflicts]"""
    return _deploy_args(DEPLOY_ARG_MANIFEST, manifest_path, api_version, force)


def delta_manifest_args(output_dir: Union[str, Path], from_ref: str = DELTA_HEAD_REF) -> List[str]:
    """sf sgd source delta -c --from HEAD --output-dir <dir>"""
    return [*DELTA_CMD, DELTA_ARG_COMPARE, DELTA_ARG_FROM, from_ref, DELTA_ARG_OUTPUT_DIR, str(output_dir)]
