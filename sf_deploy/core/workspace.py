# sf_deploy/core/workspace.py
"""Project workspace helpers: project root, forced-dirty files, result cache"""

from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from ..constants import PROJECT_MARKERS


def find_project_root(start_path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Find the project root directory by looking for marker files

    Args:
        start_path: Starting directory (defaults to current directory)

    Returns:
        Project root path or None if not found
    """
    if start_path is None:
        start_path = Path.cwd()
    current = Path(start_path).resolve()
    if current.is_file():
        current = current.parent

    # Check each directory up to root
    while True:
        if any((current / marker).exists() for marker in PROJECT_MARKERS):
            return current
        if current == current.parent:
            return None
        current = current.parent


def mark_files_dirty(files: Iterable[Union[str, Path]]) -> Tuple[bool, Optional[str]]:
    """Append a blank line to every file so change detection picks it up

    The change-detection tool only reports files that differ from the
    reference revision; selected files with no real edits would be left out
    of the manifest otherwise.

    Args:
        files: Files to touch

    Returns:
        Tuple of (success, path of the first file that could not be opened)
    """
    for file in files:
        try:
            with open(file, "a", encoding="utf-8") as f:
                f.write("\n")
        except OSError:
            return False, str(file)
    return True, None


def write_deploy_output(path: Union[str, Path], output: str) -> Path:
    """
    Overwrite the cached raw output of the last deployment

    Args:
        path: Cache file
        output: Raw standard output of the deploy command

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(output, encoding="utf-8")
    return path


def read_deploy_output(path: Union[str, Path]) -> Optional[str]:
    """Read the cached output of the last deployment, if any"""
    path = Path(path)
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")
