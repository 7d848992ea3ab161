"""Resolution of the deploy CLI executable"""

import shutil
from pathlib import Path
from typing import Callable, Optional

CliResolver = Callable[[str], Optional[str]]


def resolve_cli(cli_path: str) -> Optional[str]:
    """
    Resolve the configured CLI to an absolute executable path

    Args:
        cli_path: Command name looked up on PATH, or a path to the executable

    Returns:
        Absolute path or None when nothing executable is found
    """
    if not cli_path:
        return None
    found = shutil.which(cli_path)
    if found is None:
        return None
    return str(Path(found).resolve())
