# sf_deploy/core/file_index.py
"""File name to full path index of a project source tree"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .diagnostics import file_name_of

logger = logging.getLogger(__name__)


class FileIndex:
    """Maps bare file names to the full path of the file

    Metadata file names are unique inside a source tree, which is what
    makes a name-only lookup meaningful. When two files share a name, the
    one scanned last wins.
    """

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self._entries: Dict[str, str] = dict(entries or {})

    @classmethod
    def build(cls, directory: Union[str, Path]) -> 'FileIndex':
        """
        Index every file below a directory

        Args:
            directory: Root of the scan

        Returns:
            Populated index
        """
        index = cls()
        index.scan(directory)
        return index

    def scan(self, directory: Union[str, Path]) -> int:
        """Add every file below ``directory`` and return the index size"""
        root = Path(directory).resolve()
        if not root.is_dir():
            logger.error(f"Failed to scan directory: {root}")
            return len(self._entries)

        for dir_path, _, file_names in os.walk(root):
            for name in sorted(file_names):
                self._entries[name] = str(Path(dir_path) / name)

        logger.info(f"Indexed {len(self._entries)} files in project directory: {root}")
        return len(self._entries)

    def get(self, file_name: str) -> Optional[str]:
        return self._entries.get(file_name)

    def __contains__(self, file_name: str) -> bool:
        return file_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, selection: Iterable[str]) -> Tuple[List[str], List[str]]:
        """
        Resolve selection entries through the index

        Entries may be bare names or paths; only their file name is used
        for the lookup. Empty entries are skipped.

        Args:
            selection: Selected files

        Returns:
            Tuple of (found full paths, missing file names), both without
            duplicates and in selection order
        """
        found: List[str] = []
        missing: List[str] = []

        for entry in selection:
            if not entry or not str(entry).strip():
                continue
            name = file_name_of(str(entry).strip())
            full_path = self._entries.get(name)
            if full_path:
                if full_path not in found:
                    found.append(full_path)
            elif name not in missing:
                missing.append(name)

        return found, missing
