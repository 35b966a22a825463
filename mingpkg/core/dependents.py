"""
Dependents graph (reverse dependencies)

Stored next to the description record of the package being depended on:

    index/<dependee>/dependents   - one dependent full name per line

Used to refuse uninstalling a package that installed packages still need.
"""

import logging
from pathlib import Path
from typing import List

from .config import RepoConfig

logger = logging.getLogger(__name__)

DEPENDENTS_FILE = "dependents"


class DependentsGraph:
    """Persistent dependee → dependents edges, one file per dependee."""

    def __init__(self, config: RepoConfig, index_dir: Path = None):
        self.index_dir = Path(index_dir) if index_dir else config.index_dir

    def _path(self, dependee: str) -> Path:
        return self.index_dir / dependee / DEPENDENTS_FILE

    def dependents_of(self, dependee: str) -> List[str]:
        """Full names recorded as depending on dependee, in insertion order."""
        path = self._path(dependee)
        if not path.is_file():
            return []
        return [
            line.strip()
            for line in path.read_text(encoding='utf-8').splitlines()
            if line.strip()
        ]

    def add(self, dependee: str, dependent: str) -> bool:
        """Record that dependent depends on dependee.

        Returns:
            True if the edge was new
        """
        if dependee == dependent:
            return False
        if dependent in self.dependents_of(dependee):
            return False

        path = self._path(dependee)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'a', encoding='utf-8') as f:
            f.write(dependent + "\n")
        logger.debug(f"Recorded {dependent} as dependent of {dependee}")
        return True

    def drop(self, dependee: str):
        """Forget every dependent of dependee (dependee was uninstalled)."""
        path = self._path(dependee)
        if path.is_file():
            path.unlink()
            logger.debug(f"Dropped dependents record of {dependee}")
