"""
Installed-state store

One directory per installed package:

    installed/<full name>/files   - absolute paths, one per line, in the
                                    order the archive created them

A package is installed when its directory exists, whether or not the
index still lists that exact version.
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Union

from .config import RepoConfig
from .dependents import DependentsGraph
from .errors import CorruptionError
from .names import short_name_of, strip_prefix

logger = logging.getLogger(__name__)

FILES_FILE = "files"

# Conflict name → installed short names that count as the same package
CONFLICT_ALIASES = {
    'gcc': ('gcc-libs',),
    'gcc-libs': ('gcc',),
    'crt': ('crt-git',),
    'headers': ('headers-git',),
    'libwinpthread': ('libwinpthread-git', 'winpthreads-git'),
    'winpthreads': ('winpthreads-git', 'libwinpthread-git'),
}


def remove_files(paths: Iterable[Union[str, Path]]) -> List[Path]:
    """Remove paths in the given order.

    Plain files (and symlinks) that exist are unlinked; directories that
    exist and are empty are removed. Anything else (already gone, or a
    directory still holding other files) is skipped. Callers pass a
    manifest in reverse so children go before their parents.

    Returns:
        Paths actually removed
    """
    removed = []
    for entry in paths:
        path = Path(entry)
        if path.is_symlink() or path.is_file():
            path.unlink()
            removed.append(path)
        elif path.is_dir() and not any(path.iterdir()):
            path.rmdir()
            removed.append(path)
        else:
            logger.debug(f"Skipping {path}")
    return removed


class InstalledStore:
    """Per-package manifests of installed files."""

    def __init__(self, config: RepoConfig, installed_dir: Path = None):
        self.config = config
        self.installed_dir = Path(installed_dir) if installed_dir else config.installed_dir

    def _dir(self, full_name: str) -> Path:
        return self.installed_dir / full_name

    def is_installed(self, full_name: str) -> bool:
        return self._dir(full_name).is_dir()

    def list_installed(self) -> List[str]:
        """Installed full names, sorted."""
        if not self.installed_dir.is_dir():
            return []
        return sorted(p.name for p in self.installed_dir.iterdir() if p.is_dir())

    def record_installed(self, full_name: str, files: Iterable[Union[str, Path]]):
        """Write the manifest of a freshly extracted package."""
        pkg_dir = self._dir(full_name)
        pkg_dir.mkdir(parents=True, exist_ok=True)
        lines = [str(f) for f in files]
        (pkg_dir / FILES_FILE).write_text(
            ''.join(line + "\n" for line in lines), encoding='utf-8'
        )
        logger.debug(f"Recorded {len(lines)} files for {full_name}")

    def files(self, full_name: str) -> List[Path]:
        """Manifest of an installed package, in creation order.

        Raises:
            CorruptionError: If the package directory has no manifest
        """
        manifest = self._dir(full_name) / FILES_FILE
        if not manifest.is_file():
            raise CorruptionError(full_name, manifest)
        return [
            Path(line)
            for line in manifest.read_text(encoding='utf-8').splitlines()
            if line.strip()
        ]

    def remove_files(self, full_name: str) -> List[Path]:
        """Remove the files of a package, newest first. Idempotent."""
        return remove_files(reversed(self.files(full_name)))

    def remove_manifest(self, full_name: str):
        """Delete the state directory of a package."""
        pkg_dir = self._dir(full_name)
        if pkg_dir.is_dir():
            shutil.rmtree(pkg_dir)
            logger.debug(f"Removed manifest of {full_name}")

    def remove_installed(self, full_name: str) -> List[Path]:
        """Remove a package's files then its manifest.

        Returns:
            Paths actually removed
        """
        removed = self.remove_files(full_name)
        self.remove_manifest(full_name)
        return removed

    def installed_short_names(self) -> Dict[str, List[str]]:
        """Map short name → installed full names (several versions may coexist)."""
        result = {}
        for full_name in self.list_installed():
            short = short_name_of(full_name, self.config.prefix)
            if short is not None:
                result.setdefault(short, []).append(full_name)
        return result

    def find_conflicts(self, names: Iterable[str], closure: Iterable[str] = ()) -> List[str]:
        """Installed packages matching any of the given conflict names.

        Names may carry the package prefix. A "-git" suffix on either side
        is ignored, and CONFLICT_ALIASES adds known equivalents.

        Args:
            names: Conflict names collected from the closure
            closure: Full names being installed. An installed package
                     sharing a short name with one of them is part of the
                     installation itself and never a conflict.

        Returns:
            Installed full names, in order of first match
        """
        own = {short_name_of(name, self.config.prefix) for name in closure}
        by_base = {}
        for short, full_names in self.installed_short_names().items():
            if short in own:
                continue
            by_base.setdefault(_without_git(short), []).extend(full_names)

        hits = []
        for name in names:
            bare = strip_prefix(name, self.config.prefix)
            candidates = [bare, *CONFLICT_ALIASES.get(bare, ())]
            for candidate in candidates:
                for full_name in by_base.get(_without_git(candidate), []):
                    if full_name not in hits:
                        hits.append(full_name)
        return hits

    def installed_dependents(self, full_name: str, graph: DependentsGraph) -> List[str]:
        """Recorded dependents of full_name that are currently installed."""
        return [
            dependent for dependent in graph.dependents_of(full_name)
            if dependent != full_name and self.is_installed(dependent)
        ]


def _without_git(name: str) -> str:
    if name.endswith('-git'):
        return name[:-len('-git')]
    return name
