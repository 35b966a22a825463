"""
Package index store and name resolution

The index is a directory tree with one entry per full package name:

    index/<full name>/desc        - description record
    index/<full name>/dependents  - reverse dependencies (see dependents.py)
    index/.order                  - entry names in index build order

The whole tree is replaced by each update (see sync.py).
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from .config import RepoConfig
from .desc import PackageRecord
from .errors import CorruptionError, PackageNotFound
from .names import short_name_of, strip_prefix

logger = logging.getLogger(__name__)

DESC_FILE = "desc"
ORDER_FILE = ".order"


class PackageIndex:
    """Read access to the package index tree."""

    def __init__(self, config: RepoConfig, index_dir: Path = None):
        self.config = config
        self.index_dir = Path(index_dir) if index_dir else config.index_dir
        self._names: Optional[List[str]] = None

    def exists(self) -> bool:
        """True once an update has populated the index."""
        if not self.index_dir.is_dir():
            return False
        return any(p.is_dir() for p in self.index_dir.iterdir())

    def entry_dir(self, full_name: str) -> Path:
        return self.index_dir / full_name

    def lookup(self, full_name: str) -> PackageRecord:
        """Get the record of a package.

        Raises:
            PackageNotFound: If no entry has this name
            CorruptionError: If the entry exists but has no desc file
        """
        entry = self.entry_dir(full_name)
        if not entry.is_dir():
            raise PackageNotFound(full_name)

        desc_path = entry / DESC_FILE
        if not desc_path.is_file():
            raise CorruptionError(full_name, desc_path)

        text = desc_path.read_text(encoding='utf-8', errors='replace')
        return PackageRecord.from_desc(full_name, text, self.config.prefix)

    def list_all(self) -> List[str]:
        """All full package names, in index build order.

        The order comes from the .order file written by the update. Trees
        without it fall back to sorted directory order.
        """
        if self._names is not None:
            return list(self._names)

        order_path = self.index_dir / ORDER_FILE
        if order_path.is_file():
            names = [
                line.strip()
                for line in order_path.read_text(encoding='utf-8').splitlines()
                if line.strip()
            ]
        elif self.index_dir.is_dir():
            names = sorted(p.name for p in self.index_dir.iterdir() if p.is_dir())
        else:
            names = []

        self._names = names
        return list(names)

    def invalidate(self):
        """Forget the cached listing (after an update)."""
        self._names = None

    def search(self, text: str) -> List[PackageRecord]:
        """Records whose name or description contains text (case-insensitive)."""
        needle = text.lower()
        results = []
        for full_name in self.list_all():
            record = self.lookup(full_name)
            if needle in full_name.lower() or needle in record.description.lower():
                results.append(record)
        return results


class NameResolver:
    """Turns a short or partial package name into one full name."""

    def __init__(self, index: PackageIndex, prefix: str):
        self.index = index
        self.prefix = prefix

    def pattern(self, query: str) -> 're.Pattern':
        """Regex accepting query with optional prefix, -git suffix and up to
        two trailing segments (version, release)."""
        return re.compile(
            rf'^(?:{re.escape(self.prefix)}-)?{re.escape(query)}'
            r'(?:-git)?(?:-[^-]+){0,2}$'
        )

    def matches(self, query: str) -> List[str]:
        """All index keys structurally matching query, in listing order."""
        regex = self.pattern(query)
        return [name for name in self.index.list_all() if regex.match(name)]

    def resolve(self, query: str, version: str = None) -> str:
        """Resolve query to a full package name.

        When several entries match, the last one in index order wins.

        Args:
            query: Short name, prefixed name or full name
            version: Pin to this version (from an "=" constraint)

        Raises:
            PackageNotFound: If nothing matches; carries substring hints
        """
        candidates = self.matches(query)
        if not candidates:
            raise PackageNotFound(query, self.possible_matches(query))

        if version:
            pinned = [name for name in candidates if _has_version(name, version)]
            if pinned:
                return pinned[-1]
            logger.warning(f"No {query} entry with version {version}, using {candidates[-1]}")

        return candidates[-1]

    def possible_matches(self, query: str) -> List[str]:
        """Keys containing query, one per short name, for user guidance."""
        seen = set()
        possible = []
        for name in self.index.list_all():
            if query not in name:
                continue
            short = short_name_of(name, self.prefix) or strip_prefix(name, self.prefix)
            if short in seen:
                continue
            seen.add(short)
            possible.append(name)
        return possible


def _has_version(full_name: str, version: str) -> bool:
    """True if full_name carries version, either "1.3" or "1.3-1"."""
    parts = full_name.rsplit('-', 2)
    if len(parts) != 3:
        return False
    return version in (parts[1], f"{parts[1]}-{parts[2]}")
