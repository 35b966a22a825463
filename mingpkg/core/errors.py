"""Exceptions raised by mingpkg core modules.

Conflicts and blocking dependents are not exceptions: they are reported
in the install/uninstall reports and the CLI decides what to do with them.
"""

from pathlib import Path
from typing import List, Optional, Union


class MingpkgError(Exception):
    """Base class for all mingpkg errors."""


class ConfigError(MingpkgError):
    """Invalid configuration (e.g. unknown architecture selection)."""


class IndexMissingError(MingpkgError):
    """The package index has never been fetched."""

    def __init__(self, index_dir: Union[str, Path]):
        self.index_dir = Path(index_dir)
        super().__init__(
            f"Package index not found in {self.index_dir}, run 'mingpkg update' first"
        )


class PackageNotFound(MingpkgError):
    """No index entry matches a query."""

    def __init__(self, query: str, possible: Optional[List[str]] = None):
        self.query = query
        self.possible = list(possible or [])
        super().__init__(f"Package not found: {query}")


class CorruptionError(MingpkgError):
    """A listed entry is missing its description record or file manifest."""

    def __init__(self, name: str, path: Union[str, Path]):
        self.name = name
        self.path = Path(path)
        super().__init__(
            f"Missing {self.path} for {name}: the installation may be corrupted"
        )


class MalformedSpecError(MingpkgError, ValueError):
    """A package name or dependency spec does not follow the expected grammar."""

    def __init__(self, text: str, reason: str = ""):
        self.text = text
        msg = f"Malformed package spec: {text!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class FetchError(MingpkgError):
    """Download or extraction of a package archive failed."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"{name}: {reason}")
