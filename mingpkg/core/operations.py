"""
Install and uninstall operations for mingpkg.

The CLI handles all user interaction (prompts, display). This module
sequences resolution, confirmation, fetch/extract and state updates.

Confirmation is delegated to a callback:

    confirm(kind, names) -> bool

with kind one of "conflicts", "install" or "uninstall". Every
confirmation happens before the first change to the filesystem.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .database import PackageDatabase
from .errors import FetchError
from .fetch import PackageFetcher
from .installed import remove_files
from .resolver import Closure

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str, List[str]], bool]


def _decline(kind: str, names: List[str]) -> bool:
    return False


class InstallState(Enum):
    """Steps of an installation."""
    RESOLVE_TARGET = "resolve-target"
    COLLECT_CLOSURE = "collect-closure"
    DETECT_CONFLICTS = "detect-conflicts"
    CONFIRM_CONFLICTS = "confirm-conflicts"
    PARTITION_INSTALLED = "partition-installed"
    CONFIRM_INSTALL = "confirm-install"
    FETCH_EACH = "fetch-each"
    DONE = "done"
    ABORTED = "aborted"


class UninstallState(Enum):
    """Steps of an uninstallation."""
    RESOLVE_TARGET = "resolve-target"
    CHECK_INSTALLED = "check-installed"
    CHECK_DEPENDENTS = "check-dependents"
    CONFIRM = "confirm"
    REMOVE_FILES = "remove-files"
    REMOVE_MANIFEST = "remove-manifest"
    DONE = "done"
    NOT_INSTALLED = "not-installed"
    BLOCKED = "blocked"
    ABORTED = "aborted"


@dataclass
class InstallReport:
    """Outcome of an installation."""
    query: str
    state: InstallState = InstallState.RESOLVE_TARGET
    target: Optional[str] = None
    closure: Optional[Closure] = None
    conflicts: List[str] = field(default_factory=list)
    already_installed: List[str] = field(default_factory=list)
    to_install: List[str] = field(default_factory=list)
    installed: List[str] = field(default_factory=list)
    # (full name, error message)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.state == InstallState.DONE and not self.failed


@dataclass
class UninstallReport:
    """Outcome of an uninstallation."""
    query: str
    state: UninstallState = UninstallState.RESOLVE_TARGET
    target: Optional[str] = None
    blockers: List[str] = field(default_factory=list)
    files: List[Path] = field(default_factory=list)
    removed: List[Path] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.state == UninstallState.DONE


class InstallOperation:
    """Installs a package and its missing dependencies."""

    def __init__(self, db: PackageDatabase, fetcher: PackageFetcher = None,
                 confirm: ConfirmCallback = None):
        """Initialize operation.

        Args:
            db: Package state
            fetcher: Downloads and extracts archives (default: PackageFetcher)
            confirm: Confirmation callback; declines everything if None
        """
        self.db = db
        self.fetcher = fetcher or PackageFetcher(db.config)
        self.confirm = confirm or _decline

    def _enter(self, report: InstallReport, state: InstallState):
        logger.debug(f"install {report.query}: {report.state.value} -> {state.value}")
        report.state = state

    def run(self, query: str) -> InstallReport:
        """Install query and everything it needs.

        A package whose download or extraction fails is reported in
        report.failed; the remaining packages are still attempted.

        Raises:
            IndexMissingError: If no update has been run
            PackageNotFound: If the target or a dependency does not resolve
        """
        report = InstallReport(query=query)

        self.db.require_index()
        report.target = self.db.names.resolve(query)

        self._enter(report, InstallState.COLLECT_CLOSURE)
        closure = self.db.resolver.collect(report.target)
        report.closure = closure

        self._enter(report, InstallState.DETECT_CONFLICTS)
        report.conflicts = self.db.installed.find_conflicts(closure.conflicts, closure.ordered)
        if report.conflicts:
            self._enter(report, InstallState.CONFIRM_CONFLICTS)
            if not self.confirm("conflicts", list(report.conflicts)):
                self._enter(report, InstallState.ABORTED)
                return report

        self._enter(report, InstallState.PARTITION_INSTALLED)
        for name in closure.ordered:
            if self.db.installed.is_installed(name):
                report.already_installed.append(name)
            else:
                report.to_install.append(name)

        if not report.to_install:
            self._enter(report, InstallState.DONE)
            return report

        self._enter(report, InstallState.CONFIRM_INSTALL)
        if not self.confirm("install", list(report.to_install)):
            self._enter(report, InstallState.ABORTED)
            return report

        self.db.resolver.commit(closure, self.db.dependents)

        self._enter(report, InstallState.FETCH_EACH)
        for name in report.to_install:
            try:
                record = self.db.index.lookup(name)
                files = self.fetcher.fetch(record)
            except FetchError as e:
                logger.error(f"Failed to install {name}: {e.reason}")
                report.failed.append((name, e.reason))
                continue
            try:
                self.db.installed.record_installed(name, files)
            except OSError as e:
                logger.error(f"Failed to record manifest of {name}: {e}")
                remove_files(reversed(files))
                self.db.installed.remove_manifest(name)
                report.failed.append((name, f"cannot record manifest: {e}"))
                continue
            report.installed.append(name)
            logger.info(f"Installed {name}")

        self._enter(report, InstallState.DONE)
        return report


class UninstallOperation:
    """Removes one installed package."""

    def __init__(self, db: PackageDatabase, confirm: ConfirmCallback = None):
        self.db = db
        self.confirm = confirm or _decline

    def _enter(self, report: UninstallReport, state: UninstallState):
        logger.debug(f"uninstall {report.query}: {report.state.value} -> {state.value}")
        report.state = state

    def run(self, query: str) -> UninstallReport:
        """Uninstall query unless installed packages still depend on it.

        Raises:
            PackageNotFound: If query is neither installed nor in the index
            CorruptionError: If the package has no file manifest
        """
        report = UninstallReport(query=query)
        report.target = self.db.resolve_installed(query)

        self._enter(report, UninstallState.CHECK_INSTALLED)
        if not self.db.installed.is_installed(report.target):
            self._enter(report, UninstallState.NOT_INSTALLED)
            return report
        report.files = self.db.installed.files(report.target)

        self._enter(report, UninstallState.CHECK_DEPENDENTS)
        report.blockers = self.db.installed.installed_dependents(
            report.target, self.db.dependents
        )
        if report.blockers:
            self._enter(report, UninstallState.BLOCKED)
            return report

        self._enter(report, UninstallState.CONFIRM)
        if not self.confirm("uninstall", [report.target]):
            self._enter(report, UninstallState.ABORTED)
            return report

        self._enter(report, UninstallState.REMOVE_FILES)
        report.removed = remove_files(reversed(report.files))

        self._enter(report, UninstallState.REMOVE_MANIFEST)
        self.db.installed.remove_manifest(report.target)
        self.db.dependents.drop(report.target)

        self._enter(report, UninstallState.DONE)
        logger.info(f"Uninstalled {report.target}")
        return report
