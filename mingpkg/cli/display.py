"""Display utilities for the mingpkg CLI.

Package lists are shown in one of two modes:
- columns: Multi-column layout (default, human-friendly)
- flat: One item per line (parsable by scripts)
"""

import shutil
import time
from enum import Enum
from typing import Callable, List, Optional

from ..core.desc import PackageRecord
from . import colors


class DisplayMode(Enum):
    """Output display mode."""
    COLUMNS = "columns"
    FLAT = "flat"


_display_mode = DisplayMode.COLUMNS


def init(mode: str = "columns"):
    """Initialize display settings."""
    global _display_mode
    _display_mode = DisplayMode(mode) if mode else DisplayMode.COLUMNS


def get_terminal_width() -> int:
    """Get terminal width, with fallback to 80 columns."""
    return shutil.get_terminal_size((80, 24)).columns


def format_package_list(
    packages: List[str],
    indent: int = 2,
    column_gap: int = 2,
    color_func: Optional[Callable[[str], str]] = None,
    mode: Optional[DisplayMode] = None,
    terminal_width: Optional[int] = None
) -> List[str]:
    """Format a list of packages according to display mode.

    Args:
        packages: Package names to display
        indent: Spaces to indent (columns mode only)
        column_gap: Gap between columns (columns mode only)
        color_func: Optional colorize function (columns mode only)
        mode: Override global display mode
        terminal_width: Override terminal width (for testing)

    Returns:
        List of formatted lines ready to print
    """
    if not packages:
        return []

    effective_mode = mode if mode is not None else _display_mode
    if effective_mode == DisplayMode.FLAT:
        return list(packages)

    width = terminal_width or get_terminal_width()
    col_width = max(len(p) for p in packages) + column_gap
    num_cols = max(1, (width - indent) // col_width)

    result = []
    prefix = " " * indent
    for start in range(0, len(packages), num_cols):
        cols = []
        for pkg in packages[start:start + num_cols]:
            # Pad on raw length, escape codes take no room
            padding = " " * (col_width - len(pkg))
            cols.append((color_func(pkg) if color_func else pkg) + padding)
        result.append(prefix + "".join(cols).rstrip())
    return result


def print_package_list(packages: List[str], **kwargs) -> None:
    """Print a list of packages according to display mode."""
    for line in format_package_list(packages, **kwargs):
        print(line)


def format_size(size_bytes: float) -> str:
    """Format bytes as human-readable size."""
    if size_bytes < 1024:
        return f"{size_bytes:.0f}B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f}KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f}MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f}GB"


def format_date(epoch: int) -> str:
    """Format a build date; empty when unknown."""
    if not epoch:
        return ""
    return time.strftime("%Y-%m-%d %H:%M:%S", time.gmtime(epoch))


def format_record(record: PackageRecord, installed: bool = False) -> List[str]:
    """Human-readable description of a package record (for `info`)."""
    fields = [
        ("Name", record.short_name),
        ("Full name", record.full_name),
        ("Version", record.version),
        ("Description", record.description),
        ("URL", record.url),
        ("Licenses", ", ".join(record.licenses)),
        ("Build date", format_date(record.build_date)),
        ("Archive", record.archive_filename),
        ("Download size", format_size(record.csize) if record.csize else ""),
        ("Installed size", format_size(record.isize) if record.isize else ""),
        ("Depends on", ", ".join(str(d) for d in record.dependencies) or "None"),
        ("Conflicts with", ", ".join(record.conflicts) or "None"),
        ("Installed", colors.success("yes") if installed else "no"),
    ]
    width = max(len(label) for label, _ in fields)
    return [
        f"{colors.bold(label.ljust(width))} : {value}"
        for label, value in fields
        if value
    ]
