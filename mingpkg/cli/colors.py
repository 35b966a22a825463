"""Color output support for the mingpkg CLI.

Palette:
  - Red: errors, packages being removed
  - Yellow: warnings, conflicts
  - Green: success, packages being installed
  - Blue: contextual information
"""

import os
import sys

# ANSI color codes
_COLORS = {
    'reset': '\033[0m',
    'bold': '\033[1m',
    'dim': '\033[2m',
    'red': '\033[91m',
    'yellow': '\033[93m',
    'green': '\033[92m',
    'blue': '\033[94m',
}

_colors_enabled = True


def init(nocolor: bool = False, stream=None):
    """Initialize color support.

    Colors are off with --nocolor, when NO_COLOR is set
    (https://no-color.org/), or when the output is not a terminal.
    """
    global _colors_enabled
    stream = stream or sys.stdout

    if nocolor or os.environ.get('NO_COLOR'):
        _colors_enabled = False
    else:
        _colors_enabled = stream.isatty()


def enabled() -> bool:
    return _colors_enabled


def _wrap(text: str, color: str) -> str:
    if not _colors_enabled:
        return text
    return f"{_COLORS[color]}{text}{_COLORS['reset']}"


def error(text: str) -> str:
    return _wrap(text, 'red')


def warning(text: str) -> str:
    return _wrap(text, 'yellow')


def success(text: str) -> str:
    return _wrap(text, 'green')


def info(text: str) -> str:
    return _wrap(text, 'blue')


def dim(text: str) -> str:
    return _wrap(text, 'dim')


def bold(text: str) -> str:
    return _wrap(text, 'bold')


def pkg_install(name: str) -> str:
    """Package about to be installed."""
    return success(name)


def pkg_remove(name: str) -> str:
    """Package about to be removed."""
    return error(name)
