"""
Package name and dependency spec parsing

Full package names follow the pattern prefix-shortname-version-release,
e.g. "mingw-w64-x86_64-gcc-libs-13.2.0-3". Dependency and conflict specs
are a bare name with an optional version constraint, e.g. "zlib>=1.3".
"""

import re
from dataclasses import dataclass
from typing import Optional

from .errors import MalformedSpecError

# Dependency satisfied by the host package manager, never by mingpkg
HOST_SENTINEL = "winpty"

OPERATORS = ('<=', '>=', '<', '>', '=')

# name[op version]; longest operators first so "<=" is not read as "<"
CONSTRAINT_REGEX = re.compile(
    r'^(?P<name>[A-Za-z0-9@._+-]+?)'
    r'(?:(?P<op><=|>=|<|>|=)(?P<version>[^<>=\s]+))?$'
)

# Trailing -version-release of a full name
VERSION_RELEASE_REGEX = re.compile(r'^(?P<rest>.+)-(?P<version>[^-]+)-(?P<release>[^-]+)$')


@dataclass(frozen=True)
class FullName:
    """A parsed prefix-shortname-version-release triple."""
    prefix: str
    short_name: str
    version: str
    release: str

    def __str__(self) -> str:
        return f"{self.prefix}-{self.short_name}-{self.version}-{self.release}"

    @property
    def evr(self) -> str:
        return f"{self.version}-{self.release}"


@dataclass(frozen=True)
class Constraint:
    """A dependency or conflict spec.

    Only "=" pins a version; the other operators are kept for display but
    place no restriction on resolution.
    """
    name: str
    op: str = ""
    version: str = ""

    @property
    def is_exact(self) -> bool:
        return self.op == '='

    @property
    def is_host(self) -> bool:
        return self.name == HOST_SENTINEL

    def __str__(self) -> str:
        return f"{self.name}{self.op}{self.version}"


def parse_full_name(text: str, prefix: str) -> FullName:
    """Parse a full package name.

    Args:
        text: Full name like "mingw-w64-x86_64-zlib-1.3-1"
        prefix: Expected package family prefix

    Returns:
        FullName

    Raises:
        MalformedSpecError: If the prefix or the version/release is missing
    """
    head = f"{prefix}-"
    if not text.startswith(head):
        raise MalformedSpecError(text, f"expected prefix {prefix!r}")

    match = VERSION_RELEASE_REGEX.match(text[len(head):])
    if not match:
        raise MalformedSpecError(text, "expected name-version-release")

    return FullName(
        prefix=prefix,
        short_name=match.group('rest'),
        version=match.group('version'),
        release=match.group('release'),
    )


def parse_constraint(text: str) -> Constraint:
    """Parse a dependency or conflict spec.

    Args:
        text: Spec like "zlib", "zlib>=1.3" or "libiconv=1.17"

    Returns:
        Constraint

    Raises:
        MalformedSpecError: If the spec does not follow name[op version]
    """
    match = CONSTRAINT_REGEX.match(text.strip())
    if not match:
        raise MalformedSpecError(text)
    return Constraint(
        name=match.group('name'),
        op=match.group('op') or "",
        version=match.group('version') or "",
    )


def strip_prefix(name: str, prefix: str) -> str:
    """Remove the package family prefix from a name if present."""
    head = f"{prefix}-"
    if name.startswith(head):
        return name[len(head):]
    return name


def short_name_of(full_name: str, prefix: str) -> Optional[str]:
    """Short name of a full package name, or None if it does not parse."""
    try:
        return parse_full_name(full_name, prefix).short_name
    except MalformedSpecError:
        return None
