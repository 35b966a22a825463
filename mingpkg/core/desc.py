"""
Description record parser for mingpkg

Each index entry holds a "desc" file made of sections:

    %FILENAME%
    mingw-w64-x86_64-zlib-1.3-1-any.pkg.tar.zst

    %VERSION%
    1.3-1

    %DEPENDS%
    mingw-w64-x86_64-bzip2
    winpty

A header opens a section that lasts until the next header or end of file.
Blank lines are skipped. Unknown headers are parsed and left alone.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .names import Constraint, parse_constraint, parse_full_name
from .errors import MalformedSpecError

logger = logging.getLogger(__name__)

HEADER_REGEX = re.compile(r'^%([A-Z0-9_]+)%$')


def parse_desc(text: str) -> Dict[str, List[str]]:
    """Parse a description record into header → lines.

    Args:
        text: Content of a desc file

    Returns:
        Dict mapping header name (without %) to its non-blank lines
    """
    sections: Dict[str, List[str]] = {}
    current = None

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue

        match = HEADER_REGEX.match(line)
        if match:
            current = sections.setdefault(match.group(1), [])
            continue

        # Lines before the first header belong to no section
        if current is not None:
            current.append(line)

    return sections


def _first(sections: Dict[str, List[str]], header: str) -> str:
    values = sections.get(header)
    return values[0] if values else ""


def _int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


@dataclass(frozen=True)
class PackageRecord:
    """A package as described by the index."""
    full_name: str
    short_name: str
    version: str
    description: str = ""
    url: str = ""
    licenses: Tuple[str, ...] = ()
    build_date: int = 0
    archive_filename: str = ""
    dependencies: Tuple[Constraint, ...] = ()
    conflicts: Tuple[str, ...] = ()
    csize: int = 0
    isize: int = 0
    sha256sum: str = ""

    @classmethod
    def from_desc(cls, full_name: str, text: str, prefix: str) -> 'PackageRecord':
        """Build a record from the content of a desc file.

        Conflict specs are kept raw; the resolver decides what to do with
        malformed ones. Dependency specs must parse.

        Raises:
            MalformedSpecError: If the name or a dependency spec is malformed
        """
        parsed = parse_full_name(full_name, prefix)
        sections = parse_desc(text)

        version = _first(sections, 'VERSION') or parsed.evr
        if version != parsed.evr:
            logger.debug(f"{full_name}: desc version {version} differs from entry name")

        dependencies = []
        for spec in sections.get('DEPENDS', []):
            try:
                dependencies.append(parse_constraint(spec))
            except MalformedSpecError as e:
                raise MalformedSpecError(spec, f"dependency of {full_name}") from e

        return cls(
            full_name=full_name,
            short_name=parsed.short_name,
            version=version,
            description=' '.join(sections.get('DESC', [])),
            url=_first(sections, 'URL'),
            licenses=tuple(sections.get('LICENSE', [])),
            build_date=_int(_first(sections, 'BUILDDATE')),
            archive_filename=_first(sections, 'FILENAME'),
            dependencies=tuple(dependencies),
            conflicts=tuple(sections.get('CONFLICTS', [])),
            csize=_int(_first(sections, 'CSIZE')),
            isize=_int(_first(sections, 'ISIZE')),
            sha256sum=_first(sections, 'SHA256SUM'),
        )
