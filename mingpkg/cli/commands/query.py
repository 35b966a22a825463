"""Read-only commands: info, list, search, url."""

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...core.database import PackageDatabase

from .. import colors, display


def cmd_info(args, db: 'PackageDatabase') -> int:
    """Handle info command."""
    db.require_index()
    full_name = db.names.resolve(args.package)
    record = db.index.lookup(full_name)

    for line in display.format_record(record, installed=db.installed.is_installed(full_name)):
        print(line)
    return 0


def cmd_url(args, db: 'PackageDatabase') -> int:
    """Handle url command."""
    db.require_index()
    record = db.index.lookup(db.names.resolve(args.package))

    if not record.url:
        print(colors.warning(f"{record.full_name} has no URL"))
        return 1
    print(record.url)
    return 0


def cmd_list(args, db: 'PackageDatabase') -> int:
    """Handle list command: show installed packages."""
    installed = db.installed.list_installed()
    if not installed:
        print(colors.info("No packages installed"))
        return 0

    display.print_package_list(installed, indent=0)
    print(colors.dim(f"\n{len(installed)} package(s) installed"))
    return 0


def cmd_search(args, db: 'PackageDatabase') -> int:
    """Handle search command."""
    db.require_index()
    results = db.index.search(args.pattern)

    if not results:
        print(colors.warning(f"No packages found for '{args.pattern}'"))
        return 1

    regex = re.compile(f'({re.escape(args.pattern)})', re.IGNORECASE)

    def highlight(text):
        if not colors.enabled():
            return text
        return regex.sub(lambda m: colors.success(m.group(1)), text)

    installed = set(db.installed.list_installed())
    for record in results:
        name = colors.bold(highlight(record.short_name))
        marker = colors.success(" [installed]") if record.full_name in installed else ""
        print(f"{name} {colors.dim(record.version)}{marker}")
        if record.description:
            print(f"    {highlight(record.description)}")

    print(colors.dim(f"\n{len(results)} package(s) found"))
    return 0
