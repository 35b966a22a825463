"""Package removal command."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...core.database import PackageDatabase

from ...core.operations import UninstallOperation, UninstallState
from .. import colors, display
from ..helpers.prompt import make_confirm


def cmd_uninstall(args, db: 'PackageDatabase') -> int:
    """Handle uninstall command."""
    operation = UninstallOperation(db, confirm=make_confirm(assume_yes=args.yes))
    report = operation.run(args.package)

    if report.state == UninstallState.NOT_INSTALLED:
        print(colors.warning(f"{report.target} is not installed"))
        return 1

    if report.state == UninstallState.BLOCKED:
        print(colors.error(f"Cannot remove {report.target}, required by:"))
        display.print_package_list(report.blockers, indent=4, color_func=colors.error)
        print(colors.dim("  Uninstall these packages first."))
        return 1

    if report.state == UninstallState.ABORTED:
        return 1

    skipped = len(report.files) - len(report.removed)
    print(colors.success(f"\n{report.target} removed ({len(report.removed)} paths)"))
    if skipped:
        print(colors.dim(f"  {skipped} shared or missing paths left in place"))
    return 0
