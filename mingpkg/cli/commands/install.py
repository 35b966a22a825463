"""Package installation command."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...core.database import PackageDatabase

from ...core.fetch import PackageFetcher
from ...core.operations import InstallOperation, InstallState
from .. import colors, display
from ..helpers.prompt import make_confirm


def cmd_install(args, db: 'PackageDatabase') -> int:
    """Handle install command."""
    operation = InstallOperation(
        db,
        fetcher=PackageFetcher(db.config),
        confirm=make_confirm(assume_yes=args.yes),
    )
    report = operation.run(args.package)

    if report.closure and report.closure.host_dependencies:
        print(colors.warning("\nInstall these with the host package manager:"))
        display.print_package_list(report.closure.host_dependencies, indent=4,
                                   color_func=colors.warning)

    if report.already_installed:
        print(colors.dim(f"\nAlready installed ({len(report.already_installed)}):"))
        display.print_package_list(report.already_installed, indent=4, color_func=colors.dim)

    if report.state == InstallState.ABORTED:
        return 1

    if not report.to_install:
        print(colors.info(f"\n{report.target} is already installed, nothing to do."))
        return 0

    if report.installed:
        print(colors.success(f"\n{len(report.installed)} package(s) installed"))

    if report.failed:
        print(colors.error(f"\n{len(report.failed)} package(s) failed:"))
        for name, reason in report.failed:
            print(f"  {colors.error(name)}: {reason}")
        return 1

    return 0
