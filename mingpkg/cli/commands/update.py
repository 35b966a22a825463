"""Index update command."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...core.database import PackageDatabase

from ...core.sync import update_index
from .. import colors


def cmd_update(args, db: 'PackageDatabase') -> int:
    """Handle update command."""
    print(colors.info(f"Fetching {db.config.index_url}"))
    result = update_index(db.config)
    db.index.invalidate()

    if not result.success:
        print(colors.error(f"Index update failed: {result.error}"))
        return 1

    print(colors.success(f"Index updated: {result.packages_count} packages"))
    return 0
