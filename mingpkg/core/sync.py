"""
Index synchronization for mingpkg

Downloads the repository database (<repo>.db, a compressed tar holding
"<full name>/desc" members) and rebuilds the index tree from it.
"""

import logging
import shutil
import tarfile
import tempfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, List, Optional

from .compression import DECOMPRESSION_ERRORS, open_detected
from .config import RepoConfig
from .dependents import DEPENDENTS_FILE
from .fetch import DownloadResult, download_file
from .index import DESC_FILE, ORDER_FILE

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Result of an index update."""
    success: bool
    packages_count: int = 0
    error: Optional[str] = None


def build_index(archive: Path, staging: Path) -> List[str]:
    """Extract every desc record of a repository database into staging.

    desc files are copied verbatim; other members are ignored.

    Returns:
        Full package names in archive order
    """
    names = []
    with open_detected(archive) as stream, tarfile.open(fileobj=stream, mode='r|') as tar:
        for member in tar:
            parts = PurePosixPath(member.name).parts
            if len(parts) != 2 or parts[1] != DESC_FILE or not member.isfile():
                continue
            full_name = parts[0]
            if full_name.startswith('.'):
                continue

            data = tar.extractfile(member)
            if data is None:
                continue
            entry = staging / full_name
            entry.mkdir(parents=True, exist_ok=True)
            (entry / DESC_FILE).write_bytes(data.read())
            if full_name not in names:
                names.append(full_name)

    (staging / ORDER_FILE).write_text(''.join(n + "\n" for n in names), encoding='utf-8')
    return names


def carry_dependents(old_index: Path, staging: Path) -> int:
    """Copy dependents records of the old index into the new one.

    Records of packages that left the index are kept too: installed
    packages may still be listed there.
    """
    if not old_index.is_dir():
        return 0

    carried = 0
    for record in old_index.glob(f"*/{DEPENDENTS_FILE}"):
        target = staging / record.parent.name / DEPENDENTS_FILE
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(record, target)
        carried += 1
    return carried


def update_index(config: RepoConfig,
                 download: Callable[..., DownloadResult] = download_file) -> SyncResult:
    """Fetch the repository database and replace the index tree.

    Args:
        config: Repository configuration
        download: Download function (url, dest) -> DownloadResult

    Returns:
        SyncResult with the number of packages
    """
    config.state_dir.mkdir(parents=True, exist_ok=True)
    archive = config.cache_dir / f"{config.repo_name}.db"

    logger.info(f"Fetching index from {config.index_url}")
    result = download(config.index_url, archive)
    if not result.success:
        return SyncResult(success=False, error=result.error)

    index_dir = config.index_dir
    with tempfile.TemporaryDirectory(dir=config.state_dir, prefix='.index-') as tmp:
        staging = Path(tmp) / "index"
        staging.mkdir()

        try:
            names = build_index(result.path, staging)
        except (tarfile.TarError, *DECOMPRESSION_ERRORS) as e:
            return SyncResult(success=False, error=f"Invalid index archive: {e}")

        carried = carry_dependents(index_dir, staging)
        logger.debug(f"Carried {carried} dependents records into the new index")

        if index_dir.exists():
            old = Path(tmp) / "old"
            index_dir.rename(old)
        staging.rename(index_dir)

    logger.info(f"Index updated: {len(names)} packages")
    return SyncResult(success=True, packages_count=len(names))
