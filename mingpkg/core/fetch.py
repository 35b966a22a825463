"""
Package download and extraction

Downloads a package archive from the repository into the cache, then
extracts it into the install root with the first path component stripped
("mingw64/bin/zlib1.dll" lands in "<root>/bin/zlib1.dll").
"""

import logging
import socket
import tarfile
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, List, Optional, Union

from .. import __version__
from .compression import DECOMPRESSION_ERRORS, open_archive
from .config import RepoConfig
from .desc import PackageRecord
from .errors import FetchError
from .installed import remove_files

logger = logging.getLogger(__name__)

USER_AGENT = f"mingpkg/{__version__}"


@dataclass
class DownloadResult:
    """Result of a download operation."""
    success: bool
    path: Optional[Path] = None
    size: int = 0
    error: Optional[str] = None


def download_file(url: str, dest: Path,
                  progress_callback: Callable[[int, int], None] = None,
                  timeout: int = 30,
                  max_retries: int = 3) -> DownloadResult:
    """Download a file with retry on transient errors.

    Args:
        url: URL to download
        dest: Destination path
        progress_callback: Optional callback(downloaded_bytes, total_bytes)
        timeout: Connection timeout in seconds
        max_retries: Max retry attempts for transient errors

    Returns:
        DownloadResult with status
    """
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    temp_path = dest.with_name(dest.name + '.part')

    last_error = None
    for attempt in range(max_retries):
        try:
            req = urllib.request.Request(url)
            req.add_header('User-Agent', USER_AGENT)

            with urllib.request.urlopen(req, timeout=timeout) as response:
                total_size = int(response.headers.get('Content-Length') or 0)
                downloaded = 0

                with open(temp_path, 'wb') as f:
                    while True:
                        chunk = response.read(65536)
                        if not chunk:
                            break
                        f.write(chunk)
                        downloaded += len(chunk)

                        if progress_callback:
                            progress_callback(downloaded, total_size)

            temp_path.replace(dest)
            return DownloadResult(success=True, path=dest, size=downloaded)

        except urllib.error.HTTPError as e:
            # HTTP errors (404, 500, etc.) - don't retry
            temp_path.unlink(missing_ok=True)
            return DownloadResult(success=False, error=f"HTTP {e.code}: {e.reason}")
        except (urllib.error.URLError, socket.timeout, OSError) as e:
            # Transient errors - retry with backoff
            temp_path.unlink(missing_ok=True)
            last_error = str(e.reason) if hasattr(e, 'reason') else str(e)
            if attempt < max_retries - 1:
                logger.debug(f"Download of {url} failed ({last_error}), retrying")
                time.sleep(1 * (attempt + 1))

    return DownloadResult(
        success=False,
        error=f"After {max_retries} attempts: {last_error}"
    )


def _stripped(member_name: str) -> Optional[PurePosixPath]:
    """Member path without its first component, or None if nothing is left."""
    parts = PurePosixPath(member_name).parts
    if parts and parts[0] == '/':
        parts = parts[1:]
    if len(parts) < 2:
        return None
    return PurePosixPath(*parts[1:])


def extract_stripped(archive: Union[str, Path], root: Union[str, Path]) -> List[Path]:
    """Extract a package archive into root, dropping the first path component.

    Members with a single component (.PKGINFO, .MTREE, ...) are skipped.

    Returns:
        Absolute paths created, in archive order (parents before children)

    Raises:
        FetchError: If a member would land outside root, or the archive is
            unreadable. Paths already extracted are removed again.
    """
    root = Path(root).resolve()
    created = []

    try:
        with open_archive(archive) as stream, tarfile.open(fileobj=stream, mode='r|') as tar:
            for member in tar:
                relative = _stripped(member.name)
                if relative is None:
                    continue
                if '..' in relative.parts:
                    raise FetchError(Path(archive).name, f"unsafe path {member.name}")

                target = root / relative
                member.name = str(relative)
                if member.islnk():
                    linked = _stripped(member.linkname)
                    if linked is None:
                        continue
                    member.linkname = str(linked)

                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                else:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    _extract_member(tar, member, root)
                created.append(target)
    except FetchError:
        _rollback(created)
        raise
    except (tarfile.TarError, ValueError, *DECOMPRESSION_ERRORS) as e:
        _rollback(created)
        raise FetchError(Path(archive).name, f"extraction failed: {e}") from e

    return created


def _rollback(created: List[Path]):
    """Undo a partial extraction, leaving shared directories in place."""
    removed = remove_files(reversed(created))
    logger.debug(f"Rolled back {len(removed)} of {len(created)} extracted paths")


def _extract_member(tar: tarfile.TarFile, member: tarfile.TarInfo, root: Path):
    if hasattr(tarfile, 'data_filter'):
        tar.extract(member, root, filter='data')
    else:
        tar.extract(member, root)


class PackageFetcher:
    """Downloads and extracts packages for the install orchestrator."""

    def __init__(self, config: RepoConfig, download: Callable[..., DownloadResult] = download_file):
        self.config = config
        self.download = download

    def archive_path(self, record: PackageRecord) -> Path:
        return self.config.cache_dir / record.archive_filename

    def fetch(self, record: PackageRecord) -> List[Path]:
        """Download and extract one package.

        Returns:
            Files and directories created, in creation order

        Raises:
            FetchError: On download or extraction failure
        """
        if not record.archive_filename:
            raise FetchError(record.full_name, "no archive filename in index")

        url = self.config.package_url(record.archive_filename)
        dest = self.archive_path(record)
        logger.info(f"Downloading {url}")

        result = self.download(url, dest)
        if not result.success:
            raise FetchError(record.full_name, result.error or "download failed")

        try:
            return extract_stripped(result.path, self.config.install_root)
        except FetchError as e:
            raise FetchError(record.full_name, e.reason) from e
