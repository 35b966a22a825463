"""
Compression utilities for mingpkg

Package archives are selected by file extension:
- .pkg.tar.zst (current format)
- .pkg.tar.xz (legacy)

The index archive is detected from its magic bytes, since its name
(<repo>.db) carries no extension:
- gzip, zstd, xz, or a plain tar
"""

import gzip
import lzma
from pathlib import Path
from typing import BinaryIO, Union

import zstandard as zstd

# Magic bytes for format detection
MAGIC_ZSTD = b'\x28\xb5\x2f\xfd'
MAGIC_GZIP = b'\x1f\x8b'
MAGIC_XZ = b'\xfd7zXZ\x00'

# Archive extension → format
ARCHIVE_EXTENSIONS = {
    '.tar.zst': 'zstd',
    '.tar.xz': 'xz',
}

# Raised by the decompressors on corrupt input (gzip raises OSError)
DECOMPRESSION_ERRORS = (lzma.LZMAError, zstd.ZstdError, EOFError, OSError)


def detect_format(data: bytes) -> str:
    """Detect compression format from magic bytes.

    Args:
        data: First 8+ bytes of the file

    Returns:
        Format name: 'zstd', 'gzip', 'xz', or 'plain'
    """
    if data[:4] == MAGIC_ZSTD:
        return 'zstd'
    elif data[:2] == MAGIC_GZIP:
        return 'gzip'
    elif data[:6] == MAGIC_XZ:
        return 'xz'
    else:
        return 'plain'


def format_from_extension(filename: Union[str, Path]) -> str:
    """Compression format of a package archive, from its name.

    Returns:
        'zstd' or 'xz'

    Raises:
        ValueError: If the extension is not a supported archive format
    """
    name = str(filename)
    for ext, fmt in ARCHIVE_EXTENSIONS.items():
        if name.endswith(ext):
            return fmt
    raise ValueError(f"Unsupported archive format: {Path(name).name}")


def open_stream(path: Union[str, Path], fmt: str) -> BinaryIO:
    """Open a compressed file and return a binary stream of its content.

    Args:
        path: Path to compressed file
        fmt: 'zstd', 'gzip', 'xz' or 'plain'

    Returns:
        File-like object for reading decompressed data. zstd streams are
        not seekable: read them sequentially (tarfile mode "r|").
    """
    path = Path(path)

    if fmt == 'zstd':
        f = open(path, 'rb')
        dctx = zstd.ZstdDecompressor()
        return dctx.stream_reader(f, closefd=True)

    elif fmt == 'gzip':
        return gzip.open(path, 'rb')

    elif fmt == 'xz':
        return lzma.open(path, 'rb')

    else:
        return open(path, 'rb')


def open_detected(path: Union[str, Path]) -> BinaryIO:
    """Open a file whose compression is detected from its magic bytes."""
    with open(path, 'rb') as f:
        magic = f.read(8)
    return open_stream(path, detect_format(magic))


def open_archive(path: Union[str, Path]) -> BinaryIO:
    """Open a package archive whose compression is given by its extension."""
    return open_stream(path, format_from_extension(path))
