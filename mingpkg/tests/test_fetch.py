"""Tests for package download and extraction"""

import io
import lzma
import shutil
import tarfile
from pathlib import Path

import pytest
import zstandard as zstd

from mingpkg.core.compression import detect_format, format_from_extension, open_stream
from mingpkg.core.desc import PackageRecord
from mingpkg.core.errors import FetchError
from mingpkg.core.fetch import (
    DownloadResult, PackageFetcher, download_file, extract_stripped,
)

from conftest import PREFIX, desc_text, full


def build_tar(members) -> bytes:
    """Uncompressed tar from (name, content) pairs; content None is a directory."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode='w') as tar:
        for name, content in members:
            info = tarfile.TarInfo(name)
            if content is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            else:
                info.size = len(content)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


PACKAGE_MEMBERS = [
    (".PKGINFO", b"pkgname = zlib\n"),
    (".MTREE", b""),
    ("mingw64", None),
    ("mingw64/bin", None),
    ("mingw64/bin/zlib1.dll", b"MZ"),
    ("mingw64/include", None),
    ("mingw64/include/zlib.h", b"#define ZLIB_VERSION \"1.3\"\n"),
]


def write_archive(directory: Path, name: str, fmt: str, members=PACKAGE_MEMBERS) -> Path:
    data = build_tar(members)
    if fmt == 'zstd':
        data = zstd.ZstdCompressor().compress(data)
    elif fmt == 'xz':
        data = lzma.compress(data)
    path = directory / name
    path.write_bytes(data)
    return path


class TestCompression:
    """Tests for format detection."""

    def test_detect_format(self):
        assert detect_format(zstd.ZstdCompressor().compress(b"x")) == 'zstd'
        assert detect_format(lzma.compress(b"x")) == 'xz'
        assert detect_format(b"\x1f\x8b\x08\x00") == 'gzip'
        assert detect_format(b"ustar") == 'plain'

    def test_zstd_stream(self, tmp_path):
        path = tmp_path / "data.zst"
        path.write_bytes(zstd.ZstdCompressor().compress(b"payload" * 1000))
        with open_stream(path, 'zstd') as stream:
            assert stream.read() == b"payload" * 1000

    def test_format_from_extension(self):
        assert format_from_extension("zlib-1.3-1-any.pkg.tar.zst") == 'zstd'
        assert format_from_extension("zlib-1.3-1-any.pkg.tar.xz") == 'xz'
        with pytest.raises(ValueError):
            format_from_extension("zlib-1.3-1-any.pkg.tar.bz2")


class TestExtractStripped:
    """Tests for archive extraction into the install root."""

    @pytest.mark.parametrize("fmt,ext", [("zstd", ".pkg.tar.zst"), ("xz", ".pkg.tar.xz")])
    def test_extract(self, tmp_path, fmt, ext):
        archive = write_archive(tmp_path, f"zlib-1.3-1-any{ext}", fmt)
        root = tmp_path / "root"

        created = extract_stripped(archive, root)

        root = root.resolve()
        assert created == [
            root / "bin",
            root / "bin" / "zlib1.dll",
            root / "include",
            root / "include" / "zlib.h",
        ]
        assert (root / "bin" / "zlib1.dll").read_bytes() == b"MZ"
        assert not (root / ".PKGINFO").exists()

    def test_unsupported_extension(self, tmp_path):
        archive = write_archive(tmp_path, "zlib.pkg.tar.gz", "plain")
        with pytest.raises(FetchError):
            extract_stripped(archive, tmp_path / "root")

    def test_path_escaping_root(self, tmp_path):
        archive = write_archive(
            tmp_path, "evil.pkg.tar.xz", "xz", [("mingw64/../../etc/passwd", b"x")]
        )
        with pytest.raises(FetchError):
            extract_stripped(archive, tmp_path / "root")
        assert not (tmp_path / "etc").exists()

    def test_failure_removes_extracted_paths(self, tmp_path):
        root = tmp_path / "root"
        (root / "bin").mkdir(parents=True)
        (root / "bin" / "existing.dll").write_bytes(b"MZ")
        archive = write_archive(tmp_path, "half.pkg.tar.zst", "zstd", [
            ("mingw64/bin", None),
            ("mingw64/bin/zlib1.dll", b"MZ"),
            ("mingw64/share", None),
            ("mingw64/share/zlib.txt", b"x"),
            ("mingw64/../../etc/passwd", b"x"),
        ])

        with pytest.raises(FetchError):
            extract_stripped(archive, root)

        assert not (root / "bin" / "zlib1.dll").exists()
        assert not (root / "share").exists()
        assert (root / "bin" / "existing.dll").exists()

    def test_corrupt_archive(self, tmp_path):
        archive = tmp_path / "broken.pkg.tar.xz"
        archive.write_bytes(b"not xz at all")
        with pytest.raises(FetchError):
            extract_stripped(archive, tmp_path / "root")


class TestDownloadFile:
    """Tests for the downloader (file:// URLs, no network)."""

    def test_download(self, tmp_path):
        source = tmp_path / "source.bin"
        source.write_bytes(b"payload")
        dest = tmp_path / "cache" / "dest.bin"

        result = download_file(source.as_uri(), dest)

        assert result.success
        assert result.path == dest
        assert dest.read_bytes() == b"payload"
        assert not dest.with_name("dest.bin.part").exists()

    def test_missing_source(self, tmp_path):
        result = download_file((tmp_path / "missing").as_uri(), tmp_path / "dest", max_retries=1)
        assert not result.success
        assert result.error


class TestPackageFetcher:
    """Tests for download + extraction of one package."""

    @pytest.fixture
    def repo(self, tmp_path):
        repo = tmp_path / "repo"
        repo.mkdir()
        write_archive(repo, f"{full('zlib', '1.3')}-any.pkg.tar.zst", "zstd")
        return repo

    def _local_download(self, repo):
        def download(url, dest):
            source = repo / url.rsplit('/', 1)[-1]
            if not source.exists():
                return DownloadResult(success=False, error="HTTP 404: Not Found")
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, dest)
            return DownloadResult(success=True, path=dest)
        return download

    def _record(self, name):
        return PackageRecord.from_desc(name, desc_text(name), PREFIX)

    def test_fetch(self, config, repo):
        fetcher = PackageFetcher(config, download=self._local_download(repo))
        files = fetcher.fetch(self._record(full("zlib", "1.3")))

        root = config.install_root.resolve()
        assert root / "include" / "zlib.h" in files
        assert (root / "include" / "zlib.h").exists()
        assert fetcher.archive_path(self._record(full("zlib", "1.3"))).exists()

    def test_download_failure(self, config, repo):
        fetcher = PackageFetcher(config, download=self._local_download(repo))
        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch(self._record(full("bzip2")))
        assert exc_info.value.name == full("bzip2")
        assert "404" in exc_info.value.reason

    def test_package_url(self, config):
        assert config.package_url("a.pkg.tar.zst") == (
            "https://repo.msys2.org/mingw/mingw64/a.pkg.tar.zst"
        )
