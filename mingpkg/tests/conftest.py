"""Shared fixtures: temporary state trees and index builders."""

from pathlib import Path

import pytest

from mingpkg.core.config import load_config
from mingpkg.core.database import PackageDatabase
from mingpkg.core.errors import FetchError

PREFIX = "mingw-w64-x86_64"


def full(short: str, version: str = "1.0", release: str = "1") -> str:
    """Full package name for the 64-bit family."""
    return f"{PREFIX}-{short}-{version}-{release}"


def desc_text(full_name: str, depends=(), conflicts=(), description="",
              url="", filename=None, extra=""):
    """Render a desc record the way the repository database ships it."""
    version = "-".join(full_name.rsplit("-", 2)[1:])
    sections = [
        ("FILENAME", [filename or f"{full_name}-any.pkg.tar.zst"]),
        ("VERSION", [version]),
        ("DESC", [description] if description else []),
        ("URL", [url] if url else []),
        ("DEPENDS", list(depends)),
        ("CONFLICTS", list(conflicts)),
    ]
    text = ""
    for header, values in sections:
        if values:
            text += f"%{header}%\n" + "".join(v + "\n" for v in values) + "\n"
    return text + extra


@pytest.fixture
def config(tmp_path):
    """Configuration rooted in a temporary directory."""
    environ = {"MINGPKG_ROOT": str(tmp_path / "root")}
    return load_config(environ=environ, base_dir=tmp_path / "state")


@pytest.fixture
def db(config):
    return PackageDatabase(config)


@pytest.fixture
def make_index(config):
    """Write index entries; takes a list of (full name, desc text) in build order."""
    def _make(entries):
        index_dir = config.index_dir
        index_dir.mkdir(parents=True, exist_ok=True)
        for full_name, text in entries:
            entry = index_dir / full_name
            entry.mkdir(exist_ok=True)
            (entry / "desc").write_text(text)
        (index_dir / ".order").write_text("".join(name + "\n" for name, _ in entries))
        return index_dir
    return _make


class FakeFetcher:
    """Stands in for PackageFetcher: creates a few files per package."""

    def __init__(self, root: Path, fail=()):
        self.root = Path(root)
        self.fail = set(fail)
        self.fetched = []

    def fetch(self, record):
        self.fetched.append(record.full_name)
        if record.full_name in self.fail:
            raise FetchError(record.full_name, "HTTP 404: Not Found")

        share = self.root / "share"
        pkg_dir = share / record.short_name
        pkg_dir.mkdir(parents=True, exist_ok=True)
        data = pkg_dir / "README"
        data.write_text(record.full_name)
        return [share, pkg_dir, data]


@pytest.fixture
def fake_fetcher(config):
    return FakeFetcher(config.install_root)
