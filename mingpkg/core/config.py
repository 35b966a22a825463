"""
Central configuration for mingpkg paths and repository selection.

Architecture selection:
    MINGPKG_ARCH=64 (default) → mingw-w64-x86_64 packages, /mingw64
    MINGPKG_ARCH=32           → mingw-w64-i686 packages, /mingw32
    Any other value is a fatal configuration error.

Mode detection for the state directory:
    1. MINGPKG_BASE_DIR in the environment wins
    2. If .mingpkg.local exists in project root → read base_dir from it (DEV mode)
    3. Otherwise → PROD mode (/var/lib/mingpkg)

Structure:
    <base_dir>/<repo>/index/<full name>/desc        - Description record
    <base_dir>/<repo>/index/<full name>/dependents  - Reverse dependencies
    <base_dir>/<repo>/index/.order                  - Index build order
    <base_dir>/<repo>/installed/<full name>/files   - Installed file manifest
    <base_dir>/<repo>/cache/                        - Downloaded archives

.mingpkg.local format (optional, one setting per line):
    base_dir=/path/to/custom/dir
    # Comments start with #
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from .errors import ConfigError

# Environment variables
ARCH_ENV = "MINGPKG_ARCH"
BASE_DIR_ENV = "MINGPKG_BASE_DIR"
ROOT_ENV = "MINGPKG_ROOT"

# Config file name
LOCAL_CONFIG_FILE = ".mingpkg.local"

PROD_BASE_DIR = Path("/var/lib/mingpkg")
DEV_BASE_DIR = Path.home() / ".local" / "share" / "mingpkg-dev"

REPO_BASE_URL = "https://repo.msys2.org/mingw"

DEFAULT_ARCH = "64"

# arch → (package prefix, repository name)
ARCHITECTURES = {
    "64": ("mingw-w64-x86_64", "mingw64"),
    "32": ("mingw-w64-i686", "mingw32"),
}


@dataclass(frozen=True)
class RepoConfig:
    """Everything that depends on the architecture selection.

    Built once at startup and passed to the stores, the resolver and the
    orchestrators.
    """
    arch: str
    prefix: str
    repo_name: str
    repo_url: str
    base_dir: Path
    install_root: Path

    @property
    def state_dir(self) -> Path:
        return self.base_dir / self.repo_name

    @property
    def index_dir(self) -> Path:
        return self.state_dir / "index"

    @property
    def installed_dir(self) -> Path:
        return self.state_dir / "installed"

    @property
    def cache_dir(self) -> Path:
        return self.state_dir / "cache"

    @property
    def index_url(self) -> str:
        return f"{self.repo_url.rstrip('/')}/{self.repo_name}.db"

    def package_url(self, filename: str) -> str:
        return f"{self.repo_url.rstrip('/')}/{filename}"


def _get_project_root() -> Optional[Path]:
    """Find project root by looking at where the script is located.

    If running from ./bin/mingpkg, project root is the parent of bin/.
    """
    if sys.argv and sys.argv[0]:
        script_path = Path(sys.argv[0]).resolve()
        if script_path.parent.name == 'bin':
            return script_path.parent.parent
    return None


def _read_local_config(project_root: Path) -> Optional[dict]:
    """Read .mingpkg.local config file if it exists in project root.

    Returns:
        Dict with config values, or None if file doesn't exist
    """
    config_path = project_root / LOCAL_CONFIG_FILE
    if not config_path.exists():
        return None

    config = {}
    try:
        with open(config_path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if '=' in line:
                    key, value = line.split('=', 1)
                    config[key.strip()] = value.strip()
    except OSError:
        return None

    return config


def get_base_dir(environ: Mapping[str, str] = None) -> Path:
    """Get the state base directory.

    Args:
        environ: Environment mapping (default: os.environ)
    """
    if environ is None:
        environ = os.environ

    if environ.get(BASE_DIR_ENV):
        return Path(environ[BASE_DIR_ENV]).expanduser()

    project_root = _get_project_root()
    if project_root:
        local_config = _read_local_config(project_root)
        if local_config is not None:
            if 'base_dir' in local_config:
                return Path(local_config['base_dir']).expanduser()
            return DEV_BASE_DIR

    return PROD_BASE_DIR


def load_config(environ: Mapping[str, str] = None,
                base_dir: Union[str, Path] = None) -> RepoConfig:
    """Build the configuration from the environment.

    Args:
        environ: Environment mapping (default: os.environ)
        base_dir: Force the state base directory

    Returns:
        RepoConfig for the selected architecture

    Raises:
        ConfigError: If the architecture selection is invalid
    """
    if environ is None:
        environ = os.environ

    arch = environ.get(ARCH_ENV) or DEFAULT_ARCH
    if arch not in ARCHITECTURES:
        raise ConfigError(
            f"Invalid {ARCH_ENV}={arch!r}: expected one of "
            f"{', '.join(sorted(ARCHITECTURES))}"
        )

    prefix, repo_name = ARCHITECTURES[arch]

    if base_dir is None:
        base_dir = get_base_dir(environ)

    install_root = Path(environ.get(ROOT_ENV) or f"/{repo_name}")

    return RepoConfig(
        arch=arch,
        prefix=prefix,
        repo_name=repo_name,
        repo_url=f"{REPO_BASE_URL}/{repo_name}",
        base_dir=Path(base_dir),
        install_root=install_root,
    )
