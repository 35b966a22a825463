"""Core modules for mingpkg"""

from .config import RepoConfig, load_config
from .database import PackageDatabase
from .errors import MingpkgError

__all__ = ['RepoConfig', 'load_config', 'PackageDatabase', 'MingpkgError']
