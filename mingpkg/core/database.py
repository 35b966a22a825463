"""
Package state for mingpkg

Bundles the three stores kept under the state directory of one
architecture (index, dependents graph, installed manifests) together
with the name and dependency resolvers built on top of them.
"""

from .config import RepoConfig, load_config
from .dependents import DependentsGraph
from .errors import IndexMissingError
from .index import NameResolver, PackageIndex
from .installed import InstalledStore
from .resolver import DependencyResolver


class PackageDatabase:
    """Filesystem-backed package state."""

    def __init__(self, config: RepoConfig = None):
        """Initialize stores.

        Args:
            config: Repository configuration. If None, built from the
                    environment with load_config().
        """
        self.config = config or load_config()
        self.index = PackageIndex(self.config)
        self.names = NameResolver(self.index, self.config.prefix)
        self.dependents = DependentsGraph(self.config)
        self.installed = InstalledStore(self.config)
        self.resolver = DependencyResolver(self.index, self.names)

    def require_index(self):
        """Raise IndexMissingError unless an update has been run."""
        if not self.index.exists():
            raise IndexMissingError(self.config.index_dir)

    def resolve_installed(self, query: str) -> str:
        """Resolve query against installed packages first, then the index.

        Installed packages may be versions the index no longer lists.
        """
        if self.installed.is_installed(query):
            return query
        regex = self.names.pattern(query)
        matches = [name for name in self.installed.list_installed() if regex.match(name)]
        if matches:
            return matches[-1]
        self.require_index()
        return self.names.resolve(query)
