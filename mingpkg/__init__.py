"""
mingpkg - Secondary binary package manager for MinGW-w64 packages

Layered on top of the host package manager, featuring:
- Wholesale index updates from the remote repository
- Dependency closure resolution with a persistent dependents graph
- Manifest-driven uninstall that never removes shared directories
"""

__version__ = "0.3.0"
__author__ = "mingpkg contributors"
