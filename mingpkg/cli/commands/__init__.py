"""CLI command handlers."""

from .install import cmd_install
from .query import cmd_info, cmd_list, cmd_search, cmd_url
from .uninstall import cmd_uninstall
from .update import cmd_update

__all__ = [
    'cmd_info',
    'cmd_install',
    'cmd_list',
    'cmd_search',
    'cmd_uninstall',
    'cmd_update',
    'cmd_url',
]
