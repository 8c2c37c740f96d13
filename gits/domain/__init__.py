"""
Domain layer for gits.

Contains pure domain objects with no I/O or side effects:
- RepositoryIdentity: host, group path and name of a remote repository
- RawProject: a listing API record before URL parsing
- InventorySnapshot: group -> projects mapping for one host
- SyncReport: outcome of syncing one host
"""

from .repository import RepositoryIdentity, RawProject, is_ssh_url, parse_timestamp
from .inventory import InventorySnapshot
from .sync import SyncReport, SyncStatus

__all__ = [
    'RepositoryIdentity',
    'RawProject',
    'is_ssh_url',
    'parse_timestamp',
    'InventorySnapshot',
    'SyncReport',
    'SyncStatus',
]
