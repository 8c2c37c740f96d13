"""
Service layer for gits.

Services orchestrate infrastructure and domain objects:
- SyncService: discover remote projects and merge them into inventories
- WatchService: clone watched repositories
"""

from .sync_service import SyncService, projects_to_identities
from .watch_service import WatchService

__all__ = [
    'SyncService',
    'projects_to_identities',
    'WatchService',
]
