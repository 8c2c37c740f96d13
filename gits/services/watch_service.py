"""
Watch service for gits.

Keeps local clones of watched repositories: everything in a host's watched
inventory that has no checkout under the project directory is cloned.
"""

import logging
from typing import Any, Dict, Generator

from ..config import RemoteSettings
from ..domain.repository import RepositoryIdentity
from ..exit_codes import CommandFailedError
from ..infra.git_client import GitClient
from ..infra.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


class WatchService:
    """
    Service for cloning watched repositories.

    Example:
        service = WatchService(store, GitClient(SimulatedCommandPort()))
        for result in service.sync_watched(settings):
            print(result)
    """

    def __init__(self, store: InventoryStore, git: GitClient):
        self.store = store
        self.git = git

    def sync_watched(self, settings: RemoteSettings) -> Generator[Dict[str, Any], None, None]:
        """
        Clone watched repositories that are missing locally.

        A failed clone is reported and the remaining repositories are still
        processed.

        Yields:
            One result dict per watched repository with an 'action' of
            'present', 'cloned' or 'failed'
        """
        base = settings.project_root
        snapshot = self.store.load(settings.host, watched=True)
        if not snapshot:
            logger.info(f"{settings.host}: no watched projects")

        for identity in snapshot.identities():
            result = {
                'repo': identity.selection_line(),
                'path': str(identity.local_path(base)),
            }
            if self.git.is_cloned(identity, base):
                result['action'] = 'present'
                yield result
                continue

            logger.info(f"cloning {identity.slug}")
            try:
                self.git.clone_repo(identity, base)
                result['action'] = 'cloned'
            except CommandFailedError as e:
                logger.error(f"Failed to clone {identity.slug}: {e}")
                result['action'] = 'failed'
                result['error'] = str(e)
            yield result

    def clone(self, identity: RepositoryIdentity, settings: RemoteSettings) -> Dict[str, Any]:
        """
        Clone one repository and start watching it.

        Raises:
            CommandFailedError: If the clone fails; the inventory is untouched
            InventoryIOError: If the watched inventory cannot be written
        """
        path = self.git.clone_repo(identity, settings.project_root)
        self.store.merge(identity.host, identity.group_path, identity.name, watched=True)
        return {
            'repo': identity.selection_line(),
            'path': str(path),
            'action': 'cloned',
        }
