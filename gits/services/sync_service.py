"""
Sync service for gits.

Orchestrates discovery across configured hosts and merges what each host
returns into its inventory. Hosts are processed one after another and each
is persisted on its own: a failing host is reported and the run moves on.
"""

import logging
import os
from typing import Callable, Iterable, List, Mapping, Optional, Tuple

from ..config import HostKind, RemoteSettings
from ..domain.repository import RawProject, RepositoryIdentity
from ..domain.sync import SyncReport, SyncStatus
from ..exit_codes import ConfigError, InventoryIOError, NetworkError, ParseError
from ..infra.discovery import DiscoveryClient, create_discovery_client
from ..infra.inventory_store import InventoryStore

logger = logging.getLogger(__name__)

ClientFactory = Callable[[RemoteSettings, Optional[str]], DiscoveryClient]


def projects_to_identities(
    projects: Iterable[RawProject],
    host: str = ""
) -> Tuple[List[RepositoryIdentity], int]:
    """
    Parse the clone URL of every project.

    Projects whose URL does not parse are logged and skipped.

    Returns:
        (identities, skipped_count)
    """
    identities: List[RepositoryIdentity] = []
    skipped = 0
    for project in projects:
        try:
            identities.append(RepositoryIdentity.parse(project.clone_url))
        except ParseError as e:
            skipped += 1
            logger.warning(f"{host}: skipping project: {e}")
    return identities, skipped


class SyncService:
    """
    Service that keeps host inventories in step with the remotes.

    Example:
        service = SyncService(InventoryStore(config_dir))
        for report in service.sync_all(settings.remotes.values()):
            print(report.to_dict())
    """

    def __init__(
        self,
        store: InventoryStore,
        client_factory: ClientFactory = create_discovery_client,
        env: Optional[Mapping[str, str]] = None
    ):
        """
        Initialize SyncService.

        Args:
            store: Inventory store to merge into
            client_factory: Builds a discovery client from settings and token
            env: Environment used to resolve tokens (default: os.environ)
        """
        self.store = store
        self.client_factory = client_factory
        self.env = os.environ if env is None else env

    def _token_for(self, settings: RemoteSettings) -> Optional[str]:
        token = settings.resolve_token(self.env)
        if token is None and settings.kind == HostKind.GITLAB:
            raise ConfigError(
                f"{settings.host}: can't find token in environment variable "
                f"{settings.token_env or '<unset>'}"
            )
        return token

    def _merge(self, identities: List[RepositoryIdentity], watched: bool = False) -> None:
        # Inventories are keyed by the host named in the clone URL.
        by_host = {}
        for identity in identities:
            by_host.setdefault(identity.host, []).append(identity)
        for host, host_identities in sorted(by_host.items()):
            self.store.merge_many(host, host_identities, watched=watched)

    def sync_host(self, settings: RemoteSettings) -> SyncReport:
        """
        Discover new projects on one host and merge them.

        Raises:
            ConfigError: If the host's token is missing
            NetworkError: If discovery fails; nothing is written
            ParseError: If the newest project of a page is malformed
            InventoryIOError: If an inventory cannot be written
        """
        host = settings.host
        client = self.client_factory(settings, self._token_for(settings))
        projects = client.discover(settings.last_pull)

        identities, skipped = projects_to_identities(projects, host)
        watched = [i for i in identities if settings.is_watched(i)]
        self._merge(identities)
        self._merge(watched, watched=True)

        newest = max((p.created_at for p in projects), default=None)
        report = SyncReport(
            host=host,
            status=SyncStatus.SUCCESS,
            discovered=len(projects),
            merged=len(identities),
            skipped=skipped + client.skipped,
            watched=len(watched),
            newest_created_at=newest,
        )
        logger.info(
            f"{host}: merged {report.merged} projects "
            f"({report.watched} watched, {report.skipped} skipped)"
        )
        return report

    def sync_all(self, remotes: Iterable[RemoteSettings]) -> List[SyncReport]:
        """
        Sync every host in host-name order.

        One host's failure does not stop the others; it is returned as a
        FAILED report.
        """
        reports = []
        for settings in sorted(remotes, key=lambda s: s.host):
            try:
                reports.append(self.sync_host(settings))
            except (NetworkError, ConfigError, InventoryIOError, ParseError) as e:
                logger.error(f"{settings.host}: sync failed: {e}")
                reports.append(SyncReport.failed(settings.host, e))
        return reports
