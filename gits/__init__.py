"""
gits - keep an inventory of many git repositories in step with their remotes.

Quick Start:
    from pathlib import Path
    from gits import InventoryStore, SyncService, load_settings

    settings = load_settings(Path("~/.config/gits").expanduser())
    service = SyncService(InventoryStore(settings.config_dir))
    for report in service.sync_all(settings.remotes.values()):
        print(report.to_dict())

    # Gated commit through a simulated command port
    from gits import GitClient, SimulatedCommandPort
    GitClient(SimulatedCommandPort()).commit("try it out")

Domain Objects:
    RepositoryIdentity - host, group path and name of a remote repository
    InventorySnapshot - group -> projects mapping for one host
    SyncReport - outcome of syncing one host

Infrastructure:
    RealCommandPort / SimulatedCommandPort - external program execution
    GitClient - git commands, trunk resolution, commit gate
    GitLabClient / GitHubClient - remote discovery
    InventoryStore - atomic per-host inventory files
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    RepositoryIdentity,
    RawProject,
    InventorySnapshot,
    SyncReport,
    SyncStatus,
)

# Infrastructure
from .infra import (
    CommandPort,
    CommandResult,
    RealCommandPort,
    SimulatedCommandPort,
    GitClient,
    GitLabClient,
    GitHubClient,
    InventoryStore,
    resolve_trunk,
    safe_to_commit,
)

# Services
from .services import SyncService, WatchService

# Configuration
from .config import HostKind, RemoteSettings, Settings, load_settings

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "RepositoryIdentity",
    "RawProject",
    "InventorySnapshot",
    "SyncReport",
    "SyncStatus",
    # Infrastructure
    "CommandPort",
    "CommandResult",
    "RealCommandPort",
    "SimulatedCommandPort",
    "GitClient",
    "GitLabClient",
    "GitHubClient",
    "InventoryStore",
    "resolve_trunk",
    "safe_to_commit",
    # Services
    "SyncService",
    "WatchService",
    # Configuration
    "HostKind",
    "RemoteSettings",
    "Settings",
    "load_settings",
]
