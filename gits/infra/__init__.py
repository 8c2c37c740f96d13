"""
Infrastructure layer for gits.

Contains abstractions for external systems:
- CommandPort: external program execution (real or simulated)
- GitClient: git commands, trunk resolution and the commit gate
- GitLabClient / GitHubClient: remote project discovery
- InventoryStore: per-host TOML inventory persistence

These provide clean interfaces that can be mocked for testing.
"""

from .command import (
    CommandPort,
    CommandResult,
    RealCommandPort,
    SimulatedCommandPort,
    create_command_port,
)
from .git_client import GitClient, resolve_trunk, safe_to_commit
from .discovery import DiscoveryClient, create_discovery_client, paginate
from .gitlab_client import GitLabClient
from .github_client import GitHubClient
from .inventory_store import InventoryStore

__all__ = [
    'CommandPort',
    'CommandResult',
    'RealCommandPort',
    'SimulatedCommandPort',
    'create_command_port',
    'GitClient',
    'resolve_trunk',
    'safe_to_commit',
    'DiscoveryClient',
    'create_discovery_client',
    'paginate',
    'GitLabClient',
    'GitHubClient',
    'InventoryStore',
]
