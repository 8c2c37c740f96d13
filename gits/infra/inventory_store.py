"""
Inventory store infrastructure for gits.

Persists one TOML inventory per host under the configuration root:
- <host>.toml          every repository discovered on the host
- <host>-watched.toml  repositories the user watches or has cloned

Writes are atomic (write to temp, then rename), so a failed write always
leaves the previous inventory in place. Merges are idempotent and never
remove existing entries.
"""

import logging
import os
import tempfile
import tomllib
from pathlib import Path
from typing import Dict, Iterable, List

import toml

from ..domain.inventory import InventorySnapshot
from ..domain.repository import RepositoryIdentity
from ..exit_codes import ConfigError, InventoryIOError

logger = logging.getLogger(__name__)

WATCHED_SUFFIX = "-watched"


class InventoryStore:
    """
    Per-host inventory files with atomic writes.

    Example:
        store = InventoryStore(Path("~/.config/gits"))
        store.merge("gitlab.example.com", "squad/tools", "mytool")
        store.load("gitlab.example.com").groups
        # {'squad/tools': ('mytool',)}
    """

    def __init__(self, root: Path):
        """
        Initialize InventoryStore.

        Args:
            root: Directory holding the inventory files (created on first write)
        """
        self.root = Path(root).expanduser()

    def path_for(self, host: str, watched: bool = False) -> Path:
        """Path of a host's inventory file."""
        suffix = WATCHED_SUFFIX if watched else ""
        return self.root / f"{host}{suffix}.toml"

    def load(self, host: str, watched: bool = False) -> InventorySnapshot:
        """
        Read a host's inventory.

        A missing file is an empty inventory, not an error.

        Raises:
            ConfigError: If the file exists but cannot be parsed
        """
        path = self.path_for(host, watched)
        try:
            with open(path, 'rb') as f:
                document = tomllib.load(f)
        except FileNotFoundError:
            return InventorySnapshot(host)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse inventory {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to read inventory {path}: {e}")
        return InventorySnapshot.from_document(host, document)

    def merge(self, host: str, group: str, project: str, watched: bool = False) -> InventorySnapshot:
        """
        Add one project to a host's inventory.

        Returns:
            The snapshot now on disk

        Raises:
            InventoryIOError: If the file cannot be written
        """
        return self.merge_many(host, [RepositoryIdentity(host, group, project)], watched)

    def merge_many(
        self,
        host: str,
        identities: Iterable[RepositoryIdentity],
        watched: bool = False
    ) -> InventorySnapshot:
        """
        Add several projects to a host's inventory with a single write.

        The result is the same as calling merge() for each identity.
        """
        current = self.load(host, watched)
        updated = current.with_identities(identities)
        self.write(updated, watched)
        return updated

    def write(self, snapshot: InventorySnapshot, watched: bool = False) -> None:
        """
        Replace a host's inventory atomically.

        Raises:
            InventoryIOError: If the file cannot be written or renamed
        """
        path = self.path_for(snapshot.host, watched)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(path, snapshot.to_document())
        except OSError as e:
            raise InventoryIOError(f"Failed to write inventory {path}: {e}", path=str(path)) from e
        logger.debug(f"Wrote {len(snapshot)} projects to {path}")

    def _write_atomic(self, path: Path, document: dict) -> None:
        """Write document atomically using temp file and rename."""
        # Write to temp file in same directory
        fd, temp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp"
        )

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(toml.dumps(document))

            # Atomic rename
            os.replace(temp_path, path)

        except Exception:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def hosts(self, watched: bool = False) -> List[str]:
        """Hosts with an inventory file in the root."""
        if not self.root.is_dir():
            return []
        hosts = []
        for path in self.root.glob("*.toml"):
            stem = path.stem
            if stem == "config":
                continue
            if stem.endswith(WATCHED_SUFFIX) != watched:
                continue
            hosts.append(stem[:-len(WATCHED_SUFFIX)] if watched else stem)
        return sorted(hosts)

    def load_all(self, watched: bool = False) -> Dict[str, InventorySnapshot]:
        """Read every host's inventory, keyed by host."""
        return {host: self.load(host, watched) for host in self.hosts(watched)}
