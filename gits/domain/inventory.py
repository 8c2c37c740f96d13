"""
Inventory snapshot domain object for gits.

An InventorySnapshot is the typed form of one inventory file: for a single
host, a mapping of group path to the project names known in that group.
Names within a group are unique and kept sorted so repeated merges give
byte-identical output.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple

from ..exit_codes import ConfigError
from .repository import RepositoryIdentity


def _freeze(groups: Mapping[str, Iterable[str]]) -> Dict[str, Tuple[str, ...]]:
    return {
        group: tuple(sorted(set(names)))
        for group, names in sorted(groups.items())
    }


@dataclass(frozen=True)
class InventorySnapshot:
    """
    Immutable group -> projects mapping for one host.

    To "update" a snapshot, call with_project() or with_identities(), which
    return new instances.

    Example:
        snapshot = InventorySnapshot("gitlab.example.com")
        snapshot = snapshot.with_project("squad/tools", "mytool")
        snapshot.to_document()  # {'groups': {'squad/tools': ['mytool']}}
    """
    host: str
    groups: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'groups', _freeze(self.groups))

    def with_project(self, group: str, project: str) -> 'InventorySnapshot':
        """Return a snapshot that also contains group/project."""
        if self.contains(group, project):
            return self
        groups = {g: list(names) for g, names in self.groups.items()}
        groups.setdefault(group, []).append(project)
        return InventorySnapshot(self.host, groups)

    def with_identities(self, identities: Iterable[RepositoryIdentity]) -> 'InventorySnapshot':
        """Return a snapshot that also contains every identity given."""
        groups = {g: set(names) for g, names in self.groups.items()}
        for identity in identities:
            groups.setdefault(identity.group_path, set()).add(identity.name)
        return InventorySnapshot(self.host, groups)

    def contains(self, group: str, project: str) -> bool:
        return project in self.groups.get(group, ())

    def identities(self) -> Iterator[RepositoryIdentity]:
        """Yield every repository in group, then name, order."""
        for group, names in self.groups.items():
            for name in names:
                yield RepositoryIdentity(self.host, group, name)

    def __len__(self) -> int:
        return sum(len(names) for names in self.groups.values())

    def __bool__(self) -> bool:
        return bool(self.groups)

    def to_document(self) -> Dict[str, Any]:
        """Convert to the on-disk document shape."""
        return {'groups': {group: list(names) for group, names in self.groups.items()}}

    @classmethod
    def from_document(cls, host: str, document: Mapping[str, Any]) -> 'InventorySnapshot':
        """
        Create from a parsed inventory document.

        Raises:
            ConfigError: If the document does not have a [groups] table of
                string lists
        """
        groups = document.get('groups', {})
        if not isinstance(groups, Mapping):
            raise ConfigError(f"Inventory for {host}: [groups] must be a table")

        parsed: Dict[str, List[str]] = {}
        for group, names in groups.items():
            if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                raise ConfigError(
                    f"Inventory for {host}: group {group!r} must be a list of project names"
                )
            parsed[group] = names
        return cls(host, parsed)
