"""
Repository identity domain objects for gits.

RepositoryIdentity names a repository on a remote host by its host, group
path and project name. It is derived from an SSH clone URL and is never
persisted as an object; only its three fields are written to an inventory.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

from ..exit_codes import ParseError

# git@host:group/sub/group/name.git
SSH_URL_PATTERN = re.compile(r'^git@([^/:]+):(.+)/([^/:]+)\.git$')


def is_ssh_url(url: str) -> bool:
    """Check whether url has the git@host:group/name.git shape."""
    return SSH_URL_PATTERN.match(url.strip()) is not None


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp as returned by GitLab and GitHub.

    Accepts a trailing 'Z' and fractional seconds. Naive timestamps are
    taken to be UTC so they compare with the aware ones.

    Raises:
        ParseError: If value is not a valid timestamp
    """
    if not isinstance(value, str) or not value.strip():
        raise ParseError(f"Missing timestamp: {value!r}", str(value))
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ParseError(f"Invalid timestamp {value!r}: {e}", value) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class RepositoryIdentity:
    """
    A repository on a remote host.

    Example:
        repo = RepositoryIdentity.parse("git@gitlab.company.dev:squad/tools/mytool.git")
        repo.group_path  # "squad/tools"
        repo.name        # "mytool"
    """
    host: str
    group_path: str
    name: str

    @classmethod
    def parse(cls, url: str) -> 'RepositoryIdentity':
        """
        Parse an SSH clone URL.

        Args:
            url: Clone URL of the form git@host:group/path/name.git

        Returns:
            RepositoryIdentity with all three fields populated

        Raises:
            ParseError: If url does not have the expected shape
        """
        if not isinstance(url, str):
            raise ParseError(f"Not a clone URL: {url!r}", str(url))
        match = SSH_URL_PATTERN.match(url.strip())
        if not match:
            raise ParseError(f"Not an SSH clone URL: {url!r}", url)
        host, group_path, name = match.groups()
        if not (host and group_path and name):
            raise ParseError(f"Incomplete SSH clone URL: {url!r}", url)
        return cls(host=host, group_path=group_path, name=name)

    @classmethod
    def from_selection(cls, line: str) -> 'RepositoryIdentity':
        """
        Parse a 'host group/name' line as printed by `gits list`.

        Raises:
            ParseError: If the line is not in that format
        """
        host, sep, slug = line.strip().partition(' ')
        if not sep or not host or not slug.strip():
            raise ParseError(f"Invalid selection: {line!r}", line)
        return cls.parse(f"git@{host}:{slug.strip()}.git")

    @property
    def slug(self) -> str:
        return f"{self.group_path}/{self.name}"

    @property
    def clone_url(self) -> str:
        return f"git@{self.host}:{self.slug}.git"

    @property
    def web_url(self) -> str:
        return f"https://{self.host}/{self.slug}"

    def local_path(self, base: Union[str, Path]) -> Path:
        """Directory the repository is cloned into under base."""
        return Path(base).expanduser() / self.host / self.group_path / self.name

    def selection_line(self) -> str:
        return f"{self.host} {self.slug}"

    def __str__(self) -> str:
        return self.selection_line()


@dataclass(frozen=True)
class RawProject:
    """A project record from a host's listing API, before URL parsing."""
    clone_url: str
    created_at: datetime

    @classmethod
    def from_gitlab(cls, data: Dict[str, Any]) -> 'RawProject':
        """Create from a GitLab /projects item."""
        return cls(
            clone_url=data.get('ssh_url_to_repo') or '',
            created_at=parse_timestamp(data.get('created_at', '')),
        )

    @classmethod
    def from_github(cls, data: Dict[str, Any]) -> 'RawProject':
        """Create from a GitHub /users/{user}/repos item."""
        return cls(
            clone_url=data.get('ssh_url') or '',
            created_at=parse_timestamp(data.get('created_at', '')),
        )
