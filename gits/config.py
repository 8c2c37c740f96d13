#!/usr/bin/env python3

import os
import tomllib
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, List, Mapping, Optional

import logging
import sys

import toml
from dotenv import find_dotenv, load_dotenv

from .domain.repository import RepositoryIdentity, parse_timestamp
from .exit_codes import ConfigError, ParseError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("gits")

SETTINGS_FILENAME = "config.toml"


def get_config_dir() -> Path:
    """Get the configuration root directory.

    Checks in order:
    1. GITS_CONFIG_DIR environment variable
    2. ~/.config/gits
    """
    if os.environ.get('GITS_CONFIG_DIR'):
        return Path(os.environ['GITS_CONFIG_DIR']).expanduser()
    return Path.home() / '.config' / 'gits'


def set_verbose(verbose: bool) -> None:
    """Switch gits logging to DEBUG when verbose."""
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def load_env(config_dir: Path) -> None:
    """
    Load .env files so credential variables can live next to the settings.

    Variables already in the environment are never overridden.
    """
    for env_file in (Path(config_dir) / '.env', find_dotenv(usecwd=True)):
        if env_file and Path(env_file).is_file():
            load_dotenv(env_file, override=False)
            logger.debug(f"Loaded environment from {env_file}")


class HostKind(Enum):
    """API flavour of a remote host."""
    GITLAB = "gitlab"
    GITHUB = "github"


@dataclass(frozen=True)
class RemoteSettings:
    """
    Settings for one remote host.

    token_env names the environment variable that holds the secret; the
    secret itself never appears in the settings file.
    """
    host: str
    api_url: str
    kind: HostKind = HostKind.GITLAB
    token_env: str = ""
    project_directory: str = "~"
    watch_groups: FrozenSet[str] = field(default_factory=frozenset)
    watch_projects: FrozenSet[str] = field(default_factory=frozenset)
    last_pull: Optional[datetime] = None
    user: str = ""

    @classmethod
    def from_dict(cls, host: str, data: Mapping) -> 'RemoteSettings':
        """
        Create from a [remotes."<host>"] table.

        Raises:
            ConfigError: If a required field is missing or malformed
        """
        if not isinstance(data, Mapping):
            raise ConfigError(f"[remotes.\"{host}\"] must be a table")

        api_url = data.get('api_url') or data.get('gitlab_api_url')
        if not api_url:
            raise ConfigError(f"Remote {host}: 'api_url' is required")

        kind_value = str(data.get('host_kind', HostKind.GITLAB.value)).lower()
        try:
            kind = HostKind(kind_value)
        except ValueError:
            raise ConfigError(
                f"Remote {host}: host_kind must be 'gitlab' or 'github', got {kind_value!r}"
            )

        last_pull = None
        if data.get('last_pull'):
            raw = data['last_pull']
            if isinstance(raw, datetime):
                last_pull = raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
            else:
                try:
                    last_pull = parse_timestamp(str(raw))
                except ParseError as e:
                    raise ConfigError(f"Remote {host}: invalid last_pull: {e}")

        watch_groups = data.get('watch_groups', [])
        watch_projects = data.get('watch_projects', [])
        if not isinstance(watch_groups, list) or not isinstance(watch_projects, list):
            raise ConfigError(f"Remote {host}: watch_groups and watch_projects must be lists")

        return cls(
            host=host,
            api_url=str(api_url),
            kind=kind,
            token_env=str(data.get('token', '')),
            project_directory=str(data.get('project_directory') or '~'),
            watch_groups=frozenset(watch_groups),
            watch_projects=frozenset(watch_projects),
            last_pull=last_pull,
            user=str(data.get('user', '')),
        )

    def resolve_token(self, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
        """Look up the secret named by token_env in the environment."""
        if not self.token_env:
            return None
        env = os.environ if env is None else env
        return env.get(self.token_env) or None

    def is_watched(self, identity: RepositoryIdentity) -> bool:
        """Check whether identity matches the host's watch filters."""
        return (
            identity.group_path in self.watch_groups
            or identity.slug in self.watch_projects
        )

    @property
    def project_root(self) -> Path:
        return Path(self.project_directory).expanduser()


@dataclass
class Settings:
    """All configured remotes, read from <config_dir>/config.toml."""
    config_dir: Path
    remotes: Dict[str, RemoteSettings] = field(default_factory=dict)

    @property
    def path(self) -> Path:
        return self.config_dir / SETTINGS_FILENAME

    def hosts(self) -> List[str]:
        return sorted(self.remotes)

    def remote(self, host: str) -> RemoteSettings:
        """
        Get one host's settings.

        Raises:
            ConfigError: If the host is not configured
        """
        try:
            return self.remotes[host]
        except KeyError:
            raise ConfigError(
                f"Host {host!r} is not configured in {self.path} "
                f"(configured: {', '.join(self.hosts()) or 'none'})"
            )

    def default_remote(self) -> RemoteSettings:
        """The first configured host, for commands that act on one host."""
        if not self.remotes:
            raise ConfigError(f"No remotes configured in {self.path}")
        return self.remotes[self.hosts()[0]]


def _read_document(path: Path) -> dict:
    try:
        with open(path, 'rb') as f:
            return tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Settings file not found: {path}")
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse settings file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read settings file {path}: {e}")


def load_settings(config_dir: Optional[Path] = None) -> Settings:
    """
    Load remote settings.

    Args:
        config_dir: Configuration root (default: get_config_dir())

    Raises:
        ConfigError: If the file is missing or malformed
    """
    config_dir = Path(config_dir) if config_dir else get_config_dir()
    path = config_dir / SETTINGS_FILENAME
    document = _read_document(path)

    remotes = document.get('remotes', {})
    if not isinstance(remotes, dict):
        raise ConfigError(f"{path}: [remotes] must be a table")

    return Settings(
        config_dir=config_dir,
        remotes={host: RemoteSettings.from_dict(host, data) for host, data in remotes.items()},
    )


def format_watermark(when: datetime) -> str:
    """ISO 8601 in UTC with a Z suffix."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def save_watermark(settings: Settings, host: str, when: datetime) -> Optional[RemoteSettings]:
    """
    Advance a host's last_pull in the settings file.

    The watermark only moves forward: an older or equal timestamp leaves
    the file untouched.

    Returns:
        Updated RemoteSettings, or None if nothing changed
    """
    current = settings.remote(host)
    if current.last_pull is not None and when <= current.last_pull:
        return None

    document = _read_document(settings.path)
    document.setdefault('remotes', {}).setdefault(host, {})['last_pull'] = format_watermark(when)

    try:
        with open(settings.path, 'w') as f:
            toml.dump(document, f)
    except OSError as e:
        raise ConfigError(f"Failed to save settings to {settings.path}: {e}")

    updated = replace(current, last_pull=when)
    settings.remotes[host] = updated
    logger.info(f"{host}: last_pull advanced to {format_watermark(when)}")
    return updated
