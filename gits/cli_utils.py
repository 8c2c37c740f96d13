"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
from dataclasses import dataclass, field
from functools import wraps
from pathlib import Path
from typing import Any, Iterable, Optional

import click

from .config import Settings, load_env, load_settings
from .exit_codes import (
    INTERRUPTED,
    CommandError,
    Divergence,
    exit_with_code,
)
from .infra.command import CommandPort, create_command_port
from .infra.git_client import GitClient
from .infra.inventory_store import InventoryStore


@dataclass
class AppContext:
    """
    Per-invocation state shared by all commands.

    The configuration root is resolved once by the top-level group and
    threaded into everything that reads or writes files.
    """
    config_dir: Path
    dry_run: bool = False
    output: bool = False
    _port: Optional[CommandPort] = field(default=None, repr=False)
    _settings: Optional[Settings] = field(default=None, repr=False)

    @property
    def port(self) -> CommandPort:
        if self._port is None:
            self._port = create_command_port(self.dry_run)
        return self._port

    @property
    def git(self) -> GitClient:
        return GitClient(self.port)

    @property
    def store(self) -> InventoryStore:
        return InventoryStore(self.config_dir)

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            load_env(self.config_dir)
            self._settings = load_settings(self.config_dir)
        return self._settings


pass_app = click.make_pass_decorator(AppContext)


def print_divergence(e: Divergence) -> None:
    """Explain a blocked commit without a crash-style message."""
    click.echo(f"Commit blocked: origin/{e.trunk} has commits your branch does not.", err=True)
    click.echo(f"  merge-base HEAD origin/{e.trunk}: {e.merge_base or '<none>'}", err=True)
    click.echo(f"  origin/{e.trunk}:                 {e.remote_tip or '<none>'}", err=True)
    click.echo(f"Pull or rebase onto origin/{e.trunk} first, then commit again.", err=True)


def handle_errors(func):
    """
    Decorator that provides standard error behavior:
    - CommandError subclasses exit with their own exit code
    - Divergence prints guidance instead of an error
    - Ctrl+C exits with 130
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            exit_with_code(INTERRUPTED, "Interrupted by user")
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except Divergence as e:
            print_divergence(e)
            sys.exit(e.exit_code)
        except CommandError as e:
            exit_with_code(e.exit_code, f"Error: {e}")

    return wrapper


def output_jsonl(items: Iterable[Any]) -> None:
    """Print each dict as one JSON line on stdout."""
    for item in items:
        if hasattr(item, 'to_dict'):
            item = item.to_dict()
        print(json.dumps(item, ensure_ascii=False), flush=True)


def open_url(app: AppContext, url: str) -> None:
    """Print, simulate or open url according to --output and --dryrun."""
    if app.output:
        click.echo(url)
    elif app.dry_run:
        click.echo(f"DRY RUN:: command open remote {url}")
    else:
        click.launch(url)
        click.echo(f"Opened: {url}")
