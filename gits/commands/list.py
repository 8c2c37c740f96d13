"""
Handles the 'list', 'clone' and 'browse' commands.

`list` prints one "host group/name" line per inventory entry, ready to be
piped into a fuzzy finder. `clone` and `browse` take such a line back and
act on it.

Example:
    gits clone "$(gits list | fzf)"
"""

import click

from ..cli_utils import AppContext, handle_errors, open_url, output_jsonl, pass_app
from ..domain.repository import RepositoryIdentity
from ..render import render_inventory_table
from ..services.watch_service import WatchService


@click.command("list")
@click.option("--watched", is_flag=True, help="List the watched inventory instead of everything")
@click.option("--table/--no-table", default=False, help="Display as formatted table")
@pass_app
@handle_errors
def list_handler(app: AppContext, watched, table):
    """List known projects as 'host group/name' lines."""
    inventories = app.store.load_all(watched=watched)
    if table:
        render_inventory_table(inventories)
        return

    for host in sorted(inventories):
        for identity in inventories[host].identities():
            click.echo(identity.selection_line())


@click.command("clone")
@click.argument("selection")
@pass_app
@handle_errors
def clone_handler(app: AppContext, selection):
    """
    Clone a project and add it to the watched inventory.

    SELECTION is a line printed by `gits list`, e.g. "gitlab.com squad/tools/mytool".
    The clone goes to <project_directory>/<host>/<group>/<name>.
    """
    identity = RepositoryIdentity.from_selection(selection)
    remote = app.settings.remote(identity.host)
    result = WatchService(app.store, app.git).clone(identity, remote)
    output_jsonl([result])


@click.command("browse")
@click.argument("selection")
@pass_app
@handle_errors
def browse_handler(app: AppContext, selection):
    """Open a project's page. SELECTION is a line printed by `gits list`."""
    identity = RepositoryIdentity.from_selection(selection)
    open_url(app, identity.web_url)
