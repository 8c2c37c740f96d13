#!/usr/bin/env python3

import click
from pathlib import Path

from gits.cli_utils import AppContext
from gits.config import get_config_dir, set_verbose
from gits.commands.git import commit_handler, push_handler, remote_handler, status_handler
from gits.commands.sync import sync_handler, sync_watched_handler
from gits.commands.list import browse_handler, clone_handler, list_handler


@click.group()
@click.version_option(package_name="gits")
@click.option("-d", "--dryrun", is_flag=True, help="Print external commands instead of running them")
@click.option("-o", "--output", is_flag=True, help="Print URLs instead of opening a browser")
@click.option("--config-dir", type=click.Path(file_okay=False, path_type=Path),
              help="Configuration root (default: $GITS_CONFIG_DIR or ~/.config/gits)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, dryrun, output, config_dir, verbose):
    """gits - keep an inventory of many git repositories in step with their remotes.

    Syncs the project lists of your GitLab and GitHub hosts into local
    inventories for fast project search, clones the ones you watch, and
    refuses to commit on top of a trunk that moved under you.
    """
    set_verbose(verbose)
    if dryrun:
        click.echo("running in dryrun mode", err=True)
    ctx.obj = AppContext(
        config_dir=config_dir or get_config_dir(),
        dry_run=dryrun,
        output=output,
    )


# Current repository
cli.add_command(status_handler)
cli.add_command(commit_handler)
cli.add_command(push_handler)
cli.add_command(remote_handler)

# Inventory
cli.add_command(sync_handler)
cli.add_command(sync_watched_handler)
cli.add_command(list_handler)
cli.add_command(clone_handler)
cli.add_command(browse_handler)


def main():
    cli()

if __name__ == "__main__":
    main()
