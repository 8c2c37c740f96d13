"""
Handles the 'sync' and 'sync-watched' commands.

`sync` discovers new projects on every configured host and merges them
into the per-host inventories, then advances each synced host's last_pull.
`sync-watched` clones watched projects that are missing locally.
"""

import logging
from typing import Optional

import click

from ..cli_utils import AppContext, handle_errors, output_jsonl, pass_app
from ..config import save_watermark
from ..exit_codes import GENERAL_ERROR, CommandError, ConfigError, PartialSuccessError
from ..render import render_sync_table, render_watch_table
from ..services.sync_service import SyncService
from ..services.watch_service import WatchService

logger = logging.getLogger(__name__)


def _selected_remotes(app: AppContext, host: Optional[str]):
    settings = app.settings
    if host:
        return [settings.remote(host)]
    return [settings.remotes[h] for h in settings.hosts()]


@click.command("sync")
@click.option("--host", help="Only sync this host")
@click.option("--table/--no-table", default=False, help="Display as formatted table")
@click.option("--keep-watermark", is_flag=True, help="Do not advance last_pull after syncing")
@pass_app
@handle_errors
def sync_handler(app: AppContext, host, table, keep_watermark):
    """
    Sync the project inventory from every configured remote.

    Only projects created since each host's last_pull are downloaded.
    Hosts are synced one at a time; a failing host does not stop the rest.
    """
    remotes = _selected_remotes(app, host)
    service = SyncService(app.store)
    reports = service.sync_all(remotes)

    if table:
        render_sync_table(reports)
    else:
        output_jsonl(reports)

    unsaved = []
    if not keep_watermark:
        for report in reports:
            if not report.success or report.newest_created_at is None:
                continue
            try:
                save_watermark(app.settings, report.host, report.newest_created_at)
            except ConfigError as e:
                logger.error(f"{report.host}: could not save last_pull: {e}")
                unsaved.append(report.host)

    failed = [r for r in reports if not r.success]
    if failed and len(failed) == len(reports):
        raise CommandError(f"Sync failed for {', '.join(r.host for r in failed)}", GENERAL_ERROR)
    if failed:
        raise PartialSuccessError(
            f"Sync failed for {', '.join(r.host for r in failed)}",
            succeeded=len(reports) - len(failed),
            failed=len(failed),
        )
    if unsaved:
        raise ConfigError(f"Synced, but last_pull was not saved for {', '.join(unsaved)}")


@click.command("sync-watched")
@click.option("--host", help="Only clone watched projects of this host")
@click.option("--table/--no-table", default=False, help="Display as formatted table")
@pass_app
@handle_errors
def sync_watched_handler(app: AppContext, host, table):
    """Clone watched projects that have no local checkout yet."""
    service = WatchService(app.store, app.git)
    results = []
    for remote in _selected_remotes(app, host):
        for result in service.sync_watched(remote):
            results.append(result)
            if not table:
                output_jsonl([result])

    if table:
        render_watch_table(results)

    failed = [r for r in results if r.get('action') == 'failed']
    if failed:
        raise PartialSuccessError(
            f"Failed to clone {len(failed)} repositories",
            succeeded=len(results) - len(failed),
            failed=len(failed),
        )
