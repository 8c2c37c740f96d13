"""
Git commands for the current repository: status, commit, push, remote.

`commit` is gated: it only runs when the local merge-base with the remote
trunk is the remote trunk's tip.
"""

import click

from ..cli_utils import AppContext, handle_errors, open_url, pass_app


@click.command("status")
@pass_app
@handle_errors
def status_handler(app: AppContext):
    """Show `git status` for the current repository."""
    click.echo(app.git.status())


@click.command("commit")
@click.argument("message", nargs=-1, required=True)
@click.option("--no-push", is_flag=True, help="Commit without pushing afterwards")
@pass_app
@handle_errors
def commit_handler(app: AppContext, message, no_push):
    """
    Commit staged changes, then push.

    The words of MESSAGE are joined with spaces. The commit is refused if
    origin/<trunk> has moved past your branch's merge-base with it.

    \b
    Examples:
        gits commit fix the flaky test
        gits --dryrun commit try it out
    """
    git = app.git
    trunk = git.commit(" ".join(message))
    click.echo(f"Committed (checked against origin/{trunk})")
    if not no_push:
        output = git.push()
        click.echo(f"Pushing: {output.strip()}")


@click.command("push")
@pass_app
@handle_errors
def push_handler(app: AppContext):
    """Push the current branch."""
    click.echo(app.git.push())


@click.command("remote")
@pass_app
@handle_errors
def remote_handler(app: AppContext):
    """
    Open the origin remote in a browser.

    SSH remotes are converted to their https page. With --output the URL
    is printed instead.
    """
    open_url(app, app.git.web_url())
