"""
Git client infrastructure for gits.

Provides a clean abstraction over git command execution.
All git operations go through a CommandPort, making them:
- Safe to simulate with --dryrun
- Consistent in error handling
- Isolated from business logic

The commit path is gated: before `git commit` runs, the trunk branch is
resolved and the local merge-base with origin/<trunk> must equal the remote
trunk tip.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from ..domain.repository import RepositoryIdentity, is_ssh_url
from ..exit_codes import Divergence, NoTrunkFound
from .command import CommandPort, RealCommandPort

logger = logging.getLogger(__name__)

# Order matters: main is tried before master.
TRUNK_CANDIDATES = ("main", "master")

REMOTE = "origin"


def resolve_trunk(
    port: CommandPort,
    cwd: Optional[str] = None,
    candidates: Sequence[str] = TRUNK_CANDIDATES
) -> str:
    """
    Find the repository's trunk branch.

    Returns the first candidate with a local branch reference.

    Raises:
        NoTrunkFound: If no candidate has a local branch
    """
    for candidate in candidates:
        if port.succeeds("git", ["show-ref", "--verify", f"refs/heads/{candidate}"], cwd=cwd):
            logger.debug(f"Resolved trunk: {candidate}")
            return candidate
    raise NoTrunkFound(candidates)


def safe_to_commit(port: CommandPort, trunk: str, cwd: Optional[str] = None) -> None:
    """
    Check that origin/<trunk> has not moved past the local merge-base.

    Fetches trunk from origin, then compares merge-base(HEAD, origin/<trunk>)
    with the tip of origin/<trunk>. The check is strict equality.

    Raises:
        Divergence: If the two commits differ
        CommandFailedError: If fetch, merge-base or rev-parse fail
    """
    remote_trunk = f"{REMOTE}/{trunk}"
    port.run("git", ["fetch", REMOTE, trunk], cwd=cwd)
    merge_base = port.run("git", ["merge-base", "HEAD", remote_trunk], cwd=cwd).strip()
    remote_tip = port.run("git", ["rev-parse", remote_trunk], cwd=cwd).strip()

    if merge_base != remote_tip:
        raise Divergence(trunk, merge_base, remote_tip)
    logger.debug(f"{remote_trunk} at {remote_tip} is the merge-base; commit allowed")


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient(SimulatedCommandPort())
        client.commit("fix typo")  # resolves trunk, checks, commits
    """

    def __init__(self, port: Optional[CommandPort] = None, cwd: Optional[str] = None):
        """
        Initialize GitClient.

        Args:
            port: CommandPort to run git through (default: RealCommandPort)
            cwd: Working directory for repository commands (default: current)
        """
        self.port = port or RealCommandPort()
        self.cwd = cwd

    def resolve_trunk(self) -> str:
        return resolve_trunk(self.port, cwd=self.cwd)

    def status(self) -> str:
        """Get `git status` output."""
        return self.port.run("git", ["status"], cwd=self.cwd)

    def commit(self, message: str) -> str:
        """
        Commit staged changes once the trunk check passes.

        Args:
            message: Commit message, passed to git as a single argument

        Returns:
            The trunk the check was made against

        Raises:
            NoTrunkFound: If trunk cannot be resolved
            Divergence: If origin/<trunk> moved past the merge-base
        """
        trunk = self.resolve_trunk()
        safe_to_commit(self.port, trunk, cwd=self.cwd)
        logger.info(f"git commit -m {message}")
        self.port.run("git", ["commit", "-m", message], cwd=self.cwd)
        return trunk

    def push(self) -> str:
        """Push the current branch; returns git's output."""
        return self.port.run("git", ["push"], cwd=self.cwd)

    def remote_url(self, remote: str = REMOTE) -> str:
        """Get the URL of a remote."""
        return self.port.run("git", ["remote", "get-url", remote], cwd=self.cwd).strip()

    def web_url(self, remote: str = REMOTE) -> str:
        """
        Get a browsable URL for a remote.

        SSH clone URLs become https://host/group/name; other URLs are
        returned unchanged.
        """
        url = self.remote_url(remote)
        if is_ssh_url(url):
            return RepositoryIdentity.parse(url).web_url
        return url

    def is_cloned(self, identity: RepositoryIdentity, base: Union[str, Path]) -> bool:
        """Check if the repository has a .git directory under base."""
        return (identity.local_path(base) / ".git").is_dir()

    def clone_repo(self, identity: RepositoryIdentity, base: Union[str, Path]) -> Path:
        """
        Clone a repository to base/host/group/name.

        Args:
            identity: Repository to clone
            base: Project directory the host tree lives under

        Returns:
            Local path of the clone

        Raises:
            CommandFailedError: If mkdir or git clone fail
        """
        target = identity.local_path(base)
        self.port.run("mkdir", ["-p", str(target.parent)])
        self.port.run("git", ["clone", identity.clone_url, str(target)])
        logger.info(f"cd {target}")
        return target
