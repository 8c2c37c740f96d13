"""Shared fixtures for gits tests."""

import pytest

from gits.infra.command import CommandPort, CommandResult


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(stdout=stdout, exit_success=True)


def fail(stderr: str = "fatal: error") -> CommandResult:
    return CommandResult(stdout="", exit_success=False, stderr=stderr)


class ScriptedPort(CommandPort):
    """
    CommandPort returning canned results keyed by the full command line.

    Commands without a scripted result succeed with empty output. Every
    call is recorded as an argument vector in `calls`.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def execute(self, program, args, cwd=None):
        argv = [program, *args]
        self.calls.append(argv)
        return self.responses.get(" ".join(argv), ok())


def repo_port(branches=("main",), merge_base="abc123", remote_tip="abc123", extra=None):
    """A port for a repository with the given local branches and origin state."""
    responses = {
        f"git show-ref --verify refs/heads/{name}": (ok() if name in branches else fail())
        for name in ("main", "master")
    }
    for trunk in ("main", "master"):
        responses[f"git merge-base HEAD origin/{trunk}"] = ok(f"{merge_base}\n")
        responses[f"git rev-parse origin/{trunk}"] = ok(f"{remote_tip}\n")
    responses.update(extra or {})
    return ScriptedPort(responses)


@pytest.fixture
def make_port():
    """Factory for ScriptedPort instances describing a repository."""
    return repo_port
