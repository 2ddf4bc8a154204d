# git.py
# Small, focused wrapper around the Git CLI.
# Git steps go through here so the step code never builds git argv itself.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Mapping, Optional


def _git(
    args: list[str],
    cwd: Optional[str | Path] = None,
    *,
    git: str = "git",
    env: Optional[Mapping[str, str]] = None,
) -> subprocess.CompletedProcess:
    """
    Execute a git command and return the completed process.

    The exit code is not checked here; callers decide what a failure means
    (a missing checkout is not an error, a failed clone is).

    Args:
        args: List of git arguments (e.g. ["status", "--porcelain"])
        cwd: Optional working directory in which to run the git command.
        git: git executable to invoke.
        env: Optional environment for the child process.
    """
    return subprocess.run(
        [git, *args],
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        text=True,
        capture_output=True,
        check=False,
    )


def is_checkout(path: Path, *, git: str = "git", env=None) -> bool:
    """
    Return True if `path` is the top level of a git working tree.

    A plain directory inside some other repository does not count.
    """
    if not (path / ".git").exists():
        return False
    proc = _git(["rev-parse", "--show-toplevel"], cwd=path, git=git, env=env)
    if proc.returncode != 0:
        return False
    return Path(proc.stdout.strip()).resolve() == path.resolve()


def clone(url: str, dest: Path, *, git: str = "git", env=None) -> subprocess.CompletedProcess:
    # `git clone <url> <dest>` creates dest (and its parents)
    return _git(["clone", url, str(dest)], git=git, env=env)


def pull(repo: Path, *, git: str = "git", env=None) -> subprocess.CompletedProcess:
    # fast-forward only; a diverged checkout should fail loudly
    return _git(["pull", "--ff-only"], cwd=repo, git=git, env=env)


def remote_url(repo: Path, remote: str = "origin", *, git: str = "git", env=None) -> Optional[str]:
    """Return the URL of `remote` in `repo`, or None if it is not configured."""
    proc = _git(["remote", "get-url", remote], cwd=repo, git=git, env=env)
    if proc.returncode != 0:
        return None
    return proc.stdout.strip() or None
