# dsl.py
from __future__ import annotations

from .model import CommandStep, GitStep, Manifest, NpmStep, Step, Unit


def npm(name: str) -> NpmStep:
    """An npm step; the package installed is the step name."""
    return NpmStep(name=name)


def git(name: str, path: str) -> GitStep:
    return GitStep(name=name, path=path)


def command(name: str, *units: Unit) -> CommandStep:
    """
    A command step.

        command("run tests", run_tests, "rm -rf .deploy")
    """
    if not units:
        raise ValueError(f"command({name!r}) must have at least one unit")
    return CommandStep(name=name, units=units)


def deploy(*steps: Step) -> Manifest:
    """
    Manifest definition helper. A manifest file's own manifest() hook
    must not be shadowed by it:

        from betterdeploy import deploy, npm, git, command

        def manifest():
            return deploy(npm("id3"), git("node-redis", "git://..."))
    """
    return Manifest(steps=steps)
