# steps/git.py
from __future__ import annotations

import shutil

from ..context import DeployContext
from ..errors import DeployError, StepFailure, TOOL_HINTS
from ..git_facts import git as gitcli
from ..model import GitStep
from ..ui.console import get_console


def _check_git_available(ctx: DeployContext, step: GitStep) -> None:
    if shutil.which(ctx.git, path=ctx.env.get("PATH")) is None:
        raise DeployError(
            kind="tool_unavailable",
            step=step.name,
            message=f"{ctx.git} is not available",
            details={"hint": TOOL_HINTS["git"], "tool": ctx.git},
        )


def run_step(step: GitStep, ctx: DeployContext) -> None:
    """
    Clone `step.path` into <deploy_dir>/<step name>.

    An existing checkout at that location is updated with a fast-forward
    pull instead. An existing directory that is not a checkout is an error;
    it is never deleted.
    """
    _check_git_available(ctx, step)
    console = get_console()
    dest = ctx.step_dir(step.name)

    if dest.exists() and any(dest.iterdir()):
        if not gitcli.is_checkout(dest, git=ctx.git, env=ctx.env):
            raise DeployError(
                kind="dest_not_checkout",
                step=step.name,
                message=f"{dest} exists and is not a git checkout",
                details={"hint": "Remove the directory or point the deploy dir elsewhere."},
            )
        current = gitcli.remote_url(dest, git=ctx.git, env=ctx.env)
        if current and current != step.path:
            console.print_debug(f"[{step.name}] origin is {current}, manifest says {step.path}")

        console.print_unit(f"git pull --ff-only ({dest})")
        proc = gitcli.pull(dest, git=ctx.git, env=ctx.env)
        cmd = f"{ctx.git} pull --ff-only"
    else:
        ctx.deploy_dir.mkdir(parents=True, exist_ok=True)
        console.print_unit(f"git clone {step.path} {dest}")
        proc = gitcli.clone(step.path, dest, git=ctx.git, env=ctx.env)
        cmd = f"{ctx.git} clone {step.path} {dest}"

    if proc.returncode != 0:
        raise StepFailure(
            step=step.name,
            cmd=cmd,
            exit_code=proc.returncode,
            stdout=proc.stdout[-4000:],
            stderr=proc.stderr[-4000:],
        )
