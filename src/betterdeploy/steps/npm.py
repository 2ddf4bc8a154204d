# steps/npm.py
from __future__ import annotations

import shutil
import subprocess

from ..context import DeployContext
from ..errors import DeployError, StepFailure, TOOL_HINTS
from ..model import NpmStep
from ..ui.console import get_console


def _check_npm_available(ctx: DeployContext, step: NpmStep) -> None:
    """Check that npm is available, raise a helpful error if not."""
    if shutil.which(ctx.npm, path=ctx.env.get("PATH")) is None:
        raise DeployError(
            kind="tool_unavailable",
            step=step.name,
            message=f"{ctx.npm} is not available",
            details={"hint": TOOL_HINTS["npm"], "tool": ctx.npm},
        )


def run_step(step: NpmStep, ctx: DeployContext) -> None:
    """Install the package named by the step into the deploy dir."""
    _check_npm_available(ctx, step)
    ctx.deploy_dir.mkdir(parents=True, exist_ok=True)

    cmd = [ctx.npm, "install", step.package, "--prefix", str(ctx.deploy_dir)]
    get_console().print_unit(" ".join(cmd))

    proc = subprocess.run(
        cmd,
        cwd=str(ctx.root),
        env=ctx.env,
        text=True,
        capture_output=True,
    )
    if proc.returncode != 0:
        raise StepFailure(
            step=step.name,
            cmd=" ".join(cmd),
            exit_code=proc.returncode,
            stdout=proc.stdout[-4000:],
            stderr=proc.stderr[-4000:],
        )
