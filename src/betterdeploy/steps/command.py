# steps/command.py
from __future__ import annotations

import subprocess
from typing import Callable

from ..completion import Completion
from ..context import DeployContext
from ..errors import StepFailure
from ..model import CommandStep, Unit
from ..ui.console import get_console


def unit_label(unit: Unit) -> str:
    if isinstance(unit, str):
        return unit
    name = getattr(unit, "__name__", None) or type(unit).__name__
    return f"<callable {name}>"


def _run_shell(step: CommandStep, cmd: str, ctx: DeployContext) -> None:
    proc = subprocess.run(
        cmd,
        shell=True,
        cwd=str(ctx.root),
        env=ctx.env,
        text=True,
        capture_output=True,   # so output can be shown on failure
    )
    if proc.returncode != 0:
        raise StepFailure(
            step=step.name,
            cmd=cmd,
            exit_code=proc.returncode,
            stdout=proc.stdout[-4000:],
            stderr=proc.stderr[-4000:],
        )
    get_console().print_debug(f"[{step.name}] {cmd!r} -> exit 0")


def _run_callback(step: CommandStep, fn: Callable[..., object], ctx: DeployContext) -> None:
    done = Completion(label=f"[{step.name}] {unit_label(fn)}")
    fn(done)
    # the callback may hand `done` to another thread; block until it fires
    done.wait(timeout=ctx.unit_timeout)


def run_step(step: CommandStep, ctx: DeployContext) -> None:
    """Run every unit of the step in order; the first failure stops the step."""
    console = get_console()
    for unit in step.units:
        console.print_unit(unit_label(unit))
        if isinstance(unit, str):
            _run_shell(step, unit, ctx)
        else:
            _run_callback(step, unit, ctx)
