# runner.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from .context import DeployContext
from .errors import DeployError, StepFailure
from .manifest import parse_manifest
from .model import Manifest, Step
from .settings import Settings
from .steps import command as command_step
from .steps import git as git_step
from .steps import npm as npm_step
from .ui.console import get_console


# One executor per step type. parse_manifest() only produces these types,
# so every step of a parsed manifest has exactly one executor.
EXECUTORS: Dict[str, Callable[[Any, DeployContext], None]] = {
    "npm": npm_step.run_step,
    "git": git_step.run_step,
    "command": command_step.run_step,
}


def run_step(step: Step, ctx: DeployContext) -> None:
    try:
        executor = EXECUTORS[step.type]
    except KeyError:
        raise DeployError(
            kind="unknown_step_type",
            step=step.name,
            message=f"No executor for step type {step.type!r}",
            details={"known": sorted(EXECUTORS)},
        ) from None
    executor(step, ctx)


def _report_failure(step: Step, exc: BaseException) -> None:
    console = get_console()
    if isinstance(exc, StepFailure):
        console.print_failure(step.name, str(exc), exit_code=exc.exit_code)
        tail = (exc.stderr or exc.stdout or "").strip()
        if tail:
            console.print_debug(tail)
    elif isinstance(exc, DeployError):
        console.print_failure(step.name, str(exc), hint=exc.details.get("hint"))
    else:
        console.print_failure(step.name, f"{type(exc).__name__}: {exc}")
        console.print_exception(exc)


def run_manifest(
    manifest: Manifest | Mapping[str, Any],
    *,
    root: str | Path = ".",
    deploy_dir: str | Path | None = None,
    settings: Settings | None = None,
    env: Dict[str, str] | None = None,
) -> Dict[str, str]:
    """
    Run the steps of `manifest` one at a time, in declaration order.

    Returns step name -> status, where status is:
      - "ok"
      - "failed"   (the first failing step; the run halts there)
      - "skipped"  (steps after a failure)
    """
    manifest = parse_manifest(manifest)
    settings = settings or Settings.from_env()
    if deploy_dir is not None:
        settings = settings.override(deploy_dir=str(deploy_dir))
    ctx = DeployContext.create(root, settings, env=env)
    console = get_console()

    results: Dict[str, str] = {}
    failed = False

    for step in manifest:
        if failed:
            results[step.name] = "skipped"
            continue

        console.print_step_start(step.name, step.type)
        try:
            run_step(step, ctx)
        except Exception as e:
            results[step.name] = "failed"
            _report_failure(step, e)
            failed = True
            continue

        results[step.name] = "ok"
        console.print_success(step.name)

    return results


def first_failure(results: Mapping[str, str]) -> Optional[str]:
    for name, status in results.items():
        if status == "failed":
            return name
    return None


def succeeded(results: Mapping[str, str]) -> bool:
    return all(status == "ok" for status in results.values())
