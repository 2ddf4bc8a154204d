# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from betterdeploy.manifest import dumps_manifest, load_manifest
from betterdeploy.model import CommandStep, GitStep, ManifestError
from betterdeploy.runner import first_failure, run_manifest
from betterdeploy.settings import Settings
from betterdeploy.steps.command import unit_label
from betterdeploy.ui.console import Console, get_console, set_console

DEFAULT_MANIFEST = "deploy_manifest.py"


def find_manifest_files() -> list[Path]:
    """
    Find all manifest files in the current directory.

    Returns:
        List of Path objects for manifest files
    """
    manifest_files = []
    current_dir = Path(".")

    default_manifest = current_dir / DEFAULT_MANIFEST
    if default_manifest.exists():
        manifest_files.append(default_manifest)

    for path in current_dir.glob("*_manifest.py"):
        if path != default_manifest:
            manifest_files.append(path)

    json_manifest = current_dir / "deploy.json"
    if json_manifest.exists():
        manifest_files.append(json_manifest)

    return sorted(manifest_files)


def discover_manifest(manifest_arg: str | None) -> Path:
    """
    Discover manifest file from argument or default.

    Raises:
        SystemExit: If no manifest can be found or several exist
    """
    console = get_console()

    if manifest_arg:
        manifest_path = Path(manifest_arg)
        if not manifest_path.exists() and manifest_path.suffix not in (".py", ".json"):
            manifest_path = Path(str(manifest_path) + ".py")
        if not manifest_path.exists():
            console.print_error(
                "Manifest file not found",
                f"Could not find manifest file: {manifest_arg}",
                suggestion="Create a manifest file or specify a different path:\n  betterdeploy run --manifest my_manifest.py",
            )
            sys.exit(1)
        return manifest_path

    manifest_files = find_manifest_files()

    if not manifest_files:
        console.print_error(
            "No manifest found",
            "Could not find a manifest file in the current directory.",
            details=[
                "Looked for:",
                f"  {DEFAULT_MANIFEST}",
                "  *_manifest.py",
                "  deploy.json",
            ],
            suggestion=f"Create a manifest file:\n  {DEFAULT_MANIFEST}\n\nOr specify one explicitly:\n  betterdeploy run --manifest my_manifest.py",
        )
        sys.exit(1)

    if len(manifest_files) > 1:
        file_list = "\n".join(f"  {f}" for f in manifest_files)
        console.print_error(
            "Multiple manifest files found",
            "Found multiple manifest files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a manifest explicitly:\n  betterdeploy run --manifest {DEFAULT_MANIFEST}",
        )
        sys.exit(1)

    return manifest_files[0]


def _load_or_exit(ctx, manifest_path: Path):
    console = get_console()
    try:
        return load_manifest(manifest_path)
    except (ManifestError, FileNotFoundError) as e:
        console.print_error(
            "Failed to load manifest",
            f"Could not load manifest from {manifest_path}",
            details=[str(e)],
        )
        sys.exit(1)
    except Exception as e:
        console.print_error(
            "Failed to load manifest",
            f"{manifest_path} raised while loading",
            details=[f"{type(e).__name__}: {e}"],
        )
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(1)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """BetterDeploy: run deployment manifests step by step."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option(
    "--manifest",
    default=None,
    help=f"Manifest file path (defaults to {DEFAULT_MANIFEST} if present)",
)
@click.option("--root", default=".", show_default=True, help="Project root; command units run here")
@click.option("--deploy-dir", default=None, help="Where npm packages and clones go (env: BETTERDEPLOY_DIR)")
@click.option(
    "--unit-timeout",
    default=None,
    type=float,
    help="Seconds to wait for a callback unit to signal completion (env: BETTERDEPLOY_UNIT_TIMEOUT)",
)
@click.pass_context
def run(ctx, manifest, root, deploy_dir, unit_timeout):
    """Run a deployment manifest."""
    console = get_console()

    manifest_path = discover_manifest(manifest)

    try:
        settings = Settings.from_env().override(deploy_dir=deploy_dir, unit_timeout=unit_timeout)
    except ValueError as e:
        console.print_error("Invalid configuration", str(e))
        sys.exit(1)

    mf = _load_or_exit(ctx, manifest_path)

    try:
        console.print_run_started(
            manifest=manifest_path.name,
            deploy_dir=settings.deploy_dir,
            step_count=len(mf),
        )

        results = run_manifest(mf, root=root, settings=settings)

        console.print_results(results)

        failed = first_failure(results)
        if failed is not None:
            console.print_debug(f"halted at step '{failed}'")
            sys.exit(1)

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)


@cli.command()
@click.option("--manifest", default=None, help="Manifest file path")
@click.pass_context
def plan(ctx, manifest):
    """List the steps of a manifest without running them."""
    console = get_console()
    manifest_path = discover_manifest(manifest)
    mf = _load_or_exit(ctx, manifest_path)

    console.print_header(f"PLAN: {manifest_path.name}")
    for step in mf:
        if isinstance(step, GitStep):
            console.print_plan_step(step.name, step.type, step.path)
        elif isinstance(step, CommandStep):
            console.print_plan_step(step.name, step.type, f"{len(step.units)} unit(s)")
            for unit in step.units:
                console.print_info(f"    - {unit_label(unit)}")
        else:
            console.print_plan_step(step.name, step.type, "")


@cli.command()
@click.option("--manifest", default=None, help="Manifest file path")
@click.pass_context
def export(ctx, manifest):
    """Print a manifest as JSON (textual units only)."""
    console = get_console()
    manifest_path = discover_manifest(manifest)
    mf = _load_or_exit(ctx, manifest_path)

    try:
        click.echo(dumps_manifest(mf))
    except ManifestError as e:
        console.print_error(
            "Manifest cannot be exported",
            str(e),
            suggestion="Replace callable units with shell commands to export as JSON.",
        )
        sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
