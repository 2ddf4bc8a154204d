# manifest.py
from __future__ import annotations

import json
import runpy
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .model import (
    CommandStep,
    GitStep,
    Manifest,
    ManifestError,
    NpmStep,
    Step,
    STEP_TYPES,
    Unit,
    check_unit,
)


# ----------------------------------------------------------------------
# Raw mapping -> Manifest
# ----------------------------------------------------------------------

def _parse_units(name: str, body: Mapping[str, Any]) -> List[Unit]:
    has_single = "command" in body
    has_many = "commands" in body
    if has_single and has_many:
        raise ManifestError(f"Step '{name}' defines both 'command' and 'commands'")
    if not has_single and not has_many:
        raise ManifestError(f"Step '{name}' needs a 'command' or 'commands' field")

    if has_single:
        return [check_unit(name, body["command"])]

    units = body["commands"]
    if isinstance(units, (str, bytes)) or not isinstance(units, (list, tuple)):
        raise ManifestError(f"Step '{name}': 'commands' must be a list of units")
    if not units:
        raise ManifestError(f"Step '{name}': 'commands' must not be empty")
    return [check_unit(name, u) for u in units]


def parse_step(name: str, body: Any) -> Step:
    """Turn one raw `{"type": ..., ...}` entry into a typed step."""
    if not isinstance(body, Mapping):
        raise ManifestError(f"Step '{name}' must be a mapping, got {type(body).__name__}")

    kind = body.get("type")
    if kind is None:
        raise ManifestError(f"Step '{name}' has no 'type'")
    if kind not in STEP_TYPES:
        raise ManifestError(
            f"Step '{name}' has unknown type {kind!r}. Known types: {list(STEP_TYPES)}"
        )

    if kind == "npm":
        return NpmStep(name=name)

    if kind == "git":
        path = body.get("path")
        if not isinstance(path, str) or not path:
            raise ManifestError(f"Step '{name}' (git) needs a 'path' string")
        return GitStep(name=name, path=path)

    return CommandStep(name=name, units=tuple(_parse_units(name, body)))


def parse_manifest(raw: Any) -> Manifest:
    """
    Parse the raw manifest shape:

        {
          "id3": {"type": "npm"},
          "node-redis": {"type": "git", "path": "git://..."},
          "run tests": {"type": "command", "command": fn},
        }

    A `Manifest` passes straight through.
    """
    if isinstance(raw, Manifest):
        return raw
    if not isinstance(raw, Mapping):
        raise ManifestError(
            f"Manifest must be a mapping of step name -> step, got {type(raw).__name__}"
        )
    return Manifest(steps=tuple(parse_step(str(name), body) for name, body in raw.items()))


# ----------------------------------------------------------------------
# Manifest -> raw mapping
# ----------------------------------------------------------------------

def step_to_dict(step: Step) -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": step.type}
    if isinstance(step, GitStep):
        out["path"] = step.path
    elif isinstance(step, CommandStep):
        if len(step.units) == 1:
            out["command"] = step.units[0]
        else:
            out["commands"] = list(step.units)
    return out


def manifest_to_dict(manifest: Manifest) -> Dict[str, Dict[str, Any]]:
    """
    Reverse of parse_manifest(); single-unit commands use `command`.

    The raw shape is canonicalized, not preserved: `"commands": ["x"]` comes
    back as `"command": "x"`. Both parse to the same step, so
    parse_manifest(manifest_to_dict(m)) == m always holds.
    """
    return {s.name: step_to_dict(s) for s in manifest}


def dumps_manifest(manifest: Manifest, *, indent: int | None = 2) -> str:
    """JSON form of a manifest. Only textual units can be serialized."""
    for s in manifest:
        if isinstance(s, CommandStep):
            for u in s.units:
                if not isinstance(u, str):
                    raise ManifestError(
                        f"Step '{s.name}' has a callable unit "
                        f"({getattr(u, '__name__', repr(u))}) which cannot be written as JSON"
                    )
    return json.dumps(manifest_to_dict(manifest), indent=indent, ensure_ascii=False)


def loads_manifest(text: str) -> Manifest:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid manifest JSON: {e}") from e
    return parse_manifest(raw)


# ----------------------------------------------------------------------
# Loading from disk
# ----------------------------------------------------------------------

def load_manifest(path: str | Path) -> Manifest:
    """
    Load a manifest from a file.

    A `.py` file must define either:
      - MANIFEST = {...}   (raw mapping or Manifest)
      - manifest() -> raw mapping or Manifest

    A `.json` file holds the raw mapping with textual units only.
    """
    mf_path = Path(path).expanduser().resolve()
    if not mf_path.exists():
        raise FileNotFoundError(f"Manifest file not found: {mf_path}")

    if mf_path.suffix == ".json":
        return loads_manifest(mf_path.read_text(encoding="utf-8"))

    if mf_path.suffix != ".py":
        raise ManifestError(f"Manifest must be a .py or .json file, got: {mf_path.name}")

    module_name = f"betterdeploy_manifest_{mf_path.stem}"
    globals_dict = runpy.run_path(str(mf_path), run_name=module_name)

    if "manifest" in globals_dict and callable(globals_dict["manifest"]):
        raw = globals_dict["manifest"]()
    elif "MANIFEST" in globals_dict:
        raw = globals_dict["MANIFEST"]
    else:
        raise ManifestError(
            f"{mf_path.name} must define MANIFEST = {{...}} or manifest() -> mapping"
        )

    return parse_manifest(raw)
