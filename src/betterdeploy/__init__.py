from .dsl import command, deploy, git, npm
from .manifest import load_manifest, manifest_to_dict, parse_manifest
from .model import CommandStep, GitStep, Manifest, ManifestError, NpmStep
from .runner import run_manifest

__all__ = [
    "command", "deploy", "git", "npm",
    "load_manifest", "manifest_to_dict", "parse_manifest",
    "CommandStep", "GitStep", "Manifest", "ManifestError", "NpmStep",
    "run_manifest",
]
