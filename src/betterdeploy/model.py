# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath, PureWindowsPath
from typing import Callable, Dict, Iterator, List, Tuple, Union


# A unit is either shell text (run as a subprocess) or a callable that
# receives a completion handle and must signal it exactly once.
Unit = Union[str, Callable[..., object]]


class ManifestError(ValueError):
    """Raised when a manifest (or one of its steps) is malformed."""


@dataclass(frozen=True)
class NpmStep:
    """Install the npm package named after the step."""
    name: str
    type: str = field(default="npm", init=False)

    @property
    def package(self) -> str:
        return self.name


def check_unit(step_name: str, unit: object) -> Unit:
    if isinstance(unit, str) or callable(unit):
        return unit
    raise ManifestError(
        f"Step '{step_name}' has an invalid unit {unit!r} "
        "(expected shell text or a callable taking a completion handle)"
    )


@dataclass(frozen=True)
class GitStep:
    """
    Clone (or update) the repository at `path` into the deploy dir.

    The step name is the checkout's directory name under the deploy dir, so
    it must be a single plain path component.
    """
    name: str
    path: str
    type: str = field(default="git", init=False)

    def __post_init__(self) -> None:
        if (
            not self.name
            or self.name in (".", "..")
            or "/" in self.name
            or "\\" in self.name
            or PurePosixPath(self.name).is_absolute()
            or PureWindowsPath(self.name).is_absolute()
        ):
            raise ManifestError(
                f"Step '{self.name}' (git) name must be a single directory name "
                "inside the deploy dir"
            )


@dataclass(frozen=True)
class CommandStep:
    """
    Run one or more units in order.

    `command` and `commands` from the raw manifest both land in `units`,
    which always holds at least one unit.
    """
    name: str
    units: Tuple[Unit, ...]
    type: str = field(default="command", init=False)

    def __post_init__(self) -> None:
        units = self.units
        # a bare string is one unit, not a sequence of characters
        if isinstance(units, str) or callable(units):
            units = (units,)
        elif not isinstance(units, (list, tuple)):
            raise ManifestError(f"Step '{self.name}': units must be a list of units")
        units = tuple(check_unit(self.name, u) for u in units)
        if not units:
            raise ManifestError(f"Step '{self.name}' has no units")
        object.__setattr__(self, "units", units)


Step = Union[NpmStep, GitStep, CommandStep]

STEP_TYPES = ("npm", "git", "command")


@dataclass(frozen=True)
class Manifest:
    """An ordered, read-only mapping of step name -> step."""
    steps: Tuple[Step, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))
        seen: set[str] = set()
        for s in self.steps:
            if s.name in seen:
                raise ManifestError(f"Duplicate step name: {s.name}")
            seen.add(s.name)

    def names(self) -> List[str]:
        return [s.name for s in self.steps]

    def as_mapping(self) -> Dict[str, Step]:
        return {s.name: s for s in self.steps}

    def __getitem__(self, name: str) -> Step:
        for s in self.steps:
            if s.name == name:
                return s
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return any(s.name == name for s in self.steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)
