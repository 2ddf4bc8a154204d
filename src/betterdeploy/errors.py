# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DeployError(Exception):
    """
    Structured deploy error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    kind: str
    step: str | None
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.step:
            lines.append(f"step={self.step}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class StepFailure(Exception):
    step: str
    cmd: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    def __str__(self) -> str:
        return f"step '{self.step}' failed (exit={self.exit_code}): {self.cmd}"


class CompletionError(RuntimeError):
    """A completion handle was signalled more than once."""


class UnitTimeout(TimeoutError):
    """A callback unit did not signal completion in time."""


TOOL_HINTS = {
    "npm": "Install Node.js (includes npm) or fix PATH.",
    "node": "Install Node.js or fix PATH.",
    "git": "Install Git or fix PATH.",
    "sh": "A POSIX shell is required to run command units.",
}
