# settings.py
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

DEFAULT_DEPLOY_DIR = ".deploy"


def _float_or_none(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"BETTERDEPLOY_UNIT_TIMEOUT must be a number of seconds, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    deploy_dir: str = DEFAULT_DEPLOY_DIR
    npm: str = "npm"
    git: str = "git"
    unit_timeout: Optional[float] = None  # None -> wait forever

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            deploy_dir=env.get("BETTERDEPLOY_DIR", DEFAULT_DEPLOY_DIR),
            npm=env.get("BETTERDEPLOY_NPM", "npm"),
            git=env.get("BETTERDEPLOY_GIT", "git"),
            unit_timeout=_float_or_none(env.get("BETTERDEPLOY_UNIT_TIMEOUT")),
        )

    def override(self, **changes) -> "Settings":
        """Apply CLI overrides; None means 'keep the current value'."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
