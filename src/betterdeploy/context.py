# context.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .errors import DeployError
from .settings import Settings


@dataclass
class DeployContext:
    """Everything a step executor needs to know about the run it is part of."""
    root: Path
    deploy_dir: Path
    env: Dict[str, str] = field(default_factory=lambda: os.environ.copy())
    npm: str = "npm"
    git: str = "git"
    unit_timeout: Optional[float] = None

    @classmethod
    def create(
        cls,
        root: str | Path = ".",
        settings: Settings | None = None,
        *,
        env: Dict[str, str] | None = None,
    ) -> "DeployContext":
        settings = settings or Settings.from_env()
        root_p = Path(root).resolve()
        deploy_dir = Path(settings.deploy_dir).expanduser()
        if not deploy_dir.is_absolute():
            deploy_dir = root_p / deploy_dir
        return cls(
            root=root_p,
            deploy_dir=deploy_dir,
            env=dict(env) if env is not None else os.environ.copy(),
            npm=settings.npm,
            git=settings.git,
            unit_timeout=settings.unit_timeout,
        )

    def step_dir(self, step_name: str) -> Path:
        """Location keyed by step name, strictly inside the deploy dir."""
        base = self.deploy_dir.resolve()
        target = (base / step_name).resolve()
        if target == base or base not in target.parents:
            raise DeployError(
                kind="step_dir_outside_deploy_dir",
                step=step_name,
                message=f"Step name {step_name!r} does not name a directory inside {base}",
                details={"hint": "Use a plain directory name (no '/', '..' or absolute paths)."},
            )
        return self.deploy_dir / step_name
