from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from lpkit.domain.schema import SensitivityPolicy


def _env_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_policy(value: str) -> SensitivityPolicy:
    try:
        return SensitivityPolicy(value.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in SensitivityPolicy)
        raise ValueError(
            f"LPKIT_SENSITIVITY_POLICY must be one of: {choices} (got {value!r})."
        ) from None


@dataclass(frozen=True)
class Settings:
    port: int = 8000
    reload: bool = False
    log_level: str = "INFO"

    # Defaults for API requests that omit options; solve_model never reads these.
    lp_backend: str = "GLOP"
    mip_backend: str = "SCIP"
    sensitivity_policy: SensitivityPolicy = SensitivityPolicy.RELAXATION


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from the environment; invalid values fail here, at startup."""
    env = os.environ if environ is None else environ
    return Settings(
        port=int(env.get("PORT", 8000)),
        reload=_env_bool(env.get("RELOAD", "false")),
        log_level=env.get("LPKIT_LOG_LEVEL", "INFO").upper(),
        lp_backend=env.get("LPKIT_LP_BACKEND", "GLOP"),
        mip_backend=env.get("LPKIT_MIP_BACKEND", "SCIP"),
        sensitivity_policy=_env_policy(env.get("LPKIT_SENSITIVITY_POLICY", "relaxation")),
    )
