from __future__ import annotations

import os
import warnings
from enum import StrEnum
from functools import cache

# Checked in order; NODE_ENV is still what the existing deployments export.
ENV_VARS = ("APP_ENV", "NODE_ENV", "RAILWAY_ENVIRONMENT_NAME")


class Env(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


ALIASES: dict[str, Env] = {
    "development": Env.DEV,
    "testing": Env.TEST,
    "production": Env.PROD,
}


def _parse(raw: str) -> Env | None:
    val = raw.strip().lower()
    if val in {e.value for e in Env}:
        return Env(val)
    return ALIASES.get(val)


@cache
def get_env() -> Env:
    """Deployment environment from the first of ENV_VARS that is set; ``local`` otherwise."""
    raw = next((v for v in (os.getenv(n) for n in ENV_VARS) if v), None)
    if raw is None:
        return Env.LOCAL
    env = _parse(raw)
    if env is None:
        warnings.warn(f"Unrecognized environment '{raw}', defaulting to 'local'.", RuntimeWarning, stacklevel=2)
        return Env.LOCAL
    return env


ENV: Env = get_env()
IS_LOCAL, IS_DEV, IS_TEST, IS_PROD = (ENV is e for e in (Env.LOCAL, Env.DEV, Env.TEST, Env.PROD))
