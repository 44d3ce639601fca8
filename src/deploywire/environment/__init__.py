"""Environment-scoped persistence of wiring entries."""

from deploywire.environment.store import (
    DEFAULT_DEPLOYMENTS_PATH,
    EnvironmentRecord,
    EnvironmentStore,
    normalize_environment_name,
)

__all__ = [
    "DEFAULT_DEPLOYMENTS_PATH",
    "EnvironmentRecord",
    "EnvironmentStore",
    "normalize_environment_name",
]
