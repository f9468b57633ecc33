from devsetup.domain.models import (
    DependencyCheck,
    SetupConfig,
)

__all__ = [
    "DependencyCheck",
    "SetupConfig",
]
