"""Repository package for data persistence.

This package contains repositories for different domain entities.
"""

from flowgen.repository.deployment_repository import (
    DeploymentRepository,
    deployment_repository,
)
from flowgen.repository.flow_repository import (
    FlowRepository,
    flow_repository,
)

__all__ = [
    "DeploymentRepository",
    "deployment_repository",
    "FlowRepository",
    "flow_repository",
]
