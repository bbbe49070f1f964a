"""
webui_operator.core - Foundation Layer
=======================================

Building blocks every other module depends on:

    - config:          Configuration management (OperatorConfig and sections)
    - enums:           Phase, Action, PlaybookAction, OutputStream
    - models:          Pydantic data models (WebUIResource, DeploymentState, ...)
    - exceptions:      Structured exception hierarchy
    - logging_config:  structlog bootstrap and per-component loggers

Dependency Rule:
    core/ depends on NOTHING else in the webui_operator package.
"""

from webui_operator.core.config import (
    ArtifactConfig,
    ClusterConfig,
    CommandConfig,
    InventoryDefaults,
    OperatorConfig,
)
from webui_operator.core.enums import Action, OutputStream, Phase, PlaybookAction
from webui_operator.core.exceptions import (
    ArtifactError,
    ClusterError,
    ConfigurationError,
    EmptyImageTagError,
    OperatorError,
    OwnerReferenceError,
    ProcessError,
    ProcessExitError,
    ProcessStartError,
    ProcessTimeoutError,
    ReconcileError,
    ResourceNotFoundError,
)
from webui_operator.core.models import (
    ClusterCredentials,
    ContainerState,
    DeploymentState,
    OwnerReference,
    ReconcileResult,
    ResourceId,
    WebUIResource,
    WebUISpec,
    WebUIStatus,
)

__all__ = [
    # Config
    "OperatorConfig",
    "InventoryDefaults",
    "CommandConfig",
    "ArtifactConfig",
    "ClusterConfig",
    # Enums
    "Phase",
    "Action",
    "PlaybookAction",
    "OutputStream",
    # Models
    "ResourceId",
    "WebUISpec",
    "WebUIStatus",
    "WebUIResource",
    "ContainerState",
    "DeploymentState",
    "OwnerReference",
    "ClusterCredentials",
    "ReconcileResult",
    # Exceptions
    "OperatorError",
    "ConfigurationError",
    "ClusterError",
    "ResourceNotFoundError",
    "ReconcileError",
    "EmptyImageTagError",
    "ArtifactError",
    "ProcessError",
    "ProcessStartError",
    "ProcessExitError",
    "ProcessTimeoutError",
    "OwnerReferenceError",
]
