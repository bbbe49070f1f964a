"""
webui_operator.core.exceptions - Custom Exception Hierarchy
============================================================

Components raise and catch specific exception types that carry contextual
information instead of catching generic Exception everywhere.

Exception Hierarchy:
    OperatorError (base)
        ├── ConfigurationError      - Invalid config, missing in-cluster credentials
        ├── ClusterError            - Cluster API read/write failures
        │     └── ResourceNotFoundError
        ├── ReconcileError          - Observed state the engine cannot act on
        │     └── EmptyImageTagError
        ├── ArtifactError           - Ephemeral file create/write failures
        ├── ProcessError            - External command failures
        │     ├── ProcessStartError
        │     ├── ProcessExitError
        │     └── ProcessTimeoutError
        └── OwnerReferenceError     - Deployment could not be linked to its owner

Error Handling Flow in a Reconcile Pass:
    Reconciler raises
        → handler in webui_operator.handlers lets it propagate
        → kopf logs it and retries the handler with backoff

    Errors that must NOT trigger a retry (malformed observed state) are not
    raised at all: the reconciler writes OTHER_ERROR and returns.

Usage:
    >>> from webui_operator.core.exceptions import ProcessExitError
    >>> raise ProcessExitError(
    ...     message="ansible-playbook exited with status 2",
    ...     command="ansible-playbook -i /tmp/inventory_0A1B2C3D4E.ini ...",
    ...     returncode=2,
    ... )
"""

from __future__ import annotations

from typing import Any, Optional


# =============================================================================
# Base Exception
# =============================================================================
# All operator exceptions inherit from this base class:
#
#   try:
#       await reconciler.reconcile(resource_id)
#   except OperatorError as e:
#       logger.error(e.message, error_code=e.error_code, details=e.details)
# =============================================================================
class OperatorError(Exception):
    """Base exception for all operator errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code, UPPER_SNAKE_CASE
            (e.g., "PROCESS_EXIT", "RESOURCE_NOT_FOUND").
        details: Arbitrary dict with additional debugging context.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary for structured logging.

        Returns:
            Dictionary with error_type, message, error_code, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
class ConfigurationError(OperatorError):
    """Raised when operator configuration or ambient credentials are unusable.

    Common Causes:
        - Not running inside a pod (no service account token mounted)
        - Unknown cluster backend name
        - Malformed YAML configuration file
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Cluster Errors
# =============================================================================
# Raised by ClusterClient implementations. The reconciler distinguishes
# ResourceNotFoundError (drives the provision / no-op branch) from every other
# ClusterError (transient, propagated for retry).
# =============================================================================
class ClusterError(OperatorError):
    """Raised when a cluster API call fails.

    Attributes:
        kind: Kind of the object involved ("KWebUI", "Deployment").
        namespace: Namespace of the object.
        name: Name of the object.
    """

    def __init__(
        self,
        message: str,
        kind: str = "",
        namespace: str = "",
        name: str = "",
        error_code: str = "CLUSTER_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["kind"] = kind
        enriched_details["namespace"] = namespace
        enriched_details["name"] = name

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.kind = kind
        self.namespace = namespace
        self.name = name


class ResourceNotFoundError(ClusterError):
    """Raised when the requested object does not exist."""

    def __init__(
        self,
        message: str,
        kind: str = "",
        namespace: str = "",
        name: str = "",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            kind=kind,
            namespace=namespace,
            name=name,
            error_code="RESOURCE_NOT_FOUND",
            details=details,
        )


# =============================================================================
# Reconcile Error
# =============================================================================
class ReconcileError(OperatorError):
    """Raised when a reconcile pass must end with an error to be retried."""

    def __init__(
        self,
        message: str,
        error_code: str = "RECONCILE_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class EmptyImageTagError(ReconcileError):
    """The deployed container carries a tag that is empty once normalized.

    Example: ``quay.io/kubevirt/kubevirt-web-ui:v``. Treated as transient,
    so the pass ends with this error and is retried; no status is written.
    """

    def __init__(self, image: str) -> None:
        super().__init__(
            message="failed to read existing image tag",
            error_code="EMPTY_IMAGE_TAG",
            details={"image": image},
        )
        self.image = image


# =============================================================================
# Artifact Error
# =============================================================================
class ArtifactError(OperatorError):
    """Raised when an ephemeral artifact cannot be created or written.

    Attributes:
        path: The file path involved, if one was allocated.
    """

    def __init__(
        self,
        message: str,
        path: str = "",
        error_code: str = "ARTIFACT_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["path"] = path

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.path = path


# =============================================================================
# Process Errors
# =============================================================================
# `command` is always the masked command line (ProcessCommand.display()), so
# these errors are safe to log.
# =============================================================================
class ProcessError(OperatorError):
    """Raised when an external command fails.

    Attributes:
        command: Masked command line of the failed invocation.
    """

    def __init__(
        self,
        message: str,
        command: str,
        error_code: str = "PROCESS_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["command"] = command

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.command = command


class ProcessStartError(ProcessError):
    """The executable could not be started (missing binary, permissions)."""

    def __init__(
        self,
        message: str,
        command: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            command=command,
            error_code="PROCESS_START",
            details=details,
        )


class ProcessExitError(ProcessError):
    """The process ran but exited with a non-zero status.

    Attributes:
        returncode: The exit status reported by the OS.
    """

    def __init__(self, message: str, command: str, returncode: int) -> None:
        super().__init__(
            message=message,
            command=command,
            error_code="PROCESS_EXIT",
            details={"returncode": returncode},
        )
        self.returncode = returncode


class ProcessTimeoutError(ProcessError):
    """The process exceeded its deadline and was killed.

    Attributes:
        timeout_seconds: The deadline that was exceeded.
    """

    def __init__(self, message: str, command: str, timeout_seconds: float) -> None:
        super().__init__(
            message=message,
            command=command,
            error_code="PROCESS_TIMEOUT",
            details={"timeout_seconds": timeout_seconds},
        )
        self.timeout_seconds = timeout_seconds


# =============================================================================
# Owner Reference Error
# =============================================================================
class OwnerReferenceError(OperatorError):
    """Raised when the Deployment cannot be linked to its KWebUI owner.

    The provisioning that preceded the link is NOT rolled back.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "OWNER_REFERENCE_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)
