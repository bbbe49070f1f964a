"""
webui_operator.core.models - Core Data Models
==============================================

This module defines the Pydantic data models that flow through every layer of
the operator.

Model Hierarchy:
    ResourceId        → Which KWebUI is being reconciled? (namespace/name)
    WebUISpec         → What does the user want? (desired state)
    WebUIStatus       → What did the last pass observe? (status.phase/message)
    WebUIResource     → The KWebUI object as read from the cluster
    DeploymentState   → The deployed Web UI (actual state)
    OwnerReference    → Parent/child link enabling cascading deletion
    ClusterCredentials→ Ambient credentials handed to `oc login`
    ReconcileResult   → How a pass that did not raise ended

Data Flow:
    ┌──────────────┐  get_webui()      ┌──────────────┐
    │ ClusterClient│ ────────────────→ │  Reconciler  │ ── ReconcileResult ──→ caller
    │              │  get_deployment() │              │
    └──────────────┘ ────────────────→ └──────────────┘
         WebUIResource, DeploymentState
"""

from __future__ import annotations

import copy
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from webui_operator.core.enums import Action, Phase


# =============================================================================
# Version Helpers
# =============================================================================
# The deployed version is read from the image reference of the Web UI
# container, e.g. "quay.io/kubevirt/kubevirt-web-ui:v1.4" → "1.4".
# =============================================================================
def normalize_version(version: str) -> str:
    """Strip a single leading "v" so that "v1.4" and "1.4" compare equal."""
    return version.removeprefix("v")


def image_tag(image: str) -> Optional[str]:
    """Return the tag of an image reference, or None if it carries no tag.

    Only a colon in the last path segment separates a tag; the colon of a
    registry port ("registry:5000/web-ui") does not. A digest suffix
    ("@sha256:...") is ignored.

    Example:
        >>> image_tag("quay.io/kubevirt/kubevirt-web-ui:v1.4")
        'v1.4'
        >>> image_tag("registry:5000/kubevirt-web-ui") is None
        True
    """
    reference = image.split("@", 1)[0]
    last_segment = reference.rsplit("/", 1)[-1]
    if ":" not in last_segment:
        return None
    return last_segment.rsplit(":", 1)[1]


# =============================================================================
# Resource Identity
# =============================================================================
class ResourceId(BaseModel):
    """Namespace and name of a KWebUI resource.

    This is the only input of a reconcile pass; the dispatcher hands one
    ResourceId per invocation.
    """

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(description="Namespace of the KWebUI resource")
    name: str = Field(description="Name of the KWebUI resource")

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


# =============================================================================
# Desired State
# =============================================================================
# Field names match the keys used in the KWebUI spec on the cluster. Extra keys
# present on real resources (branding, imagePullPolicy, ...) are ignored.
# =============================================================================
class WebUISpec(BaseModel):
    """Desired state declared on a KWebUI resource.

    Attributes:
        version: Requested Web UI version. Empty means "not deployed".
        registry_url: Registry hosting the Web UI image.
        registry_namespace: Namespace of the image within the registry.
        openshift_master_default_subdomain: Optional routing subdomain override.
        public_master_hostname: Optional public master hostname override.

    Example:
        >>> spec = WebUISpec(version="v2.0", registry_url="quay.io")
    """

    model_config = ConfigDict(extra="ignore")

    version: str = Field(default="", description="Requested version; empty means absent")
    registry_url: str = Field(default="", description="Image registry URL")
    registry_namespace: str = Field(default="", description="Image registry namespace")
    openshift_master_default_subdomain: str = Field(
        default="",
        description="Optional override of the cluster's default subdomain",
    )
    public_master_hostname: str = Field(
        default="",
        description="Optional override of the public master hostname",
    )

    @property
    def normalized_version(self) -> str:
        return normalize_version(self.version)


class WebUIStatus(BaseModel):
    """Observed state written back by the operator."""

    model_config = ConfigDict(extra="ignore")

    phase: Optional[Phase] = Field(default=None, description="Closed-enumeration phase")
    message: str = Field(default="", description="Free-text detail for humans")

    @field_validator("phase", mode="before")
    @classmethod
    def _empty_phase_is_unset(cls, value: Any) -> Any:
        # status is advisory; a phase written by someone else must not break reads
        if not value or value not in Phase._value2member_map_:
            return None
        return value

    @field_validator("message", mode="before")
    @classmethod
    def _null_message_is_empty(cls, value: Any) -> Any:
        return value or ""


# =============================================================================
# Managed Resource
# =============================================================================
# `raw` keeps the full object body (metadata.resourceVersion included) so a
# write after a read replaces exactly what was read, plus the new status.
# =============================================================================
class WebUIResource(BaseModel):
    """A KWebUI object as read from the cluster."""

    id: ResourceId
    uid: str = Field(default="", description="metadata.uid")
    api_version: str = Field(default="kubevirt.io/v1alpha1")
    kind: str = Field(default="KWebUI")
    spec: WebUISpec = Field(default_factory=WebUISpec)
    status: WebUIStatus = Field(default_factory=WebUIStatus)
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_object(cls, obj: dict[str, Any]) -> "WebUIResource":
        """Build a WebUIResource from a custom object dict.

        Args:
            obj: The object as returned by the custom objects API.

        Returns:
            The parsed resource; `raw` holds a deep copy of `obj`.
        """
        metadata = obj.get("metadata") or {}
        return cls(
            id=ResourceId(
                namespace=metadata.get("namespace", ""),
                name=metadata.get("name", ""),
            ),
            uid=metadata.get("uid", ""),
            api_version=obj.get("apiVersion", "kubevirt.io/v1alpha1"),
            kind=obj.get("kind", "KWebUI"),
            spec=WebUISpec.model_validate(obj.get("spec") or {}),
            status=WebUIStatus.model_validate(obj.get("status") or {}),
            raw=copy.deepcopy(obj),
        )

    def to_object(self) -> dict[str, Any]:
        """Render the object body for a replace call, carrying the current status."""
        body = copy.deepcopy(self.raw)
        body.setdefault("apiVersion", self.api_version)
        body.setdefault("kind", self.kind)
        metadata = body.setdefault("metadata", {})
        metadata.setdefault("namespace", self.id.namespace)
        metadata.setdefault("name", self.id.name)
        if self.uid:
            metadata.setdefault("uid", self.uid)
        status = body.setdefault("status", {})
        status["phase"] = self.status.phase.value if self.status.phase else ""
        status["message"] = self.status.message
        return body


# =============================================================================
# Deployed Artifact
# =============================================================================
class OwnerReference(BaseModel):
    """An entry of metadata.ownerReferences.

    Serialized with the Kubernetes camelCase keys via ``model_dump(by_alias=True)``.
    """

    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(alias="apiVersion")
    kind: str
    name: str
    uid: str
    controller: bool = False
    block_owner_deletion: bool = Field(default=False, alias="blockOwnerDeletion")


class ContainerState(BaseModel):
    """Name and image of one container of the Deployment's pod template."""

    name: str
    image: str = ""


class DeploymentState(BaseModel):
    """The deployed Web UI as far as the operator cares about it."""

    name: str
    namespace: str
    uid: str = ""
    containers: list[ContainerState] = Field(default_factory=list)
    owner_references: list[OwnerReference] = Field(default_factory=list)

    def container(self, name: str) -> Optional[ContainerState]:
        """Return the container with the given name, if present."""
        for container in self.containers:
            if container.name == name:
                return container
        return None

    def controller_reference(self) -> Optional[OwnerReference]:
        """Return the owner reference flagged as controller, if any."""
        for ref in self.owner_references:
            if ref.controller:
                return ref
        return None


# =============================================================================
# Credentials
# =============================================================================
class ClusterCredentials(BaseModel):
    """Ambient credentials of the operator pod, passed to `oc login`.

    `token` is a secret: it is masked whenever a command using it is logged.
    """

    host: str = Field(description="API server URL, e.g. https://10.0.0.1:443")
    ca_file: str = Field(description="Path to the cluster CA bundle")
    token: str = Field(description="Bearer token of the service account")


# =============================================================================
# Reconcile Result
# =============================================================================
class ReconcileResult(BaseModel):
    """Outcome of a reconcile pass that ended without raising.

    `phase` is None when no status was written (the resource was gone).
    """

    resource: ResourceId
    action: Action
    phase: Optional[Phase] = None
    message: str = ""
