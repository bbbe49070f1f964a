"""
webui_operator.integrations.cluster.memory - In-Memory Cluster
===============================================================

Dict-backed ClusterClient for development and testing. Data is lost when the
process ends.

Features:
    - **Seeding**: put_webui() / put_deployment() / delete_deployment() let a
      test shape the cluster, including mid-pass from a process hook.
    - **Call History**: every API call is recorded as "<operation> <ns>/<name>".
    - **Error Simulation**: fail_next() makes the next N calls of an operation
      raise a given error.

Usage:
    >>> cluster = InMemoryClusterClient()
    >>> cluster.put_webui(WebUIResource(id=ResourceId(namespace="ns", name="ui")))
    >>> resource = await cluster.get_webui(ResourceId(namespace="ns", name="ui"))
"""

from __future__ import annotations

from collections import defaultdict, deque
from typing import Any, Optional
from uuid import uuid4

from webui_operator.core.exceptions import ResourceNotFoundError
from webui_operator.core.logging_config import component_logger
from webui_operator.core.models import (
    ContainerState,
    DeploymentState,
    ResourceId,
    WebUIResource,
)
from webui_operator.integrations.cluster.base import ClusterClient


def make_deployment(
    namespace: str,
    image: str,
    *,
    name: str = "console",
    container_name: str = "console",
) -> DeploymentState:
    """Build a single-container Deployment, handy for seeding."""
    return DeploymentState(
        name=name,
        namespace=namespace,
        uid=str(uuid4()),
        containers=[ContainerState(name=container_name, image=image)],
    )


class InMemoryClusterClient(ClusterClient):
    """In-memory ClusterClient.

    Key Data Structures:
        _webuis:      dict[ResourceId, WebUIResource]
        _deployments: dict[(namespace, name), DeploymentState]
        _failures:    dict[operation, deque[Exception]]
    """

    def __init__(self, *, logger: Optional[Any] = None) -> None:
        self._webuis: dict[ResourceId, WebUIResource] = {}
        self._deployments: dict[tuple[str, str], DeploymentState] = {}
        self._failures: dict[str, deque[Exception]] = defaultdict(deque)
        self._call_history: list[str] = []
        self._logger = component_logger("in_memory_cluster", logger)

    # =========================================================================
    # Seeding and Inspection
    # =========================================================================

    def put_webui(self, resource: WebUIResource) -> None:
        if not resource.uid:
            resource = resource.model_copy(update={"uid": str(uuid4())})
        self._webuis[resource.id] = resource

    def delete_webui(self, resource_id: ResourceId) -> None:
        self._webuis.pop(resource_id, None)

    def webui(self, resource_id: ResourceId) -> Optional[WebUIResource]:
        return self._webuis.get(resource_id)

    def put_deployment(self, deployment: DeploymentState) -> None:
        self._deployments[(deployment.namespace, deployment.name)] = deployment

    def delete_deployment(self, namespace: str, name: str = "console") -> None:
        self._deployments.pop((namespace, name), None)

    def deployment(self, namespace: str, name: str = "console") -> Optional[DeploymentState]:
        return self._deployments.get((namespace, name))

    @property
    def call_history(self) -> list[str]:
        return self._call_history

    def fail_next(self, operation: str, error: Exception, times: int = 1) -> None:
        """Make the next `times` calls of `operation` raise `error`.

        Args:
            operation: "get_webui", "update_webui", "get_deployment" or
                "update_deployment_owners".
            error: The exception to raise.
            times: How many consecutive calls fail.
        """
        for _ in range(times):
            self._failures[operation].append(error)

    # =========================================================================
    # ClusterClient Implementation
    # =========================================================================

    async def get_webui(self, resource_id: ResourceId) -> WebUIResource:
        self._record("get_webui", resource_id.namespace, resource_id.name)
        resource = self._webuis.get(resource_id)
        if resource is None:
            raise ResourceNotFoundError(
                message=f"KWebUI {resource_id} not found",
                kind="KWebUI",
                namespace=resource_id.namespace,
                name=resource_id.name,
            )
        return resource.model_copy(deep=True)

    async def update_webui(self, resource: WebUIResource) -> WebUIResource:
        self._record("update_webui", resource.id.namespace, resource.id.name)
        if resource.id not in self._webuis:
            raise ResourceNotFoundError(
                message=f"KWebUI {resource.id} not found",
                kind="KWebUI",
                namespace=resource.id.namespace,
                name=resource.id.name,
            )
        stored = resource.model_copy(deep=True)
        self._webuis[resource.id] = stored
        self._logger.debug(
            "webui_updated",
            resource=str(resource.id),
            phase=stored.status.phase,
        )
        return stored.model_copy(deep=True)

    async def get_deployment(self, namespace: str, name: str) -> DeploymentState:
        self._record("get_deployment", namespace, name)
        deployment = self._deployments.get((namespace, name))
        if deployment is None:
            raise ResourceNotFoundError(
                message=f"Deployment {namespace}/{name} not found",
                kind="Deployment",
                namespace=namespace,
                name=name,
            )
        return deployment.model_copy(deep=True)

    async def update_deployment_owners(self, deployment: DeploymentState) -> DeploymentState:
        self._record("update_deployment_owners", deployment.namespace, deployment.name)
        key = (deployment.namespace, deployment.name)
        current = self._deployments.get(key)
        if current is None:
            raise ResourceNotFoundError(
                message=f"Deployment {deployment.namespace}/{deployment.name} not found",
                kind="Deployment",
                namespace=deployment.namespace,
                name=deployment.name,
            )
        updated = current.model_copy(
            update={"owner_references": list(deployment.owner_references)},
            deep=True,
        )
        self._deployments[key] = updated
        return updated.model_copy(deep=True)

    # =========================================================================
    # Internals
    # =========================================================================

    def _record(self, operation: str, namespace: str, name: str) -> None:
        self._call_history.append(f"{operation} {namespace}/{name}")
        queue = self._failures.get(operation)
        if queue:
            error = queue.popleft()
            self._logger.debug("simulated_cluster_failure", operation=operation, error=str(error))
            raise error
