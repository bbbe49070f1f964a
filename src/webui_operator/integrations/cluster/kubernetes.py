"""
webui_operator.integrations.cluster.kubernetes - Kubernetes Cluster Client
===========================================================================

ClusterClient backed by the official `kubernetes` Python client.

    KWebUI      → CustomObjectsApi (group/version/plural from ClusterConfig)
    Deployment  → AppsV1Api

The kubernetes client is synchronous; every call runs in a worker thread via
``asyncio.to_thread`` so the event loop (and kopf) stays responsive.

Error Translation:
    ApiException(404)      → ResourceNotFoundError
    ApiException(other)    → ClusterError (status/reason in details)
    urllib3 HTTPError      → ClusterError (connection-level failures)
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

import urllib3
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from webui_operator.core.config import ClusterConfig
from webui_operator.core.exceptions import (
    ClusterError,
    ConfigurationError,
    ResourceNotFoundError,
)
from webui_operator.core.logging_config import component_logger
from webui_operator.core.models import (
    ContainerState,
    DeploymentState,
    OwnerReference,
    ResourceId,
    WebUIResource,
)
from webui_operator.integrations.cluster.base import ClusterClient


def deployment_state_from_api(deployment: Any) -> DeploymentState:
    """Convert a ``V1Deployment`` into a DeploymentState.

    Args:
        deployment: The object returned by AppsV1Api.read_namespaced_deployment.

    Returns:
        Name, namespace, uid, pod template containers and owner references.
    """
    metadata = deployment.metadata
    pod_spec = None
    if deployment.spec is not None and deployment.spec.template is not None:
        pod_spec = deployment.spec.template.spec

    containers = [
        ContainerState(name=container.name, image=container.image or "")
        for container in ((pod_spec.containers if pod_spec else None) or [])
    ]
    owners = [
        OwnerReference(
            api_version=ref.api_version,
            kind=ref.kind,
            name=ref.name,
            uid=ref.uid,
            controller=bool(ref.controller),
            block_owner_deletion=bool(ref.block_owner_deletion),
        )
        for ref in (metadata.owner_references or [])
    ]
    return DeploymentState(
        name=metadata.name,
        namespace=metadata.namespace,
        uid=metadata.uid or "",
        containers=containers,
        owner_references=owners,
    )


class KubernetesClusterClient(ClusterClient):
    """ClusterClient talking to a real API server.

    Attributes:
        _config: Group/version/plural of the KWebUI type.
        _custom: CustomObjectsApi used for KWebUI reads and writes.
        _apps: AppsV1Api used for the Deployment.
    """

    def __init__(
        self,
        config: ClusterConfig,
        *,
        api_client: Optional[k8s_client.ApiClient] = None,
        custom_objects_api: Optional[Any] = None,
        apps_api: Optional[Any] = None,
        logger: Optional[Any] = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Cluster section of the operator configuration.
            api_client: Shared ApiClient; the default client when None.
            custom_objects_api: Override of the CustomObjectsApi (tests).
            apps_api: Override of the AppsV1Api (tests).
            logger: Injected structlog logger.
        """
        self._config = config
        self._custom = custom_objects_api or k8s_client.CustomObjectsApi(api_client)
        self._apps = apps_api or k8s_client.AppsV1Api(api_client)
        self._logger = component_logger("kubernetes_cluster", logger)

    @classmethod
    def from_environment(
        cls,
        config: ClusterConfig,
        *,
        logger: Optional[Any] = None,
    ) -> "KubernetesClusterClient":
        """Load in-cluster config, falling back to the local kubeconfig.

        Raises:
            ConfigurationError: Neither source is usable.
        """
        try:
            k8s_config.load_incluster_config()
        except ConfigException:
            try:
                k8s_config.load_kube_config()
            except ConfigException as exc:
                raise ConfigurationError(
                    message="No in-cluster config and no usable kubeconfig",
                    error_code="KUBE_CONFIG_MISSING",
                    details={"error": str(exc)},
                ) from exc
        return cls(config, logger=logger)

    # =========================================================================
    # ClusterClient Implementation
    # =========================================================================

    async def get_webui(self, resource_id: ResourceId) -> WebUIResource:
        obj = await self._call(
            self._config.kind,
            resource_id.namespace,
            resource_id.name,
            self._custom.get_namespaced_custom_object,
            self._config.group,
            self._config.version,
            resource_id.namespace,
            self._config.plural,
            resource_id.name,
        )
        return WebUIResource.from_object(obj)

    async def update_webui(self, resource: WebUIResource) -> WebUIResource:
        obj = await self._call(
            self._config.kind,
            resource.id.namespace,
            resource.id.name,
            self._custom.replace_namespaced_custom_object,
            self._config.group,
            self._config.version,
            resource.id.namespace,
            self._config.plural,
            resource.id.name,
            resource.to_object(),
        )
        return WebUIResource.from_object(obj)

    async def get_deployment(self, namespace: str, name: str) -> DeploymentState:
        deployment = await self._call(
            "Deployment",
            namespace,
            name,
            self._apps.read_namespaced_deployment,
            name,
            namespace,
        )
        return deployment_state_from_api(deployment)

    async def update_deployment_owners(self, deployment: DeploymentState) -> DeploymentState:
        body = {
            "metadata": {
                "ownerReferences": [
                    ref.model_dump(by_alias=True) for ref in deployment.owner_references
                ],
            },
        }
        patched = await self._call(
            "Deployment",
            deployment.namespace,
            deployment.name,
            self._apps.patch_namespaced_deployment,
            deployment.name,
            deployment.namespace,
            body,
        )
        return deployment_state_from_api(patched)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _call(
        self,
        kind: str,
        namespace: str,
        name: str,
        fn: Callable[..., Any],
        *args: Any,
    ) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except ApiException as exc:
            if exc.status == 404:
                raise ResourceNotFoundError(
                    message=f"{kind} {namespace}/{name} not found",
                    kind=kind,
                    namespace=namespace,
                    name=name,
                ) from exc
            self._logger.warning(
                "cluster_api_error",
                kind=kind,
                namespace=namespace,
                name=name,
                status=exc.status,
                reason=exc.reason,
            )
            raise ClusterError(
                message=f"{kind} {namespace}/{name}: API error {exc.status} {exc.reason}",
                kind=kind,
                namespace=namespace,
                name=name,
                details={"status": exc.status, "reason": exc.reason},
            ) from exc
        except urllib3.exceptions.HTTPError as exc:
            self._logger.warning(
                "cluster_connection_error",
                kind=kind,
                namespace=namespace,
                name=name,
                error=str(exc),
            )
            raise ClusterError(
                message=f"{kind} {namespace}/{name}: connection error: {exc}",
                kind=kind,
                namespace=namespace,
                name=name,
                error_code="CLUSTER_CONNECTION_ERROR",
            ) from exc
