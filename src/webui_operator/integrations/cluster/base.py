"""
webui_operator.integrations.cluster.base - Cluster API Interface
=================================================================

The contract every cluster backend implements. The reconciler, the status
reporter and the ownership linker only ever talk to this interface, so the
transport (kubernetes client, in-memory dicts) is an injected capability.

    ┌──────────────┐   get/update    ┌──────────────────┐
    │  Reconciler  │ ──────────────→ │  ClusterClient   │
    │  Status...   │                 │  (abstract)      │
    │  Ownership...│ ←── models ──── │                  │
    └──────────────┘                 └────────┬─────────┘
                                   ┌──────────┴──────────┐
                              ┌────▼──────────┐  ┌───────▼────────┐
                              │  Kubernetes   │  │   InMemory     │
                              └───────────────┘  └────────────────┘

Error Contract:
    - A missing object raises ResourceNotFoundError.
    - Any other failure raises ClusterError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from webui_operator.core.models import DeploymentState, ResourceId, WebUIResource


class ClusterClient(ABC):
    """Abstract base class for cluster API backends."""

    # -------------------------------------------------------------------------
    # KWebUI
    # -------------------------------------------------------------------------
    @abstractmethod
    async def get_webui(self, resource_id: ResourceId) -> WebUIResource:
        """Fetch a KWebUI resource.

        Raises:
            ResourceNotFoundError: The resource does not exist.
            ClusterError: The read failed.
        """

    @abstractmethod
    async def update_webui(self, resource: WebUIResource) -> WebUIResource:
        """Write a KWebUI resource back, status included.

        Returns:
            The resource as stored after the write.

        Raises:
            ResourceNotFoundError: The resource no longer exists.
            ClusterError: The write failed (conflict, permissions, ...).
        """

    # -------------------------------------------------------------------------
    # Deployment
    # -------------------------------------------------------------------------
    @abstractmethod
    async def get_deployment(self, namespace: str, name: str) -> DeploymentState:
        """Fetch a Deployment.

        Raises:
            ResourceNotFoundError: The Deployment does not exist.
            ClusterError: The read failed.
        """

    @abstractmethod
    async def update_deployment_owners(self, deployment: DeploymentState) -> DeploymentState:
        """Persist `deployment.owner_references` on the cluster object.

        Raises:
            ResourceNotFoundError: The Deployment no longer exists.
            ClusterError: The write failed.
        """
