"""
webui_operator.integrations.cluster.factory - Cluster Client Factory
=====================================================================

Maps ``ClusterConfig.backend`` to a concrete ClusterClient:
    - "kubernetes" → KubernetesClusterClient (in-cluster or kubeconfig)
    - "memory"     → InMemoryClusterClient (dry runs, tests)
"""

from __future__ import annotations

from typing import Any, Optional

from webui_operator.core.config import ClusterConfig
from webui_operator.core.exceptions import ConfigurationError
from webui_operator.integrations.cluster.base import ClusterClient


def create_cluster_client(
    config: ClusterConfig,
    *,
    logger: Optional[Any] = None,
) -> ClusterClient:
    """Create the ClusterClient selected by `config.backend`.

    Raises:
        ConfigurationError: Unknown backend, or no usable kube config.
    """
    backend = config.backend.lower()

    if backend == "memory":
        from webui_operator.integrations.cluster.memory import InMemoryClusterClient
        return InMemoryClusterClient(logger=logger)

    if backend == "kubernetes":
        from webui_operator.integrations.cluster.kubernetes import KubernetesClusterClient
        return KubernetesClusterClient.from_environment(config, logger=logger)

    raise ConfigurationError(
        message=f"Unknown cluster backend: '{backend}'. Available: 'kubernetes', 'memory'.",
        error_code="UNKNOWN_CLUSTER_BACKEND",
        details={"backend": backend},
    )
