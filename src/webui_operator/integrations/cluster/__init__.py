"""
webui_operator.integrations.cluster - Cluster API Backends
===========================================================

Available Clients:
    - ClusterClient:           Abstract base class defining the cluster contract.
    - InMemoryClusterClient:   Dict-backed cluster for tests and dry runs.
    - KubernetesClusterClient: Official kubernetes client (imported lazily by
                               create_cluster_client).

Credentials:
    - load_in_cluster_credentials(): the pod's service account, for `oc login`.
"""

from webui_operator.integrations.cluster.base import ClusterClient
from webui_operator.integrations.cluster.credentials import (
    CredentialsProvider,
    in_cluster_credentials_provider,
    load_in_cluster_credentials,
)
from webui_operator.integrations.cluster.factory import create_cluster_client
from webui_operator.integrations.cluster.memory import InMemoryClusterClient, make_deployment

__all__ = [
    "ClusterClient",
    "InMemoryClusterClient",
    "make_deployment",
    "create_cluster_client",
    "CredentialsProvider",
    "load_in_cluster_credentials",
    "in_cluster_credentials_provider",
]
