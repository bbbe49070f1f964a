"""
webui_operator.integrations.cluster.credentials - Ambient Cluster Credentials
==============================================================================

Reads the operator pod's own service account credentials (API host, CA
bundle, bearer token). They are handed to `oc login` to populate the
ephemeral kubeconfig of each provisioning run.

The kubernetes client's InClusterConfigLoader does the reading, so the rules
for KUBERNETES_SERVICE_HOST/PORT and the mounted token/CA files are the same
as for any in-cluster client.
"""

from __future__ import annotations

import os
from typing import Callable, Mapping, Optional

from kubernetes import client as k8s_client
from kubernetes.config import incluster_config
from kubernetes.config.config_exception import ConfigException

from webui_operator.core.config import ClusterConfig
from webui_operator.core.exceptions import ConfigurationError
from webui_operator.core.models import ClusterCredentials


CredentialsProvider = Callable[[], ClusterCredentials]


def load_in_cluster_credentials(
    config: ClusterConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> ClusterCredentials:
    """Read host, CA path and bearer token of the pod's service account.

    Args:
        config: Supplies the token and CA file paths.
        environ: Environment to read KUBERNETES_SERVICE_HOST/PORT from.
            Defaults to os.environ.

    Returns:
        ClusterCredentials with the token stripped of its "bearer " prefix.

    Raises:
        ConfigurationError: Not running in a pod, or the files are missing.
    """
    configuration = k8s_client.Configuration()
    loader = incluster_config.InClusterConfigLoader(
        token_filename=config.token_path,
        cert_filename=config.ca_path,
        try_refresh_token=False,
        environ=environ if environ is not None else os.environ,
    )
    try:
        loader.load_and_set(configuration)
    except ConfigException as exc:
        raise ConfigurationError(
            message="Failed to get in-cluster config",
            error_code="IN_CLUSTER_CONFIG_MISSING",
            details={"error": str(exc)},
        ) from exc

    return ClusterCredentials(
        host=configuration.host,
        ca_file=configuration.ssl_ca_cert,
        token=bearer_token(configuration.api_key),
    )


def bearer_token(api_key: Mapping[str, str]) -> str:
    """Extract the raw token from a kubernetes Configuration.api_key.

    Newer clients store it under "BearerToken", older ones under
    "authorization"; either may carry a "bearer " prefix.
    """
    token = api_key.get("BearerToken") or api_key.get("authorization") or ""
    if token.lower().startswith("bearer "):
        token = token[len("bearer "):]
    return token


def in_cluster_credentials_provider(config: ClusterConfig) -> CredentialsProvider:
    """Bind `config` into a zero-argument provider for the workflow."""

    def provider() -> ClusterCredentials:
        return load_in_cluster_credentials(config)

    return provider
