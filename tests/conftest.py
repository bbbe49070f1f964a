"""
Shared Test Fixtures for webui-operator
=======================================

Fixtures are organized by layer:

    1. Configuration fixtures (ephemeral files go to tmp_path)
    2. Integration fixtures (in-memory cluster, recording runner, credentials)
    3. Infrastructure fixtures (artifact manager)
    4. Facade fixtures (WebUIOperator wired to the fakes)
"""

from __future__ import annotations

import pytest

from webui_operator.core.config import ArtifactConfig, ClusterConfig, OperatorConfig
from webui_operator.core.models import ClusterCredentials
from webui_operator.facade import WebUIOperator
from webui_operator.infrastructure.ephemeral import EphemeralArtifactManager
from webui_operator.integrations.cluster.memory import InMemoryClusterClient
from webui_operator.integrations.process.mock import RecordingProcessRunner


TOKEN = "sa-token-5f2b9c"


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config(tmp_path):
    """Operator configuration using the memory backend and tmp_path for files."""
    return OperatorConfig(
        artifacts=ArtifactConfig(temp_dir=str(tmp_path)),
        cluster=ClusterConfig(backend="memory"),
    )


# =============================================================================
# Integrations
# =============================================================================

@pytest.fixture
def cluster():
    """Fresh InMemoryClusterClient with nothing seeded."""
    return InMemoryClusterClient()


@pytest.fixture
def runner():
    """Fresh RecordingProcessRunner that succeeds on every command."""
    return RecordingProcessRunner()


@pytest.fixture
def credentials():
    """Service account credentials handed to `oc login`."""
    return ClusterCredentials(
        host="https://172.30.0.1:443",
        ca_file="/var/run/secrets/kubernetes.io/serviceaccount/ca.crt",
        token=TOKEN,
    )


# =============================================================================
# Infrastructure
# =============================================================================

@pytest.fixture
def artifacts(config):
    """EphemeralArtifactManager writing into tmp_path."""
    return EphemeralArtifactManager(config.artifacts)


# =============================================================================
# Facade
# =============================================================================

@pytest.fixture
def operator(config, cluster, runner, credentials):
    """WebUIOperator wired to the in-memory cluster and recording runner."""
    return WebUIOperator(
        config,
        cluster=cluster,
        runner=runner,
        credentials_provider=lambda: credentials,
    )
