"""
Dry Run Example - Install, Upgrade and Remove the Web UI
========================================================

Drives WebUIOperator through a full KWebUI lifecycle without a cluster or
any `oc` / `ansible-playbook` binaries:

    - The cluster is an InMemoryClusterClient.
    - Commands go to a RecordingProcessRunner whose hook plays the part of
      the playbook (it creates or deletes the `console` Deployment).
    - Credentials are static instead of the pod's service account.

Usage:
    python examples/dry_run.py
"""

from __future__ import annotations

import asyncio
import tempfile

from webui_operator.core.config import ArtifactConfig, ClusterConfig, OperatorConfig
from webui_operator.core.logging_config import configure_logging
from webui_operator.core.models import (
    ClusterCredentials,
    ResourceId,
    WebUIResource,
    WebUISpec,
)
from webui_operator.facade import WebUIOperator
from webui_operator.integrations.cluster.memory import InMemoryClusterClient, make_deployment
from webui_operator.integrations.process.base import ProcessCommand
from webui_operator.integrations.process.mock import RecordingProcessRunner


NAMESPACE = "kubevirt-web-ui"
RESOURCE_ID = ResourceId(namespace=NAMESPACE, name="kubevirt-web-ui")


def playbook_simulator(cluster: InMemoryClusterClient):
    """Return a runner hook that applies the inventory's apb_action."""

    def hook(command: ProcessCommand) -> None:
        if not command.program.endswith("ansible-playbook"):
            return
        with open(command.args[1]) as f:
            values = dict(line.split("=", 1) for line in f.read().splitlines() if line.count("=") == 1 and " " not in line)
        if values["apb_action"] == "provision":
            image = f"{values['registry_url']}/{values['registry_namespace']}/kubevirt-web-ui:{values['docker_tag']}"
            cluster.put_deployment(make_deployment(NAMESPACE, image))
        else:
            cluster.delete_deployment(NAMESPACE)

    return hook


async def set_version(operator: WebUIOperator, cluster: InMemoryClusterClient, version: str) -> None:
    """Change spec.version and run one reconcile pass."""
    current = cluster.webui(RESOURCE_ID)
    cluster.put_webui(current.model_copy(update={"spec": WebUISpec(version=version)}))

    result = await operator.reconcile(RESOURCE_ID.namespace, RESOURCE_ID.name)
    status = cluster.webui(RESOURCE_ID).status
    print(f"version={version!r:8} action={result.action.value:28} phase={status.phase.value}")


async def main() -> None:
    """Install v1.4, upgrade to v2.0, then remove the Web UI."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config = OperatorConfig(
            log_level="WARNING",
            artifacts=ArtifactConfig(temp_dir=temp_dir),
            cluster=ClusterConfig(backend="memory"),
        )
        configure_logging(config)

        cluster = InMemoryClusterClient()
        runner = RecordingProcessRunner(hook=playbook_simulator(cluster))
        operator = WebUIOperator(
            config,
            cluster=cluster,
            runner=runner,
            credentials_provider=lambda: ClusterCredentials(
                host="https://172.30.0.1:443",
                ca_file="/var/run/secrets/kubernetes.io/serviceaccount/ca.crt",
                token="dry-run-token",
            ),
        )

        cluster.put_webui(WebUIResource(id=RESOURCE_ID))
        for version in ("v1.4", "v1.4", "v2.0", ""):
            await set_version(operator, cluster, version)

        print("\nCommands run:")
        for call in runner.calls:
            print(f"  {call.command.display()}")


if __name__ == "__main__":
    asyncio.run(main())
