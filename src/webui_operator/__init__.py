"""
webui_operator - KubeVirt Web UI Operator
==========================================

Keeps the deployed KubeVirt Web UI (the `console` Deployment) at the version
requested on a KWebUI custom resource, by running the kubevirt-web-ui
Ansible playbook with a generated inventory.

Architecture Layers (top to bottom):
    1. Control Loop      - kopf handlers, WebUIOperator facade
    2. Orchestration     - Reconciler, ProvisioningWorkflow, StatusReporter,
                           OwnershipLinker
    3. Infrastructure    - Ephemeral credentials/inventory files
    4. Integrations      - Cluster API clients, process runners

Quick Start:
    >>> from webui_operator import WebUIOperator
    >>> operator = WebUIOperator()
    >>> result = await operator.reconcile("kubevirt-web-ui", "kubevirt-web-ui")
"""

# =============================================================================
# Package Version
# =============================================================================
__version__ = "0.1.0"

# =============================================================================
# Package-Level Exports
# =============================================================================
# For specific components, import from submodules directly:
#   from webui_operator.core.config import OperatorConfig
#   from webui_operator.core.enums import Phase
#   from webui_operator.orchestration.reconciler import decide_action
# =============================================================================
from webui_operator.facade import WebUIOperator

__all__ = ["WebUIOperator", "__version__"]
