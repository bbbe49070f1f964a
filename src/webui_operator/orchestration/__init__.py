"""
webui_operator.orchestration - Reconcile Pass Components
=========================================================

    reconciler.py      - decision engine (decide_action, Reconciler)
    workflow.py        - oc login / oc project / ansible-playbook sequence
    status_reporter.py - advisory status writes
    ownership.py       - KWebUI → Deployment owner reference
"""

from webui_operator.orchestration.ownership import OwnershipLinker, has_controller
from webui_operator.orchestration.reconciler import (
    Reconciler,
    decide_action,
    deployed_version,
)
from webui_operator.orchestration.status_reporter import StatusReporter
from webui_operator.orchestration.workflow import ProvisioningWorkflow

__all__ = [
    "Reconciler",
    "decide_action",
    "deployed_version",
    "ProvisioningWorkflow",
    "StatusReporter",
    "OwnershipLinker",
    "has_controller",
]
