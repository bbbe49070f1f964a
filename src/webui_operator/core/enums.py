"""
webui_operator.core.enums - Type-Safe Enumerations
===================================================

This module defines the enumeration types used throughout the operator.

All enums inherit from both `str` and `Enum`, which means:
    - They serialize to strings in JSON/YAML (Pydantic-friendly)
    - They can be compared with plain strings: Phase.PROVISIONED == "PROVISIONED"
    - The values written to the cluster are exactly the enum values

Mapping to the reconcile pass:

    ┌─────────────────────────────────────────────────────────────────┐
    │  DECISION                                                       │
    │    Action: what a single reconcile pass does                    │
    ├─────────────────────────────────────────────────────────────────┤
    │  EXECUTION                                                      │
    │    PlaybookAction: the apb_action handed to ansible-playbook    │
    │    OutputStream: which pipe a line of process output came from  │
    ├─────────────────────────────────────────────────────────────────┤
    │  OBSERVABILITY                                                  │
    │    Phase: the closed set of values written to status.phase      │
    └─────────────────────────────────────────────────────────────────┘
"""

from enum import Enum


# =============================================================================
# Phase Enumeration
# =============================================================================
# The values written to status.phase of the KWebUI resource. The set is closed:
# the status reporter only accepts members of this enum, so a free-text phase
# cannot reach the cluster.
#
#   (no deployment)  → NOT_DEPLOYED
#   provision        → PROVISION_STARTED → (PROVISIONED | PROVISION_FAILED)
#                                        → OWNER_REFERENCE_FAILED
#   deprovision      → DEPROVISION_STARTED → (DEPROVISIONED | DEPROVISION_FAILED)
#   anything else    → OTHER_ERROR
# =============================================================================
class Phase(str, Enum):
    """Observed phase of the managed KubeVirt Web UI deployment.

    Usage:
        >>> phase = Phase.PROVISIONED
        >>> phase.value  # "PROVISIONED"
        >>> phase == "PROVISIONED"  # True (str comparison works)
    """

    PROVISION_STARTED = "PROVISION_STARTED"
    PROVISIONED = "PROVISIONED"
    PROVISION_FAILED = "PROVISION_FAILED"
    DEPROVISION_STARTED = "DEPROVISION_STARTED"
    DEPROVISIONED = "DEPROVISIONED"
    DEPROVISION_FAILED = "DEPROVISION_FAILED"
    OTHER_ERROR = "OTHER_ERROR"
    NOT_DEPLOYED = "NOT_DEPLOYED"
    OWNER_REFERENCE_FAILED = "OWNER_REFERENCE_FAILED"


# =============================================================================
# Action Enumeration
# =============================================================================
# Exactly one Action is chosen per reconcile pass. It is computed fresh every
# time from (desired version, actual version) and never persisted.
# =============================================================================
class Action(str, Enum):
    """What a reconcile pass does to converge actual onto desired state.

    Decision summary:
        no deployment, no version requested   → NOOP
        no deployment, version requested      → PROVISION
        deployed, version removed from spec   → DEPROVISION
        deployed, different version requested → DEPROVISION_THEN_PROVISION
        deployed, same version requested      → NOOP
    """

    NOOP = "noop"
    PROVISION = "provision"
    DEPROVISION = "deprovision"
    DEPROVISION_THEN_PROVISION = "deprovision_then_provision"


class PlaybookAction(str, Enum):
    """The ``apb_action`` variable passed to the provisioning playbook."""

    PROVISION = "provision"
    DEPROVISION = "deprovision"


class OutputStream(str, Enum):
    """Name tag attached to each logged line of external process output."""

    STDOUT = "stdout"
    STDERR = "stderr"
