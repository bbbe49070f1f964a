"""
webui_operator.infrastructure - Local Resources
================================================

    ephemeral.py - per-run credentials/inventory files with guaranteed cleanup
    inventory.py - pure rendering of the Ansible inventory
"""

from webui_operator.infrastructure.ephemeral import EphemeralArtifactManager
from webui_operator.infrastructure.inventory import render_inventory

__all__ = [
    "EphemeralArtifactManager",
    "render_inventory",
]
