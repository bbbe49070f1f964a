"""
webui_operator.integrations - External System Adapters
=======================================================

Each external system is abstracted behind an interface so implementations can
be swapped (real → fake):

    cluster/  - Kubernetes API access (KWebUI, Deployment) and credentials
    process/  - External command execution (oc, ansible-playbook)
"""

__all__: list[str] = []
