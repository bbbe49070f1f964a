"""
webui-operator Test Suite
=========================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/           → webui_operator.core (config, models, exceptions, logging)
    ├── test_infrastructure/ → webui_operator.infrastructure (ephemeral files, inventory)
    ├── test_integrations/   → webui_operator.integrations (process runners, cluster clients)
    ├── test_orchestration/  → webui_operator.orchestration (workflow, status, ownership, reconciler)
    ├── test_integration/    → End-to-end reconcile scenarios
    ├── test_facade.py       → WebUIOperator
    ├── test_handlers.py     → kopf handlers
    └── conftest.py          → Shared pytest fixtures

Running Tests:
    pytest                          # Run all tests
    pytest tests/test_core/         # Run only core tests
"""
