"""
Shared pytest fixtures for the gistvault test suite.

The autouse fixture below isolates tests from the real audit trail:
  - Audit logger -> temp directory (prevents test events in ./audit_logs)
"""

import pytest

from gistvault.backends import InMemoryBackend
from gistvault.vault import EncryptionService


@pytest.fixture(autouse=True)
def _isolate_audit_logs(tmp_path):
    """Point the global AuditLogger at a temp directory for every test.

    Without this, any test that opens a vault or writes a secret appends
    events to the real ``./audit_logs/`` directory.
    """
    import gistvault.core.audit_log as audit_mod

    old_logger = audit_mod._audit_logger
    audit_mod._audit_logger = audit_mod.AuditLogger(log_dir=tmp_path / "audit_logs")

    yield audit_mod._audit_logger

    audit_mod._audit_logger.close()
    audit_mod._audit_logger = old_logger


@pytest.fixture
def key():
    return EncryptionService.generate_key()


@pytest.fixture
def other_key():
    return EncryptionService.generate_key()


@pytest.fixture
def backend():
    return InMemoryBackend()
