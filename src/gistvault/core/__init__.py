# Core Module - Shared Utilities
#
# - Audit logging
# - Configuration

from .audit_log import (
    AuditLogger,
    EventSeverity,
    EventType,
    get_audit_logger,
)
from .config import VaultConfig

__all__ = [
    # Audit Logging
    "AuditLogger",
    "EventType",
    "EventSeverity",
    "get_audit_logger",
    # Configuration
    "VaultConfig",
]
