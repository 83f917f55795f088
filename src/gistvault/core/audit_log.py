# Core - Audit Logging
#
# Append-only audit trail of vault activity (bootstrap, reads, writes,
# corrupt entries). Events are structured JSON lines written through
# structlog into a daily file.
#
# Never pass secrets, tags or key material in event details. Partition
# ids and counts are the most specific values that get logged.

import logging
import os
import socket
import sys
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog

AUDIT_LOGGER_NAME = "gistvault.audit"


class EventType(str, Enum):
    """Types of vault events that can be logged."""
    VAULT_LOCATED = "vault.located"
    VAULT_CREATED = "vault.created"
    VAULT_BOOTSTRAP_FAILED = "vault.bootstrap.failed"
    SECRET_WRITTEN = "vault.secret.written"
    SECRETS_READ = "vault.secrets.read"
    ENTRY_CORRUPT = "vault.entry.corrupt"


class EventSeverity(str, Enum):
    """
    Severity levels for vault events.

    - INFO: Normal activity, logged only
    - ALERT: Something the user should look at (corrupt data)
    - CRITICAL: The vault could not be opened
    """
    INFO = "info"
    ALERT = "alert"
    CRITICAL = "critical"


class AuditLogger:
    """
    Append-only audit logger for vault events.

    Features:
    - Structured JSON logging
    - Automatic timestamp and event ID
    - OS user and host context capture
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """
        Initialize audit logger.

        Args:
            log_dir: Directory for audit logs (default: $GISTVAULT_AUDIT_DIR
                     or ./audit_logs)
        """
        if log_dir is None:
            log_dir = Path(os.environ.get("GISTVAULT_AUDIT_DIR", "./audit_logs"))
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self._setup_file_handler()

        # Processors bound to this logger only; the host application's
        # structlog configuration is left alone.
        self.logger = structlog.wrap_logger(
            logging.getLogger(AUDIT_LOGGER_NAME),
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso", key="logged_at"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
        )

    def _setup_file_handler(self) -> Path:
        """Attach a daily file handler to the audit logger."""
        today = datetime.now().strftime("%Y-%m-%d")
        log_file = self.log_dir / f"audit_{today}.log"

        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        formatter = logging.Formatter('%(message)s')  # structlog handles formatting
        file_handler.setFormatter(formatter)

        audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
        audit_logger.addHandler(file_handler)
        audit_logger.setLevel(logging.INFO)
        audit_logger.propagate = False
        self._handler = file_handler

        return log_file

    def close(self) -> None:
        """Detach and close the file handler."""
        logging.getLogger(AUDIT_LOGGER_NAME).removeHandler(self._handler)
        self._handler.close()

    def log_event(
        self,
        event_type: EventType,
        severity: EventSeverity,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Log a vault event (append-only).

        Args:
            event_type: Type of event (from EventType enum)
            severity: Severity level (from EventSeverity enum)
            message: Human-readable event description
            details: Additional event details (never secrets or tags!)

        Returns:
            str: Event ID (UUID) for reference
        """
        event_id = str(uuid4())

        event_data = {
            "event_id": event_id,
            "event_type": event_type.value,
            "severity": severity.value,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": details or {},
            "user_context": self._get_default_user_context(),
        }

        self.logger.info("vault_event", **event_data)

        return event_id

    def log_vault_event(
        self,
        event_type: EventType,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: EventSeverity = EventSeverity.INFO,
    ) -> str:
        """Log a vault event, prefixing the message."""
        return self.log_event(
            event_type=event_type,
            severity=severity,
            message=f"Vault: {message}",
            details=details
        )

    def _get_default_user_context(self) -> Dict[str, Any]:
        """Get default user context (OS user, hostname, platform)."""
        return {
            "os_user": os.getenv("USERNAME") or os.getenv("USER"),
            "hostname": socket.gethostname(),
            "platform": sys.platform,
        }


# Global logger instance
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Get global audit logger (singleton pattern)."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger
