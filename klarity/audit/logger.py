"""
Audit Logger

DESIGN DECISION: Every mutation of stored state is logged.
This provides:
1. Traceability of what was recorded, edited, deleted and restored
2. Debugging capability when a write fails
3. A visible record of the shame mechanic

The audit logger:
- Is synchronous, like everything else in this single-threaded core
- Gracefully handles failures (never crashes a store if logging fails)
- Supports correlation IDs to tie a target deposit to its synthetic expense
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from klarity.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Attach a stderr handler to the stdlib root logger structlog writes through."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Events go to the structured local log. Nothing is written to the
    key-value store.
    """

    def __init__(self, logger_name: str = "klarity.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the log call itself failed; never raises.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False
        return True

    def log_transaction_saved(
        self,
        transaction_id: str,
        amount: int,
        transaction_type: str,
        is_delayed_entry: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a newly recorded transaction."""
        self.log(AuditEventBuilder.transaction_saved(
            transaction_id=transaction_id,
            amount=amount,
            transaction_type=transaction_type,
            is_delayed_entry=is_delayed_entry,
            correlation_id=correlation_id,
        ))

    def log_transaction_deleted(
        self,
        transaction_id: str,
        shame_triggered: bool,
    ) -> None:
        self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            shame_triggered=shame_triggered,
        ))

    def log_shame_incremented(self, transaction_id: str, shame_count: int) -> None:
        self.log(AuditEventBuilder.shame_incremented(
            transaction_id=transaction_id,
            shame_count=shame_count,
        ))

    def log_save_failed(
        self,
        entity_type: str,
        error_message: str,
        entity_id: Optional[str] = None,
    ) -> None:
        """Log a persistence failure the caller recovered from."""
        self.log(AuditEventBuilder.save_failed(
            entity_type=entity_type,
            error_message=error_message,
            entity_id=entity_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a composite action (e.g., a target deposit)
    and pass it to every event that action emits.
    """
    return uuid4()
