"""
Audit logging helpers.

Usage:
    from audit.services import log_action

    log_action(
        "order.cancelled",
        f"Order {order.order_number} cancelled",
        actor=request.user,
        organization=order.organization,
        metadata={"order_id": str(order.id), "order_number": order.order_number},
    )
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from audit.models import AuditLog

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def log_action(
    action: str,
    message: str,
    *,
    actor=None,
    organization=None,
    log_type: str = AuditLog.LogType.DATA_CHANGE,
    severity: str = AuditLog.Severity.LOW,
    metadata: dict[str, Any] | None = None,
) -> AuditLog:
    """
    Persist an audit entry and mirror it to the application log.

    Runs inside the caller's transaction, so the entry is rolled back
    together with the mutation it describes.
    """
    safe_metadata = _json_safe(metadata or {})
    entry = AuditLog.objects.create(
        action=action,
        message=message,
        actor=actor if getattr(actor, "pk", None) else None,
        organization=organization,
        log_type=log_type,
        severity=severity,
        metadata=safe_metadata,
    )
    logger.info(
        f"Audit {log_type} {action}: {message}",
        extra={"audit_id": str(entry.id), **{f"audit_{k}": v for k, v in safe_metadata.items()}},
    )
    return entry
