"""
Audit log model.

AuditLog is an append-only record of every settlement mutation. Entries are
queried by structured metadata (e.g. ``metadata__order_id``), so callers put
identifiers into ``metadata`` rather than only into ``message``.
"""

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class AuditLog(UUIDPrimaryKeyMixin, BaseModel):
    """
    One audited action.

    Fields:
        action: Short machine-readable action name (e.g. "order.cancelled")
        log_type: Category used by audit dashboards
        severity: How loudly the entry should surface
        message: Human-readable description
        actor: User who triggered the action (None for system events)
        organization: Tenant the action belongs to, if any
        metadata: Structured identifiers and values
    """

    class LogType(models.TextChoices):
        SYSTEM_EVENT = "SYSTEM_EVENT", "System Event"
        DATA_CHANGE = "DATA_CHANGE", "Data Change"
        USER_ACTION = "USER_ACTION", "User Action"
        SECURITY = "SECURITY", "Security"

    class Severity(models.TextChoices):
        LOW = "LOW", "Low"
        MEDIUM = "MEDIUM", "Medium"
        HIGH = "HIGH", "High"
        CRITICAL = "CRITICAL", "Critical"

    action = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Machine-readable action name",
    )
    log_type = models.CharField(
        max_length=20,
        choices=LogType.choices,
        default=LogType.DATA_CHANGE,
        db_index=True,
        help_text="Audit category",
    )
    severity = models.CharField(
        max_length=10,
        choices=Severity.choices,
        default=Severity.LOW,
        help_text="Severity of the audited action",
    )
    message = models.TextField(
        help_text="Human-readable description of the action",
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
        help_text="User who performed the action (null for system events)",
    )
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
        help_text="Organization the action belongs to",
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Structured identifiers and values for audit queries",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "audit log"
        verbose_name_plural = "audit logs"
        indexes = [
            models.Index(fields=["log_type", "-created_at"]),
            models.Index(fields=["organization", "-created_at"]),
        ]

    def __str__(self):
        return f"{self.log_type} {self.action}"
