"""
Tests for audit.services.log_action.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from audit.models import AuditLog
from audit.services import log_action
from authentication.tests.factories import UserFactory


class TestLogAction:
    def test_persists_entry_with_defaults(self, user):
        entry = log_action("order.updated", "Order updated", actor=user)

        assert entry.actor == user
        assert entry.log_type == AuditLog.LogType.DATA_CHANGE
        assert entry.severity == AuditLog.Severity.LOW
        assert AuditLog.objects.count() == 1

    def test_metadata_is_made_json_safe(self, db):
        order_id = uuid.uuid4()

        entry = log_action(
            "payment.received",
            "Payment received",
            log_type=AuditLog.LogType.SYSTEM_EVENT,
            metadata={
                "order_id": order_id,
                "amount": Decimal("333.34"),
                "paid_at": datetime(2025, 1, 3, tzinfo=UTC),
                "order_ids": (order_id,),
            },
        )

        entry.refresh_from_db()
        assert entry.metadata == {
            "order_id": str(order_id),
            "amount": "333.34",
            "paid_at": "2025-01-03T00:00:00+00:00",
            "order_ids": [str(order_id)],
        }

    def test_metadata_is_queryable(self, db):
        log_action("order.cancelled", "Cancelled", metadata={"order_number": "ORD-1"})
        log_action("order.cancelled", "Cancelled", metadata={"order_number": "ORD-2"})

        assert AuditLog.objects.filter(metadata__order_number="ORD-2").count() == 1

    def test_unsaved_actor_is_recorded_as_system(self, db):
        entry = log_action("system.tick", "Tick", actor=UserFactory.build())

        assert entry.actor is None
