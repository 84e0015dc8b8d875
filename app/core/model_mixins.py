"""
Model mixins providing reusable functionality for Django models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key
    SoftDeleteMixin: Soft delete support (is_deleted, deleted_at)
    SlugMixin: Auto-generated URL slugs
    OptimisticLockMixin: Version counter incremented on every update

Usage:
    from core.models import BaseModel
    from core.model_mixins import SoftDeleteMixin, UUIDPrimaryKeyMixin

    class Voucher(UUIDPrimaryKeyMixin, SoftDeleteMixin, BaseModel):
        objects = SoftDeleteManager()
        all_objects = models.Manager()

Note:
    - Always list mixins before BaseModel in inheritance
    - SoftDeleteMixin requires SoftDeleteManager (see core.managers)
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.db import models
from django.db.models import F
from django.utils import timezone
from django.utils.text import slugify

if TYPE_CHECKING:
    from typing import Any


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    Settlement records are referenced from gateway metadata and emails,
    so identifiers must not reveal record counts.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class SoftDeleteMixin(models.Model):
    """
    Soft delete support for models.

    Records are tombstoned instead of removed. Managers built on
    core.managers.SoftDeleteManager exclude tombstoned rows by default.

    Fields:
        is_deleted: Boolean flag indicating soft delete status
        deleted_at: Timestamp when the record was soft deleted

    Usage:
        order.soft_delete()
        order.restore()
        Order.objects.deleted()   # only tombstoned rows
        Order.all_objects.all()   # everything
    """

    is_deleted = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether this record has been soft deleted",
    )
    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Timestamp when this record was soft deleted",
    )

    class Meta:
        abstract = True

    def soft_delete(self) -> None:
        """Mark this record as deleted without removing it."""
        if self.is_deleted:
            return
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.save(update_fields=["is_deleted", "deleted_at", "updated_at"])

    def restore(self) -> None:
        """Restore a soft-deleted record."""
        if not self.is_deleted:
            return
        self.is_deleted = False
        self.deleted_at = None
        self.save(update_fields=["is_deleted", "deleted_at", "updated_at"])

    def hard_delete(self) -> None:
        """
        Permanently delete this record.

        Warning:
            This cannot be undone. Financial records should never use it.
        """
        super().delete()


class SlugMixin(models.Model):
    """
    URL-safe slug field generated from get_slug_source() when left blank.

    Duplicate slugs get a numeric suffix: "acme", "acme-1", "acme-2".
    """

    slug = models.SlugField(
        max_length=255,
        unique=True,
        db_index=True,
        help_text="URL-safe identifier for this record",
    )

    class Meta:
        abstract = True

    def get_slug_source(self) -> str:
        raise NotImplementedError(
            f"{self.__class__.__name__} must implement get_slug_source()"
        )

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.slug:
            base = slugify(self.get_slug_source())[:240] or "item"
            candidate = base
            suffix = 1
            queryset = type(self)._base_manager.all()
            while queryset.filter(slug=candidate).exclude(pk=self.pk).exists():
                candidate = f"{base}-{suffix}"
                suffix += 1
            self.slug = candidate
        super().save(*args, **kwargs)


class OptimisticLockMixin(models.Model):
    """
    Version counter for optimistic concurrency control.

    Every update increments ``version`` atomically in the database.
    Services that read-then-write use ``check_version()`` to detect a
    concurrent writer and fail with a ConflictError.

    Fields:
        version: Incremented on each save after the initial insert
    """

    version = models.PositiveIntegerField(
        default=1,
        help_text="Optimistic locking version, incremented on each update",
    )

    class Meta:
        abstract = True

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Save with version auto-increment on update."""
        is_update = not self._state.adding and not kwargs.get("force_insert", False)
        if is_update:
            self.version = F("version") + 1
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "version" not in update_fields:
                kwargs["update_fields"] = [*update_fields, "version"]
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])

    def check_version(self, expected_version: int) -> bool:
        """Return True if the stored version still matches expected_version."""
        return (
            type(self)._base_manager.filter(pk=self.pk, version=expected_version).exists()
        )
