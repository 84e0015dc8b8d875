"""
Tests for SoftDeleteMixin in core/model_mixins.py.

This module tests:
- soft_delete() sets is_deleted and deleted_at
- restore() clears is_deleted and deleted_at
- hard_delete() permanently removes the record
- Idempotency of soft_delete and restore
"""

import pytest

from catalog.models import Product
from catalog.tests.factories import ProductFactory


@pytest.fixture
def product(db):
    return ProductFactory()


class TestSoftDelete:
    """Tests for SoftDeleteMixin.soft_delete()."""

    def test_sets_flag_and_timestamp(self, product):
        """Should mark the record deleted with a timestamp."""
        product.soft_delete()
        product.refresh_from_db()

        assert product.is_deleted is True
        assert product.deleted_at is not None

    def test_is_idempotent(self, product):
        """Should keep the first deletion timestamp on repeated calls."""
        product.soft_delete()
        first_deleted_at = product.deleted_at

        product.soft_delete()

        assert product.deleted_at == first_deleted_at

    def test_hides_record_from_default_manager(self, product):
        product.soft_delete()

        assert not Product.objects.filter(pk=product.pk).exists()
        assert Product.all_objects.filter(pk=product.pk).exists()


class TestRestore:
    """Tests for SoftDeleteMixin.restore()."""

    def test_clears_flag_and_timestamp(self, product):
        product.soft_delete()

        product.restore()
        product.refresh_from_db()

        assert product.is_deleted is False
        assert product.deleted_at is None

    def test_restore_on_live_record_is_noop(self, product):
        product.restore()

        assert product.is_deleted is False


class TestHardDelete:
    """Tests for SoftDeleteMixin.hard_delete()."""

    def test_removes_row(self, product):
        product.hard_delete()

        assert not Product.all_objects.filter(pk=product.pk).exists()
