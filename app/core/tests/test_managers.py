"""
Tests for SoftDeleteManager and SoftDeleteQuerySet.
"""

import pytest

from catalog.models import Product
from catalog.tests.factories import ProductFactory


@pytest.mark.django_db
class TestSoftDeleteManager:
    """Tests for default filtering and explicit accessors."""

    def test_default_queryset_excludes_deleted(self):
        live = ProductFactory()
        gone = ProductFactory()
        gone.soft_delete()

        assert list(Product.objects.all()) == [live]

    def test_with_deleted_includes_everything(self):
        ProductFactory()
        ProductFactory().soft_delete()

        assert Product.objects.with_deleted().count() == 2

    def test_deleted_returns_only_tombstoned(self):
        ProductFactory()
        gone = ProductFactory()
        gone.soft_delete()

        assert list(Product.objects.deleted()) == [gone]


@pytest.mark.django_db
class TestSoftDeleteQuerySet:
    """Tests for bulk queryset operations."""

    def test_delete_marks_rows_without_removing(self):
        ProductFactory.create_batch(3)

        count, detail = Product.objects.all().delete()

        assert count == 3
        assert detail == {"catalog.Product": 3}
        assert Product.all_objects.count() == 3
        assert Product.objects.count() == 0

    def test_restore_brings_rows_back(self):
        ProductFactory.create_batch(2)
        Product.objects.all().delete()

        restored = Product.objects.with_deleted().restore()

        assert restored == 2
        assert Product.objects.count() == 2

    def test_hard_delete_removes_rows(self):
        ProductFactory.create_batch(2)

        Product.objects.with_deleted().hard_delete()

        assert Product.all_objects.count() == 0
