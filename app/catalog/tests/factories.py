"""
Factory Boy factories for catalog models.
"""

from decimal import Decimal

import factory

from catalog.models import Product, ProductVariant
from organizations.tests.factories import OrganizationFactory


class ProductFactory(factory.django.DjangoModelFactory):
    """
    Factory for Product.

    Examples:
        product = ProductFactory(inventory=48)
        preorder = ProductFactory(inventory_type=Product.InventoryType.PREORDER)
    """

    class Meta:
        model = Product

    organization = factory.SubFactory(OrganizationFactory)
    title = factory.Sequence(lambda n: f"Org Shirt {n}")
    price = Decimal("250.00")
    inventory_type = Product.InventoryType.STOCK
    inventory = 50


class ProductVariantFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductVariant

    product = factory.SubFactory(ProductFactory)
    name = "Black"
    size = "M"
    inventory = 20
