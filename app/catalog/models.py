"""
Catalog models.

- Product: Item sold by an organization
- ProductVariant: Sellable variation of a product (e.g. color), optionally sized

Inventory tracking:
    STOCK products keep an ``inventory`` counter that is decremented at
    checkout and restored on cancellation. PREORDER products are unlimited
    and their counters are never touched.
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from core.managers import SoftDeleteManager
from core.model_mixins import SoftDeleteMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel


class Product(UUIDPrimaryKeyMixin, SoftDeleteMixin, BaseModel):
    """
    Product listed by an organization.

    Fields:
        organization: Seller, null for platform-run listings
        title: Display title, snapshotted onto order items
        price: Base unit price
        inventory_type: STOCK (counted) or PREORDER (unlimited)
        inventory: Units on hand for STOCK products
        is_active: Inactive products cannot be added to carts
    """

    class InventoryType(models.TextChoices):
        STOCK = "STOCK", "Stock"
        PREORDER = "PREORDER", "Pre-order"

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="products",
        help_text="Selling organization (null for platform listings)",
    )
    title = models.CharField(
        max_length=255,
        help_text="Product title",
    )
    description = models.TextField(
        blank=True,
        help_text="Product description",
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Base unit price",
    )
    inventory_type = models.CharField(
        max_length=10,
        choices=InventoryType.choices,
        default=InventoryType.STOCK,
        help_text="STOCK products track inventory; PREORDER are unlimited",
    )
    inventory = models.IntegerField(
        default=0,
        help_text="Units on hand (STOCK products only)",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Whether the product can be purchased",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "product"
        verbose_name_plural = "products"
        indexes = [
            models.Index(fields=["organization", "is_active"]),
        ]

    def __str__(self):
        return self.title

    @property
    def tracks_inventory(self) -> bool:
        return self.inventory_type == self.InventoryType.STOCK


class ProductVariant(UUIDPrimaryKeyMixin, BaseModel):
    """
    Variation of a product with its own price and inventory.

    ``price`` falls back to the product price when null.
    """

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="variants",
        help_text="Parent product",
    )
    name = models.CharField(
        max_length=100,
        help_text="Variant name (e.g. color or edition)",
    )
    size = models.CharField(
        max_length=20,
        blank=True,
        help_text="Size label, empty when the product is not sized",
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Variant price; null uses the product price",
    )
    inventory = models.IntegerField(
        default=0,
        help_text="Units on hand for this variant (STOCK products only)",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Whether the variant can be purchased",
    )

    class Meta:
        ordering = ["name", "size"]
        verbose_name = "product variant"
        verbose_name_plural = "product variants"

    def __str__(self):
        label = f"{self.product.title} / {self.name}"
        return f"{label} ({self.size})" if self.size else label

    @property
    def unit_price(self) -> Decimal:
        return self.price if self.price is not None else self.product.price
