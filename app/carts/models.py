"""
Cart models.

- Cart: One per customer, created lazily
- CartItem: Product (and optional variant) line awaiting checkout

Prices are not stored here; CheckoutService snapshots them onto order items.
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class Cart(UUIDPrimaryKeyMixin, BaseModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart",
        help_text="Cart owner",
    )

    class Meta:
        verbose_name = "cart"
        verbose_name_plural = "carts"

    def __str__(self):
        return f"Cart of {self.user}"


class CartItem(UUIDPrimaryKeyMixin, BaseModel):
    cart = models.ForeignKey(
        Cart,
        on_delete=models.CASCADE,
        related_name="items",
        help_text="Owning cart",
    )
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.CASCADE,
        related_name="cart_items",
        help_text="Selected product",
    )
    variant = models.ForeignKey(
        "catalog.ProductVariant",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="cart_items",
        help_text="Selected variant, if the product has variants",
    )
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Requested quantity",
    )

    class Meta:
        ordering = ["created_at"]
        verbose_name = "cart item"
        verbose_name_plural = "cart items"

    def __str__(self):
        return f"{self.quantity} x {self.product}"

    @property
    def unit_price(self):
        return self.variant.unit_price if self.variant_id else self.product.price
