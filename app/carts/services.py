"""
Cart mutation service.

CartService is the upstream half of checkout: customers collect items here
and CheckoutService (orders.services) turns a selection into orders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db.models import F

from carts.models import Cart, CartItem
from core.exceptions import NotFoundError, ValidationError
from core.services import BaseService

if TYPE_CHECKING:
    from authentication.models import User
    from catalog.models import Product, ProductVariant


class CartService(BaseService):
    """Add and remove cart lines for the authenticated customer."""

    @classmethod
    def get_cart(cls, user: User) -> Cart:
        cart, _ = Cart.objects.get_or_create(user=user)
        return cart

    @classmethod
    def add_item(
        cls,
        user: User,
        product: Product,
        quantity: int,
        variant: ProductVariant | None = None,
    ) -> CartItem:
        """
        Add quantity of a product to the user's cart.

        An existing line for the same product/variant is incremented instead
        of duplicated.

        Raises:
            ValidationError: Inactive product, foreign variant or quantity <= 0
        """
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be at least 1", error_code="INVALID_QUANTITY")
        if not product.is_active or product.is_deleted:
            raise ValidationError(
                "This product is not available", error_code="PRODUCT_UNAVAILABLE"
            )
        if variant is not None and (variant.product_id != product.pk or not variant.is_active):
            raise ValidationError(
                "This variant is not available", error_code="VARIANT_UNAVAILABLE"
            )

        with cls.atomic():
            cart = cls.get_cart(user)
            item = CartItem.objects.filter(cart=cart, product=product, variant=variant).first()
            if item is None:
                item = CartItem.objects.create(
                    cart=cart, product=product, variant=variant, quantity=quantity
                )
            else:
                CartItem.objects.filter(pk=item.pk).update(quantity=F("quantity") + quantity)
                item.refresh_from_db(fields=["quantity"])

        cls.get_logger().info(
            "Cart item added",
            extra={"user_id": str(user.pk), "product_id": str(product.pk), "quantity": quantity},
        )
        return item

    @classmethod
    def remove_item(cls, user: User, item_id) -> None:
        """
        Remove a line from the user's own cart.

        Raises:
            NotFoundError: If the line does not exist in this user's cart
        """
        deleted, _ = CartItem.objects.filter(cart__user=user, pk=item_id).delete()
        if not deleted:
            raise NotFoundError("Cart item not found", details={"item_id": str(item_id)})
