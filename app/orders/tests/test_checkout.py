"""
Tests for CheckoutService.create_order_from_cart().
"""

from decimal import Decimal

import pytest

from carts.models import CartItem
from carts.services import CartService
from catalog.tests.factories import ProductFactory, ProductVariantFactory
from core.exceptions import ValidationError
from orders.models import CheckoutSession
from orders.services import CheckoutService
from orders.states import OrderStatus, PaymentStatus
from organizations.tests.factories import OrganizationFactory
from vouchers.models import VoucherUsage
from vouchers.states import DiscountType, VoucherErrorCode
from vouchers.tests.factories import VoucherFactory


class TestSingleOrganizationCheckout:
    def test_creates_one_order_with_snapshots(self, customer, organization):
        product = ProductFactory(organization=organization, price=Decimal("250.00"), inventory=50)
        CartService.add_item(customer, product, 2)

        result = CheckoutService.create_order_from_cart(customer, notes="Leave at the guard")

        assert len(result.orders) == 1
        order = result.orders[0]
        assert order.organization == organization
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        assert order.total_amount == Decimal("500.00")
        assert order.item_count == 2
        assert order.customer_info["email"] == customer.email
        assert result.checkout_session is None
        assert result.external_id == order.order_number

        item = order.items.get()
        assert item.product_title == product.title
        assert item.price == Decimal("250.00")

    def test_decrements_stock_and_empties_cart(self, customer, organization):
        product = ProductFactory(organization=organization, inventory=50)
        CartService.add_item(customer, product, 2)

        CheckoutService.create_order_from_cart(customer)

        product.refresh_from_db()
        assert product.inventory == 48
        assert not CartItem.objects.filter(cart__user=customer).exists()

    def test_variant_price_and_stock(self, customer, organization):
        product = ProductFactory(organization=organization, inventory=50)
        variant = ProductVariantFactory(product=product, price=Decimal("300.00"), inventory=5)
        CartService.add_item(customer, product, 1, variant=variant)

        result = CheckoutService.create_order_from_cart(customer)

        item = result.orders[0].items.get()
        assert item.price == Decimal("300.00")
        assert item.variant_label == "Black (M)"
        variant.refresh_from_db()
        assert variant.inventory == 4

    def test_insufficient_stock(self, customer, organization):
        product = ProductFactory(organization=organization, inventory=1)
        CartService.add_item(customer, product, 2)

        with pytest.raises(ValidationError) as exc_info:
            CheckoutService.create_order_from_cart(customer)

        assert exc_info.value.error_code == "OUT_OF_STOCK"
        assert CartItem.objects.filter(cart__user=customer).exists()

    def test_empty_selection(self, customer):
        with pytest.raises(ValidationError) as exc_info:
            CheckoutService.create_order_from_cart(customer)

        assert exc_info.value.error_code == "EMPTY_CART"

    def test_only_selected_items_are_checked_out(self, customer, organization):
        first = CartService.add_item(customer, ProductFactory(organization=organization), 1)
        second = CartService.add_item(customer, ProductFactory(organization=organization), 1)

        CheckoutService.create_order_from_cart(customer, item_ids=[first.pk])

        remaining = list(CartItem.objects.filter(cart__user=customer))
        assert remaining == [second]


class TestGroupedCheckout:
    def test_one_order_per_organization_with_session(self, customer):
        first_org, second_org = OrganizationFactory(), OrganizationFactory()
        CartService.add_item(customer, ProductFactory(organization=first_org, price=100), 1)
        CartService.add_item(customer, ProductFactory(organization=second_org, price=200), 2)

        result = CheckoutService.create_order_from_cart(customer)

        assert len(result.orders) == 2
        session = result.checkout_session
        assert session.checkout_id.startswith("checkout-")
        assert result.external_id == session.checkout_id
        assert session.total_amount == Decimal("500.00")
        assert set(session.orders.all()) == set(result.orders)
        assert CheckoutSession.objects.count() == 1


class TestCheckoutWithVoucher:
    def test_applies_and_redeems_voucher(self, customer, organization):
        voucher = VoucherFactory(
            organization=organization,
            code="TENPCT",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal("10"),
        )
        CartService.add_item(customer, ProductFactory(organization=organization, price=250), 4)

        result = CheckoutService.create_order_from_cart(customer, voucher_code="tenpct")

        order = result.orders[0]
        assert order.total_amount == Decimal("900.00")
        assert order.discount_amount == Decimal("100.00")
        assert order.voucher_code == "TENPCT"
        assert order.voucher_snapshot["discount_type"] == DiscountType.PERCENTAGE
        voucher.refresh_from_db()
        assert voucher.used_count == 1
        assert VoucherUsage.objects.get().order == order

    def test_voucher_applies_to_its_own_organization_only(self, customer, organization):
        other = OrganizationFactory()
        VoucherFactory(organization=organization, code="FIFTY", discount_value=Decimal("50"))
        CartService.add_item(customer, ProductFactory(organization=organization, price=100), 1)
        CartService.add_item(customer, ProductFactory(organization=other, price=1000), 1)

        result = CheckoutService.create_order_from_cart(customer, voucher_code="FIFTY")

        by_org = {o.organization_id: o for o in result.orders}
        assert by_org[organization.pk].total_amount == Decimal("50.00")
        assert by_org[other.pk].total_amount == Decimal("1000.00")

    def test_invalid_voucher_aborts_checkout(self, customer, organization):
        CartService.add_item(customer, ProductFactory(organization=organization), 1)

        with pytest.raises(ValidationError) as exc_info:
            CheckoutService.create_order_from_cart(customer, voucher_code="NOPE")

        assert exc_info.value.error_code == VoucherErrorCode.NOT_FOUND
        assert CartItem.objects.filter(cart__user=customer).exists()

    def test_fixed_discount_never_exceeds_subtotal(self, customer, organization):
        VoucherFactory(organization=organization, code="BIG", discount_value=Decimal("5000"))
        CartService.add_item(customer, ProductFactory(organization=organization, price=300), 1)

        result = CheckoutService.create_order_from_cart(customer, voucher_code="BIG")

        assert result.orders[0].total_amount == Decimal("0.00")
