"""
Tests for carts API views.
"""

from rest_framework import status

from carts.services import CartService

CART_URL = "/api/v1/carts/"
ITEMS_URL = "/api/v1/carts/items/"


class TestCartEndpoints:
    def test_add_then_get(self, client_for, user, product):
        client = client_for(user)

        response = client.post(
            ITEMS_URL, {"product": str(product.id), "quantity": 2}, format="json"
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["unit_price"] == "250.00"

        response = client.get(CART_URL)
        assert response.status_code == status.HTTP_200_OK
        assert [row["quantity"] for row in response.data["items"]] == [2]

    def test_invalid_quantity_is_400(self, client_for, user, product):
        response = client_for(user).post(
            ITEMS_URL, {"product": str(product.id), "quantity": 0}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_QUANTITY"

    def test_delete_item(self, client_for, user, product):
        item = CartService.add_item(user, product, 1)

        response = client_for(user).delete(f"{ITEMS_URL}{item.id}/")

        assert response.status_code == status.HTTP_204_NO_CONTENT

    def test_delete_unknown_item_is_404(self, client_for, user):
        response = client_for(user).delete(f"{ITEMS_URL}00000000-0000-0000-0000-000000000000/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
