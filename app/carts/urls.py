"""
URL configuration for carts API.

URL Structure:
    /              GET     current cart
    /items/        POST    add item
    /items/{id}/   DELETE  remove item

All URLs are prefixed with /api/v1/carts/ in the main URL configuration.
"""

from django.urls import path

from carts.views import CartItemDetailView, CartItemsView, CartView

app_name = "carts"

urlpatterns = [
    path("", CartView.as_view(), name="cart"),
    path("items/", CartItemsView.as_view(), name="cart-items"),
    path("items/<uuid:item_id>/", CartItemDetailView.as_view(), name="cart-item-detail"),
]
