"""
Views for carts API.

Validation of quantities and product availability happens in CartService so
the same rules apply to every caller.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from carts.serializers import AddCartItemSerializer, CartItemSerializer, CartSerializer
from carts.services import CartService


class CartView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Get cart", responses={200: CartSerializer}, tags=["Carts"])
    def get(self, request):
        return Response(CartSerializer(CartService.get_cart(request.user)).data)


class CartItemsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Add cart item",
        request=AddCartItemSerializer,
        responses={201: CartItemSerializer},
        tags=["Carts"],
    )
    def post(self, request):
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = CartService.add_item(
            request.user,
            serializer.validated_data["product"],
            serializer.validated_data["quantity"],
            variant=serializer.validated_data.get("variant"),
        )
        return Response(CartItemSerializer(item).data, status=status.HTTP_201_CREATED)


class CartItemDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Remove cart item", responses={204: None}, tags=["Carts"])
    def delete(self, request, item_id):
        CartService.remove_item(request.user, item_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
