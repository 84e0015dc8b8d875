from django.contrib import admin

from catalog.models import Product, ProductVariant


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("title", "organization", "price", "inventory_type", "inventory", "is_active")
    list_filter = ("inventory_type", "is_active", "is_deleted")
    search_fields = ("title",)
    raw_id_fields = ("organization",)
    inlines = [ProductVariantInline]
