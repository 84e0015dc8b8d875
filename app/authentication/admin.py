"""
Django admin configuration for authentication models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from authentication.models import User
from organizations.models import OrganizationMember


class MembershipInline(admin.TabularInline):
    model = OrganizationMember
    fk_name = "user"
    extra = 0
    raw_id_fields = ("organization",)
    verbose_name = "organization membership"


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Email-based users with their seller organization memberships."""

    list_display = ("email", "get_full_name", "phone", "is_active", "is_staff", "date_joined")
    list_filter = ("is_active", "is_staff", "is_superuser")
    search_fields = ("email", "first_name", "last_name", "phone")
    ordering = ("-date_joined",)
    inlines = [MembershipInline]

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Personal info", {"fields": ("first_name", "last_name", "phone")}),
        ("Platform access", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Permissions", {"fields": ("groups", "user_permissions")}),
        ("Important dates", {"fields": ("date_joined", "last_login")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "password1", "password2")}),
    )
    readonly_fields = ("date_joined", "last_login")

    @admin.display(description="Name")
    def get_full_name(self, obj):
        return obj.get_full_name()
