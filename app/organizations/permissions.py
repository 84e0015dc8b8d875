"""
Permission helpers shared by every settlement service.

Service-level checks take plain model instances so they can be used from
views, Celery tasks and the admin alike. DRF permission classes at the
bottom wrap them for viewsets.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework.permissions import BasePermission

from organizations.models import OrganizationMember

if TYPE_CHECKING:
    from authentication.models import User
    from organizations.models import Organization


def is_system_admin(user: User | None) -> bool:
    return bool(user is not None and getattr(user, "is_system_admin", False))


def is_platform_operator(user: User | None) -> bool:
    return bool(user is not None and user.is_active and (user.is_staff or user.is_superuser))


def is_organization_manager(user: User | None, organization: Organization | None) -> bool:
    """True if user holds an active ADMIN/MANAGER membership in organization."""
    if user is None or organization is None or not user.is_active:
        return False
    return OrganizationMember.objects.filter(
        organization=organization,
        user=user,
        is_active=True,
        role__in=OrganizationMember.MANAGER_ROLES,
    ).exists()


def can_manage_organization(user: User | None, organization: Organization | None) -> bool:
    """Organization managers, platform operators and system admins."""
    return is_platform_operator(user) or is_organization_manager(user, organization)


class IsSystemAdmin(BasePermission):
    """Allow access only to active superusers."""

    message = "System administrator access required."

    def has_permission(self, request, view):
        return is_system_admin(request.user)
