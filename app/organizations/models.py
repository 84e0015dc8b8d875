"""
Organization (tenant/seller) models.

- Organization: A seller on the marketplace. Owns products, receives orders
  and is paid out weekly through payout invoices.
- OrganizationMember: Links users to organizations with a role.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.managers import SoftDeleteManager
from core.model_mixins import SlugMixin, SoftDeleteMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel


class Organization(UUIDPrimaryKeyMixin, SoftDeleteMixin, SlugMixin, BaseModel):
    """
    Marketplace seller.

    Fields:
        name: Display name
        slug: URL-safe identifier, also used in payout invoice numbers
        email: Contact address for payout notifications
        platform_fee_percentage: Custom fee, overrides the platform default
        payout_bank_details: Bank/e-wallet details printed on payout invoices
    """

    name = models.CharField(
        max_length=200,
        help_text="Organization display name",
    )
    email = models.EmailField(
        blank=True,
        help_text="Contact email for payout notifications",
    )
    platform_fee_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text="Custom platform fee percentage; null uses the platform default",
    )
    payout_bank_details = models.JSONField(
        default=dict,
        blank=True,
        help_text="Payout destination (bank name, account name, account number)",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["name"]
        verbose_name = "organization"
        verbose_name_plural = "organizations"
        constraints = [
            models.CheckConstraint(
                check=models.Q(platform_fee_percentage__isnull=True)
                | (
                    models.Q(platform_fee_percentage__gte=0)
                    & models.Q(platform_fee_percentage__lte=100)
                ),
                name="organization_fee_percentage_range",
            ),
        ]

    def __str__(self):
        return self.name

    def get_slug_source(self) -> str:
        return self.name

    def active_managers(self):
        """Users holding an active ADMIN or MANAGER membership."""
        from authentication.models import User

        return User.objects.filter(
            is_active=True,
            organization_memberships__organization=self,
            organization_memberships__is_active=True,
            organization_memberships__role__in=OrganizationMember.MANAGER_ROLES,
        ).distinct()

    def manager_emails(self) -> list[str]:
        return list(self.active_managers().values_list("email", flat=True))

    def snapshot(self) -> dict:
        """Point-in-time organization info embedded into payout invoices."""
        return {
            "id": str(self.pk),
            "name": self.name,
            "slug": self.slug,
            "email": self.email,
            "bank_details": self.payout_bank_details,
        }


class OrganizationMember(BaseModel):
    """
    Membership of a user in an organization.

    ADMIN and MANAGER members may manage orders, review refund requests and
    create organization vouchers. STAFF members may only view.
    """

    class Role(models.TextChoices):
        ADMIN = "ADMIN", "Admin"
        MANAGER = "MANAGER", "Manager"
        STAFF = "STAFF", "Staff"

    MANAGER_ROLES = (Role.ADMIN, Role.MANAGER)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="members",
        help_text="Organization the user belongs to",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="organization_memberships",
        help_text="Member user",
    )
    role = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.STAFF,
        help_text="Member role within the organization",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive memberships grant no permissions",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "organization member"
        verbose_name_plural = "organization members"
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "user"],
                name="unique_organization_member",
            ),
        ]

    def __str__(self):
        return f"{self.user} ({self.role}) @ {self.organization}"
