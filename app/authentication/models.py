"""
Authentication models.

- User: Custom user model with email-based authentication

Roles used across the settlement engine:
    - Customers: any active user
    - Platform operators: ``is_staff`` users (admin site, support tooling)
    - System administrators: ``is_superuser`` users, the only ones allowed
      to confirm payouts, change platform fees or override finalized orders

Organization-level roles live in organizations.OrganizationMember.
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Usage:
        user = User.objects.create_user(email="buyer@example.com", password="...")
        admin = User.objects.create_superuser(email="ops@example.com", password="...")
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    first_name = models.CharField(
        max_length=150,
        blank=True,
        help_text="Given name, used in emails and order snapshots",
    )
    last_name = models.CharField(
        max_length=150,
        blank=True,
        help_text="Family name, used in emails and order snapshots",
    )
    phone = models.CharField(
        max_length=32,
        blank=True,
        help_text="Contact number copied into order snapshots",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    # Timestamps
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.email

    def get_short_name(self):
        return self.first_name or self.email.split("@")[0]

    @property
    def is_system_admin(self) -> bool:
        """True for users allowed to bypass order finalization and manage payouts."""
        return bool(self.is_active and self.is_superuser)

    def snapshot(self) -> dict:
        """Point-in-time customer info embedded into orders and refund requests."""
        return {
            "id": str(self.pk),
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
        }
