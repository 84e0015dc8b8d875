"""
Factory Boy factories for organization models.
"""

import factory

from authentication.tests.factories import UserFactory
from organizations.models import Organization, OrganizationMember


class OrganizationFactory(factory.django.DjangoModelFactory):
    """
    Factory for Organization.

    Examples:
        org = OrganizationFactory()
        custom_fee = OrganizationFactory(platform_fee_percentage=Decimal("10"))
    """

    class Meta:
        model = Organization

    name = factory.Sequence(lambda n: f"Campus Store {n}")
    email = factory.Sequence(lambda n: f"store{n}@example.com")


class OrganizationMemberFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrganizationMember

    organization = factory.SubFactory(OrganizationFactory)
    user = factory.SubFactory(UserFactory)
    role = OrganizationMember.Role.ADMIN
