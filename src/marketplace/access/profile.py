"""UserProfile aggregate: the marketplace's view of an authenticated principal.

The role is a plain attribute of the profile rather than a subtype. What a
role may do is decided in ``marketplace.access.capabilities``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, String, ValueObject

from marketplace.access.events import UserProfileCreated, UserProfileUpdated, UserRoleAssigned
from marketplace.domain import marketplace
from marketplace.shared.email import EmailAddress


class UserRole(Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


@marketplace.aggregate
class UserProfile:
    """Name, contact details and role of one principal."""

    principal: String(identifier=True, max_length=255)
    name: String(required=True, max_length=100)
    email: ValueObject(EmailAddress, required=True)
    phone: String(max_length=20)
    role: String(choices=UserRole, default=UserRole.BUYER.value)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, principal, name, email, role=UserRole.BUYER.value, phone=None):
        now = datetime.now(UTC)
        profile = cls(
            principal=principal,
            name=name,
            email=EmailAddress(address=email),
            phone=phone or None,
            role=role,
            created_at=now,
            updated_at=now,
        )
        profile.raise_(
            UserProfileCreated(
                principal=principal,
                name=name,
                email=email,
                role=role,
                created_at=now,
            )
        )
        return profile

    @property
    def user_role(self) -> UserRole:
        return UserRole(self.role)

    def update_details(self, name, email, phone=None):
        self.name = name
        self.email = EmailAddress(address=email)
        self.phone = phone or None
        self.updated_at = datetime.now(UTC)

        self.raise_(
            UserProfileUpdated(
                principal=self.principal,
                name=self.name,
                email=email,
                phone=self.phone,
            )
        )

    def assign_role(self, role, assigned_by):
        previous_role = self.role
        self.role = UserRole(role).value
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            UserRoleAssigned(
                principal=self.principal,
                previous_role=previous_role,
                new_role=self.role,
                assigned_by=assigned_by,
                assigned_at=now,
            )
        )
