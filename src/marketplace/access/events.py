"""Domain events for the UserProfile aggregate."""

from protean.fields import DateTime, String

from marketplace.domain import marketplace


@marketplace.event(part_of="UserProfile")
class UserProfileCreated:
    """A principal created their marketplace profile."""

    __version__ = 1

    principal: String(required=True)
    name: String(required=True)
    email: String(required=True)
    role: String(required=True)
    created_at: DateTime(required=True)


@marketplace.event(part_of="UserProfile")
class UserProfileUpdated:
    """Name, email or phone on a profile changed."""

    __version__ = 1

    principal: String(required=True)
    name: String(required=True)
    email: String(required=True)
    phone: String()


@marketplace.event(part_of="UserProfile")
class UserRoleAssigned:
    """An administrator changed the role of a principal."""

    __version__ = 1

    principal: String(required=True)
    previous_role: String(required=True)
    new_role: String(required=True)
    assigned_by: String(required=True)
    assigned_at: DateTime(required=True)
