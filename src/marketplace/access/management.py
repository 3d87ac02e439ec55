"""Profile management — commands and handler."""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from marketplace.access.capabilities import Capability, bootstrap_admins, find_profile, require
from marketplace.access.profile import UserProfile, UserRole
from marketplace.domain import marketplace
from marketplace.shared.errors import Forbidden, InvalidInput, NotFound

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="UserProfile")
class SaveCallerUserProfile:
    """Create or update the calling principal's own profile."""

    principal: String(required=True, max_length=255)
    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    phone: String(max_length=20)
    role: String(max_length=20)


@marketplace.command(part_of="UserProfile")
class AssignCallerUserRole:
    """Change another principal's role. Administrators only."""

    caller: String(required=True, max_length=255)
    principal: String(required=True, max_length=255)
    role: String(required=True, max_length=20)


def _parse_role(value):
    try:
        return UserRole(value)
    except ValueError:
        raise InvalidInput(f"Unknown role: {value!r}", role=value) from None


@marketplace.command_handler(part_of=UserProfile)
class ManageProfileHandler:
    @handle(SaveCallerUserProfile)
    def save_caller_user_profile(self, command):
        repo = current_domain.repository_for(UserProfile)
        requested = _parse_role(command.role) if command.role else None

        profile = find_profile(command.principal)
        if profile is not None:
            if requested is not None and requested.value != profile.role:
                raise Forbidden("Roles can only be changed by an administrator", principal=command.principal)
            profile.update_details(name=command.name, email=command.email, phone=command.phone)
            repo.add(profile)
            return command.principal

        if command.principal in bootstrap_admins():
            role = UserRole.ADMIN
        elif requested is UserRole.ADMIN:
            raise Forbidden("The admin role can only be granted by an administrator", principal=command.principal)
        else:
            role = requested or UserRole.BUYER

        profile = UserProfile.create(
            principal=command.principal,
            name=command.name,
            email=command.email,
            phone=command.phone,
            role=role.value,
        )
        repo.add(profile)
        logger.info("Profile created", principal=command.principal, role=role.value)
        return command.principal

    @handle(AssignCallerUserRole)
    def assign_caller_user_role(self, command):
        require(command.caller, Capability.ASSIGN_ROLES)
        role = _parse_role(command.role)

        profile = find_profile(command.principal)
        if profile is None:
            raise NotFound(f"No profile for principal {command.principal}", principal=command.principal)

        profile.assign_role(role.value, assigned_by=command.caller)
        current_domain.repository_for(UserProfile).add(profile)
        logger.info(
            "Role assigned",
            principal=command.principal,
            role=role.value,
            assigned_by=command.caller,
        )
