"""Read operations over user profiles."""

from marketplace.access.capabilities import find_profile, is_admin
from marketplace.access.profile import UserProfile
from marketplace.shared.errors import Forbidden

GUEST_ROLE = "guest"


def get_caller_user_profile(caller: str) -> UserProfile | None:
    return find_profile(caller)


def get_user_profile(caller: str, principal: str) -> UserProfile | None:
    """Profiles are readable by their owner and by administrators."""
    if caller != principal and not is_admin(caller):
        raise Forbidden("Only administrators may read other profiles", principal=caller)
    return find_profile(principal)


def get_caller_user_role(caller: str) -> str:
    profile = find_profile(caller)
    return profile.role if profile is not None else GUEST_ROLE


def is_caller_admin(caller: str) -> bool:
    return is_admin(caller)
