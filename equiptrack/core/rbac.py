# equiptrack/core/rbac.py

from equiptrack.core.exceptions import Forbidden
from equiptrack.models.enums import UserRole

# Lower number = more privilege. The order is total and closed over UserRole.
ROLE_RANK = {
    UserRole.SuperAdmin: 0,
    UserRole.Admin: 1,
    UserRole.AdvancedUser: 2,
    UserRole.RegularUser: 3,
}

# Roles that review requests and manage items inside their own department
DEPARTMENT_MANAGER_ROLES = (UserRole.Admin, UserRole.AdvancedUser)


def normalize_role(role) -> UserRole:
    if isinstance(role, UserRole):
        return role
    return UserRole(str(role).strip())


def rank(role) -> int:
    return ROLE_RANK[normalize_role(role)]


def can_manage(actor_role, target_role) -> bool:
    """An actor may only administer roles strictly below their own."""
    return rank(actor_role) < rank(target_role)


def ensure_can_manage(actor_role, target_role) -> None:
    if not can_manage(actor_role, target_role):
        raise Forbidden(
            f"Role '{normalize_role(actor_role).value}' cannot manage "
            f"role '{normalize_role(target_role).value}'"
        )


def has_at_least(role, minimum: UserRole) -> bool:
    return rank(role) <= rank(minimum)


def ensure_at_least(role, minimum: UserRole) -> None:
    if not has_at_least(role, minimum):
        raise Forbidden(f"Access denied for role '{normalize_role(role).value}'")
