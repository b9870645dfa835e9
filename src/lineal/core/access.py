"""
Role-based access control for roster operations.

The two roles are not a ladder: SUPER_ADMIN administers accounts and the
audit log, ADMIN maintains the personnel roster. Each permission lists
the roles that hold it.
"""

from __future__ import annotations

from lineal.core.exceptions import PermissionDenied
from lineal.core.models import Role

# Permission -> roles allowed
_PERMISSIONS: dict[str, frozenset[Role]] = {
    "view_users": frozenset({Role.SUPER_ADMIN}),
    "manage_users": frozenset({Role.SUPER_ADMIN}),
    "view_audit": frozenset({Role.SUPER_ADMIN}),
    "clear_audit": frozenset({Role.SUPER_ADMIN}),
    "view_personnel": frozenset({Role.ADMIN}),
    "manage_personnel": frozenset({Role.ADMIN}),
    "update_own_account": frozenset({Role.ADMIN, Role.SUPER_ADMIN}),
}


def has_permission(role: Role, permission: str) -> bool:
    """False for unknown permissions."""
    allowed = _PERMISSIONS.get(permission)
    if allowed is None:
        return False
    return role in allowed


def require_permission(role: Role, permission: str) -> None:
    if not has_permission(role, permission):
        raise PermissionDenied(f"Role {role.value} is not allowed to {permission.replace('_', ' ')}.")


def permissions_for(role: Role) -> list[str]:
    return sorted(p for p, roles in _PERMISSIONS.items() if role in roles)


def list_permissions() -> dict[str, list[str]]:
    """All permissions and the roles that hold them."""
    return {perm: sorted(r.value for r in roles) for perm, roles in _PERMISSIONS.items()}
