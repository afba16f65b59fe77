"""
Role checks consumed by the engine's callers.

Authentication itself lives outside this package: callers hand over the
role they resolved for the current user and the engine only decides
whether that role may run recruiter operations.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .errors import AuthorizationError


class AppRole(str, Enum):
    STUDENT = "student"
    RECRUITER = "recruiter"
    ADMIN = "admin"


class RoleCheckResult(BaseModel):
    authorized: bool
    role: Optional[AppRole] = None
    reason: Optional[str] = None


def parse_role(value: Optional[str]) -> Optional[AppRole]:
    """Map a raw role string to AppRole; unknown roles become student."""
    if not value:
        return None
    try:
        return AppRole(value.strip().lower())
    except ValueError:
        return AppRole.STUDENT


def check_role(user_role: Optional[str], required: AppRole = AppRole.RECRUITER) -> RoleCheckResult:
    """
    Check a caller role against a required role.

    Admins satisfy every requirement.
    """
    role = parse_role(user_role)
    if role is None:
        return RoleCheckResult(authorized=False, reason="Not authenticated")

    if role != required and role != AppRole.ADMIN:
        return RoleCheckResult(
            authorized=False,
            role=role,
            reason=f"Insufficient permissions. Required: {required.value}, User has: {role.value}",
        )

    return RoleCheckResult(authorized=True, role=role)


def require_role(result: RoleCheckResult) -> AppRole:
    """Raise AuthorizationError unless the role check passed."""
    if not result.authorized:
        raise AuthorizationError(result.reason or "Forbidden")
    return result.role
