"""
Authorization guard: decide whether a principal may act on a resource.

Pure decision logic (no I/O, no side effects) so every rule can be tested
directly. Callers check that the resource exists first and only then ask
for a decision.
"""

import enum
from dataclasses import dataclass

from app.models.user import Role
from app.schemas.auth import Principal

# Reason tags carried by decisions.
REASON_ADMIN = "admin"
REASON_OWNER = "owner"
REASON_READ = "read"
REASON_FORBIDDEN = "forbidden"


class Action(str, enum.Enum):
    """What the principal wants to do with the resource."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"


@dataclass(frozen=True)
class AuthorizationDecision:
    """Outcome of a single check; never persisted."""

    allowed: bool
    reason: str


class ForbiddenError(Exception):
    """Raised when an authenticated principal is not permitted to act on a resource."""

    def __init__(self, message: str, action: Action) -> None:
        self.message = message
        self.action = action
        super().__init__(message)


def can_mutate(
    principal: Principal,
    resource_owner_id: int,
    action: Action,
    private: bool = False,
) -> AuthorizationDecision:
    """
    Allow ADMIN for everything, anyone for READ of a non-private resource,
    and the owner for WRITE/DELETE (and READ of a private resource).
    """
    if principal.role is Role.ADMIN:
        return AuthorizationDecision(True, REASON_ADMIN)
    if action is Action.READ and not private:
        return AuthorizationDecision(True, REASON_READ)
    if principal.id == resource_owner_id:
        return AuthorizationDecision(True, REASON_OWNER)
    return AuthorizationDecision(False, REASON_FORBIDDEN)


def ensure_allowed(
    principal: Principal,
    resource_owner_id: int,
    action: Action,
    private: bool = False,
) -> AuthorizationDecision:
    """Like can_mutate, but raises ForbiddenError on deny."""
    decision = can_mutate(principal, resource_owner_id, action, private=private)
    if not decision.allowed:
        raise ForbiddenError(f"Not permitted to {action.value} this resource", action)
    return decision
