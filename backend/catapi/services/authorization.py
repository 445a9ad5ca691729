"""
CatAPI Backend — Authorization Decisions
==========================================

What:  One capability check, `authorize(principal, action, resource)`, used
       before every mutating operation.
How:   Each Action maps to a rule: authenticated-only, owner-only or
       admin-only. `require()` turns a DENY into ForbiddenError so a failed
       check can never fall through as an empty response.

Rules:
    CREATE_CAT       any authenticated principal
    UPDATE_OWN_CAT   principal.id == cat.owner_id
    DELETE_OWN_CAT   principal.id == cat.owner_id
    UPDATE_ANY_CAT   principal.role == admin
    DELETE_ANY_CAT   principal.role == admin
    UPDATE_SELF      principal.id == user.id
    DELETE_SELF      principal.id == user.id
"""

import enum
import logging
from typing import Any, Optional
from uuid import UUID

from catapi.exceptions import ForbiddenError
from catapi.security.principal import Principal

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    CREATE_CAT = "create_cat"
    UPDATE_OWN_CAT = "update_own_cat"
    DELETE_OWN_CAT = "delete_own_cat"
    UPDATE_ANY_CAT = "update_any_cat"
    DELETE_ANY_CAT = "delete_any_cat"
    UPDATE_SELF = "update_self"
    DELETE_SELF = "delete_self"


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


_OWNER_ACTIONS = {Action.UPDATE_OWN_CAT, Action.DELETE_OWN_CAT}
_ADMIN_ACTIONS = {Action.UPDATE_ANY_CAT, Action.DELETE_ANY_CAT}
_SELF_ACTIONS = {Action.UPDATE_SELF, Action.DELETE_SELF}

_DENY_MESSAGES = {
    Action.UPDATE_OWN_CAT: "Only the owner can update this cat",
    Action.DELETE_OWN_CAT: "Only the owner can delete this cat",
    Action.UPDATE_ANY_CAT: "Only admins can update any cat",
    Action.DELETE_ANY_CAT: "Only admins can delete any cat",
}


def _owner_of(resource: Any) -> Optional[UUID]:
    """Owner id of a cat (row or CatView) or id of a user row."""
    if resource is None:
        return None
    owner_id = getattr(resource, "owner_id", None)
    if owner_id is not None:
        return owner_id
    return getattr(resource, "id", None)


def authorize(
    principal: Optional[Principal],
    action: Action,
    resource: Any = None,
) -> Decision:
    """
    Decide whether `principal` may perform `action` on `resource`.

    Pure function of its arguments: no database access, no side effects.
    A missing principal is always denied.
    """
    if principal is None:
        return Decision.DENY

    if action == Action.CREATE_CAT:
        return Decision.ALLOW

    if action in _ADMIN_ACTIONS:
        return Decision.ALLOW if principal.is_admin else Decision.DENY

    if action in _OWNER_ACTIONS or action in _SELF_ACTIONS:
        owner_id = _owner_of(resource)
        if owner_id is not None and owner_id == principal.id:
            return Decision.ALLOW
        return Decision.DENY

    return Decision.DENY


def require(
    principal: Optional[Principal],
    action: Action,
    resource: Any = None,
) -> None:
    """Raise ForbiddenError unless `authorize` allows the action."""
    if authorize(principal, action, resource) is Decision.ALLOW:
        return
    logger.warning(
        "Denied %s for principal %s",
        action.value,
        principal.id if principal else "anonymous",
    )
    raise ForbiddenError(
        message=_DENY_MESSAGES.get(action, "You are not allowed to perform this action"),
        context={"action": action.value},
    )
