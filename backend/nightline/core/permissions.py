"""
Role-permission model.

ROLES AND RANKS
===============

    user(0) < promoter(1) < admin(2) < owner(3)

Most capabilities are granted by rank: a role holds a capability when its rank
is at least the capability's threshold. A few are carve-outs that a rank
comparison cannot express (support tickets are for the audience, not staff;
only plain users may apply to become promoters; the "my submissions" view only
makes sense for promoters). Those are listed by role explicitly.

Both sources are folded into a single table, CAPABILITIES, which is checked
for completeness at import time.

Resource-level rules (who may edit which event, who may touch which account)
depend on more than the role and live in the can_* helpers below.
"""

import enum
from typing import Optional


class Role(str, enum.Enum):
    USER = "user"
    PROMOTER = "promoter"
    ADMIN = "admin"
    OWNER = "owner"

    @property
    def rank(self) -> int:
        return ROLE_RANK[self]


ROLE_RANK = {
    Role.USER: 0,
    Role.PROMOTER: 1,
    Role.ADMIN: 2,
    Role.OWNER: 3,
}


class Capability(str, enum.Enum):
    CREATE_EVENTS = "create_events"
    VIEW_OWN_SUBMISSIONS = "view_own_submissions"
    MANAGE_EVENTS = "manage_events"
    FEATURE_EVENTS = "feature_events"
    DELETE_EVENTS = "delete_events"
    MANAGE_USERS = "manage_users"
    ASSIGN_OWNER_ROLE = "assign_owner_role"
    MODIFY_OWNER_ACCOUNTS = "modify_owner_accounts"
    VIEW_SUPPORT_INBOX = "view_support_inbox"
    SUBMIT_SUPPORT_TICKET = "submit_support_ticket"
    APPLY_FOR_PROMOTER = "apply_for_promoter"


# Minimum role for rank-monotonic capabilities
_RANKED = {
    Capability.CREATE_EVENTS: Role.PROMOTER,
    Capability.MANAGE_EVENTS: Role.ADMIN,
    Capability.FEATURE_EVENTS: Role.ADMIN,
    Capability.DELETE_EVENTS: Role.ADMIN,
    Capability.MANAGE_USERS: Role.ADMIN,
    Capability.VIEW_SUPPORT_INBOX: Role.ADMIN,
    Capability.ASSIGN_OWNER_ROLE: Role.OWNER,
    Capability.MODIFY_OWNER_ACCOUNTS: Role.OWNER,
}

# Capabilities held by an explicit set of roles
CARVE_OUTS = {
    Capability.SUBMIT_SUPPORT_TICKET: frozenset({Role.USER, Role.PROMOTER}),
    Capability.APPLY_FOR_PROMOTER: frozenset({Role.USER}),
    Capability.VIEW_OWN_SUBMISSIONS: frozenset({Role.PROMOTER}),
}


def has_rank(role: Role, required: Role) -> bool:
    """True when `role` sits at or above `required` in the rank order."""
    return Role(role).rank >= Role(required).rank


def _build_capability_table() -> dict[Role, frozenset[Capability]]:
    table = {}
    for role in Role:
        granted = {cap for cap, minimum in _RANKED.items() if has_rank(role, minimum)}
        granted |= {cap for cap, roles in CARVE_OUTS.items() if role in roles}
        table[role] = frozenset(granted)
    return table


def _validate_capability_table(table: dict[Role, frozenset[Capability]]) -> None:
    missing_roles = set(Role) - set(table)
    if missing_roles:
        raise RuntimeError(f"Roles without a capability entry: {sorted(r.value for r in missing_roles)}")

    overlap = set(_RANKED) & set(CARVE_OUTS)
    if overlap:
        raise RuntimeError(f"Capabilities defined twice: {sorted(c.value for c in overlap)}")

    granted = set().union(*table.values())
    unreachable = set(Capability) - granted
    if unreachable:
        raise RuntimeError(f"Capabilities no role holds: {sorted(c.value for c in unreachable)}")


CAPABILITIES = _build_capability_table()
_validate_capability_table(CAPABILITIES)


def permission(role: Role, capability: Capability) -> bool:
    return Capability(capability) in CAPABILITIES[Role(role)]


def badge_for(role: Role) -> Optional[str]:
    """Display badge for a role. Plain users get none."""
    role = Role(role)
    if role == Role.USER:
        return None
    return role.value


def can_edit_event(actor_id: int, actor_role: Role, event) -> bool:
    """
    Whether the actor may edit an event's details outside the moderation surface.

    Owners edit anything. Admins edit events they organize or submitted.
    Promoters edit only their own submissions.
    """
    role = Role(actor_role)
    if role == Role.OWNER:
        return True
    if role == Role.ADMIN:
        return actor_id in (event.organizer_user_id, event.submitted_by_promoter_id)
    if role == Role.PROMOTER:
        return event.submitted_by_promoter_id == actor_id
    return False


def can_modify_user(actor_role: Role, target_role: Role, new_role: Optional[Role] = None) -> bool:
    if not permission(actor_role, Capability.MANAGE_USERS):
        return False
    if Role(target_role) == Role.OWNER and not permission(actor_role, Capability.MODIFY_OWNER_ACCOUNTS):
        return False
    if new_role is not None and Role(new_role) == Role.OWNER:
        return permission(actor_role, Capability.ASSIGN_OWNER_ROLE)
    return True


def can_delete_user(actor_id: int, actor_role: Role, target_id: int, target_role: Role) -> bool:
    """Owner accounts and the caller's own account are never deletable."""
    if not permission(actor_role, Capability.MANAGE_USERS):
        return False
    if Role(target_role) == Role.OWNER:
        return False
    return actor_id != target_id
