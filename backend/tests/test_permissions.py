"""
Tests for the role-permission model. Pure functions, no I/O.
"""

from itertools import combinations_with_replacement
from types import SimpleNamespace

import pytest

from nightline.core.permissions import (
    CAPABILITIES,
    CARVE_OUTS,
    Capability,
    Role,
    badge_for,
    can_delete_user,
    can_edit_event,
    can_modify_user,
    has_rank,
    permission,
)

ROLES_BY_RANK = sorted(Role, key=lambda r: r.rank)


def test_rank_order():
    assert [r.value for r in ROLES_BY_RANK] == ["user", "promoter", "admin", "owner"]
    assert has_rank(Role.OWNER, Role.ADMIN)
    assert has_rank(Role.ADMIN, Role.ADMIN)
    assert not has_rank(Role.PROMOTER, Role.ADMIN)


def test_capability_table_covers_every_role_and_capability():
    assert set(CAPABILITIES) == set(Role)
    granted = set().union(*CAPABILITIES.values())
    assert granted == set(Capability)


@pytest.mark.parametrize("capability", [c for c in Capability if c not in CARVE_OUTS])
def test_ranked_capabilities_are_monotonic(capability):
    """A capability held by a role is held by every higher role."""
    for lower, higher in combinations_with_replacement(ROLES_BY_RANK, 2):
        if permission(lower, capability):
            assert permission(higher, capability), f"{higher.value} lost {capability.value}"


def test_owner_role_assignment_is_owner_only():
    assert permission(Role.ADMIN, Capability.ASSIGN_OWNER_ROLE) is False
    assert permission(Role.OWNER, Capability.ASSIGN_OWNER_ROLE) is True
    assert permission(Role.ADMIN, Capability.MODIFY_OWNER_ACCOUNTS) is False
    assert permission(Role.OWNER, Capability.MODIFY_OWNER_ACCOUNTS) is True


def test_staff_surfaces_are_admin_or_owner():
    for capability in (Capability.VIEW_SUPPORT_INBOX, Capability.MANAGE_EVENTS, Capability.MANAGE_USERS):
        assert not permission(Role.USER, capability)
        assert not permission(Role.PROMOTER, capability)
        assert permission(Role.ADMIN, capability)
        assert permission(Role.OWNER, capability)


def test_support_tickets_are_for_users_and_promoters_only():
    assert permission(Role.USER, Capability.SUBMIT_SUPPORT_TICKET)
    assert permission(Role.PROMOTER, Capability.SUBMIT_SUPPORT_TICKET)
    assert not permission(Role.ADMIN, Capability.SUBMIT_SUPPORT_TICKET)
    assert not permission(Role.OWNER, Capability.SUBMIT_SUPPORT_TICKET)


def test_only_plain_users_apply_for_promoter():
    assert permission(Role.USER, Capability.APPLY_FOR_PROMOTER)
    for role in (Role.PROMOTER, Role.ADMIN, Role.OWNER):
        assert not permission(role, Capability.APPLY_FOR_PROMOTER)


def test_own_submissions_view_is_promoter_only():
    assert permission(Role.PROMOTER, Capability.VIEW_OWN_SUBMISSIONS)
    for role in (Role.USER, Role.ADMIN, Role.OWNER):
        assert not permission(role, Capability.VIEW_OWN_SUBMISSIONS)


def test_permission_accepts_plain_strings():
    assert permission("promoter", "create_events")
    assert not permission("user", "create_events")


def _event(organizer, promoter=None):
    return SimpleNamespace(organizer_user_id=organizer, submitted_by_promoter_id=promoter)


def test_promoter_edits_only_own_submissions():
    assert can_edit_event(7, Role.PROMOTER, _event(organizer=7, promoter=7))
    assert not can_edit_event(7, Role.PROMOTER, _event(organizer=7, promoter=None))
    assert not can_edit_event(7, Role.PROMOTER, _event(organizer=8, promoter=8))


def test_admin_edits_events_they_organize_or_submitted():
    assert can_edit_event(2, Role.ADMIN, _event(organizer=2))
    assert can_edit_event(2, Role.ADMIN, _event(organizer=9, promoter=2))
    assert not can_edit_event(2, Role.ADMIN, _event(organizer=9, promoter=5))


def test_owner_edits_everything_and_user_nothing():
    assert can_edit_event(1, Role.OWNER, _event(organizer=9, promoter=5))
    assert not can_edit_event(9, Role.USER, _event(organizer=9, promoter=9))


def test_can_modify_user_protects_owner_accounts():
    assert can_modify_user(Role.ADMIN, Role.USER, Role.PROMOTER)
    assert can_modify_user(Role.ADMIN, Role.PROMOTER, Role.ADMIN)
    assert not can_modify_user(Role.ADMIN, Role.USER, Role.OWNER)
    assert not can_modify_user(Role.ADMIN, Role.OWNER)
    assert can_modify_user(Role.OWNER, Role.ADMIN, Role.OWNER)
    assert can_modify_user(Role.OWNER, Role.OWNER, Role.ADMIN)
    assert not can_modify_user(Role.PROMOTER, Role.USER)


def test_owner_accounts_are_never_deletable():
    for actor_role in Role:
        assert not can_delete_user(1, actor_role, 2, Role.OWNER)


def test_self_deletion_is_rejected():
    assert not can_delete_user(3, Role.ADMIN, 3, Role.ADMIN)
    assert can_delete_user(3, Role.ADMIN, 4, Role.ADMIN)
    assert not can_delete_user(3, Role.PROMOTER, 4, Role.USER)


def test_badges():
    assert badge_for(Role.USER) is None
    assert badge_for(Role.PROMOTER) == "promoter"
    assert badge_for(Role.ADMIN) == "admin"
    assert badge_for("owner") == "owner"
