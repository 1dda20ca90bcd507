"""
Tests for the authorization engine.

Covers:
- Team scope precedence over every role rule
- The rule for each action, for admins, creators, task owners and editors
- Member add/remove special cases (cross-team, creator removal)
- Totality of the rule table
"""

from __future__ import annotations

import uuid
from types import SimpleNamespace

import pytest

from teamboard.core.errors import Denied
from teamboard.core.permissions import (
    CANNOT_REMOVE_CREATOR,
    CROSS_TEAM_MEMBER,
    INSUFFICIENT_ROLE,
    NO_MATCHING_RULE,
    NOT_YOUR_TEAM,
    _RULES,
    Action,
    Actor,
    Resource,
    authorize,
    can_perform,
)
from teamboard_shared.schemas.common import Role

TEAM = uuid.uuid4()
OTHER_TEAM = uuid.uuid4()


def actor(role: Role = Role.EDITOR, team_id=TEAM, user_id=None) -> Actor:
    return Actor(user_id=user_id or uuid.uuid4(), role=role, team_id=team_id)


def project(created_by=None, team_id=TEAM):
    return SimpleNamespace(id=uuid.uuid4(), team_id=team_id, created_by=created_by or uuid.uuid4())


# ---------------------------------------------------------------------------
# Team scope
# ---------------------------------------------------------------------------

class TestTeamScope:
    @pytest.mark.parametrize("action", list(Action))
    @pytest.mark.parametrize("role", list(Role))
    def test_other_team_always_denied(self, action, role):
        decision = can_perform(actor(role), action, Resource.team(OTHER_TEAM))
        assert not decision
        assert decision.reason == NOT_YOUR_TEAM

    @pytest.mark.parametrize("action", list(Action))
    def test_teamless_actor_denied(self, action):
        decision = can_perform(actor(Role.ADMIN, team_id=None), action, Resource.team(None))
        assert decision.reason == NOT_YOUR_TEAM

    def test_scope_checked_before_creator_rule(self):
        me = actor(Role.EDITOR)
        foreign = project(created_by=me.user_id, team_id=OTHER_TEAM)
        decision = can_perform(me, Action.PROJECT_DELETE, Resource.project(foreign))
        assert decision.reason == NOT_YOUR_TEAM


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

class TestRules:
    @pytest.mark.parametrize(
        "action",
        [Action.TEAM_READ, Action.PROJECT_READ, Action.PROJECT_CREATE, Action.TASK_READ],
    )
    def test_open_to_any_member(self, action):
        assert can_perform(actor(Role.EDITOR), action, Resource.team(TEAM))

    @pytest.mark.parametrize(
        "action",
        [
            Action.TEAM_DELETE,
            Action.INVITE_GENERATE,
            Action.INVITE_REGENERATE,
            Action.INVITE_SEND,
            Action.INVITE_CANCEL,
        ],
    )
    def test_admin_only(self, action):
        assert can_perform(actor(Role.ADMIN), action, Resource.team(TEAM))
        decision = can_perform(actor(Role.EDITOR), action, Resource.team(TEAM))
        assert decision.reason == INSUFFICIENT_ROLE

    @pytest.mark.parametrize("action", [Action.PROJECT_UPDATE, Action.PROJECT_DELETE])
    def test_project_write_admin_or_creator(self, action):
        creator = actor(Role.EDITOR)
        p = project(created_by=creator.user_id)
        assert can_perform(actor(Role.ADMIN), action, Resource.project(p))
        assert can_perform(creator, action, Resource.project(p))
        decision = can_perform(actor(Role.EDITOR), action, Resource.project(p))
        assert decision.reason == INSUFFICIENT_ROLE

    def test_member_add_cross_team(self):
        p = project()
        target = uuid.uuid4()
        assert can_perform(
            actor(Role.ADMIN), Action.PROJECT_MEMBER_ADD, Resource.project_member(p, target, TEAM)
        )
        decision = can_perform(
            actor(Role.ADMIN),
            Action.PROJECT_MEMBER_ADD,
            Resource.project_member(p, target, OTHER_TEAM),
        )
        assert decision.reason == CROSS_TEAM_MEMBER

    def test_member_add_role_checked_before_target(self):
        p = project()
        decision = can_perform(
            actor(Role.EDITOR),
            Action.PROJECT_MEMBER_ADD,
            Resource.project_member(p, uuid.uuid4(), OTHER_TEAM),
        )
        assert decision.reason == INSUFFICIENT_ROLE

    def test_member_remove_creator_denied_even_for_admin(self):
        p = project()
        decision = can_perform(
            actor(Role.ADMIN),
            Action.PROJECT_MEMBER_REMOVE,
            Resource.project_member(p, p.created_by, TEAM),
        )
        assert decision.reason == CANNOT_REMOVE_CREATOR

    def test_member_remove_by_creator(self):
        creator = actor(Role.EDITOR)
        p = project(created_by=creator.user_id)
        assert can_perform(
            creator, Action.PROJECT_MEMBER_REMOVE, Resource.project_member(p, uuid.uuid4(), TEAM)
        )

    @pytest.mark.parametrize("action", [Action.TASK_CREATE, Action.TASK_UPDATE])
    def test_task_write_assignee_scope(self, action):
        p = project()
        ally = SimpleNamespace(id=uuid.uuid4(), team_id=TEAM)
        stranger = SimpleNamespace(id=uuid.uuid4(), team_id=OTHER_TEAM)
        assert can_perform(actor(), action, Resource.task(p))
        assert can_perform(actor(), action, Resource.task(p, assignee=ally))
        decision = can_perform(actor(), action, Resource.task(p, assignee=stranger))
        assert decision.reason == CROSS_TEAM_MEMBER

    def test_task_delete(self):
        owner = actor(Role.EDITOR)
        p = project()
        task = SimpleNamespace(created_by=owner.user_id)
        assert can_perform(owner, Action.TASK_DELETE, Resource.task(p, task))
        assert can_perform(actor(Role.ADMIN), Action.TASK_DELETE, Resource.task(p, task))
        creator = Actor(user_id=p.created_by, role=Role.EDITOR, team_id=TEAM)
        assert can_perform(creator, Action.TASK_DELETE, Resource.task(p, task))
        decision = can_perform(actor(Role.EDITOR), Action.TASK_DELETE, Resource.task(p, task))
        assert decision.reason == INSUFFICIENT_ROLE


# ---------------------------------------------------------------------------
# Totality and raising
# ---------------------------------------------------------------------------

class TestEngine:
    def test_every_action_has_a_rule(self):
        assert set(_RULES) == set(Action)

    def test_missing_rule_denied(self, monkeypatch):
        monkeypatch.delitem(_RULES, Action.TEAM_READ)
        decision = can_perform(actor(), Action.TEAM_READ, Resource.team(TEAM))
        assert decision.reason == NO_MATCHING_RULE

    def test_authorize_raises_with_reason(self):
        with pytest.raises(Denied) as exc:
            authorize(actor(Role.EDITOR), Action.TEAM_DELETE, Resource.team(TEAM))
        assert exc.value.reason == INSUFFICIENT_ROLE
        assert exc.value.status_code == 403

    def test_authorize_allows_silently(self):
        assert authorize(actor(Role.ADMIN), Action.TEAM_DELETE, Resource.team(TEAM)) is None
