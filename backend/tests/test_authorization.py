"""
CatAPI Backend — Authorization Unit Tests
===========================================

What:  Tests for authorize()/require(), the single capability check run
       before every mutating operation. Pure functions, no database.
"""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from catapi.exceptions import ForbiddenError
from catapi.models.user import ROLE_ADMIN, ROLE_USER
from catapi.security.principal import Principal
from catapi.services.authorization import Action, Decision, authorize, require


def _principal(role: str = ROLE_USER) -> Principal:
    return Principal(id=uuid4(), user_name="u", email="u@x.com", role=role)


class TestAuthorize:
    def setup_method(self):
        self.owner = _principal()
        self.other = _principal()
        self.admin = _principal(ROLE_ADMIN)
        self.cat = SimpleNamespace(id=uuid4(), owner_id=self.owner.id)

    def test_anonymous_is_always_denied(self):
        for action in Action:
            assert authorize(None, action, self.cat) is Decision.DENY

    def test_any_principal_may_create(self):
        assert authorize(self.other, Action.CREATE_CAT) is Decision.ALLOW

    @pytest.mark.parametrize("action", [Action.UPDATE_OWN_CAT, Action.DELETE_OWN_CAT])
    def test_owner_actions_require_matching_owner(self, action):
        assert authorize(self.owner, action, self.cat) is Decision.ALLOW
        assert authorize(self.other, action, self.cat) is Decision.DENY

    @pytest.mark.parametrize("action", [Action.UPDATE_OWN_CAT, Action.DELETE_OWN_CAT])
    def test_admin_role_does_not_grant_owner_actions(self, action):
        assert authorize(self.admin, action, self.cat) is Decision.DENY

    @pytest.mark.parametrize("action", [Action.UPDATE_ANY_CAT, Action.DELETE_ANY_CAT])
    def test_admin_actions_require_admin_role(self, action):
        assert authorize(self.admin, action, self.cat) is Decision.ALLOW
        assert authorize(self.owner, action, self.cat) is Decision.DENY

    @pytest.mark.parametrize("action", [Action.UPDATE_SELF, Action.DELETE_SELF])
    def test_self_actions_match_user_id(self, action):
        user_row = SimpleNamespace(id=self.owner.id)
        assert authorize(self.owner, action, user_row) is Decision.ALLOW
        assert authorize(self.other, action, user_row) is Decision.DENY

    def test_owner_action_without_resource_is_denied(self):
        assert authorize(self.owner, Action.UPDATE_OWN_CAT, None) is Decision.DENY


class TestRequire:
    def test_allow_returns_none(self):
        principal = _principal(ROLE_ADMIN)
        assert require(principal, Action.DELETE_ANY_CAT) is None

    def test_deny_raises_forbidden(self):
        with pytest.raises(ForbiddenError) as exc_info:
            require(_principal(), Action.DELETE_ANY_CAT)
        assert exc_info.value.status_code == 403
        assert exc_info.value.context["action"] == "delete_any_cat"
