"""Tests for UserService."""

import pytest

from statusflow_kernel.domain.values import UserRole
from statusflow_kernel.exceptions import UserNotFoundError
from statusflow_kernel.selectors.user_selector import UserSelector


def test_create_user_defaults_to_user_role(session, user_service):
    user = user_service.create_user("Sam", email="sam@example.com")

    assert user.role is UserRole.USER
    assert UserSelector(session).get(user.id).email == "sam@example.com"


def test_set_role(session, user_service, seeded_users):
    promoted = user_service.set_role("u-plain", UserRole.ADMIN)

    assert promoted.is_admin
    assert UserSelector(session).get("u-plain").role is UserRole.ADMIN


def test_set_role_unknown_user(user_service):
    with pytest.raises(UserNotFoundError):
        user_service.set_role("nope", UserRole.ADMIN)
