"""
Tests for AccountAuthService.
"""

import pytest

from bookshelf.auth.service import AccountAuthService
from bookshelf.sync.states import Status


@pytest.fixture
def auth_service(db):
    return AccountAuthService()


def test_sign_up_signs_in(auth_service):
    assert auth_service.sign_up("Reader@Example.com", "secret1")

    uid = auth_service.current_uid()
    assert uid
    assert auth_service.is_user_logged_in()
    assert auth_service.login_state.value.status is Status.SUCCESS
    assert auth_service.login_state.value.data == uid


def test_sign_in_after_sign_out(auth_service):
    auth_service.sign_up("reader@example.com", "secret1")
    uid = auth_service.current_uid()

    auth_service.sign_out()
    assert auth_service.current_uid() is None
    assert auth_service.login_state.value.status is Status.INITIAL

    assert auth_service.sign_in("  READER@example.com ", "secret1")
    assert auth_service.current_uid() == uid


def test_wrong_password_is_error(auth_service):
    auth_service.sign_up("reader@example.com", "secret1")
    auth_service.sign_out()

    assert auth_service.sign_in("reader@example.com", "wrong-password") is False
    assert auth_service.current_uid() is None
    assert auth_service.login_state.value.message == "Invalid email or password"


def test_duplicate_email_is_refused(auth_service):
    auth_service.sign_up("reader@example.com", "secret1")
    auth_service.sign_out()

    assert auth_service.sign_up("reader@example.com", "another1") is False
    assert auth_service.login_state.value.is_error


def test_short_password_is_refused(auth_service):
    assert auth_service.sign_up("reader@example.com", "123") is False
    assert "at least 6" in auth_service.login_state.value.message


def test_blank_credentials_fail_fast():
    service = AccountAuthService()
    seen = []
    service.login_state.subscribe(lambda s: seen.append(s.status), replay=False)

    assert service.sign_in("", "secret1") is False
    assert service.sign_in("reader@example.com", "") is False
    assert seen == [Status.ERROR, Status.ERROR]
