"""
Unit tests for token validation.
"""

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from marketplace import auth, crud


def bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestGetCurrentUser:

    def test_valid_token(self, db_session, make_user):
        user = make_user()

        ctx = auth.get_current_user(bearer(auth.token_for(user)), db_session)

        assert ctx.user.id == user.id
        assert ctx.token_id

    def test_token_for_different_account_email_rejected(self, db_session, make_user):
        user = make_user()
        token = auth.token_for(user)
        user.email = "someone.else@example.com"
        crud.save(db_session, user)

        with pytest.raises(HTTPException) as exc_info:
            auth.get_current_user(bearer(token), db_session)

        assert exc_info.value.status_code == 401

    def test_revoked_token_rejected(self, db_session, make_user):
        user = make_user()
        token = auth.token_for(user)
        ctx = auth.get_current_user(bearer(token), db_session)
        auth.end_session(db_session, ctx)

        with pytest.raises(HTTPException) as exc_info:
            auth.get_current_user(bearer(token), db_session)

        assert exc_info.value.status_code == 401

    def test_garbage_token_rejected(self, db_session):
        with pytest.raises(HTTPException) as exc_info:
            auth.get_current_user(bearer("not-a-jwt"), db_session)

        assert exc_info.value.status_code == 401


class TestUserIds:

    def test_ids_are_not_reused_after_deletion(self, db_session, make_user):
        first = make_user()
        first_id = first.id
        crud.delete(db_session, first)

        second = make_user(name="Eve", email="eve@example.com")

        assert second.id != first_id
