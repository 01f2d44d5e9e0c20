from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from inventorydb import security
from inventorydb.errors import AuthenticationFailed, ConstraintViolation, InvalidToken, PermissionDenied
from inventorydb.apps.accounts import models, router_public, schemas, services
from inventorydb.apps.accounts.models import PermissionRole


def test_permission_roles_are_totally_ordered():
    assert PermissionRole.VIEWER.rank < PermissionRole.EDITOR.rank < PermissionRole.ADMIN.rank
    assert PermissionRole.ADMIN.at_least(PermissionRole.EDITOR)
    assert PermissionRole.EDITOR.at_least("editor")
    assert not PermissionRole.VIEWER.at_least(PermissionRole.EDITOR)


def test_create_user_stores_hash_not_plaintext(db_session, make_user):
    user = make_user("alice", password="s3cret-password")

    assert user.password_hash != "s3cret-password"
    assert user.password_hash.startswith("$argon2")
    assert user.permission_role == PermissionRole.VIEWER


def test_create_user_rejects_duplicate_username(db_session, make_user):
    make_user("alice")

    with pytest.raises(ConstraintViolation):
        services.create_user(db_session, username="alice", password="another-password")


def test_create_user_rejects_blank_username(db_session):
    with pytest.raises(ConstraintViolation):
        services.create_user(db_session, username="   ", password="whatever-pass")


def test_login_returns_public_record_without_hash(db_session, make_user):
    alice = make_user("alice", password="correct-password")

    user = services.login(db_session, "alice", "correct-password")

    assert isinstance(user, schemas.UserRead)
    assert user.id == alice.id
    assert user.permission_role == PermissionRole.VIEWER
    assert not hasattr(user, "password_hash")
    assert "password_hash" not in user.model_dump()


def test_login_failures_are_indistinguishable(db_session, make_user):
    make_user("alice", password="correct-password")

    with pytest.raises(AuthenticationFailed) as wrong_password:
        services.login(db_session, "alice", "wrongpassword")
    with pytest.raises(AuthenticationFailed) as unknown_user:
        services.login(db_session, "nobody", "x")

    assert str(wrong_password.value) == str(unknown_user.value)


def test_login_username_match_is_exact(db_session, make_user):
    make_user("alice", password="correct-password")

    with pytest.raises(AuthenticationFailed):
        services.login(db_session, "Alice", "correct-password")


def test_access_token_round_trip_returns_user_claims(db_session, make_user):
    alice = make_user("alice", role=PermissionRole.EDITOR)

    pair = security.issue_token_pair(alice)
    claims = security.verify_token(pair.access_token, security.ACCESS)

    assert claims == {"id": alice.id, "username": "alice", "permission_role": "editor"}
    assert "password_hash" not in claims


def test_refresh_token_outlives_access_token(db_session, make_user):
    alice = make_user("alice")

    pair = security.issue_token_pair(alice)

    assert pair.refresh_expires_at > pair.access_expires_at


def test_tokens_are_not_interchangeable_between_kinds(db_session, make_user):
    alice = make_user("alice")
    pair = security.issue_token_pair(alice)

    with pytest.raises(InvalidToken):
        security.verify_token(pair.access_token, security.REFRESH)
    with pytest.raises(InvalidToken):
        security.verify_token(pair.refresh_token, security.ACCESS)


def test_token_with_wrong_kind_claim_is_rejected(db_session, make_user):
    alice = make_user("alice")
    expires_at = int((datetime.now(timezone.utc) + timedelta(minutes=5)).timestamp())
    forged = jwt.encode(
        {"user": security.user_claims(alice), "expiresAt": expires_at, "kind": "refresh"},
        security.ACCESS_TOKEN_SECRET,
        algorithm=security.JWT_ALGORITHM,
    )

    with pytest.raises(InvalidToken):
        security.verify_token(forged, security.ACCESS)


def test_token_signed_with_another_secret_is_rejected(db_session, make_user):
    alice = make_user("alice")
    expires_at = int((datetime.now(timezone.utc) + timedelta(minutes=5)).timestamp())
    forged = jwt.encode(
        {"user": security.user_claims(alice), "expiresAt": expires_at, "kind": "access"},
        "not-the-secret",
        algorithm=security.JWT_ALGORITHM,
    )

    with pytest.raises(InvalidToken):
        security.verify_token(forged, security.ACCESS)


def test_token_is_valid_until_expiry_and_invalid_from_then_on(db_session, make_user):
    alice = make_user("alice")
    issued_at = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    pair = security.issue_token_pair(alice, now=issued_at)
    expires_at = datetime.fromtimestamp(pair.access_expires_at, tz=timezone.utc)

    claims = security.verify_token(
        pair.access_token,
        security.ACCESS,
        now=expires_at - timedelta(seconds=1),
    )
    assert claims["id"] == alice.id

    with pytest.raises(InvalidToken):
        security.verify_token(pair.access_token, security.ACCESS, now=expires_at)
    with pytest.raises(InvalidToken):
        # wall clock is long past 2024-01-01 12:15
        security.verify_token(pair.access_token, security.ACCESS)


def test_refresh_issues_pair_with_current_role(db_session, make_user):
    alice = make_user("alice")
    pair = security.issue_token_pair(alice)

    services.set_permission_role(db_session, user_id=alice.id, permission_role=PermissionRole.ADMIN)
    db_session.commit()

    user, new_pair = services.refresh_tokens(db_session, pair.refresh_token)

    assert user.id == alice.id
    claims = security.verify_token(new_pair.access_token, security.ACCESS)
    assert claims["permission_role"] == "admin"


def test_refresh_rejects_access_token(db_session, make_user):
    alice = make_user("alice")
    pair = security.issue_token_pair(alice)

    with pytest.raises(InvalidToken):
        services.refresh_tokens(db_session, pair.access_token)


def test_change_password_requires_current_password(db_session, make_user):
    alice = make_user("alice", password="old-password")

    with pytest.raises(AuthenticationFailed):
        services.change_password(
            db_session,
            user=alice,
            current_password="not-it",
            new_password="new-password",
        )

    services.change_password(
        db_session,
        user=alice,
        current_password="old-password",
        new_password="new-password",
    )
    db_session.commit()

    assert services.login(db_session, "alice", "new-password").id == alice.id


def test_login_route_returns_user_without_hash_and_tokens(db_session, make_user):
    alice = make_user("alice", password="correct-password")

    response = router_public.login(
        payload=schemas.LoginRequest(username="alice", password="correct-password"),
        db=db_session,
    )

    assert response.user.id == alice.id
    assert "password_hash" not in response.user.model_dump()
    assert security.verify_token(response.access_token, security.ACCESS)["id"] == alice.id
    assert security.verify_token(response.refresh_token, security.REFRESH)["id"] == alice.id


def test_current_user_dependency_resolves_access_token(db_session, make_user):
    alice = make_user("alice")
    pair = security.issue_token_pair(alice)

    user = security.get_current_user(token=pair.access_token, db=db_session)

    assert user.id == alice.id


def test_current_user_dependency_rejects_refresh_token(db_session, make_user):
    alice = make_user("alice")
    pair = security.issue_token_pair(alice)

    with pytest.raises(InvalidToken):
        security.get_current_user(token=pair.refresh_token, db=db_session)


def test_require_role_compares_against_minimum(db_session, make_user):
    viewer = make_user("viewer", role=PermissionRole.VIEWER)
    admin = make_user("boss", role=PermissionRole.ADMIN)
    editor_required = security.require_role(PermissionRole.EDITOR)

    with pytest.raises(PermissionDenied):
        editor_required(current_user=viewer)
    assert editor_required(current_user=admin) is admin


def test_users_are_listed_by_username(db_session, make_user):
    make_user("zed")
    make_user("amy")

    assert [u.username for u in services.list_users(db_session)] == ["amy", "zed"]
    assert isinstance(services.get_user(db_session, services.list_users(db_session)[0].id), models.User)
