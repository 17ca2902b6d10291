from datetime import datetime, timedelta

import pytest

from app.errors import NotFound, PermissionDenied, ValidationError
from app.extensions import db
from app.helpers.admin import (
    account_is_admin, check_admin_password, lookup_account, request_login, signup, verify_login_code,
)
from app.helpers.session import Viewer
from app.models import LoginCode


def _latest_code(account) -> LoginCode:
    return LoginCode.query.filter_by(account_id=account.id).order_by(LoginCode.id.desc()).first()


def test_signup_then_verify(app):
    acct = signup("  Debater@Example.org ", "Dana", "Lee")
    assert acct.email == "debater@example.org"

    code = _latest_code(acct)
    assert len(code.code) == 6
    assert code.expires_at > datetime.utcnow()

    assert verify_login_code("debater@example.org", code.code).id == acct.id
    assert code.used is True

    # one use only
    with pytest.raises(ValidationError):
        verify_login_code("debater@example.org", code.code)


def test_signup_needs_a_name(app):
    with pytest.raises(ValidationError):
        signup("nameless@example.org", "  ")


def test_login_for_unknown_email(app):
    with pytest.raises(NotFound):
        request_login("nobody@example.org")

    acct = request_login("Director@Example.org")
    assert acct.email == "director@example.org"
    assert account_is_admin(acct)


def test_expired_code_refused(make):
    acct = make.account()
    code = LoginCode(
        account_id=acct.id,
        code="123456",
        expires_at=datetime.utcnow() - timedelta(minutes=1),
    )
    db.session.add(code)
    db.session.commit()

    with pytest.raises(ValidationError) as err:
        verify_login_code(acct.email, "123456")
    assert "expired" in err.value.message


def test_admin_password_check(app):
    assert check_admin_password("test-admin-password")
    assert not check_admin_password("wrong")
    assert not check_admin_password("")


def test_account_lookup_is_admin_only(debate, admin):
    with pytest.raises(PermissionDenied):
        lookup_account(debate.aff_viewer, debate.aff.participant_email)

    found = lookup_account(admin, debate.aff.participant_email)
    assert found["registration_count"] == 1
    assert found["judge_profile_id"] is None


# --- HTTP ---

def test_login_flow_over_http(client):
    resp = client.post("/api/auth/signup", json={"email": "new@example.org", "first_name": "Nia"})
    assert resp.status_code == 201

    code = LoginCode.query.order_by(LoginCode.id.desc()).first()
    resp = client.post("/api/auth/verify", json={"code": code.code})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["is_admin"] is False

    me = client.get("/api/auth/me").get_json()
    assert me["account"]["email"] == "new@example.org"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_admin_email_login_gets_admin(client):
    client.post("/api/auth/login", json={"email": "director@example.org"})
    code = LoginCode.query.order_by(LoginCode.id.desc()).first()

    resp = client.post("/api/auth/verify", json={"code": code.code})
    assert resp.get_json()["is_admin"] is True


def test_admin_password_route(client):
    resp = client.post("/api/admin/login", json={"password": "nope"})
    assert resp.status_code == 403
    assert resp.get_json() == {"ok": False, "error": "Incorrect admin password."}

    resp = client.post("/api/admin/login", json={"password": "test-admin-password"})
    assert resp.get_json()["is_admin"] is True
    assert client.get("/api/admin/accounts/lookup?email=missing@example.org").status_code == 404
