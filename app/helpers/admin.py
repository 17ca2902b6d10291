import hmac
import logging
import secrets
from datetime import datetime, timedelta

from flask import current_app

from app.extensions import db
from app.errors import NotFound, ValidationError
from app.models import Account, LoginCode
from app.helpers.account import find_account_by_email, get_or_create_account_for_email
from app.helpers.email import is_admin_email, normalize_email, send_login_code_via_email
from app.helpers.session import Viewer, require_admin

logger = logging.getLogger(__name__)


def account_is_admin(acct: Account) -> bool:
    """
    Admin by membership: role on the account or email listed in ADMIN_EMAILS.
    The password unlock is separate (check_admin_password).
    """
    if acct is None:
        return False
    return acct.role == "admin" or is_admin_email(acct.email)


def check_admin_password(password: str) -> bool:
    expected = current_app.config.get("ADMIN_PASSWORD") or ""
    if not expected or not password:
        return False
    return hmac.compare_digest(password.encode(), expected.encode())


def issue_login_code(acct: Account) -> LoginCode:
    """New 6-digit code for this account, emailed (or logged in dev)."""
    code = f"{secrets.randbelow(1_000_000):06d}"
    now = datetime.utcnow()
    ttl = current_app.config.get("LOGIN_CODE_TTL_MINUTES", 10)

    login_code = LoginCode(
        account_id=acct.id,
        code=code,
        created_at=now,
        expires_at=now + timedelta(minutes=ttl),
        used=False,
    )
    db.session.add(login_code)
    db.session.commit()

    send_login_code_via_email(acct.email, code)
    return login_code


def signup(email: str, first_name: str = None, last_name: str = None) -> Account:
    first_name = (first_name or "").strip() or None
    last_name = (last_name or "").strip() or None
    if not first_name:
        raise ValidationError("Please enter your name.")

    acct = get_or_create_account_for_email(email, first_name, last_name)
    db.session.commit()
    issue_login_code(acct)
    return acct


def request_login(email: str) -> Account:
    email = normalize_email(email)
    if not email:
        raise ValidationError("Please enter your email.")

    acct = find_account_by_email(email)
    if not acct:
        # Admin emails may log in without signing up first
        if not is_admin_email(email):
            raise NotFound("We couldn't find that email. If you're new, please sign up first.")
        acct = get_or_create_account_for_email(email)
        db.session.commit()

    issue_login_code(acct)
    return acct


def verify_login_code(email: str, code: str) -> Account:
    email = normalize_email(email)
    code = (code or "").strip()
    if not email or not code:
        raise ValidationError("Please enter both your email and the code.")

    acct = find_account_by_email(email)
    if not acct:
        raise NotFound("We couldn't find that email. Please sign up first.")

    login_code = (
        LoginCode.query
        .filter_by(account_id=acct.id, code=code, used=False)
        .order_by(LoginCode.created_at.desc())
        .first()
    )
    if not login_code:
        raise ValidationError("Invalid code. Please double-check or request a new one.")
    if login_code.expires_at < datetime.utcnow():
        raise ValidationError("That code has expired. Please request a new one.")

    login_code.used = True
    db.session.commit()
    logger.info("[LOGIN] Account %s verified", acct.id)
    return acct


def lookup_account(viewer: Viewer, email: str) -> dict:
    """Admin email lookup: the account plus its judge/sponsor links, if any."""
    require_admin(viewer)
    acct = find_account_by_email(email)
    if not acct:
        raise NotFound("No account with that email.")

    out = acct.to_dict()
    out["judge_profile_id"] = acct.judge_profile.id if acct.judge_profile else None
    out["registration_count"] = len(acct.registrations)
    return out
