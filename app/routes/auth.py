from flask import Blueprint, request, session, jsonify

from app.extensions import db
from app.models import Account
from app.helpers.admin import account_is_admin, request_login, signup, verify_login_code
from app.helpers.email import normalize_email
from app.helpers.session import clear_account_session, current_viewer, require_account, start_account_session


auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/api/auth/signup", methods=["POST"])
def signup_route():
    """
    Account signup:
    - Create/find the Account for this email
    - Email a 6-digit code; the client then calls /api/auth/verify
    """
    data = request.get_json(force=True, silent=True) or {}
    acct = signup(data.get("email"), data.get("first_name") or data.get("name"), data.get("last_name"))

    session["login_email"] = acct.email
    return jsonify({"ok": True, "message": "We emailed you a login code."}), 201

@auth_bp.route("/api/auth/login", methods=["POST"])
def login_request():
    data = request.get_json(force=True, silent=True) or {}
    acct = request_login(data.get("email"))

    session["login_email"] = acct.email
    return jsonify({"ok": True, "message": "We emailed you a login code."})

@auth_bp.route("/api/auth/verify", methods=["POST"])
def login_verify():
    data = request.get_json(force=True, silent=True) or {}

    # Email may come from the form or from the login step
    email = normalize_email(data.get("email") or session.get("login_email"))
    acct = verify_login_code(email, data.get("code"))

    # A password unlock earlier in this session stays on
    is_admin = account_is_admin(acct) or bool(session.get("admin_ok"))
    start_account_session(acct.id, is_admin)

    return jsonify({"ok": True, "account": acct.to_dict(), "is_admin": is_admin})

@auth_bp.route("/api/auth/me")
def me():
    viewer = current_viewer()
    account_id = require_account(viewer)
    acct = db.session.get(Account, account_id)
    if not acct:
        clear_account_session()
        return jsonify({"ok": False, "error": "Please log in first."}), 401

    out = acct.to_dict()
    out["judge_profile_id"] = acct.judge_profile.id if acct.judge_profile else None
    return jsonify({"ok": True, "account": out, "is_admin": viewer.is_admin})

@auth_bp.route("/api/auth/logout", methods=["POST"])
def logout():
    clear_account_session()
    return jsonify({"ok": True})
