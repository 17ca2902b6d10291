import logging

from flask import Blueprint, request, session, jsonify

from app.errors import PermissionDenied
from app.helpers.admin import check_admin_password, lookup_account
from app.helpers.judging import provision_judge_account
from app.helpers.session import current_viewer

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__)

@admin_bp.route("/api/admin/login", methods=["POST"])
def admin_login():
    """Super-admin unlock with ADMIN_PASSWORD (works with or without an account session)."""
    data = request.get_json(force=True, silent=True) or {}
    if not check_admin_password(data.get("password") or ""):
        logger.info("[ADMIN] Wrong admin password from %s", request.remote_addr)
        raise PermissionDenied("Incorrect admin password.")

    session["admin_ok"] = True
    return jsonify({"ok": True, "is_admin": True})

@admin_bp.route("/api/admin/logout", methods=["POST"])
def admin_logout():
    session["admin_ok"] = False
    return jsonify({"ok": True})

@admin_bp.route("/api/admin/accounts/lookup")
def admin_lookup_account():
    viewer = current_viewer()
    account = lookup_account(viewer, request.args.get("email"))
    return jsonify({"ok": True, "account": account})

@admin_bp.route("/api/admin/judges", methods=["POST"])
def admin_create_judge():
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    judge = provision_judge_account(viewer, data)
    return jsonify({"ok": True, "judge": judge.to_dict()}), 201
