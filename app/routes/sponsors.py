from flask import Blueprint, request, jsonify

from app.errors import ValidationError
from app.helpers.session import current_viewer, require_account
from app.helpers.sponsors import (
    apply_to_tournament, approve_profile, claim_invitation, create_profile,
    get_application_or_404, get_profile_or_404, invitation_for_token, invite_sponsor,
    list_applications, list_profiles, set_application_status, sponsor_profile_for,
    update_application, update_profile,
)


sponsors_bp = Blueprint("sponsors", __name__)

@sponsors_bp.route("/api/sponsors")
def sponsors():
    """Approved sponsors for the public page; admins may ask for all with ?all=1."""
    viewer = current_viewer()
    show_all = viewer.is_admin and request.args.get("all") in ("1", "true")
    rows = list_profiles(approved_only=not show_all)
    return jsonify({"ok": True, "sponsors": [s.to_dict() for s in rows]})

@sponsors_bp.route("/api/sponsors/me")
def my_sponsor_profile():
    viewer = current_viewer()
    require_account(viewer)
    profile = sponsor_profile_for(viewer)
    return jsonify({"ok": True, "sponsor": profile.to_dict() if profile else None})

@sponsors_bp.route("/api/sponsors", methods=["POST"])
def create_sponsor():
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    profile = create_profile(viewer, data)
    return jsonify({"ok": True, "sponsor": profile.to_dict()}), 201

@sponsors_bp.route("/api/sponsors/<int:profile_id>", methods=["PATCH"])
def update_sponsor(profile_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    profile = update_profile(viewer, get_profile_or_404(profile_id), data)
    return jsonify({"ok": True, "sponsor": profile.to_dict()})

@sponsors_bp.route("/api/sponsors/<int:profile_id>/approve", methods=["POST"])
def approve_sponsor(profile_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    profile = approve_profile(viewer, get_profile_or_404(profile_id), data.get("tier"))
    return jsonify({"ok": True, "sponsor": profile.to_dict()})

# --- Applications ---

@sponsors_bp.route("/api/sponsor-applications")
def applications():
    viewer = current_viewer()
    rows = list_applications(viewer, (request.args.get("status") or "").strip() or None)
    return jsonify({"ok": True, "applications": [a.to_dict() for a in rows]})

@sponsors_bp.route("/api/tournaments/<int:tournament_id>/sponsor-applications", methods=["POST"])
def apply(tournament_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    application = apply_to_tournament(viewer, tournament_id, data)
    return jsonify({"ok": True, "application": application.to_dict()}), 201

@sponsors_bp.route("/api/sponsor-applications/<int:application_id>", methods=["PATCH"])
def edit_application(application_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    application = get_application_or_404(application_id)
    if "status" in data:
        application = set_application_status(viewer, application, data["status"])
    fields = {k: v for k, v in data.items() if k != "status"}
    if fields:
        application = update_application(viewer, application, fields)
    return jsonify({"ok": True, "application": application.to_dict()})

# --- Invitations ---

@sponsors_bp.route("/api/sponsor-invitations", methods=["POST"])
def invite():
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    invitation, _token = invite_sponsor(viewer, data)
    return jsonify({"ok": True, "invitation": invitation.to_dict()}), 201

@sponsors_bp.route("/api/sponsor-invitations/<token>")
def invitation_detail(token):
    invitation = invitation_for_token(token)
    return jsonify({"ok": True, "invitation": invitation.to_dict()})

@sponsors_bp.route("/api/sponsor-invitations/<token>/claim", methods=["POST"])
def claim(token):
    viewer = current_viewer()
    if not token:
        raise ValidationError("Invitation token is required.")
    profile, application = claim_invitation(viewer, token)
    return jsonify({
        "ok": True,
        "sponsor": profile.to_dict(),
        "application": application.to_dict() if application else None,
    })
