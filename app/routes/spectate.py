from flask import Blueprint, current_app, request, jsonify

from app.errors import ValidationError
from app.helpers.session import current_viewer
from app.helpers.spectate import (
    my_requests, pending_approvals, request_spectate, requests_for_pairing, respond_to_request,
)


spectate_bp = Blueprint("spectate", __name__)


def _tournament_filter():
    raw = request.args.get("tournament_id")
    try:
        return int(raw) if raw else None
    except ValueError:
        raise ValidationError("tournament_id must be a number.")

def _with_poll(payload: dict):
    payload["poll_interval_seconds"] = current_app.config.get("STATUS_POLL_SECONDS", 15)
    return jsonify(payload)

@spectate_bp.route("/api/pairings/<int:pairing_id>/spectate", methods=["POST"])
def create_request(pairing_id):
    """Returns 201 for a new request, 200 when an open one already exists."""
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    req, created = request_spectate(viewer, pairing_id, data.get("reason"))
    return jsonify({"ok": True, "request": req.to_dict(), "created": created}), (201 if created else 200)

@spectate_bp.route("/api/pairings/<int:pairing_id>/spectate")
def pairing_requests(pairing_id):
    viewer = current_viewer()
    rows = requests_for_pairing(viewer, pairing_id)
    return _with_poll({"ok": True, "requests": [r.to_dict() for r in rows]})

@spectate_bp.route("/api/spectate/<int:request_id>/respond", methods=["POST"])
def respond(request_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    if not isinstance(data.get("approved"), bool):
        raise ValidationError("'approved' must be true or false.")
    req = respond_to_request(viewer, request_id, data["approved"])
    return jsonify({"ok": True, "request": req.to_dict()})

@spectate_bp.route("/api/my/spectate-requests")
def my_spectate_requests():
    viewer = current_viewer()
    rows = my_requests(viewer, _tournament_filter())
    return _with_poll({"ok": True, "requests": [r.to_dict() for r in rows]})

@spectate_bp.route("/api/my/spectate-approvals")
def my_pending_approvals():
    viewer = current_viewer()
    rows = pending_approvals(viewer, _tournament_filter())
    return _with_poll({"ok": True, "requests": [r.to_dict() for r in rows]})
