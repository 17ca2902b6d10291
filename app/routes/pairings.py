from flask import Blueprint, current_app, request, jsonify

from app.errors import ValidationError
from app.helpers.pairings import (
    can_view_pairing, change_status, create_pairing, edit_history, edit_pairing,
    ensure_can_view, get_pairing_or_404, is_assigned_judge, list_round_pairings,
    my_pairings, release_round, submit_result, swap_sides,
)
from app.helpers.schedule import propose_reschedule, proposals_for_pairing, respond_to_proposal
from app.helpers.session import current_viewer
from app.helpers.time import iso


pairings_bp = Blueprint("pairings", __name__)


def _public_pairing(p) -> dict:
    """What anyone may see on a released posting."""
    return {
        "id": p.id,
        "round_id": p.round_id,
        "aff_team": p.aff_registration.team_name if p.aff_registration else None,
        "neg_team": p.neg_registration.team_name if p.neg_registration else None,
        "judge_name": p.judge.name if p.judge else None,
        "room": p.room,
        "scheduled_time": iso(p.scheduled_time),
        "status": p.status,
    }

def _status_poll():
    return current_app.config.get("STATUS_POLL_SECONDS", 15)

@pairings_bp.route("/api/rounds/<int:round_id>/pairings")
def round_pairings(round_id):
    viewer = current_viewer()
    pairings = list_round_pairings(viewer, round_id)
    rows = [p.to_dict() if can_view_pairing(viewer, p) else _public_pairing(p) for p in pairings]
    return jsonify({"ok": True, "pairings": rows, "poll_interval_seconds": _status_poll()})

@pairings_bp.route("/api/rounds/<int:round_id>/pairings", methods=["POST"])
def create_pairing_route(round_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    pairing = create_pairing(viewer, round_id, data)
    return jsonify({"ok": True, "pairing": pairing.to_dict()}), 201

@pairings_bp.route("/api/rounds/<int:round_id>/release", methods=["POST"])
def release_round_route(round_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    count = release_round(viewer, round_id, bool(data.get("released", True)))
    return jsonify({"ok": True, "changed": count})

@pairings_bp.route("/api/pairings/<int:pairing_id>")
def pairing_detail(pairing_id):
    viewer = current_viewer()
    pairing = get_pairing_or_404(pairing_id)
    ensure_can_view(viewer, pairing)

    out = pairing.to_dict()
    out["my_side"] = pairing.side_for_account(viewer.account_id)
    out["is_judge"] = is_assigned_judge(viewer, pairing)
    return jsonify({"ok": True, "pairing": out, "poll_interval_seconds": _status_poll()})

@pairings_bp.route("/api/pairings/<int:pairing_id>", methods=["PATCH"])
def edit_pairing_route(pairing_id):
    viewer = current_viewer()
    pairing = get_pairing_or_404(pairing_id)
    data = request.get_json(force=True, silent=True) or {}
    pairing = edit_pairing(viewer, pairing, data)
    return jsonify({"ok": True, "pairing": pairing.to_dict()})

@pairings_bp.route("/api/pairings/<int:pairing_id>/swap", methods=["POST"])
def swap_sides_route(pairing_id):
    viewer = current_viewer()
    pairing = swap_sides(viewer, get_pairing_or_404(pairing_id))
    return jsonify({"ok": True, "pairing": pairing.to_dict()})

@pairings_bp.route("/api/pairings/<int:pairing_id>/status", methods=["POST"])
def change_status_route(pairing_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    new_status = (data.get("status") or "").strip()
    if not new_status:
        raise ValidationError("Status is required.")
    pairing = change_status(viewer, get_pairing_or_404(pairing_id), new_status)
    return jsonify({"ok": True, "pairing": pairing.to_dict()})

@pairings_bp.route("/api/pairings/<int:pairing_id>/result", methods=["POST"])
def submit_result_route(pairing_id):
    """
    Ballot payload:
      {"winner": "aff" | "neg", "fields": {...}, "comments": "..."}
    """
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    pairing = submit_result(viewer, get_pairing_or_404(pairing_id), data)
    return jsonify({"ok": True, "pairing": pairing.to_dict()})

@pairings_bp.route("/api/pairings/<int:pairing_id>/history")
def pairing_history(pairing_id):
    viewer = current_viewer()
    rows = edit_history(viewer, get_pairing_or_404(pairing_id))
    return jsonify({"ok": True, "history": [h.to_dict() for h in rows]})

@pairings_bp.route("/api/my/pairings")
def my_pairings_route():
    viewer = current_viewer()
    out = []
    for p in my_pairings(viewer):
        row = p.to_dict()
        row["my_side"] = p.side_for_account(viewer.account_id)
        out.append(row)
    return jsonify({"ok": True, "pairings": out, "poll_interval_seconds": _status_poll()})

# --- Reschedule proposals ---

@pairings_bp.route("/api/pairings/<int:pairing_id>/proposals")
def list_proposals(pairing_id):
    viewer = current_viewer()
    rows = proposals_for_pairing(viewer, get_pairing_or_404(pairing_id))
    return jsonify({"ok": True, "proposals": [p.to_dict() for p in rows]})

@pairings_bp.route("/api/pairings/<int:pairing_id>/proposals", methods=["POST"])
def create_proposal(pairing_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    proposal = propose_reschedule(viewer, get_pairing_or_404(pairing_id), data)
    return jsonify({"ok": True, "proposal": proposal.to_dict()}), 201

@pairings_bp.route("/api/proposals/<int:proposal_id>/respond", methods=["POST"])
def respond_proposal(proposal_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    if "accept" not in data:
        raise ValidationError("'accept' is required.")
    proposal = respond_to_proposal(viewer, proposal_id, bool(data["accept"]))
    return jsonify({"ok": True, "proposal": proposal.to_dict()})
