from flask import Blueprint, request, jsonify

from app.extensions import db
from app.errors import NotFound, ValidationError
from app.models import Account, JudgeProfile
from app.helpers.judging import (
    add_conflict, assign_judge, create_own_profile, get_judge_or_404, judge_profile_for,
    list_conflicts, my_judgings, pairings_needing_judges, remove_conflict, unassign_judge,
    update_profile, volunteer_to_judge,
)
from app.helpers.pairings import get_pairing_or_404
from app.helpers.session import current_viewer, require_account, require_admin


judges_bp = Blueprint("judges", __name__)


def _int_field(data, key):
    try:
        return int(data.get(key))
    except (TypeError, ValueError):
        raise ValidationError(f"'{key}' must be a number.")

@judges_bp.route("/api/judges/me")
def my_profile():
    viewer = current_viewer()
    require_account(viewer)
    judge = judge_profile_for(viewer)
    return jsonify({"ok": True, "judge": judge.to_dict() if judge else None})

@judges_bp.route("/api/judges/me", methods=["POST"])
def create_my_profile():
    viewer = current_viewer()
    account = db.session.get(Account, require_account(viewer))
    if not account:
        raise NotFound("Account not found.")
    data = request.get_json(force=True, silent=True) or {}
    judge = create_own_profile(viewer, account, data)
    return jsonify({"ok": True, "judge": judge.to_dict()}), 201

@judges_bp.route("/api/judges")
def list_judges():
    viewer = current_viewer()
    require_admin(viewer)
    judges = JudgeProfile.query.order_by(JudgeProfile.name.asc()).all()
    return jsonify({"ok": True, "judges": [j.to_dict() for j in judges]})

@judges_bp.route("/api/judges/<int:judge_id>", methods=["PATCH"])
def update_judge(judge_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    judge = update_profile(viewer, get_judge_or_404(judge_id), data)
    return jsonify({"ok": True, "judge": judge.to_dict()})

@judges_bp.route("/api/pairings/<int:pairing_id>/volunteer", methods=["POST"])
def volunteer(pairing_id):
    viewer = current_viewer()
    assignment = volunteer_to_judge(viewer, get_pairing_or_404(pairing_id))
    return jsonify({"ok": True, "assignment": assignment.to_dict()}), 201

@judges_bp.route("/api/pairings/<int:pairing_id>/judges", methods=["POST"])
def assign(pairing_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    assignment = assign_judge(
        viewer, get_pairing_or_404(pairing_id),
        _int_field(data, "judge_profile_id"), (data.get("role") or "chair").strip(),
    )
    return jsonify({"ok": True, "assignment": assignment.to_dict()}), 201

@judges_bp.route("/api/pairings/<int:pairing_id>/judges/<int:judge_id>", methods=["DELETE"])
def unassign(pairing_id, judge_id):
    viewer = current_viewer()
    removed = unassign_judge(viewer, get_pairing_or_404(pairing_id), judge_id)
    return jsonify({"ok": True, "removed": removed})

@judges_bp.route("/api/tournaments/<int:tournament_id>/needs-judges")
def needing_judges(tournament_id):
    pairings = pairings_needing_judges(tournament_id)
    return jsonify({"ok": True, "pairings": [p.to_dict() for p in pairings]})

@judges_bp.route("/api/my/judgings")
def my_judgings_route():
    viewer = current_viewer()
    out = []
    for a in my_judgings(viewer):
        row = a.to_dict()
        row["pairing"] = a.pairing.to_dict() if a.pairing else None
        out.append(row)
    return jsonify({"ok": True, "assignments": out})

# --- Conflicts (admin) ---

@judges_bp.route("/api/tournaments/<int:tournament_id>/conflicts")
def conflicts(tournament_id):
    viewer = current_viewer()
    judge_id = request.args.get("judge_profile_id", type=int)
    rows = list_conflicts(viewer, tournament_id, judge_id)
    return jsonify({"ok": True, "conflicts": [c.to_dict() for c in rows]})

@judges_bp.route("/api/tournaments/<int:tournament_id>/conflicts", methods=["POST"])
def create_conflict(tournament_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    conflict = add_conflict(
        viewer, tournament_id,
        _int_field(data, "judge_profile_id"), _int_field(data, "registration_id"),
        (data.get("conflict_type") or "other").strip(),
    )
    return jsonify({"ok": True, "conflict": conflict.to_dict()}), 201

@judges_bp.route("/api/conflicts/<int:conflict_id>", methods=["DELETE"])
def delete_conflict(conflict_id):
    viewer = current_viewer()
    remove_conflict(viewer, conflict_id)
    return jsonify({"ok": True})
