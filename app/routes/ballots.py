from flask import Blueprint, request, jsonify

from app.errors import NotFound
from app.models import BallotTemplate
from app.helpers.ballots import create_template, delete_template, template_for_tournament, update_template
from app.helpers.session import current_viewer, require_admin


ballots_bp = Blueprint("ballots", __name__)

@ballots_bp.route("/api/ballot-templates")
def templates():
    viewer = current_viewer()
    require_admin(viewer)
    q = BallotTemplate.query
    tournament_id = request.args.get("tournament_id", type=int)
    if tournament_id:
        q = q.filter((BallotTemplate.tournament_id == tournament_id) | (BallotTemplate.tournament_id.is_(None)))
    rows = q.order_by(BallotTemplate.tournament_id.asc().nullsfirst(), BallotTemplate.template_key.asc()).all()
    return jsonify({"ok": True, "templates": [t.to_dict() for t in rows]})

@ballots_bp.route("/api/tournaments/<int:tournament_id>/ballot-template")
def tournament_template(tournament_id):
    """The template judges fill in for this tournament (falls back to the global default)."""
    template = template_for_tournament(tournament_id)
    if not template:
        raise NotFound("No ballot template configured.")
    return jsonify({"ok": True, "template": template.to_dict()})

@ballots_bp.route("/api/ballot-templates", methods=["POST"])
def new_template():
    viewer = current_viewer()
    require_admin(viewer)
    data = request.get_json(force=True, silent=True) or {}
    template = create_template(data)
    return jsonify({"ok": True, "template": template.to_dict()}), 201

@ballots_bp.route("/api/ballot-templates/<int:template_id>", methods=["PATCH"])
def edit_template(template_id):
    viewer = current_viewer()
    require_admin(viewer)
    data = request.get_json(force=True, silent=True) or {}
    template = update_template(template_id, data)
    return jsonify({"ok": True, "template": template.to_dict()})

@ballots_bp.route("/api/ballot-templates/<int:template_id>", methods=["DELETE"])
def remove_template(template_id):
    viewer = current_viewer()
    require_admin(viewer)
    delete_template(template_id)
    return jsonify({"ok": True})
