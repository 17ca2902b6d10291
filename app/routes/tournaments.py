from flask import Blueprint, request, jsonify

from app.extensions import db
from app.errors import NotFound
from app.models import Account, Registration, Tournament
from app.helpers.session import current_viewer, require_account
from app.helpers.tournaments import (
    active_registration_count, create_round, create_tournament, get_tournament_or_404,
    my_registrations, register_for_tournament, update_tournament, withdraw_registration,
)


tournaments_bp = Blueprint("tournaments", __name__)

@tournaments_bp.route("/api/tournaments")
def list_tournaments():
    q = Tournament.query
    status = (request.args.get("status") or "").strip()
    if status:
        q = q.filter(Tournament.status == status)
    tournaments = q.order_by(Tournament.start_date.desc().nullslast(), Tournament.id.desc()).all()
    return jsonify({"ok": True, "tournaments": [t.to_dict() for t in tournaments]})

@tournaments_bp.route("/api/tournaments", methods=["POST"])
def create_tournament_route():
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    tournament = create_tournament(viewer, data)
    return jsonify({"ok": True, "tournament": tournament.to_dict()}), 201

@tournaments_bp.route("/api/tournaments/<ref>")
def tournament_detail(ref):
    tournament = get_tournament_or_404(ref)
    out = tournament.to_dict()
    out["rounds"] = [r.to_dict() for r in tournament.rounds]
    out["registered_count"] = active_registration_count(tournament)
    return jsonify({"ok": True, "tournament": out})

@tournaments_bp.route("/api/tournaments/<int:tournament_id>", methods=["PATCH"])
def update_tournament_route(tournament_id):
    viewer = current_viewer()
    tournament = get_tournament_or_404(tournament_id)
    data = request.get_json(force=True, silent=True) or {}
    tournament = update_tournament(viewer, tournament, data)
    return jsonify({"ok": True, "tournament": tournament.to_dict()})

@tournaments_bp.route("/api/tournaments/<int:tournament_id>/rounds", methods=["POST"])
def create_round_route(tournament_id):
    viewer = current_viewer()
    tournament = get_tournament_or_404(tournament_id)
    data = request.get_json(force=True, silent=True) or {}
    rnd = create_round(viewer, tournament, data)
    return jsonify({"ok": True, "round": rnd.to_dict()}), 201

@tournaments_bp.route("/api/tournaments/<int:tournament_id>/registrations")
def tournament_registrations(tournament_id):
    """Team list. Names only for the public; admins get the full rows."""
    viewer = current_viewer()
    tournament = get_tournament_or_404(tournament_id)
    regs = (
        Registration.query
        .filter_by(tournament_id=tournament.id, is_active=True)
        .order_by(Registration.seed.asc().nullslast(), Registration.id.asc())
        .all()
    )
    if viewer.is_admin:
        rows = [r.to_dict() for r in regs]
    else:
        rows = [{"id": r.id, "team_name": r.team_name, "school_organization": r.school_organization} for r in regs]
    return jsonify({"ok": True, "registrations": rows})

@tournaments_bp.route("/api/tournaments/<int:tournament_id>/register", methods=["POST"])
def register_route(tournament_id):
    viewer = current_viewer()
    account_id = require_account(viewer)
    account = db.session.get(Account, account_id)
    if not account:
        raise NotFound("Account not found.")

    tournament = get_tournament_or_404(tournament_id)
    data = request.get_json(force=True, silent=True) or {}
    reg = register_for_tournament(viewer, account, tournament, data)
    return jsonify({"ok": True, "registration": reg.to_dict()}), 201

@tournaments_bp.route("/api/registrations/<int:registration_id>/withdraw", methods=["POST"])
def withdraw_route(registration_id):
    viewer = current_viewer()
    reg = db.session.get(Registration, registration_id)
    if not reg:
        raise NotFound("Registration not found.")
    reg = withdraw_registration(viewer, reg)
    return jsonify({"ok": True, "registration": reg.to_dict()})

@tournaments_bp.route("/api/my/registrations")
def my_registrations_route():
    viewer = current_viewer()
    regs = my_registrations(viewer)
    out = []
    for r in regs:
        row = r.to_dict()
        row["tournament"] = r.tournament.to_dict() if r.tournament else None
        out.append(row)
    return jsonify({"ok": True, "registrations": out})
