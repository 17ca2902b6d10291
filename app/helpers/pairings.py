import logging

from app.extensions import db
from app.errors import (
    ConflictError, InvalidTransitionError, JudgeConflictError,
    NotFound, PermissionDenied, ValidationError,
)
from app.models import (
    Pairing, PairingEditHistory, PairingJudgeAssignment,
    Registration, Round, SpectateRequest,
)
from app.models.spectate_request import SPECTATE_APPROVED
from app.helpers.ballots import template_for_tournament, validate_ballot_result
from app.helpers.conflicts import conflicting_registration_ids
from app.helpers.notifications import notify_pairing_sides
from app.helpers.session import Viewer, require_account, require_account_or_admin, require_admin
from app.helpers.time import iso, parse_datetime

logger = logging.getLogger(__name__)

# Pairing status machine. Anything not listed is refused.
ALLOWED_TRANSITIONS = {
    "needs_judge": {"assigned"},
    "assigned": {"needs_judge", "in_progress"},
    "in_progress": {"completed"},
    "completed": {"in_progress"},  # admin re-open
}

ACTIVE_ASSIGNMENT_STATUSES = ("volunteered", "assigned")


def get_pairing_or_404(pairing_id: int) -> Pairing:
    pairing = db.session.get(Pairing, pairing_id)
    if not pairing:
        raise NotFound("Pairing not found.")
    return pairing


def get_round_or_404(round_id: int) -> Round:
    rnd = db.session.get(Round, round_id)
    if not rnd:
        raise NotFound("Round not found.")
    return rnd


def record_edit(pairing, viewer: Viewer, field: str, old, new, reason: str = None):
    """Audit row for an admin change. Caller commits."""
    db.session.add(
        PairingEditHistory(
            pairing_id=pairing.id,
            changed_by=viewer.account_id,
            field_changed=field,
            old_value=old,
            new_value=new,
            change_reason=reason,
        )
    )


# --- Who may see / act on a pairing ---

def is_participant(viewer: Viewer, pairing) -> bool:
    return pairing.side_for_account(viewer.account_id) is not None


def is_assigned_judge(viewer: Viewer, pairing) -> bool:
    if not viewer.is_authenticated:
        return False

    if pairing.judge and pairing.judge.account_id == viewer.account_id:
        return True

    # Panelists are only in the assignment table
    for a in PairingJudgeAssignment.query.filter(
        PairingJudgeAssignment.pairing_id == pairing.id,
        PairingJudgeAssignment.status.in_(ACTIVE_ASSIGNMENT_STATUSES),
    ).all():
        if a.judge_profile and a.judge_profile.account_id == viewer.account_id:
            return True
    return False


def has_approved_spectate(viewer: Viewer, pairing) -> bool:
    if not viewer.is_authenticated:
        return False
    return (
        SpectateRequest.query
        .filter(
            SpectateRequest.pairing_id == pairing.id,
            SpectateRequest.requester_id == viewer.account_id,
            SpectateRequest.status == SPECTATE_APPROVED,
        )
        .first()
        is not None
    )


def can_view_pairing(viewer: Viewer, pairing) -> bool:
    """
    Admins always; otherwise the pairing must be released and the viewer must
    be one of the teams, a judge on it, or an approved spectator.
    """
    if viewer.is_admin:
        return True
    if not pairing.released:
        return False
    return (
        is_participant(viewer, pairing)
        or is_assigned_judge(viewer, pairing)
        or has_approved_spectate(viewer, pairing)
    )


def ensure_can_view(viewer: Viewer, pairing):
    require_account_or_admin(viewer)
    if not can_view_pairing(viewer, pairing):
        raise PermissionDenied("You don't have access to this pairing.")


# --- Listing ---

def list_round_pairings(viewer: Viewer, round_id: int):
    """
    Round postings. Everyone sees released pairings (team names, room, time);
    admins also see unreleased ones.
    """
    get_round_or_404(round_id)
    q = Pairing.query.filter(Pairing.round_id == round_id)
    if not viewer.is_admin:
        q = q.filter(Pairing.released.is_(True))
    return q.order_by(Pairing.scheduled_time.asc().nullslast(), Pairing.id.asc()).all()


def my_pairings(viewer: Viewer):
    account_id = require_account(viewer)
    reg_ids = [
        r.id for r in Registration.query.filter_by(account_id=account_id, is_active=True).all()
    ]
    if not reg_ids:
        return []

    return (
        Pairing.query
        .filter(
            Pairing.released.is_(True),
            (Pairing.aff_registration_id.in_(reg_ids)) | (Pairing.neg_registration_id.in_(reg_ids)),
        )
        .order_by(Pairing.scheduled_time.asc().nullslast(), Pairing.id.asc())
        .all()
    )


# --- Admin create / edit ---

def _validate_teams(tournament_id: int, aff_id, neg_id):
    if not aff_id or not neg_id:
        raise ValidationError("Both teams are required.")

    try:
        aff_id, neg_id = int(aff_id), int(neg_id)
    except (TypeError, ValueError):
        raise ValidationError("Team ids must be numbers.")

    if aff_id == neg_id:
        raise ValidationError("A team cannot debate itself.")

    aff = db.session.get(Registration, aff_id)
    neg = db.session.get(Registration, neg_id)
    for reg, label in ((aff, "Affirmative"), (neg, "Negative")):
        if not reg or reg.tournament_id != tournament_id:
            raise ValidationError(f"{label} team is not registered for this tournament.")
        if not reg.is_active:
            raise ValidationError(f"{label} team registration is inactive.")
    if aff.account_id == neg.account_id:
        raise ValidationError("Both teams belong to the same account.")
    return aff, neg


def _parse_time_field(raw):
    try:
        return parse_datetime(raw)
    except ValueError:
        raise ValidationError("Scheduled time must be an ISO date-time, e.g. 2025-03-01T18:30.")


def create_pairing(viewer: Viewer, round_id: int, data: dict) -> Pairing:
    require_admin(viewer)
    rnd = get_round_or_404(round_id)

    aff, neg = _validate_teams(rnd.tournament_id, data.get("aff_registration_id"), data.get("neg_registration_id"))

    pairing = Pairing(
        tournament_id=rnd.tournament_id,
        round_id=rnd.id,
        aff_registration_id=aff.id,
        neg_registration_id=neg.id,
        room=(data.get("room") or "").strip() or None,
        scheduled_time=_parse_time_field(data.get("scheduled_time")),
        side_locked=bool(data.get("side_locked", False)),
        status="needs_judge",
    )
    db.session.add(pairing)
    db.session.commit()
    logger.info("[PAIRING] Created pairing %s (round %s): %s vs %s", pairing.id, rnd.id, aff.id, neg.id)
    return pairing


def _reseat_spectate_approvals(pairing, new_aff_id: int, new_neg_id: int):
    """
    Approvals belong to teams, not sides. Call before the pairing's ids change:
    a team that stays on the pairing keeps its answer on whichever side it now
    holds, and a team new to the pairing starts unanswered.
    """
    old_aff_id, old_neg_id = pairing.aff_registration_id, pairing.neg_registration_id
    for req in SpectateRequest.query.filter_by(pairing_id=pairing.id).all():
        answers = {old_aff_id: req.aff_team_approval, old_neg_id: req.neg_team_approval}
        req.aff_team_approval = answers.get(new_aff_id)
        req.neg_team_approval = answers.get(new_neg_id)


def swap_sides(viewer: Viewer, pairing) -> Pairing:
    """
    Exchange the affirmative and negative teams in place.
    No check is made against the teams' other pairings.
    """
    require_admin(viewer)
    if pairing.side_locked:
        raise ConflictError("Sides are locked for this pairing.")

    old = {"aff": pairing.aff_registration_id, "neg": pairing.neg_registration_id}
    _reseat_spectate_approvals(pairing, old["neg"], old["aff"])
    pairing.aff_registration_id, pairing.neg_registration_id = old["neg"], old["aff"]

    record_edit(
        pairing, viewer, "swap_sides", old,
        {"aff": pairing.aff_registration_id, "neg": pairing.neg_registration_id},
    )
    db.session.commit()
    # relationships were loaded with the old ids
    db.session.refresh(pairing)
    return pairing


def edit_pairing(viewer: Viewer, pairing, data: dict) -> Pairing:
    """
    Admin edit: room, scheduled time, and team replacement. Only keys present
    in `data` are touched; blank room/time clears them.
    """
    require_admin(viewer)
    changed = []

    if "room" in data:
        new_room = (data.get("room") or "").strip() or None
        if new_room != pairing.room:
            record_edit(pairing, viewer, "room", pairing.room, new_room)
            pairing.room = new_room
            changed.append("room")

    if "scheduled_time" in data:
        new_time = _parse_time_field(data.get("scheduled_time"))
        if new_time != pairing.scheduled_time:
            record_edit(pairing, viewer, "scheduled_time", iso(pairing.scheduled_time), iso(new_time))
            pairing.scheduled_time = new_time
            changed.append("scheduled_time")

    if "aff_registration_id" in data or "neg_registration_id" in data:
        aff_id = data.get("aff_registration_id", pairing.aff_registration_id)
        neg_id = data.get("neg_registration_id", pairing.neg_registration_id)
        aff, neg = _validate_teams(pairing.tournament_id, aff_id, neg_id)
        old_aff_id, old_neg_id = pairing.aff_registration_id, pairing.neg_registration_id

        # A team already on the pairing moving to the other side is a swap
        if pairing.side_locked and (aff.id == old_neg_id or neg.id == old_aff_id):
            raise ConflictError("Sides are locked for this pairing.")

        if (aff.id, neg.id) != (old_aff_id, old_neg_id):
            if pairing.judge_id and conflicting_registration_ids(pairing.judge_id, pairing.tournament_id, (aff.id, neg.id)):
                raise JudgeConflictError("The assigned judge has a conflict with one of the new teams.")

            reason = None
            if pairing.result is not None:
                reason = "Admin team replacement with existing tab data"
            record_edit(
                pairing, viewer, "team_replacement",
                {"aff": old_aff_id, "neg": old_neg_id},
                {"aff": aff.id, "neg": neg.id},
                reason,
            )
            _reseat_spectate_approvals(pairing, aff.id, neg.id)
            pairing.aff_registration_id = aff.id
            pairing.neg_registration_id = neg.id
            changed.append("teams")

    if "side_locked" in data:
        pairing.side_locked = bool(data["side_locked"])

    if changed and pairing.released:
        notify_pairing_sides(
            pairing, "pairing_updated", "Pairing Updated",
            "Your match details have changed: " + ", ".join(c.replace("_", " ") for c in changed),
        )

    db.session.commit()
    db.session.refresh(pairing)
    return pairing


# --- Status machine ---

def transition_status(pairing, new_status: str):
    """Move a pairing along the status machine. Caller commits."""
    current = pairing.status
    if new_status == current:
        return
    if new_status not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(f"Cannot move a pairing from '{current}' to '{new_status}'.")
    pairing.status = new_status


def change_status(viewer: Viewer, pairing, new_status: str) -> Pairing:
    """
    Admins may make any allowed move; the assigned judge may only start the round.
    """
    require_account_or_admin(viewer)
    if not viewer.is_admin:
        if not (is_assigned_judge(viewer, pairing) and new_status == "in_progress"):
            raise PermissionDenied("Only an admin can change this pairing's status.")

    if new_status == "assigned" and not pairing.judge_id:
        raise InvalidTransitionError("Assign a judge before marking the pairing assigned.")
    if new_status == "needs_judge" and pairing.judge_id:
        raise InvalidTransitionError("Remove the judge instead of resetting the status.")
    if new_status == "completed" and pairing.result is None:
        raise InvalidTransitionError("A pairing can only be completed by submitting a ballot.")

    old = pairing.status
    transition_status(pairing, new_status)
    record_edit(pairing, viewer, "status", old, new_status)
    db.session.commit()
    return pairing


def release_round(viewer: Viewer, round_id: int, released: bool = True) -> int:
    require_admin(viewer)
    rnd = get_round_or_404(round_id)

    count = 0
    for p in Pairing.query.filter_by(round_id=rnd.id).all():
        if p.released != released:
            p.released = released
            count += 1
    db.session.commit()
    logger.info("[PAIRING] Round %s %s (%s pairings)", rnd.id, "released" if released else "hidden", count)
    return count


def submit_result(viewer: Viewer, pairing, payload) -> Pairing:
    """
    The judge on the pairing (or an admin) submits the ballot. The round must
    be in progress; the ballot is checked against the tournament's template.
    """
    require_account_or_admin(viewer)
    if not (viewer.is_admin or is_assigned_judge(viewer, pairing)):
        raise PermissionDenied("Only the judge on this pairing can submit a ballot.")

    if pairing.status != "in_progress":
        raise InvalidTransitionError("Ballots can only be submitted for rounds in progress.")

    template = template_for_tournament(pairing.tournament_id)
    schema = template.schema if template else None
    result = validate_ballot_result(schema, payload)
    if template:
        result["template_key"] = template.template_key

    pairing.result = result
    transition_status(pairing, "completed")
    db.session.commit()
    logger.info("[PAIRING] Ballot submitted for pairing %s (winner: %s)", pairing.id, result["winner"])
    return pairing


def edit_history(viewer: Viewer, pairing):
    require_admin(viewer)
    return (
        PairingEditHistory.query
        .filter_by(pairing_id=pairing.id)
        .order_by(PairingEditHistory.changed_at.desc(), PairingEditHistory.id.desc())
        .all()
    )
