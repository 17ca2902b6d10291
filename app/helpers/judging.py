import logging
from typing import Optional

from app.extensions import db
from app.errors import (
    ConflictError, InvalidTransitionError, JudgeAlreadyAssignedError, JudgeConflictError,
    NoJudgeProfileError, NotFound, PermissionDenied, ValidationError,
)
from app.models import (
    JudgeProfile, JudgeTeamConflict, Pairing,
    PairingJudgeAssignment, Registration, Tournament,
)
from app.helpers.account import get_or_create_account_for_email
from app.helpers.conflicts import judge_has_conflict
from app.helpers.email import normalize_email, send_judge_account_email
from app.helpers.notifications import notify_pairing_sides
from app.helpers.pairings import ACTIVE_ASSIGNMENT_STATUSES, record_edit, transition_status
from app.helpers.session import Viewer, require_account, require_account_or_admin, require_admin

logger = logging.getLogger(__name__)

EXPERIENCE_LEVELS = ("novice", "intermediate", "experienced", "expert")
CONFLICT_TYPES = ("school", "coach", "family", "other")


def judge_profile_for(viewer: Viewer) -> Optional[JudgeProfile]:
    if not viewer.is_authenticated:
        return None
    return JudgeProfile.query.filter_by(account_id=viewer.account_id).first()


def get_judge_or_404(judge_profile_id: int) -> JudgeProfile:
    judge = db.session.get(JudgeProfile, judge_profile_id)
    if not judge:
        raise NotFound("Judge not found.")
    return judge


def pairing_has_judge(pairing) -> bool:
    if pairing.judge_id:
        return True
    return (
        PairingJudgeAssignment.query
        .filter(
            PairingJudgeAssignment.pairing_id == pairing.id,
            PairingJudgeAssignment.role == "chair",
            PairingJudgeAssignment.status.in_(ACTIVE_ASSIGNMENT_STATUSES),
        )
        .first()
        is not None
    )


def _attach_chair(pairing, judge: JudgeProfile, status: str, notes: str, assigned_by=None):
    """Assignment row + pairing.judge_id + needs_judge -> assigned. Caller commits."""
    assignment = PairingJudgeAssignment(
        pairing_id=pairing.id,
        judge_profile_id=judge.id,
        role="chair",
        status=status,
        notes=notes,
        assigned_by=assigned_by,
    )
    db.session.add(assignment)

    pairing.judge_id = judge.id
    if pairing.status == "needs_judge":
        transition_status(pairing, "assigned")
    return assignment


def volunteer_to_judge(viewer: Viewer, pairing) -> PairingJudgeAssignment:
    """
    Self-service: a judge claims an unfilled pairing as chair.

    Refused when the pairing is unreleased, the viewer has no judge profile,
    the pairing already has a judge, or the judge has a conflict with either
    team in this tournament.
    """
    require_account(viewer)
    if not pairing.released:
        raise PermissionDenied("This pairing hasn't been released yet.")
    judge = judge_profile_for(viewer)
    if not judge:
        raise NoJudgeProfileError()

    if pairing_has_judge(pairing):
        raise JudgeAlreadyAssignedError()

    if judge_has_conflict(judge.id, pairing):
        logger.info("[JUDGE] Judge %s refused for pairing %s (conflict)", judge.id, pairing.id)
        raise JudgeConflictError()

    assignment = _attach_chair(
        pairing, judge, status="volunteered",
        notes="Volunteered through tournament interface",
    )
    notify_pairing_sides(
        pairing, "judge_volunteer", "Judge Volunteered",
        "A judge has volunteered for your match",
    )
    db.session.commit()
    logger.info("[JUDGE] Judge %s volunteered for pairing %s", judge.id, pairing.id)
    return assignment


def assign_judge(viewer: Viewer, pairing, judge_profile_id: int, role: str = "chair") -> PairingJudgeAssignment:
    """
    Admin assignment. Conflicts are enforced exactly as in the volunteer path.
    """
    require_admin(viewer)
    judge = get_judge_or_404(judge_profile_id)

    if role not in ("chair", "panelist"):
        raise ValidationError("Role must be 'chair' or 'panelist'.")

    if judge_has_conflict(judge.id, pairing):
        raise JudgeConflictError(f"{judge.name} has a conflict with one of the teams in this pairing.")

    already = (
        PairingJudgeAssignment.query
        .filter(
            PairingJudgeAssignment.pairing_id == pairing.id,
            PairingJudgeAssignment.judge_profile_id == judge.id,
            PairingJudgeAssignment.status.in_(ACTIVE_ASSIGNMENT_STATUSES),
        )
        .first()
    )
    if already:
        raise ConflictError(f"{judge.name} is already on this pairing.")

    if role == "chair":
        if pairing_has_judge(pairing):
            raise JudgeAlreadyAssignedError("Remove the current chair before assigning a new one.")
        assignment = _attach_chair(pairing, judge, status="assigned", notes=None, assigned_by=viewer.account_id)
    else:
        assignment = PairingJudgeAssignment(
            pairing_id=pairing.id,
            judge_profile_id=judge.id,
            role="panelist",
            status="assigned",
            assigned_by=viewer.account_id,
        )
        db.session.add(assignment)

    record_edit(pairing, viewer, "judge", None, {"judge_profile_id": judge.id, "role": role})
    if pairing.released:
        notify_pairing_sides(
            pairing, "judge_assigned", "Judge Assigned",
            f"{judge.name} will judge your match",
        )
    db.session.commit()
    logger.info("[JUDGE] Admin %s assigned judge %s to pairing %s as %s", viewer.account_id, judge.id, pairing.id, role)
    return assignment


def unassign_judge(viewer: Viewer, pairing, judge_profile_id: int) -> int:
    """
    Remove a judge from a pairing. Removing the chair sends the pairing back
    to needs_judge; once the round has started the chair stays.
    Returns how many assignments were removed.
    """
    require_admin(viewer)

    rows = (
        PairingJudgeAssignment.query
        .filter(
            PairingJudgeAssignment.pairing_id == pairing.id,
            PairingJudgeAssignment.judge_profile_id == judge_profile_id,
            PairingJudgeAssignment.status.in_(ACTIVE_ASSIGNMENT_STATUSES),
        )
        .all()
    )
    if not rows and pairing.judge_id != judge_profile_id:
        raise NotFound("That judge is not on this pairing.")
    if pairing.judge_id == judge_profile_id and pairing.status in ("in_progress", "completed"):
        raise InvalidTransitionError("The chair can't be removed once the round has started.")

    for a in rows:
        a.status = "removed"

    if pairing.judge_id == judge_profile_id:
        pairing.judge_id = None
        if pairing.status == "assigned":
            transition_status(pairing, "needs_judge")

    record_edit(pairing, viewer, "judge", {"judge_profile_id": judge_profile_id}, None)
    db.session.commit()
    return len(rows)


def pairings_needing_judges(tournament_id: int):
    """Released pairings with no judge yet (the volunteer board)."""
    return (
        Pairing.query
        .filter(
            Pairing.tournament_id == tournament_id,
            Pairing.released.is_(True),
            Pairing.judge_id.is_(None),
            Pairing.status == "needs_judge",
        )
        .order_by(Pairing.scheduled_time.asc().nullslast(), Pairing.id.asc())
        .all()
    )


def my_judgings(viewer: Viewer):
    judge = judge_profile_for(viewer)
    if not judge:
        raise NoJudgeProfileError("You don't have a judge profile yet.")
    return (
        PairingJudgeAssignment.query
        .filter(
            PairingJudgeAssignment.judge_profile_id == judge.id,
            PairingJudgeAssignment.status.in_(ACTIVE_ASSIGNMENT_STATUSES),
        )
        .order_by(PairingJudgeAssignment.created_at.desc())
        .all()
    )


# --- Profiles ---

def _apply_profile_fields(judge: JudgeProfile, data: dict):
    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Judge name is required.")
        judge.name = name
    if "phone" in data:
        judge.phone = (data.get("phone") or "").strip() or None
    if "bio" in data:
        judge.bio = (data.get("bio") or "").strip() or None
    if "experience_level" in data:
        level = data.get("experience_level")
        if level not in EXPERIENCE_LEVELS:
            raise ValidationError(f"Experience level must be one of {', '.join(EXPERIENCE_LEVELS)}.")
        judge.experience_level = level
    if "experience_years" in data:
        try:
            years = int(data.get("experience_years") or 0)
        except (TypeError, ValueError):
            raise ValidationError("Experience years must be a number.")
        judge.experience_years = max(years, 0)
    if "alumni" in data:
        judge.alumni = bool(data.get("alumni"))


def create_own_profile(viewer: Viewer, account, data: dict) -> JudgeProfile:
    require_account(viewer)
    if judge_profile_for(viewer):
        raise ConflictError("You already have a judge profile.")

    judge = JudgeProfile(
        account_id=account.id,
        name=(data.get("name") or account.display_name or "").strip(),
        email=account.email,
    )
    _apply_profile_fields(judge, {**data, "name": judge.name})
    db.session.add(judge)
    db.session.commit()
    return judge


def update_profile(viewer: Viewer, judge: JudgeProfile, data: dict) -> JudgeProfile:
    require_account_or_admin(viewer)
    if not viewer.is_admin and judge.account_id != viewer.account_id:
        raise PermissionDenied("You can only edit your own judge profile.")

    _apply_profile_fields(judge, data)
    if viewer.is_admin and "status" in data:
        judge.status = data["status"]
    db.session.commit()
    return judge


def provision_judge_account(viewer: Viewer, data: dict) -> JudgeProfile:
    """
    Admin creates a judge: Account (by email) + JudgeProfile, then emails them.
    """
    require_admin(viewer)
    email = normalize_email(data.get("email"))
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("Judge name is required.")

    account = get_or_create_account_for_email(email)
    if JudgeProfile.query.filter_by(account_id=account.id).first():
        raise ConflictError("That account already has a judge profile.")

    judge = JudgeProfile(account_id=account.id, name=name, email=account.email)
    _apply_profile_fields(judge, data)
    db.session.add(judge)
    db.session.commit()

    send_judge_account_email(judge)
    logger.info("[JUDGE] Provisioned judge %s for %s", judge.id, account.email)
    return judge


# --- Conflicts ---

def add_conflict(viewer: Viewer, tournament_id: int, judge_profile_id: int, registration_id: int,
                 conflict_type: str = "other") -> JudgeTeamConflict:
    require_admin(viewer)
    if not db.session.get(Tournament, tournament_id):
        raise NotFound("Tournament not found.")
    get_judge_or_404(judge_profile_id)

    reg = db.session.get(Registration, registration_id)
    if not reg or reg.tournament_id != tournament_id:
        raise ValidationError("That team is not registered for this tournament.")

    if conflict_type not in CONFLICT_TYPES:
        raise ValidationError(f"Conflict type must be one of {', '.join(CONFLICT_TYPES)}.")

    existing = JudgeTeamConflict.query.filter_by(
        judge_profile_id=judge_profile_id, registration_id=registration_id,
    ).first()
    if existing:
        return existing

    conflict = JudgeTeamConflict(
        judge_profile_id=judge_profile_id,
        tournament_id=tournament_id,
        registration_id=registration_id,
        conflict_type=conflict_type,
    )
    db.session.add(conflict)
    db.session.commit()
    return conflict


def remove_conflict(viewer: Viewer, conflict_id: int):
    require_admin(viewer)
    conflict = db.session.get(JudgeTeamConflict, conflict_id)
    if not conflict:
        raise NotFound("Conflict not found.")
    db.session.delete(conflict)
    db.session.commit()


def list_conflicts(viewer: Viewer, tournament_id: int, judge_profile_id: int = None):
    require_admin(viewer)
    q = JudgeTeamConflict.query.filter_by(tournament_id=tournament_id)
    if judge_profile_id:
        q = q.filter_by(judge_profile_id=judge_profile_id)
    return q.order_by(JudgeTeamConflict.id.asc()).all()
