import logging
from datetime import datetime

from app.extensions import db
from app.errors import ConflictError, NotFound, ValidationError
from app.models import Registration, Round, Tournament
from app.models.tournament import TOURNAMENT_STATUSES
from app.helpers.email import normalize_email, send_registration_confirmation
from app.helpers.session import Viewer, require_account, require_account_or_admin, require_admin
from app.helpers.time import parse_datetime
from app.helpers.url import slugify

logger = logging.getLogger(__name__)


def get_tournament_or_404(ref) -> Tournament:
    """Look up by numeric id or slug."""
    tournament = None
    if isinstance(ref, int) or (isinstance(ref, str) and ref.isdigit()):
        tournament = db.session.get(Tournament, int(ref))
    if tournament is None and isinstance(ref, str):
        tournament = Tournament.query.filter_by(slug=ref).first()
    if not tournament:
        raise NotFound("Tournament not found.")
    return tournament


def _date_field(data, key):
    try:
        return parse_datetime(data.get(key))
    except ValueError:
        raise ValidationError(f"'{key}' must be an ISO date-time.")


def _unique_slug(name: str) -> str:
    slug = slugify(name, fallback="tournament")
    if Tournament.query.filter_by(slug=slug).first():
        slug = f"{slug}-{int(datetime.utcnow().timestamp())}"
    return slug


def create_tournament(viewer: Viewer, data: dict) -> Tournament:
    require_admin(viewer)
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("Tournament name is required.")

    start, end = _date_field(data, "start_date"), _date_field(data, "end_date")
    if start and end and end < start:
        raise ValidationError("End date must be after the start date.")

    try:
        max_participants = int(data.get("max_participants") or 64)
    except (TypeError, ValueError):
        raise ValidationError("Max participants must be a number.")

    tournament = Tournament(
        name=name,
        slug=_unique_slug(data.get("slug") or name),
        description=data.get("description"),
        location=(data.get("location") or "Online").strip(),
        format=(data.get("format") or "LD").strip(),
        start_date=start,
        end_date=end,
        registration_open=bool(data.get("registration_open", True)),
        max_participants=max_participants,
        created_by=viewer.account_id,
    )
    db.session.add(tournament)
    db.session.commit()
    logger.info("[TOURNAMENT] Created %s (%s)", tournament.id, tournament.slug)
    return tournament


def update_tournament(viewer: Viewer, tournament: Tournament, data: dict) -> Tournament:
    require_admin(viewer)

    for key in ("description", "location", "format"):
        if key in data:
            setattr(tournament, key, data.get(key))
    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Tournament name is required.")
        tournament.name = name
    if "start_date" in data:
        tournament.start_date = _date_field(data, "start_date")
    if "end_date" in data:
        tournament.end_date = _date_field(data, "end_date")
    if "registration_open" in data:
        tournament.registration_open = bool(data["registration_open"])
    if "max_participants" in data:
        try:
            tournament.max_participants = int(data["max_participants"])
        except (TypeError, ValueError):
            raise ValidationError("Max participants must be a number.")
    if "status" in data:
        if data["status"] not in TOURNAMENT_STATUSES:
            raise ValidationError(f"Status must be one of {', '.join(TOURNAMENT_STATUSES)}.")
        tournament.status = data["status"]

    db.session.commit()
    return tournament


def create_round(viewer: Viewer, tournament: Tournament, data: dict) -> Round:
    require_admin(viewer)

    existing_numbers = [r.round_number for r in tournament.rounds]
    try:
        number = int(data.get("round_number") or (max(existing_numbers, default=0) + 1))
    except (TypeError, ValueError):
        raise ValidationError("Round number must be a number.")
    if number in existing_numbers:
        raise ConflictError(f"Round {number} already exists.")

    rnd = Round(
        tournament_id=tournament.id,
        round_number=number,
        name=(data.get("name") or f"Round {number}").strip(),
        scheduled_date=_date_field(data, "scheduled_date"),
    )
    db.session.add(rnd)
    db.session.commit()
    return rnd


def active_registration_count(tournament: Tournament) -> int:
    return Registration.query.filter_by(tournament_id=tournament.id, is_active=True).count()


def register_for_tournament(viewer: Viewer, account, tournament: Tournament, data: dict) -> Registration:
    """
    One active entry per account per tournament. Sends the confirmation email
    (failures are logged, the registration stands).
    """
    require_account(viewer)

    if not tournament.registration_open or tournament.status == "completed":
        raise ConflictError("Registration is closed for this tournament.")

    existing = Registration.query.filter_by(
        tournament_id=tournament.id, account_id=account.id, is_active=True,
    ).first()
    if existing:
        raise ConflictError("You're already registered for this tournament.")

    if active_registration_count(tournament) >= tournament.max_participants:
        raise ConflictError("This tournament is full.")

    participant_name = (data.get("participant_name") or account.display_name or "").strip()
    if not participant_name:
        raise ValidationError("Participant name is required.")

    reg = Registration(
        tournament_id=tournament.id,
        account_id=account.id,
        participant_name=participant_name,
        participant_email=normalize_email(data.get("participant_email")) or account.email,
        partner_name=(data.get("partner_name") or "").strip() or None,
        school_organization=(data.get("school_organization") or "").strip() or None,
    )
    db.session.add(reg)
    db.session.commit()

    send_registration_confirmation(reg)
    logger.info("[REGISTRATION] Account %s registered for %s", account.id, tournament.slug)
    return reg


def withdraw_registration(viewer: Viewer, registration: Registration) -> Registration:
    require_account_or_admin(viewer)
    if not viewer.is_admin and registration.account_id != viewer.account_id:
        raise NotFound("Registration not found.")
    registration.is_active = False
    db.session.commit()
    return registration


def my_registrations(viewer: Viewer):
    account_id = require_account(viewer)
    return (
        Registration.query
        .filter_by(account_id=account_id)
        .order_by(Registration.created_at.desc())
        .all()
    )
