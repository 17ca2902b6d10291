import logging

from app.extensions import db
from app.errors import ConflictError, NotFound, PermissionDenied, ValidationError
from app.models import ScheduleProposal
from app.helpers.notifications import notify_registration
from app.helpers.pairings import record_edit
from app.helpers.session import Viewer, require_account, require_account_or_admin
from app.helpers.time import iso, parse_datetime

logger = logging.getLogger(__name__)


def propose_reschedule(viewer: Viewer, pairing, data: dict) -> ScheduleProposal:
    """
    One team proposes a new time and/or room; the other team answers.
    A newer proposal from either side replaces any pending one.
    """
    account_id = require_account(viewer)
    side = pairing.side_for_account(account_id)
    if side is None:
        raise PermissionDenied("Only the teams in this pairing can propose a new schedule.")

    if pairing.status == "completed":
        raise ConflictError("This round is already finished.")

    try:
        proposed_time = parse_datetime(data.get("proposed_time"))
    except ValueError:
        raise ValidationError("Proposed time must be an ISO date-time.")
    proposed_room = (data.get("proposed_room") or "").strip() or None

    if proposed_time is None and proposed_room is None:
        raise ValidationError("Propose a new time, a new room, or both.")

    for old in ScheduleProposal.query.filter_by(pairing_id=pairing.id, status="pending").all():
        old.status = "rejected"

    proposal = ScheduleProposal(
        pairing_id=pairing.id,
        proposer_id=account_id,
        proposed_time=proposed_time,
        proposed_room=proposed_room,
        note=(data.get("note") or "").strip() or None,
    )
    db.session.add(proposal)

    other = pairing.registration_for_side("neg" if side == "aff" else "aff")
    notify_registration(
        other.id, pairing, "schedule_proposal", "New Schedule Proposal",
        "Your opponent proposed a new time or room for your match",
    )
    db.session.commit()
    return proposal


def respond_to_proposal(viewer: Viewer, proposal_id: int, accept: bool) -> ScheduleProposal:
    """
    The opposing team accepts (pairing time/room updated) or rejects.
    """
    account_id = require_account(viewer)
    proposal = db.session.get(ScheduleProposal, proposal_id)
    if not proposal:
        raise NotFound("Proposal not found.")

    pairing = proposal.pairing
    side = pairing.side_for_account(account_id)
    if side is None or account_id == proposal.proposer_id:
        raise PermissionDenied("Only the opposing team can answer this proposal.")

    if proposal.status != "pending":
        raise ConflictError(f"This proposal was already {proposal.status}.")

    proposal.status = "accepted" if accept else "rejected"

    if accept:
        if proposal.proposed_time is not None:
            record_edit(pairing, viewer, "scheduled_time", iso(pairing.scheduled_time), iso(proposal.proposed_time),
                        "Accepted schedule proposal")
            pairing.scheduled_time = proposal.proposed_time
        if proposal.proposed_room is not None:
            record_edit(pairing, viewer, "room", pairing.room, proposal.proposed_room, "Accepted schedule proposal")
            pairing.room = proposal.proposed_room

    proposer_side = pairing.side_for_account(proposal.proposer_id)
    if proposer_side:
        notify_registration(
            pairing.registration_for_side(proposer_side).id, pairing, "schedule_proposal",
            "Schedule Proposal " + ("Accepted" if accept else "Declined"),
            "Your opponent " + ("accepted" if accept else "declined") + " your proposed schedule change",
        )

    db.session.commit()
    logger.info("[SCHEDULE] Proposal %s %s", proposal.id, proposal.status)
    return proposal


def proposals_for_pairing(viewer: Viewer, pairing):
    require_account_or_admin(viewer)
    if not viewer.is_admin and pairing.side_for_account(viewer.account_id) is None:
        raise PermissionDenied("Only the teams in this pairing can see its schedule proposals.")
    return (
        ScheduleProposal.query
        .filter_by(pairing_id=pairing.id)
        .order_by(ScheduleProposal.created_at.desc(), ScheduleProposal.id.desc())
        .all()
    )
