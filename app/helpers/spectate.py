"""
Spectate requests: a non-participant asks to watch a pairing and both teams
must say yes.

The request's status is never written. It is derived from the two team
answers (see models.spectate_request.derive_status), so there is a single
source of truth:

    both None / one True    -> pending
    both True               -> approved
    either False            -> rejected

Each team only ever writes its own answer, so two teams answering at the
same moment touch different columns.
"""
import logging

from app.extensions import db
from app.errors import ConflictError, NotFound, PermissionDenied
from app.models import Pairing, Registration, SpectateRequest
from app.models.spectate_request import SPECTATE_APPROVED, SPECTATE_PENDING
from app.helpers.pairings import get_pairing_or_404, is_participant
from app.helpers.session import Viewer, require_account, require_account_or_admin

logger = logging.getLogger(__name__)


def request_spectate(viewer: Viewer, pairing_id: int, reason: str = None):
    """
    Create a request for `pairing_id`.

    Returns (request, created). If the viewer already has a pending or
    approved request for this pairing, that one is returned unchanged;
    after a rejection a fresh request may be made.
    """
    account_id = require_account(viewer)
    pairing = get_pairing_or_404(pairing_id)

    if not pairing.released and not viewer.is_admin:
        raise PermissionDenied("This pairing has not been released yet.")

    if is_participant(viewer, pairing):
        raise PermissionDenied("You are debating in this pairing and can't request to spectate it.")

    existing = (
        SpectateRequest.query
        .filter(
            SpectateRequest.pairing_id == pairing.id,
            SpectateRequest.requester_id == account_id,
            SpectateRequest.status.in_((SPECTATE_PENDING, SPECTATE_APPROVED)),
        )
        .order_by(SpectateRequest.created_at.desc(), SpectateRequest.id.desc())
        .first()
    )
    if existing:
        return existing, False

    req = SpectateRequest(
        pairing_id=pairing.id,
        requester_id=account_id,
        request_reason=(reason or "").strip() or None,
    )
    db.session.add(req)
    db.session.commit()
    logger.info("[SPECTATE] Account %s requested to spectate pairing %s", account_id, pairing.id)
    return req, True


def respond_to_request(viewer: Viewer, request_id: int, approved: bool) -> SpectateRequest:
    """
    Record one team's answer. The caller's side is worked out from the
    pairing's two teams; the other side's answer is never touched.
    """
    require_account(viewer)
    req = db.session.get(SpectateRequest, request_id)
    if not req:
        raise NotFound("Spectate request not found.")

    pairing = req.pairing
    side = pairing.side_for_account(viewer.account_id)
    if side is None:
        raise PermissionDenied("Only the teams in this pairing can answer spectate requests.")

    if req.is_terminal:
        raise ConflictError(f"This request has already been {req.status}.")

    if side == "aff":
        req.aff_team_approval = bool(approved)
    else:
        req.neg_team_approval = bool(approved)

    db.session.commit()
    logger.info(
        "[SPECTATE] %s side %s request %s -> %s",
        side, "approved" if approved else "rejected", req.id, req.status,
    )
    return req


def my_requests(viewer: Viewer, tournament_id: int = None):
    """Requests the viewer has made, newest first."""
    account_id = require_account(viewer)
    q = SpectateRequest.query.filter(SpectateRequest.requester_id == account_id)
    if tournament_id:
        q = q.join(Pairing, Pairing.id == SpectateRequest.pairing_id).filter(Pairing.tournament_id == tournament_id)
    return q.order_by(SpectateRequest.created_at.desc(), SpectateRequest.id.desc()).all()


def pending_approvals(viewer: Viewer, tournament_id: int = None):
    """
    Pending requests on pairings where the viewer is one of the teams and has
    not answered yet.
    """
    account_id = require_account(viewer)

    reg_ids = [r.id for r in Registration.query.filter_by(account_id=account_id).all()]
    if not reg_ids:
        return []

    q = (
        SpectateRequest.query
        .join(Pairing, Pairing.id == SpectateRequest.pairing_id)
        .filter(
            SpectateRequest.status == SPECTATE_PENDING,
            (Pairing.aff_registration_id.in_(reg_ids)) | (Pairing.neg_registration_id.in_(reg_ids)),
        )
    )
    if tournament_id:
        q = q.filter(Pairing.tournament_id == tournament_id)

    out = []
    for req in q.order_by(SpectateRequest.created_at.desc(), SpectateRequest.id.desc()).all():
        side = req.pairing.side_for_account(account_id)
        answer = req.aff_team_approval if side == "aff" else req.neg_team_approval
        if answer is None:
            out.append(req)
    return out


def requests_for_pairing(viewer: Viewer, pairing_id: int):
    """All requests on one pairing; teams on the pairing and admins only."""
    require_account_or_admin(viewer)
    pairing = get_pairing_or_404(pairing_id)
    if not (viewer.is_admin or is_participant(viewer, pairing)):
        raise PermissionDenied("Only the teams in this pairing can see its spectate requests.")
    return (
        SpectateRequest.query
        .filter_by(pairing_id=pairing.id)
        .order_by(SpectateRequest.created_at.desc(), SpectateRequest.id.desc())
        .all()
    )
