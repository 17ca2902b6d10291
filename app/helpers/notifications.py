from app.extensions import db
from app.models import CompetitorNotification, Registration
from app.helpers.session import Viewer, require_account

def notify_pairing_sides(pairing, type_: str, title: str, message: str) -> list:
    """
    One notification per side of the pairing. Caller commits.
    """
    rows = []
    for registration_id in (pairing.aff_registration_id, pairing.neg_registration_id):
        n = CompetitorNotification(
            registration_id=registration_id,
            tournament_id=pairing.tournament_id,
            round_id=pairing.round_id,
            pairing_id=pairing.id,
            type=type_,
            title=title,
            message=message,
        )
        db.session.add(n)
        rows.append(n)
    return rows

def notify_registration(registration_id: int, pairing, type_: str, title: str, message: str):
    n = CompetitorNotification(
        registration_id=registration_id,
        tournament_id=pairing.tournament_id,
        round_id=pairing.round_id,
        pairing_id=pairing.id,
        type=type_,
        title=title,
        message=message,
    )
    db.session.add(n)
    return n

def _viewer_notifications_query(viewer: Viewer):
    account_id = require_account(viewer)
    return (
        CompetitorNotification.query
        .join(Registration, Registration.id == CompetitorNotification.registration_id)
        .filter(Registration.account_id == account_id)
    )

def list_notifications(viewer: Viewer, unread_only: bool = False, limit: int = 50):
    q = _viewer_notifications_query(viewer)
    if unread_only:
        q = q.filter(CompetitorNotification.is_read.is_(False))
    return (
        q.order_by(CompetitorNotification.created_at.desc(), CompetitorNotification.id.desc())
        .limit(limit)
        .all()
    )

def unread_count(viewer: Viewer) -> int:
    return _viewer_notifications_query(viewer).filter(CompetitorNotification.is_read.is_(False)).count()

def mark_read(viewer: Viewer, notification_id=None) -> int:
    """
    Mark one notification (or all, when notification_id is None) as read.
    Returns how many rows changed.
    """
    rows = _viewer_notifications_query(viewer).filter(CompetitorNotification.is_read.is_(False))
    if notification_id is not None:
        rows = rows.filter(CompetitorNotification.id == notification_id)

    changed = 0
    for n in rows.all():
        n.is_read = True
        changed += 1
    db.session.commit()
    return changed
