import logging

from app.extensions import db
from app.errors import PermissionDenied, ValidationError
from app.models import PairingChatMessage
from app.helpers.pairings import ensure_can_view, is_assigned_judge, is_participant
from app.helpers.session import Viewer, require_account

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


def can_post(viewer: Viewer, pairing) -> bool:
    """Teams, judges on the pairing and admins talk; spectators only read."""
    return viewer.is_admin or is_participant(viewer, pairing) or is_assigned_judge(viewer, pairing)


def list_messages(viewer: Viewer, pairing, after_id: int = None, limit: int = 200):
    """
    Messages for one pairing, oldest first. Clients poll with `after_id` set
    to the last id they have.
    """
    ensure_can_view(viewer, pairing)
    q = PairingChatMessage.query.filter(PairingChatMessage.pairing_id == pairing.id)
    if after_id:
        q = q.filter(PairingChatMessage.id > after_id)
    return q.order_by(PairingChatMessage.id.asc()).limit(limit).all()


def post_message(viewer: Viewer, pairing, text: str, message_type: str = "text") -> PairingChatMessage:
    account_id = require_account(viewer)
    if not can_post(viewer, pairing):
        raise PermissionDenied("Only the teams and judges in this pairing can chat.")

    text = (text or "").strip()
    if not text:
        raise ValidationError("Message can't be empty.")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"Message is too long (max {MAX_MESSAGE_LENGTH} characters).")

    # Only admins post system notices
    if message_type != "text" and not viewer.is_admin:
        message_type = "text"

    msg = PairingChatMessage(
        pairing_id=pairing.id,
        sender_id=account_id,
        message=text,
        message_type=message_type,
    )
    db.session.add(msg)
    db.session.commit()
    return msg
