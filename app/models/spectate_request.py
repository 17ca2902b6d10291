from datetime import datetime
from typing import Optional
from sqlalchemy import and_, case, or_
from sqlalchemy.ext.hybrid import hybrid_property
from app.extensions import db
from app.helpers.time import iso

SPECTATE_PENDING = "pending"
SPECTATE_APPROVED = "approved"
SPECTATE_REJECTED = "rejected"


def derive_status(aff_approval: Optional[bool], neg_approval: Optional[bool]) -> str:
    """
    Status is a pure function of the two team answers:
    - either side said no  -> rejected
    - both sides said yes  -> approved
    - otherwise            -> pending
    """
    if aff_approval is False or neg_approval is False:
        return SPECTATE_REJECTED
    if aff_approval is True and neg_approval is True:
        return SPECTATE_APPROVED
    return SPECTATE_PENDING


class SpectateRequest(db.Model):
    __tablename__ = "spectate_requests"

    id = db.Column(db.Integer, primary_key=True)

    pairing_id = db.Column(
        db.Integer,
        db.ForeignKey("pairings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    requester_id = db.Column(
        db.Integer,
        db.ForeignKey("account.id"),
        nullable=False,
        index=True,
    )

    request_reason = db.Column(db.Text, nullable=True)

    # None = no answer yet
    aff_team_approval = db.Column(db.Boolean, nullable=True)
    neg_team_approval = db.Column(db.Boolean, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    pairing = db.relationship("Pairing")
    requester = db.relationship("Account")

    @hybrid_property
    def status(self) -> str:
        return derive_status(self.aff_team_approval, self.neg_team_approval)

    @status.expression
    def status(cls):
        return case(
            (
                or_(cls.aff_team_approval.is_(False), cls.neg_team_approval.is_(False)),
                SPECTATE_REJECTED,
            ),
            (
                and_(cls.aff_team_approval.is_(True), cls.neg_team_approval.is_(True)),
                SPECTATE_APPROVED,
            ),
            else_=SPECTATE_PENDING,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status != SPECTATE_PENDING

    def to_dict(self):
        return {
            "id": self.id,
            "pairing_id": self.pairing_id,
            "requester_user_id": self.requester_id,
            "requester_name": self.requester.display_name if self.requester else None,
            "request_reason": self.request_reason,
            "aff_team_approval": self.aff_team_approval,
            "neg_team_approval": self.neg_team_approval,
            "status": self.status,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
