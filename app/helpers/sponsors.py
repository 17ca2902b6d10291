import logging
from datetime import datetime, timedelta

from flask import current_app

from app.extensions import db
from app.errors import ConflictError, NotFound, PermissionDenied, ValidationError
from app.models import SponsorApplication, SponsorInvitation, SponsorProfile, Tournament
from app.models.sponsor_profile import SPONSOR_TIERS, TIER_BLOG_POST_LIMITS
from app.helpers.email import normalize_email, send_sponsor_invitation
from app.helpers.session import Viewer, require_account, require_account_or_admin, require_admin
from app.helpers.url import hash_token, make_token

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "description", "website", "logo_url")
ADMIN_PROFILE_FIELDS = ("is_platform_partner", "partnership_notes")


def _check_tier(tier: str) -> str:
    tier = (tier or "").strip().lower()
    if tier not in SPONSOR_TIERS:
        raise ValidationError(f"Tier must be one of {', '.join(SPONSOR_TIERS)}.")
    return tier


def sponsor_profile_for(viewer: Viewer):
    if not viewer.is_authenticated:
        return None
    return SponsorProfile.query.filter_by(account_id=viewer.account_id).first()


def get_profile_or_404(profile_id: int) -> SponsorProfile:
    profile = db.session.get(SponsorProfile, profile_id)
    if not profile:
        raise NotFound("Sponsor not found.")
    return profile


def get_application_or_404(application_id: int) -> SponsorApplication:
    application = db.session.get(SponsorApplication, application_id)
    if not application:
        raise NotFound("Application not found.")
    return application


# --- Profiles ---

def create_profile(viewer: Viewer, data: dict) -> SponsorProfile:
    account_id = require_account(viewer)
    if sponsor_profile_for(viewer):
        raise ConflictError("You already have a sponsor profile.")

    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("Organization name is required.")

    profile = SponsorProfile(
        account_id=account_id,
        name=name,
        description=data.get("description"),
        website=data.get("website"),
        logo_url=data.get("logo_url"),
    )
    db.session.add(profile)
    db.session.commit()
    return profile


def update_profile(viewer: Viewer, profile: SponsorProfile, data: dict) -> SponsorProfile:
    require_account_or_admin(viewer)
    if not viewer.is_admin and profile.account_id != viewer.account_id:
        raise PermissionDenied("You can only edit your own sponsor profile.")

    fields = PROFILE_FIELDS + (ADMIN_PROFILE_FIELDS if viewer.is_admin else ())
    for key in fields:
        if key in data:
            setattr(profile, key, data[key])

    if not (profile.name or "").strip():
        raise ValidationError("Organization name is required.")

    db.session.commit()
    return profile


def approve_profile(viewer: Viewer, profile: SponsorProfile, tier: str) -> SponsorProfile:
    """Admin approval; the tier sets the blog post allowance."""
    require_admin(viewer)
    tier = _check_tier(tier)

    profile.is_approved = True
    profile.approved_tier = tier
    profile.approved_by = viewer.account_id
    profile.approved_at = datetime.utcnow()
    profile.blog_posts_limit = TIER_BLOG_POST_LIMITS[tier]
    db.session.commit()
    logger.info("[SPONSOR] Approved sponsor %s at %s tier", profile.id, tier)
    return profile


def list_profiles(approved_only: bool = True):
    q = SponsorProfile.query
    if approved_only:
        q = q.filter(SponsorProfile.is_approved.is_(True))
    return q.order_by(SponsorProfile.is_platform_partner.desc(), SponsorProfile.name.asc()).all()


# --- Applications ---

def apply_to_tournament(viewer: Viewer, tournament_id: int, data: dict) -> SponsorApplication:
    require_account(viewer)
    profile = sponsor_profile_for(viewer)
    if not profile:
        raise PermissionDenied("Create a sponsor profile before applying.")

    if not db.session.get(Tournament, tournament_id):
        raise NotFound("Tournament not found.")

    open_app = SponsorApplication.query.filter(
        SponsorApplication.sponsor_profile_id == profile.id,
        SponsorApplication.tournament_id == tournament_id,
        SponsorApplication.status.in_(("pending", "approved")),
    ).first()
    if open_app:
        raise ConflictError("You already have an application for this tournament.")

    application = SponsorApplication(
        sponsor_profile_id=profile.id,
        tournament_id=tournament_id,
        tier=_check_tier(data.get("tier")),
        offerings=data.get("offerings"),
        requests=data.get("requests"),
    )
    db.session.add(application)
    db.session.commit()
    return application


def set_application_status(viewer: Viewer, application: SponsorApplication, status: str) -> SponsorApplication:
    require_admin(viewer)
    if status not in ("approved", "rejected"):
        raise ValidationError("Status must be 'approved' or 'rejected'.")
    if application.status != "pending":
        raise ConflictError(f"This application was already {application.status}.")

    application.status = status
    application.approved_by = viewer.account_id
    application.approved_at = datetime.utcnow()
    db.session.commit()
    logger.info("[SPONSOR] Application %s %s", application.id, status)
    return application


def update_application(viewer: Viewer, application: SponsorApplication, data: dict) -> SponsorApplication:
    require_admin(viewer)
    if "tier" in data:
        application.tier = _check_tier(data["tier"])
    for key in ("offerings", "requests"):
        if key in data:
            setattr(application, key, data[key])
    db.session.commit()
    return application


def list_applications(viewer: Viewer, status: str = None):
    require_account_or_admin(viewer)
    q = SponsorApplication.query
    if not viewer.is_admin:
        profile = sponsor_profile_for(viewer)
        if not profile:
            return []
        q = q.filter(SponsorApplication.sponsor_profile_id == profile.id)
    if status:
        q = q.filter(SponsorApplication.status == status)
    return q.order_by(SponsorApplication.created_at.desc()).all()


# --- Invitations ---

def invite_sponsor(viewer: Viewer, data: dict):
    """
    Admin invites an organization by email. Returns (invitation, token);
    the raw token only exists in the email link.
    """
    require_admin(viewer)
    email = normalize_email(data.get("email"))
    if not email or "@" not in email:
        raise ValidationError("A valid email is required.")

    organization_name = (data.get("organization_name") or "").strip()
    if not organization_name:
        raise ValidationError("Organization name is required.")

    tournament_id = data.get("tournament_id") or None
    if tournament_id and not db.session.get(Tournament, tournament_id):
        raise NotFound("Tournament not found.")

    token = make_token()
    ttl_days = current_app.config.get("SPONSOR_INVITE_TTL_DAYS", 14)
    invitation = SponsorInvitation(
        email=email,
        organization_name=organization_name,
        suggested_tier=_check_tier(data.get("suggested_tier") or "bronze"),
        personal_message=data.get("personal_message"),
        tournament_id=tournament_id,
        invited_by=viewer.account_id,
        token_hash=hash_token(token),
        expires_at=datetime.utcnow() + timedelta(days=ttl_days),
    )
    db.session.add(invitation)
    db.session.commit()

    send_sponsor_invitation(invitation, token)
    return invitation, token


def invitation_for_token(token: str) -> SponsorInvitation:
    invitation = SponsorInvitation.query.filter_by(token_hash=hash_token(token or "")).first()
    if not invitation:
        raise NotFound("Invitation not found.")
    if invitation.claimed_at is not None:
        raise ConflictError("This invitation has already been used.")
    if invitation.expires_at and invitation.expires_at < datetime.utcnow():
        raise ConflictError("This invitation has expired.")
    return invitation


def claim_invitation(viewer: Viewer, token: str):
    """
    Logged-in user accepts an invitation: their sponsor profile is created
    (or reused) and, for tournament invitations, a pending application at the
    suggested tier is filed.
    """
    account_id = require_account(viewer)
    invitation = invitation_for_token(token)

    profile = sponsor_profile_for(viewer)
    if not profile:
        profile = SponsorProfile(account_id=account_id, name=invitation.organization_name)
        db.session.add(profile)
        db.session.flush()

    application = None
    if invitation.tournament_id:
        application = SponsorApplication.query.filter(
            SponsorApplication.sponsor_profile_id == profile.id,
            SponsorApplication.tournament_id == invitation.tournament_id,
            SponsorApplication.status.in_(("pending", "approved")),
        ).first()
        if not application:
            application = SponsorApplication(
                sponsor_profile_id=profile.id,
                tournament_id=invitation.tournament_id,
                tier=invitation.suggested_tier,
            )
            db.session.add(application)

    invitation.claimed_at = datetime.utcnow()
    invitation.claimed_by = account_id
    db.session.commit()
    logger.info("[SPONSOR] Invitation %s claimed by account %s", invitation.id, account_id)
    return profile, application


# --- Blog allowance ---

def consume_blog_post(profile: SponsorProfile):
    """Count one sponsor blog post against the tier allowance. Caller commits."""
    if not profile.is_approved:
        raise PermissionDenied("Your sponsor profile must be approved before posting.")
    if (profile.blog_posts_used or 0) >= (profile.blog_posts_limit or 0):
        raise ConflictError("You've used all blog posts included in your sponsorship tier.")
    profile.blog_posts_used = (profile.blog_posts_used or 0) + 1
