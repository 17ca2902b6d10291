import logging

from flask import current_app
from markupsafe import escape
import resend

logger = logging.getLogger(__name__)

EMAIL_WRAPPER = """
  <div style="font-family: system-ui, -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; padding: 16px;">
    {body}
  </div>
"""

def normalize_email(email: str) -> str:
    return (email or "").strip().lower()

def admin_emails() -> set:
    raw = current_app.config.get("ADMIN_EMAILS") or ""
    return {e.strip().lower() for e in raw.split(",") if e.strip()}

def is_admin_email(email: str) -> bool:
    """Return True if this email is configured as an admin."""
    if not email:
        return False
    return normalize_email(email) in admin_emails()

def send_email(to: str, subject: str, body_html: str, tag: str = "EMAIL") -> bool:
    """
    Send one email through Resend.

    - If RESEND_API_KEY is not set, just log it (local dev) and report not sent.
    - Send failures are logged and reported, never retried.
    """
    api_key = current_app.config.get("RESEND_API_KEY")
    if not api_key:
        logger.info("[%s - DEV ONLY] %s -> %s", tag, to, subject)
        return False

    resend.api_key = api_key
    try:
        params = {
            "from": current_app.config.get("RESEND_FROM_EMAIL"),
            "to": [to],
            "subject": subject,
            "html": EMAIL_WRAPPER.format(body=body_html),
        }
        resend.Emails.send(params)
        logger.info("[%s] Sent to %s", tag, to)
        return True
    except Exception as e:
        # Don't crash the request if email fails; just log it.
        logger.warning("[%s] Failed to send via Resend: %s", tag, e)
        return False

def send_login_code_via_email(email: str, code: str) -> bool:
    ttl = current_app.config.get("LOGIN_CODE_TTL_MINUTES", 10)
    if not current_app.config.get("RESEND_API_KEY"):
        logger.info("[LOGIN CODE - DEV ONLY] %s -> %s", email, code)
        return False

    body = f"""
      <p>Hi debater 👋</p>
      <p>Your tournament login code is:</p>
      <p style="font-size: 24px; font-weight: 700; letter-spacing: 4px; margin: 12px 0;">{code}</p>
      <p>This code will expire in {ttl} minutes. If you didn’t request this, you can ignore this email.</p>
    """
    return send_email(email, "Your tournament login code", body, tag="LOGIN CODE")

def send_registration_confirmation(registration) -> bool:
    """
    Confirmation email after a team registers for a tournament.
    """
    tournament = registration.tournament
    site_url = current_app.config.get("SITE_URL", "")
    url = f"{site_url}/tournaments/{tournament.slug}"

    body = f"""
      <p>Hi {escape(registration.participant_name)},</p>
      <p>You’re registered for <strong>{escape(tournament.name)}</strong> as <strong>{escape(registration.team_name)}</strong>.</p>
      <p>Pairings will appear on the tournament page once each round is released:</p>
      <p style="font-size: 12px; word-break: break-all;">{url}</p>
    """
    return send_email(
        registration.participant_email,
        f"Registration confirmed: {tournament.name}",
        body,
        tag="REGISTRATION",
    )

def send_judge_account_email(judge_profile) -> bool:
    """
    Email a judge whose account was provisioned by an admin.
    """
    site_url = current_app.config.get("SITE_URL", "")
    body = f"""
      <p>Hi {escape(judge_profile.name)},</p>
      <p>A tournament admin has created a judge account for you.</p>
      <p>Log in with this email address to see the rounds you can judge:</p>
      <p style="font-size: 12px; word-break: break-all;">{site_url}/login</p>
    """
    return send_email(judge_profile.email, "Your judge account is ready", body, tag="JUDGE ACCOUNT")

def send_sponsor_invitation(invitation, token: str) -> bool:
    """
    Email a sponsor invitation link; only the token hash is stored, so this is
    the one place the raw token leaves the server.
    """
    site_url = current_app.config.get("SITE_URL", "")
    invite_url = f"{site_url}/sponsor/invite/{token}"

    tournament_line = ""
    if invitation.tournament:
        tournament_line = f"<p>The invitation is for <strong>{escape(invitation.tournament.name)}</strong>.</p>"

    message_line = ""
    if invitation.personal_message:
        message_line = f"<p><em>{escape(invitation.personal_message)}</em></p>"

    body = f"""
      <p>Hello {escape(invitation.organization_name)},</p>
      <p>You’ve been invited to sponsor at the <strong>{invitation.suggested_tier.title()}</strong> tier.</p>
      {tournament_line}
      {message_line}
      <p style="margin: 12px 0;">
        <a href="{invite_url}" style="display: inline-block; padding: 10px 14px; border-radius: 10px; background: #1a2942; color: #fff; text-decoration: none;">
          Accept invitation
        </a>
      </p>
      <p style="font-size: 12px; word-break: break-all;">{invite_url}</p>
    """
    return send_email(invitation.email, "You're invited to sponsor a debate tournament", body, tag="SPONSOR INVITE")
