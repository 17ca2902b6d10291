from dataclasses import dataclass
from typing import Optional

from flask import session

from app.errors import NotAuthenticated, PermissionDenied


@dataclass(frozen=True)
class Viewer:
    """
    Who is making this request.

    Built once per request by the route (current_viewer()) and passed
    explicitly into every workflow helper. Helpers never read the session.
    """
    account_id: Optional[int] = None
    is_admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.account_id is not None


ANONYMOUS = Viewer()


def current_viewer() -> Viewer:
    account_id = session.get("account_id")
    try:
        account_id = int(account_id) if account_id is not None else None
    except (TypeError, ValueError):
        account_id = None
    return Viewer(account_id=account_id, is_admin=bool(session.get("admin_ok")))


def require_account(viewer: Viewer) -> int:
    if not viewer.is_authenticated:
        raise NotAuthenticated("Please log in first.")
    return viewer.account_id


def require_admin(viewer: Viewer) -> None:
    if not viewer.is_admin:
        raise PermissionDenied("Admin access required.")


def require_account_or_admin(viewer: Viewer) -> None:
    """An admin unlocked by password alone has no account id; let them through."""
    if not viewer.is_admin:
        require_account(viewer)


def start_account_session(account_id: int, is_admin: bool = False):
    session["account_id"] = account_id
    session["admin_ok"] = bool(is_admin)
    session.pop("login_email", None)


def clear_account_session():
    session.pop("account_id", None)
    session.pop("admin_ok", None)
    session.pop("login_email", None)
