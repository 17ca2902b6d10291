"""Errors raised by the tournament workflows.

Every helper raises one of these instead of returning an error tuple; a
single handler registered in ``create_app`` turns them into
``{"ok": false, "error": "..."}`` JSON responses with the right status code.
"""

from flask import jsonify
from werkzeug.exceptions import HTTPException

from app.extensions import db


# ========== Base Application Exception ==========


class TournamentError(Exception):
    """Base exception for all workflow errors.

    Carries a user-facing message and the HTTP status it maps to.
    """

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


# ========== Generic Exceptions ==========


class ValidationError(TournamentError):
    """Raised when submitted data is malformed or missing a required field."""

    status_code = 400


class NotAuthenticated(TournamentError):
    """Raised when an operation needs a logged-in account."""

    status_code = 401


class PermissionDenied(TournamentError):
    """Raised when the viewer is not allowed to perform the operation."""

    status_code = 403


class NotFound(TournamentError):
    """Raised when a referenced record does not exist."""

    status_code = 404


class ConflictError(TournamentError):
    """Raised when the operation clashes with the current record state."""

    status_code = 409


# ========== Pairing Exceptions ==========


class InvalidTransitionError(ConflictError):
    """Raised when a pairing status change is not allowed from its current status."""

    pass


# ========== Judge Exceptions ==========


class NoJudgeProfileError(PermissionDenied):
    """Raised when a viewer without a judge profile tries to judge."""

    def __init__(self, message: str = "You must have a judge profile to volunteer"):
        super().__init__(message)


class JudgeConflictError(ConflictError):
    """Raised when a judge has a registered conflict with a team in the pairing."""

    def __init__(self, message: str = "You have a conflict with one of the teams in this pairing"):
        super().__init__(message)


class JudgeAlreadyAssignedError(ConflictError):
    """Raised when a pairing already has a judge."""

    def __init__(self, message: str = "This pairing already has a judge"):
        super().__init__(message)


def register_error_handlers(app):
    @app.errorhandler(TournamentError)
    def handle_tournament_error(err):
        # Drop anything the failed operation staged
        db.session.rollback()
        app.logger.info("[ERROR %s] %s", err.status_code, err.message)
        return jsonify({"ok": False, "error": err.message}), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({"ok": False, "error": err.description}), err.code
