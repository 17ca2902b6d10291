from flask import Blueprint, current_app, jsonify

from app.helpers.session import current_viewer

index_bp = Blueprint("index", __name__)

@index_bp.route("/")
@index_bp.route("/api/health")
def index():
    viewer = current_viewer()
    return jsonify({
        "ok": True,
        "service": "debate-tournament",
        "logged_in": viewer.is_authenticated,
        "is_admin": viewer.is_admin,
        "poll": {
            "chat_seconds": current_app.config.get("CHAT_POLL_SECONDS", 10),
            "status_seconds": current_app.config.get("STATUS_POLL_SECONDS", 15),
        },
    })
