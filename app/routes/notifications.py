from flask import Blueprint, current_app, request, jsonify

from app.helpers.notifications import list_notifications, mark_read, unread_count
from app.helpers.session import current_viewer, require_account


notifications_bp = Blueprint("notifications", __name__)

@notifications_bp.route("/api/notifications")
def notifications():
    viewer = current_viewer()
    require_account(viewer)
    unread_only = (request.args.get("unread") or "").lower() in ("1", "true", "yes")
    rows = list_notifications(viewer, unread_only=unread_only)
    return jsonify({
        "ok": True,
        "notifications": [n.to_dict() for n in rows],
        "unread_count": unread_count(viewer),
        "poll_interval_seconds": current_app.config.get("STATUS_POLL_SECONDS", 15),
    })

@notifications_bp.route("/api/notifications/read", methods=["POST"])
def mark_all_read():
    viewer = current_viewer()
    changed = mark_read(viewer)
    return jsonify({"ok": True, "changed": changed})

@notifications_bp.route("/api/notifications/<int:notification_id>/read", methods=["POST"])
def mark_one_read(notification_id):
    viewer = current_viewer()
    changed = mark_read(viewer, notification_id)
    return jsonify({"ok": True, "changed": changed})
