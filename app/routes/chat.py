from flask import Blueprint, current_app, request, jsonify, send_from_directory

from app.errors import ValidationError
from app.helpers.chat import can_post, list_messages, post_message
from app.helpers.evidence import (
    delete_evidence, get_evidence_file, list_evidence, pairing_upload_dir, upload_evidence,
)
from app.helpers.pairings import get_pairing_or_404
from app.helpers.session import current_viewer


chat_bp = Blueprint("chat", __name__)

@chat_bp.route("/api/pairings/<int:pairing_id>/messages")
def messages(pairing_id):
    """
    Poll for new messages:
      GET /api/pairings/<id>/messages?after=<last message id>
    """
    viewer = current_viewer()
    pairing = get_pairing_or_404(pairing_id)

    try:
        after_id = int(request.args.get("after") or 0)
        limit = min(int(request.args.get("limit") or 200), 500)
    except ValueError:
        raise ValidationError("'after' and 'limit' must be numbers.")

    rows = list_messages(viewer, pairing, after_id=after_id, limit=limit)
    return jsonify({
        "ok": True,
        "messages": [m.to_dict(viewer.account_id) for m in rows],
        "last_id": rows[-1].id if rows else after_id,
        "can_post": can_post(viewer, pairing),
        "poll_interval_seconds": current_app.config.get("CHAT_POLL_SECONDS", 10),
    })

@chat_bp.route("/api/pairings/<int:pairing_id>/messages", methods=["POST"])
def send_message(pairing_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    msg = post_message(
        viewer, get_pairing_or_404(pairing_id),
        data.get("message"), (data.get("message_type") or "text").strip(),
    )
    return jsonify({"ok": True, "message": msg.to_dict(viewer.account_id)}), 201

# --- Evidence ---

@chat_bp.route("/api/pairings/<int:pairing_id>/evidence")
def evidence_list(pairing_id):
    viewer = current_viewer()
    rows = list_evidence(viewer, get_pairing_or_404(pairing_id))
    return jsonify({"ok": True, "evidence": [e.to_dict() for e in rows]})

@chat_bp.route("/api/pairings/<int:pairing_id>/evidence", methods=["POST"])
def evidence_upload(pairing_id):
    """Multipart form: `file` plus optional `description`."""
    viewer = current_viewer()
    evidence = upload_evidence(
        viewer, get_pairing_or_404(pairing_id),
        request.files.get("file"), request.form.get("description"),
    )
    return jsonify({"ok": True, "evidence": evidence.to_dict()}), 201

@chat_bp.route("/api/evidence/<int:evidence_id>", methods=["DELETE"])
def evidence_delete(evidence_id):
    viewer = current_viewer()
    delete_evidence(viewer, evidence_id)
    return jsonify({"ok": True})

@chat_bp.route("/files/pairings/<int:pairing_id>/<path:storage_name>")
def evidence_file(pairing_id, storage_name):
    viewer = current_viewer()
    pairing = get_pairing_or_404(pairing_id)
    evidence = get_evidence_file(viewer, pairing, storage_name)
    return send_from_directory(
        pairing_upload_dir(pairing.id),
        evidence.storage_name,
        download_name=evidence.file_name,
    )
