import logging
import os

from flask import current_app, url_for
from werkzeug.utils import secure_filename

from app.extensions import db
from app.errors import NotFound, PermissionDenied, ValidationError
from app.models import PairingEvidence
from app.helpers.pairings import ensure_can_view, is_participant
from app.helpers.session import Viewer, require_account, require_account_or_admin
from app.helpers.url import make_token

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"pdf", "doc", "docx", "txt", "rtf", "png", "jpg", "jpeg", "xlsx", "pptx"}


def pairing_upload_dir(pairing_id: int) -> str:
    return os.path.join(current_app.config["UPLOAD_FOLDER"], str(pairing_id))


def upload_evidence(viewer: Viewer, pairing, file_storage, description: str = None) -> PairingEvidence:
    """
    Save an uploaded file under UPLOAD_FOLDER/<pairing_id>/ and record its
    metadata with a public URL.
    """
    account_id = require_account(viewer)
    if not (viewer.is_admin or is_participant(viewer, pairing)):
        raise PermissionDenied("Only the teams in this pairing can share evidence.")

    if file_storage is None or not file_storage.filename:
        raise ValidationError("Please choose a file to upload.")

    original = secure_filename(file_storage.filename)
    ext = original.rsplit(".", 1)[-1].lower() if "." in original else ""
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"File type '.{ext}' is not allowed.")

    storage_name = f"{make_token()[:12]}_{original}"
    folder = pairing_upload_dir(pairing.id)
    os.makedirs(folder, exist_ok=True)
    path = os.path.join(folder, storage_name)
    file_storage.save(path)

    evidence = PairingEvidence(
        pairing_id=pairing.id,
        uploader_id=account_id,
        file_name=original,
        storage_name=storage_name,
        file_url=url_for("chat.evidence_file", pairing_id=pairing.id, storage_name=storage_name, _external=True),
        file_size=os.path.getsize(path),
        file_type=file_storage.mimetype,
        description=(description or "").strip() or None,
    )
    db.session.add(evidence)
    db.session.commit()
    logger.info("[EVIDENCE] %s uploaded %s to pairing %s", account_id, original, pairing.id)
    return evidence


def list_evidence(viewer: Viewer, pairing):
    ensure_can_view(viewer, pairing)
    return (
        PairingEvidence.query
        .filter_by(pairing_id=pairing.id)
        .order_by(PairingEvidence.created_at.desc(), PairingEvidence.id.desc())
        .all()
    )


def get_evidence_file(viewer: Viewer, pairing, storage_name: str) -> PairingEvidence:
    ensure_can_view(viewer, pairing)
    evidence = PairingEvidence.query.filter_by(pairing_id=pairing.id, storage_name=storage_name).first()
    if not evidence:
        raise NotFound("File not found.")
    return evidence


def delete_evidence(viewer: Viewer, evidence_id: int):
    require_account_or_admin(viewer)
    evidence = db.session.get(PairingEvidence, evidence_id)
    if not evidence:
        raise NotFound("File not found.")
    if not viewer.is_admin and evidence.uploader_id != viewer.account_id:
        raise PermissionDenied("You can only delete files you uploaded.")

    path = os.path.join(pairing_upload_dir(evidence.pairing_id), evidence.storage_name)
    if os.path.exists(path):
        os.remove(path)
    db.session.delete(evidence)
    db.session.commit()
