# Overview: Flask API routes for JSON backup and restore.

import json

from flask import Blueprint, request, jsonify, current_app

from ..services import backup_service
from ..validation import ValidationError
from ..decorators import require_auth, require_capability
from ..permissions import BACKUP

backup_bp = Blueprint("backup", __name__, url_prefix="/api/backup")


@backup_bp.get("")
@require_auth
@require_capability(BACKUP)
def export_backup_route():
    return jsonify(backup_service.export_backup()), 200


@backup_bp.post("")
@require_auth
@require_capability(BACKUP)
def restore_backup_route():
    """
    Replace transactions, traders and catalog with a backup document.

    Accepts the document as the JSON body or as a multipart "backup" file.
    """
    if "backup" in request.files:
        try:
            document = json.load(request.files["backup"].stream)
        except (ValueError, UnicodeDecodeError):
            return jsonify({"error": "Backup file is not valid JSON"}), 400
    else:
        document = request.get_json(silent=True)

    try:
        counts = backup_service.restore_backup(document)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to restore backup")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"restored": counts}), 200
