from flask import Blueprint, Response, jsonify, request

from udh.decorators import require_auth, require_capability
from udh.permissions import REPORTS
from udh.services import reporting_service

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")

MIMETYPES = {
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@reports_bp.get("/<kind>")
@require_auth
@require_capability(REPORTS)
def export_report(kind: str):
    """Download sales, inventory or customers as csv (default) or xlsx."""
    mode = request.args.get("mode", "sales")
    fmt = request.args.get("format", "csv").lower()

    try:
        report = reporting_service.build_report(kind, mode)
        body = reporting_service.render(report, fmt)
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400

    return Response(
        body,
        mimetype=MIMETYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{report.filename(fmt)}"'},
    )
