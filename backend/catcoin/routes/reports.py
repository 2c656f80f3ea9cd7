from flask import Blueprint, jsonify, request

from catcoin.services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/x-report")
def x_report():
    try:
        report = reporting_service.x_report(request.args.get("date"))
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
