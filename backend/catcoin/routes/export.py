# Overview: Flask API routes for ledger downloads.

from flask import Blueprint, Response, jsonify, request

from ..services import export_service
from catcoin.time_utils import parse_iso_date


export_bp = Blueprint("export", __name__, url_prefix="/api/export")


def _date_bounds():
    return parse_iso_date(request.args.get("start")), parse_iso_date(request.args.get("end"))


@export_bp.get("/sales/csv")
def sales_csv():
    try:
        start, end = _date_bounds()
    except ValueError:
        return jsonify({"error": "start/end must be ISO dates (YYYY-MM-DD)"}), 400

    return Response(
        export_service.sales_csv(start, end),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=sales.csv"},
    )


@export_bp.get("/sales/json")
def sales_json():
    try:
        start, end = _date_bounds()
    except ValueError:
        return jsonify({"error": "start/end must be ISO dates (YYYY-MM-DD)"}), 400

    return Response(
        export_service.sales_json(start, end),
        mimetype="application/json",
        headers={"Content-Disposition": "attachment; filename=sales.json"},
    )
