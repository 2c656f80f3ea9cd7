# Overview: Flask API routes for daily aggregates.

from flask import Blueprint, jsonify, request

from ..services import stats_service
from ..validation import ValidationError


stats_bp = Blueprint("stats", __name__, url_prefix="/api/stats")


@stats_bp.get("/today")
def today():
    return jsonify(stats_service.get_today_stats()), 200


@stats_bp.get("/range")
def stats_range():
    """Inclusive date range, newest first. Query params: start, end (YYYY-MM-DD)."""
    try:
        rows = stats_service.get_stats_range(request.args.get("start"), request.args.get("end"))
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(rows), 200


@stats_bp.get("/recent")
def recent():
    days = request.args.get("days", 7, type=int)
    try:
        rows = stats_service.get_recent_stats(days)
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(rows), 200


@stats_bp.get("/<date>")
def by_date(date: str):
    try:
        return jsonify(stats_service.get_stats_for_date(date)), 200
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400


@stats_bp.get("/<date>/reconcile")
def reconcile(date: str):
    """Compare the stored aggregate with the ledger. Read-only; repair is CLI-only."""
    try:
        return jsonify(stats_service.reconcile(date)), 200
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400
