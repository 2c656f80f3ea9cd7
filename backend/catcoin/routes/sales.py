# Overview: Flask API routes for sales; Sale-Commit and ledger reads.

# backend/catcoin/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, request, jsonify, current_app

from ..services import checkout_service, sales_service
from ..services.checkout_service import CommitError, InvalidInput
from catcoin.time_utils import parse_iso_date


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")

COMMIT_ERROR_STATUS = {
    "INVALID_INPUT": 400,
    "PRODUCT_NOT_FOUND": 404,
    "INSUFFICIENT_STOCK": 409,
    "PERSISTENCE_FAILURE": 500,
}


@sales_bp.post("")
def commit_sale_route():
    """
    Commit the register's cart as a sale.

    Body:
    - items: [{id|product_id, price, quantity}] (price = unit price when added to cart)
    - payment_method: "cash" | "card"
    - subtotal, tax, total: optional; rejected if they differ from the server's math

    Errors come back as {"error", "code", "details"}; nothing is written on failure.
    """
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise InvalidInput("Invalid JSON payload")

        sale = checkout_service.commit_sale(
            data.get("items"),
            data.get("payment_method"),
            expected_totals={k: data.get(k) for k in ("subtotal", "tax", "total")},
        )
        return jsonify(sale.to_dict()), 201

    except CommitError as e:
        return jsonify(e.to_dict()), COMMIT_ERROR_STATUS.get(e.code, 400)
    except Exception:
        current_app.logger.exception("Failed to commit sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("")
def list_sales_route():
    """
    Ledger read-all, newest first.

    Query params:
    - start, end: ISO dates (optional, inclusive)
    """
    try:
        start = parse_iso_date(request.args.get("start"))
        end = parse_iso_date(request.args.get("end"))
    except ValueError:
        return jsonify({"error": "start/end must be ISO dates (YYYY-MM-DD)"}), 400

    sales = sales_service.list_sales(start_date=start, end_date=end)
    return jsonify([s.to_dict() for s in sales]), 200


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    sale = sales_service.get_sale(sale_id)
    if not sale:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify(sale.to_dict()), 200
