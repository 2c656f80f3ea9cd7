# Overview: Flask API routes for the catalog; parses input and returns JSON responses.

# backend/catcoin/routes/products.py
"""
Product management routes.

PUT is a full replace: the body must carry name, price and stock; category
and emoji reset to their defaults when omitted.
"""
from flask import Blueprint, request, jsonify
from ..services import catalog_service
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price_cents", "category", "stock", "emoji"},
    required_on_create={"name", "price_cents"},
    money_fields={"price": "price_cents"},
)

PRODUCT_REPLACE_POLICY = ModelValidationPolicy(
    writable_fields=PRODUCT_POLICY.writable_fields,
    required_on_create={"name", "price_cents", "stock"},
    money_fields=PRODUCT_POLICY.money_fields,
)

# Fields the register echoes back from GET that are ignored on write
READ_ONLY_FIELDS = {"id", "created_at", "updated_at"}

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _writable_payload() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return {k: v for k, v in payload.items() if k not in READ_ONLY_FIELDS}


@products_bp.get("")
def list_products():
    """List all products ordered by category, then name."""
    return jsonify([p.to_dict() for p in catalog_service.list_products()])


@products_bp.get("/low-stock")
def low_stock():
    """
    Products at or below a stock threshold, lowest first.

    Query params:
    - threshold: int (optional, default LOW_STOCK_THRESHOLD)
    """
    threshold = request.args.get("threshold", type=int)
    if threshold is not None and threshold < 0:
        return {"error": "threshold must be >= 0"}, 400

    products = catalog_service.list_low_stock(threshold)
    return jsonify([p.to_dict() for p in products])


@products_bp.get("/<int:product_id>")
def get_product(product_id: int):
    p = catalog_service.get_product(product_id)
    if not p:
        return {"error": "Product not found"}, 404
    return p.to_dict()


@products_bp.post("")
def create_product_route():
    """Create a new product."""
    try:
        patch = validate_payload(model=Product, payload=_writable_payload(), policy=PRODUCT_POLICY)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    created = catalog_service.create_product(patch=patch)
    return created.to_dict(), 201


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    """Replace a product."""
    try:
        patch = validate_payload(
            model=Product, payload=_writable_payload(), policy=PRODUCT_REPLACE_POLICY
        )
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    updated = catalog_service.update_product(product_id=product_id, patch=patch)
    if not updated:
        return {"error": "Product not found"}, 404

    return updated.to_dict(), 200


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    """Delete a product. Historical sales keep their own copy of it."""
    deleted = catalog_service.delete_product(product_id=product_id)
    if not deleted:
        return {"error": "Product not found"}, 404

    return {"message": "Product deleted successfully"}, 200
