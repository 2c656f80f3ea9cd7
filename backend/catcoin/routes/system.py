# backend/catcoin/routes/system.py
"""
System health and version endpoints.

Health checks cover the database and the register invariants operators care
about (negative stock, today's aggregate vs. ledger).
"""

import sys
import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Product, Sale, DailyStat
from ..services import stats_service
from catcoin.time_utils import business_date, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        product_count = db.session.query(Product).count()
        sale_count = db.session.query(Sale).count()
        stat_days = db.session.query(DailyStat).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "products": product_count,
                "sales": sale_count,
                "daily_stats": stat_days,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_ledger_health() -> dict:
    """
    Today's aggregate must match the ledger; stock should never be negative.
    """
    start_time = time.time()
    try:
        result = stats_service.reconcile(business_date())
        negative = db.session.query(Product).filter(Product.stock < 0).count()

        elapsed_ms = (time.time() - start_time) * 1000

        warnings = []
        if not result["matches"]:
            warnings.append(f"daily_stats mismatch: {', '.join(result['mismatched_fields'])}")
        if negative:
            warnings.append(f"{negative} product(s) with negative stock")

        return {
            "status": "degraded" if warnings else "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "warnings": warnings,
            "details": {
                "date": result["date"],
                "stats_match_ledger": result["matches"],
                "negative_stock_products": negative,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Ledger health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Ledger check error"
        }


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: healthy or degraded (still operational)
    - 503: one or more checks unhealthy
    """
    start_time = time.time()

    database_health = check_database_health()
    ledger_health = check_ledger_health()

    all_checks = [database_health, ledger_health]
    unhealthy_count = sum(1 for check in all_checks if check["status"] == "unhealthy")
    degraded_count = sum(1 for check in all_checks if check["status"] == "degraded")

    if unhealthy_count > 0:
        overall_status = "unhealthy"
        http_status = 503
    elif degraded_count > 0:
        overall_status = "degraded"
        http_status = 200  # Degraded is still operational
    else:
        overall_status = "healthy"
        http_status = 200

    total_elapsed_ms = (time.time() - start_time) * 1000

    response = {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round(total_elapsed_ms, 2),
        "checks": {
            "database": database_health,
            "ledger": ledger_health,
        }
    }

    return response, http_status


@system_bp.get("/version")
def version():
    """Non-sensitive deployment info."""
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": "1.0.0",
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": utcnow().isoformat() + "Z",
        "tax_rate": str(current_app.config["TAX_RATE"]),
    }
