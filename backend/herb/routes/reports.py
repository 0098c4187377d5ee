# Overview: Flask API routes for reports; parses query parameters and returns JSON report payloads.

"""
Reporting endpoints.

All reports are read-only views computed over the current document.
Cancelled and rejected orders never count as sales.

Query params (where applicable):
- start, end: ISO-8601 dates or datetimes (inclusive range on order_date/created_at)
- limit: top-N for product-performance (default 10)
"""
from flask import Blueprint, request

from ..decorators import require_permission
from ..services import reporting_service
from ..services.reporting_service import ReportError

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _range_args():
    return {
        "start": request.args.get("start") or None,
        "end": request.args.get("end") or None,
    }


@reports_bp.get("/stock-status")
@require_permission("reports:read")
def stock_status_route():
    return reporting_service.stock_status()


@reports_bp.get("/sales-summary")
@require_permission("reports:read")
def sales_summary_route():
    try:
        return reporting_service.sales_summary(**_range_args())
    except ReportError as e:
        return {"message": str(e)}, 400


@reports_bp.get("/product-performance")
@require_permission("reports:read")
def product_performance_route():
    limit = request.args.get("limit", default=10, type=int)
    try:
        return reporting_service.product_performance(limit=limit, **_range_args())
    except ReportError as e:
        return {"message": str(e)}, 400


@reports_bp.get("/sales-reps")
@require_permission("reports:read")
def sales_reps_route():
    try:
        return reporting_service.sales_rep_performance(**_range_args())
    except ReportError as e:
        return {"message": str(e)}, 400


@reports_bp.get("/customers")
@require_permission("reports:read")
def customers_route():
    try:
        return reporting_service.customer_analytics(**_range_args())
    except ReportError as e:
        return {"message": str(e)}, 400
