"""
Reporting Blueprint — public, read-only aggregates for the dashboards.

  GET /api/v1/reports/summary
  GET /api/v1/reports/monthly-distribution
  GET /api/v1/reports/status-distribution
  GET /api/v1/reports/recent-activity?limit=10
  GET /api/v1/reports/account-managers
  GET /api/v1/reports/priority-distribution
  GET /api/v1/reports/phase-distribution
  GET /api/v1/reports/by-end-month
  GET /api/v1/reports/simple-summary
"""

from flask import Blueprint

from pmo_dashboard.services import report_service
from pmo_dashboard.utils.errors import api_success
from pmo_dashboard.utils.helpers import parse_int_param

report_bp = Blueprint("report_bp", __name__, url_prefix="/api/v1/reports")

MAX_RECENT = 100


@report_bp.route("/summary", methods=["GET"])
def summary():
    return api_success(report_service.summary())


@report_bp.route("/monthly-distribution", methods=["GET"])
def monthly_distribution():
    return api_success(report_service.monthly_distribution())


@report_bp.route("/status-distribution", methods=["GET"])
def status_distribution():
    return api_success(report_service.status_distribution())


@report_bp.route("/recent-activity", methods=["GET"])
def recent_activity():
    limit = parse_int_param("limit", default=10, maximum=MAX_RECENT)
    return api_success(report_service.recent_activity(limit))


@report_bp.route("/account-managers", methods=["GET"])
def account_managers():
    return api_success(report_service.account_managers())


@report_bp.route("/priority-distribution", methods=["GET"])
def priority_distribution():
    return api_success(report_service.priority_distribution())


@report_bp.route("/phase-distribution", methods=["GET"])
def phase_distribution():
    return api_success(report_service.phase_distribution())


@report_bp.route("/by-end-month", methods=["GET"])
def by_end_month():
    return api_success(report_service.by_end_month())


@report_bp.route("/simple-summary", methods=["GET"])
def simple_summary():
    return api_success(report_service.simple_summary())
