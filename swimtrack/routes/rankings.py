from flask import Blueprint, current_app, jsonify, request

from swimtrack.helpers.errors import ApiError
from swimtrack.helpers.rankings import (
    calculate_growth_rankings,
    calculate_im_rankings,
    calculate_improvements,
    latest_even_month,
)
from swimtrack.helpers.records import load_record_rows

rankings_bp = Blueprint("rankings", __name__)


def _year_month_args():
    """
    Read ?year=&month=; both default to the latest even month.
    Partial input (only one of them) is a 400.
    """
    year = request.args.get("year", type=int)
    month = request.args.get("month", type=int)

    if year is None and month is None:
        return latest_even_month()
    if year is None or month is None:
        raise ApiError("year and month must be given together")
    if not 1 <= month <= 12:
        raise ApiError("month must be between 1 and 12")
    return year, month


@rankings_bp.route("/api/rankings/im")
def im_rankings():
    """
    Monthly IM podium (15m pool, 60m/120m, male/female, top 3).
    """
    year, month = _year_month_args()
    return jsonify(
        {
            "year": year,
            "month": month,
            "rankings": calculate_im_rankings(load_record_rows(), year, month),
        }
    )


@rankings_bp.route("/api/rankings/growth")
def growth_rankings():
    """
    Growth ranking between the two latest even months with IM data.

    ?limit= caps each cell; without it GROWTH_RANKING_LIMIT applies
    (unset = full list). periods is null when there isn't enough data.
    """
    limit = request.args.get("limit", type=int)
    if limit is None:
        limit = current_app.config.get("GROWTH_RANKING_LIMIT")
    if limit is not None and limit < 1:
        raise ApiError("limit must be a positive integer")

    return jsonify(calculate_growth_rankings(load_record_rows(), limit=limit))


@rankings_bp.route("/api/rankings/improvements")
def monthly_improvements():
    """Personal-best improvements set during one month, biggest first."""
    year, month = _year_month_args()
    return jsonify(
        {
            "year": year,
            "month": month,
            "improvements": calculate_improvements(load_record_rows(), year, month),
        }
    )
