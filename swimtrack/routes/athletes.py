import secrets

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func

from swimtrack.extensions import db
from swimtrack.helpers.auth import coach_required
from swimtrack.helpers.db_retry import execute_query
from swimtrack.helpers.errors import ApiError
from swimtrack.helpers.records import invalidate_record_cache, payload_has, payload_str, payload_value
from swimtrack.helpers.swim import GENDERS
from swimtrack.helpers.time import parse_date
from swimtrack.models import User
from swimtrack.routes.auth import user_to_dict

athletes_bp = Blueprint("athletes", __name__)


def _get_athlete_or_404(athlete_id) -> User:
    athlete = User.query.filter_by(id=athlete_id, role="student").first()
    if not athlete:
        raise ApiError("Athlete not found", 404)
    return athlete


def _clean_gender(data, fallback="male"):
    gender = payload_str(data, "gender") or fallback
    if gender not in GENDERS:
        raise ApiError("Gender must be male or female")
    return gender


def _clean_date(data, name):
    try:
        return parse_date(payload_value(data, name))
    except ValueError:
        raise ApiError(f"Invalid {name}") from None


@athletes_bp.route("/api/athletes")
def list_athletes():
    """
    All student accounts, ordered by kana reading (falling back to username).
    """
    def _query():
        return (
            User.query
            .filter(User.role == "student")
            .order_by(func.coalesce(User.name_kana, User.username).asc())
            .all()
        )

    athletes = execute_query(_query, operation="athletes.list")
    return jsonify([user_to_dict(a) for a in athletes])


@athletes_bp.route("/api/athletes", methods=["POST"])
@coach_required
def create_athlete():
    """
    Coach-created athlete.

    The account gets a random password; the athlete sets a real one via the
    coach or re-registers. Username must be unique.
    """
    data = request.get_json(silent=True) or {}
    username = payload_str(data, "username", "")
    if not username:
        raise ApiError("Athlete name is required")

    if User.query.filter_by(username=username).first():
        raise ApiError("That athlete name is already in use")

    athlete = User(
        username=username,
        name_kana=payload_str(data, "name_kana") or None,
        role="student",
        is_active=True,
        gender=_clean_gender(data),
        join_date=_clean_date(data, "join_date"),
        all_time_start_date=_clean_date(data, "all_time_start_date"),
    )
    athlete.set_password(payload_str(data, "password", strip=False) or secrets.token_urlsafe(16))
    db.session.add(athlete)
    db.session.commit()

    current_app.logger.info("[ATHLETES] Created athlete %s (%s)", athlete.id, athlete.username)
    return jsonify(user_to_dict(athlete)), 201


@athletes_bp.route("/api/athletes/<int:athlete_id>", methods=["PUT"])
@coach_required
def update_athlete(athlete_id):
    """
    Partial update: only the fields present in the payload change.
    Sending null for name_kana / join_date / all_time_start_date clears them.
    """
    athlete = _get_athlete_or_404(athlete_id)
    data = request.get_json(silent=True) or {}

    username = payload_str(data, "username") or athlete.username
    if username != athlete.username:
        if User.query.filter_by(username=username).first():
            raise ApiError("That username is already in use")
        athlete.username = username

    if payload_has(data, "name_kana"):
        athlete.name_kana = payload_str(data, "name_kana") or None

    if payload_str(data, "gender"):
        athlete.gender = _clean_gender(data)

    if payload_has(data, "join_date"):
        athlete.join_date = _clean_date(data, "join_date")

    if payload_has(data, "all_time_start_date"):
        athlete.all_time_start_date = _clean_date(data, "all_time_start_date")

    password = payload_str(data, "password", strip=False)
    if password:
        athlete.set_password(password)

    db.session.commit()
    # Record rows carry the athlete's name, gender and all-time start date
    invalidate_record_cache()

    return jsonify(user_to_dict(athlete))


@athletes_bp.route("/api/athletes/<int:athlete_id>/status", methods=["PATCH"])
@coach_required
def update_athlete_status(athlete_id):
    athlete = _get_athlete_or_404(athlete_id)
    data = request.get_json(silent=True) or {}

    is_active = payload_value(data, "is_active")
    if not isinstance(is_active, bool):
        raise ApiError("is_active must be true or false")

    athlete.is_active = is_active
    db.session.commit()

    return jsonify(user_to_dict(athlete))


@athletes_bp.route("/api/athletes/<int:athlete_id>", methods=["DELETE"])
@coach_required
def delete_athlete(athlete_id):
    """Delete an athlete and (via cascade) every record they own."""
    athlete = _get_athlete_or_404(athlete_id)
    record_count = len(athlete.records)

    db.session.delete(athlete)
    db.session.commit()
    invalidate_record_cache()

    current_app.logger.info(
        "[ATHLETES] Deleted athlete %s and %d record(s)", athlete_id, record_count
    )
    return jsonify({"message": "Athlete and their records were deleted"})
