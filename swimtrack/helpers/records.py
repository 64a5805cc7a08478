from typing import Optional

from swimtrack.extensions import db
from swimtrack.helpers.db_retry import execute_query
from swimtrack.helpers.errors import ApiError
from swimtrack.helpers.query_cache import get_query_cache
from swimtrack.helpers.swim import POOL_LENGTHS, SWIM_STYLES, is_allowed_distance
from swimtrack.helpers.time import is_valid_time, parse_date, time_to_seconds
from swimtrack.models import Competition, SwimRecord, User

RECORDS_CACHE_PREFIX = "records"

# snake_case field -> camelCase name the web client posts
_PAYLOAD_ALIASES = {
    "pool_length": "poolLength",
    "student_id": "studentId",
    "is_competition": "isCompetition",
    "competition_id": "competitionId",
    "competition_name": "competitionName",
    "competition_location": "competitionLocation",
    "name_kana": "nameKana",
    "is_active": "isActive",
    "join_date": "joinDate",
    "all_time_start_date": "allTimeStartDate",
}


def payload_value(data: dict, name: str, default=None):
    if name in data:
        return data[name]
    alias = _PAYLOAD_ALIASES.get(name)
    if alias and alias in data:
        return data[alias]
    return default


def payload_has(data: dict, name: str) -> bool:
    return name in data or _PAYLOAD_ALIASES.get(name) in data


def payload_str(data: dict, name: str, default=None, strip=True):
    """
    String field, stripped unless strip=False. Null or missing gives `default`;
    any other JSON type is a 400.
    """
    value = payload_value(data, name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ApiError(f"{name} must be a string")
    return value.strip() if strip else value


def payload_bool(data: dict, name: str, default=False) -> bool:
    """JSON true/false only; strings like "false" are rejected rather than coerced."""
    value = payload_value(data, name)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ApiError(f"{name} must be true or false")
    return value


def record_to_row(record: SwimRecord, athlete: Optional[User] = None) -> dict:
    """Flat, denormalized record row used by the API and by helpers.rankings."""
    athlete = athlete if athlete is not None else record.student
    return {
        "id": record.id,
        "student_id": record.student_id,
        "athlete_name": (athlete.username if athlete else None) or "Unknown",
        "gender": (athlete.gender if athlete else None) or "male",
        "athlete_all_time_start_date": (
            athlete.all_time_start_date.isoformat() if athlete and athlete.all_time_start_date else None
        ),
        "style": record.style,
        "distance": record.distance,
        "time": record.time,
        "date": record.date.isoformat() if record.date else None,
        "pool_length": record.pool_length,
        "is_competition": bool(record.is_competition),
        "competition_id": record.competition_id,
        "competition_name": record.competition_name,
        "competition_location": record.competition_location,
    }


def load_record_rows(student_id: Optional[int] = None, force_refresh: bool = False) -> list:
    """
    All records joined with their athlete, newest first.

    Cached per student filter; every record/athlete mutation invalidates the
    "records" prefix.
    """
    def _query():
        q = (
            db.session.query(SwimRecord, User)
            .outerjoin(User, SwimRecord.student_id == User.id)
            .filter(SwimRecord.student_id.isnot(None))
        )
        if student_id is not None:
            q = q.filter(SwimRecord.student_id == student_id)
        q = q.order_by(SwimRecord.date.desc(), SwimRecord.id.desc())
        return [record_to_row(r, u) for r, u in q.all()]

    cache = get_query_cache()
    key = cache.make_key(RECORDS_CACHE_PREFIX, {"student_id": student_id})
    return cache.get_or_set(
        key,
        lambda: execute_query(_query, operation="records.list"),
        force_refresh=force_refresh,
    )


def invalidate_record_cache():
    get_query_cache().invalidate(RECORDS_CACHE_PREFIX)


def _as_int(value, label):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ApiError(f"Invalid {label}") from None


def parse_record_payload(data: dict) -> dict:
    """
    Validate a create/update payload and return SwimRecord column values.

    Required: style, distance, time, date. pool_length defaults to 25.
    Raises ApiError(400) with a user-facing message on the first problem.
    """
    style = payload_str(data, "style", "")
    time_str = payload_str(data, "time", "")
    raw_distance = payload_value(data, "distance")
    raw_date = payload_value(data, "date")

    if not style or raw_distance in (None, "") or not time_str or not raw_date:
        raise ApiError("style, distance, time and date are required")

    if style not in SWIM_STYLES:
        raise ApiError(f"Unknown style: {style}")

    if not is_valid_time(time_str):
        raise ApiError("Time must be in MM:SS.hh format")

    if time_to_seconds(time_str) <= 0:
        raise ApiError("Time must be greater than zero")

    distance = _as_int(raw_distance, "distance")
    pool_length = _as_int(payload_value(data, "pool_length", 25), "pool_length")

    if pool_length not in POOL_LENGTHS:
        raise ApiError(f"Pool length must be one of {', '.join(str(p) for p in POOL_LENGTHS)}m")

    if not is_allowed_distance(pool_length, distance):
        raise ApiError(f"{distance}m is not a valid distance for a {pool_length}m pool")

    try:
        record_day = parse_date(raw_date)
    except ValueError:
        raise ApiError("Invalid date") from None

    student_id = payload_value(data, "student_id")
    if student_id in (None, ""):
        raise ApiError("student_id is required")
    student_id = _as_int(student_id, "student_id")
    student = db.session.get(User, student_id)
    if not student:
        raise ApiError("Athlete not found", 404)

    competition_id = payload_value(data, "competition_id")
    competition = None
    if competition_id not in (None, ""):
        competition = db.session.get(Competition, _as_int(competition_id, "competition_id"))
        if not competition:
            raise ApiError("Competition not found", 404)

    competition_name = payload_str(data, "competition_name") or None
    competition_location = payload_str(data, "competition_location") or None
    if competition:
        # Keep denormalized copies so the record outlives the competition row
        competition_name = competition_name or competition.name
        competition_location = competition_location or competition.location

    return {
        "student_id": student.id,
        "style": style,
        "distance": distance,
        "time": time_str,
        "date": record_day,
        "pool_length": pool_length,
        "is_competition": payload_bool(data, "is_competition") or competition is not None,
        "competition_id": competition.id if competition else None,
        "competition_name": competition_name,
        "competition_location": competition_location,
    }
