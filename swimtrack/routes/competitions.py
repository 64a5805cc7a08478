from flask import Blueprint, current_app, jsonify, request

from swimtrack.extensions import db
from swimtrack.helpers.auth import coach_required
from swimtrack.helpers.db_retry import execute_query
from swimtrack.helpers.errors import ApiError
from swimtrack.helpers.records import invalidate_record_cache, payload_str
from swimtrack.helpers.swim import COMPETITION_LEVELS
from swimtrack.helpers.time import parse_date
from swimtrack.models import Competition, SwimRecord

competitions_bp = Blueprint("competitions", __name__)


def competition_to_dict(comp: Competition) -> dict:
    return {
        "id": comp.id,
        "name": comp.name,
        "location": comp.location,
        "date": comp.date.isoformat() if comp.date else None,
        "level": comp.level,
        "description": comp.description,
        "created_at": comp.created_at.isoformat() if comp.created_at else None,
    }


def _apply_payload(comp: Competition, data: dict, partial=False):
    """
    Copy validated fields from the payload onto comp.
    name/location/date are required on create; on update only sent fields change.
    """
    for key in ("name", "location"):
        if key in data or not partial:
            value = payload_str(data, key, "")
            if not value:
                raise ApiError(f"{key} is required")
            setattr(comp, key, value)

    if "date" in data or not partial:
        try:
            day = parse_date(data.get("date"))
        except ValueError:
            day = None
        if not day:
            raise ApiError("A valid date is required")
        comp.date = day

    if "level" in data:
        level = payload_str(data, "level") or None
        if level and level not in COMPETITION_LEVELS:
            raise ApiError(f"level must be one of {', '.join(COMPETITION_LEVELS)}")
        comp.level = level

    if "description" in data:
        comp.description = payload_str(data, "description") or None


@competitions_bp.route("/api/competitions")
def list_competitions():
    """All competitions, most recent first."""
    def _query():
        return Competition.query.order_by(Competition.date.desc(), Competition.id.desc()).all()

    comps = execute_query(_query, operation="competitions.list")
    return jsonify([competition_to_dict(c) for c in comps])


@competitions_bp.route("/api/competitions/<int:comp_id>")
def get_competition(comp_id):
    comp = db.get_or_404(Competition, comp_id, description="Competition not found")
    return jsonify(competition_to_dict(comp))


@competitions_bp.route("/api/competitions", methods=["POST"])
@coach_required
def create_competition():
    comp = Competition()
    _apply_payload(comp, request.get_json(silent=True) or {})

    db.session.add(comp)
    db.session.commit()

    current_app.logger.info("[COMPETITIONS] Created competition %s (%s)", comp.id, comp.name)
    return jsonify(competition_to_dict(comp)), 201


@competitions_bp.route("/api/competitions/<int:comp_id>", methods=["PUT"])
@coach_required
def update_competition(comp_id):
    comp = db.get_or_404(Competition, comp_id, description="Competition not found")
    _apply_payload(comp, request.get_json(silent=True) or {}, partial=True)

    db.session.commit()
    return jsonify(competition_to_dict(comp))


@competitions_bp.route("/api/competitions/<int:comp_id>", methods=["DELETE"])
@coach_required
def delete_competition(comp_id):
    """
    Delete a competition.

    Records that referenced it are detached (competition_id -> NULL) but keep
    their denormalized competition_name/location.
    """
    comp = db.get_or_404(Competition, comp_id, description="Competition not found")

    detached = (
        SwimRecord.query
        .filter(SwimRecord.competition_id == comp.id)
        .update({SwimRecord.competition_id: None}, synchronize_session=False)
    )
    db.session.delete(comp)
    db.session.commit()
    invalidate_record_cache()

    current_app.logger.info(
        "[COMPETITIONS] Deleted competition %s; detached %d record(s)", comp_id, detached
    )
    return jsonify({"message": "Competition deleted"})
