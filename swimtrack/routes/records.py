from flask import Blueprint, Response, current_app, jsonify, request

from swimtrack.extensions import db
from swimtrack.helpers.auth import coach_required
from swimtrack.helpers.errors import ApiError
from swimtrack.helpers.export import records_to_csv
from swimtrack.helpers.rankings import HISTORY_SORTS, all_time_records, athlete_history, best_times_by_style
from swimtrack.helpers.records import (
    invalidate_record_cache,
    load_record_rows,
    parse_record_payload,
    record_to_row,
)
from swimtrack.helpers.swim import POOL_LENGTHS
from swimtrack.helpers.time import utcnow
from swimtrack.models import SwimRecord

records_bp = Blueprint("records", __name__)


def _pool_length_arg(default=None):
    raw = request.args.get("pool_length", request.args.get("poolLength"))
    if raw in (None, ""):
        return default
    try:
        pool_length = int(raw)
    except ValueError:
        raise ApiError("Invalid pool_length") from None
    if pool_length not in POOL_LENGTHS:
        raise ApiError("Invalid pool_length")
    return pool_length


@records_bp.route("/api/records")
def list_records():
    """
    All swim records (newest first) in the flat row shape.
    Optional ?student_id= narrows to one athlete.
    """
    student_id = request.args.get("student_id", type=int)
    return jsonify(load_record_rows(student_id=student_id))


@records_bp.route("/api/records", methods=["POST"])
@coach_required
def create_record():
    data = request.get_json(silent=True) or {}
    values = parse_record_payload(data)

    record = SwimRecord(**values)
    db.session.add(record)
    db.session.commit()
    invalidate_record_cache()

    current_app.logger.info("[RECORDS] Created record %s for athlete %s", record.id, record.student_id)
    return jsonify(record_to_row(record)), 201


@records_bp.route("/api/records/<int:record_id>", methods=["PUT"])
@coach_required
def update_record(record_id):
    record = db.get_or_404(SwimRecord, record_id, description="Record not found")

    data = request.get_json(silent=True) or {}
    # Edits from the athlete history view omit the owner; keep the existing one
    if "student_id" not in data and "studentId" not in data:
        data = dict(data, student_id=record.student_id)

    values = parse_record_payload(data)
    for key, value in values.items():
        setattr(record, key, value)

    db.session.commit()
    invalidate_record_cache()

    return jsonify(record_to_row(record))


@records_bp.route("/api/records/<int:record_id>", methods=["DELETE"])
@coach_required
def delete_record(record_id):
    record = db.get_or_404(SwimRecord, record_id, description="Record not found")
    row = record_to_row(record)

    db.session.delete(record)
    db.session.commit()
    invalidate_record_cache()

    current_app.logger.info("[RECORDS] Deleted record %s", record_id)
    return jsonify({"success": True, "message": "Record deleted", "data": row})


@records_bp.route("/api/records/competitions")
def competition_records():
    """Records swum at a competition (is_competition=True)."""
    return jsonify([r for r in load_record_rows() if r["is_competition"]])


@records_bp.route("/api/records/download")
def download_records():
    """
    CSV export of every record.

    Columns: swimmer_name, pool_length, date, style, distance, total_time,
    competition_name.
    """
    body = records_to_csv(load_record_rows())
    filename = f"swim_records_{utcnow().date().isoformat()}.csv"

    return Response(
        body,
        content_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@records_bp.route("/api/records/best-times")
def best_times():
    """
    Fastest time per style and distance.

    Query params (all optional): pool_length, style, student_id.
    Shape: {style: {distance: row}}
    """
    grouped = best_times_by_style(
        load_record_rows(),
        pool_length=_pool_length_arg(),
        style=request.args.get("style"),
        student_id=request.args.get("student_id", type=int),
    )
    return jsonify({style: {str(d): row for d, row in by_dist.items()} for style, by_dist in grouped.items()})


@records_bp.route("/api/records/all-time")
def all_time():
    """
    Team all-time bests for one pool length (default 25m).
    Shape: {distance: {style: row}}, distances ascending.
    """
    grouped = all_time_records(
        load_record_rows(),
        pool_length=_pool_length_arg(default=25),
        style=request.args.get("style"),
    )
    return jsonify({str(d): by_style for d, by_style in grouped.items()})


@records_bp.route("/api/records/history/<int:student_id>")
def history(student_id):
    """
    One athlete's records grouped by style-distance with personal bests.

    Query params:
      - style: a swim style or "all"
      - sort: date_desc (default) / date_asc / time_asc / time_desc
      - range: all (default) / 1month / 3months / 6months / 1year / custom
      - start, end: ISO dates for range=custom
    """
    sort = request.args.get("sort", "date_desc")
    if sort not in HISTORY_SORTS:
        raise ApiError(f"sort must be one of {', '.join(HISTORY_SORTS)}")

    try:
        groups = athlete_history(
            load_record_rows(student_id=student_id),
            student_id,
            style=request.args.get("style"),
            sort=sort,
            range_key=request.args.get("range", "all"),
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
    except ValueError as e:
        raise ApiError(str(e)) from None

    return jsonify(groups)
