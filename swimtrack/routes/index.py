from flask import Blueprint, jsonify

from swimtrack.helpers.records import load_record_rows

index_bp = Blueprint("index", __name__)

RECENT_ACTIVITY_LIMIT = 5


@index_bp.route("/health")
def health():
    return jsonify({"status": "ok"})


@index_bp.route("/api/recent-activities")
def recent_activities():
    """
    The latest few records for the dashboard feed.
    Rows are already newest-first from load_record_rows().
    """
    rows = load_record_rows()[:RECENT_ACTIVITY_LIMIT]
    return jsonify(
        [
            {
                "id": r["id"],
                "type": "record",
                "date": r["date"],
                "style": r["style"],
                "distance": r["distance"],
                "time": r["time"],
                "athlete_name": r["athlete_name"],
            }
            for r in rows
        ]
    )
