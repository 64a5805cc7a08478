from flask import Blueprint, current_app, jsonify, request

from swimtrack.extensions import db
from swimtrack.helpers.auth import admin_required, current_user_id
from swimtrack.helpers.errors import ApiError
from swimtrack.helpers.time import utcnow
from swimtrack.models import Announcement

announcements_bp = Blueprint("announcements", __name__)


def announcement_to_dict(a: Announcement) -> dict:
    return {
        "id": a.id,
        "content": a.content,
        "created_at": a.created_at.isoformat() if a.created_at else None,
        "updated_at": a.updated_at.isoformat() if a.updated_at else None,
        "created_by": a.created_by,
    }


def _latest():
    return (
        Announcement.query
        .order_by(Announcement.updated_at.desc(), Announcement.id.desc())
        .first()
    )


@announcements_bp.route("/api/announcements/latest")
def latest_announcement():
    latest = _latest()
    if not latest:
        return jsonify({"content": ""})
    return jsonify(announcement_to_dict(latest))


@announcements_bp.route("/api/admin/announcements", methods=["POST"])
@admin_required
def save_announcement():
    """
    Admin-only upsert of the single announcement blob.

    Updates the most recent row in place (or creates the first one) so
    there's only ever one live announcement.
    """
    data = request.get_json(silent=True) or {}
    content = data.get("content")
    if not isinstance(content, str):
        raise ApiError("content must be a string")

    announcement = _latest()
    if announcement:
        announcement.content = content.strip()
        announcement.updated_at = utcnow()
        announcement.created_by = current_user_id()
    else:
        announcement = Announcement(content=content.strip(), created_by=current_user_id())
        db.session.add(announcement)

    db.session.commit()

    current_app.logger.info("[ANNOUNCEMENTS] Announcement %s updated by %s", announcement.id, current_user_id())
    return jsonify(announcement_to_dict(announcement))
