from flask import Blueprint, current_app, jsonify, request

from swimtrack.extensions import db
from swimtrack.helpers.auth import clear_session, current_role, current_user_id, establish_session, login_required
from swimtrack.helpers.errors import ApiError
from swimtrack.helpers.records import payload_str
from swimtrack.helpers.swim import GENDERS
from swimtrack.models import User

auth_bp = Blueprint("auth", __name__)

MIN_PASSWORD_LENGTH = 6


def user_to_dict(user: User) -> dict:
    """Public view of a user; never includes the password hash."""
    return {
        "id": user.id,
        "username": user.username,
        "name_kana": user.name_kana,
        "role": user.role,
        "is_active": user.is_active,
        "gender": user.gender,
        "join_date": user.join_date.isoformat() if user.join_date else None,
        "all_time_start_date": user.all_time_start_date.isoformat() if user.all_time_start_date else None,
    }


@auth_bp.route("/api/auth/login", methods=["POST"])
def login():
    """
    Username + password login.

    - 400 if either field is missing
    - 401 for unknown users, wrong passwords and disabled accounts
      (same message for all three)
    """
    data = request.get_json(silent=True) or {}
    username = payload_str(data, "username", "")
    password = payload_str(data, "password", "", strip=False)

    if not username or not password:
        raise ApiError("Username and password are required")

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password) or not user.is_active:
        current_app.logger.info("[AUTH] Failed login for %r", username)
        raise ApiError("Invalid username or password", 401)

    establish_session(user)
    current_app.logger.info("[AUTH] %s logged in as %s", user.username, user.role)
    return jsonify(user_to_dict(user))


@auth_bp.route("/api/auth/logout", methods=["POST"])
def logout():
    clear_session()
    return jsonify({"message": "Logged out"})


@auth_bp.route("/api/auth/session")
@login_required
def session_info():
    return jsonify({"user_id": current_user_id(), "role": current_role()})


@auth_bp.route("/api/auth/register", methods=["POST"])
def register():
    """
    Self-registration for athletes.

    Always creates a "student" account; coaches/admins are created by
    create_admin.py or promoted in the DB.
    """
    data = request.get_json(silent=True) or {}
    username = payload_str(data, "username", "")
    password = payload_str(data, "password", "", strip=False)
    gender = payload_str(data, "gender") or "male"
    name_kana = payload_str(data, "name_kana") or None

    if not username:
        raise ApiError("Username is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ApiError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if gender not in GENDERS:
        raise ApiError("Gender must be male or female")
    if User.query.filter_by(username=username).first():
        raise ApiError("That username is already taken")

    user = User(username=username, name_kana=name_kana, role="student", gender=gender, is_active=True)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    establish_session(user)
    current_app.logger.info("[AUTH] Registered new athlete %s", user.username)
    return jsonify(user_to_dict(user)), 201
