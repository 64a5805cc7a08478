from functools import wraps
from typing import Optional

from flask import abort, session

from swimtrack.helpers.swim import COACH_ROLES
from swimtrack.models import User


def establish_session(user: User) -> None:
    """
    Single source of truth for login session flags.
    Always reset first so a previous user's role can't leak through.
    """
    session.clear()
    session["user_id"] = user.id
    session["role"] = user.role
    session.permanent = True


def clear_session() -> None:
    session.clear()


def current_user_id() -> Optional[int]:
    return session.get("user_id")


def current_role() -> Optional[str]:
    return session.get("role")


def role_required(*roles):
    """
    Decorator for JSON endpoints:
    - 401 when nobody is logged in
    - 403 when the session role isn't one of `roles`
    """
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user_id():
                abort(401, description="Login required")
            if roles and current_role() not in roles:
                abort(403, description="You don't have permission to do that")
            return view(*args, **kwargs)
        return wrapped
    return decorator


login_required = role_required()
coach_required = role_required(*COACH_ROLES)
admin_required = role_required("admin")
