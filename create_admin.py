# create_admin.py
import sys

from dotenv import load_dotenv

load_dotenv()

from swimtrack import create_app
from swimtrack.config import ADMIN_PASSWORD, ADMIN_USERNAME
from swimtrack.extensions import db
from swimtrack.helpers.swim import ROLES
from swimtrack.models import User

app = create_app()


def main(username=ADMIN_USERNAME, password=ADMIN_PASSWORD, role="admin"):
    """Create the admin (or coach) account, or reset its password if it exists."""
    if role not in ROLES:
        raise SystemExit(f"Unknown role {role!r}; expected one of {', '.join(ROLES)}")

    with app.app_context():
        db.create_all()
        user = User.query.filter_by(username=username).first()
        if user:
            user.role = role
            user.set_password(password)
            print(f"Updated {role} {username}", file=sys.stderr)
        else:
            user = User(username=username, role=role, is_active=True)
            user.set_password(password)
            db.session.add(user)
            print(f"Created {role} {username}", file=sys.stderr)
        db.session.commit()

if __name__ == "__main__":
    args = sys.argv[1:]
    if len(args) >= 2:
        main(args[0], args[1], *(args[2:3]))
    else:
        main()
