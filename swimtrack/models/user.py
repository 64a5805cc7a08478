from werkzeug.security import generate_password_hash, check_password_hash

from swimtrack.extensions import db
from swimtrack.helpers.time import utcnow


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(120), nullable=False, unique=True, index=True)

    # Phonetic reading of the display name; athlete lists sort on this when present
    name_kana = db.Column(db.String(120), nullable=True)

    password_hash = db.Column(db.String(255), nullable=False)

    # "coach", "student" or "admin"
    role = db.Column(db.String(20), nullable=False, default="student")

    # Soft-disable without losing records
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    gender = db.Column(db.String(10), nullable=False, default="male")

    join_date = db.Column(db.Date, nullable=True)

    # When the athlete's all-time record keeping starts; stored and shown as-is
    all_time_start_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Deleting an athlete removes their records too
    records = db.relationship(
        "SwimRecord",
        back_populates="student",
        cascade="all, delete-orphan",
        lazy=True,
    )

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)
