from swimtrack.extensions import db
from swimtrack.helpers.time import utcnow


class Competition(db.Model):
    __tablename__ = "competitions"

    id = db.Column(db.Integer, primary_key=True)

    # Public-facing name, e.g. "Spring Short Course Meet"
    name = db.Column(db.String(200), nullable=False)
    location = db.Column(db.String(200), nullable=False)
    date = db.Column(db.Date, nullable=False)

    # regional / prefectural / national / international
    level = db.Column(db.String(20), nullable=True)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    records = db.relationship(
        "SwimRecord",
        back_populates="competition",
        passive_deletes=True,
        lazy=True,
    )
