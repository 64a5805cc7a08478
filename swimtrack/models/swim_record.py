from datetime import date

from swimtrack.extensions import db


class SwimRecord(db.Model):
    __tablename__ = "swim_records"

    id = db.Column(db.Integer, primary_key=True)

    student_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # One of helpers.swim.SWIM_STYLES
    style = db.Column(db.String(40), nullable=False)

    # Metres; must be allowed for pool_length (helpers.swim.ALLOWED_DISTANCES)
    distance = db.Column(db.Integer, nullable=False)

    # "MM:SS.hh" as entered; compared via helpers.time.time_to_seconds
    time = db.Column(db.String(16), nullable=False)

    date = db.Column(db.Date, nullable=False, default=date.today, index=True)

    pool_length = db.Column(db.Integer, nullable=False, default=25)

    is_competition = db.Column(db.Boolean, nullable=False, default=False)

    competition_id = db.Column(
        db.Integer,
        db.ForeignKey("competitions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Denormalized copies survive competition deletion
    competition_name = db.Column(db.String(200), nullable=True)
    competition_location = db.Column(db.String(200), nullable=True)

    student = db.relationship("User", back_populates="records")
    competition = db.relationship("Competition", back_populates="records")
