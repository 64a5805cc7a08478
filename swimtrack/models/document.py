from swimtrack.extensions import db
from swimtrack.helpers.time import utcnow


class Document(db.Model):
    __tablename__ = "documents"

    id = db.Column(db.Integer, primary_key=True)

    title = db.Column(db.String(200), nullable=False)

    # Name the uploader's browser sent (used for the download filename)
    original_filename = db.Column(db.String(255), nullable=False)

    # Name on disk under UPLOAD_DIR, unique per upload
    stored_filename = db.Column(db.String(255), nullable=False, unique=True)

    mime_type = db.Column(db.String(120), nullable=True)
    size_bytes = db.Column(db.Integer, nullable=False, default=0)

    category_id = db.Column(
        db.Integer,
        db.ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    uploader_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    category = db.relationship("Category", back_populates="documents")
    uploader = db.relationship("User")
