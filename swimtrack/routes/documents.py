import os
import uuid

from flask import Blueprint, current_app, jsonify, request, send_from_directory
from werkzeug.utils import secure_filename

from swimtrack.extensions import db
from swimtrack.helpers.auth import coach_required, current_user_id
from swimtrack.helpers.db_retry import execute_query
from swimtrack.helpers.errors import ApiError
from swimtrack.helpers.records import payload_str
from swimtrack.models import Category, Document

documents_bp = Blueprint("documents", __name__)


def document_to_dict(doc: Document) -> dict:
    return {
        "id": doc.id,
        "title": doc.title,
        "filename": doc.original_filename,
        "mime_type": doc.mime_type,
        "size_bytes": doc.size_bytes,
        "category_id": doc.category_id,
        "category_name": doc.category.name if doc.category else None,
        "uploader_id": doc.uploader_id,
        "created_at": doc.created_at.isoformat() if doc.created_at else None,
    }


def category_to_dict(cat: Category) -> dict:
    return {
        "id": cat.id,
        "name": cat.name,
        "description": cat.description,
    }


def _upload_dir() -> str:
    return current_app.config["UPLOAD_DIR"]


@documents_bp.route("/api/documents")
def list_documents():
    """All documents, newest first. Optional ?category_id= filter."""
    category_id = request.args.get("category_id", type=int)

    def _query():
        q = Document.query
        if category_id is not None:
            q = q.filter(Document.category_id == category_id)
        return q.order_by(Document.created_at.desc(), Document.id.desc()).all()

    docs = execute_query(_query, operation="documents.list")
    return jsonify([document_to_dict(d) for d in docs])


@documents_bp.route("/api/documents", methods=["POST"])
@coach_required
def upload_document():
    """
    Multipart upload.

    Form fields:
      - file (required)
      - title (optional, defaults to the filename)
      - category_id (optional, must exist)
    """
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ApiError("A file is required")

    original_name = upload.filename
    safe_name = secure_filename(original_name) or "document"

    category = None
    raw_category = (request.form.get("category_id") or "").strip()
    if raw_category:
        if not raw_category.isdigit():
            raise ApiError("Invalid category_id")
        category = db.session.get(Category, int(raw_category))
        if not category:
            raise ApiError("Category not found", 404)

    stored_name = f"{uuid.uuid4().hex}_{safe_name}"
    path = os.path.join(_upload_dir(), stored_name)
    upload.save(path)

    try:
        doc = Document(
            title=(request.form.get("title") or "").strip() or original_name,
            original_filename=original_name,
            stored_filename=stored_name,
            mime_type=upload.mimetype,
            size_bytes=os.path.getsize(path),
            category_id=category.id if category else None,
            uploader_id=current_user_id(),
        )
        db.session.add(doc)
        db.session.commit()
    except Exception:
        # No row will point at the file, so don't leave it behind
        db.session.rollback()
        os.remove(path)
        current_app.logger.warning("[DOCUMENTS] Discarded %s after a failed save", stored_name)
        raise

    current_app.logger.info("[DOCUMENTS] Uploaded %s as %s", original_name, stored_name)
    return jsonify(document_to_dict(doc)), 201


@documents_bp.route("/api/documents/<int:doc_id>/download")
def download_document(doc_id):
    doc = db.get_or_404(Document, doc_id, description="Document not found")
    return send_from_directory(
        _upload_dir(),
        doc.stored_filename,
        as_attachment=True,
        download_name=doc.original_filename,
        mimetype=doc.mime_type,
    )


@documents_bp.route("/api/documents/<int:doc_id>", methods=["DELETE"])
@coach_required
def delete_document(doc_id):
    doc = db.get_or_404(Document, doc_id, description="Document not found")
    path = os.path.join(_upload_dir(), doc.stored_filename)

    db.session.delete(doc)
    db.session.commit()

    if os.path.exists(path):
        os.remove(path)
    else:
        current_app.logger.warning("[DOCUMENTS] File for document %s already missing: %s", doc_id, path)

    return jsonify({"message": "Document deleted"})


@documents_bp.route("/api/categories")
def list_categories():
    cats = execute_query(
        lambda: Category.query.order_by(Category.name.asc()).all(),
        operation="categories.list",
    )
    return jsonify([category_to_dict(c) for c in cats])


@documents_bp.route("/api/categories", methods=["POST"])
@coach_required
def create_category():
    data = request.get_json(silent=True) or {}
    name = payload_str(data, "name", "")
    if not name:
        raise ApiError("Category name is required")
    if Category.query.filter_by(name=name).first():
        raise ApiError("That category already exists")

    cat = Category(name=name, description=payload_str(data, "description") or None)
    db.session.add(cat)
    db.session.commit()

    return jsonify(category_to_dict(cat)), 201
