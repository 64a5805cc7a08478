from flask import jsonify
from werkzeug.exceptions import HTTPException

from swimtrack.extensions import db


class ApiError(Exception):
    """A client-facing error: message goes into the JSON body as-is."""

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return jsonify({"message": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.exception("[ERROR] Unhandled exception: %s", e)
        db.session.rollback()
        return jsonify({"message": "Internal server error"}), 500
