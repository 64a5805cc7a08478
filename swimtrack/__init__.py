import os

from flask import Flask

from .config import Config
from .extensions import db
from swimtrack.helpers.errors import register_error_handlers
from swimtrack.helpers.query_cache import QueryCache


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Ranking payloads are ordered dicts (distances ascending)
    app.json.sort_keys = False

    db.init_app(app)

    # One cache per app; routes reach it through get_query_cache()
    app.extensions["query_cache"] = QueryCache(ttl=app.config["QUERY_CACHE_TTL"])

    os.makedirs(app.config["UPLOAD_DIR"], exist_ok=True)

    register_error_handlers(app)

    from swimtrack.routes import register_blueprints
    register_blueprints(app)

    return app
