from .index import index_bp
from .auth import auth_bp
from .records import records_bp
from .athletes import athletes_bp
from .competitions import competitions_bp
from .documents import documents_bp
from .announcements import announcements_bp
from .rankings import rankings_bp

def register_blueprints(app):
    app.register_blueprint(index_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(records_bp)
    app.register_blueprint(athletes_bp)
    app.register_blueprint(competitions_bp)
    app.register_blueprint(documents_bp)
    app.register_blueprint(announcements_bp)
    app.register_blueprint(rankings_bp)
