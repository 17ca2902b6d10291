from .index import index_bp
from .admin import admin_bp
from .auth import auth_bp
from .tournaments import tournaments_bp
from .pairings import pairings_bp
from .spectate import spectate_bp
from .judges import judges_bp
from .chat import chat_bp
from .notifications import notifications_bp
from .sponsors import sponsors_bp
from .site import site_bp
from .ballots import ballots_bp

def register_blueprints(app):
    app.register_blueprint(index_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(tournaments_bp)
    app.register_blueprint(pairings_bp)
    app.register_blueprint(spectate_bp)
    app.register_blueprint(judges_bp)
    app.register_blueprint(chat_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(sponsors_bp)
    app.register_blueprint(site_bp)
    app.register_blueprint(ballots_bp)
