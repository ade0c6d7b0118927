"""
Flask application factory.

Creates and configures the Flask app, registers all blueprints.
"""
import logging

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException

from dealflow.errors import ApiError

logger = logging.getLogger('dealflow')


def _register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return jsonify({'error': e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.error("Unhandled error on %s %s", request.method, request.path, exc_info=True)
        return jsonify({'error': str(e) or 'Internal server error'}), 500


def _register_cors(app, allowed_origins):
    @app.after_request
    def add_cors_headers(resp):
        origin = request.headers.get('Origin')
        if '*' in allowed_origins:
            resp.headers['Access-Control-Allow-Origin'] = '*'
        elif origin and origin in allowed_origins:
            resp.headers['Access-Control-Allow-Origin'] = origin
            resp.headers['Vary'] = 'Origin'
        else:
            return resp
        resp.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, DELETE, OPTIONS'
        resp.headers['Access-Control-Allow-Headers'] = 'Authorization, Content-Type, X-Webhook-Secret'
        return resp


def create_app(settings=None):
    """Create and configure the Flask application."""
    from dealflow.config import load_settings
    from dealflow.database import configure_database
    from dealflow.logging_config import configure_logging
    from dealflow.services.identity import IdentityProvider

    if settings is None:
        settings = load_settings()

    configure_logging(settings)

    app = Flask(__name__)
    app.config['SETTINGS'] = settings
    app.json.sort_keys = False

    configure_database(settings.database_url)
    app.extensions['identity_provider'] = IdentityProvider(
        settings.supabase_url, settings.supabase_service_key,
    )

    if not settings.identity_configured:
        logger.warning("SUPABASE_URL/SUPABASE_SERVICE_KEY not set — all bearer requests will be rejected")
    if not settings.mail_configured:
        logger.warning("SMTP settings incomplete — direct outreach email is disabled")
    if not settings.webhook_secret_configured:
        logger.warning("WEBHOOK_SECRET not set — external outreach webhook is open")

    _register_error_handlers(app)
    _register_cors(app, settings.cors_allowed_origins)

    # Register blueprints
    from dealflow.routes.health import bp as health_bp
    from dealflow.routes.deals import bp as deals_bp
    from dealflow.routes.webhook import bp as webhook_bp
    from dealflow.routes.users import bp as users_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(deals_bp)
    app.register_blueprint(webhook_bp)
    app.register_blueprint(users_bp)

    # Import models so Base.metadata knows about them.
    # Schema is managed by Alembic — no create_all() call.
    import importlib
    importlib.import_module('dealflow.models.deal')
    importlib.import_module('dealflow.models.webhook_log')
    importlib.import_module('dealflow.models.user_profile')

    return app
