# app.py
import importlib
import logging
import os

from flask import Flask, jsonify, request, Blueprint
from flask_cors import CORS
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config import load_config
from errors import ClassroomError
from models.base import db
from services import build_services
from utils.helpers import utcnow

# List of all blueprints to register
BLUEPRINTS = [
    ('auth', 'auth_bp'),
    ('students', 'students_bp'),
    ('dashboard', 'dashboard_bp'),
]


def configure_logging(app):
    level = getattr(logging, app.config['LOG_LEVEL'], logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )
    app.logger.setLevel(level)


def register_blueprints(app):
    """Register all blueprints"""
    print("\n" + "=" * 60)
    print("[INIT] REGISTERING BLUEPRINTS")
    print("=" * 60)

    for module_name, bp_name in BLUEPRINTS:
        module = importlib.import_module(f'routes.{module_name}')
        blueprint = getattr(module, bp_name)
        if not isinstance(blueprint, Blueprint):
            raise TypeError(f'routes.{module_name}.{bp_name} is not a Blueprint')

        app.register_blueprint(blueprint)
        print(f"   [OK] Registered '{blueprint.name}' at {blueprint.url_prefix}")

    print(f"[SUMMARY] {len(app.blueprints)}/{len(BLUEPRINTS)} blueprints registered")
    print("=" * 60 + "\n")


def setup_database(app):
    """Create the document tables (sql storage only)"""
    with app.app_context():
        print("[INIT] Setting up database...")
        from models import documents  # noqa: F401 registers the tables
        db.create_all()
        print("[OK] Database setup complete")


def restore_session(app):
    """Adopt a remembered session from the store, if any"""
    services = app.extensions['classroom']
    try:
        session = services.runner.run(services.sessions.restore())
    except ClassroomError as e:
        app.logger.error(f"Could not restore session: {e}")
        return
    if session is not None:
        print(f"[SESSION] Restored session for {session.identity}")


def register_error_handlers(app):

    @app.errorhandler(ClassroomError)
    def classroom_error(error):
        if error.status_code >= 500:
            app.logger.error(f"{error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': f'The requested endpoint {request.path} does not exist.',
            'code': 'NOT_FOUND'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': f'The method {request.method} is not allowed for this endpoint.',
            'code': 'METHOD_NOT_ALLOWED'
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Internal Server Error: {error}")
        return jsonify({
            'success': False,
            'error': 'An unexpected error occurred on the server.',
            'code': 'INTERNAL_ERROR'
        }), 500


def create_app(config_overrides=None):
    """Create and configure the Flask application"""
    app = Flask(__name__)

    # ============ CONFIGURATION ============
    app.config.update(load_config(config_overrides))
    configure_logging(app)

    # ============ INITIALIZE EXTENSIONS ============
    CORS(app, resources={r"/*": {"origins": "*"}})

    # ============ SETUP STORAGE ============
    if app.config['CLASSROOM_STORAGE'] == 'sql':
        db.init_app(app)
        setup_database(app)
    app.extensions['classroom'] = build_services(app)
    restore_session(app)

    # ============ REGISTER BLUEPRINTS ============
    register_blueprints(app)
    register_error_handlers(app)

    # ============ BASIC ROUTES ============
    @app.route('/')
    def home():
        """API home page"""
        return jsonify({
            'service': 'Classroom Roster API',
            'version': '1.0.0',
            'status': 'active',
            'storage': app.config['CLASSROOM_STORAGE'],
            'endpoints': {
                'health': '/health',
                'auth': '/auth/*',
                'students': '/students/*',
                'dashboard': '/dashboard/*'
            }
        })

    @app.route('/health')
    def health():
        """Health check endpoint"""
        services = app.extensions['classroom']
        storage_status = 'ok'
        if app.config['CLASSROOM_STORAGE'] == 'sql':
            try:
                db.session.execute(text('SELECT 1'))
            except SQLAlchemyError as e:
                storage_status = f'error: {e}'

        return jsonify({
            'status': 'healthy',
            'timestamp': utcnow().isoformat(),
            'storage': app.config['CLASSROOM_STORAGE'],
            'storage_status': storage_status,
            'live_updates': services.roster_store.supports_subscribe,
            'session_state': services.sessions.state.value,
            'registered_blueprints': list(app.blueprints.keys())
        })

    @app.route('/favicon.ico')
    def favicon():
        return '', 204

    return app


# ============ MAIN ENTRY POINT ============
if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_ENV') == 'development'

    print("\n" + "=" * 60)
    print("[START] CLASSROOM ROSTER API")
    print("=" * 60)
    print(f"[ENV] Environment: {'Development' if debug else 'Production'}")
    print(f"[PORT] Port: {port}")
    print(f"[STORAGE] Storage: {app.config['CLASSROOM_STORAGE']}")
    print(f"[URL] URL: http://localhost:{port}")
    print(f"[HEALTH] Health: http://localhost:{port}/health")
    print("=" * 60 + "\n")

    # One event loop owns the session; the reloader would start a second one
    app.run(host='0.0.0.0', port=port, debug=debug, use_reloader=False)
