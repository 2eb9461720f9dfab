# ruralcare_app_pkg/__init__.py

import os

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import configure_mappers
from werkzeug.exceptions import HTTPException

# Load environment variables from .env file.
load_dotenv()

# Import configurations
from .config import get_config

# Initialize extensions at the top level, but without an app context.
# This is a standard pattern to avoid circular imports.
db = SQLAlchemy()
migrate = Migrate()

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'migrations')


def create_app(config_name='development', test_config=None):
    """
    Application factory function.

    Lifecycle: load config -> bind extensions -> register blueprints ->
    open the store (migrate, seed if empty) -> ready.
    """
    app = Flask(__name__)

    # Load configuration based on the environment
    app.config.from_object(get_config(config_name))
    if test_config:
        app.config.update(test_config)

    # Initialize extensions with the app context
    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR)

    # socketio is imported here, after the app is created, to avoid a circular import
    from .sockets import socketio
    socketio.init_app(app, cors_allowed_origins=app.config.get('FRONTEND_URL'))

    # --- Import and register Blueprints INSIDE create_app ---
    from .auth.routes import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    from .admin.routes import admin_bp
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    from .patients.routes import patients_bp
    app.register_blueprint(patients_bp, url_prefix='/api')

    from .doctors.routes import doctors_bp
    app.register_blueprint(doctors_bp, url_prefix='/api')

    from .appointments.routes import appointments_bp
    app.register_blueprint(appointments_bp, url_prefix='/api')

    from .availability.routes import availability_bp
    app.register_blueprint(availability_bp, url_prefix='/api')

    from .consultations.routes import consultations_bp
    app.register_blueprint(consultations_bp, url_prefix='/api')

    from .vitals.routes import vitals_bp
    app.register_blueprint(vitals_bp, url_prefix='/api')

    from .medications.routes import medications_bp
    app.register_blueprint(medications_bp, url_prefix='/api')

    from .prescriptions.routes import prescriptions_bp
    app.register_blueprint(prescriptions_bp, url_prefix='/api')

    from .reports.routes import reports_bp
    app.register_blueprint(reports_bp, url_prefix='/api')

    # Backref attributes (Appointment.patient etc.) exist only once the mappers are configured
    configure_mappers()

    from .store import init_store, register_store_commands
    register_store_commands(app)
    init_store(app)

    @app.route('/health')
    def health_check():
        return jsonify({"status": "ok", "message": "Rural Health API running"}), 200

    # Centralized error handling
    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        if e.code >= 500:
            app.logger.error(f"HTTP {e.code}: {e.description}")
        elif e.code == 404:
            app.logger.info(f"Not Found: {e.description}")
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e):
        app.logger.error(f"Database Error: {e}")
        db.session.rollback()
        return jsonify({"error": "A database error occurred."}), 500

    @app.errorhandler(Exception)
    def handle_generic_error(e):
        app.logger.error(f"An unexpected error occurred: {e}", exc_info=True)
        db.session.rollback()
        return jsonify({"error": "An unexpected server error occurred."}), 500

    return app
