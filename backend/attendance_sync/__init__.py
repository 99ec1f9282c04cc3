"""Offline Attendance Sync API - Application Factory."""
import logging
import os
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

SERVICE_NAME = 'Offline Attendance Sync API'
SERVICE_VERSION = '1.0.0'

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from attendance_sync.config import get_config, check_required_settings
    config_class = get_config(config_name)
    check_required_settings(config_class)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    @app.route('/api/health')
    def health_check():
        return jsonify({
            'success': True,
            'status': 'healthy',
            'service': SERVICE_NAME,
            'version': SERVICE_VERSION,
            'timestamp': datetime.now(timezone.utc).isoformat()
        })

    return app


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from attendance_sync.api.auth import auth_bp
    from attendance_sync.api.students import students_bp
    from attendance_sync.api.sections import sections_bp
    from attendance_sync.api.attendance import attendance_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(students_bp, url_prefix='/api/students')
    app.register_blueprint(sections_bp, url_prefix='/api/sections')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')

    # Swagger UI
    from attendance_sync.utils.swagger import (
        SWAGGER_URL, API_URL, generate_swagger_spec, get_swagger_blueprint
    )

    @app.route(API_URL)
    def swagger_spec():
        """Serve Swagger/OpenAPI specification."""
        return jsonify(generate_swagger_spec(SERVICE_VERSION))

    app.register_blueprint(get_swagger_blueprint(SERVICE_NAME), url_prefix=SWAGGER_URL)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from werkzeug.exceptions import HTTPException
    from attendance_sync.utils.errors import (
        BatchShapeError, ResourceConflictError, ResourceNotFoundError, StoreUnavailableError
    )
    from attendance_sync.utils.helpers import handle_error, error_response

    @app.errorhandler(BatchShapeError)
    def batch_shape_error(error):
        return error_response(
            'Validation failed', 400, code='VALIDATION_ERROR', details=error.details
        )

    @app.errorhandler(ResourceNotFoundError)
    def resource_not_found(error):
        return error_response(str(error), 404, code='NOT_FOUND')

    @app.errorhandler(ResourceConflictError)
    def resource_conflict(error):
        db.session.rollback()
        return error_response(str(error), 409, code='CONFLICT')

    @app.errorhandler(StoreUnavailableError)
    def store_unavailable(error):
        db.session.rollback()
        app.logger.error('Attendance store unavailable: %s', error)
        return error_response(
            'Attendance store is temporarily unavailable', 503, code='STORE_UNAVAILABLE'
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return handle_error(e.description, e.code)

    @app.errorhandler(Exception)
    def internal_error(error):
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', error)
        return handle_error('Internal server error', 500)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return error_response('Token has expired', 401, code='TOKEN_EXPIRED')

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return error_response('Invalid token', 401, code='TOKEN_INVALID')

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return error_response('Authorization token required', 401, code='TOKEN_MISSING')


def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    app.logger.setLevel(getattr(logging, app.config.get('LOG_LEVEL', 'INFO')))

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        app.logger.info('%s startup', SERVICE_NAME)


def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models so metadata is complete
        from attendance_sync.models import (  # noqa: F401
            Faculty, Section, Student,
            AttendanceLog, AttendanceStatus, CaptureMethod
        )


def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('seed-db')
    def seed_db():
        """Seed database with sample faculty, sections and students."""
        from attendance_sync.services.seed_service import SeedService

        try:
            summary = SeedService.seed_all()
            click.echo(
                f"Database seeded: {summary['faculty']} faculty, "
                f"{summary['sections']} sections, {summary['students']} students"
            )
        except Exception as e:
            db.session.rollback()
            click.echo(f'Error seeding database: {str(e)}')

    @app.cli.command('create-faculty')
    def create_faculty():
        """Create a faculty account."""
        from attendance_sync.services.auth_service import AuthService

        username = click.prompt('Username')
        name = click.prompt('Full name')
        email = click.prompt('Email')
        password = click.prompt('Password', hide_input=True, confirmation_prompt=True)

        faculty, error = AuthService.create_faculty(
            username=username, name=name, email=email, password=password
        )
        if error:
            click.echo(f'Error creating faculty: {error}')
        else:
            click.echo(f'Faculty created: {faculty.username}')
