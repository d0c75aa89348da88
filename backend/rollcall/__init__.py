"""Rollcall - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from rollcall.config import get_config
    config_class = get_config(config_name)
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

    # Calendar day time zone, checked once at startup
    setup_attendance_clock(app)

    # Identity provider verification
    setup_identity(app)

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
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Rollcall',
            'version': '1.0.0'
        })

    return app


def setup_attendance_clock(app: Flask) -> None:
    """Fail fast on an unknown ``ATTENDANCE_TIMEZONE``."""
    from rollcall.utils.dates import zone_for

    zone = zone_for(app.config.get('ATTENDANCE_TIMEZONE'))
    app.logger.info('Attendance days follow %s', zone)


def setup_identity(app: Flask) -> None:
    """Attach the ID token verifier used by sign-in, enrollment and check-in."""
    from rollcall.services.identity_service import IdentityVerifier

    app.extensions['identity_verifier'] = IdentityVerifier(
        audience=app.config.get('GOOGLE_CLIENT_ID'),
        issuers=app.config.get('IDENTITY_ISSUERS'),
        jwks_url=app.config.get('IDENTITY_JWKS_URL'),
        timeout=app.config.get('IDENTITY_HTTP_TIMEOUT', 5),
        require_verified_email=app.config.get('IDENTITY_REQUIRE_VERIFIED_EMAIL', True)
    )


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from flask_swagger_ui import get_swaggerui_blueprint
    from rollcall.api.auth import auth_bp
    from rollcall.api.batches import batches_bp
    from rollcall.api.enrollment import enrollment_bp
    from rollcall.api.tokens import tokens_bp
    from rollcall.api.attendance import attendance_bp
    from rollcall.api.reports import reports_bp
    from rollcall.utils.swagger import SWAGGER_URL, API_URL, generate_swagger_spec

    # Auth
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    # Instructor management
    app.register_blueprint(batches_bp, url_prefix='/api/batches')
    app.register_blueprint(reports_bp, url_prefix='/api/reports')

    # Core Features
    app.register_blueprint(enrollment_bp, url_prefix='/api')
    app.register_blueprint(tokens_bp, url_prefix='/api/token')
    app.register_blueprint(attendance_bp, url_prefix='/api')

    # Swagger UI
    @app.route(API_URL)
    def swagger_spec():
        """Serve Swagger/OpenAPI specification."""
        return jsonify(generate_swagger_spec())

    swaggerui_bp = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={'app_name': "Rollcall API"}
    )
    app.register_blueprint(swaggerui_bp, url_prefix=SWAGGER_URL)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from rollcall.errors import RollcallError, InvalidCredential
    from rollcall.utils.helpers import handle_error
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(RollcallError)
    def handle_rollcall_error(error):
        app.logger.info('%s: %s', error.code, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error(error, 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify(InvalidCredential('Your session has expired. Please sign in again.').to_dict()), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify(InvalidCredential('Invalid session token').to_dict()), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify(InvalidCredential('Authorization token required').to_dict()), 401


def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('Rollcall startup')


def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models
        from rollcall.models import (  # noqa: F401
            Instructor, Batch, Student, Enrollment,
            DailyToken, AttendanceRecord
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

    @app.cli.command('create-instructor')
    def create_instructor():
        """Create an instructor account."""
        from rollcall.models.instructor import Instructor

        email = click.prompt('Instructor email')
        name = click.prompt('Instructor name')
        password = click.prompt('Password', hide_input=True, confirmation_prompt=True)

        if Instructor.query.filter_by(email=email.lower().strip()).first():
            click.echo(f'Instructor already exists: {email}')
            return

        instructor = Instructor(email=email.lower().strip(), name=name)
        instructor.set_password(password)
        instructor.save()
        click.echo(f'Instructor created: {email}')

    @app.cli.command('seed-demo')
    def seed_demo():
        """Seed database with a demo instructor and batch."""
        from rollcall.services.seed_service import SeedService

        result = SeedService.seed_demo()
        click.echo(f"Instructor: {result['instructor_email']} / {result['instructor_password']}")
        click.echo(f"Batch: {result['batch_name']} ({result['batch_id']})")
        click.echo(f"Enrollment link: {result['enrollment_url']}")
