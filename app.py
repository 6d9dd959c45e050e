"""
WanderLust Availability - listing calendar and booking-conflict service
Flask application factory and initialization
"""

import os
import sqlite3
import click
import logging
from flask import Flask, g
from flask_wtf.csrf import CSRFError
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager, csrf

# Import database functions
from database import close_db, init_db

from utils.api_response import api_error
from utils.errors import AvailabilityError
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    if config_name == 'production':
        config[config_name].validate()

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    from services.payments import PaymentProcessor

    # Initialize Flask-Login
    login_manager.init_app(app)
    # Initialize CSRF Protection
    csrf.init_app(app)
    # Payment processor client
    app.extensions['payments'] = PaymentProcessor.from_config(app.config)


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.auth.routes import auth_bp
    from blueprints.availability import availability_bp
    from blueprints.bookings import bookings_bp

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(availability_bp, url_prefix='/listings')
    app.register_blueprint(bookings_bp, url_prefix='/bookings')

    @app.route('/health')
    def health():
        """Liveness probe."""
        return {'status': 'ok', 'version': app.config.get('APP_VERSION')}


def register_error_handlers(app):
    """Register JSON error handlers."""

    def rollback():
        db = g.get('db')
        if db is not None and db.in_transaction:
            db.rollback()

    @app.errorhandler(AvailabilityError)
    def availability_error(error):
        """Validation, not found, conflict and authorization errors."""
        if error.status >= 500:
            rollback()
        return api_error(error.message, status=error.status, **error.to_dict())

    @app.errorhandler(sqlite3.DatabaseError)
    def database_error(error):
        """Persistence failures: logged in full, generic message to the user."""
        rollback()
        logger.error(f"[Database] {error}", exc_info=True)
        return api_error(MESSAGES['persistence_failed'], status=500)

    @app.errorhandler(CSRFError)
    def csrf_error(error):
        """Handle missing or expired CSRF tokens."""
        return api_error(error.description, status=400)

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return api_error('Not found', status=404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        """Handle 405 errors."""
        return api_error('Method not allowed', status=405)

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        rollback()
        return api_error(MESSAGES['persistence_failed'], status=500)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-user')
    @click.argument('username')
    @click.argument('email')
    @click.option('--full-name', default=None, help='Display name')
    @click.password_option()
    def create_user_command(username, email, full_name, password):
        """Create a new user."""
        from models.user import create_user

        with app.app_context():
            try:
                user_id = create_user(
                    username=username,
                    email=email,
                    password=password,
                    full_name=full_name
                )
                click.echo(f'User created successfully! ID: {user_id}')
            except sqlite3.IntegrityError as e:
                click.echo(f'Error creating user: {str(e)}', err=True)

    @app.cli.command('create-listing')
    @click.argument('owner_id', type=int)
    @click.argument('title')
    @click.argument('base_price', type=float)
    @click.option('--location', default=None, help='Free text location')
    def create_listing_command(owner_id, title, base_price, location):
        """Create a listing owned by a user."""
        from models.listing import create_listing

        with app.app_context():
            try:
                listing_id = create_listing(
                    owner_id, title, base_price,
                    location=location, currency=app.config['CURRENCY']
                )
                click.echo(f'Listing created successfully! ID: {listing_id}')
            except (AvailabilityError, sqlite3.IntegrityError) as e:
                click.echo(f'Error creating listing: {str(e)}', err=True)


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/availability.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        # Module loggers ([Booking], [Availability]...) propagate to root
        root = logging.getLogger()
        root.addHandler(file_handler)
        root.setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('WanderLust Availability startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)
        logging.getLogger().setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
