import os
import logging
import click
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
from flask_wtf.csrf import CSRFError
from config import config
from extensions import db, migrate, login_manager, csrf, limiter


def configure_logging(app):
    """Configure application logging"""
    if not app.debug and not app.testing:
        # Create logs directory if it doesn't exist
        if not os.path.exists('logs'):
            os.mkdir('logs')

        # File handler for errors
        file_handler = RotatingFileHandler(
            'logs/fuellog.log',
            maxBytes=10240000,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s '
            '[in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        # Service modules log through their own module loggers
        logging.getLogger('services').addHandler(file_handler)
        logging.getLogger('services').setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Fuel Log startup')
    else:
        # Development logging to console
        app.logger.setLevel(logging.DEBUG)
        app.logger.info('Fuel Log startup (DEBUG mode)')


def create_app(config_name=None):
    """Application factory pattern"""

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    # Configure logging
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # Add security headers
    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses"""
        headers = app.config.get('SECURITY_HEADERS', {})
        for header, value in headers.items():
            response.headers[header] = value
        return response

    # User loader callback for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        from models.users import User
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'errors': ['Please log in to access this page.']}), 401

    # Import models to ensure they're registered with SQLAlchemy
    with app.app_context():
        import models

    # Register blueprints
    from blueprints.auth import auth_bp
    from blueprints.fuel import fuel_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(fuel_bp)

    # Create database tables
    if not app.config.get('TESTING') and app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///'):
        os.makedirs(app.instance_path, exist_ok=True)
    with app.app_context():
        db.create_all()

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_commands(app)

    return app


def register_error_handlers(app):
    """Register global error handlers"""

    @app.errorhandler(400)
    def bad_request_error(error):
        return jsonify({'success': False, 'errors': [str(error.description)]}), 400

    @app.errorhandler(403)
    def forbidden_error(error):
        return jsonify({'success': False, 'errors': ['Forbidden']}), 403

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'success': False, 'errors': ['Not found']}), 404

    @app.errorhandler(413)
    def too_large_error(error):
        return jsonify({'success': False, 'errors': ['Uploaded file is too large']}), 413

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f'Internal Server Error: {error}')
        return jsonify({'success': False, 'errors': ['Internal server error']}), 500

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        return jsonify({'success': False, 'errors': [f'CSRF token validation failed: {error.description}']}), 400


def register_commands(app):
    """Register Flask CLI commands."""

    def _find_user(email):
        from models.users import User
        user = User.find_by_email(email)
        if not user:
            click.echo(f'ERROR: No user found with email "{email}"', err=True)
        return user

    def _user_records(user):
        from models.fuel import FuelRecord
        return FuelRecord.query.filter_by(user_id=user.id).order_by(FuelRecord.date, FuelRecord.id).all()

    @app.cli.group()
    def users():
        """Manage user accounts."""
        pass

    @users.command('create')
    @click.argument('email')
    @click.argument('name')
    @click.password_option()
    def create_user(email, name, password):
        """Create an account for EMAIL."""
        from models.users import User
        from blueprints.auth.forms import validate_password_strength
        is_valid, message = validate_password_strength(password)
        if not is_valid:
            click.echo(f'ERROR: {message}', err=True)
            return
        email = email.strip().lower()
        if User.find_by_email(email):
            click.echo(f'ERROR: "{email}" already exists', err=True)
            return
        user = User(email=email, name=name, is_active=True)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        click.echo(f'SUCCESS: created "{name}" ({email})')

    @app.cli.group()
    def fuel():
        """Fuel log import, export and statistics."""
        pass

    @fuel.command('export')
    @click.argument('email')
    @click.option('--format', 'fmt', type=click.Choice(['csv', 'json', 'report']), default='csv')
    @click.option('--output', type=click.Path(dir_okay=False), help='Write to a file instead of stdout.')
    def export_records(email, fmt, output):
        """Export the fuel log of EMAIL."""
        from services.export_service import ExportService
        user = _find_user(email)
        if not user:
            return
        records = _user_records(user)
        if fmt == 'csv':
            body = ExportService.to_csv(records)
        elif fmt == 'json':
            body = ExportService.to_json(records)
        else:
            body = ExportService.monthly_report(records)
        if output:
            with open(output, 'w', encoding='utf-8') as f:
                f.write(body)
            click.echo(f'Exported {len(records)} records to {output}')
        else:
            click.echo(body)

    @fuel.command('import')
    @click.argument('email')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def import_records(email, path):
        """Import a CSV or JSON file at PATH into the fuel log of EMAIL."""
        from services.import_service import ImportService
        from services.fuel_record_service import FuelRecordService
        user = _find_user(email)
        if not user:
            return
        with open(path, 'r', encoding='utf-8-sig') as f:
            result = ImportService.parse_file(path, f.read())
        if not result['success']:
            for message in result['errors']:
                click.echo(f'ERROR: {message}', err=True)
            return
        FuelRecordService.import_records(result["data"], user_id=user.id)
        click.echo(f'SUCCESS: {result["message"]}')

    @fuel.command('stats')
    @click.argument('email')
    def show_stats(email):
        """Print headline statistics for EMAIL."""
        from services.statistics_service import StatisticsService
        user = _find_user(email)
        if not user:
            return
        stats = StatisticsService.calculate_statistics(_user_records(user))
        click.echo(f'{"Records":<28} {stats["total_records"]}')
        click.echo(f'{"Total cost":<28} {stats["total_cost"]:,}')
        click.echo(f'{"Total amount (L)":<28} {stats["total_amount"]:.1f}')
        click.echo(f'{"Total distance (km)":<28} {stats["total_distance"]:.1f}')
        click.echo(f'{"Average efficiency (km/L)":<28} {stats["average_fuel_efficiency"]:.1f}')
        click.echo(f'{"Average price (/L)":<28} {stats["average_price"]:.1f}')
        click.echo(f'{"Average cost per month":<28} {stats["average_cost_per_month"]:.0f}')
        click.echo('-' * 40)
        for month in stats['monthly_stats']:
            click.echo(
                f'{month["month"]:<9} {month["record_count"]:>3} fills '
                f'{month["total_cost"]:>8,} {month["average_fuel_efficiency"]:>6.1f}km/L'
            )


if __name__ == '__main__':
    app = create_app()
    # SECURITY: Only bind to localhost in development
    app.run(host='127.0.0.1', port=5000, debug=True)
