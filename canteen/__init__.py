"""Flask application factory."""
import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from canteen.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
    logging.getLogger('canteen').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize database
    init_db(app)

    # Error Handlers
    from canteen.exceptions import CanteenError

    @app.errorhandler(CanteenError)
    def handle_canteen_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"CanteenError [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(f"CanteenError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.exception(f"Unhandled Exception: {error}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from canteen.blueprints.customers import customers_bp
    from canteen.blueprints.catalog import catalog_bp
    from canteen.blueprints.purchases import purchases_bp

    app.register_blueprint(customers_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(purchases_bp)

    @app.get('/health')
    def health():
        return jsonify(status='ok')

    # Register CLI commands
    from canteen.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"Database: {app.config.get('SQLALCHEMY_DATABASE_URI').split('@')[-1]}")

    return app
