"""
SQL Query Validator
A Flask web application that checks SQL text for dangerous statements before it is executed.
"""
import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from utils.validators import RuleConfiguration

# Load environment variables
load_dotenv()

# Initialize Flask app
app = Flask(__name__)

# Configuration
app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
app.config['MAX_QUERY_LENGTH'] = int(os.getenv('MAX_QUERY_LENGTH', 100000))
app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Rule configuration: defaults for every request, overridable per request
app.config['RULES_REQUIRE_WHERE'] = os.getenv('RULES_REQUIRE_WHERE', 'true')
app.config['RULES_ALLOW_DROP'] = os.getenv('RULES_ALLOW_DROP', 'false')
app.config['RULES_ALLOW_TRUNCATE'] = os.getenv('RULES_ALLOW_TRUNCATE', 'false')
app.config['RULES'] = RuleConfiguration.from_mapping(app.config)

app.logger.setLevel(getattr(logging, app.config['LOG_LEVEL'], logging.INFO))


# Security headers
@app.after_request
def set_security_headers(response):
    """Set security headers for all responses."""
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Content-Security-Policy'] = "default-src 'self' 'unsafe-inline'"
    # Validation results must never be served from a cache
    response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
    response.headers['Pragma'] = 'no-cache'
    response.headers['Expires'] = '0'
    return response


# Routes
@app.route('/')
def index():
    """Serve the validator page."""
    return app.send_static_file('index.html')


# Error handlers
@app.errorhandler(400)
def bad_request(error):
    """400 Bad Request error handler."""
    return jsonify({'success': False, 'error': 'Bad request'}), 400


@app.errorhandler(404)
def not_found(error):
    """404 handler: unknown API paths get JSON, everything else gets the page."""
    if request.path.startswith('/api/'):
        return jsonify({'success': False, 'error': 'Not found'}), 404
    return app.send_static_file('index.html')


@app.errorhandler(405)
def method_not_allowed(error):
    """405 Method Not Allowed error handler."""
    return jsonify({'success': False, 'error': 'Method not allowed'}), 405


@app.errorhandler(500)
def internal_error(error):
    """500 Internal Server Error handler."""
    return jsonify({'success': False, 'error': 'Internal server error'}), 500


@app.errorhandler(Exception)
def unhandled_exception(error):
    """Log anything that escaped a route and answer with a generic 500."""
    if isinstance(error, HTTPException):
        return error
    app.logger.error(f"Unhandled error on {request.path}: {str(error)}")
    return internal_error(error)


# Register blueprints
from query.routes import query_bp

app.register_blueprint(query_bp)


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=int(os.getenv('PORT', 5000)))
