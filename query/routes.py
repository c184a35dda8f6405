"""
Query validation routes.
"""
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from query.forms import QueryForm
from utils.audit_logger import AuditLogger
from utils.autofix import AutoFixer
from utils.validators import RuleConfiguration, SQLValidator

query_bp = Blueprint('query', __name__, url_prefix='/api')

# Request fields that override the configured rules
RULE_OVERRIDES = {
    'requireFilterClause': 'require_filter_clause',
    'allowDrop': 'allow_drop',
    'allowTruncate': 'allow_truncate',
}


def _error(message, status):
    return jsonify({'success': False, 'error': message}), status


def _rules_for_request(payload):
    """Apply per-request overrides on top of the application's rule configuration."""
    base = current_app.config.get('RULES') or RuleConfiguration.from_mapping(current_app.config)
    overrides = {field: payload.get(key) for key, field in RULE_OVERRIDES.items() if key in payload}
    return base.with_overrides(**overrides)


def _parse_request():
    """
    Validate the request body.

    Returns (query, rules, None) on success or (None, None, error_response).
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None, None, _error('Request body is required', 400)

    if not isinstance(payload.get('query'), (str, type(None))):
        return None, None, _error('Query must be a string', 400)

    form = QueryForm()
    if not form.validate_on_submit():
        return None, None, _error(form.first_error(), 400)

    return form.query.data, _rules_for_request(payload), None


@query_bp.route('/validate', methods=['POST'])
def validate_query():
    """Validate one or more SQL statements."""
    query, rules, error = _parse_request()
    if error:
        return error

    try:
        report = SQLValidator.validate_query(query, rules, current_app.logger)
        AuditLogger.log_validation('validate', report, rules)
    except Exception as e:
        current_app.logger.error(f"Server error in /api/validate: {str(e)}")
        return _error('Internal server error', 500)

    return jsonify({'success': True, **report.to_dict()})


@query_bp.route('/auto-fix', methods=['POST'])
def auto_fix():
    """Reactivate commented-out WHERE clauses and re-validate."""
    query, rules, error = _parse_request()
    if error:
        return error

    try:
        result = AutoFixer.fix(query, rules, current_app.logger)
        AuditLogger.log_auto_fix(result, rules)
    except Exception as e:
        current_app.logger.error(f"Server error in /api/auto-fix: {str(e)}")
        return _error('Internal server error', 500)

    return jsonify({'success': True, **result.to_dict()})


@query_bp.route('/health', methods=['GET'])
def health():
    """Liveness probe."""
    return jsonify({
        'status': 'OK',
        'message': 'SQL Query Validator is running',
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })
