"""
Audit logging utilities for tracking query validations.
"""
from flask import current_app, request


class AuditLogger:
    """Emits one structured log record per validation or auto-fix request."""

    @staticmethod
    def _client_address():
        try:
            return request.remote_addr
        except RuntimeError:
            # Outside of a request context
            return None

    @staticmethod
    def log_validation(endpoint, report, config=None):
        """Log the outcome of a validation.

        Dangerous input is logged at WARNING so it stands out from routine
        traffic.

        Args:
            endpoint: Name of the API endpoint that produced the report
            report: ValidationReport returned by the engine
            config: RuleConfiguration the report was produced with
        """
        extra = {
            'endpoint': endpoint,
            'client': AuditLogger._client_address(),
            'is_valid': report.is_valid,
            'statement_count': report.statement_count,
            'dangerous_count': report.dangerous_count,
            'active_filter_count': report.active_filter_count,
        }
        if config is not None:
            extra['require_filter_clause'] = config.require_filter_clause
            extra['allow_drop'] = config.allow_drop
            extra['allow_truncate'] = config.allow_truncate

        message = (
            f"{endpoint}: valid={report.is_valid} statements={report.statement_count} "
            f"dangerous={report.dangerous_count} errors={len(report.errors)} warnings={len(report.warnings)}"
        )
        if report.is_valid:
            current_app.logger.info(message, extra=extra)
        else:
            current_app.logger.warning(message, extra=extra)
        return extra

    @staticmethod
    def log_auto_fix(result, config=None):
        """Log an auto-fix outcome, including every fix that was applied."""
        extra = AuditLogger.log_validation('auto-fix', result.validation, config)
        for fix in result.fixes_applied:
            current_app.logger.info(f"auto-fix applied: {fix}", extra={'endpoint': 'auto-fix'})
        extra['fixes_applied'] = len(result.fixes_applied)
        return extra
