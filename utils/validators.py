"""
SQL query validation utilities.
"""
import logging
import re
from dataclasses import dataclass, replace

from utils.reports import StatementReport, ValidationReport


_log = logging.getLogger(__name__)


def _env_flag(value, default):
    """Interpret a config value ('true', '0', True, None, ...) as a boolean."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class RuleConfiguration:
    """Which checks are enforced for a validation call."""
    require_filter_clause: bool = True
    allow_drop: bool = False
    allow_truncate: bool = False

    @classmethod
    def from_mapping(cls, mapping):
        """Build from a config mapping such as ``app.config``."""
        return cls(
            require_filter_clause=_env_flag(mapping.get('RULES_REQUIRE_WHERE'), True),
            allow_drop=_env_flag(mapping.get('RULES_ALLOW_DROP'), False),
            allow_truncate=_env_flag(mapping.get('RULES_ALLOW_TRUNCATE'), False),
        )

    def with_overrides(self, **overrides):
        """Return a copy with the given fields replaced; None keeps the current value."""
        changes = {k: _env_flag(v, getattr(self, k)) for k, v in overrides.items()}
        return replace(self, **changes)


DEFAULT_RULES = RuleConfiguration()


class SQLValidator:
    """Validates SQL statements for missing or disabled filter clauses."""

    # DML keywords that require WHERE clause
    DML_KEYWORDS_REQUIRING_WHERE = ('UPDATE', 'DELETE')

    COMMENT_MARKERS = ('--', '//')

    ACTIVE_WHERE_RE = re.compile(r'\bwhere\b\s+[^\s;]', re.IGNORECASE)
    COMMENT_LINE_WHERE_RE = re.compile(r'\bwhere\b\s+\S', re.IGNORECASE)
    INLINE_COMMENTED_WHERE_RES = (
        re.compile(r'[^-\s]\s*--\s*where\b', re.IGNORECASE),
        re.compile(r'[^/\s]\s*//\s*where\b', re.IGNORECASE),
    )

    @staticmethod
    def split_statements(query, logger=None):
        """Split raw input on ';' into trimmed, non-empty statements.

        Semicolons inside string literals are treated as boundaries too.
        """
        if not query:
            return []
        statements = [s.strip() for s in query.split(';') if s.strip()]
        (logger or _log).debug("Split input into %d statement(s)", len(statements))
        return statements

    @staticmethod
    def clean_query(query):
        """Remove comments and normalize whitespace."""
        # Remove single-line comments
        query_clean = re.sub(r'--.*$', '', query, flags=re.MULTILINE)
        query_clean = re.sub(r'//.*$', '', query_clean, flags=re.MULTILINE)
        # Remove multi-line comments
        query_clean = re.sub(r'/\*.*?\*/', '', query_clean, flags=re.DOTALL)
        # Normalize whitespace
        query_clean = ' '.join(query_clean.split())
        return query_clean.strip()

    @staticmethod
    def get_query_type(query):
        """Leading keyword of the statement, uppercased ('UNKNOWN' if none)."""
        tokens = SQLValidator.clean_query(query).split()
        return tokens[0].upper() if tokens else 'UNKNOWN'

    @staticmethod
    def _code_part(line):
        """Strip everything from the first line comment marker onward."""
        code = line.strip()
        for marker in SQLValidator.COMMENT_MARKERS:
            idx = code.find(marker)
            if idx != -1:
                code = code[:idx]
        return code

    @staticmethod
    def _is_comment_line(line):
        return line.strip().startswith(SQLValidator.COMMENT_MARKERS)

    @staticmethod
    def has_active_where(statement):
        """Check for a WHERE clause outside of line comments."""
        return any(
            SQLValidator.ACTIVE_WHERE_RE.search(SQLValidator._code_part(line))
            for line in statement.split('\n')
            if not SQLValidator._is_comment_line(line)
        )

    @staticmethod
    def has_commented_where(statement):
        """Check for a WHERE clause that was written but commented out."""
        for line in statement.split('\n'):
            if SQLValidator._is_comment_line(line) and SQLValidator.COMMENT_LINE_WHERE_RE.search(line.strip()):
                return True
            if any(pattern.search(line) for pattern in SQLValidator.INLINE_COMMENTED_WHERE_RES):
                return True
        return False

    @staticmethod
    def extract_commented_where(statement):
        """
        Locate the first commented-out WHERE clause.

        Returns (line_number, code_before_marker, clause) with a 0-based line
        number, or None when no line carries a commented WHERE.
        """
        for line_number, line in enumerate(statement.split('\n')):
            for marker in SQLValidator.COMMENT_MARKERS:
                idx = line.find(marker)
                if idx == -1:
                    continue
                clause = line[idx + len(marker):].strip()
                if clause.upper().startswith('WHERE'):
                    return line_number, line[:idx], clause
        return None

    @staticmethod
    def validate_statement(statement, index=1, config=None, logger=None):
        """Apply the rule set to one statement and return a StatementReport."""
        config = config or DEFAULT_RULES
        logger = logger or _log
        errors = []
        warnings = []

        kind = SQLValidator.get_query_type(statement)
        has_active = SQLValidator.has_active_where(statement)
        has_commented = SQLValidator.has_commented_where(statement)
        logger.debug(
            "Query %d kind=%s active_where=%s commented_where=%s",
            index, kind, has_active, has_commented,
        )

        # A commented WHERE pre-empts every other rule
        if has_commented:
            return StatementReport(
                valid=False,
                kind=kind,
                index=index,
                has_active_filter=False,
                errors=(f"[Query {index}] INVALID: WHERE clause found only in a comment!",),
            )

        if (config.require_filter_clause
                and kind in SQLValidator.DML_KEYWORDS_REQUIRING_WHERE
                and not has_active):
            errors.append(f"[Query {index}] VERY DANGEROUS: {kind} statement has no WHERE clause!")
            errors.append(f"[Query {index}] This statement will affect ALL rows in the table!")

        statement_upper = statement.upper()
        if 'DROP TABLE' in statement_upper and not config.allow_drop:
            errors.append(f"[Query {index}] DROP TABLE statements are not allowed.")

        if 'TRUNCATE' in statement_upper and not config.allow_truncate:
            errors.append(f"[Query {index}] TRUNCATE statements are not allowed.")

        if kind == 'SELECT' and 'LIMIT' not in statement_upper:
            warnings.append(f"[Query {index}] Consider adding a LIMIT to large SELECT queries.")

        return StatementReport(
            valid=not errors,
            kind=kind,
            index=index,
            has_active_filter=has_active,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )

    @staticmethod
    def validate_query(query, config=None, logger=None):
        """
        Validate every statement of the input and aggregate the results.

        Never raises: an unexpected failure while scanning discards the
        partial work and yields ValidationReport.fault().
        """
        logger = logger or _log
        try:
            statements = SQLValidator.split_statements(query, logger)
            report = ValidationReport.aggregate(
                SQLValidator.validate_statement(stmt, i, config, logger)
                for i, stmt in enumerate(statements, start=1)
            )
        except Exception:
            logger.exception("Unexpected error while validating query")
            return ValidationReport.fault()

        logger.debug(
            "Validation completed: valid=%s statements=%d errors=%d warnings=%d",
            report.is_valid, report.statement_count, len(report.errors), len(report.warnings),
        )
        return report


def validate(text, config=None, logger=None):
    """Validate raw SQL text; see SQLValidator.validate_query."""
    return SQLValidator.validate_query(text, config, logger)
