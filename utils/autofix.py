"""
Auto-repair for statements whose WHERE clause was commented out.
"""
import logging
import re
from dataclasses import dataclass

from utils.validators import SQLValidator


_log = logging.getLogger(__name__)

_HORIZONTAL_WS_RE = re.compile(r'[ \t\f\v]+')


@dataclass(frozen=True)
class AutoFixResult:
    original_text: str
    fixed_text: str
    fixes_applied: tuple
    validation: object

    def to_dict(self):
        return {
            'originalText': self.original_text,
            'fixedText': self.fixed_text,
            'fixesApplied': list(self.fixes_applied),
            'validation': self.validation.to_dict(),
        }


class AutoFixer:
    """Reactivates commented-out WHERE clauses on UPDATE/DELETE statements."""

    FIXABLE_KINDS = SQLValidator.DML_KEYWORDS_REQUIRING_WHERE

    @staticmethod
    def normalize_whitespace(statement):
        """Collapse spaces within each line and drop blank lines.

        Line breaks are kept so a trailing line comment elsewhere in the
        statement cannot swallow the reactivated clause.
        """
        lines = (_HORIZONTAL_WS_RE.sub(' ', line).strip() for line in statement.split('\n'))
        return '\n'.join(line for line in lines if line)

    @staticmethod
    def needs_fix(statement, report):
        return (
            not report.valid
            and report.kind in AutoFixer.FIXABLE_KINDS
            and not SQLValidator.has_active_where(statement)
            and SQLValidator.has_commented_where(statement)
        )

    @staticmethod
    def activate_commented_where(statement):
        """
        Rewrite the line holding the first commented WHERE so the clause is live.

        Returns (fixed_statement, clause), or (statement, None) when no
        commented clause could be extracted or the rewrite left it inactive.
        """
        extracted = SQLValidator.extract_commented_where(statement)
        if extracted is None:
            return statement, None

        line_number, code_before, clause = extracted
        lines = statement.split('\n')
        # Any earlier comment marker on the line would keep the clause inert
        lines[line_number] = f"{SQLValidator._code_part(code_before)} {clause}"
        fixed = AutoFixer.normalize_whitespace('\n'.join(lines))
        if not SQLValidator.has_active_where(fixed):
            return statement, None
        return fixed, clause

    @staticmethod
    def fix(query, config=None, logger=None):
        """Repair what can be repaired and re-validate the result."""
        logger = logger or _log
        validation = SQLValidator.validate_query(query, config, logger)
        fixed_query = query
        fixes_applied = []

        if not validation.is_valid and validation.statements:
            statements = SQLValidator.split_statements(query, logger)
            fixed_statements = []

            for statement, report in zip(statements, validation.statements):
                fixed_statement = statement
                if AutoFixer.needs_fix(statement, report):
                    fixed_statement, clause = AutoFixer.activate_commented_where(statement)
                    if clause is not None:
                        fixes_applied.append(
                            f"Query {report.index}: Activated WHERE clause from comment: {clause}"
                        )
                        logger.info("Fixed query %d: %s", report.index, fixed_statement)
                fixed_statements.append(fixed_statement)

            fixed_query = '; '.join(fixed_statements) + ';'

        new_validation = SQLValidator.validate_query(fixed_query, config, logger)
        return AutoFixResult(
            original_text=query,
            fixed_text=fixed_query,
            fixes_applied=tuple(fixes_applied),
            validation=new_validation,
        )


def auto_fix(text, config=None, logger=None):
    """Reactivate commented WHERE clauses in text; see AutoFixer.fix."""
    return AutoFixer.fix(text, config, logger)
