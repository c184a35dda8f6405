"""
Validation report types and aggregation.
"""
from dataclasses import dataclass, field


NO_STATEMENTS_ERROR = "No valid SQL statements found."
ENGINE_FAULT_ERROR = "Validation failed; could not process input."


@dataclass(frozen=True)
class StatementReport:
    """Outcome of validating a single statement."""
    valid: bool
    kind: str
    index: int
    has_active_filter: bool = False
    errors: tuple = ()
    warnings: tuple = ()

    def to_dict(self):
        return {
            'valid': self.valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'kind': self.kind,
            'hasActiveFilter': self.has_active_filter,
            'index': self.index,
        }


@dataclass(frozen=True)
class ValidationReport:
    """Aggregate outcome over every statement of one input."""
    is_valid: bool
    errors: tuple = ()
    warnings: tuple = ()
    statements: tuple = field(default_factory=tuple)

    @property
    def statement_count(self):
        return len(self.statements)

    @property
    def valid_count(self):
        return sum(1 for s in self.statements if s.valid)

    @property
    def dangerous_count(self):
        return sum(1 for s in self.statements if not s.valid)

    @property
    def active_filter_count(self):
        return sum(1 for s in self.statements if s.has_active_filter)

    @property
    def kind(self):
        return self.statements[0].kind if self.statements else 'UNKNOWN'

    @property
    def has_active_filter(self):
        return self.active_filter_count > 0

    @classmethod
    def aggregate(cls, statement_reports):
        """
        Combine per-statement reports.

        A batch of several statements with any dangerous member is escalated
        to wholly unsafe, while each statement keeps its own validity.
        """
        statements = tuple(statement_reports)
        if not statements:
            return cls(is_valid=False, errors=(NO_STATEMENTS_ERROR,))

        errors = [e for s in statements for e in s.errors]
        warnings = [w for s in statements for w in s.warnings]
        valid_count = sum(1 for s in statements if s.valid)
        dangerous_count = len(statements) - valid_count

        if len(statements) > 1:
            warnings.append(
                f"Found {len(statements)} queries: {valid_count} valid, {dangerous_count} dangerous."
            )
            if dangerous_count > 0:
                errors.append(f"CRITICAL: Found {dangerous_count} dangerous quer{'y' if dangerous_count == 1 else 'ies'}!")
                errors.append("HALT EXECUTION! Some queries can modify every row in a table.")

        return cls(
            is_valid=dangerous_count == 0,
            errors=tuple(errors),
            warnings=tuple(warnings),
            statements=statements,
        )

    @classmethod
    def fault(cls):
        """Report used when the engine could not process the input at all."""
        return cls(is_valid=False, errors=(ENGINE_FAULT_ERROR,))

    def to_dict(self):
        return {
            'isValid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'kind': self.kind,
            'hasActiveFilter': self.has_active_filter,
            'statementCount': self.statement_count,
            'validCount': self.valid_count,
            'dangerousCount': self.dangerous_count,
            'activeFilterCount': self.active_filter_count,
            'individualResults': [s.to_dict() for s in self.statements],
        }
