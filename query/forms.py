"""
WTForms for the validation API.
"""
from flask import current_app
from flask_wtf import FlaskForm
from wtforms import TextAreaField
from wtforms.validators import InputRequired, ValidationError


class QueryForm(FlaskForm):
    """SQL query payload, read from the JSON request body."""

    class Meta:
        # JSON API, no browser session to protect
        csrf = False

    query = TextAreaField(
        'SQL Query',
        validators=[InputRequired(message='Query is required')],
    )

    def validate_query(self, field):
        """Reject non-text and oversized payloads before they reach the engine."""
        if not isinstance(field.data, str):
            raise ValidationError('Query must be a string')

        max_length = current_app.config.get('MAX_QUERY_LENGTH')
        if max_length and len(field.data) > max_length:
            raise ValidationError(f'Query exceeds the maximum length of {max_length} characters')

    def first_error(self):
        for errors in self.errors.values():
            if errors:
                return errors[0]
        return 'Invalid request'
