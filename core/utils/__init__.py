"""
Core utilities package
"""

from .helpers import (
    parse_json_body,
    form_errors,
    validate_form,
    parse_bool,
    paginate,
    generate_reference,
    parse_amount,
    format_currency,
)
from .email_service import clean_recipients, send_swapride_email

__all__ = [
    'parse_json_body',
    'form_errors',
    'validate_form',
    'parse_bool',
    'paginate',
    'generate_reference',
    'parse_amount',
    'format_currency',
    'clean_recipients',
    'send_swapride_email',
]
