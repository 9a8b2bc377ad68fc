"""
Shared helpers for request parsing, pagination, references and money
"""

import json
import secrets
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from django.conf import settings
from django.core.paginator import Paginator

from core.exceptions import InvalidInput


# ==========================================
# REQUEST PARSING
# ==========================================

def parse_json_body(request) -> Dict[str, Any]:
    """
    Decode a JSON request body into a dict

    An empty body is treated as {}.

    Raises:
        InvalidInput: body is not valid JSON or not a JSON object
    """
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise InvalidInput('Invalid JSON body')

    if not isinstance(payload, dict):
        raise InvalidInput('Invalid JSON body')

    return payload


def form_errors(form) -> Dict[str, list]:
    """Flatten Django form errors into {field: [messages]}"""
    return {field: [str(msg) for msg in messages] for field, messages in form.errors.items()}


def validate_form(form) -> Dict[str, Any]:
    """
    Run a bound form and return its cleaned data

    Raises:
        InvalidInput: with field-level messages when the form is invalid
    """
    if not form.is_valid():
        raise InvalidInput('Validation failed', errors=form_errors(form))
    return form.cleaned_data


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """Parse a query-string boolean; None when absent or unrecognized"""
    if value is None:
        return None
    value = str(value).strip().lower()
    if value in ('true', '1', 'yes'):
        return True
    if value in ('false', '0', 'no'):
        return False
    return None


def _positive_int(value, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


# ==========================================
# PAGINATION
# ==========================================

def paginate(queryset, request, default_limit: Optional[int] = None, max_limit: Optional[int] = None) -> Tuple[list, Dict[str, int]]:
    """
    Paginate a queryset from ?page=&limit= query params

    Returns:
        Tuple of (items on the page, pagination dict)

    Example pagination dict:
        {'page': 2, 'limit': 20, 'total': 45, 'pages': 3}
    """
    default_limit = default_limit or settings.SWAPRIDE['PAGE_SIZE']
    max_limit = max_limit or settings.SWAPRIDE['MAX_PAGE_SIZE']

    page = _positive_int(request.GET.get('page'), 1)
    limit = min(_positive_int(request.GET.get('limit'), default_limit), max_limit)

    paginator = Paginator(queryset, limit)
    total = paginator.count

    # Pages past the end come back empty rather than clamped
    if page > paginator.num_pages:
        items = []
    else:
        items = list(paginator.page(page).object_list)

    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': (total + limit - 1) // limit,
    }


# ==========================================
# REFERENCES & MONEY
# ==========================================

def generate_reference(prefix: str = 'PAY') -> str:
    """
    Generate a globally unique payment reference

    Args:
        prefix: Reference prefix (e.g., 'PAY', 'SUB', 'FEAT')

    Returns:
        Reference string (e.g., 'PAY-1718031234567-9F3A0C1B')
    """
    timestamp = int(time.time() * 1000)
    random_part = secrets.token_hex(4).upper()

    return f"{prefix}-{timestamp}-{random_part}"


def parse_amount(value) -> Optional[Decimal]:
    """
    Parse a user supplied amount to a 2dp Decimal

    Returns None for anything that isn't a finite number.
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        amount = Decimal(str(value).replace(',', '').strip())
    except (InvalidOperation, ValueError):
        return None

    if not amount.is_finite():
        return None

    return amount.quantize(Decimal('0.01'))


def format_currency(amount: Decimal, currency: str = 'USD') -> str:
    """
    Format amount as currency string

    Returns:
        Formatted string (e.g., '$10,000.00')
    """
    symbols = {
        'USD': '$',
        'EUR': '€',
        'GBP': '£',
        'NGN': '₦',
    }
    symbol = symbols.get(currency, f'{currency} ')

    return f"{symbol}{amount:,.2f}"
