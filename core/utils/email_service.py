"""
Outbound email helper
Every email the backend sends goes through send_swapride_email so the
sender address and recipient cleaning are the same everywhere.
"""

import logging
from typing import Iterable, List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.mail import EmailMultiAlternatives
from django.core.validators import validate_email

logger = logging.getLogger(__name__)


def clean_recipients(recipient_list: Optional[Iterable[str]]) -> List[str]:
    """
    Strip blanks and drop malformed addresses

    Raises:
        ValueError: nothing deliverable is left
    """
    recipients = []

    for raw in recipient_list or []:
        address = str(raw).strip()
        if not address:
            continue
        try:
            validate_email(address)
        except ValidationError:
            logger.warning(f'Skipping invalid email address: {address}')
            continue
        recipients.append(address)

    if not recipients:
        raise ValueError('recipient_list must contain at least one valid email address')

    return recipients


def send_swapride_email(
    subject: str,
    message: str,
    recipient_list: Iterable[str],
    html_message: Optional[str] = None,
    reply_to: Optional[List[str]] = None,
) -> int:
    """
    Send one email, with an optional HTML alternative

    Args:
        subject: Non-empty subject line
        message: Plain-text body (also the fallback for HTML mail)
        recipient_list: Addresses; blanks and malformed ones are dropped
        html_message: Rendered HTML body
        reply_to: Reply-To addresses

    Returns:
        Number of messages sent

    Raises:
        ValueError: empty subject, non-string body, or no valid recipient
        Exception: whatever the mail backend raises (fail_silently is off)
    """
    if not subject or not isinstance(subject, str):
        raise ValueError('subject must be a non-empty string')

    if not isinstance(message, str):
        raise ValueError('message must be a string')

    email = EmailMultiAlternatives(
        subject=subject,
        body=message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=clean_recipients(recipient_list),
        reply_to=reply_to,
    )
    if html_message:
        email.attach_alternative(html_message, 'text/html')

    sent_count = email.send(fail_silently=False)
    if sent_count < 1:
        raise RuntimeError('Email was not sent (backend returned 0)')

    return sent_count
