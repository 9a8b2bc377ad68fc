"""
Delivery channels
Email, SMS and real-time publish used by the notification service

Email:
- Django mail backend (SMTP in production)

SMS:
- Termii API

Real-time:
- HTTP publish to the socket gateway, one channel per user (user_<id>)

Settings (settings.NOTIFICATIONS):
- USE_MOCK (USE_MOCK_NOTIFICATIONS env, default True)
- TERMII_API_KEY, TERMII_SENDER_ID
- REALTIME_GATEWAY_URL, REALTIME_GATEWAY_TOKEN

Every channel returns True/False and never raises.
"""

import json
import logging
from typing import Dict, Optional

import requests
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from core.utils.email_service import send_swapride_email

logger = logging.getLogger(__name__)


def _config():
    return getattr(settings, 'NOTIFICATIONS', {})


class EmailService:
    """
    Email delivery through Django's configured backend
    """

    def __init__(self, use_mock: Optional[bool] = None):
        config = _config()
        self.use_mock = config.get('USE_MOCK', True) if use_mock is None else use_mock

    def send_email(
        self,
        to_email: str,
        subject: str,
        message: str,
        html_message: Optional[str] = None
    ) -> bool:
        """
        Send a single email

        Args:
            to_email: Recipient email
            subject: Email subject
            message: Plain text message
            html_message: HTML alternative (optional)

        Returns:
            True if sent successfully, False otherwise
        """
        if self.use_mock:
            return self._mock_send_email(to_email, subject, message)

        try:
            send_swapride_email(
                subject=subject,
                message=message,
                recipient_list=[to_email],
                html_message=html_message
            )
            logger.info(f'Email sent to {to_email}: {subject}')
            return True

        except Exception as e:
            logger.error(f'Email send error: {str(e)}')
            return False

    def send_template_email(
        self,
        to_email: str,
        subject: str,
        template_name: str,
        context: Dict
    ) -> bool:
        """
        Render a template and send it with a plain-text fallback

        Args:
            template_name: Template path (e.g., 'notifications/emails/swap_accepted.html')
            context: Template context data
        """
        if self.use_mock:
            return self._mock_send_email(to_email, subject, f"Template: {template_name}")

        try:
            html_message = render_to_string(template_name, context)
            plain_message = strip_tags(html_message)

            return self.send_email(
                to_email=to_email,
                subject=subject,
                message=plain_message,
                html_message=html_message
            )

        except Exception as e:
            logger.error(f'Template email error ({template_name}): {str(e)}')
            return False

    def _mock_send_email(self, to_email: str, subject: str, message: str) -> bool:
        logger.info(f'[MOCK EMAIL] To: {to_email} | Subject: {subject}')
        logger.debug(f'[MOCK EMAIL] Message: {message[:100]}')
        return True


class SMSService:
    """
    SMS delivery through the Termii API
    """

    API_URL = 'https://api.ng.termii.com/api/sms/send'

    def __init__(self, use_mock: Optional[bool] = None):
        config = _config()
        self.use_mock = config.get('USE_MOCK', True) if use_mock is None else use_mock
        self.api_key = config.get('TERMII_API_KEY', '')
        self.sender_id = config.get('TERMII_SENDER_ID', 'SwapRide')

    def send_sms(self, phone: str, message: str) -> bool:
        """
        Send a plain SMS

        Args:
            phone: Phone number in local or international format
            message: SMS body (max 160 chars recommended)

        Returns:
            True if sent successfully
        """
        phone = self._normalize_phone(phone)

        if self.use_mock:
            return self._mock_send_sms(phone, message)

        if not self.api_key:
            logger.warning('Termii API key not configured. Using mock mode.')
            return self._mock_send_sms(phone, message)

        try:
            response = requests.post(
                self.API_URL,
                json={
                    'api_key': self.api_key,
                    'to': phone,
                    'from': self.sender_id,
                    'sms': message,
                    'type': 'plain',
                    'channel': 'generic'
                },
                timeout=30
            )

            response.raise_for_status()
            result = response.json()

            if result.get('message') == 'Successfully Sent':
                logger.info(f'SMS sent to {phone}')
                return True

            logger.error(f'SMS send failed: {result}')
            return False

        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f'SMS send error: {str(e)}')
            return False

    def _normalize_phone(self, phone: str) -> str:
        """
        Strip formatting, keep the country code

        Examples:
            +1 (415) 555-0100 → 14155550100
            +234 801 234 5678 → 2348012345678
        """
        return ''.join(filter(str.isdigit, phone or ''))

    def _mock_send_sms(self, phone: str, message: str) -> bool:
        logger.info(f'[MOCK SMS] To: {phone} | Message: {message}')
        return True


class RealtimeService:
    """
    Publishes events to the real-time socket gateway
    Clients subscribe to their own `user_<id>` channel
    """

    def __init__(self, use_mock: Optional[bool] = None):
        config = _config()
        self.use_mock = config.get('USE_MOCK', True) if use_mock is None else use_mock
        self.gateway_url = config.get('REALTIME_GATEWAY_URL', '')
        self.token = config.get('REALTIME_GATEWAY_TOKEN', '')

    @staticmethod
    def channel_for(user_id) -> str:
        return f'user_{user_id}'

    def publish(self, user_id, event: str, payload: Dict) -> bool:
        """
        Publish an event on the user's channel

        Args:
            user_id: Recipient user id
            event: Event name (e.g., 'notification')
            payload: JSON-serializable body (datetimes / UUIDs allowed)

        Returns:
            True if the gateway accepted the event
        """
        channel = self.channel_for(user_id)

        if self.use_mock or not self.gateway_url:
            logger.debug(f'[MOCK REALTIME] {channel} <- {event}')
            return True

        try:
            response = requests.post(
                self.gateway_url,
                data=json.dumps({'channel': channel, 'event': event, 'payload': payload}, cls=DjangoJSONEncoder),
                headers={
                    'Authorization': f'Bearer {self.token}',
                    'Content-Type': 'application/json',
                },
                timeout=10
            )
            response.raise_for_status()
            return True

        except requests.exceptions.RequestException as e:
            logger.warning(f'Realtime publish to {channel} failed: {str(e)}')
            return False
