"""
Payment Gateway Integration Service
Handles charge initialization, verification and webhook signatures
Documentation: https://developers.korapay.com/docs

Settings (settings.PAYMENT_GATEWAY):
- BASE_URL, SECRET_KEY, PUBLIC_KEY
- WEBHOOK_SECRET (HMAC-SHA512 key for webhook signatures)
- USE_MOCK (USE_MOCK_PAYMENT_GATEWAY env, default True)
"""

import hashlib
import hmac
import logging
import time
from decimal import Decimal
from typing import Dict, Optional, Tuple

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Raised when the gateway rejects a request or can't be reached"""
    pass


class PaymentGatewayService:
    """
    Thin client for the card/bank charge gateway

    Every public method returns (success, data) and never raises.
    """

    def __init__(self, use_mock: Optional[bool] = None):
        config = getattr(settings, 'PAYMENT_GATEWAY', {})
        self.base_url = config.get('BASE_URL', '').rstrip('/')
        self.secret_key = config.get('SECRET_KEY', '')
        self.webhook_secret = config.get('WEBHOOK_SECRET', '')
        self.timeout = config.get('TIMEOUT', 30)
        self.use_mock = config.get('USE_MOCK', True) if use_mock is None else use_mock

        if not self.use_mock and not self.secret_key:
            logger.warning('Payment gateway key not configured. Using mock mode.')
            self.use_mock = True

    def _get_headers(self) -> Dict[str, str]:
        return {
            'Authorization': f'Bearer {self.secret_key}',
            'Content-Type': 'application/json',
        }

    def _make_request(self, method: str, endpoint: str, data: Optional[Dict] = None) -> Dict:
        """
        Make HTTP request to the gateway

        Raises:
            PaymentGatewayError: If the request fails or the gateway says no
        """
        url = f"{self.base_url}{endpoint}"

        try:
            if method.upper() == 'GET':
                response = requests.get(url, headers=self._get_headers(), params=data, timeout=self.timeout)
            else:
                response = requests.post(url, headers=self._get_headers(), json=data, timeout=self.timeout)

            response.raise_for_status()
            result = response.json()

            if not result.get('status'):
                raise PaymentGatewayError(result.get('message', 'Unknown error'))

            return result

        except requests.exceptions.Timeout:
            logger.error(f'Payment gateway timeout: {endpoint}')
            raise PaymentGatewayError('Request timeout. Please try again.')

        except requests.exceptions.RequestException as e:
            logger.error(f'Payment gateway error: {str(e)}')
            error_msg = str(e)
            if getattr(e, 'response', None) is not None:
                try:
                    error_msg = e.response.json().get('message', error_msg)
                except ValueError:
                    pass
            raise PaymentGatewayError(f'API Error: {error_msg}')

        except ValueError:
            raise PaymentGatewayError('Invalid response from payment gateway')

    def _to_minor_units(self, amount: Decimal) -> int:
        """1 unit = 100 minor units (cents, kobo...)"""
        return int(Decimal(amount) * 100)

    # ==========================================
    # CHARGES
    # ==========================================

    def initialize_charge(
        self,
        reference: str,
        amount: Decimal,
        currency: str,
        email: str,
        metadata: Optional[Dict] = None
    ) -> Tuple[bool, Dict]:
        """
        Open a checkout session for a pending payment

        Returns:
            Tuple of (success: bool, data: dict)

        Example response:
            {'checkout_url': 'https://checkout.korapay.com/...', 'reference': 'PAY-...'}
        """
        if self.use_mock:
            return self._mock_initialize_charge(reference)

        payload = {
            'reference': reference,
            'amount': self._to_minor_units(amount),
            'currency': currency,
            'customer': {'email': email},
            'metadata': metadata or {},
            'notification_url': f"{settings.SITE_URL}/api/v1/payments/webhook/",
            'redirect_url': f"{settings.CLIENT_URL}/payments/verify/{reference}",
        }

        try:
            response = self._make_request('POST', '/charges/initialize', data=payload)
            data = response.get('data') or {}
            logger.info(f'Charge initialized: {reference}')

            return True, {
                'checkout_url': data.get('checkout_url'),
                'reference': data.get('reference', reference),
            }

        except PaymentGatewayError as e:
            logger.error(f'Charge initialization error ({reference}): {str(e)}')
            return False, {'error': str(e)}

    def verify_charge(self, reference: str) -> Tuple[bool, Dict]:
        """
        Ask the gateway what happened to a charge

        Returns:
            Tuple of (success: bool, data: dict) where data['status'] is
            'success', 'failed' or 'pending'. success is False only when
            the gateway could not be asked.
        """
        if self.use_mock:
            return self._mock_verify_charge(reference)

        try:
            response = self._make_request('GET', f'/charges/{reference}/verify')
            data = response.get('data') or {}

            status = data.get('status')
            if status not in ('success', 'failed'):
                status = 'pending'

            return True, {
                'status': status,
                'transaction_id': data.get('transaction_reference') or data.get('payment_reference', ''),
                'message': data.get('message') or data.get('status', ''),
                'raw_response': data,
            }

        except PaymentGatewayError as e:
            logger.error(f'Charge verification error ({reference}): {str(e)}')
            return False, {'error': str(e)}

    # ==========================================
    # WEBHOOKS
    # ==========================================

    def verify_webhook_signature(self, raw_body: bytes, signature: Optional[str]) -> bool:
        """
        Check the HMAC-SHA512 signature the gateway attaches to webhooks

        Args:
            raw_body: Request body exactly as received
            signature: Hex digest from the signature header
        """
        if not self.webhook_secret:
            logger.warning('Payment webhook secret not configured. Skipping signature check.')
            return True

        if not signature:
            return False

        expected = hmac.new(
            self.webhook_secret.encode('utf-8'),
            raw_body or b'',
            hashlib.sha512
        ).hexdigest()

        return hmac.compare_digest(expected, signature)

    # ==========================================
    # MOCK METHODS (for testing without real API)
    # ==========================================

    def _mock_initialize_charge(self, reference: str) -> Tuple[bool, Dict]:
        logger.info(f'[MOCK] Charge initialized: {reference}')
        return True, {'checkout_url': None, 'reference': reference}

    def _mock_verify_charge(self, reference: str) -> Tuple[bool, Dict]:
        logger.info(f'[MOCK] Charge verified: {reference}')
        return True, {
            'status': 'success',
            'transaction_id': f'TXN-{int(time.time() * 1000)}',
            'message': 'Payment successful',
        }
