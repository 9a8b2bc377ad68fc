from .gateway import PaymentGatewayError, PaymentGatewayService
from .payments import PaymentService, payment_service

__all__ = [
    'PaymentGatewayError',
    'PaymentGatewayService',
    'PaymentService',
    'payment_service',
]
