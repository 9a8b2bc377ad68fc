"""
Payment response shapes
"""


def serialize_payment(payment):
    return {
        'id': str(payment.id),
        'reference': payment.reference,
        'amount': str(payment.amount),
        'currency': payment.currency,
        'displayAmount': payment.display_amount,
        'paymentMethod': payment.payment_method,
        'status': payment.status,
        'type': payment.payment_type,
        'description': payment.description,
        'metadata': payment.metadata,
        'transactionId': payment.transaction_id or None,
        'providerMessage': payment.provider_message or None,
        'paidAt': payment.paid_at.isoformat() if payment.paid_at else None,
        'createdAt': payment.created_at.isoformat(),
        'updatedAt': payment.updated_at.isoformat(),
    }


def serialize_checkout(payment):
    """Handle returned by the initialize endpoints"""
    return {
        'paymentId': str(payment.id),
        'reference': payment.reference,
        'amount': str(payment.amount),
        'currency': payment.currency,
        'checkoutUrl': payment.checkout_url,
    }
