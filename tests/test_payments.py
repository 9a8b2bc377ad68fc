"""
Payment Lifecycle Tests for SwapRide

Tests for the payment state machine:
- Initialization (amount positivity, references, checkout URL)
- Verification and the post-success dispatcher
- Webhook idempotency and signature checks
- Cancel / refund state guards
- HTTP endpoints
"""

import hashlib
import hmac
import json
import re
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.listings.models import ListingStatus
from apps.notifications.models import Notification, NotificationType
from apps.payments.models import Payment, PaymentEvent
from apps.payments.services import PaymentGatewayService, PaymentService
from apps.swaps.models import Swap
from core.exceptions import Forbidden, Internal, InvalidInput, InvalidState, NotFound

pytestmark = pytest.mark.django_db


class StubGateway(PaymentGatewayService):
    """Gateway in mock mode whose verify outcome can be scripted."""

    def __init__(self, verify_status="success", init_ok=True, webhook_secret=""):
        super().__init__(use_mock=True)
        self.verify_status = verify_status
        self.init_ok = init_ok
        self.webhook_secret = webhook_secret
        self.verify_calls = 0

    def initialize_charge(self, reference, amount, currency, email, metadata=None):
        if not self.init_ok:
            return False, {"error": "Gateway down"}
        return super().initialize_charge(reference, amount, currency, email, metadata)

    def verify_charge(self, reference):
        self.verify_calls += 1
        return True, {"status": self.verify_status, "transaction_id": "TXN-42", "message": "Insufficient funds"}


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def service(notifier, gateway):
    return PaymentService(notifier=notifier, gateway=gateway)


@pytest.fixture
def pending(service, alice):
    return service.initialize(alice, Decimal("25.00"), description="Test charge")


def _json(response):
    return json.loads(response.content)


# =============================================================================
# Initialization
# =============================================================================


class TestInitialize:
    """Tests for PaymentService.initialize and the typed variants."""

    @pytest.mark.parametrize("amount", [None, Decimal("0"), Decimal("-5")])
    def test_non_positive_amount_rejected(self, service, alice, amount):
        with pytest.raises(InvalidInput, match="Invalid amount"):
            service.initialize(alice, amount)
        assert Payment.objects.count() == 0

    def test_creates_pending_payment(self, pending, alice, settings):
        assert pending.status == Payment.Status.PENDING
        assert pending.user == alice
        assert pending.currency == "USD"
        assert pending.payment_method == "card"
        assert re.fullmatch(r"PAY-\d{13}-[0-9A-F]{8}", pending.reference)
        assert pending.checkout_url == f"{settings.CLIENT_URL}/checkout/{pending.id}"

    def test_unsupported_currency(self, service, alice):
        with pytest.raises(InvalidInput):
            service.initialize(alice, Decimal("5"), currency="XYZ")

    def test_gateway_failure_marks_payment_failed(self, notifier, alice):
        service = PaymentService(notifier=notifier, gateway=StubGateway(init_ok=False))

        with pytest.raises(Internal):
            service.initialize(alice, Decimal("5"))

        payment = Payment.objects.get()
        assert payment.status == Payment.Status.FAILED
        assert payment.provider_message == "Gateway down"

    def test_subscription_uses_plan_price(self, service, alice):
        payment = service.initialize_subscription(alice, "enterprise")

        assert payment.amount == Decimal("99.99")
        assert payment.reference.startswith("SUB-")
        assert payment.metadata == {"type": "subscription", "plan": "enterprise"}

    def test_invalid_plan(self, service, alice):
        with pytest.raises(InvalidInput, match="Invalid subscription plan"):
            service.initialize_subscription(alice, "platinum")

    def test_feature_listing(self, service, alice, alice_vehicle):
        payment = service.initialize_feature_listing(alice, alice_vehicle.id, duration=14)

        assert payment.amount == Decimal("10.00")
        assert payment.reference.startswith("FEAT-")
        assert payment.metadata["listingId"] == str(alice_vehicle.id)
        assert payment.metadata["duration"] == 14

    def test_cannot_promote_someone_elses_listing(self, service, alice, bob_vehicle):
        with pytest.raises(Forbidden):
            service.initialize_boost_ad(alice, bob_vehicle.id)

    def test_boost_missing_listing(self, service, alice):
        with pytest.raises(NotFound):
            service.initialize_boost_ad(alice, "11111111-1111-1111-1111-111111111111")

    @pytest.mark.parametrize("payment_type", [["subscription"], {"kind": "boost_ad"}, "lottery"])
    def test_unknown_metadata_type_rejected(self, service, alice, payment_type):
        with pytest.raises(InvalidInput, match="Invalid payment type"):
            service.initialize(alice, Decimal("5"), metadata={"type": payment_type})
        assert Payment.objects.count() == 0

    def test_generic_promotion_requires_own_listing(self, service, alice, bob_vehicle):
        with pytest.raises(Forbidden, match="You can only promote your own listings"):
            service.initialize(
                alice,
                Decimal("0.01"),
                metadata={"type": "feature_listing", "listingId": str(bob_vehicle.id)},
            )
        assert Payment.objects.count() == 0

    def test_generic_promotion_of_own_listing(self, service, alice, alice_vehicle):
        payment = service.initialize(
            alice,
            Decimal("5"),
            metadata={"type": "boost_ad", "adId": str(alice_vehicle.id), "listingType": "vehicle"},
        )
        assert payment.reference.startswith("BOOST-")

    def test_escrow_requires_party(self, service, alice, bob, carol, alice_vehicle, bob_vehicle):
        swap = Swap.objects.create(
            initiator=alice, receiver=bob,
            offered_item_id=alice_vehicle.id,
            requested_item_type="vehicle", requested_item_id=bob_vehicle.id,
        )

        payment = service.initialize_escrow(alice, swap.id, Decimal("300"))
        assert payment.reference.startswith("ESC-")
        assert payment.metadata == {"type": "escrow", "swapId": str(swap.id)}

        with pytest.raises(Forbidden):
            service.initialize_escrow(carol, swap.id, Decimal("300"))


# =============================================================================
# Verify and dispatch
# =============================================================================


class TestVerify:
    """Tests for verify and the post-success dispatcher."""

    def test_success_completes_once(self, service, pending, alice, notifier, gateway):
        verified = service.verify(pending.reference, alice)

        assert verified.status == Payment.Status.COMPLETED
        assert verified.transaction_id == "TXN-42"
        assert verified.paid_at is not None
        assert notifier.names == ["notify_payment_success"]

        again = service.verify(pending.reference, alice)

        assert again.status == Payment.Status.COMPLETED
        assert notifier.names == ["notify_payment_success"]
        assert gateway.verify_calls == 1

    def test_notifier_failure_keeps_completion(self, failing_notifier, alice, alice_vehicle):
        service = PaymentService(notifier=failing_notifier, gateway=StubGateway())
        payment = service.initialize_feature_listing(alice, alice_vehicle.id)

        verified = service.verify(payment.reference, alice)

        assert verified.status == Payment.Status.COMPLETED
        alice_vehicle.refresh_from_db()
        assert alice_vehicle.is_featured is True

    def test_scoped_to_owner(self, service, pending, bob):
        with pytest.raises(NotFound, match="Payment not found"):
            service.verify(pending.reference, bob)

    def test_failed_charge(self, notifier, alice):
        service = PaymentService(notifier=notifier, gateway=StubGateway(verify_status="failed"))
        payment = service.initialize(alice, Decimal("10"))

        verified = service.verify(payment.reference, alice)

        assert verified.status == Payment.Status.FAILED
        assert verified.provider_message == "Insufficient funds"
        assert notifier.names == ["notify_payment_failed"]

    def test_pending_charge_stays_pending(self, notifier, alice):
        service = PaymentService(notifier=notifier, gateway=StubGateway(verify_status="pending"))
        payment = service.initialize(alice, Decimal("10"))

        assert service.verify(payment.reference, alice).status == Payment.Status.PENDING
        assert notifier.names == []

    def test_premium_subscription_scenario(self, service, alice):
        payment = service.initialize(
            alice, Decimal("9.99"), metadata={"type": "subscription", "plan": "premium"}
        )
        service.verify(payment.reference, alice)

        alice.refresh_from_db()
        assert alice.subscription_plan == "premium"
        assert alice.subscription_is_active is True
        expected_end = timezone.now() + timedelta(days=30)
        assert abs(alice.subscription_end_date - expected_end) < timedelta(minutes=1)

    def test_basic_subscription_lasts_a_year(self, service, alice):
        payment = service.initialize_subscription(alice, "basic")
        service.verify(payment.reference, alice)

        alice.refresh_from_db()
        assert (alice.subscription_end_date - alice.subscription_start_date).days == 365

    def test_feature_listing_dispatch(self, service, alice, alice_vehicle):
        payment = service.initialize_feature_listing(alice, alice_vehicle.id, duration=3)
        service.verify(payment.reference, alice)

        alice_vehicle.refresh_from_db()
        assert alice_vehicle.is_featured is True
        assert timedelta(days=2, hours=23) < alice_vehicle.featured_until - timezone.now() <= timedelta(days=3)

    def test_boost_defaults_to_seven_days(self, service, alice, alice_vehicle):
        payment = service.initialize_boost_ad(alice, alice_vehicle.id)
        service.verify(payment.reference, alice)

        alice_vehicle.refresh_from_db()
        assert alice_vehicle.is_boosted is True
        assert (alice_vehicle.boosted_until - timezone.now()).days == 6

    def test_oversized_duration_is_clamped(self, service, alice, alice_vehicle):
        payment = Payment.objects.create(
            user=alice,
            reference="BOOST-1-ABCDEF12",
            amount=Decimal("5"),
            metadata={"type": "boost_ad", "adId": str(alice_vehicle.id), "duration": 10**9},
        )

        verified = service.verify(payment.reference, alice)

        assert verified.status == Payment.Status.COMPLETED
        alice_vehicle.refresh_from_db()
        assert alice_vehicle.is_boosted is True
        assert alice_vehicle.boosted_until - timezone.now() <= timedelta(days=90)

    def test_foreign_listing_is_not_promoted(self, service, alice, bob_vehicle, notifier):
        payment = Payment.objects.create(
            user=alice,
            reference="FEAT-1-ABCDEF12",
            amount=Decimal("0.01"),
            metadata={"type": "feature_listing", "listingId": str(bob_vehicle.id)},
        )

        verified = service.verify(payment.reference, alice)

        assert verified.status == Payment.Status.COMPLETED
        bob_vehicle.refresh_from_db()
        assert bob_vehicle.is_featured is False
        assert notifier.names == ["notify_payment_success"]

    def test_deleted_listing_is_skipped(self, service, alice, alice_vehicle, notifier):
        payment = service.initialize_feature_listing(alice, alice_vehicle.id)
        alice_vehicle.delete()

        verified = service.verify(payment.reference, alice)

        assert verified.status == Payment.Status.COMPLETED
        assert notifier.names == ["notify_payment_success"]

    def test_escrow_has_no_side_effect(self, service, alice, bob, alice_vehicle, bob_vehicle):
        swap = Swap.objects.create(
            initiator=alice, receiver=bob,
            offered_item_id=alice_vehicle.id,
            requested_item_type="vehicle", requested_item_id=bob_vehicle.id,
        )
        payment = service.initialize_escrow(alice, swap.id, Decimal("100"))
        service.verify(payment.reference, alice)

        swap.refresh_from_db()
        bob_vehicle.refresh_from_db()
        assert swap.status == Swap.Status.PENDING
        assert bob_vehicle.status == ListingStatus.ACTIVE


# =============================================================================
# Webhook
# =============================================================================


class TestWebhook:
    """Tests for handle_webhook."""

    def test_success_event(self, service, pending, notifier):
        outcome = service.handle_webhook(
            {"event": "payment.success", "data": {"reference": pending.reference, "transactionId": "GW-1"}}
        )
        pending.refresh_from_db()

        assert outcome == "processed"
        assert pending.status == Payment.Status.COMPLETED
        assert pending.transaction_id == "GW-1"
        assert notifier.names == ["notify_payment_success"]

    def test_duplicate_delivery_is_noop(self, service, alice, notifier):
        payment = service.initialize_subscription(alice, "premium")
        event = {"event": "payment.success", "data": {"id": "evt_1", "reference": payment.reference}}

        assert service.handle_webhook(event) == "processed"
        alice.refresh_from_db()
        first_end = alice.subscription_end_date

        assert service.handle_webhook(event) == "duplicate"
        alice.refresh_from_db()

        assert alice.subscription_end_date == first_end
        assert notifier.names == ["notify_payment_success"]
        assert PaymentEvent.objects.filter(event_id="evt_1").count() == 1

    def test_event_id_derived_from_reference(self, service, pending):
        service.handle_webhook({"event": "payment.failed", "data": {"reference": pending.reference, "reason": "Declined"}})

        record = PaymentEvent.objects.get()
        pending.refresh_from_db()
        assert record.event_id == f"payment.failed:{pending.reference}"
        assert record.payment == pending
        assert pending.status == Payment.Status.FAILED
        assert pending.provider_message == "Declined"

    def test_failure_after_success_is_ignored(self, service, pending):
        service.handle_webhook({"event": "payment.success", "data": {"reference": pending.reference}})
        outcome = service.handle_webhook({"event": "payment.failed", "data": {"reference": pending.reference}})
        pending.refresh_from_db()

        assert outcome == "ignored"
        assert pending.status == Payment.Status.COMPLETED

    def test_refund_event_only_from_completed(self, service, pending):
        assert service.handle_webhook(
            {"event": "refund.processed", "data": {"id": "r1", "reference": pending.reference}}
        ) == "ignored"

        service.handle_webhook({"event": "payment.success", "data": {"reference": pending.reference}})
        assert service.handle_webhook(
            {"event": "refund.processed", "data": {"id": "r2", "reference": pending.reference}}
        ) == "processed"

        pending.refresh_from_db()
        assert pending.status == Payment.Status.REFUNDED

    def test_unknown_reference(self, service):
        assert service.handle_webhook({"event": "payment.success", "data": {"reference": "PAY-0-NOPE"}}) == "unknown_payment"

    def test_unknown_event(self, service, pending):
        assert service.handle_webhook({"event": "charge.dispute", "data": {"reference": pending.reference}}) == "ignored"
        assert PaymentEvent.objects.count() == 0

    def test_signature_checked_when_secret_configured(self, notifier, alice):
        gateway = StubGateway(webhook_secret="whsec")
        service = PaymentService(notifier=notifier, gateway=gateway)
        payment = service.initialize(alice, Decimal("10"))

        payload = {"event": "payment.success", "data": {"reference": payment.reference}}
        raw = json.dumps(payload).encode()
        good = hmac.new(b"whsec", raw, hashlib.sha512).hexdigest()

        assert service.handle_webhook(payload, raw_body=raw, signature="bad") == "invalid_signature"
        assert service.handle_webhook(payload, raw_body=raw, signature=None) == "invalid_signature"
        assert service.handle_webhook(payload, raw_body=raw, signature=good) == "processed"


# =============================================================================
# Cancel and refund
# =============================================================================


class TestCancelRefund:
    """State guards for cancel / refund."""

    def test_owner_cancels_pending(self, service, pending, alice):
        assert service.cancel(pending.id, alice).status == Payment.Status.CANCELLED

    def test_cannot_cancel_completed(self, service, pending, alice):
        service.verify(pending.reference, alice)
        with pytest.raises(InvalidState):
            service.cancel(pending.id, alice)

    def test_other_user_cannot_cancel(self, service, pending, bob):
        with pytest.raises(NotFound):
            service.cancel(pending.id, bob)

    def test_refund_requires_completed(self, service, pending, alice):
        with pytest.raises(InvalidState, match="Only completed payments can be refunded"):
            service.refund(pending.id, alice, "Changed my mind")

    def test_owner_refund_records_reason(self, service, pending, alice, notifier):
        service.verify(pending.reference, alice)
        refunded = service.refund(pending.id, alice, "Duplicate charge")

        assert refunded.status == Payment.Status.REFUNDED
        assert refunded.metadata["refundReason"] == "Duplicate charge"
        assert "refundedAt" in refunded.metadata
        assert "refundedBy" not in refunded.metadata
        assert notifier.names[-1] == "notify_payment_refunded"

    def test_admin_refund_records_admin(self, service, pending, alice, moderator):
        service.verify(pending.reference, alice)
        refunded = service.refund(pending.id, None, "Fraud", admin=moderator)

        assert refunded.metadata["refundedBy"] == str(moderator.id)

    def test_cannot_refund_twice(self, service, pending, alice):
        service.verify(pending.reference, alice)
        service.refund(pending.id, alice)

        with pytest.raises(InvalidState):
            service.refund(pending.id, alice)

    def test_cancel_subscription(self, service, alice):
        with pytest.raises(InvalidState):
            service.cancel_subscription(alice)

        payment = service.initialize_subscription(alice, "basic")
        service.verify(payment.reference, alice)
        alice.refresh_from_db()

        service.cancel_subscription(alice)
        alice.refresh_from_db()
        assert alice.subscription_is_active is False


# =============================================================================
# Endpoints
# =============================================================================


class TestPaymentEndpoints:
    """HTTP surface of the payments app (mock gateway)."""

    def test_reference_data_is_public(self, client):
        currencies = _json(client.get("/api/v1/payments/currencies/"))["data"]["currencies"]
        methods = _json(client.get("/api/v1/payments/methods/"))["data"]["methods"]

        assert {"code": "NGN", "name": "Nigerian Naira", "symbol": "₦"} in currencies
        assert [m["value"] for m in methods] == ["card", "bank_transfer", "mobile_money", "cash"]

    def test_initialize_then_verify(self, alice_client, alice, settings):
        response = alice_client.post(
            "/api/v1/payments/initialize/",
            {"amount": 49.5, "currency": "usd", "description": "Inspection fee"},
            content_type="application/json",
        )
        assert response.status_code == 201
        body = _json(response)
        assert body["message"] == "Payment initialized"
        checkout = body["data"]["payment"]
        assert checkout["amount"] == "49.50"
        assert checkout["currency"] == "USD"
        assert checkout["checkoutUrl"] == f"{settings.CLIENT_URL}/checkout/{checkout['paymentId']}"

        response = alice_client.get(f"/api/v1/payments/verify/{checkout['reference']}/")
        body = _json(response)
        assert body["message"] == "Payment verified successfully"
        assert body["data"]["payment"] == {
            "reference": checkout["reference"],
            "amount": "49.50",
            "status": "completed",
        }
        assert Notification.objects.filter(user=alice, type=NotificationType.PAYMENT_SUCCESS).count() == 1

    @pytest.mark.parametrize("amount", [0, -10])
    def test_initialize_rejects_non_positive(self, alice_client, amount):
        response = alice_client.post(
            "/api/v1/payments/initialize/", {"amount": amount}, content_type="application/json"
        )

        assert response.status_code == 400
        assert _json(response)["message"] == "Invalid amount"

    @pytest.mark.parametrize(
        "metadata",
        [
            {"type": ["subscription"]},
            {"type": "boost_ad", "duration": 10**9},
            {"type": "boost_ad", "duration": "7"},
            {"type": "boost_ad", "duration": True},
            {"type": "feature_listing", "listingType": ["vehicle"]},
        ],
    )
    def test_initialize_validates_metadata(self, alice_client, alice_vehicle, metadata):
        metadata = {"listingId": str(alice_vehicle.id), "adId": str(alice_vehicle.id), **metadata}
        response = alice_client.post(
            "/api/v1/payments/initialize/", {"amount": "5.00", "metadata": metadata}, content_type="application/json"
        )

        assert response.status_code == 400
        assert "metadata" in _json(response)["errors"]
        assert Payment.objects.count() == 0

    def test_initialize_cannot_feature_foreign_listing(self, alice_client, bob_vehicle):
        response = alice_client.post(
            "/api/v1/payments/initialize/",
            {"amount": "0.01", "metadata": {"type": "feature_listing", "listingId": str(bob_vehicle.id)}},
            content_type="application/json",
        )

        assert response.status_code == 403
        assert Payment.objects.count() == 0

    def test_subscription_endpoint(self, alice_client):
        response = alice_client.post(
            "/api/v1/payments/subscription/initialize/", {"plan": "premium"}, content_type="application/json"
        )
        assert response.status_code == 201
        assert _json(response)["data"]["payment"]["amount"] == "29.99"

        response = alice_client.post(
            "/api/v1/payments/subscription/initialize/", {"plan": "gold"}, content_type="application/json"
        )
        assert response.status_code == 400
        assert _json(response)["message"] == "Invalid subscription plan"

    def test_feature_listing_endpoint(self, alice_client, alice_vehicle):
        response = alice_client.post(
            "/api/v1/payments/feature-listing/",
            {"listingId": str(alice_vehicle.id), "duration": 7},
            content_type="application/json",
        )

        assert response.status_code == 201
        assert _json(response)["data"]["payment"]["reference"].startswith("FEAT-")

    def test_webhook_always_200(self, client, alice):
        assert client.post("/api/v1/payments/webhook/", "not json", content_type="application/json").status_code == 200

        payment = Payment.objects.create(user=alice, reference="PAY-1-ABCDEF12", amount=Decimal("5"))
        response = client.post(
            "/api/v1/payments/webhook/",
            {"event": "payment.success", "data": {"reference": payment.reference}},
            content_type="application/json",
        )
        payment.refresh_from_db()

        assert response.status_code == 200
        assert _json(response)["data"]["outcome"] == "processed"
        assert payment.status == Payment.Status.COMPLETED

    def test_history_and_detail_are_owner_scoped(self, alice_client, bob_client, alice):
        payment = Payment.objects.create(user=alice, reference="PAY-2-ABCDEF12", amount=Decimal("5"))

        body = _json(alice_client.get("/api/v1/payments/history/"))
        assert body["results"] == 1
        assert body["data"]["payments"][0]["reference"] == payment.reference

        assert bob_client.get(f"/api/v1/payments/{payment.id}/").status_code == 404

    def test_cancel_and_refund_endpoints(self, alice_client, alice):
        payment = Payment.objects.create(user=alice, reference="PAY-3-ABCDEF12", amount=Decimal("5"))

        response = alice_client.post(f"/api/v1/payments/{payment.id}/refund/", {}, content_type="application/json")
        assert response.status_code == 400

        response = alice_client.post(f"/api/v1/payments/{payment.id}/cancel/")
        assert response.status_code == 200
        assert _json(response)["data"]["payment"]["status"] == "cancelled"

    def test_admin_refund_requires_admin(self, alice_client, moderator_client, alice):
        payment = Payment.objects.create(
            user=alice, reference="PAY-4-ABCDEF12", amount=Decimal("5"), status=Payment.Status.COMPLETED
        )

        assert alice_client.post(f"/api/v1/payments/{payment.id}/admin/refund/").status_code == 403

        response = moderator_client.post(
            f"/api/v1/payments/{payment.id}/admin/refund/", {"reason": "Chargeback"}, content_type="application/json"
        )
        assert response.status_code == 200
        assert _json(response)["message"] == "Refund processed successfully"
