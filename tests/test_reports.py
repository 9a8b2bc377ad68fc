"""
Moderation Tests for SwapRide

Tests for reports and admin remediation:
- Submission validation and duplicate guard
- Listing report counters
- Resolve actions per target kind
- Dismiss / status updates
- Admin-only endpoints
"""

import json
import uuid

import pytest

from apps.listings.models import ListingStatus
from apps.reports.models import Report
from apps.reports.services import ModerationService, ReportTarget
from apps.swaps.models import Swap
from apps.users.models import Review
from core.exceptions import InvalidInput, InvalidState, NotFound

pytestmark = pytest.mark.django_db


@pytest.fixture
def service(notifier):
    return ModerationService(notifier=notifier)


@pytest.fixture
def vehicle_report(service, carol, bob_vehicle):
    return service.submit(carol, "vehicle", bob_vehicle.id, "Scam", "Price too good to be true")


def _json(response):
    return json.loads(response.content)


# =============================================================================
# Submission
# =============================================================================


class TestSubmit:
    """Tests for ModerationService.submit."""

    def test_creates_pending_report(self, vehicle_report, carol, bob_vehicle):
        assert vehicle_report.status == Report.Status.PENDING
        assert vehicle_report.reporter == carol
        assert vehicle_report.item_id == bob_vehicle.id

    def test_listing_is_flagged(self, service, vehicle_report, alice, bob_vehicle):
        service.submit(alice, "vehicle", bob_vehicle.id, "Wrong photos")
        bob_vehicle.refresh_from_db()

        assert bob_vehicle.is_reported is True
        assert bob_vehicle.report_count == 2

    def test_duplicate_open_report_rejected(self, service, vehicle_report, carol, bob_vehicle):
        with pytest.raises(InvalidInput, match="You have already reported this item"):
            service.submit(carol, "vehicle", bob_vehicle.id, "Again")

    def test_can_report_again_after_closure(self, service, vehicle_report, carol, bob_vehicle, moderator):
        service.dismiss(vehicle_report.id, moderator)
        assert service.submit(carol, "vehicle", bob_vehicle.id, "Still a scam").status == Report.Status.PENDING

    def test_invalid_type(self, service, carol, bob_vehicle):
        with pytest.raises(InvalidInput, match="Invalid item type"):
            service.submit(carol, "boat", bob_vehicle.id, "?")

    @pytest.mark.parametrize("item_id", ["not-a-uuid", str(uuid.uuid4())])
    def test_missing_target(self, service, carol, item_id):
        with pytest.raises(NotFound, match="Item not found"):
            service.submit(carol, "part", item_id, "?")

    def test_user_target(self, service, carol, bob):
        report = service.submit(carol, "user", bob.id, "Harassment")
        assert ReportTarget(report.item_type, report.item_id).resolve() == bob


# =============================================================================
# Resolution
# =============================================================================


class TestResolve:
    """Tests for resolve actions."""

    def test_remove_listing(self, service, vehicle_report, moderator, bob_vehicle, notifier):
        report = service.resolve(vehicle_report.id, moderator, "remove_item", "Listing removed")
        bob_vehicle.refresh_from_db()

        assert report.status == Report.Status.RESOLVED
        assert report.action_taken == "remove_item"
        assert report.resolved_by == moderator
        assert report.resolved_at is not None
        assert bob_vehicle.status == ListingStatus.INACTIVE
        assert notifier.names == ["notify_report_resolved"]

    def test_suspend_listing_sends_back_to_review(self, service, vehicle_report, moderator, bob_vehicle):
        service.resolve(vehicle_report.id, moderator, "suspend_item")
        bob_vehicle.refresh_from_db()
        assert bob_vehicle.status == ListingStatus.PENDING

    def test_ban_listing_seller(self, service, vehicle_report, moderator, bob):
        service.resolve(vehicle_report.id, moderator, "ban_user")
        bob.refresh_from_db()

        assert bob.account_status == "banned"
        assert bob.is_active is False
        assert bob.ban_reason == "Banned due to report: Scam"

    def test_suspend_user(self, service, carol, bob, moderator):
        report = service.submit(carol, "user", bob.id, "Spam")
        service.resolve(report.id, moderator, "suspend_item")
        bob.refresh_from_db()

        assert bob.account_status == "suspended"
        assert bob.is_active is True

    def test_remove_review(self, service, carol, alice, bob, moderator):
        review = Review.objects.create(reviewer=alice, reviewed_user=bob, rating=1, comment="Awful")
        report = service.submit(carol, "review", review.id, "Abusive")
        service.resolve(report.id, moderator, "remove_item")
        review.refresh_from_db()

        assert review.status == Review.Status.REJECTED

    def test_swap_cannot_be_removed(self, service, carol, alice, bob, alice_vehicle, bob_vehicle, moderator):
        swap = Swap.objects.create(
            initiator=alice, receiver=bob,
            offered_item_id=alice_vehicle.id,
            requested_item_type="vehicle", requested_item_id=bob_vehicle.id,
        )
        report = service.submit(alice, "swap", swap.id, "No show")

        with pytest.raises(InvalidInput):
            service.resolve(report.id, moderator, "remove_item")

        report.refresh_from_db()
        assert report.status == Report.Status.PENDING

    def test_no_action_leaves_item(self, service, vehicle_report, moderator, bob_vehicle):
        report = service.resolve(vehicle_report.id, moderator, "no_action", "Looks fine")
        bob_vehicle.refresh_from_db()

        assert report.resolution == "Looks fine"
        assert bob_vehicle.status == ListingStatus.ACTIVE

    def test_unknown_action(self, service, vehicle_report, moderator):
        with pytest.raises(InvalidInput, match="Invalid action"):
            service.resolve(vehicle_report.id, moderator, "nuke")

    def test_cannot_resolve_twice(self, service, vehicle_report, moderator):
        service.resolve(vehicle_report.id, moderator, "no_action")
        with pytest.raises(InvalidState, match="Report is already resolved"):
            service.resolve(vehicle_report.id, moderator, "remove_item")

    def test_dismiss(self, service, vehicle_report, moderator, notifier):
        report = service.dismiss(vehicle_report.id, moderator, "Not a scam")

        assert report.status == Report.Status.DISMISSED
        assert report.action_taken == "no_action"
        assert notifier.names == ["notify_report_resolved"]

        with pytest.raises(InvalidState):
            service.dismiss(vehicle_report.id, moderator)

    def test_notifier_failure_still_closes_report(self, failing_notifier, vehicle_report, moderator, bob_vehicle):
        service = ModerationService(notifier=failing_notifier)

        report = service.resolve(vehicle_report.id, moderator, "remove_item")

        assert report.status == Report.Status.RESOLVED
        bob_vehicle.refresh_from_db()
        assert bob_vehicle.status == ListingStatus.INACTIVE

    def test_update_status(self, service, vehicle_report):
        report = service.update_status(vehicle_report.id, "reviewed", "Looking into it")

        assert report.status == Report.Status.REVIEWED
        assert report.resolution == "Looking into it"

        with pytest.raises(InvalidInput):
            service.update_status(vehicle_report.id, "resolved")


# =============================================================================
# Endpoints
# =============================================================================


class TestReportEndpoints:
    """HTTP surface of the reports app."""

    def test_submit_and_list_mine(self, alice_client, bob_vehicle):
        response = alice_client.post(
            "/api/v1/reports/",
            {"itemType": "vehicle", "itemId": str(bob_vehicle.id), "reason": "Stolen car"},
            content_type="application/json",
        )
        assert response.status_code == 201
        assert _json(response)["message"] == "Report submitted successfully"

        body = _json(alice_client.get("/api/v1/reports/mine/"))
        assert body["results"] == 1
        assert body["data"]["reports"][0]["reason"] == "Stolen car"

    def test_submit_invalid_type(self, alice_client, bob_vehicle):
        response = alice_client.post(
            "/api/v1/reports/",
            {"itemType": "boat", "itemId": str(bob_vehicle.id), "reason": "?"},
            content_type="application/json",
        )

        assert response.status_code == 400
        assert _json(response)["errors"]["item_type"] == ["Invalid item type"]

    def test_queue_is_admin_only(self, alice_client, moderator_client, vehicle_report):
        assert alice_client.get("/api/v1/reports/").status_code == 403

        body = _json(moderator_client.get("/api/v1/reports/", {"status": "pending"}))
        assert body["results"] == 1
        assert body["stats"] == {"pending": 1}

    def test_detail_reports_item_existence(self, moderator_client, vehicle_report, bob_vehicle):
        bob_vehicle.delete()
        body = _json(moderator_client.get(f"/api/v1/reports/{vehicle_report.id}/"))

        assert body["data"]["itemExists"] is False

    def test_resolve_endpoint(self, moderator_client, vehicle_report, carol):
        response = moderator_client.post(
            f"/api/v1/reports/{vehicle_report.id}/resolve/",
            {"action": "remove_item", "resolution": "Removed"},
            content_type="application/json",
        )

        assert response.status_code == 200
        assert _json(response)["data"]["report"]["status"] == "resolved"
        assert carol.notifications.filter(type="report_resolved").exists()

    def test_resolve_is_admin_only(self, bob_client, vehicle_report):
        response = bob_client.post(
            f"/api/v1/reports/{vehicle_report.id}/resolve/", {"action": "no_action"}, content_type="application/json"
        )
        assert response.status_code == 403

    def test_patch_and_delete(self, moderator_client, vehicle_report):
        response = moderator_client.patch(
            f"/api/v1/reports/{vehicle_report.id}/", {"status": "reviewed"}, content_type="application/json"
        )
        assert _json(response)["data"]["report"]["status"] == "reviewed"

        assert moderator_client.delete(f"/api/v1/reports/{vehicle_report.id}/").status_code == 200
        assert not Report.objects.exists()

    def test_dismiss_endpoint(self, moderator_client, vehicle_report):
        response = moderator_client.post(
            f"/api/v1/reports/{vehicle_report.id}/dismiss/", {}, content_type="application/json"
        )
        assert response.status_code == 200
        assert _json(response)["data"]["report"]["status"] == "dismissed"
        assert _json(response)["data"]["report"]["resolution"] == "Dismissed"

    def test_dismiss_endpoint_with_resolution(self, moderator_client, vehicle_report):
        response = moderator_client.post(
            f"/api/v1/reports/{vehicle_report.id}/dismiss/",
            {"resolution": "Listing is accurate"},
            content_type="application/json",
        )
        assert _json(response)["data"]["report"]["resolution"] == "Listing is accurate"
