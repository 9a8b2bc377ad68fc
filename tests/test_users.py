"""
User Account Tests for SwapRide

Tests for the profile endpoint, account restrictions and
subscription expiry housekeeping.
"""

import json
from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from apps.notifications.models import Notification, NotificationType

pytestmark = pytest.mark.django_db


class TestProfile:
    """Tests for /api/v1/users/me/."""

    def test_me(self, alice_client):
        user = json.loads(alice_client.get("/api/v1/users/me/").content)["data"]["user"]

        assert user["email"] == "alice@swapride.test"
        assert user["subscription"]["plan"] == "free"
        assert user["notificationSettings"] == {"email": True, "sms": False, "push": True}

    def test_anonymous(self, client):
        assert client.get("/api/v1/users/me/").status_code == 401

    def test_banned_account_is_forbidden(self, make_user, login):
        user = make_user(account_status="banned")
        response = login(user).get("/api/v1/users/me/")

        assert response.status_code == 403
        assert json.loads(response.content)["message"] == "Your account is banned"


class TestExpireSubscriptions:
    """Tests for the expire_subscriptions command."""

    def test_expires_lapsed_and_warns_expiring(self, make_user):
        now = timezone.now()
        lapsed = make_user(
            subscription_plan="basic", subscription_is_active=True,
            subscription_end_date=now - timedelta(days=1),
        )
        ending = make_user(
            subscription_plan="premium", subscription_is_active=True,
            subscription_end_date=now + timedelta(days=2, hours=1),
        )
        healthy = make_user(
            subscription_plan="premium", subscription_is_active=True,
            subscription_end_date=now + timedelta(days=20),
        )

        out = StringIO()
        call_command("expire_subscriptions", stdout=out)

        for user in (lapsed, ending, healthy):
            user.refresh_from_db()
        assert lapsed.subscription_is_active is False
        assert ending.subscription_is_active is True

        warning = Notification.objects.get(type=NotificationType.SUBSCRIPTION_EXPIRING)
        assert warning.user == ending
        assert warning.data["daysLeft"] == 2
        assert "1 subscription(s) expired, 1 expiry warning(s) sent" in out.getvalue()
