"""
SwapRide - Test Fixtures

Shared pytest fixtures for all test modules.
"""

from decimal import Decimal

import pytest
from django.test import Client

from apps.listings.models import Part, Vehicle
from apps.notifications.services import notification_service
from apps.payments.services import payment_service


# =============================================================================
# External services
# =============================================================================


@pytest.fixture(autouse=True)
def mock_external_services(monkeypatch):
    """Keep every outbound channel in mock mode regardless of the environment."""
    monkeypatch.setattr(notification_service.email, "use_mock", True)
    monkeypatch.setattr(notification_service.sms, "use_mock", True)
    monkeypatch.setattr(notification_service.realtime, "use_mock", True)
    monkeypatch.setattr(payment_service.gateway, "use_mock", True)
    monkeypatch.setattr(payment_service.gateway, "webhook_secret", "")


class RecordingNotifier:
    """Stands in for NotificationService; records every notify_* call."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if not name.startswith("notify_"):
            raise AttributeError(name)

        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))

        return record

    @property
    def names(self):
        return [name for name, _, _ in self.calls]


class FailingNotifier:
    """Notifier whose every notify_* call blows up."""

    def __getattr__(self, name):
        if not name.startswith("notify_"):
            raise AttributeError(name)

        def fail(*args, **kwargs):
            raise RuntimeError(f"{name} exploded")

        return fail


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


# =============================================================================
# Users
# =============================================================================


@pytest.fixture
def make_user(django_user_model):
    counter = {"n": 0}

    def _make_user(**fields):
        counter["n"] += 1
        fields.setdefault("email", f"user{counter['n']}@swapride.test")
        fields.setdefault("first_name", f"User{counter['n']}")
        fields.setdefault("last_name", "Test")
        return django_user_model.objects.create_user(password="pass12345", **fields)

    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user(email="alice@swapride.test", first_name="Alice", last_name="Adams")


@pytest.fixture
def bob(make_user):
    return make_user(email="bob@swapride.test", first_name="Bob", last_name="Brown")


@pytest.fixture
def carol(make_user):
    return make_user(email="carol@swapride.test", first_name="Carol", last_name="Clark")


@pytest.fixture
def moderator(make_user, django_user_model):
    return make_user(email="mod@swapride.test", first_name="Mod", role=django_user_model.Role.ADMIN)


# =============================================================================
# Listings
# =============================================================================


@pytest.fixture
def make_vehicle():
    def _make_vehicle(seller, **fields):
        fields.setdefault("title", "Toyota Corolla 2015")
        fields.setdefault("make", "Toyota")
        fields.setdefault("model", "Corolla")
        fields.setdefault("year", 2015)
        fields.setdefault("price", Decimal("8500.00"))
        fields.setdefault("open_to_swap", True)
        return Vehicle.objects.create(seller=seller, **fields)

    return _make_vehicle


@pytest.fixture
def make_part():
    def _make_part(seller, **fields):
        fields.setdefault("title", "Brake pads")
        fields.setdefault("part_name", "Front brake pads")
        fields.setdefault("category", "brakes")
        fields.setdefault("price", Decimal("45.00"))
        return Part.objects.create(seller=seller, **fields)

    return _make_part


@pytest.fixture
def alice_vehicle(alice, make_vehicle):
    return make_vehicle(alice, title="Alice's Civic", make="Honda", model="Civic", year=2018)


@pytest.fixture
def bob_vehicle(bob, make_vehicle):
    return make_vehicle(bob, title="Bob's Corolla")


# =============================================================================
# Clients
# =============================================================================


@pytest.fixture
def login():
    def _login(user):
        client = Client()
        client.force_login(user)
        return client

    return _login


@pytest.fixture
def alice_client(alice, login):
    return login(alice)


@pytest.fixture
def bob_client(bob, login):
    return login(bob)


@pytest.fixture
def moderator_client(moderator, login):
    return login(moderator)
