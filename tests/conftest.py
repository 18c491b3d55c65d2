"""
Pytest configuration and fixtures for testing.
"""

import random

import pytest
from django.contrib.auth import get_user_model

from core.config import EngineConfig
from core.services.notification_gate import NotificationGate
from core.services.notification_service import NotificationService
from core.services.notification_templates import NotificationTemplates
from tests.factories import RecordingDelivery

User = get_user_model()


@pytest.fixture
def engine_config():
    """Provide the default EngineConfig."""
    return EngineConfig()


@pytest.fixture
def delivery():
    return RecordingDelivery()


@pytest.fixture
def gate(engine_config):
    return NotificationGate(engine_config)


@pytest.fixture
def notifier(engine_config, gate, delivery):
    """NotificationService with a recording gateway and seeded variant choice."""
    return NotificationService(
        config=engine_config,
        gate=gate,
        templates=NotificationTemplates(rng=random.Random(7)),
        delivery=delivery,
    )


@pytest.fixture
def user_factory(db):
    """Factory for creating users."""
    counter = {"value": 0}

    def create_user(username=None, push_token="__auto__", **kwargs):
        counter["value"] += 1
        if not username:
            username = f"user_{counter['value']}"
        if push_token == "__auto__":
            push_token = f"push-{username}"

        return User.objects.create_user(
            username=username,
            password="testpass123",
            push_token=push_token,
            **kwargs,
        )

    return create_user


@pytest.fixture
def user(user_factory):
    """Provide a single test user."""
    return user_factory()


@pytest.fixture
def api_client():
    """Provide unauthenticated API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def authenticated_client(user_factory):
    """Provide authenticated API client with user."""
    from rest_framework.test import APIClient
    from rest_framework_simplejwt.tokens import RefreshToken

    user = user_factory()
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")
    client.user = user

    return client
