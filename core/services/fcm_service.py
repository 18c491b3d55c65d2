"""
Firebase Cloud Messaging (FCM) service for push notifications.

Hands rendered notifications to the push gateway. Delivery is best effort:
a True result means the gateway accepted the message, not that the device
received it.
"""

import logging
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials, messaging
from django.conf import settings

from core.models import User

logger = logging.getLogger(__name__)


def mask_token(token: str) -> str:
    return f"...{token[-6:]}" if token and len(token) > 6 else "***"


class FCMService:
    """Firebase Cloud Messaging delivery adapter."""

    _initialized = False

    @classmethod
    def initialize(cls):
        """
        Initialize Firebase Admin SDK.

        Called once at worker/app startup. Reads credentials from
        settings.FIREBASE_CREDENTIALS_PATH.
        """
        if cls._initialized:
            return

        try:
            cred_path = getattr(settings, "FIREBASE_CREDENTIALS_PATH", None)
            if cred_path:
                cred = credentials.Certificate(cred_path)
                firebase_admin.initialize_app(cred)
                cls._initialized = True
                logger.info("Firebase Admin SDK initialized successfully")
            else:
                logger.warning("FIREBASE_CREDENTIALS_PATH not configured")
        except Exception as e:
            logger.error(f"Failed to initialize Firebase Admin SDK: {e}")

    @staticmethod
    def build_message(
        push_token: str, title: str, body: str, data: Optional[Dict[str, Any]] = None
    ) -> messaging.Message:
        # FCM data payloads only carry strings
        payload = {key: str(value) for key, value in (data or {}).items() if value is not None}
        return messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            data=payload,
            token=push_token,
        )

    @staticmethod
    def send_to_token(
        push_token: str,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Send a push notification to one delivery target.

        Args:
            push_token: Device token registered by the app
            title: Notification title
            body: Notification body text
            data: Optional data payload; values are sent as strings

        Returns:
            True if the gateway accepted the message, False otherwise
        """
        if not FCMService._initialized:
            logger.warning("FCM not initialized, push not sent")
            return False

        try:
            response = messaging.send(
                FCMService.build_message(push_token, title, body, data)
            )
            logger.info(f"Push accepted by gateway: {response}")
            return True

        except messaging.UnregisteredError:
            logger.warning(f"Unregistered push token {mask_token(push_token)}, clearing it")
            User.objects.filter(push_token=push_token).update(push_token=None)
            return False

        except Exception as e:
            logger.error(f"Failed to send push to {mask_token(push_token)}: {e}")
            return False
