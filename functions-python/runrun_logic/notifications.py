# functions-python/runrun_logic/notifications.py
"""
Push notification composition and delivery.

Messages only carry localization keys (resolved from the app's
Localizable.strings on the device) plus positional arguments.
"""

from __future__ import annotations

from typing import Optional, Protocol

from firebase_admin import App, exceptions, messaging
from firebase_functions import logger
from google.auth import exceptions as auth_exceptions

from .context import Services
from .models import FriendRequest, NotificationMessage, NotificationType

FRIEND_REQUEST_TITLE = "FRIEND_REQUEST_TITLE"
FRIEND_REQUEST_BODY = "FRIEND_REQUEST_BODY"
FRIEND_ACCEPTED_TITLE = "FRIEND_ACCEPTED_TITLE"
FRIEND_ACCEPTED_BODY = "FRIEND_ACCEPTED_BODY"
TEST_NOTIFICATION_TITLE = "TEST_NOTIFICATION_TITLE"
TEST_NOTIFICATION_BODY = "TEST_NOTIFICATION_BODY"

# Errors a single send can raise; anything else is a bug and propagates.
TRANSPORT_ERRORS = (exceptions.FirebaseError, auth_exceptions.GoogleAuthError, ValueError)


class PushTransport(Protocol):
    def send(self, message: NotificationMessage) -> str: ...


class FcmTransport:
    """Sends through Firebase Cloud Messaging (APNs for the iOS app)."""

    def __init__(self, app: Optional[App] = None):
        self._app = app

    def send(self, message: NotificationMessage) -> str:
        return messaging.send(message.to_fcm(), app=self._app)


# -------------------------
# Builders
# -------------------------

def friend_request_message(token: str, request: FriendRequest) -> NotificationMessage:
    # fromDisplayName is the name stored on the request, not the live profile.
    return NotificationMessage(
        token=token,
        type=NotificationType.FRIEND_REQUEST,
        data={"requestId": request.id},
        title_key=FRIEND_REQUEST_TITLE,
        body_key=FRIEND_REQUEST_BODY,
        body_args=[request.fromDisplayName],
        badge=1,
    )


def friend_accepted_message(token: str, request: FriendRequest, accepter_name: str) -> NotificationMessage:
    return NotificationMessage(
        token=token,
        type=NotificationType.FRIEND_ACCEPTED,
        data={"requestId": request.id, "userId": request.toUserId},
        title_key=FRIEND_ACCEPTED_TITLE,
        body_key=FRIEND_ACCEPTED_BODY,
        body_args=[accepter_name],
        badge=1,
    )


def diagnostic_message(token: str) -> NotificationMessage:
    return NotificationMessage(
        token=token,
        type=NotificationType.TEST,
        title_key=TEST_NOTIFICATION_TITLE,
        body_key=TEST_NOTIFICATION_BODY,
    )


# -------------------------
# Delivery helpers
# -------------------------

def lookup_push_token(services: Services, user_id: str) -> Optional[str]:
    """Return the device token of `user_id`, or None when there is nobody to notify."""
    profile = services.get_profile(user_id)
    if profile is None:
        logger.info("User not found; skipping notification", userId=user_id)
        return None
    token = profile.push_token
    if token is None:
        logger.info("User has no FCM token; skipping notification", userId=user_id)
    return token


def deliver(transport: PushTransport, message: NotificationMessage, recipient_id: str) -> bool:
    """Best-effort send used by the event triggers. Never raises transport errors."""
    try:
        message_id = transport.send(message)
    except TRANSPORT_ERRORS as e:
        logger.error(
            f"Error sending {message.type.value} notification: {e}",
            userId=recipient_id,
        )
        return False
    logger.info(
        f"Sent {message.type.value} notification",
        userId=recipient_id,
        messageId=message_id,
    )
    return True
