# functions-python/runrun_logic/friend_requests.py
"""
Friend request notifications.

A request document is written by the app (create, accept, reject, re-send
after 24h); these handlers only observe it and notify the other party.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from firebase_functions import logger

from .context import Services
from .models import FriendRequest
from .notifications import (
    deliver,
    friend_accepted_message,
    friend_request_message,
    lookup_push_token,
)


class UpdateOutcome(str, Enum):
    NO_OP = "no_op"
    ACCEPTED = "accepted"
    RESEND = "resend"


def classify_update(before: Optional[FriendRequest], after: FriendRequest) -> UpdateOutcome:
    """Decide which single notification (if any) an update deserves.

    The first matching case wins, so one update event never produces both
    an "accepted" and a "re-sent" notification.
    """
    was_accepted = before is not None and before.is_accepted
    if after.is_accepted and not was_accepted:
        return UpdateOutcome.ACCEPTED

    if (
        after.is_pending
        and before is not None
        and before.createdAt is not None
        and after.createdAt is not None
        and after.createdAt > before.createdAt
    ):
        return UpdateOutcome.RESEND

    return UpdateOutcome.NO_OP


def handle_friend_request_created(services: Services, request: FriendRequest) -> bool:
    """Notify the recipient of a new (or re-sent) request. Returns True if a push went out."""
    if request.is_self_request:
        logger.warn("Ignoring friend request addressed to its sender", requestId=request.id)
        return False

    token = lookup_push_token(services, request.toUserId)
    if token is None:
        return False
    return deliver(services.transport, friend_request_message(token, request), request.toUserId)


def _accepter_name(services: Services, request: FriendRequest) -> str:
    profile = services.get_profile(request.toUserId)
    if profile is not None and profile.displayName:
        return profile.displayName
    return services.settings.placeholder_display_name


def handle_friend_request_accepted(services: Services, request: FriendRequest) -> bool:
    """Tell the original sender that the recipient accepted."""
    accepter_name = _accepter_name(services, request)
    token = lookup_push_token(services, request.fromUserId)
    if token is None:
        return False
    message = friend_accepted_message(token, request, accepter_name)
    return deliver(services.transport, message, request.fromUserId)


def handle_friend_request_updated(
        services: Services,
        before: Optional[FriendRequest],
        after: FriendRequest,
) -> UpdateOutcome:
    outcome = classify_update(before, after)
    if outcome is UpdateOutcome.ACCEPTED:
        handle_friend_request_accepted(services, after)
    elif outcome is UpdateOutcome.RESEND:
        handle_friend_request_created(services, after)
    else:
        logger.debug(
            "Friend request update needs no notification",
            requestId=after.id,
            status=after.status,
        )
    return outcome
