# functions-python/runrun_logic/entrypoints.py
"""
Glue between the Functions runtime objects and the operations.

`main.py` only decorates these; keeping them here lets the event and
callable paths run against fakes.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from firebase_functions import https_fn, logger
from pydantic import ValidationError

from .account_deletion import close_account
from .context import Services
from .diagnostics import send_test_notification
from .errors import BackendError, to_https_error
from .friend_requests import UpdateOutcome, handle_friend_request_created, handle_friend_request_updated
from .models import FriendRequest


def uid_or_none(req: https_fn.CallableRequest) -> Optional[str]:
    if req.auth and getattr(req.auth, "uid", None):
        return req.auth.uid
    return None


def parse_friend_request(snap: Any) -> Optional[FriendRequest]:
    """Missing, deleted and malformed documents all read as None."""
    if snap is None or not snap.exists:
        return None
    try:
        return FriendRequest.from_snapshot(snap)
    except ValidationError as e:
        logger.error(f"Malformed friend request {snap.id}: {e}", requestId=snap.id)
        return None

# -------------------------
# Firestore events
# -------------------------

def friend_request_created(services: Services, snap: Any) -> bool:
    request = parse_friend_request(snap)
    if request is None:
        return False
    return handle_friend_request_created(services, request)


def friend_request_updated(services: Services, before_snap: Any, after_snap: Any) -> UpdateOutcome:
    after = parse_friend_request(after_snap)
    if after is None:
        return UpdateOutcome.NO_OP
    # A malformed or missing "before" is read as "not accepted, no timestamp".
    before = parse_friend_request(before_snap)
    return handle_friend_request_updated(services, before, after)

# -------------------------
# Callables
# -------------------------

def diagnostic_notification_call(services: Services, req: https_fn.CallableRequest) -> Dict[str, Any]:
    try:
        return send_test_notification(services, uid_or_none(req))
    except BackendError as be:
        raise to_https_error(be)


def delete_account_call(services: Services, req: https_fn.CallableRequest) -> Dict[str, Any]:
    try:
        report = close_account(services, uid_or_none(req))
    except BackendError as be:
        raise to_https_error(be)
    return {
        "ok": True,
        "deletedDocuments": report.documents_deleted,
        "deletedAvatars": report.avatars.deleted,
    }
