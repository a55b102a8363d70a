# functions-python/runrun_logic/diagnostics.py
from __future__ import annotations

from typing import Any, Dict, Optional

from firebase_functions import logger

from .context import Services
from .errors import BackendError, ErrorCode
from .notifications import TRANSPORT_ERRORS, diagnostic_message


def send_test_notification(services: Services, uid: Optional[str]) -> Dict[str, Any]:
    """Push a test notification to the caller's own device.

    `uid` must come from the verified auth context. Unlike the triggers, a
    failed send is reported to the caller.
    """
    if not uid:
        raise BackendError(ErrorCode.ERR_UNAUTHENTICATED)

    profile = services.get_profile(uid)
    if profile is None:
        raise BackendError(ErrorCode.ERR_PROFILE_NOT_FOUND, details={"userId": uid})

    token = profile.push_token
    if token is None:
        raise BackendError(ErrorCode.ERR_NO_PUSH_TOKEN, details={"userId": uid})

    try:
        message_id = services.transport.send(diagnostic_message(token))
    except TRANSPORT_ERRORS as e:
        logger.error(f"Error sending test notification: {e}", userId=uid)
        raise BackendError(ErrorCode.ERR_NOTIFICATION_FAILED, str(e)) from e

    logger.info("Sent test notification", userId=uid, messageId=message_id)
    return {"ok": True, "messageId": message_id}
