from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from firebase_functions import https_fn
from firebase_functions.https_fn import FunctionsErrorCode
from google.api_core import exceptions as gexc

from fakes import document_snapshot, make_services
from runrun_logic.entrypoints import (
    delete_account_call,
    diagnostic_notification_call,
    friend_request_created,
    friend_request_updated,
    parse_friend_request,
    uid_or_none,
)
from runrun_logic.friend_requests import UpdateOutcome
from runrun_logic.models import NotificationType

T0 = datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc)


def request_doc(**fields):
    data = {
        "fromUserId": "U1",
        "fromDisplayName": "Alice",
        "toUserId": "U2",
        "status": "pending",
        "createdAt": T0,
    }
    data.update(fields)
    return {k: v for k, v in data.items() if v is not None}


def callable_request(uid=None, data=None):
    auth = SimpleNamespace(uid=uid, token={}) if uid else None
    return https_fn.CallableRequest(raw_request=None, data=data or {}, auth=auth)


def two_users():
    return make_services({
        "users/U1": {"displayName": "Alice", "fcmToken": "tok1"},
        "users/U2": {"displayName": "Bob", "fcmToken": "tok2"},
    })


# -------------------------
# Snapshot parsing
# -------------------------

def test_parse_uses_document_id():
    request = parse_friend_request(document_snapshot("friendRequests/r1", request_doc()))
    assert request.id == "r1"
    assert request.toUserId == "U2"


def test_parse_missing_or_deleted_is_none():
    assert parse_friend_request(None) is None
    assert parse_friend_request(document_snapshot("friendRequests/r1", None)) is None


def test_parse_malformed_is_none():
    snap = document_snapshot("friendRequests/r1", request_doc(toUserId=None))
    assert parse_friend_request(snap) is None


# -------------------------
# Firestore events
# -------------------------

def test_created_event_notifies_recipient():
    services = two_users()
    assert friend_request_created(services, document_snapshot("friendRequests/r1", request_doc()))
    assert services.transport.sent[0].payload() == {"type": "friend_request", "requestId": "r1"}


def test_created_event_without_recipient_is_ignored():
    services = two_users()
    snap = document_snapshot("friendRequests/r1", request_doc(toUserId=None))

    assert friend_request_created(services, snap) is False
    assert services.transport.sent == []
    assert services.db.reads == []


def test_updated_event_with_malformed_before_still_notifies_acceptance():
    services = two_users()
    before = document_snapshot("friendRequests/r1", {"status": "pending"})
    after = document_snapshot("friendRequests/r1", request_doc(status="accepted"))

    assert friend_request_updated(services, before, after) is UpdateOutcome.ACCEPTED
    [msg] = services.transport.sent
    assert msg.type is NotificationType.FRIEND_ACCEPTED
    assert msg.token == "tok1"
    assert msg.body_args == ["Bob"]


def test_updated_event_with_malformed_after_is_ignored():
    services = two_users()
    before = document_snapshot("friendRequests/r1", request_doc())
    after = document_snapshot("friendRequests/r1", {"status": "accepted"})

    assert friend_request_updated(services, before, after) is UpdateOutcome.NO_OP
    assert services.transport.sent == []


# -------------------------
# Callables
# -------------------------

def test_uid_comes_from_auth_context_only():
    assert uid_or_none(callable_request()) is None
    assert uid_or_none(callable_request(data={"uid": "U1"})) is None
    assert uid_or_none(callable_request(uid="U1")) == "U1"


@pytest.mark.parametrize("call", [diagnostic_notification_call, delete_account_call])
def test_callables_reject_anonymous_caller(call):
    services = two_users()
    with pytest.raises(https_fn.HttpsError) as ei:
        call(services, callable_request(data={"uid": "U1"}))

    assert ei.value.code is FunctionsErrorCode.UNAUTHENTICATED
    assert services.db.reads == []
    assert services.db.batches == []
    assert services.transport.sent == []


def test_diagnostic_call_returns_message_id():
    services = two_users()
    result = diagnostic_notification_call(services, callable_request(uid="U1"))
    assert result == {"ok": True, "messageId": "projects/runrun/messages/1"}
    assert services.transport.sent[0].token == "tok1"


def test_diagnostic_call_reports_missing_token():
    services = make_services({"users/U1": {"displayName": "Alice"}})
    with pytest.raises(https_fn.HttpsError) as ei:
        diagnostic_notification_call(services, callable_request(uid="U1"))
    assert ei.value.code is FunctionsErrorCode.FAILED_PRECONDITION


def test_delete_account_call_reports_counts():
    services = make_services(
        {
            "users/U1": {"displayName": "Alice"},
            "runs/run1": {"userId": "U1"},
        },
        blobs=["avatars/U1.jpg", "avatars/U2.jpg"],
    )
    result = delete_account_call(services, callable_request(uid="U1"))

    assert result == {"ok": True, "deletedDocuments": 2, "deletedAvatars": 1}
    assert services.accounts.deleted == ["U1"]
    assert services.bucket.names == ["avatars/U2.jpg"]


def test_delete_account_call_maps_cascade_failure_to_internal():
    services = make_services({"users/U1": {"displayName": "Alice"}})
    services.db.commit_error = gexc.Aborted("contention")
    with pytest.raises(https_fn.HttpsError) as ei:
        delete_account_call(services, callable_request(uid="U1"))

    assert ei.value.code is FunctionsErrorCode.INTERNAL
    assert services.accounts.deleted == []
