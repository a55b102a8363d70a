# functions-python/main.py
"""
Firebase Cloud Functions (Gen2, Python) for the RunRun app.

Firestore triggers on friendRequests/{requestId} notify the other party of a
friend request; the callables are invoked from the app with
httpsCallable(functions, 'name').
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import firestore as admin_fs, storage
from firebase_functions import firestore_fn, https_fn, options

from runrun_logic import entrypoints
from runrun_logic.config import Settings
from runrun_logic.context import AuthAccounts, Services
from runrun_logic.notifications import FcmTransport

settings = Settings.from_env()

# -------------------------
# Región y timeout
# -------------------------
options.set_global_options(region=settings.region, timeout_sec=settings.timeout_sec)

# -------------------------
# Admin SDK
# -------------------------
if not firebase_admin._apps:
    # Emuladores locales:
    #   FIRESTORE_EMULATOR_HOST=127.0.0.1:8080
    #   FIREBASE_AUTH_EMULATOR_HOST=127.0.0.1:9099
    #   FIREBASE_STORAGE_EMULATOR_HOST=127.0.0.1:9199
    firebase_admin.initialize_app()

app = firebase_admin.get_app()

services = Services(
    db=admin_fs.client(app),
    transport=FcmTransport(app),
    bucket=storage.bucket(app=app),
    accounts=AuthAccounts(app),
    settings=settings,
)

FRIEND_REQUEST_DOCUMENT = f"{settings.friend_requests_collection}/{{requestId}}"

# -------------------------
# Firestore triggers
# -------------------------

@firestore_fn.on_document_created(document=FRIEND_REQUEST_DOCUMENT)
def on_friend_request_created(
        event: firestore_fn.Event[Optional[firestore_fn.DocumentSnapshot]],
) -> None:
    entrypoints.friend_request_created(services, event.data)


@firestore_fn.on_document_updated(document=FRIEND_REQUEST_DOCUMENT)
def on_friend_request_updated(
        event: firestore_fn.Event[firestore_fn.Change[Optional[firestore_fn.DocumentSnapshot]]],
) -> None:
    entrypoints.friend_request_updated(services, event.data.before, event.data.after)

# -------------------------
# Endpoints callable
# -------------------------

@https_fn.on_call()
def send_test_notification(req: https_fn.CallableRequest) -> Dict[str, Any]:
    return entrypoints.diagnostic_notification_call(services, req)


@https_fn.on_call()
def delete_account(req: https_fn.CallableRequest) -> Dict[str, Any]:
    return entrypoints.delete_account_call(services, req)
