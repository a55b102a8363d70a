# functions-python/runrun_logic/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from firebase_admin import App, auth
from google.cloud.firestore import Client, CollectionReference, DocumentReference

from .config import Settings
from .models import UserProfile


class AuthAccounts:
    """Firebase Auth account operations bound to one Admin app."""

    def __init__(self, app: Optional[App] = None):
        self._app = app

    def delete_user(self, uid: str) -> None:
        auth.delete_user(uid, app=self._app)


@dataclass
class Services:
    """
    Everything an operation needs to talk to the outside world.

    `main.py` builds one instance per functions instance from the Firebase
    Admin app; tests build it from in-memory fakes.
    """
    db: Client
    transport: Any  # notifications.PushTransport
    bucket: Any     # google.cloud.storage.Bucket
    accounts: Any = None  # AuthAccounts
    settings: Settings = field(default_factory=Settings)

    # -------------------------
    # Collection helpers
    # -------------------------

    def users(self) -> CollectionReference:
        return self.db.collection(self.settings.users_collection)

    def user_ref(self, user_id: str) -> DocumentReference:
        return self.users().document(user_id)

    def friends_of(self, user_id: str) -> CollectionReference:
        return self.user_ref(user_id).collection(self.settings.friends_subcollection)

    def goals_of(self, user_id: str) -> CollectionReference:
        return self.user_ref(user_id).collection(self.settings.goals_subcollection)

    def friend_requests(self) -> CollectionReference:
        return self.db.collection(self.settings.friend_requests_collection)

    def runs(self) -> CollectionReference:
        return self.db.collection(self.settings.runs_collection)

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return UserProfile.from_snapshot(self.user_ref(user_id).get())
