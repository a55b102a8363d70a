# functions-python/runrun_logic/models.py
"""
Document models for the collections the RunRun app writes.

Field names follow the stored Firestore fields (camelCase) so that
`model_validate(snapshot.to_dict())` works without aliases.  Unknown fields
(iconName, avatarURL, totals...) are ignored.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from firebase_admin import messaging
from pydantic import BaseModel, ConfigDict, Field


class FriendRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class NotificationType(str, Enum):
    FRIEND_REQUEST = "friend_request"
    FRIEND_ACCEPTED = "friend_accepted"
    TEST = "test"


class FriendRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    fromUserId: str
    fromDisplayName: str = ""
    toUserId: str
    # Kept as a plain string: a status the app does not know yet must not
    # break the trigger, it simply never matches.
    status: Optional[str] = None
    createdAt: Optional[datetime] = None

    @classmethod
    def from_snapshot(cls, snap: Any) -> "FriendRequest":
        data: Dict[str, Any] = dict(snap.to_dict() or {})
        data["id"] = snap.id
        return cls.model_validate(data)

    @property
    def is_accepted(self) -> bool:
        return self.status == FriendRequestStatus.ACCEPTED.value

    @property
    def is_pending(self) -> bool:
        return self.status == FriendRequestStatus.PENDING.value

    @property
    def is_self_request(self) -> bool:
        return self.fromUserId == self.toUserId


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    displayName: Optional[str] = None
    email: Optional[str] = None
    createdAt: Optional[datetime] = None
    fcmToken: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snap: Any) -> Optional["UserProfile"]:
        if not snap.exists:
            return None
        data: Dict[str, Any] = dict(snap.to_dict() or {})
        data["id"] = snap.id
        return cls.model_validate(data)

    @property
    def push_token(self) -> Optional[str]:
        token = (self.fcmToken or "").strip()
        return token or None


class NotificationMessage(BaseModel):
    """A push payload addressed to one device.

    The alert only carries localization keys and positional arguments; each
    device renders it in its own language.
    """

    token: str
    type: NotificationType
    data: Dict[str, str] = Field(default_factory=dict)
    title_key: str
    body_key: str
    body_args: List[str] = Field(default_factory=list)
    sound: str = "default"
    badge: Optional[int] = None

    def payload(self) -> Dict[str, str]:
        out = {k: str(v) for k, v in self.data.items()}
        out["type"] = self.type.value
        return out

    def to_fcm(self) -> messaging.Message:
        alert = messaging.ApsAlert(
            title_loc_key=self.title_key,
            loc_key=self.body_key,
            loc_args=list(self.body_args) or None,
        )
        return messaging.Message(
            token=self.token,
            data=self.payload(),
            apns=messaging.APNSConfig(
                payload=messaging.APNSPayload(
                    aps=messaging.Aps(alert=alert, sound=self.sound, badge=self.badge),
                ),
            ),
        )
