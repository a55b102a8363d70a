# functions-python/runrun_logic/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _str_env(env: Mapping[str, str], key: str, default: str) -> str:
    raw = (env.get(key) or "").strip()
    return raw or default


@dataclass(frozen=True)
class Settings:
    """
    Deployment settings for the functions codebase.
    Every field can be overridden through a RUNRUN_* environment variable;
    the defaults match the collections the iOS app writes.
    """
    # Functions runtime
    region: str = "asia-northeast1"
    timeout_sec: int = 60

    # Firestore layout
    users_collection: str = "users"
    friend_requests_collection: str = "friendRequests"
    runs_collection: str = "runs"
    friends_subcollection: str = "friends"
    goals_subcollection: str = "goals"

    # Cloud Storage layout
    avatar_prefix: str = "avatars"

    # Name shown when the accepting user has no display name
    placeholder_display_name: str = "Runner"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            region=_str_env(env, "RUNRUN_REGION", cls.region),
            timeout_sec=_int_env(env, "RUNRUN_TIMEOUT_SEC", cls.timeout_sec),
            users_collection=_str_env(env, "RUNRUN_USERS_COLLECTION", cls.users_collection),
            friend_requests_collection=_str_env(
                env, "RUNRUN_FRIEND_REQUESTS_COLLECTION", cls.friend_requests_collection
            ),
            runs_collection=_str_env(env, "RUNRUN_RUNS_COLLECTION", cls.runs_collection),
            avatar_prefix=_str_env(env, "RUNRUN_AVATAR_PREFIX", cls.avatar_prefix).strip("/"),
            placeholder_display_name=_str_env(
                env, "RUNRUN_PLACEHOLDER_NAME", cls.placeholder_display_name
            ),
        )
