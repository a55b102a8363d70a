# functions-python/runrun_logic/account_deletion.py
"""
Account deletion cascade.

Phase 1 removes every Firestore document owned by or pointing at the
account in a single WriteBatch (all or nothing).  Phase 2 removes the
account's avatar objects from Cloud Storage; it runs only after phase 1
committed and its failures are reported, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from firebase_admin import auth, exceptions
from firebase_functions import logger
from google.api_core import exceptions as gexc
from google.auth import exceptions as auth_exceptions
from google.cloud.firestore import DocumentReference
from google.cloud.firestore_v1.base_query import FieldFilter
import requests

from .context import Services
from .errors import BackendError, CascadeError, ErrorCode

# Anything the Storage client raises once the listing or a delete gives up:
# API errors (incl. RetryError), transport resets and credential refresh.
STORAGE_ERRORS = (
    gexc.GoogleAPIError,
    requests.exceptions.RequestException,
    auth_exceptions.GoogleAuthError,
)

@dataclass
class DeletionPlan:
    account_id: str
    profile_found: bool = False
    friend_ids: List[str] = field(default_factory=list)
    _staged: Dict[str, DocumentReference] = field(default_factory=dict, repr=False)

    def stage(self, ref: DocumentReference) -> None:
        # Keyed by path: the same document is deleted once even if two
        # queries return it.
        self._staged.setdefault(ref.path, ref)

    @property
    def refs(self) -> List[DocumentReference]:
        return list(self._staged.values())

    @property
    def paths(self) -> List[str]:
        return list(self._staged.keys())


@dataclass
class CleanupResult:
    deleted: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CascadeReport:
    account_id: str
    documents_deleted: int
    profile_found: bool
    friend_count: int
    avatars: CleanupResult


# -------------------------
# Phase 1: Firestore
# -------------------------

def _stage_query(plan: DeletionPlan, query) -> int:
    count = 0
    for snap in query.stream():
        plan.stage(snap.reference)
        count += 1
    return count


def plan_account_deletion(services: Services, account_id: str) -> DeletionPlan:
    """Collect every document to delete. Reads only; nothing is written."""
    plan = DeletionPlan(account_id=account_id)
    friend_requests = services.friend_requests()

    sent = _stage_query(plan, friend_requests.where(filter=FieldFilter("fromUserId", "==", account_id)))
    received = _stage_query(plan, friend_requests.where(filter=FieldFilter("toUserId", "==", account_id)))
    runs = _stage_query(plan, services.runs().where(filter=FieldFilter("userId", "==", account_id)))

    user_ref = services.user_ref(account_id)
    plan.profile_found = user_ref.get().exists
    if plan.profile_found:
        for edge in services.friends_of(account_id).stream():
            plan.friend_ids.append(edge.id)
            plan.stage(services.friends_of(edge.id).document(account_id))
            plan.stage(edge.reference)
        for goal in services.goals_of(account_id).stream():
            plan.stage(goal.reference)
    else:
        logger.info("Profile not found; skipping friends and goals", userId=account_id)

    plan.stage(user_ref)

    logger.debug(
        "Planned account deletion",
        userId=account_id,
        sentRequests=sent,
        receivedRequests=received,
        runs=runs,
        friends=len(plan.friend_ids),
        documents=len(plan.paths),
    )
    return plan


def commit_deletion_plan(services: Services, plan: DeletionPlan) -> int:
    """Delete every staged document in one atomic batch. Raises CascadeError on failure."""
    batch = services.db.batch()
    for ref in plan.refs:
        batch.delete(ref)
    try:
        batch.commit()
    except gexc.GoogleAPICallError as e:
        logger.error(f"Account deletion batch failed: {e}", userId=plan.account_id)
        raise CascadeError(
            f"Batch commit failed for {plan.account_id}",
            details={"userId": plan.account_id, "documents": len(plan.paths)},
        ) from e
    return len(plan.paths)


# -------------------------
# Phase 2: Cloud Storage
# -------------------------

def _is_own_avatar(name: str, base: str) -> bool:
    # "avatars/<uid>.jpg" or "avatars/<uid>/...", but never "avatars/<uid>x.jpg"
    rest = name[len(base):]
    return rest.startswith(".") or rest.startswith("/")


def delete_avatar_images(services: Services, account_id: str) -> CleanupResult:
    base = f"{services.settings.avatar_prefix}/{account_id}"
    result = CleanupResult()
    try:
        for blob in services.bucket.list_blobs(prefix=base):
            if not _is_own_avatar(blob.name, base):
                continue
            try:
                blob.delete()
            except gexc.NotFound:
                continue
            result.deleted += 1
    except STORAGE_ERRORS as e:
        result.error = str(e)
        logger.error(f"Avatar cleanup failed: {e}", userId=account_id, deleted=result.deleted)
        return result

    logger.info("Avatar cleanup finished", userId=account_id, deleted=result.deleted)
    return result


def delete_account_data(services: Services, account_id: str) -> CascadeReport:
    plan = plan_account_deletion(services, account_id)
    deleted = commit_deletion_plan(services, plan)
    logger.info(
        "Account data deleted",
        userId=account_id,
        documents=deleted,
        profileFound=plan.profile_found,
    )

    avatars = delete_avatar_images(services, account_id)
    return CascadeReport(
        account_id=account_id,
        documents_deleted=deleted,
        profile_found=plan.profile_found,
        friend_count=len(plan.friend_ids),
        avatars=avatars,
    )


def close_account(services: Services, uid: Optional[str]) -> CascadeReport:
    """Delete the caller's data, then the Auth account itself.

    The Auth account is only removed after the batch committed; re-running
    on already-deleted data is a no-op.
    """
    if not uid:
        raise BackendError(ErrorCode.ERR_UNAUTHENTICATED)

    report = delete_account_data(services, uid)
    try:
        services.accounts.delete_user(uid)
    except auth.UserNotFoundError:
        logger.info("Auth user already deleted", userId=uid)
    except exceptions.FirebaseError as e:
        logger.error(f"Auth user deletion failed: {e}", userId=uid)
        raise BackendError(
            ErrorCode.ERR_ACCOUNT_DELETE_FAILED, str(e), details={"userId": uid}
        ) from e
    return report
