"""
Who may view, edit and manage a content item, and how its share rows are
kept in sync with its visibility.

Access is decided from data the caller already fetched: the item row, the
caller's group memberships and the item's share rows. Share rows are checked
against the caller's memberships explicitly; nothing here relies on the
backend having pre-filtered them.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from cfahub.content.visibility import Visibility, classify
from cfahub.core.errors import ContentValidationError


class SharePlan(BaseModel):
    to_add: List[str] = []
    to_remove: List[str] = []

    @property
    def is_noop(self) -> bool:
        return not self.to_add and not self.to_remove


class SettingsPrefill(BaseModel):
    title: str
    visibility: Visibility
    folder_id: Optional[str] = None
    group_ids: List[str] = []
    legacy_group_id: Optional[str] = None
    default_group_id: Optional[str] = None


def unique(ids: Optional[Iterable[Optional[str]]]) -> List[str]:
    """De-duplicate ids, dropping empty ones and keeping first-seen order"""
    out: List[str] = []
    for value in ids or []:
        if value and value not in out:
            out.append(value)
    return out


def is_owner(user_id: Optional[str], item: Dict[str, Any]) -> bool:
    return bool(user_id) and item.get("owner_id") == user_id


def is_shared_member(
    item: Dict[str, Any],
    member_group_ids: Iterable[str],
    share_group_ids: Iterable[str],
    legacy_group_id: Optional[str] = None,
) -> bool:
    """Membership path of the shared tier: legacy single group OR any share grant"""
    if classify(item.get("visibility")) != Visibility.SHARED:
        return False
    members = set(member_group_ids)
    legacy = legacy_group_id if legacy_group_id is not None else item.get("group_id")
    if legacy and legacy in members:
        return True
    return any(gid in members for gid in share_group_ids)


def can_edit(
    user_id: Optional[str],
    item: Dict[str, Any],
    member_group_ids: Iterable[str],
    share_group_ids: Iterable[str],
    legacy_group_id: Optional[str] = None,
) -> bool:
    # Public items are readable by everyone but editable by the owner only
    if is_owner(user_id, item):
        return True
    return is_shared_member(item, member_group_ids, share_group_ids, legacy_group_id)


def can_view(
    user_id: Optional[str],
    item: Dict[str, Any],
    member_group_ids: Iterable[str],
    share_group_ids: Iterable[str],
) -> bool:
    if is_owner(user_id, item):
        return True
    if classify(item.get("visibility")) == Visibility.PUBLIC:
        return True
    return is_shared_member(item, member_group_ids, share_group_ids)


def can_manage_settings(user_id: Optional[str], item: Dict[str, Any]) -> bool:
    """Title, folder, visibility and the share list are owner-only."""
    return is_owner(user_id, item)


def validate_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ContentValidationError("title_required")
    return cleaned


def validate_settings(title: Optional[str], visibility: Visibility, group_ids: Optional[Iterable[str]]):
    """Return the cleaned (title, group ids); raise before anything is written."""
    cleaned_title = validate_title(title)
    groups = unique(group_ids)
    if visibility == Visibility.SHARED and not groups:
        raise ContentValidationError("select_group")
    if visibility != Visibility.SHARED:
        groups = []
    return cleaned_title, groups


def plan_share_sync(visibility: Visibility, desired_group_ids: Iterable[str], existing_group_ids: Iterable[str]) -> SharePlan:
    """Diff the wanted share rows against the current ones.

    Leaving the shared tier removes every grant. Running the plan and then
    planning again with the same input yields an empty plan.
    """
    existing = unique(existing_group_ids)
    if visibility != Visibility.SHARED:
        return SharePlan(to_remove=existing)
    wanted = unique(desired_group_ids)
    return SharePlan(
        to_add=[g for g in wanted if g not in existing],
        to_remove=[g for g in existing if g not in wanted],
    )


def resolve_desired_groups(
    requested: Optional[Iterable[str]],
    existing_group_ids: Iterable[str],
    legacy_group_id: Optional[str],
    active_group_id: Optional[str],
) -> List[str]:
    """Groups to share with when the caller did not send an explicit list.

    An explicit list (even empty) always wins. Otherwise the current grants are
    kept; a legacy single-group row carries its group over into a grant; the
    caller's active group is the last resort.
    """
    if requested is not None:
        return unique(requested)
    existing = unique(existing_group_ids)
    if existing:
        return existing
    if legacy_group_id:
        return [legacy_group_id]
    return unique([active_group_id])


def initial_settings(
    item: Dict[str, Any],
    shared_group_ids: Iterable[str],
    active_group_id: Optional[str] = None,
) -> SettingsPrefill:
    visibility = classify(item.get("visibility"))
    groups = unique(shared_group_ids)
    legacy = item.get("group_id")
    if visibility == Visibility.SHARED and not groups and legacy:
        groups = [legacy]
    return SettingsPrefill(
        title=item.get("title") or "",
        visibility=visibility,
        folder_id=item.get("folder_id"),
        group_ids=groups,
        legacy_group_id=legacy,
        default_group_id=active_group_id,
    )
