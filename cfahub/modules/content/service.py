from supabase import Client
from cfahub.config import settings
from cfahub.config.content_config import CONTENT_TYPES, get_content_config, select_columns, label
from cfahub.content.access import (
    can_edit, can_manage_settings, can_view, initial_settings, plan_share_sync,
    resolve_desired_groups, unique, validate_settings, validate_title
)
from cfahub.content.folders import FolderPathResolver
from cfahub.content.grouping import present, split_sections
from cfahub.content.tags import filter_by_tags
from cfahub.content.visibility import (
    SECTION_ORDER, ScopeFilter, Visibility, badge_label, classify, raw_values_for, scope_includes, stored_value
)
from cfahub.core.errors import ContentValidationError, backend_failure, format_backend_error, validation_failure
from cfahub.modules.content.schemas import (
    ContentCreate, ContentSettingsUpdate, ContentItemResponse, FolderBlock, SectionResponse,
    ContentListResponse, ContentDetailResponse, SettingsUpdateResponse, DashboardCounts
)
from cfahub.modules.tags.service import TagService
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def validate_external_url(url: Optional[str], required: bool = True) -> Optional[str]:
    """Absolute http(s) URL, stripped. Raises ContentValidationError('invalid_url')."""
    cleaned = (url or "").strip()
    if not cleaned:
        if required:
            raise ContentValidationError("invalid_url")
        return None
    parsed = urlparse(cleaned)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ContentValidationError("invalid_url")
    return cleaned


class ContentService:
    """Items of one content type (documents, flashcard sets or quiz sets)"""

    def __init__(self, supabase: Client, content_type: str):
        self.supabase = supabase
        self.content_type = content_type
        self.config = get_content_config(content_type)
        self.tags = TagService(supabase)

    # Reads

    def get_row(self, item_id: str) -> dict:
        """Base row, or 404 when missing or hidden by row-level security"""
        try:
            result = self.supabase.table(self.config["base_table"])\
                .select(select_columns(self.content_type))\
                .eq("id", item_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise backend_failure(e, f"Fetching {self.content_type} {item_id}")
        if not result or not result.data:
            raise HTTPException(status_code=404, detail=f"{self.content_type} item not found")
        return result.data

    def share_group_ids(self, item_ids: Iterable[str]) -> Dict[str, List[str]]:
        """Share rows per item. Degrades to no shares (the stricter answer) on failure."""
        ids = unique(item_ids)
        if not ids:
            return {}
        fk = self.config["share_fk"]
        try:
            result = self.supabase.table(self.config["share_table"])\
                .select(f"{fk},group_id")\
                .in_(fk, ids)\
                .execute()
        except Exception as e:
            logger.warning(f"Share fetch on {self.config['share_table']} failed: {format_backend_error(e)}")
            return {}
        out: Dict[str, List[str]] = {}
        for row in result.data or []:
            if row.get("group_id") and row.get("group_id") not in out.setdefault(row.get(fk), []):
                out[row.get(fk)].append(row["group_id"])
        return out

    def _to_response(self, row: dict, folder_path: Optional[str] = None, tag_ids: Optional[List[str]] = None) -> ContentItemResponse:
        return ContentItemResponse(
            id=row["id"],
            title=row.get("title") or "",
            owner_id=row.get("owner_id") or "",
            visibility=row.get("visibility"),
            section=classify(row.get("visibility")),
            badge=badge_label(row.get("visibility")),
            folder_id=row.get("folder_id"),
            folder_path=folder_path,
            group_id=row.get("group_id"),
            created_at=str(row["created_at"]) if row.get("created_at") else None,
            tag_ids=tag_ids or [],
            external_url=row.get("external_url"),
            preview_url=row.get("preview_url")
        )

    def _full_response(self, row: dict, locale: str) -> ContentItemResponse:
        """One item with its folder path and tags"""
        path = None
        if row.get("folder_id"):
            path = FolderPathResolver(self.supabase)\
                .resolve_paths([row["folder_id"]], label(locale, "root"))\
                .get(row["folder_id"])
        return self._to_response(row, path, self.tags.item_tag_ids(self.content_type, row["id"]))

    def list_items(
        self,
        user_id: str,
        member_group_ids: List[str],
        locale: str,
        q: Optional[str] = None,
        scope: ScopeFilter = ScopeFilter.ALL,
        tag_ids: Optional[List[str]] = None,
        untagged: bool = False
    ) -> ContentListResponse:
        """
        Listing: most recent first, filtered by title, scope and tags (AND),
        split into visibility sections and then into folder blocks.
        """
        try:
            query = self.supabase.table(self.config["base_table"])\
                .select(select_columns(self.content_type))
            if q and q.strip():
                query = query.ilike("title", f"%{q.strip()}%")
            if scope in (ScopeFilter.SHARED, ScopeFilter.PUBLIC):
                query = query.in_("visibility", raw_values_for(Visibility(scope.value)))
            result = query.order("created_at", desc=True)\
                .limit(settings.list_page_size)\
                .execute()
            rows = result.data or []
        except Exception as e:
            raise backend_failure(e, f"Listing {self.content_type}")

        # Row-level security already scopes the rows; the membership check is repeated here
        shares = self.share_group_ids(r["id"] for r in rows if classify(r.get("visibility")) == Visibility.SHARED)
        rows = [r for r in rows if can_view(user_id, r, member_group_ids, shares.get(r["id"], []))]
        rows = [r for r in rows if scope_includes(scope, classify(r.get("visibility")))]

        links = self.tags.fetch_links(self.content_type, [r["id"] for r in rows])
        requested = list(tag_ids or [])
        if untagged:
            requested.append(settings.untagged_tag_id)
        rows = filter_by_tags(rows, links, requested, untagged, self.config["tag_fk"])

        root_label = label(locale, "root")
        paths = FolderPathResolver(self.supabase).resolve_paths((r.get("folder_id") for r in rows), root_label)
        tags_of: Dict[str, List[str]] = {}
        for link in links:
            tags_of.setdefault(link.get(self.config["tag_fk"]), []).append(link.get("tag_id"))

        items = [
            self._to_response(r, paths.get(r.get("folder_id")) if r.get("folder_id") else None, tags_of.get(r["id"]))
            for r in rows
        ]
        by_section = split_sections([item.model_dump() for item in items])
        sections = []
        for section in SECTION_ORDER:
            if not scope_includes(scope, section):
                continue
            blocks = present(by_section[section], root_label)
            sections.append(SectionResponse(
                section=section,
                label=label(locale, section.value),
                count=len(by_section[section]),
                folders=[FolderBlock(label=name, items=block) for name, block in blocks]
            ))
        return ContentListResponse(content_type=self.content_type, scope=scope, total=len(items), sections=sections)

    def get_detail(
        self,
        item_id: str,
        user_id: str,
        member_group_ids: List[str],
        locale: str,
        active_group_id: Optional[str] = None
    ) -> ContentDetailResponse:
        row = self.get_row(item_id)
        shared = self.share_group_ids([item_id]).get(item_id, [])
        if not can_view(user_id, row, member_group_ids, shared):
            raise HTTPException(status_code=404, detail=f"{self.content_type} item not found")
        owner = can_manage_settings(user_id, row)
        return ContentDetailResponse(
            item=self._full_response(row, locale),
            can_edit=can_edit(user_id, row, member_group_ids, shared),
            can_manage_settings=owner,
            shared_group_ids=shared if owner else [],
            legacy_group_id=row.get("group_id"),
            settings=initial_settings(row, shared, active_group_id) if owner else None
        )

    def require_edit(self, item_id: str, user_id: str, member_group_ids: List[str]) -> dict:
        """Row of an item the caller may edit (questions, cards); 403 otherwise"""
        row = self.get_row(item_id)
        shared = self.share_group_ids([item_id]).get(item_id, [])
        if not can_edit(user_id, row, member_group_ids, shared):
            if not can_view(user_id, row, member_group_ids, shared):
                raise HTTPException(status_code=404, detail=f"{self.content_type} item not found")
            raise HTTPException(status_code=403, detail="You cannot edit this item")
        return row

    def require_view(self, item_id: str, user_id: str, member_group_ids: List[str]) -> dict:
        row = self.get_row(item_id)
        shared = self.share_group_ids([item_id]).get(item_id, [])
        if not can_view(user_id, row, member_group_ids, shared):
            raise HTTPException(status_code=404, detail=f"{self.content_type} item not found")
        return row

    def _require_owner(self, item_id: str, user_id: str) -> dict:
        row = self.get_row(item_id)
        if not can_manage_settings(user_id, row):
            raise HTTPException(status_code=403, detail="Only the owner can change this item")
        return row

    def _check_folder(self, folder_id: Optional[str]):
        """The target folder must exist and hold this content type"""
        if not folder_id:
            return
        try:
            result = self.supabase.table("library_folders")\
                .select("id,kind")\
                .eq("id", folder_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise backend_failure(e, f"Fetching folder {folder_id}")
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Folder not found")
        if result.data.get("kind") != self.config["folder_kind"]:
            raise HTTPException(status_code=400, detail="Folder belongs to another kind")

    @staticmethod
    def _check_share_targets(group_ids: List[str], member_group_ids: List[str], keep: Iterable[str] = ()):
        kept = set(keep)
        foreign = [g for g in group_ids if g not in member_group_ids and g not in kept]
        if foreign:
            raise HTTPException(status_code=403, detail="You can only share with groups you belong to")

    def _document_links(self, data, partial: bool = False) -> dict:
        """external_url / preview_url columns to write; only documents carry them.

        On a settings save (`partial`) only the fields present in the request
        are touched. A blank preview_url clears it.
        """
        if self.content_type != "documents":
            return {}
        links = {}
        if not partial or "external_url" in data.model_fields_set:
            links["external_url"] = validate_external_url(data.external_url)
        if not partial or "preview_url" in data.model_fields_set:
            links["preview_url"] = validate_external_url(data.preview_url, required=False)
        return links

    def check_input(self, data, locale: str, partial: bool = False):
        """Checks that need no backend call. Routes run this before loading memberships."""
        try:
            validate_title(data.title)
            if data.group_ids is not None:
                validate_settings(data.title, data.visibility, data.group_ids)
            self._document_links(data, partial=partial)
        except ContentValidationError as e:
            raise validation_failure(e, locale)

    # Writes

    def create_item(
        self,
        data: ContentCreate,
        user_id: str,
        member_group_ids: List[str],
        locale: str,
        active_group_id: Optional[str] = None
    ) -> ContentItemResponse:
        """Insert the base row, then its share rows and tag links"""
        try:
            requested = data.group_ids
            if data.visibility == Visibility.SHARED:
                requested = resolve_desired_groups(requested, [], None, active_group_id)
            title, groups = validate_settings(data.title, data.visibility, requested)
            extra = self._document_links(data)
        except ContentValidationError as e:
            raise validation_failure(e, locale)
        self._check_share_targets(groups, member_group_ids)
        self._check_folder(data.folder_id)

        try:
            result = self.supabase.table(self.config["base_table"]).insert({
                "title": title,
                "owner_id": user_id,
                "visibility": stored_value(data.visibility),
                "folder_id": data.folder_id,
                "group_id": None,
                **extra
            }).execute()
            if not result.data:
                raise HTTPException(status_code=502, detail=f"Failed to create {self.content_type} item")
            row = result.data[0]
            if groups:
                self.supabase.table(self.config["share_table"])\
                    .insert([{self.config["share_fk"]: row["id"], "group_id": g} for g in groups])\
                    .execute()
            self.tags.add_item_tags(self.content_type, row["id"], data.tag_ids, user_id)
            logger.info(f"Created {self.content_type} {row['id']} ({data.visibility.value}, {len(groups)} groups)")
            return self._to_response(row, tag_ids=unique(data.tag_ids))
        except HTTPException:
            raise
        except Exception as e:
            raise backend_failure(e, f"Creating {self.content_type} item")

    def update_settings(
        self,
        item_id: str,
        data: ContentSettingsUpdate,
        user_id: str,
        member_group_ids: List[str],
        locale: str,
        active_group_id: Optional[str] = None
    ) -> SettingsUpdateResponse:
        """
        Save title, folder, visibility and share list (owner only).
        Documents may also change their links.

        Order: validate, update the base row (clearing the legacy group_id),
        read the current grants, delete removals, insert additions in one call.
        Re-running with the same input converges to the same rows.
        An omitted folder_id keeps the current folder; an explicit null moves
        the item to the root.
        """
        # Explicit lists are checked before anything is read or written
        self.check_input(data, locale, partial=True)
        links = self._document_links(data, partial=True)

        row = self._require_owner(item_id, user_id)
        folder_id = data.folder_id if "folder_id" in data.model_fields_set else row.get("folder_id")
        requested = data.group_ids
        if requested is None and data.visibility == Visibility.SHARED:
            current = self.share_group_ids([item_id]).get(item_id, [])
            requested = resolve_desired_groups(None, current, row.get("group_id"), active_group_id)
        try:
            title, groups = validate_settings(data.title, data.visibility, requested)
        except ContentValidationError as e:
            raise validation_failure(e, locale)
        # Groups the caller is not in may only stay if they are already granted
        if any(g not in member_group_ids and g != row.get("group_id") for g in groups):
            current = self.share_group_ids([item_id]).get(item_id, [])
            self._check_share_targets(groups, member_group_ids, keep=current + unique([row.get("group_id")]))
        if folder_id != row.get("folder_id"):
            self._check_folder(folder_id)

        try:
            result = self.supabase.table(self.config["base_table"])\
                .update({
                    "title": title,
                    "visibility": stored_value(data.visibility),
                    "folder_id": folder_id,
                    "group_id": None,
                    **links
                })\
                .eq("id", item_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail=f"{self.content_type} item not found")
            updated = result.data[0]

            fk = self.config["share_fk"]
            existing_rows = self.supabase.table(self.config["share_table"])\
                .select("group_id")\
                .eq(fk, item_id)\
                .execute()
            existing = unique(r.get("group_id") for r in existing_rows.data or [])
            plan = plan_share_sync(data.visibility, groups, existing)
            logger.info(
                f"Share sync {self.content_type} {item_id}: +{len(plan.to_add)} -{len(plan.to_remove)}"
            )
            if plan.to_remove:
                self.supabase.table(self.config["share_table"])\
                    .delete()\
                    .eq(fk, item_id)\
                    .in_("group_id", plan.to_remove)\
                    .execute()
            if plan.to_add:
                self.supabase.table(self.config["share_table"])\
                    .insert([{fk: item_id, "group_id": g} for g in plan.to_add])\
                    .execute()
            remaining = [g for g in existing if g not in plan.to_remove] + plan.to_add
            return SettingsUpdateResponse(
                item=self._full_response(updated, locale),
                shared_group_ids=remaining,
                added=len(plan.to_add),
                removed=len(plan.to_remove)
            )
        except HTTPException:
            raise
        except Exception as e:
            raise backend_failure(e, f"Saving settings of {self.content_type} {item_id}")

    def set_tags(self, item_id: str, user_id: str, tag_ids: List[str]):
        self._require_owner(item_id, user_id)
        return self.tags.set_item_tags(self.content_type, item_id, tag_ids, user_id)

    def delete_item(self, item_id: str, user_id: str) -> bool:
        """Hard delete (owner only); dependent rows cascade in the database"""
        self._require_owner(item_id, user_id)
        try:
            result = self.supabase.table(self.config["base_table"]).delete().eq("id", item_id).execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise backend_failure(e, f"Deleting {self.content_type} {item_id}")


def dashboard_counts(supabase: Client, user_id: str, member_group_ids: List[str]) -> DashboardCounts:
    """
    Items per content type the caller can open. The listings' view rule is
    applied on top of row-level security so both agree. A failed count shows as 0.
    """
    counts = {}
    for content_type, cfg in CONTENT_TYPES.items():
        try:
            result = supabase.table(cfg["base_table"])\
                .select("id,owner_id,visibility,group_id")\
                .execute()
            rows = result.data or []
        except Exception as e:
            logger.warning(f"Counting {content_type} failed: {format_backend_error(e)}")
            counts[content_type] = 0
            continue
        shares = ContentService(supabase, content_type)\
            .share_group_ids(r["id"] for r in rows if classify(r.get("visibility")) == Visibility.SHARED)
        counts[content_type] = sum(
            1 for r in rows if can_view(user_id, r, member_group_ids, shares.get(r["id"], []))
        )
    return DashboardCounts(**counts)
