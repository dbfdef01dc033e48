from fastapi import APIRouter, Depends, Query
from cfahub.content.visibility import normalize_scope
from cfahub.modules.content.schemas import (
    ContentCreate, ContentSettingsUpdate, ContentItemResponse, ContentListResponse,
    ContentDetailResponse, SettingsUpdateResponse, DashboardCounts
)
from cfahub.modules.content.service import ContentService, dashboard_counts
from cfahub.modules.tags.schemas import ItemTagsUpdate, ItemTagsResponse
from cfahub.config.content_config import CONTENT_TYPES, get_content_config
from cfahub.core.dependencies import (
    get_current_user, get_db, get_access_cache, get_locale, get_user_group_ids, get_active_group_id
)
from supabase import Client
from typing import List, Optional, Dict


def content_service_dependency(content_type: str):
    def get_content_service(db: Client = Depends(get_db)) -> ContentService:
        return ContentService(db, content_type)
    return get_content_service


def build_content_router(content_type: str) -> APIRouter:
    """Same endpoints for every content type, mounted under the type's prefix"""
    cfg = get_content_config(content_type)
    router = APIRouter(prefix=cfg["prefix"], tags=[content_type])
    get_content_service = content_service_dependency(content_type)

    @router.get("", response_model=ContentListResponse)
    async def list_items(
        q: Optional[str] = None,
        scope: Optional[str] = Query(None, description="all | private | shared | public"),
        tags: List[str] = Query(default=[]),
        untagged: bool = False,
        user_data: Dict = Depends(get_current_user),
        service: ContentService = Depends(get_content_service),
        db: Client = Depends(get_db),
        cache: Dict = Depends(get_access_cache),
        locale: str = Depends(get_locale)
    ):
        """List items grouped by visibility section and folder"""
        member_groups = get_user_group_ids(user_data["id"], db, cache)
        return service.list_items(
            user_data["id"], member_groups, locale,
            q=q, scope=normalize_scope(scope), tag_ids=tags, untagged=untagged
        )

    @router.post("", response_model=ContentItemResponse, status_code=201)
    async def create_item(
        item_data: ContentCreate,
        user_data: Dict = Depends(get_current_user),
        service: ContentService = Depends(get_content_service),
        db: Client = Depends(get_db),
        cache: Dict = Depends(get_access_cache),
        locale: str = Depends(get_locale)
    ):
        """Create an item owned by the caller"""
        service.check_input(item_data, locale)
        member_groups = get_user_group_ids(user_data["id"], db, cache)
        active = get_active_group_id(user_data["id"], db, cache)
        return service.create_item(item_data, user_data["id"], member_groups, locale, active_group_id=active)

    @router.get("/{item_id}", response_model=ContentDetailResponse)
    async def get_item(
        item_id: str,
        user_data: Dict = Depends(get_current_user),
        service: ContentService = Depends(get_content_service),
        db: Client = Depends(get_db),
        cache: Dict = Depends(get_access_cache),
        locale: str = Depends(get_locale)
    ):
        """Item with the caller's permissions and, for the owner, the settings prefill"""
        member_groups = get_user_group_ids(user_data["id"], db, cache)
        active = get_active_group_id(user_data["id"], db, cache)
        return service.get_detail(item_id, user_data["id"], member_groups, locale, active_group_id=active)

    @router.put("/{item_id}/settings", response_model=SettingsUpdateResponse)
    async def update_settings(
        item_id: str,
        settings_data: ContentSettingsUpdate,
        user_data: Dict = Depends(get_current_user),
        service: ContentService = Depends(get_content_service),
        db: Client = Depends(get_db),
        cache: Dict = Depends(get_access_cache),
        locale: str = Depends(get_locale)
    ):
        """Save title, folder, visibility and the groups the item is shared with"""
        service.check_input(settings_data, locale, partial=True)
        member_groups = get_user_group_ids(user_data["id"], db, cache)
        active = get_active_group_id(user_data["id"], db, cache)
        return service.update_settings(item_id, settings_data, user_data["id"], member_groups, locale, active_group_id=active)

    @router.put("/{item_id}/tags", response_model=ItemTagsResponse)
    async def set_item_tags(
        item_id: str,
        body: ItemTagsUpdate,
        user_data: Dict = Depends(get_current_user),
        service: ContentService = Depends(get_content_service)
    ):
        """Replace the item's tags"""
        return service.set_tags(item_id, user_data["id"], body.tag_ids)

    @router.delete("/{item_id}", status_code=204)
    async def delete_item(
        item_id: str,
        user_data: Dict = Depends(get_current_user),
        service: ContentService = Depends(get_content_service)
    ):
        """Delete an item (owner only)"""
        service.delete_item(item_id, user_data["id"])
        return None

    return router


routers = [build_content_router(content_type) for content_type in CONTENT_TYPES]

dashboard_router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@dashboard_router.get("/counts", response_model=DashboardCounts)
async def get_dashboard_counts(
    user_data: Dict = Depends(get_current_user),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    """How many documents, flashcard sets and quiz sets the caller can open"""
    member_groups = get_user_group_ids(user_data["id"], db, cache)
    return dashboard_counts(db, user_data["id"], member_groups)
