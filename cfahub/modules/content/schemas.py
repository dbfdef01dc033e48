from pydantic import BaseModel
from typing import Optional, List
from cfahub.content.access import SettingsPrefill
from cfahub.content.visibility import Visibility, ScopeFilter


class ContentCreate(BaseModel):
    title: str
    visibility: Visibility = Visibility.PRIVATE
    folder_id: Optional[str] = None
    group_ids: Optional[List[str]] = None  # None: use the caller's active group when shared
    tag_ids: List[str] = []
    external_url: Optional[str] = None  # documents only
    preview_url: Optional[str] = None  # documents only


class ContentSettingsUpdate(BaseModel):
    title: str
    visibility: Visibility
    folder_id: Optional[str] = None  # omitted: keep the current folder
    group_ids: Optional[List[str]] = None  # None: keep current grants (or the legacy group)
    external_url: Optional[str] = None  # documents only; omitted: unchanged
    preview_url: Optional[str] = None  # documents only; blank clears it


class ContentItemResponse(BaseModel):
    id: str
    title: str
    owner_id: str
    visibility: Optional[str] = None
    section: Visibility
    badge: str
    folder_id: Optional[str] = None
    folder_path: Optional[str] = None
    group_id: Optional[str] = None
    created_at: Optional[str] = None
    tag_ids: List[str] = []
    external_url: Optional[str] = None
    preview_url: Optional[str] = None

    class Config:
        from_attributes = True


class FolderBlock(BaseModel):
    label: str
    items: List[ContentItemResponse]


class SectionResponse(BaseModel):
    section: Visibility
    label: str
    count: int
    folders: List[FolderBlock]


class ContentListResponse(BaseModel):
    content_type: str
    scope: ScopeFilter
    total: int
    sections: List[SectionResponse]


class ContentDetailResponse(BaseModel):
    item: ContentItemResponse
    can_edit: bool
    can_manage_settings: bool
    shared_group_ids: List[str] = []  # filled for the owner only
    legacy_group_id: Optional[str] = None
    settings: Optional[SettingsPrefill] = None  # owner only


class SettingsUpdateResponse(BaseModel):
    item: ContentItemResponse
    shared_group_ids: List[str]
    added: int
    removed: int


class DashboardCounts(BaseModel):
    documents: int = 0
    flashcards: int = 0
    quizzes: int = 0
