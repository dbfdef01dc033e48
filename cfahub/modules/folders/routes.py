from fastapi import APIRouter, Depends, Query
from cfahub.config.content_config import label
from cfahub.modules.folders.schemas import FolderCreate, FolderUpdate, FolderResponse, FolderKind
from cfahub.modules.folders.service import FolderService
from cfahub.core.dependencies import get_current_user, get_db, get_locale
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/folders", tags=["folders"])


def get_folder_service(db: Client = Depends(get_db)) -> FolderService:
    return FolderService(db)


@router.get("", response_model=List[FolderResponse])
async def list_folders(
    kind: FolderKind,
    user_data: Dict = Depends(get_current_user),
    service: FolderService = Depends(get_folder_service),
    locale: str = Depends(get_locale)
):
    """List the caller's folders of one kind"""
    return service.list_folders(kind, root_label=label(locale, "root"))


@router.get("/paths", response_model=Dict[str, str])
async def resolve_folder_paths(
    ids: List[str] = Query(default=[]),
    user_data: Dict = Depends(get_current_user),
    service: FolderService = Depends(get_folder_service),
    locale: str = Depends(get_locale)
):
    """Map folder ids to "Parent / Child" paths; unknown ids map to the no-folder label"""
    return service.resolve_paths(ids, root_label=label(locale, "root"))


@router.post("", response_model=FolderResponse, status_code=201)
async def create_folder(
    folder_data: FolderCreate,
    user_data: Dict = Depends(get_current_user),
    service: FolderService = Depends(get_folder_service)
):
    """Create a folder"""
    return service.create_folder(folder_data, user_data["id"])


@router.put("/{folder_id}", response_model=FolderResponse)
async def update_folder(
    folder_id: str,
    folder_data: FolderUpdate,
    user_data: Dict = Depends(get_current_user),
    service: FolderService = Depends(get_folder_service)
):
    """Rename or move a folder"""
    return service.update_folder(folder_id, folder_data)


@router.delete("/{folder_id}", status_code=204)
async def delete_folder(
    folder_id: str,
    user_data: Dict = Depends(get_current_user),
    service: FolderService = Depends(get_folder_service)
):
    """Delete a folder"""
    service.delete_folder(folder_id)
    return None
