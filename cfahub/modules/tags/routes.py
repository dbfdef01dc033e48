from fastapi import APIRouter, Depends
from cfahub.modules.tags.schemas import TagCreate, TagResponse
from cfahub.modules.tags.service import TagService
from cfahub.core.dependencies import get_current_user, get_db
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/tags", tags=["tags"])


def get_tag_service(db: Client = Depends(get_db)) -> TagService:
    return TagService(db)


@router.get("", response_model=List[TagResponse])
async def list_tags(
    user_data: Dict = Depends(get_current_user),
    service: TagService = Depends(get_tag_service)
):
    """List tags visible to the caller"""
    return service.list_tags()


@router.post("", response_model=TagResponse, status_code=201)
async def create_tag(
    tag_data: TagCreate,
    user_data: Dict = Depends(get_current_user),
    service: TagService = Depends(get_tag_service)
):
    """Create a tag"""
    return service.create_tag(tag_data, user_data["id"])


@router.delete("/{tag_id}", status_code=204)
async def delete_tag(
    tag_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TagService = Depends(get_tag_service)
):
    """Delete a tag (its links go with it)"""
    service.delete_tag(tag_id)
    return None
