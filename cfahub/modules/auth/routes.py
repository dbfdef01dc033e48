from fastapi import APIRouter, Depends
from cfahub.modules.auth.schemas import CurrentUserResponse
from cfahub.core.dependencies import get_current_user, get_db, get_access_cache, get_user_group_ids, get_active_group_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(
    current_user: Dict = Depends(get_current_user),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache),
):
    """Current authenticated user with their groups and active group (for frontend UI)."""
    return CurrentUserResponse(
        **current_user,
        group_ids=get_user_group_ids(current_user["id"], db, cache),
        active_group_id=get_active_group_id(current_user["id"], db, cache),
    )
