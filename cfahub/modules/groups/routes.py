from fastapi import APIRouter, Depends
from cfahub.modules.groups.schemas import (
    GroupCreate, GroupJoin, GroupResponse, MemberResponse, ActiveGroupUpdate, ActiveGroupResponse
)
from cfahub.modules.groups.service import GroupService
from cfahub.core.dependencies import (
    get_current_user, get_db, get_access_cache, get_active_group_id, get_user_group_ids, check_group_member
)
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(db: Client = Depends(get_db)) -> GroupService:
    return GroupService(db)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    """List the groups the user belongs to, flagging the active one"""
    active = get_active_group_id(user_data["id"], db, cache)
    return service.list_my_groups(user_data["id"], active_group_id=active)


@router.get("/members", response_model=List[MemberResponse])
async def list_members(
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    """People who share at least one group with the caller (the caller included)"""
    return service.list_members(get_user_group_ids(user_data["id"], db, cache))


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Create a new group (caller becomes a member)"""
    return service.create_group(group_data)


@router.post("/join", response_model=GroupResponse)
async def join_group(
    join_data: GroupJoin,
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Join a group with its invite code"""
    return service.join_group(join_data)


@router.delete("/{group_id}/membership", status_code=204)
async def leave_group(
    group_id: str,
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Leave a group"""
    service.leave_group(user_data["id"], group_id)
    return None


@router.put("/active", response_model=ActiveGroupResponse)
async def set_active_group(
    body: ActiveGroupUpdate,
    user_data: Dict = Depends(get_current_user),
    service: GroupService = Depends(get_group_service),
    db: Client = Depends(get_db),
    cache: Dict = Depends(get_access_cache)
):
    """Set (or clear with null) the group preselected when sharing content"""
    if body.group_id:
        check_group_member(body.group_id, user_data, db, cache)
    return ActiveGroupResponse(active_group_id=service.set_active_group(user_data["id"], body.group_id))
