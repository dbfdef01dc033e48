from supabase import Client
from cfahub.modules.groups.schemas import GroupCreate, GroupJoin, GroupResponse, MemberResponse
from cfahub.content.access import unique
from cfahub.core.errors import format_backend_error
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _rpc_group(self, fn: str, params: dict) -> GroupResponse:
        result = self.supabase.rpc(fn, params).execute()
        data = result.data
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            raise HTTPException(status_code=502, detail=f"{fn} returned no group")
        return GroupResponse(**data)

    def create_group(self, group_data: GroupCreate) -> GroupResponse:
        """Create a study group; the RPC adds the caller as first member"""
        try:
            group = self._rpc_group("create_group", {"group_name": group_data.name})
            logger.info(f"Created group {group.id}")
            return group
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))

    def join_group(self, join_data: GroupJoin) -> GroupResponse:
        """Join a group by invite code"""
        try:
            return self._rpc_group("join_group", {"invite": join_data.invite_code})
        except HTTPException:
            raise
        except Exception as e:
            message = format_backend_error(e)
            if "invalid" in message.lower() or "not found" in message.lower():
                raise HTTPException(status_code=404, detail="Invalid invite code")
            raise HTTPException(status_code=502, detail=message)

    def list_my_groups(self, user_id: str, active_group_id: Optional[str] = None) -> List[GroupResponse]:
        """Groups the user is a member of, ordered by name"""
        try:
            result = self.supabase.table("group_memberships")\
                .select("group_id, study_groups(id,name,invite_code,created_at)")\
                .eq("user_id", user_id)\
                .execute()
            groups = []
            for row in result.data or []:
                group = row.get("study_groups")
                if not group:
                    continue
                groups.append(GroupResponse(**group, is_active=group["id"] == active_group_id))
            return sorted(groups, key=lambda g: g.name.casefold())
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))

    def list_members(self, group_ids: List[str]) -> List[MemberResponse]:
        """Profiles of everyone sharing at least one group with the caller, by username"""
        if not group_ids:
            return []
        try:
            result = self.supabase.table("group_memberships")\
                .select("user_id")\
                .in_("group_id", group_ids)\
                .execute()
            member_ids = unique(row.get("user_id") for row in result.data or [])
            if not member_ids:
                return []
            profiles = self.supabase.table("profiles")\
                .select("id,username,full_name,avatar_url")\
                .in_("id", member_ids)\
                .order("username", desc=False)\
                .execute()
            return [MemberResponse(**row) for row in profiles.data or []]
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))

    def leave_group(self, user_id: str, group_id: str) -> bool:
        """Remove the caller's membership; clears the active group if it pointed there"""
        try:
            result = self.supabase.table("group_memberships")\
                .delete()\
                .eq("user_id", user_id)\
                .eq("group_id", group_id)\
                .execute()
            self.supabase.table("profiles")\
                .update({"active_group_id": None})\
                .eq("id", user_id)\
                .eq("active_group_id", group_id)\
                .execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))

    def set_active_group(self, user_id: str, group_id: Optional[str]) -> Optional[str]:
        """Store the group preselected when sharing content"""
        try:
            result = self.supabase.table("profiles")\
                .update({"active_group_id": group_id})\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                self.supabase.table("profiles")\
                    .insert({"id": user_id, "active_group_id": group_id})\
                    .execute()
            return group_id
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))
