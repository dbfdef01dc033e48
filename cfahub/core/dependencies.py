"""
Core dependencies for route protection and membership lookups
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from cfahub.config import settings
from cfahub.database.supabase_client import SupabaseClient, get_supabase
from cfahub.modules.auth.service import AuthService
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (group_ids, active_group_id)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_access_cache(request: Request) -> Dict[str, Any]:
    return _get_request_cache(request)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Resolve the bearer token to the Supabase Auth user"""
    return auth_service.get_current_user(token)


def get_db(token: str = Depends(get_current_token)) -> Client:
    """Supabase client acting as the caller; every query goes through RLS."""
    return SupabaseClient.get_user_client(token)


def get_locale(request: Request) -> str:
    """Locale from ?locale=, then Accept-Language, then the configured default"""
    supported = settings.get_supported_locales()
    candidates = [request.query_params.get("locale")]
    header = request.headers.get("accept-language") or ""
    candidates += [part.split(";")[0].strip()[:2].lower() for part in header.split(",")]
    for candidate in candidates:
        if candidate and candidate.lower() in supported:
            return candidate.lower()
    return settings.default_locale


def get_user_group_ids(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Return group_ids from group_memberships. Uses request-scoped cache when provided."""
    if cache is not None and "group_ids" in cache:
        return cache["group_ids"]
    try:
        result = supabase.table("group_memberships")\
            .select("group_id")\
            .eq("user_id", user_id)\
            .execute()
        ids = [g["group_id"] for g in result.data if g.get("group_id")] if result.data else []
        if cache is not None:
            cache["group_ids"] = ids
        return ids
    except Exception as e:
        logger.error(f"Error getting user group ids: {e}")
        return []


def get_active_group_id(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """The caller's preferred group for prefilling share forms (profiles.active_group_id)."""
    if cache is not None and "active_group_id" in cache:
        return cache["active_group_id"]
    try:
        result = supabase.table("profiles")\
            .select("active_group_id")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        active = (result.data or {}).get("active_group_id") if result else None
    except Exception as e:
        logger.error(f"Error getting active group: {e}")
        active = None
    if cache is not None:
        cache["active_group_id"] = active
    return active


def check_group_member(group_id: str, user_data: dict, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> dict:
    """Raise 403 unless the user belongs to the group"""
    if group_id in get_user_group_ids(user_data["id"], supabase, cache):
        return user_data
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You must be a member of this group"
    )
