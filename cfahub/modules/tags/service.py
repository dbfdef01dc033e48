from supabase import Client
from cfahub.config.content_config import get_content_config
from cfahub.content.access import unique
from cfahub.core.errors import format_backend_error
from cfahub.modules.tags.schemas import TagCreate, TagResponse, ItemTagsResponse
from typing import Iterable, List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class TagService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_tags(self) -> List[TagResponse]:
        try:
            result = self.supabase.table("tags")\
                .select("id,name,color")\
                .order("name", desc=False)\
                .execute()
            return [TagResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))

    def create_tag(self, tag_data: TagCreate, user_id: str) -> TagResponse:
        try:
            result = self.supabase.table("tags").insert({
                "name": tag_data.name,
                "color": tag_data.color,
                "owner_id": user_id
            }).execute()
            if not result.data:
                raise HTTPException(status_code=502, detail="Failed to create tag")
            return TagResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))

    def delete_tag(self, tag_id: str) -> bool:
        try:
            result = self.supabase.table("tags").delete().eq("id", tag_id).execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))

    def fetch_links(self, content_type: str, item_ids: Iterable[str]) -> List[dict]:
        """Join rows for the given items. Degrades to no links when the read fails."""
        cfg = get_content_config(content_type)
        ids = unique(item_ids)
        if not ids:
            return []
        try:
            result = self.supabase.table(cfg["tag_table"])\
                .select(f"{cfg['tag_fk']},tag_id")\
                .in_(cfg["tag_fk"], ids)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.warning(f"Tag link fetch on {cfg['tag_table']} failed: {format_backend_error(e)}")
            return []

    def item_tag_ids(self, content_type: str, item_id: str) -> List[str]:
        cfg = get_content_config(content_type)
        return unique(link.get("tag_id") for link in self.fetch_links(content_type, [item_id])
                      if link.get(cfg["tag_fk"]) == item_id)

    def add_item_tags(self, content_type: str, item_id: str, tag_ids: Iterable[str], owner_id: str) -> int:
        """Link rows carry the owner_id of the caller, as row-level security expects"""
        cfg = get_content_config(content_type)
        rows = [{cfg["tag_fk"]: item_id, "tag_id": tid, "owner_id": owner_id} for tid in unique(tag_ids)]
        if not rows:
            return 0
        self.supabase.table(cfg["tag_table"]).insert(rows).execute()
        return len(rows)

    def set_item_tags(self, content_type: str, item_id: str, tag_ids: Iterable[str], owner_id: str) -> ItemTagsResponse:
        """Make the item's tag set equal `tag_ids`, touching only the difference"""
        cfg = get_content_config(content_type)
        wanted = unique(tag_ids)
        try:
            existing_rows = self.supabase.table(cfg["tag_table"])\
                .select("tag_id")\
                .eq(cfg["tag_fk"], item_id)\
                .execute()
            existing = unique(r.get("tag_id") for r in existing_rows.data or [])
            to_add = [t for t in wanted if t not in existing]
            to_remove = [t for t in existing if t not in wanted]
            if to_remove:
                self.supabase.table(cfg["tag_table"])\
                    .delete()\
                    .eq(cfg["tag_fk"], item_id)\
                    .in_("tag_id", to_remove)\
                    .execute()
            added = self.add_item_tags(content_type, item_id, to_add, owner_id)
            return ItemTagsResponse(item_id=item_id, tag_ids=wanted, added=added, removed=len(to_remove))
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))
