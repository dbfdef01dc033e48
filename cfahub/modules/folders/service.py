from supabase import Client
from cfahub.config import settings
from cfahub.content.folders import FolderPathResolver, build_paths, would_create_cycle
from cfahub.core.errors import format_backend_error
from cfahub.modules.folders.schemas import FolderCreate, FolderUpdate, FolderResponse
from typing import Dict, Iterable, List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class FolderService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _fetch_kind(self, kind: str) -> List[dict]:
        result = self.supabase.table("library_folders")\
            .select("id,name,parent_id,kind")\
            .eq("kind", kind)\
            .order("name", desc=False)\
            .execute()
        return result.data or []

    def list_folders(self, kind: str, root_label: str) -> List[FolderResponse]:
        """Folders of one kind ordered by name, each with its display path"""
        try:
            rows = self._fetch_kind(kind)
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))
        by_id = {row["id"]: row for row in rows}
        paths = build_paths(by_id.keys(), by_id, root_label)
        return [FolderResponse(**row, path=paths.get(row["id"])) for row in rows]

    def get_folder(self, folder_id: str) -> dict:
        try:
            result = self.supabase.table("library_folders")\
                .select("id,name,parent_id,kind")\
                .eq("id", folder_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Folder not found")
        return result.data

    def create_folder(self, folder_data: FolderCreate, user_id: str) -> FolderResponse:
        """Create a folder, optionally under a parent of the same kind"""
        if folder_data.parent_id:
            parent = self.get_folder(folder_data.parent_id)
            if parent.get("kind") != folder_data.kind:
                raise HTTPException(status_code=400, detail="Parent folder belongs to another kind")
        try:
            result = self.supabase.table("library_folders").insert({
                "owner_id": user_id,
                "kind": folder_data.kind,
                "name": folder_data.name,
                "parent_id": folder_data.parent_id
            }).execute()
            if not result.data:
                raise HTTPException(status_code=502, detail="Failed to create folder")
            return FolderResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))

    def update_folder(self, folder_id: str, folder_data: FolderUpdate) -> FolderResponse:
        """Rename and/or move a folder; moves that would create a loop are rejected"""
        folder = self.get_folder(folder_id)
        update_data = {}
        if folder_data.name is not None:
            name = folder_data.name.strip()
            if not name:
                raise HTTPException(status_code=400, detail="Folder name must not be empty")
            update_data["name"] = name
        if folder_data.move:
            new_parent = folder_data.parent_id
            if new_parent:
                parent = self.get_folder(new_parent)
                if parent.get("kind") != folder.get("kind"):
                    raise HTTPException(status_code=400, detail="Parent folder belongs to another kind")
                by_id = {row["id"]: row for row in self._fetch_kind(folder["kind"])}
                if would_create_cycle(folder_id, new_parent, by_id, settings.folder_max_depth):
                    raise HTTPException(status_code=400, detail="A folder cannot be moved inside itself")
            update_data["parent_id"] = new_parent
        if not update_data:
            return FolderResponse(**folder)
        try:
            result = self.supabase.table("library_folders")\
                .update(update_data)\
                .eq("id", folder_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Folder not found")
            return FolderResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))

    def delete_folder(self, folder_id: str) -> bool:
        """Delete a folder. Children and content placement are handled by the schema's FK rules."""
        try:
            result = self.supabase.table("library_folders").delete().eq("id", folder_id).execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise HTTPException(status_code=502, detail=format_backend_error(e))

    def resolve_paths(self, folder_ids: Iterable[str], root_label: str) -> Dict[str, str]:
        return FolderPathResolver(self.supabase).resolve_paths(folder_ids, root_label)
