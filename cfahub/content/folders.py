"""
Folder path resolution.

Folders form a tree through `parent_id`. A content row only stores its leaf
`folder_id`; listings show the full "Parent / Child" path. The schema is not
trusted to be acyclic here, so every walk is bounded by `max_depth` and stops
(keeping what it has) on a repeated or missing ancestor.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from supabase import Client

from cfahub.config import settings

logger = logging.getLogger(__name__)

FolderRow = Dict[str, Optional[str]]


def ancestor_chain(folder_id: str, folders_by_id: Dict[str, FolderRow], max_depth: int) -> List[str]:
    """Names from root to `folder_id`. Empty when the leaf itself is unknown."""
    names: List[str] = []
    seen: Set[str] = set()
    current: Optional[str] = folder_id
    while current is not None:
        if current in seen or len(names) >= max_depth:
            logger.warning(f"Folder walk from {folder_id} truncated at {current} (depth {len(names)})")
            break
        row = folders_by_id.get(current)
        if row is None:
            break
        seen.add(current)
        names.append(row.get("name") or "")
        current = row.get("parent_id")
    names.reverse()
    return names


def build_paths(
    folder_ids: Iterable[str],
    folders_by_id: Dict[str, FolderRow],
    root_label: str,
    separator: Optional[str] = None,
    max_depth: Optional[int] = None,
) -> Dict[str, str]:
    """Map each folder id to its display path; dangling ids map to `root_label`."""
    sep = settings.folder_path_separator if separator is None else separator
    depth = settings.folder_max_depth if max_depth is None else max_depth
    paths: Dict[str, str] = {}
    for folder_id in folder_ids:
        if not folder_id:
            continue
        chain = ancestor_chain(folder_id, folders_by_id, depth)
        paths[folder_id] = sep.join(chain) if chain else root_label
    return paths


def would_create_cycle(folder_id: str, new_parent_id: Optional[str], folders_by_id: Dict[str, FolderRow], max_depth: int) -> bool:
    """True when re-parenting `folder_id` under `new_parent_id` closes a loop."""
    current = new_parent_id
    steps = 0
    while current is not None:
        if current == folder_id:
            return True
        steps += 1
        if steps > max_depth:
            return True
        row = folders_by_id.get(current)
        if row is None:
            return False
        current = row.get("parent_id")
    return False


class FolderPathResolver:
    """Fetches folder ancestors from Supabase and builds display paths."""

    def __init__(self, supabase: Client, max_depth: Optional[int] = None):
        self.supabase = supabase
        self.max_depth = settings.folder_max_depth if max_depth is None else max_depth

    def fetch_ancestry(self, folder_ids: Iterable[str]) -> Dict[str, FolderRow]:
        """Fetch the given folders and their ancestors, one `in_` query per tree level."""
        known: Dict[str, FolderRow] = {}
        pending = {fid for fid in folder_ids if fid}
        requested: Set[str] = set()
        rounds = 0
        while pending and rounds < self.max_depth:
            rounds += 1
            requested |= pending
            try:
                result = self.supabase.table("library_folders")\
                    .select("id,name,parent_id")\
                    .in_("id", sorted(pending))\
                    .execute()
            except Exception as e:
                logger.warning(f"Folder fetch failed, paths degraded: {e}")
                break
            for row in result.data or []:
                known[row["id"]] = row
            pending = {
                row.get("parent_id") for row in known.values()
                if row.get("parent_id") and row.get("parent_id") not in requested
            }
        return known

    def resolve_paths(self, folder_ids: Iterable[str], root_label: str) -> Dict[str, str]:
        ids = {fid for fid in folder_ids if fid}
        if not ids:
            return {}
        folders_by_id = self.fetch_ancestry(ids)
        return build_paths(ids, folders_by_id, root_label, max_depth=self.max_depth)
