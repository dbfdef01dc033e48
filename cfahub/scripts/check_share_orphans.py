"""
Share Orphans Check Script
Share rows must only exist while their item is shared with groups. This
script lists rows that break that rule for every content type and, with
--fix, deletes them. Runs with the service role key (bypasses RLS).
"""

import argparse
import sys
from collections import defaultdict
from typing import Dict, List

from cfahub.config.content_config import CONTENT_TYPES
from cfahub.content.visibility import Visibility, classify
from cfahub.database.supabase_client import SupabaseClient
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def find_orphans(supabase: Client, content_type: str) -> Dict[str, List[str]]:
    """Item id -> group ids of share rows whose item is missing or not shared"""
    cfg = CONTENT_TYPES[content_type]
    fk = cfg["share_fk"]
    shares = supabase.table(cfg["share_table"])\
        .select(f"{fk},group_id")\
        .execute()
    by_item: Dict[str, List[str]] = defaultdict(list)
    for row in shares.data or []:
        by_item[row[fk]].append(row["group_id"])
    if not by_item:
        return {}

    items = supabase.table(cfg["base_table"])\
        .select("id,visibility")\
        .in_("id", sorted(by_item))\
        .execute()
    shared_ids = {
        row["id"] for row in items.data or []
        if classify(row.get("visibility")) == Visibility.SHARED
    }
    return {item_id: groups for item_id, groups in by_item.items() if item_id not in shared_ids}


def delete_orphans(supabase: Client, content_type: str, orphans: Dict[str, List[str]]) -> int:
    cfg = CONTENT_TYPES[content_type]
    removed = 0
    for item_id, groups in orphans.items():
        supabase.table(cfg["share_table"])\
            .delete()\
            .eq(cfg["share_fk"], item_id)\
            .in_("group_id", groups)\
            .execute()
        removed += len(groups)
    return removed


def main(argv=None):
    parser = argparse.ArgumentParser(description="Report (and optionally delete) orphaned share rows")
    parser.add_argument("--fix", action="store_true", help="delete the orphaned rows")
    args = parser.parse_args(argv)

    try:
        supabase = SupabaseClient.get_service_client()
        total = 0
        for content_type in CONTENT_TYPES:
            orphans = find_orphans(supabase, content_type)
            count = sum(len(groups) for groups in orphans.values())
            total += count
            logger.info(f"{content_type}: {count} orphaned share rows on {len(orphans)} items")
            if orphans and args.fix:
                removed = delete_orphans(supabase, content_type, orphans)
                logger.info(f"{content_type}: removed {removed} rows")
        logger.info(f"Check completed: {total} orphaned share rows")
        return total
    except Exception as e:
        logger.error(f"Error during share check: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
