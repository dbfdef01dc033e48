"""
Tag filtering over already-fetched join rows.

A query asks for a set of tag ids and an item matches only when it carries
ALL of them. The `untagged` sentinel, requested on its own, selects items with
no tag links instead.
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Set

from cfahub.config import settings


def tags_by_item(tag_links: Iterable[Dict[str, Any]], link_fk: str) -> Dict[str, Set[str]]:
    out: Dict[str, Set[str]] = defaultdict(set)
    for link in tag_links:
        item_id, tag_id = link.get(link_fk), link.get("tag_id")
        if item_id and tag_id:
            out[item_id].add(tag_id)
    return dict(out)


def filter_by_tags(
    items: List[Dict[str, Any]],
    tag_links: Iterable[Dict[str, Any]],
    required_tag_ids: Iterable[str],
    include_untagged: bool,
    link_fk: str,
    item_key: str = "id",
    untagged_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Keep the items whose tags include every requested tag id.

    Input order is preserved. The sentinel only applies when no concrete tag
    is requested; combined with concrete tags it is ignored.
    """
    sentinel = settings.untagged_tag_id if untagged_id is None else untagged_id
    requested = {t for t in required_tag_ids if t}
    wants_untagged = include_untagged and sentinel in requested
    concrete = requested - {sentinel}

    item_tags = tags_by_item(tag_links, link_fk)

    if not concrete:
        if wants_untagged:
            return [item for item in items if not item_tags.get(item.get(item_key))]
        return list(items)

    matched: Dict[str, int] = defaultdict(int)
    for item_id, tags in item_tags.items():
        matched[item_id] = len(tags & concrete)
    return [item for item in items if matched.get(item.get(item_key), 0) == len(concrete)]
