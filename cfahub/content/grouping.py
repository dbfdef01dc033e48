"""
Listing presentation: visibility sections and folder blocks.

Items keep the order they were fetched in (most recent first); only the
folder blocks are sorted, with the no-folder block always first.
"""

import unicodedata
from typing import Any, Callable, Dict, List, Optional, Tuple

from cfahub.content.visibility import SECTION_ORDER, Visibility, classify

Item = Dict[str, Any]


def collation_key(text: str) -> Tuple[str, str, str]:
    """Accent- and case-insensitive primary key, with accents then case as tie-breakers"""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), decomposed.casefold(), text


def present(
    items: List[Item],
    root_label: str,
    label_of: Optional[Callable[[Item], Optional[str]]] = None,
) -> List[Tuple[str, List[Item]]]:
    """Bucket items by folder label; items without one land under `root_label`."""
    get_label = label_of or (lambda item: item.get("folder_path"))
    grouped: Dict[str, List[Item]] = {}
    for item in items:
        folder = get_label(item) or root_label
        grouped.setdefault(folder, []).append(item)

    names = sorted(
        grouped.keys(),
        key=lambda name: (name != root_label, collation_key(name)),
    )
    return [(name, grouped[name]) for name in names]


def split_sections(items: List[Item]) -> Dict[Visibility, List[Item]]:
    sections: Dict[Visibility, List[Item]] = {v: [] for v in SECTION_ORDER}
    for item in items:
        sections[classify(item.get("visibility"))].append(item)
    return sections
