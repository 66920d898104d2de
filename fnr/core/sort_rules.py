"""
sort_rules.py - Sorting Rules Module

Execution order: deeper entries first, files before directories at the
same depth, so a directory is only renamed after everything beneath it.
"""

from typing import Callable, Dict, List, Optional
from .models_fs import EntryKind, RenameItem


_KIND_RANK = {EntryKind.FILE: 0, EntryKind.DIR: 1}


def get_sort_key(chain_rank: Optional[Dict[RenameItem, int]] = None) -> Callable[[RenameItem], tuple]:
    """
    Get execution order key function

    Args:
        chain_rank: Per-item rank within same-directory rename chains

    Returns:
        Sort key function
    """
    ranks = chain_rank or {}
    return lambda item: (
        -item.depth,
        _KIND_RANK[item.kind],
        ranks.get(item, 0),
        str(item.source),
    )


def sort_for_execution(
    items: List[RenameItem],
    chain_rank: Optional[Dict[RenameItem, int]] = None
) -> List[RenameItem]:
    """
    Sort rename items into execution order

    Args:
        items: Rename items
        chain_rank: Items with a higher rank run after lower-ranked ones

    Returns:
        Sorted item list (new list)
    """
    return sorted(items, key=get_sort_key(chain_rank))


def is_ancestor(parent, child) -> bool:
    """Whether parent is a proper ancestor of child"""
    return parent != child and parent in child.parents
