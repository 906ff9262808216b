"""
Selection of items by user-supplied name patterns.
"""

from typing import List, Optional


def parse_selection(selected_items: Optional[str]) -> List[str]:
    """
    Split a selection expression into patterns.

    Patterns are the non-empty pieces between semicolons, with surrounding
    whitespace trimmed. A piece made only of whitespace trims to "", which
    is a substring of every name.
    """
    if not selected_items:
        return []
    return [piece.strip() for piece in selected_items.split(";") if piece]


def is_item_selected(item_name: str, selected_items: Optional[str], enabled: bool = True) -> bool:
    """
    Check whether an item should be processed.

    Args:
        item_name: Name of the item
        selected_items: Semicolon-separated substring patterns
        enabled: Whether selection filtering is switched on at all

    Returns:
        True if filtering is off, the expression is blank, or any pattern is
        a literal, case-sensitive substring of the item name. An expression
        made only of semicolons selects nothing.
    """
    if not enabled:
        return True

    if not selected_items or not selected_items.strip():
        return True

    return any(pattern in item_name for pattern in parse_selection(selected_items))
