# --- Tree-sitter plumbing ----------------------------------------------------
from typing import Optional


def node_text(source_bytes: bytes, node) -> str:
    """
    Converts a node's [start_byte:end_byte] into the corresponding string.
    Tree-sitter nodes only store byte offsets, so we slice the original source.
    """
    return source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def node_lines(node) -> tuple[int, int]:
    """
    Returns the (start_line, end_line) a node occupies, 1-based and inclusive.
    Tree-sitter rows are 0-based, source line numbers are not.
    """
    return (node.start_point[0] + 1, node.end_point[0] + 1)


def named_children(node) -> list:
    """Named children without the comments tree-sitter attaches as extras."""
    return [child for child in node.named_children if child.type != "comment"]


def first_error(node) -> Optional[tuple[str, int, int]]:
    """
    Finds the first ERROR or MISSING node under `node` in source order and
    returns (message, line, column), 1-based. None if the subtree is clean.
    """
    if not node.has_error:
        return None
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_missing:
            line, col = current.start_point
            return (f'missing "{current.type}"', line + 1, col + 1)
        if current.type == "ERROR":
            line, col = current.start_point
            return ("unexpected syntax", line + 1, col + 1)
        # Reversed so the leftmost child is popped first
        stack.extend(child for child in reversed(current.children)
                     if child.has_error or child.is_missing)
    line, col = node.start_point
    return ("unexpected syntax", line + 1, col + 1)
