# --- Name resolution ---------------------------------------------------------
from typing import Optional, Sequence

from lua_lines.src.lua_lines.models.function_models import (
    Anonymous,
    Declared,
    FunctionSpan,
    Method,
    NameHint,
    NameSegment,
    ResolvedFunction,
)


def join_path(path: Sequence[NameSegment]) -> str:
    """
    Joins name segments with dots; bracketed segments attach directly:
    (x, y) -> "x.y", (t, [1]) -> "t[1]", (mt, __index, ["set"]) -> 'mt.__index["set"]'.
    """
    out = []
    for i, segment in enumerate(path):
        if segment.bracketed:
            out.append(f"[{segment.text}]")
        elif i == 0:
            out.append(segment.text)
        else:
            out.append("." + segment.text)
    return "".join(out)


def display_name(hint: NameHint) -> Optional[str]:
    """Canonical display name for a naming hint; None for anonymous functions."""
    if isinstance(hint, Declared):
        return join_path(hint.path) if hint.path else None
    if isinstance(hint, Method):
        return f"{join_path(hint.receiver)}:{hint.method}"
    if isinstance(hint, Anonymous):
        return None
    raise TypeError(f"unknown name hint: {hint!r}")


def resolve(span: FunctionSpan) -> ResolvedFunction:
    return ResolvedFunction(
        start_line=span.start_line,
        end_line=span.end_line,
        name=display_name(span.name_hint),
        depth=span.depth,
        order=span.order,
    )
