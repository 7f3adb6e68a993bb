# --- Data models for the line index ------------------------------------------
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class NameSegment:
    """One piece of a dotted name, e.g. `foo` in `M.foo`, or a bracket key."""
    text: str
    bracketed: bool = False  # rendered as `[text]` with no leading dot


@dataclass(frozen=True)
class Declared:
    """`function M.foo.bar()`, `local function f()`, or a named assignment target."""
    path: tuple[NameSegment, ...]


@dataclass(frozen=True)
class Method:
    """`function Obj:update()`: receiver path before the colon, method after it."""
    receiver: tuple[NameSegment, ...]
    method: str


@dataclass(frozen=True)
class Anonymous:
    """A function expression with nothing to name it after."""


NameHint = Union[Declared, Method, Anonymous]

ANONYMOUS = Anonymous()


@dataclass(frozen=True)
class FunctionSpan:
    """One function-like construct found in the tree."""
    start_line: int  # 1-based, inclusive
    end_line: int  # 1-based, inclusive
    name_hint: NameHint
    depth: int = 0  # number of enclosing functions
    order: int = 0  # position in traversal order


@dataclass(frozen=True)
class ResolvedFunction:
    """A span with its display name; `name` is None for anonymous functions."""
    start_line: int
    end_line: int
    name: Optional[str]
    depth: int = 0
    order: int = 0

    @property
    def is_anonymous(self) -> bool:
        return self.name is None
