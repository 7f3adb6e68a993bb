"""
Line -> innermost enclosing function lookup.

A LineIndex is built once from resolved function spans and then only read.
Names are plain `str` objects owned by the index; nothing refers back to the
source buffer, so the index may outlive it and be shared between threads
without locking.
"""
from typing import Iterable, Iterator, Optional

from lua_lines.src.lua_lines.logging_setup import get_logger
from lua_lines.src.lua_lines.models.function_models import ResolvedFunction

log = get_logger(__name__)


def count_lines(source: bytes) -> int:
    """
    Number of lines in the source, first line = 1. A trailing newline ends the
    last line rather than starting a new one; empty source has no lines.
    """
    if not source:
        return 0
    newlines = source.count(b"\n")
    return newlines if source.endswith(b"\n") else newlines + 1


class LineIndex:
    """
    Dense, immutable mapping of line numbers 1..max_line to the display name of
    the innermost function that contains the line.

    `get` never fails: lines outside the source, lines at chunk level and lines
    inside anonymous functions all answer None.
    """

    __slots__ = ("_names", "_functions")

    def __init__(self, names: tuple, functions: tuple):
        # _names[0] is a placeholder so that _names[line] works directly
        self._names = names
        self._functions = functions

    @property
    def max_line(self) -> int:
        return len(self._names) - 1

    @property
    def functions(self) -> tuple[ResolvedFunction, ...]:
        """All functions found, anonymous ones included, sorted by start line."""
        return self._functions

    def get(self, line: int) -> Optional[str]:
        if 1 <= line < len(self._names):
            return self._names[line]
        return None

    def __len__(self) -> int:
        return self.max_line

    def __iter__(self) -> Iterator[tuple[int, Optional[str]]]:
        for line in range(1, len(self._names)):
            yield line, self._names[line]

    def __eq__(self, other) -> bool:
        if not isinstance(other, LineIndex):
            return NotImplemented
        return self._names == other._names and self._functions == other._functions

    def __hash__(self) -> int:
        return hash(self._names)

    def __repr__(self) -> str:
        return f"LineIndex(max_line={self.max_line}, functions={len(self._functions)})"


def build_line_index(functions: Iterable[ResolvedFunction], max_line: int) -> LineIndex:
    """
    Paints each function's name over its line range, shallowest first, so a
    line inside nested functions ends up with the innermost one. Among
    functions at the same depth the later start wins, then the later one in
    traversal order ("last function that starts on this line").

    A nested function spanning several lines leaves its header line to the
    enclosing function: `local function inner()` on line 2 of `M.outer` is
    still M.outer, which is also where Lua itself attributes the closure.
    Chunk-level functions and one-line functions own every line they span.
    The header line is kept even when a later sibling starts on it: in
    `local function a() end local function b()` (b continuing below) the
    line stays with `a`, and b owns only the lines after it.

    Anonymous functions paint None: a line inside a callback is reported as
    "no function" even if a named function encloses the callback.
    """
    ordered = sorted(functions, key=lambda f: (f.depth, f.start_line, f.order))
    names: list[Optional[str]] = [None] * (max_line + 1)
    for function in ordered:
        # Clamp to the source; tree-sitter can place a final `end` past the last newline
        start = max(function.start_line, 1)
        if function.depth > 0 and function.end_line > function.start_line:
            start += 1
        end = min(function.end_line, max_line)
        for line in range(start, end + 1):
            names[line] = function.name

    by_start = tuple(sorted(ordered, key=lambda f: (f.start_line, f.order)))
    log.debug("line_index_built", max_line=max_line, functions=len(by_start))
    return LineIndex(tuple(names), by_start)
