"""
Handle-based entry points for callers that cannot hold a LineIndex directly
(C shims, ctypes/cffi callbacks, other runtimes embedding Python).

    handle = create(code, len(code))      # None if the code does not parse
    name, length = get(handle, 12)        # (None, NO_FUNCTION) if no function
    destroy(handle)

Line numbers are 1-based, matching the source's own numbering.

Caller obligations: a handle must not be used after `destroy`, and must not be
destroyed twice. Handles are not reference counted; a violation raises
ValueError here, but callers must not rely on that.
"""
from typing import Optional

from lua_lines.src.lua_lines.errors import ParseFailure
from lua_lines.src.lua_lines.indexer import LuaFunctionIndexer
from lua_lines.src.lua_lines.line_index import LineIndex
from lua_lines.src.lua_lines.logging_setup import get_logger

log = get_logger(__name__)

# SIZE_MAX: no valid name has this length, and no valid name is empty either
NO_FUNCTION = 2 ** 64 - 1


class FunctionLinesHandle:
    """Opaque owner of one LineIndex plus the UTF-8 bytes of its names."""

    __slots__ = ("_index", "_encoded")

    def __init__(self, index: LineIndex):
        self._index: Optional[LineIndex] = index
        # Encode each distinct name once; every line of a function shares the bytes
        self._encoded: dict[str, bytes] = {}

    def _lookup(self, line: int) -> Optional[bytes]:
        if self._index is None:
            raise ValueError("handle used after destroy")
        name = self._index.get(line)
        if name is None:
            return None
        encoded = self._encoded.get(name)
        if encoded is None:
            encoded = self._encoded[name] = name.encode("utf-8")
        return encoded

    def _release(self) -> None:
        if self._index is None:
            raise ValueError("handle destroyed twice")
        self._index = None
        self._encoded.clear()


def create(code: bytes, code_len: Optional[int] = None,
           name_assignments: bool = False) -> Optional[FunctionLinesHandle]:
    """
    Builds an index from exactly `code_len` bytes of `code` (all of it when
    omitted), so embedded NUL bytes are fine. Returns None if the bytes are not
    UTF-8 or do not parse; no partial index is ever handed out. A negative
    `code_len` raises ValueError; a length past the end of `code` reads all of it.
    """
    if code_len is not None and code_len < 0:
        raise ValueError(f"code_len must not be negative: {code_len}")
    data = bytes(code[:code_len] if code_len is not None else code)
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as err:
        log.warning("source_not_utf8", position=err.start)
        return None
    try:
        index = LuaFunctionIndexer(name_assignments=name_assignments).index_source(text)
    except ParseFailure as err:
        log.warning("source_unparsable", **err.to_dict())
        return None
    return FunctionLinesHandle(index)


def get(handle: FunctionLinesHandle, line: int) -> tuple[Optional[bytes], int]:
    """
    Returns (name_bytes, length) for the function at `line`, or
    (None, NO_FUNCTION). The bytes are not NUL-terminated and stay valid only
    while the handle is alive.
    """
    name = handle._lookup(line)
    if name is None:
        return None, NO_FUNCTION
    return name, len(name)


def destroy(handle: FunctionLinesHandle) -> None:
    """Releases everything the handle owns."""
    handle._release()
