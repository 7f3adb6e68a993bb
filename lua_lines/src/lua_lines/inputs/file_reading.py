# --- Source reading & directory scanning -------------------------------------
import os
from typing import Iterator

from lua_lines.src.lua_lines.errors import ParseFailure
from lua_lines.src.lua_lines.indexer import LuaFunctionIndexer
from lua_lines.src.lua_lines.line_index import LineIndex
from lua_lines.src.lua_lines.logging_setup import get_logger

log = get_logger(__name__)


def read_source(path: str) -> bytes:
    # Raw bytes: line numbering must match the file exactly, no newline translation
    with open(path, "rb") as f:
        return f.read()


def iter_lua_files(root_dir: str) -> Iterator[str]:
    """Yields every .lua file under root_dir, in a stable order."""
    for dirpath, dirnames, filenames in os.walk(root_dir):
        dirnames.sort()
        for fn in sorted(filenames):
            if fn.endswith(".lua"):
                yield os.path.join(dirpath, fn)


def index_directory(indexer: LuaFunctionIndexer, root_dir: str) -> dict[str, LineIndex]:
    """
    Recursively index all .lua files in a directory. Files that cannot be read
    or parsed are logged and left out of the result.
    """
    indexes: dict[str, LineIndex] = {}
    for full in iter_lua_files(root_dir):
        try:
            indexes[full] = indexer.index_source(read_source(full), full)
        except ParseFailure as e:
            log.warning("lua_file_unparsable", file=full, **e.to_dict())
        except OSError as e:
            log.warning("lua_file_unreadable", file=full, error=str(e))
    return indexes
