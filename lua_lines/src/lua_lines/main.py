#!/usr/bin/env python3
"""
Lua function-at-line index (Python)
-----------------------------------
For every line of a Lua file, reports the innermost named function that
contains it:
- `function M.foo()` -> "M.foo"
- `function Obj:update()` -> "Obj:update"
- `local function inner()` -> "inner"
- anonymous `function() ... end` expressions and chunk-level code -> <unknown>

USAGE EXAMPLES
--------------
# 1) Run against an in-code sample (no files needed):
python -m lua_lines.src.lua_lines.main

# 2) Annotate a single file (prints each line with its function, then JSON):
python -m lua_lines.src.lua_lines.main path/to/module.lua

# 3) Summarize every .lua file under a directory (recursive):
python -m lua_lines.src.lua_lines.main /path/to/lua/project

CONFIGURATION (environment)
---------------------------
LUA_LINES_LOG_LEVEL=DEBUG        log level for stderr output (default WARNING)
LUA_LINES_LOG_JSON=1             log as JSON lines
LUA_LINES_NAME_ASSIGNMENTS=1     name `x.y = function() end` as "x.y"

DEPENDENCIES
------------
    pip install tree-sitter tree-sitter-lua structlog
"""

import os
import sys

from lua_lines.src.lua_lines.config import load_settings
from lua_lines.src.lua_lines.errors import ParseFailure
from lua_lines.src.lua_lines.indexer import LuaFunctionIndexer
from lua_lines.src.lua_lines.inputs.file_reading import index_directory, read_source
from lua_lines.src.lua_lines.logging_setup import configure_logging, get_logger
from lua_lines.src.lua_lines.outputs.output import print_annotated, print_summary, to_json

log = get_logger(__name__)

# --- Demo main ---------------------------------------------------------------

SAMPLE_LUA = r"""
local M = {}

function M.outer()
  local function inner()
    return 1
  end
  return inner()
end

function M.Obj:update(dt)
  self.t = self.t + dt
end

local callbacks = {}
table.insert(callbacks, function(event)
  print("anonymous", event)
end)

return M
"""


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    settings = load_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    # Create indexer (loads the Tree-sitter Lua grammar once)
    indexer = LuaFunctionIndexer(name_assignments=settings.name_assignments)

    # A directory gets a per-file summary
    if argv and os.path.isdir(argv[0]):
        print_summary(index_directory(indexer, argv[0]))
        return 0

    # A file (or the built-in sample) gets the annotated listing plus JSON
    if argv:
        path = argv[0]
        source = read_source(path)
    else:
        path = "<sample>"
        source = SAMPLE_LUA.encode("utf-8")

    try:
        index = indexer.index_source(source, path)
    except ParseFailure as e:
        log.error("lua_file_unparsable", file=path, **e.to_dict())
        print(f"failed to parse {path}: {e}", file=sys.stderr)
        return 1

    print_annotated(index, source)

    print("\n=== JSON ===")
    print(to_json(index, path))
    return 0


if __name__ == "__main__":
    sys.exit(main())
