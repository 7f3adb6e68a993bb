# --- Error types -------------------------------------------------------------
from typing import Any


class LuaLinesError(Exception):
    """Base class for errors raised while building a line index."""


class ParseFailure(LuaLinesError):
    """
    The Lua source could not be parsed into a complete syntax tree.
    Carries the location of the first ERROR/MISSING node tree-sitter reported.
    """

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"{message} at line {line}, column {column}")
        self.message = message
        self.line = line
        self.column = column

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "PARSE_FAILURE",
            "message": self.message,
            "line": self.line,
            "column": self.column,
        }
