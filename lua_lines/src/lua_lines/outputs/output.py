import json
from typing import Optional

from lua_lines.src.lua_lines.line_index import LineIndex

UNKNOWN = "<unknown>"


# --- Pretty printing & JSON export ------------------------------------------

def annotate(index: LineIndex, source: bytes) -> list[str]:
    """
    One entry per source line: `<line>: <function> <text>`, where lines with
    no named function show `<unknown>`.
    """
    text_lines = source.decode("utf-8", errors="replace").split("\n")
    out = []
    for line, name in index:
        text = text_lines[line - 1].rstrip("\r")
        label = name if name is not None else UNKNOWN
        out.append(f"{line}: {label} {text}" if text else f"{line}: {label}")
    return out


def print_annotated(index: LineIndex, source: bytes):
    for row in annotate(index, source):
        print(row)


def print_summary(indexes: dict[str, LineIndex]):
    """
    Human-friendly printout of the functions found in each file.
    """
    for path, index in sorted(indexes.items()):
        print(f"\n[{path}]  ({index.max_line} lines)")
        for fn in index.functions:
            label = fn.name if fn.name is not None else "<anonymous>"
            print(f"  - {label}  @ {fn.start_line}-{fn.end_line}")


def to_json(index: LineIndex, file_path: Optional[str] = None) -> str:
    """
    Serializes the index to JSON. Lines without a named function are omitted
    from "lines".
    """
    out = {
        "file": file_path,
        "maxLine": index.max_line,
        "lines": {str(line): name for line, name in index if name is not None},
        "functions": [
            {
                "name": fn.name,
                "startLine": fn.start_line,
                "endLine": fn.end_line,
                "depth": fn.depth,
            }
            for fn in index.functions
        ],
    }
    return json.dumps(out, indent=2)
