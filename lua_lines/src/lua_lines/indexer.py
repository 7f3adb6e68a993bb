import importlib
from functools import lru_cache
from typing import Optional, Union

from tree_sitter import Language, Node, Parser, Tree

from lua_lines.src.lua_lines.errors import ParseFailure
from lua_lines.src.lua_lines.line_index import LineIndex, build_line_index, count_lines
from lua_lines.src.lua_lines.logging_setup import get_logger
from lua_lines.src.lua_lines.models.function_models import (
    ANONYMOUS,
    Declared,
    FunctionSpan,
    Method,
    NameHint,
    NameSegment,
)
from lua_lines.src.lua_lines.naming import resolve
from lua_lines.src.lua_lines.tree_sitter_helpers import (
    first_error,
    named_children,
    node_lines,
    node_text,
)

log = get_logger(__name__)

NamePath = tuple[NameSegment, ...]

# `function a.b:c() end` and `local function f() end`
DECLARATION_TYPES = frozenset({"function_declaration"})
# `function() end` used as a value
EXPRESSION_TYPES = frozenset({"function_definition"})


# --- Tree-sitter language loading -------------------------------------------

@lru_cache(maxsize=None)
def load_lua_language() -> Language:
    """
    Loads the Tree-sitter Lua grammar shipped by the `tree-sitter-lua` wheel.
    """
    try:
        grammar = importlib.import_module("tree_sitter_lua")
    except ImportError as err:
        raise RuntimeError(
            "Could not load Lua grammar.\n"
            "- Install `tree-sitter-lua` (pip install tree-sitter tree-sitter-lua)."
        ) from err
    return Language(grammar.language())


# --- The Indexer -------------------------------------------------------------

class LuaFunctionIndexer:
    """
    Walks a Tree-sitter Lua AST and records every function-like node with its
    line span and naming hint, then builds a LineIndex from them.

    One indexer holds one parser; use one per thread.
    """

    def __init__(self, name_assignments: bool = False):
        self.language = load_lua_language()
        self.parser = Parser(self.language)
        # Name `f = function() end` after `f` instead of treating it as anonymous
        self.name_assignments = name_assignments

    def parse(self, source_bytes: bytes) -> Tree:
        """
        Parses a single source buffer into a Tree-sitter tree.
        """
        return self.parser.parse(source_bytes)

    def index_source(self, source: Union[str, bytes], file_path: Optional[str] = None) -> LineIndex:
        """
        Parses Lua source and builds its line index. Raises ParseFailure if the
        tree contains any syntax error; no partial index is produced.
        """
        source_bytes = source.encode("utf-8") if isinstance(source, str) else source
        tree = self.parse(source_bytes)
        spans = self.collect_spans(source_bytes, tree)
        log.debug("function_spans_collected", file=file_path, spans=len(spans))
        return build_line_index((resolve(span) for span in spans), count_lines(source_bytes))

    def collect_spans(self, source_bytes: bytes, tree: Tree) -> list[FunctionSpan]:
        """
        Lists every function in the tree in source order. Each span records
        how many functions enclose it, which the builder relies on for nesting.
        """
        root: Node = tree.root_node
        error = first_error(root)
        if error is not None:
            message, line, column = error
            raise ParseFailure(message, line, column)

        spans: list[FunctionSpan] = []
        # DFS with an explicit stack; deeply nested Lua must not hit the recursion limit
        stack: list[tuple[Node, int]] = [(root, 0)]
        while stack:
            node, depth = stack.pop()
            child_depth = depth
            if node.type in DECLARATION_TYPES or node.type in EXPRESSION_TYPES:
                start_line, end_line = node_lines(node)
                spans.append(FunctionSpan(
                    start_line=start_line,
                    end_line=end_line,
                    name_hint=self._name_hint(source_bytes, node),
                    depth=depth,
                    order=len(spans),
                ))
                child_depth = depth + 1
            stack.extend((child, child_depth) for child in reversed(node.children))
        return spans

    # -- Naming hints ---------------------------------------------------------

    def _name_hint(self, source_bytes: bytes, node: Node) -> NameHint:
        if node.type in DECLARATION_TYPES:
            return self._declaration_hint(source_bytes, node)
        if self.name_assignments:
            path = self._storage_path(source_bytes, node)
            if path:
                return Declared(path)
        return ANONYMOUS

    def _declaration_hint(self, source_bytes: bytes, node: Node) -> NameHint:
        """
        `function a.b:c()` -> Method((a, b), c); `function a.b()` -> Declared((a, b)).
        Only identifier leaves are kept, so whitespace and comments between the
        dots never reach the name.
        """
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return ANONYMOUS
        segments = tuple(NameSegment(node_text(source_bytes, leaf))
                         for leaf in _identifier_leaves(name_node))
        if not segments:
            return ANONYMOUS
        if name_node.type == "method_index_expression" and len(segments) > 1:
            return Method(receiver=segments[:-1], method=segments[-1].text)
        return Declared(segments)

    def _storage_path(self, source_bytes: bytes, value: Node) -> Optional[NamePath]:
        """
        Where a function or table expression gets stored: an assignment target
        (`x.y = <value>`) or a table field (`t = { get = <value> }`).
        None when the value is an operand, an argument, or otherwise unnamed.
        """
        child, parent = value, value.parent
        while parent is not None and parent.type == "parenthesized_expression":
            child, parent = parent, parent.parent
        if parent is None:
            return None
        if parent.type == "expression_list":
            return self._assignment_path(source_bytes, child, parent)
        if parent.type == "field":
            return self._field_path(source_bytes, child, parent)
        return None

    def _assignment_path(self, source_bytes: bytes, value: Node, expression_list: Node) -> Optional[NamePath]:
        statement = expression_list.parent
        if statement is None or statement.type != "assignment_statement":
            return None
        position = _position(named_children(expression_list), value)
        variable_list = next((c for c in statement.named_children if c.type == "variable_list"), None)
        if position is None or variable_list is None:
            return None
        targets = [c for c in named_children(variable_list) if c.type != "attribute"]
        if position >= len(targets):
            # `local x, y = 1, 2, function() end`: nothing receives the function.
            # Also the case when the grammar drops a target it reads as a keyword
            # (`global` in Lua 5.5 grammars leaves an empty variable_list).
            return None
        return self._variable_path(source_bytes, targets[position])

    def _variable_path(self, source_bytes: bytes, node: Node) -> Optional[NamePath]:
        if node.type == "identifier":
            return (NameSegment(node_text(source_bytes, node)),)
        if node.type in ("dot_index_expression", "bracket_index_expression"):
            table = node.child_by_field_name("table")
            key = node.child_by_field_name("field")
            if table is None or key is None:
                return None
            prefix = self._variable_path(source_bytes, table)
            if prefix is None:
                return None
            if node.type == "dot_index_expression":
                return prefix + (NameSegment(node_text(source_bytes, key)),)
            return prefix + (NameSegment(node_text(source_bytes, key).strip(), bracketed=True),)
        # Calls and other computed prefixes have no stable name
        return None

    def _field_path(self, source_bytes: bytes, value: Node, field: Node) -> Optional[NamePath]:
        if field.child_by_field_name("value") != value:
            return None
        siblings = field.parent
        # Some grammar versions group the fields under a field_list node
        table = siblings.parent if siblings is not None and siblings.type == "field_list" else siblings
        if table is None or table.type != "table_constructor":
            return None
        prefix = self._storage_path(source_bytes, table)
        if prefix is None:
            return None

        key = field.child_by_field_name("name")
        if key is None:
            positional = [f for f in named_children(siblings)
                          if f.type == "field" and f.child_by_field_name("name") is None]
            position = _position(positional, field)
            if position is None:
                return None
            return prefix + (NameSegment(str(position + 1), bracketed=True),)
        if field.children[0].type == "[":
            return prefix + (NameSegment(node_text(source_bytes, key).strip(), bracketed=True),)
        return prefix + (NameSegment(node_text(source_bytes, key)),)


def _identifier_leaves(node: Node) -> list[Node]:
    """Identifier nodes under `node`, left to right."""
    leaves = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "identifier":
            leaves.append(current)
            continue
        stack.extend(reversed(current.named_children))
    return leaves


def _position(nodes: list[Node], target: Node) -> Optional[int]:
    for i, node in enumerate(nodes):
        if node == target:
            return i
    return None


def index_source(source: Union[str, bytes], *, name_assignments: bool = False) -> LineIndex:
    """
    One-shot convenience: parse `source` and return its LineIndex.
    Raises ParseFailure on malformed Lua.
    """
    return LuaFunctionIndexer(name_assignments=name_assignments).index_source(source)
