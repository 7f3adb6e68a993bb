"""Shared fixtures for the lua_lines tests."""

import pytest


@pytest.fixture
def indexer():
    """Indexer with the default naming rules (assignments stay anonymous)."""
    pytest.importorskip("tree_sitter_lua")
    from lua_lines.src.lua_lines.indexer import LuaFunctionIndexer

    return LuaFunctionIndexer()


@pytest.fixture
def naming_indexer():
    """Indexer that names function expressions after their assignment target."""
    pytest.importorskip("tree_sitter_lua")
    from lua_lines.src.lua_lines.indexer import LuaFunctionIndexer

    return LuaFunctionIndexer(name_assignments=True)
