"""Tests for the line index builder and query surface, using hand-made spans."""

import threading

import pytest

from lua_lines.src.lua_lines.line_index import LineIndex, build_line_index, count_lines
from lua_lines.src.lua_lines.models.function_models import ResolvedFunction


def fn(name, start, end, depth=0, order=0):
    return ResolvedFunction(start_line=start, end_line=end, name=name, depth=depth, order=order)


class TestCountLines:
    @pytest.mark.parametrize(
        "source, expected",
        [
            (b"", 0),
            (b"x = 1", 1),
            (b"x = 1\n", 1),
            (b"x = 1\ny = 2", 2),
            (b"\n\n", 2),
            (b"a\r\nb\r\n", 2),
        ],
    )
    def test_counts(self, source, expected):
        assert count_lines(source) == expected


class TestNesting:
    def test_innermost_wins_regardless_of_input_order(self):
        functions = [fn("inner", 2, 4, depth=1, order=1), fn("M.outer", 1, 5, depth=0, order=0)]
        index = build_line_index(functions, 5)
        assert [index.get(line) for line in range(1, 6)] == [
            "M.outer", "M.outer", "inner", "inner", "M.outer",
        ]

    def test_every_line_inside_inner_body_is_inner(self):
        index = build_line_index([fn("outer", 1, 20), fn("inner", 5, 15, depth=1, order=1)], 20)
        for line in range(6, 16):
            assert index.get(line) == "inner"
        assert index.get(5) == "outer"

    def test_one_line_nested_function_owns_its_line(self):
        index = build_line_index([fn("a", 1, 3), fn("b", 2, 2, depth=1, order=1)], 3)
        assert index.get(2) == "b"

    def test_three_levels(self):
        functions = [
            fn("a", 1, 9),
            fn("b", 2, 8, depth=1, order=1),
            fn("c", 3, 5, depth=2, order=2),
        ]
        index = build_line_index(functions, 9)
        assert [index.get(line) for line in range(1, 10)] == [
            "a", "a", "b", "c", "c", "b", "b", "b", "a",
        ]


class TestTieBreak:
    def test_later_sibling_on_same_line_wins(self):
        index = build_line_index([fn("first", 1, 1, order=0), fn("second", 1, 1, order=1)], 1)
        assert index.get(1) == "second"

    def test_later_start_wins_over_traversal_order(self):
        # b starts on line 3 where a ends; b is later in the source
        index = build_line_index([fn("b", 3, 5, order=0), fn("a", 1, 3, order=1)], 5)
        assert index.get(3) == "b"
        assert index.get(2) == "a"

    def test_multi_line_nested_sibling_leaves_its_header_line(self):
        # `local function a() end local function b()` on line 2 of outer, b ending on 4
        functions = [
            fn("outer", 1, 5),
            fn("a", 2, 2, depth=1, order=1),
            fn("b", 2, 4, depth=1, order=2),
        ]
        index = build_line_index(functions, 5)
        assert index.get(2) == "a"
        assert index.get(3) == "b"
        assert index.get(4) == "b"


class TestNoFunction:
    def test_lines_outside_functions(self):
        index = build_line_index([fn("f", 2, 3)], 5)
        assert index.get(1) is None
        assert index.get(4) is None
        assert index.get(5) is None

    def test_anonymous_lines_report_nothing(self):
        functions = [fn("outer", 1, 6), fn(None, 2, 4, depth=1, order=1)]
        index = build_line_index(functions, 6)
        assert index.get(2) == "outer"
        assert index.get(3) is None
        assert index.get(4) is None
        assert index.get(5) == "outer"

    @pytest.mark.parametrize("line", [0, -1, 4, 10_000])
    def test_out_of_range(self, line):
        index = build_line_index([fn("f", 1, 3)], 3)
        assert index.get(line) is None

    def test_empty_source(self):
        index = build_line_index([], 0)
        assert index.max_line == 0
        assert len(index) == 0
        assert list(index) == []
        assert index.get(1) is None

    def test_span_past_last_line_is_clamped(self):
        index = build_line_index([fn("f", 1, 4)], 3)
        assert index.max_line == 3
        assert index.get(3) == "f"
        assert index.get(4) is None


class TestLineIndexSurface:
    def test_iteration_covers_every_line(self):
        index = build_line_index([fn("f", 2, 2)], 3)
        assert list(index) == [(1, None), (2, "f"), (3, None)]

    def test_functions_sorted_by_start(self):
        functions = [fn("b", 4, 5, order=1), fn("a", 1, 2, order=0), fn(None, 4, 4, depth=1, order=2)]
        index = build_line_index(functions, 5)
        assert [f.name for f in index.functions] == ["a", "b", None]

    def test_is_immutable(self):
        index = build_line_index([fn("f", 1, 1)], 1)
        with pytest.raises(AttributeError):
            index.extra = 1

    def test_equal_builds_compare_equal(self):
        functions = [fn("f", 1, 2), fn("g", 3, 3, order=1)]
        assert build_line_index(functions, 3) == build_line_index(list(functions), 3)

    def test_repr(self):
        index = build_line_index([fn("f", 1, 1)], 2)
        assert repr(index) == "LineIndex(max_line=2, functions=1)"

    def test_concurrent_reads(self):
        index = build_line_index([fn("outer", 1, 100), fn("inner", 10, 20, depth=1, order=1)], 100)
        expected = [index.get(line) for line in range(0, 102)]
        results = []

        def read():
            results.append([index.get(line) for line in range(0, 102)])

        threads = [threading.Thread(target=read) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert all(r == expected for r in results)
        assert isinstance(index, LineIndex)
