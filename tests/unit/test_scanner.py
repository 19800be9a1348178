"""Tests for the delimiter-aware scanner."""

from surfacecheck.analysis.scanner import (
    find_matching,
    find_top_level,
    line_number_at,
    mask_strings,
    split_top_level,
    strip_comments,
)


class TestSplitTopLevel:
    """Tests for split_top_level."""

    def test_simple_split(self) -> None:
        assert split_top_level("a: string, b: number") == ["a: string", "b: number"]

    def test_nested_generics_are_not_split(self) -> None:
        result = split_top_level("a: Map<string, number>, b: Array<[string, number]>")
        assert result == ["a: Map<string, number>", "b: Array<[string, number]>"]

    def test_arrow_does_not_close_depth(self) -> None:
        result = split_top_level("cb: (x: number, y: number) => void, done: boolean")
        assert result == ["cb: (x: number, y: number) => void", "done: boolean"]

    def test_object_type_is_not_split(self) -> None:
        result = split_top_level("opts: { a: string, b: number }, flag: boolean")
        assert result == ["opts: { a: string, b: number }", "flag: boolean"]

    def test_empty_segments_dropped(self) -> None:
        assert split_top_level("a,, b ,") == ["a", "b"]
        assert split_top_level("") == []
        assert split_top_level("   ") == []

    def test_string_literals_are_opaque(self) -> None:
        assert split_top_level("sep = ',', b") == ["sep = ','", "b"]
        assert split_top_level('x: "(", y') == ['x: "("', "y"]

    def test_multiple_separators(self) -> None:
        assert split_top_level("a: string; b: number\nc: boolean", ";\n") == [
            "a: string",
            "b: number",
            "c: boolean",
        ]

    def test_malformed_input_does_not_raise(self) -> None:
        assert split_top_level("a>, b") == ["a>, b"]
        assert split_top_level("a), b") == ["a), b"]


class TestFindMatching:
    """Tests for find_matching."""

    def test_nested_parens(self) -> None:
        assert find_matching("(a, (b))", 0) == 7

    def test_unbalanced_returns_none(self) -> None:
        assert find_matching("(a, (b)", 0) is None

    def test_brace_inside_string_ignored(self) -> None:
        text = "{ s: '}' }"
        assert find_matching(text, 0) == len(text) - 1

    def test_angle_brackets_skip_arrow(self) -> None:
        text = "<T extends () => void>"
        assert find_matching(text, 0) == len(text) - 1

    def test_open_index_in_middle(self) -> None:
        text = "foo(a: Array<string>) {}"
        assert find_matching(text, 3) == text.index(")")


class TestFindTopLevel:
    """Tests for find_top_level."""

    def test_finds_top_level_colon(self) -> None:
        assert find_top_level("opts: { a: string }", ":") == 4

    def test_skips_nested(self) -> None:
        assert find_top_level("{ a: 1 }", ":") == -1

    def test_equals_skips_operators(self) -> None:
        assert find_top_level("cb: () => void", "=") == -1
        assert find_top_level("x: number = 1", "=") == 10

    def test_start_offset(self) -> None:
        assert find_top_level("a;b;c", ";", 2) == 3


class TestLineNumberAt:
    """Tests for line_number_at."""

    def test_line_numbers_are_one_based(self) -> None:
        text = "a\nb\nc"
        assert line_number_at(text, 0) == 1
        assert line_number_at(text, 2) == 2
        assert line_number_at(text, 4) == 3


class TestStripComments:
    """Tests for strip_comments."""

    def test_line_comment_blanked(self) -> None:
        text = "const a = 1; // note\nconst b = 2;"
        result = strip_comments(text)
        assert len(result) == len(text)
        assert "note" not in result
        assert result.endswith("\nconst b = 2;")

    def test_block_comment_keeps_newlines(self) -> None:
        text = "a /* x\ny */ b"
        result = strip_comments(text)
        assert len(result) == len(text)
        assert result.count("\n") == 1
        assert "x" not in result
        assert result.startswith("a ")
        assert result.endswith(" b")

    def test_comment_markers_in_strings_kept(self) -> None:
        text = "const url = 'http://example.com'; const g = \"/* x */\";"
        assert strip_comments(text) == text

    def test_unterminated_block_comment(self) -> None:
        result = strip_comments("a /* never closed")
        assert result.strip() == "a"


class TestMaskStrings:
    """Tests for mask_strings."""

    def test_contents_blanked_offsets_kept(self) -> None:
        text = "const s = 'export function x() {}';\nexport function y() {}"
        masked = mask_strings(text)
        assert len(masked) == len(text)
        assert masked.count("export function") == 1
        assert masked.index("export function y") == text.index("export function y")
