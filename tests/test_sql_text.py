"""Tests for the low-level T-SQL text helpers."""

from __future__ import annotations

from sprocforensic.utils.sql_text import (
    collapse_whitespace,
    count_lines,
    matching_paren,
    preview_lines,
    split_object_name,
    split_top_level,
    strip_comments,
    unwrap_parentheses,
)


class TestStripComments:
    def test_line_comments(self) -> None:
        assert strip_comments("SELECT 1 -- trailing\nSELECT 2") == "SELECT 1 \nSELECT 2"

    def test_block_comments_non_greedy(self) -> None:
        text = "/* a */ SELECT 1 /* b */ FROM T"
        assert strip_comments(text) == "  SELECT 1   FROM T"

    def test_multiline_block_comment(self) -> None:
        text = "SELECT 1\n/*\n  SELECT * FROM Old\n*/\nFROM T"
        assert "Old" not in strip_comments(text)

    def test_block_comment_keeps_tokens_apart(self) -> None:
        assert strip_comments("SELECT/**/1") == "SELECT 1"

    def test_line_comment_marker_inside_block_comment(self) -> None:
        assert strip_comments("/* -- x */SELECT 1") == " SELECT 1"


class TestSplitTopLevel:
    def test_respects_parentheses(self) -> None:
        assert split_top_level("a decimal(18,2), b int") == ["a decimal(18,2)", "b int"]

    def test_respects_string_literals_with_escaped_quotes(self) -> None:
        assert split_top_level("x = 'it''s, here', y") == ["x = 'it''s, here'", "y"]

    def test_respects_brackets(self) -> None:
        assert split_top_level("[a,b], c") == ["[a,b]", "c"]

    def test_drops_empty_pieces(self) -> None:
        assert split_top_level("a, , b,") == ["a", "b"]


class TestUnwrapParentheses:
    def test_enclosing_pair_removed(self) -> None:
        assert unwrap_parentheses(" (@a int, @b int) ") == "@a int, @b int"

    def test_non_enclosing_pair_kept(self) -> None:
        assert unwrap_parentheses("(a) + (b)") == "(a) + (b)"

    def test_no_parentheses(self) -> None:
        assert unwrap_parentheses("@a int") == "@a int"


class TestNames:
    def test_split_object_name(self) -> None:
        assert split_object_name("[dbo] . [Users]") == ["dbo", "Users"]
        assert split_object_name("Users") == ["Users"]
        assert split_object_name("[My Schema].[Order Details]") == ["My Schema", "Order Details"]

    def test_collapse_whitespace(self) -> None:
        assert collapse_whitespace("  nvarchar \n\t (100) ") == "nvarchar (100)"


class TestLines:
    def test_count_lines_ignores_surrounding_blank_lines(self) -> None:
        assert count_lines("\n\nBEGIN\n  SELECT 1\nEND\n\n") == 3

    def test_count_lines_empty(self) -> None:
        assert count_lines("") == 0
        assert count_lines("  \n ") == 0

    def test_count_lines_crlf(self) -> None:
        assert count_lines("a\r\nb\r\nc") == 3

    def test_preview_lines(self) -> None:
        body = "\n".join(f"line {i}" for i in range(1, 31))

        preview = preview_lines(body, 20)
        assert preview.splitlines()[-1] == "line 20"
        assert len(preview.splitlines()) == 20

    def test_preview_shorter_than_limit(self) -> None:
        assert preview_lines("a\nb", 20) == "a\nb"


class TestMatchingParen:
    def test_nested(self) -> None:
        text = "(@a decimal(18,2), @b int) AS"
        assert matching_paren(text, 0) == text.index(") AS")

    def test_skips_literals_and_brackets(self) -> None:
        text = "(@a varchar(5) = ')', [b)] int)"
        assert matching_paren(text, 0) == len(text) - 1

    def test_unclosed(self) -> None:
        assert matching_paren("(@a int", 0) is None
