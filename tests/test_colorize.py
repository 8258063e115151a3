"""Tests for chunklog.lib.compile_lib.colorize — primitive token coloring."""

import pytest

from chunklog.lib.compile_lib import STANDARD, Level, classify, colorize
from chunklog.lib.compile_lib.colorize import is_number, tokenize

COLORS = STANDARD.primitive_colors


class TestClassify:
    """One word in, one color (or None) out."""

    @pytest.mark.parametrize("word,expected", [
        ("true", COLORS.boolean),
        ("False", COLORS.boolean),
        ("123", COLORS.number),
        ("-4.5", COLORS.number),
        ("0x1f", COLORS.number),
        ('"quoted"', COLORS.string),
        ("'single'", COLORS.string),
        ("null", COLORS.null),
        ("None", COLORS.null),
        ("undefined", COLORS.undefined),
        ("Recursion", COLORS.circular),
    ])
    def test_primitives(self, word, expected):
        assert classify(word, STANDARD) == expected

    def test_level_keywords(self):
        """Words containing a level keyword take that level's main color."""
        assert classify("ERROR", STANDARD) == STANDARD.main_color(Level.ERROR)
        assert classify("warning", STANDARD) == STANDARD.main_color(Level.WARN)
        assert classify("debugger", STANDARD) == STANDARD.main_color(Level.DEBUG)
        assert classify("information", STANDARD) == STANDARD.main_color(Level.INFO)

    def test_plain_word_uncolored(self):
        assert classify("hello", STANDARD) is None

    def test_unbalanced_quote_not_string(self):
        assert classify('"half', STANDARD) is None

    def test_nan_is_not_a_number(self):
        assert not is_number("nan")
        assert not is_number("inf")


class TestColorize:
    """Tokenizing and coloring whole lines."""

    def test_round_trip_text(self):
        """Joining the tokens gives back the input."""
        text = "count: 3, ok=(true) <done>"
        assert "".join(token.text for token in colorize(text, STANDARD)) == text

    def test_delimiters_uncolored(self):
        tokens = colorize("1, 2", STANDARD)
        assert [token.text for token in tokens] == ["1", ", ", "2"]
        assert tokens[1].color is None
        assert tokens[0].color == COLORS.number

    def test_empty_text(self):
        assert colorize("", STANDARD) == []

    def test_tokenize_keeps_delimiter_runs(self):
        assert tokenize("a::b") == ["a", "::", "b"]
