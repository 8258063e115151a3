"""Tests for level styling, the defaults table and prefix color specs."""

import pytest

from chunklog.lib.compile_lib import (
    STANDARD, ContentChunk, Defaults, Level, PerCharacter, Prefix, Static,
    Style, apply_line_style, as_color_spec, group_sub_lines, resolve_colors,
    resolve_line_style,
)
from chunklog.lib.compile_lib.chunks import Computed


class TestResolveLineStyle:
    """Header colors and forced directives per level and toggles."""

    def test_plain_info(self):
        style = resolve_line_style(Level.INFO, False, False, STANDARD)
        assert style.header_color == "#cc80ff"
        assert style.header_background is None
        assert style.forced == ()
        assert not style.colored_background

    def test_colored_background_swaps_roles(self):
        style = resolve_line_style(Level.WARN, True, False, STANDARD)
        assert style.header_color == "#ffffff"
        assert style.header_background == "#ff8a1c"

    def test_fatal_always_colored(self):
        style = resolve_line_style(Level.FATAL, False, False, STANDARD)
        assert style.header_color == "#ff0000"
        assert style.header_background == "#ffffff"
        assert style.forced == (
            (Style.TEXT_COLOR, "#ff0000"),
            (Style.BACKGROUND_COLOR, "#ffffff"),
        )

    def test_all_line_colored(self):
        style = resolve_line_style(Level.ERROR, True, True, STANDARD)
        assert style.forced == (
            (Style.BACKGROUND_COLOR, "#ff4a4a"),
            (Style.TEXT_COLOR, "#ffffff"),
        )

    @pytest.mark.parametrize("level", list(Level))
    def test_deterministic(self, level):
        assert resolve_line_style(level, True, True, STANDARD) == \
            resolve_line_style(level, True, True, STANDARD)


class TestApplyLineStyle:
    """Forced directives go before the chunk's own."""

    def test_own_color_still_wins(self):
        chunk = ContentChunk("42", [Style.TEXT_COLOR], ["#55ff55"])
        style = resolve_line_style(Level.FATAL, False, False, STANDARD)
        apply_line_style([chunk], style)
        assert chunk.styling == [Style.TEXT_COLOR, Style.BACKGROUND_COLOR, Style.TEXT_COLOR]
        assert chunk.styling_params == ["#ff0000", "#ffffff", "#55ff55"]

    def test_nothing_forced(self):
        chunk = ContentChunk("x")
        apply_line_style([chunk], resolve_line_style(Level.INFO, False, False, STANDARD))
        assert chunk.styling == []


class TestContentChunk:

    def test_parallel_lists_enforced(self):
        with pytest.raises(ValueError):
            ContentChunk("x", [Style.BOLD], [])

    def test_add_and_prepend(self):
        chunk = ContentChunk("x").add_style(Style.BOLD).prepend_style(Style.ITALIC)
        assert chunk.styling == [Style.ITALIC, Style.BOLD]
        assert chunk.styling_params == ["", ""]

    def test_group_sub_lines(self):
        chunks = [
            ContentChunk("a", sub_line=True, breaks_line=True),
            ContentChunk("b", sub_line=True),
            ContentChunk("c", sub_line=True, breaks_line=True),
        ]
        groups = group_sub_lines(chunks)
        assert [[chunk.content for chunk in group] for group in groups] == [["a", "b"], ["c"]]


class TestColorSpecs:
    """Prefix color specs resolve to one color per character."""

    def test_static(self):
        assert resolve_colors(Static("#111111"), "ab") == ["#111111", "#111111"]

    def test_per_character_padded_with_last(self):
        spec = as_color_spec(["#f00", "#0f0"])
        assert isinstance(spec, PerCharacter)
        assert resolve_colors(spec, "abcd") == ["#f00", "#0f0", "#0f0", "#0f0"]

    def test_per_character_truncated(self):
        assert resolve_colors(PerCharacter(("#1", "#2", "#3")), "a") == ["#1"]

    def test_computed(self):
        spec = as_color_spec(lambda text: ["#abc"] * len(text))
        assert isinstance(spec, Computed)
        assert resolve_colors(spec, "xyz") == ["#abc"] * 3

    def test_computed_string(self):
        spec = Computed(lambda text: "#00ff00")
        assert resolve_colors(spec, "ok") == ["#00ff00", "#00ff00"]

    def test_none(self):
        assert as_color_spec(None) is None
        assert as_color_spec("") is None
        assert resolve_colors(None, "ab") == [None, None]

    def test_prefix_create(self):
        prefix = Prefix.create("db", "#00aaff", ["#000000"])
        assert prefix.color == Static("#00aaff")
        assert prefix.background_color == PerCharacter(("#000000",))


class TestDefaults:
    """The defaults table and JSON overrides."""

    def test_level_aliases(self):
        assert Level.LOG is Level.INFO
        assert Level.ALERT is Level.WARN
        assert Level.SEVERE is Level.ERROR
        assert Level.coerce("severe") is Level.ERROR
        assert Level.coerce(4) is Level.DEBUG

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            Level.coerce("verbose")

    def test_from_dict_does_not_touch_base(self):
        custom = Defaults.from_dict({"level_main_colors": {"info": "#000001"}}, STANDARD)
        assert custom.main_color(Level.INFO) == "#000001"
        assert custom.main_color(Level.WARN) == STANDARD.main_color(Level.WARN)
        assert STANDARD.main_color(Level.INFO) == "#cc80ff"

    def test_from_dict_numeric_level_keys(self):
        custom = Defaults.from_dict({"level_accent_colors": {"2": "#123456"}})
        assert custom.accent_color(Level.ERROR) == "#123456"

    def test_from_dict_styles_and_primitives(self):
        custom = Defaults.from_dict({
            "variable_styling": ["italic"],
            "variable_styling_params": [""],
            "primitive_colors": {"number": "#999999"},
        })
        assert custom.variable_styling == [Style.ITALIC]
        assert custom.primitive_colors.number == "#999999"
        assert custom.primitive_colors.string == STANDARD.primitive_colors.string

    def test_from_dict_length_mismatch(self):
        with pytest.raises(ValueError):
            Defaults.from_dict({"variable_styling": ["bold"]})
