"""
Level-based style resolution.

Given a level, the two presentation toggles and a defaults table, decide
the colors of the header (timestamp, brackets, level tag), the colors of
sublines and the separator, and which directives get forced onto every
primary chunk. Pure: the same inputs always give the same LineStyle.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .chunks import ContentChunk, Style
from .defaults import Defaults
from .levels import Level

FALLBACK_SEPARATOR_COLOR = '#ffffff'


@dataclass(frozen=True)
class LineStyle:
    """Resolved colors for one message.

    Attributes:
        header_color: Text color of timestamp, brackets and level tag
        header_background: Background of the same, or None
        sub_line_color: Text color forced onto sublines, or None
        sub_line_background: Background of sublines, or None
        separator_color: Color of the closing separator line
        forced: Directives prepended to every primary chunk
    """
    header_color: Optional[str]
    header_background: Optional[str]
    sub_line_color: Optional[str]
    sub_line_background: Optional[str]
    separator_color: str
    forced: Tuple[Tuple[Style, str], ...] = field(default_factory=tuple)

    @property
    def colored_background(self) -> bool:
        return self.header_background is not None


def resolve_line_style(level: Level, colored_background: bool,
                       all_line_colored: bool, defaults: Defaults) -> LineStyle:
    """Resolve the LineStyle for a message.

    A colored background (the toggle, or any FATAL message) swaps roles:
    the main color becomes the background and the accent the text color.
    FATAL primary chunks are always painted; other levels only when
    whole-line coloring is on.
    """
    main = defaults.main_color(level)
    accent = defaults.accent_color(level)
    use_background = colored_background or level == Level.FATAL

    if use_background:
        header_color, header_background = accent, main
        sub_line_color, sub_line_background = accent, main
    else:
        header_color, header_background = main, None
        sub_line_color, sub_line_background = None, None

    forced: List[Tuple[Style, str]] = []
    if all_line_colored:
        text_color = accent if colored_background else main
        background = main if colored_background else accent
        if background:
            forced.append((Style.BACKGROUND_COLOR, background))
        if text_color:
            forced.append((Style.TEXT_COLOR, text_color))
    if level == Level.FATAL:
        forced.extend((directive, color) for directive, color in
                      ((Style.TEXT_COLOR, accent), (Style.BACKGROUND_COLOR, main)) if color)

    return LineStyle(
        header_color=header_color,
        header_background=header_background,
        sub_line_color=sub_line_color,
        sub_line_background=sub_line_background,
        separator_color=accent or FALLBACK_SEPARATOR_COLOR,
        forced=tuple(forced),
    )


def apply_line_style(chunks: List[ContentChunk], style: LineStyle) -> List[ContentChunk]:
    """Prepend the forced directives to each primary chunk, in place.

    Prepending keeps the chunk's own directives (colorizer, variable
    styling) in charge since later directives win.
    """
    for chunk in chunks:
        for directive, param in reversed(style.forced):
            chunk.prepend_style(directive, param)
    return chunks
