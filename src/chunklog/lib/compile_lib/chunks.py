"""
Content chunks, styling directives and prefix color specs.

A chunk is one styled, position-ordered piece of text. Its styling is a
pair of parallel lists: ``styling[i]`` is the directive and
``styling_params[i]`` its parameter (a hex color for the color directives,
an empty string otherwise). Directives apply in list order, so a later
TEXT_COLOR overrides an earlier one.

Prefix colors come in three shapes, each a small frozen dataclass:

    Static("#ff0000")                 one color for the whole prefix
    PerCharacter(["#f00", "#0f0"])    one color per character
    Computed(fn)                      fn(content) -> str | list[str]

``as_color_spec()`` converts caller input into one of these once, at
construction, so renderers never probe types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Union


class Style(Enum):
    BOLD = 1
    ITALIC = 2
    TEXT_COLOR = 3
    BACKGROUND_COLOR = 4
    SPECIAL_SUBLINE = 5
    RESET = 6

    @classmethod
    def coerce(cls, value) -> "Style":
        if isinstance(value, Style):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown style: {value!r}") from None


@dataclass
class ContentChunk:
    """One styled unit of message text.

    Attributes:
        content: Text of the chunk
        styling: Ordered style directives
        styling_params: Parameter per directive (same length as styling)
        sub_line: True for continuation content rendered below the main line
        breaks_line: True when this chunk starts a new visual line among
            a run of subline chunks
    """
    content: str
    styling: List[Style] = field(default_factory=list)
    styling_params: List[str] = field(default_factory=list)
    sub_line: bool = False
    breaks_line: bool = False

    def __post_init__(self):
        if len(self.styling) != len(self.styling_params):
            raise ValueError(
                f"styling has {len(self.styling)} directives but "
                f"{len(self.styling_params)} params"
            )

    def add_style(self, style: Style, param: str = '') -> 'ContentChunk':
        """Append a directive (applies after the existing ones)."""
        self.styling.append(style)
        self.styling_params.append(param)
        return self

    def prepend_style(self, style: Style, param: str = '') -> 'ContentChunk':
        """Insert a directive first, so the chunk's own directives still win."""
        self.styling.insert(0, style)
        self.styling_params.insert(0, param)
        return self

    def has_style(self, style: Style) -> bool:
        return style in self.styling

    @property
    def special(self) -> bool:
        """Special sublines are rendered without the continuation marker."""
        return Style.SPECIAL_SUBLINE in self.styling


# =============================================================================
# Color specs
# =============================================================================

@dataclass(frozen=True)
class Static:
    color: str


@dataclass(frozen=True)
class PerCharacter:
    colors: tuple

    def padded(self, length: int) -> List[str]:
        """Colors for ``length`` characters, repeating the final color."""
        colors = list(self.colors[:length])
        if colors and len(colors) < length:
            colors.extend([colors[-1]] * (length - len(colors)))
        return colors


@dataclass(frozen=True)
class Computed:
    fn: Callable[[str], Union[str, Sequence[str]]]

    def resolve(self, content: str) -> Union[Static, PerCharacter]:
        result = self.fn(content)
        if isinstance(result, str):
            return Static(result)
        return PerCharacter(tuple(result))


ColorSpec = Union[Static, PerCharacter, Computed]


def as_color_spec(value) -> Optional[ColorSpec]:
    """Convert a str, list of str, callable or spec into a ColorSpec.

    ``None`` and empty values stay ``None`` (no color).
    """
    if value is None or isinstance(value, (Static, PerCharacter, Computed)):
        return value
    if isinstance(value, str):
        return Static(value) if value else None
    if callable(value):
        return Computed(value)
    colors = tuple(value)
    return PerCharacter(colors) if colors else None


@dataclass(frozen=True)
class Prefix:
    """A bracketed tag printed before the severity level."""
    content: str
    color: Optional[ColorSpec] = None
    background_color: Optional[ColorSpec] = None

    @classmethod
    def create(cls, content: str, color=None, background_color=None) -> 'Prefix':
        return cls(content, as_color_spec(color), as_color_spec(background_color))


def resolve_colors(spec: Optional[ColorSpec], content: str) -> List[Optional[str]]:
    """One color (or None) per character of ``content``."""
    if isinstance(spec, Computed):
        spec = spec.resolve(content)
    if isinstance(spec, Static):
        return [spec.color] * len(content)
    if isinstance(spec, PerCharacter):
        colors = spec.padded(len(content))
        return colors + [None] * (len(content) - len(colors))
    return [None] * len(content)
