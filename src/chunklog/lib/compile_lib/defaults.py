"""
Presentation defaults: the color and styling table.

The table is a plain mutable dataclass. ``STANDARD`` is the stock palette;
pass a copy (``copy.deepcopy(STANDARD)`` or ``Defaults.from_dict``) to a Logger
to change colors without touching the shared instance.
"""

import copy
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from .chunks import Style
from .levels import Level


@dataclass
class PrimitiveColors:
    """Colors the primitive colorizer assigns to recognized tokens."""
    string: str = '#ff5555'
    number: str = '#55ff55'
    boolean: str = '#5555ff'
    null: str = '#555555'
    undefined: str = '#005500'
    circular: str = '#ff5555'


def _main_colors() -> Dict[Level, str]:
    return {
        Level.INFO: '#cc80ff',
        Level.WARN: '#ff8a1c',
        Level.ERROR: '#ff4a4a',
        Level.FATAL: '#ffffff',
        Level.DEBUG: '#555555',
    }


def _accent_colors() -> Dict[Level, str]:
    return {
        Level.INFO: '#ffffff',
        Level.WARN: '#ffffff',
        Level.ERROR: '#ffffff',
        Level.FATAL: '#ff0000',
        Level.DEBUG: '#ffffff',
    }


@dataclass
class Defaults:
    level_main_colors: Dict[Level, str] = field(default_factory=_main_colors)
    level_accent_colors: Dict[Level, str] = field(default_factory=_accent_colors)
    prefix_main_color: str = '#777777'
    prefix_accent_color: str = '#000000'
    redaction_text: str = '[REDACTED]'
    caused_by_text_color: Optional[str] = '#ffffff'
    caused_by_background_color: Optional[str] = '#ff0000'
    variable_styling: List[Style] = field(
        default_factory=lambda: [Style.BOLD, Style.TEXT_COLOR])
    variable_styling_params: List[str] = field(
        default_factory=lambda: ['', '#55ff55'])
    primitive_colors: PrimitiveColors = field(default_factory=PrimitiveColors)

    def main_color(self, level: Level) -> Optional[str]:
        return self.level_main_colors.get(level)

    def accent_color(self, level: Level) -> Optional[str]:
        return self.level_accent_colors.get(level)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: 'Defaults' = None) -> 'Defaults':
        """Build a table from JSON-style overrides on top of ``base``.

        Level color maps accept level names or numbers as keys, styling
        lists accept style names. Unknown keys are ignored.

        Raises:
            ValueError: for unknown level or style names.
        """
        result = copy.deepcopy(base) if base is not None else cls()
        known = {f.name for f in fields(cls)}
        for key, value in (data or {}).items():
            key = key.replace('-', '_')
            if key not in known:
                continue
            if key in ('level_main_colors', 'level_accent_colors'):
                merged = dict(getattr(result, key))
                merged.update({Level.coerce(_level_key(k)): v for k, v in value.items()})
                value = merged
            elif key == 'variable_styling':
                value = [Style.coerce(s) for s in value]
            elif key == 'primitive_colors':
                value = replace(result.primitive_colors, **value)
            setattr(result, key, value)
        if len(result.variable_styling) != len(result.variable_styling_params):
            raise ValueError("variable_styling and variable_styling_params differ in length")
        return result


def _level_key(key):
    """JSON object keys are strings; '2' means Level 2."""
    if isinstance(key, str) and key.isdigit():
        return int(key)
    return key


STANDARD = Defaults()


@dataclass
class PresentationSettings:
    """Per-logger presentation state snapshotted into each message."""
    colored_background: bool = False
    all_line_colored: bool = False
    defaults: Defaults = field(default_factory=Defaults)
