"""
compile_lib: the message compilation pipeline.

Turns arbitrary log input into styled content chunks. No I/O happens here;
engines decide how chunks reach a terminal or a file.

Public API:
    Level              severity levels (INFO/LOG, WARN/ALERT, ERROR/SEVERE, FATAL, DEBUG)
    Style              styling directives
    ContentChunk       one styled unit of text
    CompiledMessage    what engines consume
    Prefix             bracketed tag with a color spec
    Static, PerCharacter, Computed, as_color_spec
    Defaults, PrimitiveColors, PresentationSettings, STANDARD
    redact             pattern-based redaction
    colorize           heuristic primitive colorizer
    format_args        printf-style argument substitution
    MessageCompiler    input -> chunks
    LineStyle, resolve_line_style, apply_line_style
"""

from .levels import Level, STDERR_LEVELS
from .chunks import (
    Style, ContentChunk, Prefix, Static, PerCharacter, Computed,
    ColorSpec, as_color_spec, resolve_colors,
)
from .defaults import Defaults, PrimitiveColors, PresentationSettings, STANDARD
from .message import CompiledMessage, group_sub_lines
from .redact import redact, compile_patterns, REDACTION_TEXT
from .colorize import colorize, classify, ColorizedToken, CIRCULAR_MARKER
from .formatting import format_args
from .compiler import MessageCompiler, CAUSED_BY_TEXT, UNDEFINED_TEXT
from .styles import LineStyle, resolve_line_style, apply_line_style

__all__ = [
    'Level', 'STDERR_LEVELS',
    'Style', 'ContentChunk', 'Prefix', 'Static', 'PerCharacter', 'Computed',
    'ColorSpec', 'as_color_spec', 'resolve_colors',
    'Defaults', 'PrimitiveColors', 'PresentationSettings', 'STANDARD',
    'CompiledMessage', 'group_sub_lines',
    'redact', 'compile_patterns', 'REDACTION_TEXT',
    'colorize', 'classify', 'ColorizedToken', 'CIRCULAR_MARKER',
    'format_args',
    'MessageCompiler', 'CAUSED_BY_TEXT', 'UNDEFINED_TEXT',
    'LineStyle', 'resolve_line_style', 'apply_line_style',
]
