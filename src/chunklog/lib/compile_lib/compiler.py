"""
MessageCompiler — turns arbitrary log input into content chunks.

Input kinds, checked in order:

    missing     falsy (None, 0, False, empty)  ->  a single "undefined" chunk
    scalar      str/int/float/bool/bytes, printf-formatted with the args
    exception   header, traceback lines, then "# Caused by:" and the cause
    template    list/tuple plus args: literal segments zipped with values
    object      anything else, pretty-printed then treated as text

Text is redacted, split into lines (every line after the first is a
subline) and run through the primitive colorizer, one chunk per token.
"""

import json
import pprint
import re
import traceback
from typing import Any, Iterable, List, Sequence

from .chunks import ContentChunk, Style
from .colorize import ColorizedToken, colorize
from .defaults import Defaults
from .formatting import SCALAR_TYPES, format_args
from .redact import compile_patterns, redact

CAUSED_BY_TEXT = '# Caused by:'
UNDEFINED_TEXT = 'undefined'

_LINE_SPLIT_RE = re.compile(r'\r?\n')
_CARET_CHARS = set('^~ ')


def safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:
        return f'<unrepresentable {type(value).__name__} object>'


def pretty(value: Any) -> str:
    """Human-readable multi-line rendering; recursion is marked by pprint."""
    try:
        return pprint.pformat(value, sort_dicts=False)
    except Exception:
        return safe_repr(value)


def _is_missing(value: Any) -> bool:
    """Falsy input: None, 0, False and empty strings or containers."""
    try:
        return not value
    except Exception:
        # Objects whose truth value is ambiguous (arrays) are values
        return False


def _cause_of(error: BaseException) -> Any:
    if error.__cause__ is not None:
        return error.__cause__
    if error.__context__ is not None and not error.__suppress_context__:
        return error.__context__
    return getattr(error, 'cause', None)


def traceback_lines(error: BaseException) -> List[str]:
    """Stripped traceback lines of ``error``, caret underlines dropped."""
    if error.__traceback__ is None:
        return []
    lines = []
    for entry in traceback.format_tb(error.__traceback__):
        for line in entry.splitlines():
            line = line.strip()
            if line and not set(line) <= _CARET_CHARS:
                lines.append(line)
    return lines


class MessageCompiler:
    """Compiles log input into an ordered list of ContentChunk.

    Usage::

        compiler = MessageCompiler(defaults, redacted_content=['secret'])
        chunks = compiler.compile("Hello, %s!", args=("World",))
    """

    def __init__(self, defaults: Defaults = None,
                 redacted_content: Iterable = ()):
        self.defaults = defaults if defaults is not None else Defaults()
        self.patterns = compile_patterns(redacted_content)

    def redact(self, text: str) -> str:
        return redact(text, self.patterns, self.defaults.redaction_text)

    def compile(self, value: Any, force_subline: bool = False,
                args: Sequence[Any] = ()) -> List[ContentChunk]:
        """Compile one input value.

        Args:
            value: Anything the caller logged
            force_subline: Put even the first line on a subline
            args: Positional arguments of the log call

        Returns:
            Chunks in display order; never empty.
        """
        args = tuple(args)
        if _is_missing(value):
            chunk = ContentChunk(UNDEFINED_TEXT, sub_line=force_subline, breaks_line=True)
            chunk.add_style(Style.TEXT_COLOR, self.defaults.primitive_colors.undefined)
            return [chunk]
        if isinstance(value, SCALAR_TYPES):
            return self._compile_text(value, force_subline, args)
        if isinstance(value, BaseException):
            return self._compile_error(value, force_subline, args, frozenset())
        if isinstance(value, (list, tuple)) and args:
            return self._compile_template(value, force_subline, args)
        return self._compile_object(value, force_subline, args)

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def text_chunks(self, text: str, sub_line: bool) -> List[ContentChunk]:
        """Split already-redacted text into lines and colorize each line.

        The first token of every line breaks the line; lines after the
        first are always sublines.
        """
        chunks = []
        for index, line in enumerate(_LINE_SPLIT_RE.split(text)):
            tokens = colorize(line, self.defaults) or [ColorizedToken('')]
            for position, token in enumerate(tokens):
                chunk = ContentChunk(token.text, sub_line=sub_line or index > 0,
                                     breaks_line=position == 0)
                if token.color:
                    chunk.add_style(Style.TEXT_COLOR, token.color)
                chunks.append(chunk)
        return chunks

    def _compile_text(self, value, force_subline, args):
        if isinstance(value, bytes):
            text = value.decode('utf-8', errors='replace')
        else:
            text = str(value)
        text, leftovers = format_args(text, args)
        chunks = self.text_chunks(self.redact(text), force_subline)
        for extra in leftovers:
            chunks.extend(self.compile(extra, True))
        return chunks

    # -------------------------------------------------------------------------
    # Exceptions
    # -------------------------------------------------------------------------

    def caused_by_marker(self) -> ContentChunk:
        marker = ContentChunk(CAUSED_BY_TEXT, [Style.SPECIAL_SUBLINE], [''],
                              sub_line=True, breaks_line=True)
        if self.defaults.caused_by_background_color:
            marker.add_style(Style.BACKGROUND_COLOR, self.defaults.caused_by_background_color)
        if self.defaults.caused_by_text_color:
            marker.add_style(Style.TEXT_COLOR, self.defaults.caused_by_text_color)
        return marker

    def _compile_error(self, error, force_subline, args, seen):
        message, leftovers = format_args(str(error), args)
        name = type(error).__name__
        header = f'{name}: {message}' if message else name
        chunks = self.text_chunks(self.redact(header), force_subline)

        for line in traceback_lines(error):
            chunks.append(ContentChunk(self.redact(line), sub_line=True, breaks_line=True))

        cause = _cause_of(error)
        if cause is not None:
            chunks.append(self.caused_by_marker())
            seen = seen | {id(error)}
            if isinstance(cause, BaseException):
                if id(cause) in seen:
                    chunks.append(ContentChunk(f'<circular cause {type(cause).__name__}>',
                                               sub_line=True, breaks_line=True))
                else:
                    chunks.extend(self._compile_error(cause, True, (), seen))
            elif isinstance(cause, (str, list, tuple)):
                chunks.extend(self.compile(cause, True))
            else:
                chunks.append(ContentChunk(self.redact(_serialize(cause)),
                                           sub_line=True, breaks_line=True))

        for extra in leftovers:
            chunks.extend(self.compile(extra, True))
        return chunks

    # -------------------------------------------------------------------------
    # Templates
    # -------------------------------------------------------------------------

    def _compile_template(self, segments, force_subline, args):
        """Zip literal segments with argument values.

        ``on_sublines`` only ever goes from False to True: once a value (or
        a newline inside a literal) has produced a subline, everything after
        it stays on sublines.
        """
        chunks: List[ContentChunk] = []
        on_sublines = force_subline
        for index, segment in enumerate(segments):
            if segment is not None and segment != '':
                lines = _LINE_SPLIT_RE.split(self.redact(str(segment)))
                for position, line in enumerate(lines):
                    if position:
                        on_sublines = True
                    elif not line:
                        continue
                    chunks.append(ContentChunk(line, [Style.SPECIAL_SUBLINE], [''],
                                               sub_line=on_sublines,
                                               breaks_line=position > 0 or not chunks))
            if index < len(args):
                on_sublines = self._append_value(chunks, args[index], on_sublines)

        for extra in args[len(segments):]:
            chunks.extend(self.compile(extra, True))
        return chunks

    def _append_value(self, chunks, value, on_sublines) -> bool:
        compiled = self.compile(value, on_sublines)
        first = compiled[0]
        first.breaks_line = not chunks
        for style, param in zip(self.defaults.variable_styling,
                                self.defaults.variable_styling_params):
            first.add_style(style, param)
        chunks.extend(compiled)
        return on_sublines or any(chunk.sub_line for chunk in compiled)

    # -------------------------------------------------------------------------
    # Everything else
    # -------------------------------------------------------------------------

    def _compile_object(self, value, force_subline, args):
        chunks = self.text_chunks(self.redact(pretty(value)), force_subline)
        for extra in args:
            chunks.extend(self.compile(extra, True))
        return chunks


def _serialize(value: Any) -> str:
    try:
        return json.dumps(value, default=safe_repr)
    except ValueError:
        return pretty(value)
