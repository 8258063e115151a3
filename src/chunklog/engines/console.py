"""
ConsoleEngine — terminal renderer built on rich.

Output shape::

    [12:00:05] [app] ERROR: RuntimeError: boom
    |  File "app.py", line 10, in main                         (padded)
    |  raise RuntimeError("boom")                              (padded)
    # Caused by:                                               (padded)
    |  RuntimeError: root                                      (padded)
    #----------------------------------------------------------------

The primary line is printed as is. Sublines are grouped into visual lines
at ``breaks_line`` boundaries, prefixed with the continuation marker
(special lines go without), hard-wrapped and right-padded to the terminal
width, which is read from the console on every call. A separator closes
any message that had sublines.
"""

from typing import Dict, List, Optional

from rich.cells import get_character_cell_size
from rich.console import Console
from rich.style import Style as RichStyle
from rich.text import Text

from chunklog.lib.compile_lib import (
    CompiledMessage, ContentChunk, LineStyle, Prefix,
    STDERR_LEVELS, Style, group_sub_lines, resolve_colors, resolve_line_style,
)

from .base import Engine, EngineSettings

CONTINUATION_MARKER = '|  '
SUB_LINE_COLOR = 'bright_black'


def make_console(stderr: bool = False, no_color: bool = False) -> Console:
    """Console that prints Text verbatim: no markup, highlighting or wrapping."""
    return Console(stderr=stderr, highlight=False, markup=False, emoji=False,
                   soft_wrap=True, no_color=no_color)


def fit_cells(content: str, room: int) -> int:
    """Number of leading characters of ``content`` that fit in ``room`` cells."""
    used = 0
    for index, char in enumerate(content):
        used += get_character_cell_size(char)
        if used > room:
            return index
    return len(content)


class ConsoleEngine(Engine):
    """Renders compiled messages to the terminal.

    INFO and DEBUG go to ``console`` (stdout), WARN, ERROR and FATAL to
    ``error_console`` (stderr). Passing only ``console`` sends everything
    there, which is what tests do with an in-memory console.

    Usage::

        logger = Logger(prefixes=['app'])
        ConsoleEngine(EngineSettings(debug=True), logger)
        logger.info("ready on port %d", 8080)
    """

    def __init__(self, settings: EngineSettings = None, *loggers,
                 console: Console = None, error_console: Console = None):
        super().__init__(settings, *loggers)
        self.console = console if console is not None else make_console()
        if error_console is not None:
            self.error_console = error_console
        elif console is not None:
            self.error_console = console
        else:
            self.error_console = make_console(stderr=True)
        self._prefix_cache: Dict[str, Text] = {}
        self._cache_background: Optional[str] = None

    # -------------------------------------------------------------------------
    # Styling
    # -------------------------------------------------------------------------

    @staticmethod
    def chunk_style(chunk: ContentChunk, base: RichStyle) -> RichStyle:
        """Fold a chunk's directives over ``base``; the last directive wins."""
        style = base
        for directive, param in zip(chunk.styling, chunk.styling_params):
            if directive is Style.BOLD:
                style += RichStyle(bold=True)
            elif directive is Style.ITALIC:
                style += RichStyle(italic=True)
            elif directive is Style.TEXT_COLOR and param:
                style += RichStyle(color=param)
            elif directive is Style.BACKGROUND_COLOR and param:
                style += RichStyle(bgcolor=param)
            elif directive is Style.RESET:
                style = RichStyle.null()
        return style

    def render_prefix(self, prefix: Prefix, background: Optional[str]) -> Text:
        """Render one prefix, memoized by content.

        ``background`` is the level background used when the prefix has
        none of its own; the cache is dropped whenever it changes.
        """
        if background != self._cache_background:
            self._prefix_cache.clear()
            self._cache_background = background
        cached = self._prefix_cache.get(prefix.content)
        if cached is not None:
            return cached

        content = prefix.content
        colors = resolve_colors(prefix.color, content)
        if prefix.background_color:
            backgrounds = resolve_colors(prefix.background_color, content)
        else:
            backgrounds = [background] * len(content)

        text = Text()
        for char, color, bgcolor in zip(content, colors, backgrounds):
            text.append(char, RichStyle(color=color, bgcolor=bgcolor))
        self._prefix_cache[content] = text
        return text

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render_primary(self, message: CompiledMessage, line_style: LineStyle) -> Text:
        header = RichStyle(color=line_style.header_color, bgcolor=line_style.header_background)
        text = Text(self.get_time(message.timestamp), style=header)
        for prefix in message.prefixes:
            text.append(' [', header)
            text.append_text(self.render_prefix(prefix, line_style.header_background))
            text.append(']', header)
        text.append(f' {message.level.name}:', header)

        # The gap after "LEVEL:" takes the first chunk's style, so it is
        # only painted when the message text is.
        text.append(' ', self.chunk_style(message.chunks[0], RichStyle.null()))
        for chunk in message.chunks:
            text.append(chunk.content, self.chunk_style(chunk, RichStyle.null()))
        return text

    def _wrap(self, group: List[ContentChunk], base: RichStyle, available: int) -> List[Text]:
        """Lay one visual line out in rows of at most ``available`` cells."""
        available = max(available, 1)
        rows = [Text()]
        for chunk in group:
            style = self.chunk_style(chunk, base)
            content = chunk.content
            while content:
                count = fit_cells(content, available - rows[-1].cell_len)
                if count == 0:
                    if not rows[-1].cell_len:
                        # A wide character on a one-cell terminal
                        count = 1
                    else:
                        rows.append(Text())
                        continue
                rows[-1].append(content[:count], style)
                content = content[count:]
        return rows

    def render_sub_lines(self, message: CompiledMessage, line_style: LineStyle,
                         width: int) -> List[Text]:
        """Render every subline row plus the closing separator.

        Each row is exactly ``width`` cells wide.
        """
        base = RichStyle(color=line_style.sub_line_color or SUB_LINE_COLOR,
                         bgcolor=line_style.sub_line_background)
        rows = []
        for group in group_sub_lines(message.sub_lines):
            special = group[0].special
            marker_width = 0 if special else len(CONTINUATION_MARKER)
            for row in self._wrap(group, base, width - marker_width):
                line = Text()
                if not special:
                    line.append(CONTINUATION_MARKER, base)
                line.append_text(row)
                if line.cell_len < width:
                    line.append(' ' * (width - line.cell_len), base)
                rows.append(line)

        separator = RichStyle(color=line_style.separator_color,
                              bgcolor=line_style.sub_line_background)
        rows.append(Text('#'.ljust(width, '-'), style=separator))
        return rows

    def log(self, message: CompiledMessage) -> None:
        if not self.accepts(message):
            return
        settings = message.settings
        line_style = resolve_line_style(message.level, settings.colored_background,
                                        settings.all_line_colored, settings.defaults)
        console = self.error_console if message.level in STDERR_LEVELS else self.console

        console.print(self.render_primary(message, line_style), soft_wrap=True)
        if not message.sub_lines:
            return
        for row in self.render_sub_lines(message, line_style, console.width):
            console.print(row, soft_wrap=True)
