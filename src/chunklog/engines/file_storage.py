"""
FileStorageEngine — persists compiled messages as plain text or HTML.

Layout under ``log_folder_path`` (``<ext>`` is ``log`` or ``html``)::

    latest.<ext>            every message (DEBUG only in debug mode)
    debug/latest.<ext>      every message
    error/latest.<ext>      ERROR and FATAL
    fatal/latest.<ext>      FATAL

On construction each existing ``latest.<ext>`` is renamed to the time it
was last written (``2024-07-01T12-00-05.log``) and, with compression on,
the rotated files of earlier sessions are bundled into ``<timestamp>.zip``.
``close()`` drains the queue, closes the streams and rotates again.

Writes go through one FIFO queue per engine. A worker thread drains it one
entry at a time and exits once it is empty; the next log call starts a new
one. Each log call enqueues exactly one entry, however many files it
reaches, so per-engine order is the call order.
"""

import html
import threading
import zipfile
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Deque, Dict, List, Optional, TextIO, Tuple

from chunklog.errors import ConfigError
from chunklog.lib.compile_lib import (
    CompiledMessage, ContentChunk, Level, LineStyle, Style, group_sub_lines,
    resolve_colors, resolve_line_style,
)

from .base import Engine, EngineSettings

CONTINUATION_MARKER = '|  '

HTML_HEADER = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>chunklog</title>
<style>
body { background: #1e1e1e; color: #d4d4d4; font-family: monospace; }
div { white-space: pre; }
.sub { color: #888888; }
</style>
</head>
<body>
"""


@dataclass
class FileStorageSettings(EngineSettings):
    """
    Attributes:
        log_folder_path: Destination folder (required, created if missing)
        enable_latest_log: Write <folder>/latest.<ext>
        enable_debug_log: Write <folder>/debug/latest.<ext>
        enable_error_log: Write <folder>/error/latest.<ext>
        enable_fatal_log: Write <folder>/fatal/latest.<ext>
        generate_html_log: Write escaped HTML instead of plain text
        compress_log_files_after_new_execution: Zip earlier sessions' files
    """
    log_folder_path: Optional[str] = None
    enable_latest_log: bool = True
    enable_debug_log: bool = False
    enable_error_log: bool = False
    enable_fatal_log: bool = True
    generate_html_log: bool = False
    compress_log_files_after_new_execution: bool = True


# =============================================================================
# Rotation
# =============================================================================

def file_stamp(moment: datetime) -> str:
    """ISO-8601 timestamp usable as a file name (no colons)."""
    return moment.isoformat(timespec='seconds').replace(':', '-')


def _unique_path(directory: Path, stem: str, ext: str) -> Path:
    candidate = directory / f'{stem}.{ext}'
    counter = 1
    while candidate.exists():
        candidate = directory / f'{stem}-{counter}.{ext}'
        counter += 1
    return candidate


def rotate_latest(directory: Path, ext: str) -> Optional[Path]:
    """Rename ``latest.<ext>`` after its modification time.

    Returns:
        The new path, or None when there was nothing to rotate.
    """
    latest = directory / f'latest.{ext}'
    if not latest.is_file():
        return None
    stamp = file_stamp(datetime.fromtimestamp(latest.stat().st_mtime))
    target = _unique_path(directory, stamp, ext)
    latest.rename(target)
    return target


def archive_rotated(directory: Path, ext: str) -> Optional[Path]:
    """Move every rotated ``*.<ext>`` file of ``directory`` into a zip.

    Returns:
        The archive path, or None when there was nothing to archive.
    """
    rotated = sorted(
        path for path in directory.iterdir()
        if path.is_file() and path.suffix == f'.{ext}' and path.stem != 'latest'
    )
    if not rotated:
        return None
    target = _unique_path(directory, file_stamp(datetime.now()), 'zip')
    with zipfile.ZipFile(target, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
        for path in rotated:
            archive.write(path, arcname=path.name)
    for path in rotated:
        path.unlink()
    return target


# =============================================================================
# Rendering
# =============================================================================

def _css(chunk: ContentChunk) -> str:
    properties: Dict[str, str] = {}
    for directive, param in zip(chunk.styling, chunk.styling_params):
        if directive is Style.BOLD:
            properties['font-weight'] = 'bold'
        elif directive is Style.ITALIC:
            properties['font-style'] = 'italic'
        elif directive is Style.TEXT_COLOR and param:
            properties['color'] = param
        elif directive is Style.BACKGROUND_COLOR and param:
            properties['background-color'] = param
        elif directive is Style.RESET:
            properties.clear()
    return ';'.join(f'{name}:{value}' for name, value in properties.items())


def _span(text: str, css: str = '') -> str:
    if not text:
        return ''
    if not css:
        return html.escape(text)
    return f'<span style="{css}">{html.escape(text)}</span>'


def _color_css(color: Optional[str], background: Optional[str]) -> str:
    parts = []
    if color:
        parts.append(f'color:{color}')
    if background:
        parts.append(f'background-color:{background}')
    return ';'.join(parts)


class FileStorageEngine(Engine):
    """Writes compiled messages to log files through an ordered queue.

    Usage::

        lifecycle = LifecycleManager()
        engine = FileStorageEngine(
            FileStorageSettings(log_folder_path='./logs', enable_error_log=True),
            logger,
            lifecycle=lifecycle,
        )

    Raises:
        ConfigError: when ``log_folder_path`` is missing, points at a file,
            or cannot be created.
    """

    synchronous = False

    def __init__(self, settings: FileStorageSettings = None, *loggers, lifecycle=None):
        if settings is None or not settings.log_folder_path:
            raise ConfigError("FileStorageEngine requires settings.log_folder_path")
        self.folder = Path(settings.log_folder_path)
        if self.folder.exists() and not self.folder.is_dir():
            raise ConfigError(f"Log folder path is not a directory: {self.folder}")

        self.html = settings.generate_html_log
        self.extension = 'html' if self.html else 'log'
        self.compress = settings.compress_log_files_after_new_execution
        self.directories: Dict[str, Path] = {}
        for category, enabled, directory in (
            ('latest', settings.enable_latest_log, self.folder),
            ('debug', settings.enable_debug_log, self.folder / 'debug'),
            ('error', settings.enable_error_log, self.folder / 'error'),
            ('fatal', settings.enable_fatal_log, self.folder / 'fatal'),
        ):
            if enabled:
                self.directories[category] = directory

        self._queue: Deque[Tuple[str, List[str]]] = deque()
        self._lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()
        self._worker: Optional[threading.Thread] = None
        self._streams: Dict[str, TextIO] = {}
        self._closed = False
        self.failed_writes = 0
        self._open_streams()

        super().__init__(settings, *loggers)

        self.lifecycle = lifecycle
        self.task_id = f'file-storage:{self.folder.resolve()}'
        if lifecycle is not None:
            lifecycle.register_cleanup_task(self.task_id, self.close)

    def _open_streams(self) -> None:
        try:
            for category, directory in self.directories.items():
                directory.mkdir(parents=True, exist_ok=True)
                rotate_latest(directory, self.extension)
                if self.compress:
                    archive_rotated(directory, self.extension)
                stream = open(directory / f'latest.{self.extension}', 'a', encoding='utf-8')
                if self.html and stream.tell() == 0:
                    stream.write(HTML_HEADER)
                    stream.flush()
                self._streams[category] = stream
        except OSError as e:
            for stream in self._streams.values():
                stream.close()
            raise ConfigError(f"Cannot prepare log folder {self.folder}: {e}") from e

    # -------------------------------------------------------------------------
    # Routing and rendering
    # -------------------------------------------------------------------------

    def targets(self, message: CompiledMessage) -> List[str]:
        """Categories a message is written to."""
        wanted = []
        if self.accepts(message):
            wanted.append('latest')
        wanted.append('debug')
        if message.level in (Level.ERROR, Level.FATAL):
            wanted.append('error')
        if message.level == Level.FATAL:
            wanted.append('fatal')
        return [category for category in wanted if category in self.directories]

    def _header(self, message: CompiledMessage) -> str:
        prefixes = ''.join(f' [{prefix.content}]' for prefix in message.prefixes)
        return f'{self.get_time(message.timestamp, True)}{prefixes} {message.level.name}:'

    def _sub_line_rows(self, message: CompiledMessage) -> List[Tuple[bool, List[ContentChunk]]]:
        return [(group[0].special, group) for group in group_sub_lines(message.sub_lines)]

    def render_text(self, message: CompiledMessage) -> str:
        """Plain-text rendering, one entry per log call.

        The separator is as wide as the widest line of the message.
        """
        lines = [f'{self._header(message)} {message.text}']
        for special, group in self._sub_line_rows(message):
            content = ''.join(chunk.content for chunk in group)
            lines.append(content if special else CONTINUATION_MARKER + content)
        if len(lines) > 1:
            widest = max(len(line) for line in lines)
            lines.append('#'.ljust(widest, '-'))
        return '\n'.join(lines) + '\n'

    def _html_prefixes(self, message: CompiledMessage, line_style: LineStyle) -> str:
        parts = []
        header_css = _color_css(line_style.header_color, line_style.header_background)
        for prefix in message.prefixes:
            colors = resolve_colors(prefix.color, prefix.content)
            if prefix.background_color:
                backgrounds = resolve_colors(prefix.background_color, prefix.content)
            else:
                backgrounds = [line_style.header_background] * len(prefix.content)
            parts.append(_span(' [', header_css))
            parts.extend(_span(char, _color_css(color, background))
                         for char, color, background in zip(prefix.content, colors, backgrounds))
            parts.append(_span(']', header_css))
        return ''.join(parts)

    def render_html(self, message: CompiledMessage) -> str:
        """HTML rendering: escaped, inline-styled ``<div>`` rows."""
        settings = message.settings
        line_style = resolve_line_style(message.level, settings.colored_background,
                                        settings.all_line_colored, settings.defaults)
        header_css = _color_css(line_style.header_color, line_style.header_background)
        level_class = message.level.name.lower()

        primary = [
            _span(self.get_time(message.timestamp, True), header_css),
            self._html_prefixes(message, line_style),
            _span(f' {message.level.name}:', header_css),
            ' ',
        ]
        primary.extend(_span(chunk.content, _css(chunk)) for chunk in message.chunks)
        rows = [f'<div class="line {level_class}">{"".join(primary)}</div>']

        widest = len(self._header(message)) + 1 + len(message.text)
        for special, group in self._sub_line_rows(message):
            marker = '' if special else html.escape(CONTINUATION_MARKER)
            spans = ''.join(_span(chunk.content, _css(chunk)) for chunk in group)
            rows.append(f'<div class="sub {level_class}">{marker}{spans}</div>')
            width = sum(len(chunk.content) for chunk in group) + len(marker and CONTINUATION_MARKER)
            widest = max(widest, width)
        if message.sub_lines:
            separator_css = _color_css(line_style.separator_color, line_style.sub_line_background)
            rows.append(f'<div class="sep">{_span("#".ljust(widest, "-"), separator_css)}</div>')
        return '\n'.join(rows) + '\n'

    # -------------------------------------------------------------------------
    # Queue
    # -------------------------------------------------------------------------

    def log(self, message: CompiledMessage) -> None:
        if self._closed:
            return
        targets = self.targets(message)
        if not targets:
            return
        text = self.render_html(message) if self.html else self.render_text(message)
        self._enqueue(text, targets)

    def _enqueue(self, text: str, targets: List[str]) -> None:
        with self._lock:
            self._queue.append((text, targets))
            self._idle.clear()
            if self._worker is None:
                self._worker = threading.Thread(
                    target=self._drain, name=f'chunklog-writer-{self.folder.name}')
                self._worker.start()

    def _drain(self) -> None:
        while True:
            with self._lock:
                if not self._queue:
                    self._worker = None
                    self._idle.set()
                    return
                text, targets = self._queue.popleft()
            for category in targets:
                stream = self._streams.get(category)
                if stream is None:
                    continue
                try:
                    stream.write(text)
                    stream.flush()
                except (OSError, ValueError) as e:
                    # ValueError: stream closed underneath the worker
                    self.failed_writes += 1
                    if self.failed_writes == 1:
                        self._report_write_failure(category, e)

    def _report_write_failure(self, category: str, error: Exception) -> None:
        """Print the first failed write through the SYSTEM logger."""
        if self.lifecycle is not None:
            notices = self.lifecycle.logger
        else:
            from chunklog.lifecycle import system_logger
            notices = system_logger()
        notices.error(f"Cannot write the {category} log in {self.folder}, "
                      f"later failures are counted only: {type(error).__name__}: {error}")

    @property
    def pending(self) -> int:
        """Entries still waiting in the queue."""
        with self._lock:
            return len(self._queue)

    def flush(self, timeout: float = None) -> bool:
        """Wait until the queue is drained. Returns False on timeout."""
        return self._idle.wait(timeout)

    def close(self) -> None:
        """Drain the queue, close every stream and rotate the files."""
        if self._closed:
            return
        self._closed = True
        self.flush()
        for stream in self._streams.values():
            if self.html:
                stream.write('</body>\n</html>\n')
            stream.close()
        self._streams.clear()
        for directory in self.directories.values():
            rotate_latest(directory, self.extension)

    def destroy(self) -> None:
        """Stop listening, drop the cleanup task and close the files."""
        super().destroy()
        if self.lifecycle is not None and self.lifecycle.has_cleanup_task(self.task_id):
            self.lifecycle.unregister_cleanup_task(self.task_id)
        self.close()
