"""
Logger — the front door of chunklog.

Compiles whatever the caller hands it into a CompiledMessage and fans the
message out to every registered engine. The emit path is:

    input + args -> MessageCompiler -> chunks
                 -> split into primary chunks / sublines
                 -> level styling forced onto the primary chunks
                 -> every engine's log(message)

A logger is ``active`` until a FATAL log (unless ``disable_fatal_crash``)
or process termination marks it ``exited``. From then on every call is
dropped silently so nothing is printed after shutdown has begun.
"""

import re
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Union

from chunklog.errors import ConfigError
from chunklog.lib.compile_lib import (
    STANDARD, CompiledMessage, ContentChunk, Defaults, Level, MessageCompiler,
    Prefix, PresentationSettings, Static, apply_line_style, resolve_line_style,
)
from chunklog.lib.compile_lib.compiler import safe_repr

FATAL_EXIT_CODE = 1


class Logger:
    """Compiles log calls and dispatches them to engines.

    Usage::

        logger = Logger(prefixes=['api', Prefix.create('db', '#00aaff')],
                        redacted_content=[r'token=\\w+'])
        ConsoleEngine(None, logger)
        logger.info("listening on %s:%d", host, port)
        logger.error(exc)
        logger.warn(["retry ", " of ", ""], attempt, limit)
    """

    def __init__(
        self,
        prefixes: Sequence[Union[str, Prefix]] = None,
        default_level: Union[Level, int, str] = Level.INFO,
        disable_fatal_crash: bool = False,
        redacted_content: Iterable = None,
        all_line_colored: bool = False,
        colored_background: bool = False,
        defaults: Defaults = None,
        lifecycle=None,
    ):
        self.default_level = Level.coerce(default_level)
        self.disable_fatal_crash = disable_fatal_crash
        self.defaults = defaults if defaults is not None else STANDARD
        self.redacted_content = list(redacted_content or [])
        try:
            self.compiler = MessageCompiler(self.defaults, self.redacted_content)
        except re.error as e:
            raise ConfigError(f"Invalid redaction pattern {e.pattern!r}: {e}") from e
        self.all_line_colored = all_line_colored
        self.colored_background = colored_background
        self.prefixes = self._parse_prefixes(prefixes)
        self.lifecycle = lifecycle
        self._listeners: List = []
        self._exited = False
        if lifecycle is not None:
            lifecycle.attach(self)

    def _parse_prefixes(self, prefixes) -> List[Prefix]:
        parsed = []
        for prefix in prefixes or ():
            if isinstance(prefix, Prefix):
                parsed.append(prefix)
            else:
                parsed.append(Prefix(str(prefix), Static(self.defaults.prefix_main_color)))
        return parsed

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def exited(self) -> bool:
        return self._exited

    def mark_exited(self) -> None:
        """Move to the exited state. There is no way back."""
        self._exited = True

    def set_colored_background(self, colored_background: bool) -> None:
        self.colored_background = colored_background

    def set_all_line_colored(self, all_line_colored: bool) -> None:
        self.all_line_colored = all_line_colored

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def register_listener(self, engine) -> None:
        if engine not in self._listeners:
            self._listeners.append(engine)

    def unregister_listener(self, engine) -> None:
        self._listeners = [listener for listener in self._listeners if listener is not engine]

    @property
    def listeners(self) -> List:
        return list(self._listeners)

    # -------------------------------------------------------------------------
    # Compilation
    # -------------------------------------------------------------------------

    def _compile(self, value: Any, args: Sequence[Any]) -> List[ContentChunk]:
        try:
            return self.compiler.compile(value, False, args)
        except Exception as e:
            # Logging must never take the caller down
            fallback = f'{safe_repr(value)} <compilation failed: {type(e).__name__}: {e}>'
            return [ContentChunk(fallback)]

    def build_message(self, value: Any, level: Level, args: Sequence[Any] = ()) -> CompiledMessage:
        """Compile one log call into the message engines receive."""
        chunks = self._compile(value, args)
        primary = [chunk for chunk in chunks if not chunk.sub_line]
        sub_lines = [chunk for chunk in chunks if chunk.sub_line]

        line_style = resolve_line_style(level, self.colored_background,
                                        self.all_line_colored, self.defaults)
        apply_line_style(primary, line_style)

        return CompiledMessage(
            chunks=primary,
            sub_lines=sub_lines,
            prefixes=list(self.prefixes),
            timestamp=datetime.now(),
            level=level,
            settings=PresentationSettings(
                colored_background=self.colored_background,
                all_line_colored=self.all_line_colored,
                defaults=self.defaults,
            ),
        )

    def _handle(self, value: Any, level: Level, args: Sequence[Any]) -> Optional[CompiledMessage]:
        if self._exited:
            return None
        message = self.build_message(value, level, args)
        # Synchronous engines (the terminal) first, queued writers after
        for listener in sorted(self._listeners, key=lambda engine: not engine.synchronous):
            listener.log(message)
        if level == Level.FATAL and not self.disable_fatal_crash:
            self._crash()
        return message

    def _crash(self) -> None:
        """Flush everything, then end the process with FATAL_EXIT_CODE."""
        self.mark_exited()
        if self.lifecycle is not None:
            self.lifecycle.shutdown(FATAL_EXIT_CODE)
        for listener in self._listeners:
            listener.flush()
        raise SystemExit(FATAL_EXIT_CODE)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def log(self, value: Any, *args: Any) -> None:
        """Log at the default level."""
        self._handle(value, self.default_level, args)

    def info(self, value: Any, *args: Any) -> None:
        self._handle(value, Level.INFO, args)

    def warn(self, value: Any, *args: Any) -> None:
        self._handle(value, Level.WARN, args)

    def alert(self, value: Any, *args: Any) -> None:
        self._handle(value, Level.ALERT, args)

    def error(self, value: Any, *args: Any) -> None:
        self._handle(value, Level.ERROR, args)

    def severe(self, value: Any, *args: Any) -> None:
        self._handle(value, Level.SEVERE, args)

    def debug(self, value: Any, *args: Any) -> None:
        self._handle(value, Level.DEBUG, args)

    def fatal(self, value: Any, *args: Any) -> None:
        """Log at FATAL, then exit the process unless fatal crash is disabled.

        Raises:
            SystemExit: with FATAL_EXIT_CODE once cleanup has finished.
        """
        self._handle(value, Level.FATAL, args)
