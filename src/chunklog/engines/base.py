"""
Engine base class.

An engine is a sink: it registers itself as a listener on one or more
loggers and receives every CompiledMessage they produce. The set of
engines is small and closed (console, file storage), so the base class
only carries what both share: listener bookkeeping, the debug switch and
timestamp formatting.
"""

from dataclasses import dataclass
from datetime import datetime

from chunklog.lib.compile_lib import CompiledMessage, Level


@dataclass
class EngineSettings:
    """Settings shared by every engine.

    Attributes:
        debug: Render DEBUG messages (dropped otherwise)
    """
    debug: bool = False


class Engine:
    """Common base of ConsoleEngine and FileStorageEngine.

    Usage::

        logger = Logger(prefixes=['app'])
        engine = ConsoleEngine(EngineSettings(debug=True), logger)
        ...
        engine.destroy()    # stop listening
    """

    # Queued engines set this to False so terminal output comes first
    synchronous = True

    def __init__(self, settings: EngineSettings = None, *loggers):
        self.settings = settings if settings is not None else EngineSettings()
        self.debug = self.settings.debug
        self.loggers = []
        for logger in loggers:
            self.register_logger(logger)

    def register_logger(self, logger) -> None:
        """Start listening to ``logger``."""
        logger.register_listener(self)
        if logger not in self.loggers:
            self.loggers.append(logger)

    def destroy(self) -> None:
        """Stop listening to every logger this engine is registered with."""
        for logger in self.loggers:
            logger.unregister_listener(self)
        self.loggers = []

    def accepts(self, message: CompiledMessage) -> bool:
        """DEBUG messages only reach engines in debug mode."""
        return self.debug or message.level != Level.DEBUG

    @staticmethod
    def get_time(time: datetime, full_date: bool = False) -> str:
        """Format a timestamp for log lines.

        Examples::

            get_time(datetime(2024, 7, 1, 12, 0, 5), True)   # [24-07-01 12:00:05]
            get_time(datetime(2024, 7, 1, 12, 0, 5))         # [12:00:05]
        """
        if full_date:
            return time.strftime('[%y-%m-%d %H:%M:%S]')
        return time.strftime('[%H:%M:%S]')

    def log(self, message: CompiledMessage) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not implement log()")

    def flush(self) -> None:
        """Block until pending output is written. Nothing to do by default."""

    def close(self) -> None:
        """Release resources. Nothing to do by default."""
