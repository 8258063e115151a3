"""chunklog — structured, colorized logging.

Log calls are compiled into styled chunks (values colorized, secrets
redacted, exceptions expanded with their causes) and rendered by engines:
the terminal through rich, and plain-text or HTML log files written by a
background queue.
"""

from chunklog._version import __version__, __app_name__
from chunklog.engines import (
    ConsoleEngine, Engine, EngineSettings, FileStorageEngine, FileStorageSettings,
)
from chunklog.errors import ChunklogError, ConfigError
from chunklog.lib.compile_lib import (
    STANDARD, CompiledMessage, ContentChunk, Defaults, Level, Prefix,
    PrimitiveColors, Style,
)
from chunklog.lifecycle import LifecycleManager
from chunklog.logger import Logger

__all__ = [
    "__version__", "__app_name__",
    "Logger", "LifecycleManager",
    "Engine", "EngineSettings", "ConsoleEngine",
    "FileStorageEngine", "FileStorageSettings",
    "Level", "Style", "Prefix", "ContentChunk", "CompiledMessage",
    "Defaults", "PrimitiveColors", "STANDARD",
    "ChunklogError", "ConfigError",
]
