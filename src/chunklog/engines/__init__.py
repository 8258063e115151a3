"""Output engines: terminal (rich) and log files."""

from .base import Engine, EngineSettings
from .console import ConsoleEngine
from .file_storage import FileStorageEngine, FileStorageSettings

__all__ = [
    'Engine', 'EngineSettings',
    'ConsoleEngine',
    'FileStorageEngine', 'FileStorageSettings',
]
