"""Exceptions raised by chunklog."""


class ChunklogError(Exception):
    """Base class for chunklog errors."""


class ConfigError(ChunklogError, ValueError):
    """Invalid or missing configuration, raised at construction time."""
