"""
Severity levels for chunklog.

Levels are ordered by severity up to FATAL. DEBUG sits after FATAL in the
enum because its value doubles as an index into the color tables, not
because it is more severe. Aliases share a value with their canonical
level and render under the canonical name:

    INFO (LOG)   WARN (ALERT)   ERROR (SEVERE)   FATAL   DEBUG
       0             1               2             3       4
"""

from enum import IntEnum


class Level(IntEnum):
    INFO = 0
    LOG = 0
    WARN = 1
    ALERT = 1
    ERROR = 2
    SEVERE = 2
    FATAL = 3
    DEBUG = 4

    @classmethod
    def coerce(cls, value) -> "Level":
        """Turn an int, Level or case-insensitive name into a Level.

        Raises:
            ValueError: for unknown names or out-of-range values.
        """
        if isinstance(value, Level):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}") from None


# Levels that go to stderr on the terminal
STDERR_LEVELS = {Level.WARN, Level.ERROR, Level.FATAL}
