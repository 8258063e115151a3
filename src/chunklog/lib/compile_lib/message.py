"""
CompiledMessage: the unit handed from the Logger to every engine.

Built fresh per log call, consumed synchronously by all registered
engines, then dropped.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from .chunks import ContentChunk, Prefix
from .defaults import PresentationSettings
from .levels import Level


@dataclass
class CompiledMessage:
    """
    Attributes:
        chunks: Primary-line chunks, never empty
        sub_lines: Continuation chunks rendered below the primary line
        prefixes: Bracketed tags printed before the level
        timestamp: Time of the log call
        level: Severity level
        settings: Presentation settings at the time of the call
    """
    chunks: List[ContentChunk]
    sub_lines: List[ContentChunk] = field(default_factory=list)
    prefixes: List[Prefix] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)
    level: Level = Level.INFO
    settings: PresentationSettings = field(default_factory=PresentationSettings)

    def __post_init__(self):
        if not self.chunks:
            self.chunks = [ContentChunk('')]

    @property
    def defaults(self):
        return self.settings.defaults

    @property
    def text(self) -> str:
        """Primary line text without styling."""
        return ''.join(chunk.content for chunk in self.chunks)


def group_sub_lines(sub_lines: List[ContentChunk]) -> List[List[ContentChunk]]:
    """Group subline chunks into visual lines at ``breaks_line`` boundaries.

    A line is special (no continuation marker) when its first chunk is.
    """
    groups: List[List[ContentChunk]] = []
    for chunk in sub_lines:
        if not groups or chunk.breaks_line:
            groups.append([chunk])
        else:
            groups[-1].append(chunk)
    return groups
