"""
Heuristic primitive colorizer.

Splits rendered text into words and delimiter runs and guesses a color for
each word: null, undefined, booleans, quoted strings, numbers, recursion
markers and level keywords. It is a classifier, not a parser; a word that
merely contains "error" is colored as an error, and that is accepted.
"""

import math
import re
from dataclasses import dataclass
from typing import List, Optional

from .defaults import Defaults
from .levels import Level

# Space, comma, colon, angle brackets, then the set that needs escaping
DELIMITERS = ' ,:<>' + '*()[]'
_SPLIT_RE = re.compile('([' + re.escape(DELIMITERS) + ']+)')

# pprint marks self-referencing containers as "<Recursion on dict with id=...>"
CIRCULAR_MARKER = 'Recursion'

_NULL_WORDS = {'null', 'None'}
_BOOLEAN_WORDS = {'true', 'false', 'True', 'False'}
_QUOTES = ('"', "'", '`')

_LEVEL_KEYWORDS = (
    ('info', Level.INFO),
    ('warn', Level.WARN),
    ('error', Level.ERROR),
    ('debug', Level.DEBUG),
)


@dataclass
class ColorizedToken:
    text: str
    color: Optional[str] = None


def is_number(word: str) -> bool:
    """True if ``word`` reads as a finite number (``1.5``, ``-3``, ``0x1f``)."""
    try:
        return math.isfinite(float(word))
    except ValueError:
        pass
    try:
        int(word, 0)
    except ValueError:
        return False
    return True


def is_quoted(word: str) -> bool:
    return len(word) >= 2 and word[0] in _QUOTES and word[-1] == word[0]


def classify(word: str, defaults: Defaults) -> Optional[str]:
    """Return the color for one word, or None when nothing matches.

    Rules are checked in priority order and the first match wins.
    """
    colors = defaults.primitive_colors
    if word in _NULL_WORDS:
        return colors.null
    if word == 'undefined':
        return colors.undefined
    if word in _BOOLEAN_WORDS:
        return colors.boolean
    if is_quoted(word):
        return colors.string
    if is_number(word):
        return colors.number
    if CIRCULAR_MARKER in word:
        return colors.circular
    lowered = word.lower()
    for keyword, level in _LEVEL_KEYWORDS:
        if keyword in lowered:
            return defaults.main_color(level)
    return None


def tokenize(text: str) -> List[str]:
    """Split into words and delimiter runs, keeping both, dropping empties."""
    return [piece for piece in _SPLIT_RE.split(text) if piece]


def colorize(text: str, defaults: Defaults) -> List[ColorizedToken]:
    """Tokenize ``text`` and attach a color to each recognized word.

    Delimiter runs come back as their own uncolored tokens, so joining the
    token texts gives back ``text``.
    """
    tokens = []
    for piece in tokenize(text):
        if _SPLIT_RE.fullmatch(piece):
            tokens.append(ColorizedToken(piece))
        else:
            tokens.append(ColorizedToken(piece, classify(piece, defaults)))
    return tokens
