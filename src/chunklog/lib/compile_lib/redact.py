"""
Pattern-based redaction.

Patterns are applied in order to the progressively modified text. The
placeholder itself is never matched again, so redacting twice gives the
same result as redacting once.
"""

import re
from typing import Iterable, List, Pattern, Sequence, Tuple

REDACTION_TEXT = '[REDACTED]'

# (text, protected) pieces; protected pieces are placeholders
_Segment = Tuple[str, bool]


def compile_patterns(patterns: Iterable) -> List[Pattern]:
    """Compile redaction patterns case-insensitively.

    Already-compiled patterns are recompiled with IGNORECASE added.

    Raises:
        re.error: for invalid patterns.
    """
    compiled = []
    for pattern in patterns or ():
        if isinstance(pattern, re.Pattern):
            compiled.append(re.compile(pattern.pattern, pattern.flags | re.IGNORECASE))
        else:
            compiled.append(re.compile(pattern, re.IGNORECASE))
    return compiled


def _split_protected(text: str, placeholder: str) -> List[_Segment]:
    if not placeholder:
        return [(text, False)]
    segments = []
    for index, piece in enumerate(text.split(placeholder)):
        if index:
            segments.append((placeholder, True))
        if piece:
            segments.append((piece, False))
    return segments


def _redact_segment(text: str, regex: Pattern, placeholder: str) -> List[_Segment]:
    """Replace every non-empty match in one unprotected segment.

    ``cursor`` is the offset in ``text`` up to which pieces were emitted;
    match positions always refer to the unmodified segment.
    """
    pieces = []
    cursor = 0
    for match in regex.finditer(text):
        start, end = match.span()
        if start == end:
            continue
        if start > cursor:
            pieces.append((text[cursor:start], False))
        pieces.append((placeholder, True))
        cursor = end
    if not pieces:
        return [(text, False)]
    if cursor < len(text):
        pieces.append((text[cursor:], False))
    return pieces


def redact(text: str, patterns: Sequence, placeholder: str = REDACTION_TEXT) -> str:
    """Replace every match of every pattern in ``text`` with ``placeholder``.

    Args:
        text: Text to redact
        patterns: Pattern strings or compiled patterns
        placeholder: Replacement text

    Returns:
        The redacted text (``text`` unchanged when there are no patterns).
    """
    if not patterns or not text:
        return text
    compiled = compile_patterns(patterns)

    segments = _split_protected(text, placeholder)
    changed = True
    while changed:
        changed = False
        for regex in compiled:
            next_segments: List[_Segment] = []
            for segment, protected in segments:
                if protected:
                    next_segments.append((segment, protected))
                    continue
                pieces = _redact_segment(segment, regex, placeholder)
                if len(pieces) > 1 or pieces[0][1]:
                    changed = True
                next_segments.extend(pieces)
            segments = next_segments
    return ''.join(segment for segment, _ in segments)
