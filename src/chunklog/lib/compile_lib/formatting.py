"""
printf-style argument substitution for log messages.

    %s  str()            %d  number            %i  integer
    %f  float            %j  JSON              %o / %O  pprint
    %c  consumed, prints nothing               %%  literal percent

Arguments left over after the placeholders are appended separated by
spaces when they are scalars. Leftover containers and objects are handed
back to the caller, which compiles them as sublines of their own.
"""

import json
import pprint
import re
from typing import Any, List, Sequence, Tuple

_PLACEHOLDER_RE = re.compile(r'%[sdifjoOc%]')

SCALAR_TYPES = (str, int, float, bool, bytes)


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, SCALAR_TYPES)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _as_number(value: Any) -> str:
    if _is_int(value):
        return str(value)
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 'NaN'
    if number.is_integer():
        return str(int(number))
    return str(number)


def _as_integer(value: Any) -> str:
    if _is_int(value):
        return str(value)
    try:
        return str(int(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 'NaN'


def _as_float(value: Any) -> str:
    try:
        return str(float(value))
    except OverflowError:
        return 'inf' if value > 0 else '-inf'
    except (TypeError, ValueError):
        return 'NaN'


def _as_json(value: Any) -> str:
    try:
        return json.dumps(value, default=repr)
    except ValueError:
        # json refuses self-referencing containers
        return '[Circular]'


_CONVERTERS = {
    's': str,
    'd': _as_number,
    'i': _as_integer,
    'f': _as_float,
    'j': _as_json,
    'o': pprint.pformat,
    'O': pprint.pformat,
    'c': lambda value: '',
}


def format_args(template: str, args: Sequence[Any]) -> Tuple[str, List[Any]]:
    """Substitute ``args`` into ``template``.

    Args:
        template: Text possibly containing placeholders
        args: Positional arguments of the log call

    Returns:
        (text, leftovers) where leftovers are the unconsumed non-scalar
        arguments, in call order.
    """
    if not args:
        return template, []
    args = list(args)
    consumed = 0

    def substitute(match):
        nonlocal consumed
        spec = match.group(0)
        if spec == '%%':
            return '%'
        if consumed >= len(args):
            return spec
        value = args[consumed]
        consumed += 1
        return _CONVERTERS[spec[1]](value)

    text = _PLACEHOLDER_RE.sub(substitute, template)
    leftovers = []
    for value in args[consumed:]:
        if is_scalar(value):
            text += ' ' + str(value)
        else:
            leftovers.append(value)
    return text, leftovers
