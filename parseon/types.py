"""Runtime value helpers for Parseon.

Parseon has three value kinds and maps each onto a native Python type:

* Number  -> ``float``
* Text    -> ``str``
* Boolean -> ``bool``

Values are immutable, so binding one to a second name never aliases
anything observable. This module holds the predicates used by the
interpreter to check operand kinds and the rules for turning values into
output text and input text into values.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional
import math
import re


_NUMBER_INPUT = re.compile(r'[+-]?\d+(\.\d+)?')


def is_number(value: Any) -> bool:
    # bool is a subclass of int, never of float
    return isinstance(value, float)


def is_text(value: Any) -> bool:
    return isinstance(value, str)


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def type_name(value: Any) -> str:
    """Return the Parseon kind name of a runtime value."""
    if is_boolean(value):
        return 'boolean'
    if is_number(value):
        return 'number'
    if is_text(value):
        return 'text'
    return type(value).__name__


def same_kind(a: Any, b: Any) -> bool:
    return type_name(a) == type_name(b)


def format_number(value: float) -> str:
    """Render a Number the way ``say``/``show`` print it.

    Whole numbers drop the decimal point (``10`` rather than ``10.0``);
    anything else uses the shortest decimal expansion that round-trips,
    always written positionally (``0.00001`` rather than ``1e-05``).
    """
    if math.isnan(value) or math.isinf(value):
        return repr(value)
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if 'e' in text or 'E' in text:
        text = format(Decimal(text), 'f')
    return text


def to_string(value: Any) -> str:
    if is_boolean(value):
        return 'true' if value else 'false'
    if is_number(value):
        return format_number(value)
    return str(value)


def parse_input_value(text: str) -> Any:
    """Convert one line of input into a Number when it looks like one.

    Anything else is kept verbatim as Text.
    """
    number = parse_number(text.strip())
    if number is not None:
        return number
    return text


def parse_number(text: str) -> Optional[float]:
    if _NUMBER_INPUT.fullmatch(text):
        return float(text)
    return None
