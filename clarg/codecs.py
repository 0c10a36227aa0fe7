"""
Value codecs: text to typed value conversion.

Every codec is a plain callable taking the raw value string and returning the
typed value, or raising when the string does not convert. Codecs know nothing
about flags; the option descriptor turns a raised error into a recorded
InvalidValueString (see clarg.options).

Numeric conversions are strict on purpose: integers are ASCII digits with an
optional sign, floating values accept decimal/exponent notation (with an
optional f/d suffix) and the NaN/Infinity spellings. Underscore digit grouping
and embedded whitespace are rejected.
"""
import builtins
import math
import os
import re

from .faults import ConstructionError
from .utils import rename

_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOATING = re.compile(r"[+-]?(?:NaN|Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?[fFdD]?)")

# Largest finite single-precision value.
_FLT_MAX = 3.4028234663852886e+38


class NumberFormatError(ValueError):
    """
    raised when a string is not a number of the requested shape or range.
    """


def _integer(raw, bits, /):
    if not isinstance(raw, str):
        raise TypeError("codec argument must be a string")
    if not _INTEGER.fullmatch(raw):
        raise NumberFormatError("for input string: %r" % raw)
    value = builtins.int(raw)
    if not -(1 << bits - 1) <= value < (1 << bits - 1):
        raise NumberFormatError("value out of range. value: %r, bits: %d" % (raw, bits))
    return value


def _floating(raw, /):
    if not isinstance(raw, str):
        raise TypeError("codec argument must be a string")
    if not _FLOATING.fullmatch(stripped := raw.strip()):
        raise NumberFormatError("for input string: %r" % raw)
    return builtins.float(stripped.rstrip("fFdD"))


def to_string(raw, /):
    if not isinstance(raw, str):
        raise TypeError("codec argument must be a string")
    return raw


def to_char(raw, /):
    """
    first character of the string; the empty string raises IndexError.
    """
    if not isinstance(raw, str):
        raise TypeError("codec argument must be a string")
    return raw[0]


def to_byte(raw, /):
    return _integer(raw, 8)


def to_int(raw, /):
    return _integer(raw, 32)


def to_long(raw, /):
    return _integer(raw, 64)


def to_float(raw, /):
    """
    single-precision range checked; the result is a Python float.
    """
    value = _floating(raw)
    if math.isfinite(value) and abs(value) > _FLT_MAX:
        raise NumberFormatError("value out of range for a float: %r" % raw)
    return value


def to_double(raw, /):
    return _floating(raw)


def to_socket(raw, /):
    """
    "host:port" to a (host, port) pair; the port goes through to_int().
    """
    if not isinstance(raw, str):
        raise TypeError("codec argument must be a string")
    match raw.split(":"):
        case [host, port]:
            try:
                return host, to_int(port)
            except NumberFormatError as error:
                raise NumberFormatError("port %r is not an int" % port) from error
        case _:
            raise ValueError("expected 'host:port', got %r" % raw)


def path_separator():
    """
    the host platform's search-path separator (":" on POSIX, ";" on Windows).
    """
    return os.pathsep


def _split(pattern, raw, /):
    # Capture groups in the delimiter never leak into the result, and trailing
    # empty elements are dropped.
    elements, start = [], 0
    for match in pattern.finditer(raw):
        if match.end() == match.start():
            continue
        elements.append(raw[start:match.start()])
        start = match.end()
    elements.append(raw[start:])
    while len(elements) > 1 and not elements[-1]:
        elements.pop()
    if elements == [""] and start:
        return []
    return elements


def sequence(delimiter, element=to_string, /):
    """
    Build a codec that splits on a delimiter regular expression and converts
    each element with the element codec.

    - the delimiter is compiled once, here; an empty or invalid pattern raises
      ConstructionError.
    - elements are converted left to right; the first failing element's error
      propagates unchanged.
    - the result is a tuple.

    Example
    - sequence(r"[-|]", to_int)("1-2|3") -> (1, 2, 3)
    """
    if not isinstance(delimiter, str):
        raise TypeError("sequence() delimiter must be a string")
    elif not delimiter:
        raise ConstructionError("sequence() delimiter cannot be empty")
    if not builtins.callable(element):
        raise TypeError("sequence() element codec must be callable")
    try:
        pattern = re.compile(delimiter)
    except re.error as error:
        raise ConstructionError("sequence() delimiter %r is not a valid regular expression: %s" % (delimiter, error)) from None

    def codec(raw, /):
        if not isinstance(raw, str):
            raise TypeError("codec argument must be a string")
        return tuple(map(element, _split(pattern, raw)))

    codec.delimiter = delimiter
    codec.element = element
    return rename(codec, "sequence")


def path():
    """
    sequence of strings split on the platform path separator.
    """
    return sequence(re.escape(path_separator()), to_string)


__all__ = (
    # Errors
    "NumberFormatError",

    # Codecs
    "to_string",
    "to_char",
    "to_byte",
    "to_int",
    "to_long",
    "to_float",
    "to_double",
    "to_socket",

    # Codec builders
    "sequence",
    "path",
    "path_separator",
)
