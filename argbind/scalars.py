"""
Scalar conversions: turn one raw token into a typed value.

Kinds
- INT: base-10, 32-bit signed range. The whole token must be an optional
  minus sign followed by ASCII digits.
- FLOAT: decimal/exponent syntax, rounded to single precision.
- DOUBLE: decimal/exponent syntax, double precision.
- TEXT: the token verbatim.
- BOOL: never converts a token; boolean destinations toggle instead.

Every conversion either returns the value or raises MalformedValueError /
OutOfRangeError carrying the demanding argument's display name and the raw
token. A token that is not entirely a number is malformed, so a parsed 0.0
always means the user really wrote a zero.
"""
import math
import re
import struct
from enum import Enum

from .faults import MalformedValueError, OutOfRangeError
from .utils import Unset, coalesce

INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

_INTEGER = re.compile(r"-?[0-9]+", re.ASCII)
_REAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)


def _subject(name):
    return f"\"{name}\" " if name else ""


def _malformed(token, name, label):
    return MalformedValueError(
        f"{_subject(name)}expected a string representing {"an" if label == "int" else "a"} "
        f"{label} but instead found \"{token}\"",
        argument=name,
        token=token,
    )


def _out_of_range(token, name, label):
    return OutOfRangeError(
        f"{_subject(name)}{label} value \"{token}\" out of range",
        argument=name,
        token=token,
    )


def parse_int(token, /, name=Unset):
    """Convert a token to a 32-bit signed integer."""
    name = coalesce(name, "")
    if not _INTEGER.fullmatch(token):
        raise _malformed(token, name, "int")
    # digit count first: int() refuses overlong strings
    digits = token.removeprefix("-").lstrip("0") or "0"
    if len(digits) <= len(str(INT_MAX)):
        value = -int(digits) if token.startswith("-") else int(digits)
        if INT_MIN <= value <= INT_MAX:
            return value
    raise OutOfRangeError(
        f"{_subject(name)}int value \"{token}\" out of range [{INT_MIN}, {INT_MAX}]",
        argument=name,
        token=token,
    )


def _parse_real(token, name, label):
    if not _REAL.fullmatch(token):
        raise _malformed(token, name, label)
    value = float(token)
    if math.isinf(value):
        raise _out_of_range(token, name, label)
    return value


def parse_float(token, /, name=Unset):
    """Convert a token to a single-precision real (returned as a Python float)."""
    name = coalesce(name, "")
    value = _parse_real(token, name, "float")
    # rounding past FLT_MAX yields inf rather than raising
    try:
        value = struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        raise _out_of_range(token, name, "float") from None
    if math.isinf(value):
        raise _out_of_range(token, name, "float")
    return value


def parse_double(token, /, name=Unset):
    """Convert a token to a double-precision real."""
    return _parse_real(token, coalesce(name, ""), "double")


def parse_text(token, /, name=Unset):
    """Return the token verbatim."""
    return token


class Kind(Enum):
    """
    Closed set of scalar kinds a destination element can have.

    Each kind knows its help label, how to convert a token and how to render
    a value back into text that the same conversion accepts.
    """
    INT = "int"
    FLOAT = "float"
    DOUBLE = "double"
    TEXT = "string"
    BOOL = "bool"

    @property
    def label(self):
        return self.value

    def parse(self, token, /, name=Unset):
        match self:
            case Kind.INT:
                return parse_int(token, name)
            case Kind.FLOAT:
                return parse_float(token, name)
            case Kind.DOUBLE:
                return parse_double(token, name)
            case Kind.TEXT:
                return parse_text(token, name)
            case Kind.BOOL:
                raise TypeError("bool values are toggled, not parsed")

    def render(self, value, /):
        match self:
            case Kind.INT:
                return str(int(value))
            case Kind.FLOAT:
                return format(float(value), ".7g")
            case Kind.DOUBLE:
                return repr(float(value))
            case Kind.TEXT:
                return str(value)
            case Kind.BOOL:
                return "true" if value else "false"

    @classmethod
    def infer(cls, annotation, /):
        """Map a Python type to a kind; None when there is no scalar mapping."""
        # bool first: it is an int subclass
        for candidate, kind in ((bool, cls.BOOL), (int, cls.INT), (float, cls.DOUBLE), (str, cls.TEXT)):
            if annotation is candidate:
                return kind
        return None


__all__ = (
    "Kind",
    "INT_MIN",
    "INT_MAX",
    "parse_int",
    "parse_float",
    "parse_double",
    "parse_text",
)
