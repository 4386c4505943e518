"""
Argbind faults (parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parse
  error, grouped by domain (tokens, values, cardinality, registration).
- ArgumentException: base type that carries message + options and knows how
  to render itself, either as a single diagnostic line or as a fancy panel.
- trigger(): central entry point to surface a fault (respecting exit/fancy/colorful).

UX goals
- Every message names the offending argument and, where one exists, quotes the
  literal offending token.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The parsing engine raises these faults while consuming tokens, catches the
  first one and calls trigger(fault, **ctx). Rendering goes to stderr; the
  process exits with status 1 unless the caller asked for exit=False.
- DuplicateNameError is a registration (programmer) error: it is raised, never
  triggered.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True, highlight=False)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - tokens (1120x): UNRECOGNIZED_ARGUMENT, MISSING_VALUE
    - values (1121x): MALFORMED_VALUE, OUT_OF_RANGE
    - cardinality (1122x): ARITY_VIOLATION, MISSING_REQUIRED
    - registration (1130x): DUPLICATE_NAME
    """
    # --- token errors ---
    UNRECOGNIZED_ARGUMENT = 11201
    MISSING_VALUE         = 11202

    # --- value errors ---
    MALFORMED_VALUE       = 11211
    OUT_OF_RANGE          = 11212

    # --- cardinality errors ---
    ARITY_VIOLATION       = 11221
    MISSING_REQUIRED      = 11222

    # --- registration errors ---
    DUPLICATE_NAME        = 11301

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ArgumentException(Exception):
    """
    base fault: a message plus read-only options.

    recognized options
    - prog: program name shown in front of the message (__main__.__prog__ wins).
    - argument: display name of the argument that demanded the value.
    - token: literal offending token, when there is one.
    - exit: when true (default), __trigger__ terminates the process with status 1.
    - fancy / colorful: rendering switches.
    """
    __code__ = Unset
    __title__ = "error"
    __hint__ = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.__code__

    @property
    def argument(self):
        return self.options.get("argument")

    @property
    def token(self):
        return self.options.get("token")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), styler("prog-name"))
        message = text(self.message, styler("error-message"))

        if not self.options.get("fancy", False):
            if not prog:
                return message
            return Text.assemble(prog, ": ", message)

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize() if self.code else "", styler("code")),
            " | ",
            text(self.__title__.title(), styler("error-title")),
            " ]"
        )
        body = [message]
        if hint := self.options.get("hint", self.__hint__):
            body.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
        return Panel(Group(*body), title=header, title_align="left")

    def __trigger__(self):
        console.print(self, soft_wrap=True)
        if self.options.get("exit", True):
            sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnrecognizedArgumentError(ArgumentException):
    __code__ = FaultCode.UNRECOGNIZED_ARGUMENT
    __title__ = "unrecognized argument"
    __hint__ = "run with -h to list the accepted arguments"


class MissingValueError(ArgumentException):
    __code__ = FaultCode.MISSING_VALUE
    __title__ = "missing value"
    __hint__ = "the argument expects a value right after it"


class MalformedValueError(ArgumentException):
    __code__ = FaultCode.MALFORMED_VALUE
    __title__ = "malformed value"


class OutOfRangeError(ArgumentException):
    __code__ = FaultCode.OUT_OF_RANGE
    __title__ = "value out of range"


class ArityViolationError(ArgumentException):
    __code__ = FaultCode.ARITY_VIOLATION
    __title__ = "wrong number of values"


class MissingRequiredError(ArgumentException):
    __code__ = FaultCode.MISSING_REQUIRED
    __title__ = "missing required arguments"


class DuplicateNameError(ArgumentException, ValueError):
    __code__ = FaultCode.DUPLICATE_NAME
    __title__ = "duplicate name"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ArgumentException).
    - options are merged into the fault via copy.replace before triggering.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "ArgumentException",
    "UnrecognizedArgumentError",
    "MissingValueError",
    "MalformedValueError",
    "OutOfRangeError",
    "ArityViolationError",
    "MissingRequiredError",
    "DuplicateNameError",
    "FaultCode",
    "trigger",
)
