"""
Argbind arguments: descriptors and the registry that owns them.

Overview
- ParseFlags: one IntFlag shared by parse calls and individual arguments.
  • parse-wide: NO_EXIT_ON_ERROR, SKIP_UNRECOGNIZED, NO_AUTO_HELP.
  • both: NO_DEFAULT (hide "(Default: ...)" in help), REQUIRED.
- Argument: one registered descriptor (name, destination, descr, flags,
  positional) plus the was_set marker maintained by the parsing engine.
- Registry: ordered optionals (looked up by name) and positionals (consumed in
  registration order).

Registration rules
- Optional names are non-empty; one leading "-" is accepted and stripped, so
  add_optional("count") and add_optional("-count") both match "-count".
- Registering the same optional name twice raises DuplicateNameError.
- Positionals cannot be bool: a positional always consumes a token.
- Argument flags are limited to NO_DEFAULT and REQUIRED.
"""
from enum import IntFlag

from .destinations import Field, Scalar
from .faults import DuplicateNameError
from .scalars import Kind
from .utils import IntrospectiveType, Unset, coalesce


class ParseFlags(IntFlag):
    NONE = 0
    NO_EXIT_ON_ERROR = 1
    SKIP_UNRECOGNIZED = 2
    NO_AUTO_HELP = 4
    NO_DEFAULT = 8
    REQUIRED = 16


ARGUMENT_FLAGS = ParseFlags.NO_DEFAULT | ParseFlags.REQUIRED


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate descr and flags shared by every argument.

    - descr: string, stripped; defaults to "".
    - flags: ParseFlags (or int) restricted to NO_DEFAULT | REQUIRED.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    metadata["descr"] = coalesce(descr, "").strip()

    if not isinstance(flags := metadata["flags"], int) or isinstance(flags, bool):
        raise TypeError(f"{cls.__typename__} 'flags' must be parse flags")
    if flags & ~int(ARGUMENT_FLAGS):
        raise ValueError(f"{cls.__typename__} 'flags' only accepts NO_DEFAULT and REQUIRED")
    metadata["flags"] = ParseFlags(flags)


class Argument(metaclass=IntrospectiveType):
    """
    A registered argument.

    Properties (read-only)
    - name: display name without the leading dash.
    - destination: the bound Destination.
    - descr: help text ("" when omitted).
    - flags: per-argument ParseFlags.
    - positional: True for positionals.
    - was_set: True once the current parse has written the destination.
    """
    __introspectable__ = ("name", "destination", "descr", "flags", "positional", "was_set")
    __displayable__ = ("name", "destination", "descr", "flags", "positional")

    def __init__(self, name, destination, /, descr=Unset, flags=ParseFlags.NONE, *, positional=False):
        metadata = {"descr": descr, "flags": flags}
        _sanitize_metadata(type(self), metadata)
        self._name = name
        self._destination = destination
        self._descr = metadata["descr"]
        self._flags = metadata["flags"]
        self._positional = positional
        self._was_set = False

    @property
    def display(self):
        """Name as shown in messages: "-count" for optionals, "message" for positionals."""
        return self._name if self._positional else f"-{self._name}"

    @property
    def fragment(self):
        """Usage fragment: display name followed by the destination signature."""
        return " ".join(filter(None, (self.display, self._destination.signature)))

    def required(self, flags=ParseFlags.NONE, /):
        return bool((self._flags | flags) & ParseFlags.REQUIRED)

    def defaulted(self, flags=ParseFlags.NONE, /):
        return not (self._flags | flags) & ParseFlags.NO_DEFAULT

    def mark(self, value=True, /):
        self._was_set = value


class Registry:
    """
    Ordered collection of optionals and positionals.

    - add_optional(name, destination, descr, flags) -> Argument
    - add_positional(destination, name, descr, flags) -> Argument
    - find(token) -> Argument | None
    - iteration yields optionals first, then positionals, each in registration order.
    """

    def __init__(self):
        self._optionals = {}
        self._positionals = []

    @property
    def optionals(self):
        return tuple(self._optionals.values())

    @property
    def positionals(self):
        return tuple(self._positionals)

    def add_optional(self, name, destination, /, descr=Unset, flags=ParseFlags.NONE):
        if not isinstance(name, str):
            raise TypeError("optional 'name' must be a string")
        elif not (name := name.removeprefix("-")) or name.isspace():
            raise ValueError("optional 'name' cannot be empty")
        elif any(character.isspace() for character in name):
            raise ValueError(f"optional 'name' cannot contain whitespace, got {name!r}")
        if name in self._optionals:
            raise DuplicateNameError(f"optional \"-{name}\" is already registered", argument=f"-{name}")
        self._optionals[name] = argument = Argument(name, destination, descr, flags)
        return argument

    def add_positional(self, destination, /, name=Unset, descr=Unset, flags=ParseFlags.NONE):
        if isinstance(destination, Scalar) and destination.kind is Kind.BOOL:
            raise TypeError("positional arguments cannot be bool")
        if name is Unset:
            accessor = destination.accessor
            name = accessor.name if isinstance(accessor, Field) else f"arg{len(self._positionals)}"
        elif not isinstance(name, str):
            raise TypeError("positional 'name' must be a string")
        elif not name.strip():
            raise ValueError("positional 'name' cannot be empty")
        self._positionals.append(argument := Argument(name, destination, descr, flags, positional=True))
        return argument

    def find(self, token, /):
        """Optional whose name equals the token minus its leading dash, or None."""
        if not token.startswith("-"):
            return None
        return self._optionals.get(token[1:])

    def reset(self):
        for argument in self:
            argument.mark(False)

    def __iter__(self):
        yield from self._optionals.values()
        yield from self._positionals

    def __len__(self):
        return len(self._optionals) + len(self._positionals)


__all__ = (
    "ParseFlags",
    "Argument",
    "Registry",
)
