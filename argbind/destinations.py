"""
Argbind destinations: where parsed values are written.

Accessors
- Cell(value): caller-owned storage. The parser reads and writes cell.value and
  ignores the output aggregate entirely.
- Field(name): an attribute of the output aggregate (getattr/setattr).

Destinations (closed set, the kind never changes once built)
- Scalar(kind, accessor): one value; BOOL scalars toggle instead of parsing.
- FixedArray(kind, size, accessor): exactly `size` values (1..10); elements
  are written one by one so a failure leaves the earlier ones in place.
- Sequence(kind, accessor, minimum=0, maximum=None): a growable list with an
  inclusive arity window; maximum=None means unbounded.
- Composite(kinds, constructor, accessor): one value built by calling
  constructor(*values) on consecutive tokens.

Shorthand
- resolve(target, prototype) turns a Cell or a field name into a destination
  by looking at the aggregate's type hints (falling back to the default value):
    bool/int/float/str -> Scalar       list[X] -> Sequence
    tuple[X, X, X]     -> FixedArray   dataclass -> Composite
  float maps to DOUBLE; pass kind=Kind.FLOAT for single precision.
"""
import collections.abc
import dataclasses
import typing

from .scalars import Kind
from .utils import IntrospectiveType, Unset, coalesce

ARRAY_MIN_SIZE = 1
ARRAY_MAX_SIZE = 10


class Accessor(metaclass=IntrospectiveType):
    """Read/write capability shared by every destination."""

    def read(self, aggregate, /):
        raise NotImplementedError

    def write(self, aggregate, value, /):
        raise NotImplementedError


class Cell(Accessor):
    """
    Standalone storage owned by the caller.

    Example
        count = Cell(1)
        commandline.add_optional("count", count)
        commandline.parse(["prog", "-count", "3"])
        count.value  # 3
    """
    __displayable__ = ("value",)

    def __init__(self, value=None, /):
        self.value = value

    def read(self, aggregate, /):
        return self.value

    def write(self, aggregate, value, /):
        self.value = value


class Field(Accessor):
    """Named attribute of the output aggregate."""
    __introspectable__ = ("name",)

    def __init__(self, name, /):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not name.isidentifier():
            raise ValueError(f"{type(self).__typename__} 'name' must be an identifier, got {name!r}")
        self._name = name

    def read(self, aggregate, /):
        return getattr(aggregate, self._name)

    def write(self, aggregate, value, /):
        setattr(aggregate, self._name, value)


def _sanitize_accessor(cls, accessor, /):
    if isinstance(accessor, str):
        return Field(accessor)
    if not isinstance(accessor, Accessor):
        raise TypeError(f"{cls.__typename__} 'accessor' must be a cell, a field or a field name")
    return accessor


def _sanitize_kind(cls, kind, /, element=True):
    if not isinstance(kind, Kind):
        raise TypeError(f"{cls.__typename__} 'kind' must be a Kind")
    if element and kind is Kind.BOOL:
        raise TypeError(f"{cls.__typename__} elements cannot be bool")
    return kind


class Destination(metaclass=IntrospectiveType):
    """
    Base of the destination variants.

    Subclasses expose `signature` (the usage suffix, e.g. "<int[3]>") and
    render(aggregate) (the default text shown in help).
    """
    __introspectable__ = ("accessor",)

    def read(self, aggregate, /):
        return self._accessor.read(aggregate)

    def write(self, aggregate, value, /):
        self._accessor.write(aggregate, value)

    @property
    def signature(self):
        raise NotImplementedError

    def render(self, aggregate, /):
        raise NotImplementedError


class Scalar(Destination):
    __introspectable__ = ("kind", "accessor")
    __match_args__ = ("kind", "accessor")

    def __init__(self, kind, accessor, /):
        self._kind = _sanitize_kind(type(self), kind, element=False)
        self._accessor = _sanitize_accessor(type(self), accessor)

    @property
    def signature(self):
        return "" if self._kind is Kind.BOOL else f"<{self._kind.label}>"

    def render(self, aggregate, /):
        if (value := self.read(aggregate)) is None:
            return ""
        return self._kind.render(value)


class FixedArray(Destination):
    __introspectable__ = ("kind", "size", "accessor")
    __match_args__ = ("kind", "size", "accessor")

    def __init__(self, kind, size, accessor, /):
        cls = type(self)
        self._kind = _sanitize_kind(cls, kind)
        if not isinstance(size, int) or isinstance(size, bool):
            raise TypeError(f"{cls.__typename__} 'size' must be an integer")
        elif not ARRAY_MIN_SIZE <= size <= ARRAY_MAX_SIZE:
            raise ValueError(
                f"{cls.__typename__} 'size' must be between {ARRAY_MIN_SIZE} and {ARRAY_MAX_SIZE}, got {size}"
            )
        self._size = size
        self._accessor = _sanitize_accessor(cls, accessor)

    def write_item(self, aggregate, index, value, /):
        """Write one element, keeping the container type (tuple or list) of the current value."""
        current = self.read(aggregate)
        items = list(current or ())
        items.extend([None] * (self._size - len(items)))
        items[index] = value
        self.write(aggregate, tuple(items) if isinstance(current, tuple) else items)

    @property
    def signature(self):
        return f"<{self._kind.label}[{self._size}]>"

    def render(self, aggregate, /):
        return " ".join(self._kind.render(item) for item in (self.read(aggregate) or ()) if item is not None)


class Sequence(Destination):
    __introspectable__ = ("kind", "minimum", "maximum", "accessor")
    __match_args__ = ("kind", "accessor", "minimum", "maximum")

    def __init__(self, kind, accessor, /, minimum=0, maximum=None):
        cls = type(self)
        self._kind = _sanitize_kind(cls, kind)
        self._accessor = _sanitize_accessor(cls, accessor)
        if not isinstance(minimum, int) or isinstance(minimum, bool):
            raise TypeError(f"{cls.__typename__} 'minimum' must be an integer")
        elif minimum < 0:
            raise ValueError(f"{cls.__typename__} 'minimum' cannot be negative")
        if maximum is not None:
            if not isinstance(maximum, int) or isinstance(maximum, bool):
                raise TypeError(f"{cls.__typename__} 'maximum' must be an integer or None")
            elif maximum < max(minimum, 1):
                raise ValueError(
                    f"{cls.__typename__} 'maximum' must be at least {max(minimum, 1)}, got {maximum}"
                )
        self._minimum = minimum
        self._maximum = maximum

    def clear(self, aggregate, /):
        self.write(aggregate, [])

    def append(self, aggregate, value, /):
        current = self.read(aggregate)
        if not isinstance(current, list):
            current = list(current or ())
            self.write(aggregate, current)
        current.append(value)

    def size(self, aggregate, /):
        return len(self.read(aggregate) or ())

    def accepts(self, count, /):
        return self._minimum <= count and (self._maximum is None or count <= self._maximum)

    @property
    def bounds(self):
        return f"[{self._minimum},{"..." if self._maximum is None else self._maximum}]"

    @property
    def signature(self):
        return f"<{self._kind.label}{self.bounds}>"

    def render(self, aggregate, /):
        return " ".join(map(self._kind.render, self.read(aggregate) or ()))


class Composite(Destination):
    __introspectable__ = ("kinds", "constructor", "accessor")
    __match_args__ = ("kinds", "constructor", "accessor")

    def __init__(self, kinds, constructor, accessor, /):
        cls = type(self)
        if isinstance(kinds, Kind) or not isinstance(kinds, collections.abc.Iterable):
            raise TypeError(f"{cls.__typename__} 'kinds' must be an iterable of kinds")
        self._kinds = tuple(_sanitize_kind(cls, kind) for kind in kinds)
        if not self._kinds:
            raise ValueError(f"{cls.__typename__} 'kinds' cannot be empty")
        if not callable(constructor):
            raise TypeError(f"{cls.__typename__} 'constructor' must be callable")
        self._constructor = constructor
        self._accessor = _sanitize_accessor(cls, accessor)

    def construct(self, aggregate, values, /):
        self.write(aggregate, self._constructor(*values))

    @property
    def signature(self):
        return f"<{",".join(kind.label for kind in self._kinds)}>"

    def render(self, aggregate, /):
        match value := self.read(aggregate):
            case None:
                return ""
            case tuple() | list():
                parts = value
            case _ if dataclasses.is_dataclass(value):
                parts = [getattr(value, field.name) for field in dataclasses.fields(value) if field.init]
            case _:
                return str(value)
        if len(parts) != len(self._kinds):
            return str(value)
        return " ".join(kind.render(part) for kind, part in zip(self._kinds, parts))


def _hints(cls, /):
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {}


def _element(annotation, /):
    if (kind := Kind.infer(annotation)) is None or kind is Kind.BOOL:
        raise TypeError(f"unsupported element type {annotation!r}")
    return kind


def _narrow(inferred, kind, /):
    if kind is Unset or kind is inferred:
        return inferred
    if not isinstance(kind, Kind):
        raise TypeError("resolve() 'kind' must be a Kind")
    if {inferred, kind} <= {Kind.FLOAT, Kind.DOUBLE}:
        return kind
    raise TypeError(f"cannot bind a {inferred.label} value as {kind.label}")


def resolve(target, prototype, /, kind=Unset, minimum=Unset, maximum=Unset):
    """
    Build a destination from shorthand.

    Parameters
    - target: a Destination (returned untouched), a Cell, a Field or a field name.
    - prototype: a default-constructed aggregate used to validate field names
      and to infer types from default values.
    - kind: override the inferred element kind (only FLOAT <-> DOUBLE).
    - minimum / maximum: sequence bounds (only valid for list destinations).
    """
    if isinstance(target, Destination):
        if kind is not Unset or minimum is not Unset or maximum is not Unset:
            raise TypeError("resolve() options cannot be combined with an explicit destination")
        return target

    if isinstance(target, Cell):
        accessor, annotation, value = target, Unset, target.value
    elif isinstance(target, str | Field):
        accessor = Field(target) if isinstance(target, str) else target
        try:
            value = accessor.read(prototype)
        except AttributeError:
            raise ValueError(f"{type(prototype).__name__!r} aggregate has no field {accessor.name!r}") from None
        annotation = _hints(type(prototype)).get(accessor.name, Unset)
    else:
        raise TypeError("destination must be a Destination, a Cell or a field name")

    if annotation is Unset:
        match value:
            case bool() | int() | float() | str():
                annotation = type(value)
            case list() if value:
                annotation = list[type(value[0])]
            case tuple() if value:
                annotation = tuple[*map(type, value)]
            case _ if dataclasses.is_dataclass(value):
                annotation = type(value)
            case _:
                raise TypeError(f"cannot infer a destination from {value!r}; annotate the field or pass a Destination")

    origin, args = typing.get_origin(annotation), typing.get_args(annotation)
    bounded = minimum is not Unset or maximum is not Unset

    if (scalar := Kind.infer(annotation)) is not None:
        destination = Scalar(_narrow(scalar, kind), accessor)
    elif origin is list and len(args) == 1:
        return Sequence(_narrow(_element(args[0]), kind), accessor, coalesce(minimum, 0), coalesce(maximum))
    elif origin is tuple and args and Ellipsis not in args:
        if len(set(args)) != 1:
            raise TypeError(f"fixed arrays must be homogeneous, got {annotation!r}")
        destination = FixedArray(_narrow(_element(args[0]), kind), len(args), accessor)
    elif isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        hints = _hints(annotation)
        kinds = [_element(hints.get(field.name, field.type)) for field in dataclasses.fields(annotation) if field.init]
        destination = Composite(kinds, annotation, accessor)
    else:
        raise TypeError(f"cannot bind a destination of type {annotation!r}")

    if bounded:
        raise TypeError(f"only sequences accept 'minimum'/'maximum', got a {type(destination).__typename__}")
    return destination


__all__ = (
    "Accessor",
    "Cell",
    "Field",
    "Destination",
    "Scalar",
    "FixedArray",
    "Sequence",
    "Composite",
    "resolve",
    "ARRAY_MIN_SIZE",
    "ARRAY_MAX_SIZE",
)
