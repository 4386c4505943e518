"""
Argbind command line: registration front-end and parsing engine.

Usage
    @dataclass
    class Args:
        count: int = 1
        verbose: bool = False
        message: str = "Hello"

    commandline = CommandLine("greet", "Print a message.", Args)
    commandline.add_optional("count", "count", "Number of repetitions")
    commandline.add_optional("verbose", "verbose", "Talk more")
    commandline.add_positional("message", descr="Message to print")
    args, ok = commandline.parse()

Parsing (one left-to-right pass over argv[1:])
- "-h", "-help", "--help" and "/?" print the help text to stdout and end the
  parse as a failure (unless NO_AUTO_HELP).
- A token naming a registered optional (with its single leading dash) selects
  that optional; otherwise the token becomes the value of the next positional;
  otherwise it is unrecognized (fatal, or skipped with SKIP_UNRECOGNIZED).
- bool scalars toggle, scalars take one token, fixed arrays exactly N,
  sequences take tokens greedily within their arity window and composites take
  one token per constructor argument.
- After the pass, required arguments that were never set are reported
  (positionals first, then optionals) below the help text.

Failures
- The first fault ends the parse. It is printed to stderr and the process
  exits with status 1, unless NO_EXIT_ON_ERROR is given, in which case
  parse() returns ParseOutcome(value, False) and the fault stays available as
  CommandLine.fault. Writes that happened before the fault are kept.
"""
import os
import sys
from collections import deque
from types import SimpleNamespace
from typing import NamedTuple

from .arguments import ParseFlags, Registry
from .destinations import Composite, FixedArray, Scalar, Sequence, resolve
from .faults import (
    ArgumentException,
    ArityViolationError,
    MissingRequiredError,
    MissingValueError,
    UnrecognizedArgumentError,
    trigger,
)
from .formatter import WIDTH, print_help, render_help
from .scalars import Kind
from .utils import Unset, coalesce, mirror

HELP_TOKENS = frozenset({"-h", "-help", "--help", "/?"})


class ParseOutcome(NamedTuple):
    value: object
    success: bool


class _HelpRequested(Exception):
    pass


class CommandLine:
    """
    Declarative command line bound to an output aggregate.

    Parameters
    - name: program name shown after "usage:"; when omitted, argv[0] is used.
    - descr: program description printed below the synopsis.
    - aggregate: zero-argument factory of the output aggregate (a dataclass
      type, typically). Defaults to SimpleNamespace, suitable for Cell-only
      command lines.
    - width: help wrapping width.
    - fancy / colorful: fault and help rendering switches.
    """
    name = mirror("name")
    descr = mirror("descr")
    aggregate = mirror("aggregate")
    registry = mirror("registry")
    fault = mirror("fault")

    def __init__(self, name=Unset, descr=Unset, /, aggregate=SimpleNamespace, *, width=WIDTH, fancy=False,
                 colorful=False):
        if not isinstance(name, str | Unset):
            raise TypeError("command-line 'name' must be a string")
        if not isinstance(descr, str | Unset):
            raise TypeError("command-line 'descr' must be a string")
        if not callable(aggregate):
            raise TypeError("command-line 'aggregate' must be callable")
        self._name = coalesce(name)
        self._descr = coalesce(descr, "").strip()
        self._aggregate = aggregate
        self._registry = Registry()
        self._fault = None
        self.width = width
        self.fancy = fancy
        self.colorful = colorful

    def __repr__(self):
        return f"command-line(name={self._name!r}, arguments={len(self._registry)})"

    def add_optional(self, name, destination, /, descr=Unset, flags=ParseFlags.NONE, **hints):
        """
        Register a named argument.

        `destination` is a Destination, a Cell or a field name of the aggregate;
        `hints` (kind, minimum, maximum) are forwarded to resolve().
        """
        return self._registry.add_optional(name, resolve(destination, self._aggregate(), **hints), descr, flags)

    def add_positional(self, destination, /, name=Unset, descr=Unset, flags=ParseFlags.NONE, **hints):
        """Register a positional argument; positionals are filled in registration order."""
        return self._registry.add_positional(resolve(destination, self._aggregate(), **hints), name, descr, flags)

    def format_help(self, flags=ParseFlags.NONE, prog=Unset):
        """Help text as a rich Text, rendered against a fresh default aggregate."""
        return render_help(self, self._aggregate(), ParseFlags(flags), prog).text

    def print_help(self, flags=ParseFlags.NONE, prog=Unset):
        print_help(self, self._aggregate(), ParseFlags(flags), prog)

    def parse(self, argv=Unset, flags=ParseFlags.NONE):
        """
        Parse `argv` (defaults to sys.argv; argv[0] is the program name).

        Returns ParseOutcome(value, success); exits with status 1 on help or
        failure unless NO_EXIT_ON_ERROR is set.
        """
        flags = ParseFlags(flags)
        argv = list(coalesce(argv, sys.argv))
        prog = self._name or (os.path.basename(argv[0]) if argv else "")
        value = self._aggregate()
        self._fault = None
        self._registry.reset()

        try:
            self._consume(value, deque(argv[1:]), flags, prog)
            self._sweep(flags, prog)
        except _HelpRequested:
            if not flags & ParseFlags.NO_EXIT_ON_ERROR:
                sys.exit(1)
            return ParseOutcome(value, False)
        except ArgumentException as fault:
            self._fault = fault
            trigger(
                fault,
                prog=prog,
                exit=not flags & ParseFlags.NO_EXIT_ON_ERROR,
                fancy=self.fancy,
                colorful=self.colorful,
            )
            return ParseOutcome(value, False)
        return ParseOutcome(value, True)

    def _helps(self, token, flags):
        return token in HELP_TOKENS and not flags & ParseFlags.NO_AUTO_HELP

    def _consume(self, value, tokens, flags, prog):
        positionals = deque(self._registry.positionals)
        while tokens:
            token = tokens.popleft()
            if self._helps(token, flags):
                self.print_help(flags, prog)
                raise _HelpRequested
            if argument := self._registry.find(token):
                pass
            elif positionals:
                argument = positionals.popleft()
                tokens.appendleft(token)
            elif flags & ParseFlags.SKIP_UNRECOGNIZED:
                continue
            else:
                raise UnrecognizedArgumentError(f"unrecognized argument \"{token}\"", token=token)

            self._dispatch(argument, value, tokens, flags)
            argument.mark()

    def _dispatch(self, argument, value, tokens, flags):
        name = argument.display
        match argument.destination:
            case Scalar(kind=Kind.BOOL) as destination:
                destination.write(value, not destination.read(value))
            case Scalar(kind=kind) as destination:
                destination.write(value, self._take(tokens, kind, name))
            case FixedArray(kind=kind, size=size) as destination:
                for index in range(size):
                    destination.write_item(value, index, self._take(tokens, kind, name))
            case Sequence() as destination:
                self._gather(destination, value, tokens, flags, name)
            case Composite(kinds=kinds) as destination:
                destination.construct(value, [self._take(tokens, kind, name) for kind in kinds])

    def _take(self, tokens, kind, name):
        try:
            token = tokens.popleft()
        except IndexError:
            raise MissingValueError(
                f"\"{name}\" expected {"an" if kind is Kind.INT else "a"} {kind.label} value",
                argument=name,
            ) from None
        return kind.parse(token, name)

    def _gather(self, destination, value, tokens, flags, name):
        kind, maximum = destination.kind, destination.maximum
        destination.clear(value)
        count = 0
        while tokens and not self._registry.find(tokens[0]) and not self._helps(tokens[0], flags):
            try:
                item = kind.parse(tokens[0], name)
            except ArgumentException:
                break
            if maximum is not None and count == maximum:
                raise ArityViolationError(
                    f"\"{name}\" received more than {maximum} values, expected {destination.bounds}",
                    argument=name,
                    token=tokens[0],
                )
            tokens.popleft()
            destination.append(value, item)
            count += 1
        if not destination.accepts(count):
            raise ArityViolationError(
                f"\"{name}\" received {count} values, expected {destination.bounds}",
                argument=name,
            )

    def _sweep(self, flags, prog):
        missing = [
            argument.fragment
            for argument in (*self._registry.positionals, *self._registry.optionals)
            if argument.required(flags) and not argument.was_set
        ]
        if missing:
            self.print_help(flags, prog)
            raise MissingRequiredError(f"missing required arguments: {", ".join(missing)}")


__all__ = (
    "CommandLine",
    "ParseOutcome",
    "HELP_TOKENS",
)
