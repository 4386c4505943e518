"""
Argbind help formatter.

TextBuilder
- A styled text buffer (rich Text) that tracks the current column so it can
  wrap at a fixed width (80 by default).
- append_atomic(fragment, indent, lead): never splits the fragment; when it would
  overflow the line, a newline plus `indent` spaces is emitted first and
  `lead` is dropped.
- append_natural(string, indent): word-wraps free text. Embedded newlines
  always break; otherwise the line breaks at the last whitespace before the
  width, and only a line with no whitespace at all is split mid-word.
  Continuation lines start with `indent` spaces.

render_help(commandline, prototype, flags, prog)
    usage: prog [-count <int>] [-verbose] message <string>

    Program description, wrapped.

        -count <int>: Number of repetitions (Default: 1)

        message <string>: Message to print

- Required arguments (per argument or via the global REQUIRED flag) lose
  their brackets in the synopsis.
- Defaults come from `prototype`, a freshly default-constructed aggregate,
  and are hidden by NO_DEFAULT (global or per argument) or when they render
  to an empty string.
"""
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .arguments import ParseFlags
from .utils import Unset, coalesce

console = Console(highlight=False, soft_wrap=True)

WIDTH = 80
INDENT = 4


class TextBuilder:
    """Append-only styled text with column-aware wrapping."""

    def __init__(self, width=WIDTH):
        if not isinstance(width, int) or isinstance(width, bool):
            raise TypeError("text-builder 'width' must be an integer")
        elif width < 1:
            raise ValueError("text-builder 'width' must be positive")
        self.width = width
        self.column = 0
        self.text = Text()

    def __str__(self):
        return self.text.plain

    def __rich__(self):
        return self.text

    def _write(self, string, style=""):
        if string:
            self.text.append(string, style)
            self.column += len(string)

    def newline(self, count=1):
        self.text.append("\n" * count)
        self.column = 0

    def pad(self, count):
        self._write(" " * count)

    def append(self, fragment, style=""):
        """Append without any wrapping (fragment must not contain newlines)."""
        if isinstance(fragment, Text):
            self.text.append_text(fragment)
            self.column += len(fragment)
        else:
            self._write(fragment, style)

    def append_atomic(self, fragment, indent=0, style="", lead=""):
        """
        Append `fragment` whole. `lead` separates it from what precedes it on
        the same line and is dropped when the fragment wraps.
        """
        if self.column and self.column + len(lead) + len(fragment) > self.width:
            self.newline()
            self.pad(indent)
        elif self.column:
            self._write(lead)
        self.append(fragment, style)

    def append_natural(self, string, indent=0, style=""):
        start = cursor = 0
        breakable = -1
        while cursor < len(string):
            character = string[cursor]
            if character == "\n":
                self._write(string[start:cursor].rstrip(" \t"), style)
                self.newline()
                self.pad(indent)
                start = cursor = cursor + 1
                breakable = -1
                continue
            if character in " \t":
                breakable = cursor
            elif self.column + cursor - start + 1 > self.width:
                if breakable >= start:
                    self._write(string[start:breakable].rstrip(" \t"), style)
                    start = breakable + 1
                elif self.column <= indent:
                    # a single word longer than the line: split it
                    cursor = max(cursor, start + 1)
                    self._write(string[start:cursor], style)
                    start = cursor
                # otherwise the word moves down whole
                self.newline()
                self.pad(indent)
                while start < len(string) and string[start] in " \t":
                    start += 1
                cursor = start
                breakable = -1
                continue
            cursor += 1
        self._write(string[start:].rstrip(" \t"), style)


def _palette(colorful):
    styles = defaultdict(str, {
        "usage-label": "bold #FF4DA6",
        "prog-name": "bold #E6E6F0",
        "argument-name": "bold #00E5FF",
        "metavar": "#9CE19C",
        "description": "#C8C8D0",
        "default": "italic #6B6F7A",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def _fragment(argument, styler):
    signature = argument.destination.signature
    return Text.assemble(
        (argument.display, styler("argument-name")),
        *((" ", (signature, styler("metavar"))) if signature else ()),
    )


def render_help(commandline, prototype, /, flags=ParseFlags.NONE, prog=Unset):
    """
    Build the full help text for `commandline` as a TextBuilder.

    Parameters
    - commandline: the CommandLine whose registry is described.
    - prototype: default-constructed aggregate the defaults are read from.
    - flags: parse flags (REQUIRED and NO_DEFAULT matter here).
    - prog: program name; falls back to the command-line name.
    """
    styler = _palette(commandline.colorful)
    builder = TextBuilder(commandline.width)
    prog = coalesce(prog, commandline.name) or ""

    builder.append("usage: ", styler("usage-label"))
    builder.append(prog, styler("prog-name"))
    indent = builder.column
    for argument in commandline.registry:
        fragment = _fragment(argument, styler)
        if not argument.required(flags):
            fragment = Text.assemble("[", fragment, "]")
        builder.append_atomic(Text.assemble(" ", fragment), indent)
    builder.newline(2)

    if commandline.descr:
        builder.append_natural(commandline.descr, 0, styler("description"))
        builder.newline(2)

    for argument in commandline.registry:
        builder.pad(INDENT)
        builder.append(Text.assemble(_fragment(argument, styler), ": "))
        indent = builder.column
        if argument.descr:
            builder.append_natural(argument.descr, indent, styler("description"))
        if argument.defaulted(flags) and (default := argument.destination.render(prototype)):
            builder.append_atomic(f"(Default: {default})", indent, styler("default"), " " if argument.descr else "")
        builder.newline(2)

    return builder


def print_help(commandline, prototype, /, flags=ParseFlags.NONE, prog=Unset):
    """Render the help text and print it to stdout."""
    console.print(render_help(commandline, prototype, flags, prog).text, end="")


__all__ = (
    "TextBuilder",
    "render_help",
    "print_help",
)
