"""
Command line behavioral tests (parsing engine end to end).

Scope
- Validate token routing: named matches, positional fallback, unrecognized tokens.
- Validate every destination shape: scalars, toggles, fixed arrays, bounded
  sequences and composites, including partial writes on failure.
- Validate help handling, the required sweep, exit status and NO_EXIT_ON_ERROR.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured through the rich consoles so runs stay quiet.
"""

import contextlib
import sys
import unittest
from dataclasses import dataclass, field
from unittest import TestCase, mock

from argbind import CommandLine, ParseFlags, Kind, Cell, Composite
from argbind import faults, formatter
from argbind.faults import (
    UnrecognizedArgumentError,
    MissingValueError,
    MalformedValueError,
    OutOfRangeError,
    ArityViolationError,
    MissingRequiredError,
)

SOFT = ParseFlags.NO_EXIT_ON_ERROR


@dataclass
class Args:
    count: int = 1
    message: str = "Hello"


@dataclass
class Switches:
    verbose: bool = False
    count: int = 0


@dataclass
class Vectors:
    values: tuple[float, float, float] = (0.0, 0.0, 0.0)
    numbers: list[int] = field(default_factory=list)
    flag: bool = False
    message: str = ""


@dataclass
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class Scene:
    origin: Vec3 = field(default_factory=Vec3)


@dataclass
class Repeat:
    times: int
    word: str


@contextlib.contextmanager
def quiet():
    with faults.console.capture() as errors, formatter.console.capture() as output:
        yield errors, output


def greeter():
    commandline = CommandLine(aggregate=Args)
    commandline.add_optional("count", "count", "Number of repetitions")
    commandline.add_positional("message", descr="Message to print")
    return commandline


class TestRouting(TestCase):

    def testEndToEnd(self):
        value, success = greeter().parse(["prog", "-count", "3", "Hi"])
        self.assertTrue(success)
        self.assertEqual(value, Args(count=3, message="Hi"))

    def testDefaultsWhenAbsent(self):
        value, success = greeter().parse(["prog"])
        self.assertTrue(success)
        self.assertEqual(value, Args())

    def testPositionalsInRegistrationOrder(self):
        first, second = Cell(""), Cell("")
        commandline = CommandLine()
        commandline.add_positional(first, "first")
        commandline.add_positional(second, "second")
        _, success = commandline.parse(["prog", "a", "b"])
        self.assertTrue(success)
        self.assertEqual((first.value, second.value), ("a", "b"))

    def testDashedTokenFallsBackToPositional(self):
        number = Cell(0)
        commandline = CommandLine()
        commandline.add_positional(number, "number")
        commandline.parse(["prog", "-5"])
        self.assertEqual(number.value, -5)

    def testUnrecognizedFails(self):
        commandline = CommandLine("prog", "", Args)
        commandline.add_optional("count", "count")
        with quiet() as (errors, _):
            value, success = commandline.parse(["prog", "-bogus"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, UnrecognizedArgumentError)
        self.assertEqual(commandline.fault.token, "-bogus")
        self.assertEqual(errors.get(), 'prog: unrecognized argument "-bogus"\n')

    def testUnrecognizedExitsWithStatusOne(self):
        commandline = CommandLine("prog")
        with self.assertRaises(SystemExit) as context, quiet():
            commandline.parse(["prog", "stray"])
        self.assertEqual(context.exception.code, 1)

    def testSkipUnrecognized(self):
        commandline = CommandLine("prog", "", Args)
        commandline.add_optional("count", "count")
        value, success = commandline.parse(["prog", "-bogus", "-count", "2", "extra"], ParseFlags.SKIP_UNRECOGNIZED)
        self.assertTrue(success)
        self.assertEqual(value.count, 2)

    def testSysArgvIsTheDefault(self):
        with mock.patch.object(sys, "argv", ["tool", "-count", "4", "Yo"]):
            value, success = greeter().parse()
        self.assertTrue(success)
        self.assertEqual(value, Args(count=4, message="Yo"))

    def testEachParseStartsFromFreshAggregate(self):
        commandline = greeter()
        first, _ = commandline.parse(["prog", "-count", "3"])
        second, _ = commandline.parse(["prog"])
        self.assertIsNot(first, second)
        self.assertEqual(second.count, 1)

    def testWasSetTracksCurrentParse(self):
        commandline = CommandLine("prog", "", Args)
        count = commandline.add_optional("count", "count")
        message = commandline.add_positional("message")
        commandline.parse(["prog", "-count", "2"])
        self.assertTrue(count.was_set)
        self.assertFalse(message.was_set)
        commandline.parse(["prog", "Hi"])
        self.assertFalse(count.was_set)
        self.assertTrue(message.was_set)


class TestScalars(TestCase):

    def testMissingValue(self):
        commandline = greeter()
        with quiet():
            _, success = commandline.parse(["prog", "-count"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, MissingValueError)
        self.assertEqual(commandline.fault.message, '"-count" expected an int value')

    def testMalformedValue(self):
        commandline = greeter()
        with quiet():
            _, success = commandline.parse(["prog", "-count", "three"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, MalformedValueError)
        self.assertEqual(commandline.fault.argument, "-count")
        self.assertEqual(commandline.fault.token, "three")

    def testOutOfRange(self):
        commandline = greeter()
        with quiet():
            _, success = commandline.parse(["prog", "-count", "99999999999"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, OutOfRangeError)

    def testOverlongIntegerIsOutOfRange(self):
        commandline = greeter()
        with quiet():
            args, success = commandline.parse(["prog", "-count", "9" * 5000], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, OutOfRangeError)
        self.assertEqual(args.count, 1)

    def testCellStorage(self):
        count = Cell(1)
        commandline = CommandLine()
        commandline.add_optional("count", count)
        _, success = commandline.parse(["prog", "-count", "5"])
        self.assertTrue(success)
        self.assertEqual(count.value, 5)

    def testToggle(self):
        commandline = CommandLine("prog", "", Switches)
        commandline.add_optional("verbose", "verbose")
        self.assertTrue(commandline.parse(["prog", "-verbose"]).value.verbose)
        self.assertFalse(commandline.parse(["prog", "-verbose", "-verbose"]).value.verbose)

    def testToggleFromTrue(self):
        quiet_mode = Cell(True)
        commandline = CommandLine()
        commandline.add_optional("quiet", quiet_mode)
        commandline.parse(["prog", "-quiet"])
        self.assertFalse(quiet_mode.value)

    def testSinglePrecisionKind(self):
        ratio = Cell(0.0)
        commandline = CommandLine()
        commandline.add_optional("ratio", ratio, kind=Kind.FLOAT)
        commandline.parse(["prog", "-ratio", "0.1"])
        self.assertNotEqual(ratio.value, 0.1)
        self.assertAlmostEqual(ratio.value, 0.1, places=6)

    def testSinglePrecisionOverflow(self):
        ratio = Cell(0.0)
        commandline = CommandLine()
        commandline.add_optional("ratio", ratio, kind=Kind.FLOAT)
        with quiet():
            _, success = commandline.parse(["prog", "-ratio", "1e39"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, OutOfRangeError)
        self.assertEqual(commandline.fault.argument, "-ratio")
        self.assertEqual(ratio.value, 0.0)


class TestCollections(TestCase):

    def vectors(self, minimum=0, maximum=None):
        commandline = CommandLine("prog", "", Vectors)
        commandline.add_optional("values", "values")
        commandline.add_optional("numbers", "numbers", minimum=minimum, maximum=maximum)
        commandline.add_optional("flag", "flag")
        commandline.add_positional("message")
        return commandline

    def testFixedArrayConsumesExactly(self):
        value, success = self.vectors().parse(["prog", "-values", "1", "2", "3", "rest"])
        self.assertTrue(success)
        self.assertEqual(value.values, (1.0, 2.0, 3.0))
        self.assertEqual(value.message, "rest")

    def testFixedArrayMissingKeepsPartialWrites(self):
        commandline = self.vectors()
        with quiet():
            value, success = commandline.parse(["prog", "-values", "1", "2"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, MissingValueError)
        self.assertEqual(value.values, (1.0, 2.0, 0.0))

    def testFixedArrayMalformedKeepsPartialWrites(self):
        commandline = self.vectors()
        with quiet():
            value, success = commandline.parse(["prog", "-values", "1", "x", "3"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, MalformedValueError)
        self.assertEqual(value.values, (1.0, 0.0, 0.0))

    def testSequenceStopsAtRegisteredOptional(self):
        value, success = self.vectors().parse(["prog", "-numbers", "1", "2", "3", "-flag"])
        self.assertTrue(success)
        self.assertEqual(value.numbers, [1, 2, 3])
        self.assertTrue(value.flag)

    def testSequenceStopsAtUnparseableToken(self):
        value, success = self.vectors().parse(["prog", "-numbers", "1", "2", "word"])
        self.assertTrue(success)
        self.assertEqual(value.numbers, [1, 2])
        self.assertEqual(value.message, "word")

    def testSequenceArityWindow(self):
        for count in (3, 4, 5):
            with self.subTest(count=count):
                value, success = self.vectors(3, 5).parse(["prog", "-numbers", *map(str, range(count))])
                self.assertTrue(success)
                self.assertEqual(value.numbers, list(range(count)))

    def testSequenceTooFew(self):
        commandline = self.vectors(3, 5)
        with quiet():
            _, success = commandline.parse(["prog", "-numbers", "1", "2"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, ArityViolationError)
        self.assertIn("[3,5]", commandline.fault.message)

    def testSequenceTooMany(self):
        commandline = self.vectors(3, 5)
        with quiet():
            value, success = commandline.parse(["prog", "-numbers", "1", "2", "3", "4", "5", "6"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, ArityViolationError)
        self.assertEqual(commandline.fault.token, "6")
        self.assertEqual(value.numbers, [1, 2, 3, 4, 5])

    def testSequenceClearsDefault(self):
        numbers = Cell([7, 8])
        commandline = CommandLine()
        commandline.add_optional("numbers", numbers)
        commandline.parse(["prog", "-numbers", "1"])
        self.assertEqual(numbers.value, [1])

    def testSequenceStopsAtHelpToken(self):
        words = Cell(["x"])
        commandline = CommandLine()
        commandline.add_optional("words", words)
        with quiet() as (_, output):
            _, success = commandline.parse(["prog", "-words", "a", "-h"], SOFT)
        self.assertFalse(success)
        self.assertEqual(words.value, ["a"])
        self.assertTrue(output.get().startswith("usage: prog"))

    def testPositionalSequence(self):
        files = Cell([""])
        commandline = CommandLine()
        commandline.add_positional(files, "files", minimum=1)
        _, success = commandline.parse(["prog", "a", "b", "c"])
        self.assertTrue(success)
        self.assertEqual(files.value, ["a", "b", "c"])

    def testCompositeFromDataclass(self):
        commandline = CommandLine("prog", "", Scene)
        commandline.add_optional("origin", "origin")
        value, success = commandline.parse(["prog", "-origin", "1", "2", "3"])
        self.assertTrue(success)
        self.assertEqual(value.origin, Vec3(1.0, 2.0, 3.0))

    def testCompositeWithExplicitConstructor(self):
        repeat = Cell()
        commandline = CommandLine()
        commandline.add_optional("repeat", Composite([Kind.INT, Kind.TEXT], Repeat, repeat))
        _, success = commandline.parse(["prog", "-repeat", "3", "hey"])
        self.assertTrue(success)
        self.assertEqual(repeat.value, Repeat(3, "hey"))

    def testCompositeMissingPart(self):
        commandline = CommandLine("prog", "", Scene)
        commandline.add_optional("origin", "origin")
        with quiet():
            value, success = commandline.parse(["prog", "-origin", "1", "2"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, MissingValueError)
        self.assertEqual(value.origin, Vec3())


class TestHelpAndRequired(TestCase):

    def testHelpPrintsUsageAndFails(self):
        commandline = greeter()
        for token in ("-h", "-help", "--help", "/?"):
            with self.subTest(token=token):
                with quiet() as (_, output):
                    value, success = commandline.parse(["prog", token], SOFT)
                self.assertFalse(success)
                self.assertEqual(value, Args())
                self.assertTrue(output.get().startswith("usage: prog"))

    def testHelpExitsWithStatusOne(self):
        with self.assertRaises(SystemExit) as context, quiet():
            greeter().parse(["prog", "-h"])
        self.assertEqual(context.exception.code, 1)

    def testNoAutoHelp(self):
        value, success = greeter().parse(["prog", "-h"], ParseFlags.NO_AUTO_HELP)
        self.assertTrue(success)
        self.assertEqual(value.message, "-h")

    def testConfiguredNameWinsOverArgv(self):
        commandline = CommandLine("greet")
        with quiet() as (_, output):
            commandline.parse(["/usr/bin/prog", "-h"], SOFT)
        self.assertTrue(output.get().startswith("usage: greet"))

    def testArgvNameIsBasename(self):
        with quiet() as (_, output):
            CommandLine().parse(["/usr/bin/prog", "-h"], SOFT)
        self.assertTrue(output.get().startswith("usage: prog"))

    def testMissingRequiredPositional(self):
        commandline = CommandLine("prog", "", Args)
        commandline.add_positional("message", flags=ParseFlags.REQUIRED)
        with quiet() as (errors, output):
            _, success = commandline.parse(["prog"], SOFT)
        self.assertFalse(success)
        self.assertIsInstance(commandline.fault, MissingRequiredError)
        self.assertEqual(commandline.fault.message, "missing required arguments: message <string>")
        self.assertTrue(output.get().startswith("usage: prog message <string>"))
        self.assertIn("missing required arguments", errors.get())

    def testGlobalRequiredReportsPositionalsFirst(self):
        with quiet():
            commandline = greeter()
            _, success = commandline.parse(["prog"], SOFT | ParseFlags.REQUIRED)
        self.assertFalse(success)
        self.assertEqual(
            commandline.fault.message,
            "missing required arguments: message <string>, -count <int>",
        )

    def testRequiredSatisfied(self):
        commandline = CommandLine("prog", "", Args)
        commandline.add_optional("count", "count", flags=ParseFlags.REQUIRED)
        _, success = commandline.parse(["prog", "-count", "1"])
        self.assertTrue(success)

    def testMissingRequiredExits(self):
        commandline = CommandLine("prog", "", Args)
        commandline.add_optional("count", "count", flags=ParseFlags.REQUIRED)
        with self.assertRaises(SystemExit) as context, quiet():
            commandline.parse(["prog"])
        self.assertEqual(context.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
