from dataclasses import dataclass, field

from rich.pretty import pprint

from argbind import *


@dataclass
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class Args:
    hello: bool = False
    i: int = 0
    f: float = 0.0
    d: float = 0.0
    name: str = "default"
    veci: tuple[int, int, int] = (1, 2, 3)
    quat: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
    numbers: list[int] = field(default_factory=list)
    origin: Vec3 = field(default_factory=Vec3)
    files: list[str] = field(default_factory=list)


raw_int = Cell(0)

commandline = CommandLine(
    "features",
    "Exercises every destination shape.\n\n"
    "Tenets:\n"
    "    1. Great for the command line user\n"
    "    2. Great for the command line programmer\n"
    "    3. Understandable to maintain",
    Args,
    colorful=True,
)
commandline.add_optional("hello", "hello", "say hello")
commandline.add_optional("int", "i", "The description of this argument is long on purpose, to show how "
                                     "descriptions wrap under their header when they exceed the width.")
commandline.add_optional("float", "f", "A single-precision real", kind=Kind.FLOAT)
commandline.add_optional("double", "d", "A double-precision real")
commandline.add_optional("name", "name", "A name")
commandline.add_optional("veci", "veci", "3 int point")
commandline.add_optional("quat", "quat", "A quaternion")
commandline.add_optional("numbers", "numbers", "Between three and five integers", minimum=3, maximum=5)
commandline.add_optional("origin", "origin", "Origin of the scene")
commandline.add_optional("raw_int", raw_int, "An integer that lives outside the aggregate", ParseFlags.NO_DEFAULT)
commandline.add_positional("files", descr="Input files")


if __name__ == '__main__':
    args, success = commandline.parse()
    pprint(args)
    pprint(raw_int)
