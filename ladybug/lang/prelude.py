"""Standard handles installed by a Session: the host functions every Ladybug script can call."""

import sys

from ladybug.core.stack import VOID, Value
from ladybug.lang.error import LadybugRuntimeError


def _expect_args(name, args, count):
    if len(args) != count:
        raise LadybugRuntimeError("'{}' expects {} argument(s), got {}", [name, count, len(args)])


def make_print(stream=None):
    """print(...): writes the contents of its arguments, space-separated, followed by a newline."""

    def _print(args):
        print(" ".join(arg.content for arg in args), file=stream if stream is not None else sys.stdout)
        return VOID

    return _print


def to_str(args):
    """str(x): x's content as a string."""
    _expect_args("str", args, 1)
    return Value.string(args[0].content)


def to_num(args):
    """num(x): parses a string (or passes through a number)."""
    _expect_args("num", args, 1)
    value, = args
    if value.is_num:
        return value
    try:
        return Value.number(float(value.content))
    except ValueError:
        raise LadybugRuntimeError("cannot convert '{}' to a number", value.content)


def length(args):
    """len(s): number of characters in string s."""
    _expect_args("len", args, 1)
    if not args[0].is_str:
        raise LadybugRuntimeError("'len' expects a string, got {}", args[0].kind.value)
    return Value.number(len(args[0].content))


def install(evaluator, stream=None):
    """Registers the standard handles on evaluator."""
    evaluator.register_handle("print", make_print(stream))
    evaluator.register_handle("str", to_str)
    evaluator.register_handle("num", to_num)
    evaluator.register_handle("len", length)
