"""Runtime data for the Ladybug evaluator: values, name bindings, and the call stack they live in."""

from dataclasses import dataclass
from enum import Enum

from ladybug.core.syntax import FunctionDef
from ladybug.lang.error import LadybugRuntimeError


class ValueKind(Enum):
    NUM = "number"
    STR = "string"
    VOID = "void"


def format_number(number):
    """Decimal text of a float. Integral values have no fractional part: 5.0 -> '5'."""
    if number != number or number in (float("inf"), float("-inf")):
        return repr(number)  # 'nan', 'inf', '-inf'
    if number.is_integer():
        return str(int(number))
    return repr(number)


@dataclass(frozen=True)
class Value:
    """Tagged value. content is always text: numbers are kept as decimal strings and converted on demand."""
    kind: ValueKind
    content: str = ""

    @staticmethod
    def number(number):
        return Value(ValueKind.NUM, format_number(float(number)))

    @staticmethod
    def string(text):
        return Value(ValueKind.STR, text)

    @staticmethod
    def boolean(flag):
        return Value(ValueKind.NUM, "1" if flag else "0")

    @property
    def is_num(self):
        return self.kind is ValueKind.NUM

    @property
    def is_str(self):
        return self.kind is ValueKind.STR

    @property
    def is_void(self):
        return self.kind is ValueKind.VOID

    def to_float(self):
        return float(self.content)

    @property
    def truthy(self):
        """Only a NUM equal to 0 is falsy. Strings and void are always truthy."""
        return not (self.is_num and self.to_float() == 0)

    def __str__(self):
        return self.content


VOID = Value(ValueKind.VOID)


@dataclass(frozen=True)
class Variable:
    value: Value


@dataclass(frozen=True)
class Function:
    definition: FunctionDef


class CallStack:
    """Stack of frames, each a dict of name: Variable/Function. Frame 0 is the global frame and is never popped.

    Reads search frames from the top down; writes always go to the topmost frame, so assigning inside a function never
    touches a caller's binding of the same name.
    """

    def __init__(self):
        self.frames = [{}]

    @property
    def globals(self):
        return self.frames[0]

    @property
    def top(self):
        return self.frames[-1]

    @property
    def depth(self):
        return len(self.frames)

    def push(self):
        self.frames.append({})

    def pop(self):
        if len(self.frames) == 1:
            raise LadybugRuntimeError("cannot pop the global frame", internal=True)
        return self.frames.pop()

    def unwind(self, depth=1):
        """Drops every frame above the first depth frames (by default, everything above the global frame)."""
        del self.frames[max(depth, 1):]

    def find(self, name):
        """Returns the topmost binding of name, or None."""
        for frame in reversed(self.frames):
            if name in frame:
                return frame[name]
        return None

    def get(self, name, location=None):
        """Returns the topmost binding of name. Raises LadybugRuntimeError if name is bound nowhere."""
        binding = self.find(name)
        if binding is None:
            raise LadybugRuntimeError("undefined name '{}'", name, location=location)
        return binding

    def set(self, name, binding):
        """Binds name in the topmost frame."""
        self.top[name] = binding

    def __contains__(self, name):
        return self.find(name) is not None
