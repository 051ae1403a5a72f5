"""Tree-walking evaluator for Ladybug.

Statements are run with `run`, which returns how the statement finished: `Completed(value)` or `Returning(value)`.
Blocks, ifs and whiles stop as soon as a nested statement returns `Returning`, which is how `return` unwinds up to
the function call that owns the current frame. Expressions are computed with `evaluate`, which returns a Value.

Host functions ("handles") are registered by name before executing scripts. Their names are reserved: scripts can
neither declare nor assign them, and a call by that name always goes to the handle.
"""

import math
import operator
from dataclasses import dataclass

from ladybug.core.lexical import tokenize
from ladybug.core.parser import parse
from ladybug.core.stack import VOID, CallStack, Function, Value, ValueKind, Variable
from ladybug.core.syntax import Assignment, BinaryOp, Block, Call, FunctionDef, Identifier, If, LogicalOp, Number, \
    Return, String, UnaryOp, While
from ladybug.lang.error import GenericException, LadybugRuntimeError


@dataclass(frozen=True)
class Completed:
    """Statement ran to its end. value is the value of an expression statement, VOID otherwise."""
    value: Value = VOID


@dataclass(frozen=True)
class Returning:
    """A return statement ran; enclosing statements must stop and hand value to the caller."""
    value: Value = VOID


def divide(left, right):
    """Float division with IEEE results instead of ZeroDivisionError."""
    if right == 0:
        if left == 0 or left != left:
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1, right)
    return left / right


def modulo(left, right):
    """C-style remainder (sign of the dividend). nan where fmod is undefined."""
    try:
        return math.fmod(left, right)
    except ValueError:
        return math.nan


ARITHMETIC = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": divide,
    "%": modulo,
}

RELATIONAL = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class Evaluator:
    """Runs Ladybug source. The global frame (and the handle table) persist across execute calls on one instance.

    Not thread-safe: execute calls on the same instance must not overlap. A handle may call execute on the instance
    running it; the nested script runs in the calling function's frame.

    Each script-level call nests roughly ten Python frames, so under the default Python recursion limit (1000) scripts
    fail with "maximum recursion depth exceeded" at a few hundred levels of script recursion. Embedders that need
    deeper recursion should raise the limit with sys.setrecursionlimit, as the CLI's --recursion-limit does.
    """

    def __init__(self):
        self.stack = CallStack()
        self.handles = {}  # dict of name: callback(list of Values) -> Value

        self._statements = {
            Block: self._block,
            If: self._if,
            While: self._while,
            Return: self._return,
            FunctionDef: self._declare,
        }
        self._expressions = {
            Identifier: self._identifier,
            Number: self._literal,
            String: self._literal,
            Assignment: self._assign,
            BinaryOp: self._binary,
            LogicalOp: self._logical,
            UnaryOp: self._unary,
            Call: self._call,
        }

    # embedding API

    def register_handle(self, name, callback):
        """Exposes callback to scripts as name. callback receives a list of Values and returns a Value (or None for
        void).
        """
        if name in self.handles:
            raise LadybugRuntimeError("handle '{}' is already registered", name)
        if name in self.stack.globals:
            raise LadybugRuntimeError("cannot register handle '{}', the name is already defined", name)
        self.handles[name] = callback

    def execute(self, source):
        """Lexes, parses and runs source. Returns the value of the last top-level statement that ran (VOID if it was
        not an expression statement), or the value of a top-level return.

        Errors propagate. Function frames are always popped, so the instance stays usable afterwards; global
        assignments made before the error are kept.
        """
        depth = self.stack.depth  # a handle may execute while a script function is running
        try:
            tree = parse(tokenize(source))
            return self.run(tree).value
        except RecursionError:
            raise LadybugRuntimeError("maximum recursion depth exceeded") from None
        finally:
            self.stack.unwind(depth)

    def lookup(self, name):
        """Returns the Value bound to name in the global frame."""
        binding = self.stack.globals.get(name)
        if binding is None:
            raise LadybugRuntimeError("undefined name '{}'", name)
        if isinstance(binding, Function):
            raise LadybugRuntimeError("'{}' is a function, not a value", name)
        return binding.value

    # statements

    def run(self, node):
        """Runs a statement (or an expression statement). Returns Completed or Returning."""
        statement = self._statements.get(type(node))
        if statement is not None:
            return statement(node)
        return Completed(self.evaluate(node))

    def _block(self, node):
        completion = Completed()
        for statement in node.statements:
            completion = self.run(statement)
            if isinstance(completion, Returning):
                break
        return completion

    def _if(self, node):
        if self.evaluate(node.condition).truthy:
            return self.run(node.body)
        elif node.orelse is not None:
            return self.run(node.orelse)
        return Completed()

    def _while(self, node):
        while self.evaluate(node.condition).truthy:
            completion = self.run(node.body)
            if isinstance(completion, Returning):
                return completion
        return Completed()

    def _return(self, node):
        if node.value is None:
            return Returning()
        return Returning(self.evaluate(node.value))

    def _declare(self, node):
        """Binds the function in the current frame. No hoisting: it exists from this statement on."""
        if node.name in self.handles:
            raise LadybugRuntimeError("cannot declare function '{}', the name is reserved by a handle", node.name,
                                      location=node.location)
        self.stack.set(node.name, Function(node))
        return Completed()

    # expressions

    def evaluate(self, node):
        expression = self._expressions.get(type(node))
        if expression is None:
            raise LadybugRuntimeError("'{}' is not an expression", node._cls, location=node.location, internal=True)
        return expression(node)

    def _value_of(self, name, location):
        binding = self.stack.get(name, location)
        if isinstance(binding, Function):
            raise LadybugRuntimeError("cannot use function '{}' without calling it", name, location=location)
        return binding.value

    def _identifier(self, node):
        if node.name in self.handles:
            raise LadybugRuntimeError("cannot use handle '{}' without calling it", node.name, location=node.location)
        return self._value_of(node.name, node.location)

    def _literal(self, node):
        if isinstance(node, String):
            return Value.string(node.expr)
        return Value(ValueKind.NUM, node.expr)  # literal text is kept as written

    def _assign(self, node):
        if node.target in self.handles:
            raise LadybugRuntimeError("cannot assign to '{}', the name is reserved by a handle", node.target,
                                      location=node.location)

        if node.operator is None:
            value = self.evaluate(node.value)
        else:
            current = self._value_of(node.target, node.location)
            value = self.arithmetic(node.operator, current, self.evaluate(node.value), node.location)

        self.stack.set(node.target, Variable(value))
        return value

    def arithmetic(self, op, left, right, location=None):
        """+ - * / % on two Values. STR + STR concatenates; every other case needs two NUMs."""
        if op == "+" and left.is_str and right.is_str:
            return Value.string(left.content + right.content)

        if not (left.is_num and right.is_num):
            raise LadybugRuntimeError("unsupported operand types for '{}': {} and {}",
                                      [op, left.kind.value, right.kind.value], location=location)

        return Value.number(ARITHMETIC[op](left.to_float(), right.to_float()))

    def compare(self, op, left, right, location=None):
        """Comparison operators on two Values. Equality across kinds is false; ordering needs two NUMs."""
        if op in ("==", "!="):
            if left.kind is not right.kind:
                equal = False
            elif left.is_num:
                equal = left.to_float() == right.to_float()
            else:
                equal = left.content == right.content
            return Value.boolean(equal if op == "==" else not equal)

        if not (left.is_num and right.is_num):
            raise LadybugRuntimeError("unsupported operand types for '{}': {} and {}",
                                      [op, left.kind.value, right.kind.value], location=location)

        return Value.boolean(RELATIONAL[op](left.to_float(), right.to_float()))

    def _binary(self, node):
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)

        if node.operator in ARITHMETIC:
            return self.arithmetic(node.operator, left, right, node.location)
        return self.compare(node.operator, left, right, node.location)

    def _logical(self, node):
        """Short-circuits: the right operand is only evaluated if the left one does not decide the result."""
        left = self.evaluate(node.left).truthy
        if node.operator == "&&":
            return Value.boolean(left and self.evaluate(node.right).truthy)
        return Value.boolean(left or self.evaluate(node.right).truthy)

    def _unary(self, node):
        operand = self.evaluate(node.operand)
        if node.operator == "!":
            return Value.boolean(not operand.truthy)

        if not operand.is_num:
            raise LadybugRuntimeError("bad operand type for unary '-': {}", operand.kind.value, location=node.location)
        return Value.number(-operand.to_float())

    def _call(self, node):
        if node.name in self.handles:
            return self._call_handle(node)

        binding = self.stack.get(node.name, node.location)
        if not isinstance(binding, Function):
            raise LadybugRuntimeError("'{}' is not a function", node.name, location=node.location)

        definition = binding.definition
        if len(node.args) != len(definition.params):
            raise LadybugRuntimeError("'{}' expects {} argument(s), got {}",
                                      [node.name, len(definition.params), len(node.args)], location=node.location)

        args = [self.evaluate(arg) for arg in node.args]  # in the caller's frame

        self.stack.push()
        try:
            for param, value in zip(definition.params, args):
                self.stack.set(param, Variable(value))
            completion = self.run(definition.body)
        finally:
            self.stack.pop()

        return completion.value if isinstance(completion, Returning) else VOID

    def _call_handle(self, node):
        args = [self.evaluate(arg) for arg in node.args]

        try:
            result = self.handles[node.name](args)
        except GenericException:
            raise
        except Exception as exc:
            raise LadybugRuntimeError("handle '{}' failed: {}", [node.name, f"{type(exc).__name__}: {exc}"],
                                      location=node.location) from exc

        if result is None:
            return VOID
        if not isinstance(result, Value):
            raise LadybugRuntimeError("handle '{}' returned {}, not a Value", [node.name, type(result).__name__],
                                      location=node.location, internal=True)
        return result
