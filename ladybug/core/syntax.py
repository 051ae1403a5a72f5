"""Ladybug abstract syntax tree. Every node has an `expr` payload (variable name, literal text, operator, or function
signature), an ordered list of owned child `nodes`, and the `location` of the token it started at. The tree has no
cycles and no sharing: each node belongs to exactly one parent.
"""

from abc import ABC


class Node(ABC):
    """Superclass of all syntax tree nodes."""

    def __init__(self, expr, nodes=None, location=None):
        self.expr = expr
        self.nodes = list(nodes) if nodes else []
        self.location = location
        self._cls = type(self).__name__

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <Node>(expr='<expr>', nodes=[
            <Node>(expr='<expr>', nodes=[
                ...
                <Node>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{self._cls}(expr='{self.expr}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        return f"{self._cls}('{self.expr}')"

    def __eq__(self, other):
        """Structural equality. Locations are ignored."""
        return type(other) is type(self) and self.expr == other.expr and self.nodes == other.nodes


# atoms

class Identifier(Node):
    """Variable reference. expr is the name."""

    @property
    def name(self):
        return self.expr


class Number(Node):
    """Numeric literal. expr is the literal text, kept unchanged."""


class String(Node):
    """String literal. expr is the text after escape resolution."""


# expressions

class Assignment(Node):
    """`target = value` or a compound `target op= value`. operator is the arithmetic operator of a compound form
    ("+" for "+="), or None for plain assignment.
    """

    def __init__(self, target, value, operator=None, location=None):
        super().__init__(target, [value], location)
        self.operator = operator

    @property
    def target(self):
        return self.expr

    @property
    def value(self):
        return self.nodes[0]

    def __repr__(self):
        return f"{self._cls}('{self.expr} {self.operator or ''}= ...')"

    def __eq__(self, other):
        return super().__eq__(other) and self.operator == other.operator


class BinaryOp(Node):
    """Arithmetic (+ - * / %) or comparison (== != < <= > >=). expr is the operator."""

    def __init__(self, operator, left, right, location=None):
        super().__init__(operator, [left, right], location)

    @property
    def operator(self):
        return self.expr

    @property
    def left(self):
        return self.nodes[0]

    @property
    def right(self):
        return self.nodes[1]


class LogicalOp(BinaryOp):
    """Short-circuiting && or ||."""


class UnaryOp(Node):
    """! or unary -. expr is the operator."""

    def __init__(self, operator, operand, location=None):
        super().__init__(operator, [operand], location)

    @property
    def operator(self):
        return self.expr

    @property
    def operand(self):
        return self.nodes[0]


class Call(Node):
    """Call of a handle or user function by bare name. nodes are the argument expressions."""

    def __init__(self, name, args, location=None):
        super().__init__(name, args, location)

    @property
    def name(self):
        return self.expr

    @property
    def args(self):
        return self.nodes


# statements

class Block(Node):
    """Sequence of statements. expr is always empty."""

    def __init__(self, statements=None, location=None):
        super().__init__("", statements, location)

    @property
    def statements(self):
        return self.nodes


class If(Node):
    """nodes: condition, body[, else body]. Bodies are single statements or Blocks."""

    def __init__(self, condition, body, orelse=None, location=None):
        super().__init__("if", [condition, body] + ([orelse] if orelse is not None else []), location)

    @property
    def condition(self):
        return self.nodes[0]

    @property
    def body(self):
        return self.nodes[1]

    @property
    def orelse(self):
        return self.nodes[2] if len(self.nodes) > 2 else None


class While(Node):
    """nodes: condition, body."""

    def __init__(self, condition, body, location=None):
        super().__init__("while", [condition, body], location)

    @property
    def condition(self):
        return self.nodes[0]

    @property
    def body(self):
        return self.nodes[1]


class Return(Node):
    """nodes: the returned expression, or nothing for a void return."""

    def __init__(self, value=None, location=None):
        super().__init__("return", [value] if value is not None else [], location)

    @property
    def value(self):
        return self.nodes[0] if self.nodes else None


class FunctionDef(Node):
    """Function declaration. Keeps name and ordered params as structured data; expr is the `name(p1,p2)` signature,
    used for display only.
    """

    def __init__(self, name, params, body, location=None):
        super().__init__(f"{name}({','.join(params)})", [body], location)
        self.name = name
        self.params = list(params)

    @property
    def body(self):
        return self.nodes[0]
