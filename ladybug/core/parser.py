"""Recursive descent parser for Ladybug: token sequence -> syntax tree rooted at a Block.

```
block       ::= (stmt | ";")*
stmt        ::= ifStmt | whileStmt | funcDecl | returnStmt | expr ";"
ifStmt      ::= "if" "(" expr ")" lineOrBlock ("else" lineOrBlock)?
whileStmt   ::= "while" "(" expr ")" lineOrBlock
funcDecl    ::= "function" ID "(" (ID ("," ID)*)? ")" "{" block "}"
returnStmt  ::= "return" expr? ";"
lineOrBlock ::= "{" block "}" | stmt

expr        ::= assign
assign      ::= or (("=" | "+=" | "-=" | "*=" | "/=" | "%=") assign)?  ; right-associative, l-value must be ID
or          ::= and ("||" and)*
and         ::= equality ("&&" equality)*
equality    ::= relational (("==" | "!=") relational)*
relational  ::= sum (("<" | "<=" | ">" | ">=") sum)*
sum         ::= product (("+" | "-") product)*
product     ::= unary (("*" | "/" | "%") unary)*
unary       ::= ("!" | "-") unary | callExpr
callExpr    ::= atom ("(" (expr ("," expr)*)? ")")?                  ; atom must be ID
atom        ::= ID | NUM | STR | "true" | "false" | "(" expr ")"
```

Any malformed construct raises a ParseError immediately. There is no error recovery.
"""

from ladybug.core.syntax import Assignment, BinaryOp, Block, Call, FunctionDef, Identifier, If, LogicalOp, Number, \
    Return, String, UnaryOp, While
from ladybug.core.tokens import TokenKind
from ladybug.lang.error import ParseError


ASSIGNMENTS = {
    TokenKind.ASSIGN: None,
    TokenKind.PLUS_ASSIGN: "+",
    TokenKind.MINUS_ASSIGN: "-",
    TokenKind.STAR_ASSIGN: "*",
    TokenKind.SLASH_ASSIGN: "/",
    TokenKind.PERCENT_ASSIGN: "%",
}

# binary precedence levels, loosest first: {token kind: node class}
LEVELS = [
    {TokenKind.OR: LogicalOp},
    {TokenKind.AND: LogicalOp},
    {TokenKind.EQ: BinaryOp, TokenKind.NE: BinaryOp},
    {TokenKind.LT: BinaryOp, TokenKind.LE: BinaryOp, TokenKind.GT: BinaryOp, TokenKind.GE: BinaryOp},
    {TokenKind.PLUS: BinaryOp, TokenKind.MINUS: BinaryOp},
    {TokenKind.STAR: BinaryOp, TokenKind.SLASH: BinaryOp, TokenKind.PERCENT: BinaryOp},
]

UNARY = (TokenKind.NOT, TokenKind.MINUS)


class Parser:
    """Parses one token list (as produced by Lexer.tokenize, EOF-terminated). Parser objects are single-use."""

    def __init__(self, tokens):
        self.tokens = tokens
        self.i = 0

    # token helpers

    def peek(self):
        """Current token. The trailing EOF token is never consumed, so this is always valid."""
        return self.tokens[self.i]

    def advance(self):
        token = self.tokens[self.i]
        if token.kind is not TokenKind.EOF:
            self.i += 1
        return token

    def match(self, *kinds):
        """Consumes and returns the current token if it is one of kinds, else returns None."""
        if self.peek().kind in kinds:
            return self.advance()
        return None

    def expect(self, *kinds):
        """Consumes and returns the current token, which must be one of kinds."""
        token = self.match(*kinds)
        if token is None:
            self.unexpected(*kinds)
        return token

    def unexpected(self, *kinds):
        token = self.peek()
        expected = ", ".join(f"'{kind.value}'" for kind in kinds)
        raise ParseError("unexpected '{}', expected one of: {}", [token, expected], location=token.location)

    # statements

    def parse(self):
        """Parses the whole token list into a top-level Block."""
        block = self.parse_block()
        self.expect(TokenKind.EOF)
        return block

    def parse_block(self):
        """Statements up to (not including) a closing brace or end of input. Stray semicolons are skipped."""
        location = self.peek().location
        statements = []
        while self.peek().kind not in (TokenKind.RBRACE, TokenKind.EOF):
            if self.match(TokenKind.SEMICOLON):
                continue
            statements.append(self.parse_line())
        return Block(statements, location)

    def parse_braced_block(self):
        self.expect(TokenKind.LBRACE)
        block = self.parse_block()
        self.expect(TokenKind.RBRACE)
        return block

    def parse_line(self):
        """A single statement, dispatched on its leading keyword."""
        kind = self.peek().kind
        if kind is TokenKind.IF:
            return self.parse_if()
        elif kind is TokenKind.WHILE:
            return self.parse_while()
        elif kind is TokenKind.FUNCTION:
            return self.parse_function()
        elif kind is TokenKind.RETURN:
            return self.parse_return()

        expr = self.parse_expr()
        self.expect(TokenKind.SEMICOLON)
        return expr

    def parse_line_or_block(self):
        if self.peek().kind is TokenKind.LBRACE:
            return self.parse_braced_block()
        return self.parse_line()

    def parse_condition(self):
        self.expect(TokenKind.LPAREN)
        condition = self.parse_expr()
        self.expect(TokenKind.RPAREN)
        return condition

    def parse_if(self):
        location = self.expect(TokenKind.IF).location
        condition = self.parse_condition()
        body = self.parse_line_or_block()

        orelse = None
        if self.match(TokenKind.ELSE):
            orelse = self.parse_line_or_block()  # `else if` is an If statement as the else body

        return If(condition, body, orelse, location)

    def parse_while(self):
        location = self.expect(TokenKind.WHILE).location
        condition = self.parse_condition()
        return While(condition, self.parse_line_or_block(), location)

    def parse_function(self):
        location = self.expect(TokenKind.FUNCTION).location
        name = self.expect(TokenKind.ID).text

        self.expect(TokenKind.LPAREN)
        params = []
        if not self.match(TokenKind.RPAREN):
            params.append(self.expect(TokenKind.ID).text)
            while self.match(TokenKind.COMMA):
                params.append(self.expect(TokenKind.ID).text)
            self.expect(TokenKind.RPAREN)

        if self.peek().kind is not TokenKind.LBRACE:
            raise ParseError("function '{}' must have a braced body", name, location=self.peek().location)

        return FunctionDef(name, params, self.parse_braced_block(), location)

    def parse_return(self):
        location = self.expect(TokenKind.RETURN).location
        value = None
        if self.peek().kind is not TokenKind.SEMICOLON:
            value = self.parse_expr()
        self.expect(TokenKind.SEMICOLON)
        return Return(value, location)

    # expressions

    def parse_expr(self):
        return self.parse_assign()

    def parse_assign(self):
        """Right-associative: `a = b = c` is `a = (b = c)`."""
        left = self.parse_binary(0)

        token = self.match(*ASSIGNMENTS)
        if token is None:
            return left

        if not isinstance(left, Identifier):
            raise ParseError("cannot assign to '{}', l-value must be a name", left.expr, location=token.location)

        return Assignment(left.name, self.parse_assign(), ASSIGNMENTS[token.kind], left.location)

    def parse_binary(self, level):
        """Left-associative chain for LEVELS[level]; the operands come from the next tighter level."""
        if level == len(LEVELS):
            return self.parse_unary()

        operators = LEVELS[level]
        node = self.parse_binary(level + 1)
        while self.peek().kind in operators:
            token = self.advance()
            node = operators[token.kind](token.text, node, self.parse_binary(level + 1), token.location)
        return node

    def parse_unary(self):
        token = self.match(*UNARY)
        if token is not None:
            return UnaryOp(token.text, self.parse_unary(), token.location)
        return self.parse_call()

    def parse_call(self):
        atom = self.parse_atom()

        token = self.match(TokenKind.LPAREN)
        if token is None:
            return atom

        if not isinstance(atom, Identifier):
            raise ParseError("'{}' is not callable, only names can be called", atom.expr, location=token.location)

        args = []
        if not self.match(TokenKind.RPAREN):
            args.append(self.parse_expr())
            while self.match(TokenKind.COMMA):
                args.append(self.parse_expr())
            self.expect(TokenKind.RPAREN)

        return Call(atom.name, args, atom.location)

    def parse_atom(self):
        token = self.peek()
        if self.match(TokenKind.ID):
            return Identifier(token.text, location=token.location)
        elif self.match(TokenKind.NUM):
            return Number(token.text, location=token.location)
        elif self.match(TokenKind.STR):
            return String(token.text, location=token.location)
        elif self.match(TokenKind.TRUE):
            return Number("1", location=token.location)
        elif self.match(TokenKind.FALSE):
            return Number("0", location=token.location)
        elif self.match(TokenKind.LPAREN):
            expr = self.parse_expr()
            self.expect(TokenKind.RPAREN)
            return expr

        self.unexpected(TokenKind.ID, TokenKind.NUM, TokenKind.STR, TokenKind.TRUE, TokenKind.FALSE, TokenKind.LPAREN)


def parse(tokens):
    """Shortcut for Parser(tokens).parse()."""
    return Parser(tokens).parse()
