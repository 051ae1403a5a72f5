"""Token types shared by the Ladybug lexer and parser."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Location:
    """1-based position of a token's first character in source text."""
    line: int
    column: int

    def __str__(self):
        return f"{self.line}:{self.column}"


class TokenKind(Enum):
    # literals
    ID = "identifier"
    NUM = "number"
    STR = "string"

    # keywords
    IF = "if"
    ELSE = "else"
    WHILE = "while"
    FUNCTION = "function"
    RETURN = "return"
    TRUE = "true"
    FALSE = "false"

    # operators
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    ASSIGN = "="
    PLUS_ASSIGN = "+="
    MINUS_ASSIGN = "-="
    STAR_ASSIGN = "*="
    SLASH_ASSIGN = "/="
    PERCENT_ASSIGN = "%="
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    AND = "&&"
    OR = "||"
    NOT = "!"

    # delimiters
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    COMMA = ","
    SEMICOLON = ";"

    EOF = "end of input"
    INVALID = "invalid"  # prefix of a token that is not a token on its own


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    location: Location

    def __str__(self):
        return self.text if self.kind is not TokenKind.EOF else self.kind.value


KEYWORDS = {
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
    "function": TokenKind.FUNCTION,
    "return": TokenKind.RETURN,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
}

# comment-start lexemes: matched like any operator, but switch the lexer's state instead of producing a token
LINE_COMMENT = "//"
BLOCK_COMMENT = "/*"
BLOCK_COMMENT_END = "*/"

# every proper non-empty prefix of an entry must itself be an entry (maximal munch never backtracks)
SPECIAL = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "%": TokenKind.PERCENT,
    "=": TokenKind.ASSIGN,
    "+=": TokenKind.PLUS_ASSIGN,
    "-=": TokenKind.MINUS_ASSIGN,
    "*=": TokenKind.STAR_ASSIGN,
    "/=": TokenKind.SLASH_ASSIGN,
    "%=": TokenKind.PERCENT_ASSIGN,
    "==": TokenKind.EQ,
    "!=": TokenKind.NE,
    "<": TokenKind.LT,
    "<=": TokenKind.LE,
    ">": TokenKind.GT,
    ">=": TokenKind.GE,
    "&": TokenKind.INVALID,
    "&&": TokenKind.AND,
    "|": TokenKind.INVALID,
    "||": TokenKind.OR,
    "!": TokenKind.NOT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    LINE_COMMENT: None,
    BLOCK_COMMENT: None,
}
