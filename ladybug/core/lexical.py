r"""Lexical analysis for Ladybug: source text -> ordered token sequence. Whitespace and comments are elided.

Single left-to-right scan. In the SCAN state, the current character decides what is read next:

```
<identifier> ::= (<alpha> | "_") (<alnum> | "_")*   ; keywords are identifiers found in tokens.KEYWORDS
<number>     ::= <digit> (<digit> | ".")*           ; at most one ".", no exponent
<string>     ::= "'" <char>* "'" | '"' <char>* '"'  ; "\n" and "\t" escapes, "\<c>" is <c>
<special>    ::= longest entry of tokens.SPECIAL    ; "//" and "/*" enter a comment state instead
```

Comments are their own states: LINE_COMMENT runs to the end of the line, BLOCK_COMMENT runs to (and consumes) "*/".
"""

from enum import Enum

from ladybug.core.tokens import BLOCK_COMMENT, BLOCK_COMMENT_END, KEYWORDS, LINE_COMMENT, SPECIAL, Location, Token, \
    TokenKind
from ladybug.lang.error import LexError, UnterminatedStringError


class State(Enum):
    SCAN = 0
    LINE_COMMENT = 1
    BLOCK_COMMENT = 2


class Lexer:
    """Tokenizes one source text. Lexer objects are single-use: call tokenize once."""
    QUOTES = ("'", '"')
    ESCAPES = {"n": "\n", "t": "\t"}

    def __init__(self, source):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.state = State.SCAN
        self.tokens = []

    @property
    def char(self):
        """Current character, or "" at end of input."""
        return self.source[self.pos] if self.pos < len(self.source) else ""

    @property
    def location(self):
        return Location(self.line, self.column)

    def advance(self):
        """Consumes and returns the current character, keeping line/column up to date."""
        char = self.char
        self.pos += 1
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def tokenize(self):
        """Returns the full token list, terminated by a single EOF token. Raises LexError on the first bad lexeme."""
        while self.char:
            if self.state is State.LINE_COMMENT:
                self._skip_line_comment()
            elif self.state is State.BLOCK_COMMENT:
                self._skip_block_comment()
            else:
                self._scan()

        self.tokens.append(Token(TokenKind.EOF, "", self.location))
        return self.tokens

    def _scan(self):
        char = self.char
        if char.isalpha() or char == "_":
            self._identifier()
        elif char.isspace():
            self.advance()
        elif char.isdecimal():
            self._number()
        elif char in Lexer.QUOTES:
            self._string()
        else:
            self._special()

    def _identifier(self):
        start, text = self.location, ""
        while self.char and (self.char.isalnum() or self.char == "_"):
            text += self.advance()

        self.tokens.append(Token(KEYWORDS.get(text, TokenKind.ID), text, start))

    def _number(self):
        start, text = self.location, ""
        while self.char.isdecimal() or (self.char == "." and "." not in text):
            text += self.advance()

        self.tokens.append(Token(TokenKind.NUM, text, start))

    def _string(self):
        start = self.location
        quote = self.advance()

        text = ""
        while self.char != quote:
            if not self.char:
                raise UnterminatedStringError("unterminated string starting with {}", quote, location=start)

            char = self.advance()
            if char == "\\":
                if not self.char:
                    raise UnterminatedStringError("unterminated string starting with {}", quote, location=start)
                escaped = self.advance()
                char = Lexer.ESCAPES.get(escaped, escaped)
            text += char

        self.advance()  # closing quote
        self.tokens.append(Token(TokenKind.STR, text, start))

    def _special(self):
        """Maximal munch over tokens.SPECIAL, growing the match one character at a time."""
        start, text = self.location, ""
        while self.char and text + self.char in SPECIAL:
            text += self.advance()

        if not text:
            raise LexError("unexpected character '{}'", self.char, location=start)

        if text == LINE_COMMENT:
            self.state = State.LINE_COMMENT
        elif text == BLOCK_COMMENT:
            self.state = State.BLOCK_COMMENT
        elif SPECIAL[text] is TokenKind.INVALID:
            raise LexError("undefined token '{}'", text, location=start)
        else:
            self.tokens.append(Token(SPECIAL[text], text, start))

    def _skip_line_comment(self):
        if self.advance() == "\n":
            self.state = State.SCAN

    def _skip_block_comment(self):
        if self.source.startswith(BLOCK_COMMENT_END, self.pos):
            for __ in BLOCK_COMMENT_END:
                self.advance()
            self.state = State.SCAN
        else:
            self.advance()


def tokenize(source):
    """Shortcut for Lexer(source).tokenize()."""
    return Lexer(source).tokenize()
