"""Error handling for the Ladybug language. Only GenericExceptions should be encountered during running: if another
type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Taxonomy:
    - LexError: unexpected character, undefined token, unterminated string
    - ParseError: unexpected token, invalid assignment target, malformed call/function syntax
    - LadybugRuntimeError: undefined name, type mismatch, arity mismatch, handle collision, handle failure
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw a Ladybug error. `{}` slots in msg are filled in with
    exprs, which are bolded when the error is displayed.
    """

    def __init__(self, msg, exprs=None, location=None, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.template = msg
        self.exprs = [str(expr) for expr in exprs]
        self.location = location  # core.tokens.Location of offending token/node, if known
        self.internal = internal

        super().__init__(msg.format(*self.exprs))

    @property
    def msg(self):
        """Message with expr snippets colored."""
        return self.template.format(*(colored(expr, attrs=["bold"]) for expr in self.exprs))


class LexError(GenericException):
    """Raised by the lexer on characters/sequences that do not form a token."""


class UnterminatedStringError(LexError):
    """Raised when input ends inside a string literal. The shell uses it to ask for a continuation line."""


class ParseError(GenericException):
    """Raised by the parser on the first malformed construct. There is no recovery."""


class LadybugRuntimeError(GenericException):
    """Raised by the evaluator (or on behalf of a handle) while a script is executing."""


class ErrorHandler:
    """Context manager that will silently suppress Python errors and print custom Ladybug errors."""
    ERROR = "red"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream
        self.sources = {}  # dict of path: source text, used to display offending lines
        self.current = None

    def register_file(self, path, source=""):
        """Registers path (and its source) for error display. Marks path as the current file."""
        self.sources[path] = source
        self.current = path

    def _print(self, text):
        print(text, file=self.stream if self.stream is not None else sys.stdout)

    @staticmethod
    def diagnose(line, column):
        """Returns line with the offending column highlighted, followed by a caret underneath it."""
        start = max(column - 1, 0)
        end = start + 1

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^", ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Prints error using the registered sources. error must be a GenericException. Exits if self.fatal."""
        error_msg = ""
        line = None

        if error.location is not None and self.current is not None:
            lines = self.sources.get(self.current, "").splitlines()
            if 0 < error.location.line <= len(lines):
                line = lines[error.location.line - 1]
            error_msg += colored(f"{self.current}:{error.location}: ", attrs=["bold"])

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        self._print(error_msg)

        if not error.internal and line is not None:
            self._print(ErrorHandler.diagnose(line, error.location.column))

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(LadybugRuntimeError("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
