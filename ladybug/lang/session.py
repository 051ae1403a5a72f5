"""Session control for Ladybug. Runs a script file, or the lines typed in command-line mode, against one evaluator so
that globals persist between runs.
"""

from ladybug.core.evaluator import Evaluator
from ladybug.core.lexical import tokenize
from ladybug.core.tokens import TokenKind
from ladybug.lang import prelude
from ladybug.lang.error import GenericException, LexError, UnterminatedStringError


class Session:
    """Governs a Ladybug session, with control over the evaluator's global frame and handles."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, stream=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.evaluator = Evaluator()
        prelude.install(self.evaluator, stream)

        self.to_exec = []  # list of sources to execute, in order
        self.results = []  # non-void values of executed sources (command-line mode only)

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    source = file.read()
            except OSError:
                raise GenericException("'{}' could not be opened", path)

            self.error_handler.register_file(path, source)
            if source.strip():
                self.add(source)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def preprocess_line(line, prev=""):
        """Joins line onto prev (an unfinished statement) and returns (line, add_to_prev). add_to_prev is True when
        the source has unclosed braces/parentheses/strings or does not end with ';' or '}', i.e. a continuation line
        is needed before it can run.
        """
        line = prev + "\n" + line if prev else line

        try:
            tokens = tokenize(line)[:-1]  # drop EOF
        except UnterminatedStringError:
            return line, True
        except LexError:
            return line, False  # run will report it

        if not tokens:
            return "", False  # blank, or comments only

        depth = 0
        for token in tokens:
            if token.kind in (TokenKind.LBRACE, TokenKind.LPAREN):
                depth += 1
            elif token.kind in (TokenKind.RBRACE, TokenKind.RPAREN):
                depth -= 1

        return line, depth > 0 or tokens[-1].kind not in (TokenKind.SEMICOLON, TokenKind.RBRACE)

    def add(self, source):
        """Queues source to be executed on the next run."""
        if not source.strip():
            raise ValueError("cannot add empty source")
        self.to_exec.append(source)

    def run(self):
        """Executes queued sources in order. Errors propagate: the error handler decides whether they are fatal."""
        while self.to_exec:
            source = self.to_exec.pop(0)
            if self.cmd_line:
                self.error_handler.register_file(self.path, source)

            result = self.evaluator.execute(source)
            if self.cmd_line and not result.is_void:
                self.results.append(result)

    def pop(self):
        """Pops the oldest result, formatted for display: strings are quoted."""
        result = self.results.pop(0)
        return repr(result.content) if result.is_str else result.content
