"""Handles interactive/command-line mode for the Ladybug interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Ladybug interpreter shell."""
    intro = "Ladybug interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def onecmd(self, line):
        """Every non-empty line is source (or a continuation of it), except the help/exit commands."""
        if not self._tmp_line and line.strip() in ("help", "exit", "EOF"):
            return super().onecmd(line.strip())
        if not line.strip() and not self._tmp_line:
            return self.emptyline()
        return self.default(line)

    def default(self, line):
        """Executes arbitrary Ladybug source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return
            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if not line:
                return

            self.sess.add(line)
            try:
                self.sess.run()
            finally:
                self.sess.to_exec.clear()  # a failed line is not retried

            while self.sess.results:
                print(self.sess.pop())

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Ladybug interpreter!\n\n"
              "Ladybug is a small dynamically-typed scripting language with numbers, strings,\n"
              "if/else, while loops and functions. Statements end with ';'.\n\n"
              "Try it out by typing 'function sq(x) { return x * x; }', then 'sq(4);'.\n"
              "Globals persist between lines. Built-in handles: print, str, num, len.\n\n"
              "A line that ends with ';' or a closing '}' runs right away, so an 'else' must\n"
              "go on the same line as the end of its 'if' body: 'if (x) { a; } else {'.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
