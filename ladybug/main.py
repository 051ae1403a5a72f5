"""Runs Ladybug .lb files, or starts command-line mode. Also uses error handling context manager. Installed as the
`ladybug` console script.
"""

import argparse
import sys

from ladybug.lang.error import ErrorHandler
from ladybug.lang.session import Session
from ladybug.lang.shell import Shell


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="ladybug", description="Ladybug scripting language interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--recursion-limit", type=int, default=None,
                        help="Python recursion limit, bounds how deeply scripts can nest calls")
    return parser.parse_args(argv)


def main(argv=None):
    """Runs the Ladybug interpreter."""
    with ErrorHandler() as error_handler:
        args = parse_args(argv)

        if args.recursion_limit is not None:
            sys.setrecursionlimit(args.recursion_limit)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False)
            sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()


if __name__ == "__main__":
    main()
