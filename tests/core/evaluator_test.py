import unittest

from ladybug.core.evaluator import Evaluator
from ladybug.core.stack import VOID, Value, ValueKind
from ladybug.lang.error import LadybugRuntimeError, LexError, ParseError


def num(content):
    return Value(ValueKind.NUM, content)


def run(source):
    return Evaluator().execute(source)


FIB = "function fib(x) { if (x > 2) return fib(x - 1) + fib(x - 2); return 1; }"


class ExpressionTestCase(unittest.TestCase):

    def test_arithmetic(self):
        cases = {
            "2 + 3;": "5",
            "10 - 20;": "-10",
            "2.5 * 2;": "5",
            "1 / 4;": "0.25",
            "7 % 3;": "1",
            "-7 % 3;": "-1",
            "7.5 % 2;": "1.5",
            "2 + 3 * 4;": "14",
            "(2 + 3) * 4;": "20",
            "-(2);": "-2",
            "-0;": "0",
            "1 / 0;": "inf",
            "-1 / 0;": "-inf",
            "0 / 0;": "nan",
            "5 % 0;": "nan",
            "2.50;": "2.50",
        }
        for case, expected in cases.items():
            self.assertEqual(num(expected), run(case), case)

    def test_strings(self):
        self.assertEqual(Value.string("ab"), run('"a" + "b";'))
        self.assertEqual(Value.string("line\n"), run("'line' + '\\n';"))

        should_raise = ['"a" + 1;', '1 + "a";', '"a" - "b";', '"a" * 2;', '-"a";', '"a" < "b";', '1 >= "1";']
        for case in should_raise:
            self.assertRaises(LadybugRuntimeError, run, case)

    def test_comparison(self):
        cases = {
            '1 == "1";': "0",
            '1 != "1";': "1",
            '"a" == "a";': "1",
            '"a" != "b";': "1",
            "1 == 1.0;": "1",
            "0 / 0 == 0 / 0;": "0",
            "1 < 2;": "1",
            "2 <= 2;": "1",
            "3 > 4;": "0",
            "3 >= 4;": "0",
            "true == 1;": "1",
        }
        for case, expected in cases.items():
            self.assertEqual(num(expected), run(case), case)

    def test_logical(self):
        cases = {
            "1 && 2;": "1",
            "1 && 0;": "0",
            "0 || 0;": "0",
            "0 || 'x';": "1",
            "!0;": "1",
            "!5;": "0",
            "!'';": "0",
            "!!3;": "1",
        }
        for case, expected in cases.items():
            self.assertEqual(num(expected), run(case), case)

    def test_short_circuit(self):
        self.assertEqual(num("0"), run("function f() { return 1 / 0; } 0 && f();"))

        calls = []
        evaluator = Evaluator()
        evaluator.register_handle("probe", lambda args: calls.append(args))

        evaluator.execute("0 && probe(); 1 || probe();")
        self.assertEqual([], calls)

        evaluator.execute("1 && probe(); 0 || probe();")
        self.assertEqual(2, len(calls))

    def test_assignment(self):
        cases = {
            "a = b = 3; a;": num("3"),
            "a = 1; a += 2; a;": num("3"),
            "a = 1; a *= 3; a /= 2; a;": num("1.5"),
            "a = 7; a %= 4; a -= 1; a;": num("2"),
            "a = 'x'; a += 'y'; a;": Value.string("xy"),
            "(a) = 4;": num("4"),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

        should_raise = ["b += 1;", "a = 'x'; a -= 'y';", "a = 'x'; a += 1;", "function f() {} f += 1;"]
        for case in should_raise:
            self.assertRaises(LadybugRuntimeError, run, case)

    def test_names(self):
        should_raise = ["nope;", "nope();", "x = 1; x();", "function f() {} f;", "function f() {} x = f;",
                        "function f(a) { return a; } function g() {} f(g);"]
        for case in should_raise:
            self.assertRaises(LadybugRuntimeError, run, case)


class StatementTestCase(unittest.TestCase):

    def test_if(self):
        cases = {
            "if (1) x = 1; else x = 2; x;": "1",
            "if (0) x = 1; else x = 2; x;": "2",
            "if ('') x = 1; else x = 2; x;": "1",
            "if (0.0) x = 1; else x = 2; x;": "2",
            "x = 3; if (0) x = 1; x;": "3",
            "n = 5; if (n < 0) s = -1; else if (n == 0) s = 0; else s = 1; s;": "1",
        }
        for case, expected in cases.items():
            self.assertEqual(num(expected), run(case), case)

    def test_while(self):
        self.assertEqual(num("10"), run("i = 0; s = 0; while (i < 5) { s += i; i += 1; } s;"))
        self.assertEqual(num("0"), run("i = 0; while (0) i = 1; i;"))
        self.assertEqual(VOID, run("i = 0; while (i < 3) i += 1;"))

    def test_last_value(self):
        self.assertEqual(VOID, run(""))
        self.assertEqual(VOID, run("function f() {}"))
        self.assertEqual(num("2"), run("1; 2;"))
        self.assertEqual(num("5"), run("return 5; 6;"))

    def test_fresh_instances(self):
        self.assertEqual(run("2 + 3;"), run("2 + 3;"))
        self.assertEqual(num("5"), run("2 + 3;"))

    def test_state_persists(self):
        evaluator = Evaluator()
        evaluator.execute("x = 1; function inc(v) { return v + 1; }")
        evaluator.execute("x = inc(x);")
        self.assertEqual(num("2"), evaluator.lookup("x"))
        self.assertRaises(LadybugRuntimeError, evaluator.lookup, "inc")
        self.assertRaises(LadybugRuntimeError, evaluator.lookup, "nope")


class FunctionTestCase(unittest.TestCase):

    def test_fib(self):
        self.assertEqual(num("34"), run(FIB + " fib(9);"))
        self.assertEqual(num("1"), run(FIB + " fib(1);"))

    def test_pass_by_value(self):
        evaluator = Evaluator()
        result = evaluator.execute("function f(x) { x = x + 1; return x; } y = 5; f(y);")
        self.assertEqual(num("6"), result)
        self.assertEqual(num("5"), evaluator.lookup("y"))

    def test_scope(self):
        cases = {
            "x = 1; function f() { x = 2; return x; } f(); x;": num("1"),
            "x = 1; function f() { x = 2; return x; } f();": num("2"),
            "g = 10; function f() { return g; } f();": num("10"),
            "function f(a, b) { return a - b; } f(5, 3);": num("2"),
            "a = 1; function f(a) { return a; } f(7);": num("7"),
            "function f() { function g() { return 2; } return g(); } f();": num("2"),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

        self.assertRaises(LadybugRuntimeError, run, "function f() { function g() {} } f(); g();")
        self.assertRaises(LadybugRuntimeError, run, "function f() { local = 1; } f(); local;")

    def test_returns(self):
        cases = {
            "function f() { 1; } f();": VOID,
            "function f() { return; } f();": VOID,
            "function f() { return 'r'; 2; } f();": Value.string("r"),
            "function first(n) { i = 0; while (1) { if (i == n) return i; i += 1; } } first(3);": num("3"),
            "function f(x) { if (x) { if (x > 1) { return 'big'; } } return 'small'; } f(2);": Value.string("big"),
            "function f(x) { if (x) { if (x > 1) { return 'big'; } } return 'small'; } f(1);": Value.string("small"),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_arity(self):
        evaluator = Evaluator()
        evaluator.execute("function g(a) { return a; }")
        self.assertRaises(LadybugRuntimeError, evaluator.execute, "g(1, 2);")
        self.assertRaises(LadybugRuntimeError, evaluator.execute, "g();")
        self.assertEqual(num("1"), evaluator.execute("g(1);"))

    def test_no_hoisting(self):
        self.assertRaises(LadybugRuntimeError, run, "f(); function f() {}")

    def test_error_unwinds_frames(self):
        evaluator = Evaluator()
        self.assertRaises(LadybugRuntimeError, evaluator.execute, "x = 1; function bad() { return 1 + 'a'; } bad();")
        self.assertEqual(1, evaluator.stack.depth)
        self.assertEqual(num("1"), evaluator.lookup("x"))
        self.assertEqual(num("2"), evaluator.execute("x + 1;"))

    def test_unbounded_recursion(self):
        evaluator = Evaluator()
        self.assertRaises(LadybugRuntimeError, evaluator.execute, "function r() { return r(); } r();")
        self.assertEqual(1, evaluator.stack.depth)
        self.assertIn("sys.setrecursionlimit", Evaluator.__doc__)


class HandleTestCase(unittest.TestCase):

    def setUp(self):
        self.evaluator = Evaluator()
        self.received = []

        def echo(args):
            self.received.append(args)
            return args[0] if args else None

        self.evaluator.register_handle("echo", echo)

    def test_call(self):
        self.assertEqual(num("3"), self.evaluator.execute("echo(1 + 2);"))
        self.assertEqual(VOID, self.evaluator.execute("echo();"))
        self.evaluator.execute("x = 7; echo(x, 's');")
        self.assertEqual([num("7"), Value.string("s")], self.received[-1])

    def test_reserved(self):
        should_raise = ["function echo() {}", "echo = 1;", "echo += 1;", "echo;", "x = echo;"]
        for case in should_raise:
            self.assertRaises(LadybugRuntimeError, self.evaluator.execute, case)
        self.assertNotIn("echo", self.evaluator.stack.globals)

    def test_registration(self):
        self.assertRaises(LadybugRuntimeError, self.evaluator.register_handle, "echo", lambda args: None)

        self.evaluator.execute("taken = 1;")
        self.assertRaises(LadybugRuntimeError, self.evaluator.register_handle, "taken", lambda args: None)

    def test_reentrant_execute(self):
        self.evaluator.register_handle("nested", lambda args: self.evaluator.execute("1;"))

        self.assertEqual(num("7"), self.evaluator.execute("function f(x) { nested(); return x; } f(7);"))
        self.assertEqual(1, self.evaluator.stack.depth)

        self.evaluator.register_handle("peek", lambda args: self.evaluator.execute("local;"))
        result = self.evaluator.execute("function g() { local = 'seen'; return peek(); } g();")
        self.assertEqual(Value.string("seen"), result)
        self.assertEqual(1, self.evaluator.stack.depth)

    def test_handle_priority(self):
        self.evaluator.execute("function f() { return echo('inner'); }")
        self.assertEqual(Value.string("inner"), self.evaluator.execute("f();"))

    def test_failures(self):
        def broken(args):
            raise ValueError("boom")

        self.evaluator.register_handle("broken", broken)
        self.evaluator.register_handle("bad_return", lambda args: 5)

        self.assertRaises(LadybugRuntimeError, self.evaluator.execute, "broken();")
        self.assertRaises(LadybugRuntimeError, self.evaluator.execute, "bad_return();")

        try:
            self.evaluator.execute("broken();")
        except LadybugRuntimeError as error:
            self.assertIsInstance(error.__cause__, ValueError)


class ErrorTaxonomyTestCase(unittest.TestCase):

    def test_kinds(self):
        self.assertRaises(LexError, run, "x = #;")
        self.assertRaises(ParseError, run, "x = ;")
        self.assertRaises(LadybugRuntimeError, run, "x;")

    def test_parse_error_runs_nothing(self):
        evaluator = Evaluator()
        self.assertRaises(ParseError, evaluator.execute, "x = 1; y = ;")
        self.assertRaises(LadybugRuntimeError, evaluator.lookup, "x")


if __name__ == '__main__':
    unittest.main()
