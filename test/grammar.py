"""
Grammar behavioral tests (declarative option specifications).

Scope
- Validate line classification: invocation, leading comments, option lines,
  trailing comments, blank lines and CRLF input.
- Validate option line rules: brackets, flags, names, every type, initial values.
- Validate grammar errors: missing/unknown types, seq without delimiter, flag
  initial values, bad brackets, malformed flags, invalid initial values.

Conventions
- Test method names follow CamelCase per project convention.
- parse_line is exercised for elements, parse_spec for complete declarations.
"""

from __future__ import annotations

import os
import unittest
from unittest import TestCase

from clarg import Args, options, parse_line, parse_spec, HELP_FLAG
from clarg.faults import ConstructionError, GrammarError
from clarg.grammar import OptElem, FlagsAndTypeElem, RemainingElem, TypeElem

SPEC = """
java -cp ... foo
Some description
and a second line.
   -i | --in  | --input       string              Path to input file.
  [-o | --out | --output      string=/dev/null]   Path to output file.
  [-l | --log | --log-level   int=3]              Log level to use.
  [-p | --path                path]               Path elements separated by ':' (*nix) or ';' (Windows).
        --things              seq([-|])           String elements separated by '-' or '|'.
  [-q | --quiet               flag]               Suppress some verbose output.
  [-a | --anti                ~flag]              An "antiflag" (defaults to true).
                              [others]            Other stuff.
Comments after the options are shown at the end of the help.
And so on.
"""


class TestSpecLayout(TestCase):
    """Behavioral tests for the line classification of parse_spec."""

    def testInvocationAndComments(self):
        args = parse_spec(SPEC)
        self.assertEqual(args.program_invocation, "java -cp ... foo")
        self.assertEqual(args.leading_comments, "Some description and a second line.")
        self.assertEqual(
            args.trailing_comments,
            "Comments after the options are shown at the end of the help. And so on."
        )

    def testOptionsInOrder(self):
        args = parse_spec(SPEC)
        self.assertEqual(
            [opt.name for opt in args.opts],
            ["help", "input", "output", "log-level", "path", "things", "quiet", "anti", "others"],
        )

    def testDefaults(self):
        self.assertEqual(
            dict(parse_spec(SPEC).defaults),
            {"help": False, "output": "/dev/null", "log-level": 3, "quiet": False, "anti": True},
        )

    def testRequiredness(self):
        args = parse_spec(SPEC)
        self.assertEqual([opt.name for opt in args.required_options], ["input", "things"])
        self.assertFalse(args.remaining_opt.required)

    def testBlankInvocationWhenSpecStartsWithOptions(self):
        args = parse_spec("  [-q | --quiet flag]  Quiet.")
        self.assertEqual(args.program_invocation, "")
        self.assertEqual(args.leading_comments, "")

    def testEmptySpec(self):
        args = parse_spec("")
        self.assertEqual(args.opts[0], HELP_FLAG)
        self.assertEqual(len(args.opts), 2)

    def testCrLfAndBlankLines(self):
        args = parse_spec("prog\r\n\r\n   \r\n  [-x | --ex string]  Ex.\r\ndone\r\n")
        self.assertEqual(args.program_invocation, "prog")
        self.assertEqual(args.opts[1].help, "Ex.")
        self.assertEqual(args.trailing_comments, "done")

    def testCommentBetweenOptionsIsTrailing(self):
        args = parse_spec("prog\n  [-a flag]  A.\nmiddle\n  [-b flag]  B.\n")
        self.assertEqual(args.trailing_comments, "middle")
        self.assertEqual([opt.name for opt in args.opts], ["help", "a", "b", "remaining"])

    def testTwoFlaglessLinesRejected(self):
        with self.assertRaises(ConstructionError):
            parse_spec("prog\n  one  One.\n  [two]  Two.\n")

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            parse_spec(["  -a flag"])

    def testLinesAreLogged(self):
        with self.assertLogs("clarg.grammar", level="DEBUG") as logs:
            parse_spec("prog\n  [-a flag]  A.\n")
        self.assertEqual(len(logs.output), 1)

    def testParsedOptionsMatchBuilders(self):
        args = parse_spec(SPEC)
        expected = Args([
            options.string("input", ["-i", "--in", "--input"], help="Path to input file.", required=True),
            options.string("output", ["-o", "--out", "--output"], "/dev/null", "Path to output file."),
            options.int("log-level", ["-l", "--log", "--log-level"], 3, "Log level to use."),
            options.path("path", ["-p", "--path"], help="Path elements separated by ':' (*nix) or ';' (Windows)."),
            options.seq_string(
                "things", ["--things"], help="String elements separated by '-' or '|'.", required=True, delimiter="[-|]"
            ),
            options.flag("quiet", ["-q", "--quiet"], "Suppress some verbose output."),
            options.notflag("anti", ["-a", "--anti"], 'An "antiflag" (defaults to true).'),
            options.bare_tokens("others", "Other stuff."),
        ])
        self.assertEqual(args.opts, expected.opts)


class TestOptionLines(TestCase):
    """Behavioral tests for parse_line elements."""

    def testRequiredStringLine(self):
        self.assertEqual(
            parse_line("   -i | --in  | --input       string              Path to input file."),
            OptElem(False, FlagsAndTypeElem(("-i", "--in", "--input"), TypeElem("string", None, None)), "Path to input file."),
        )

    def testOptionalLineWithInitialValue(self):
        self.assertEqual(
            parse_line("  [-o | --out | --output      string=/dev/null]   Path to output file."),
            OptElem(True, FlagsAndTypeElem(("-o", "--out", "--output"), TypeElem("string", None, "/dev/null")), "Path to output file."),
        )

    def testPaddedBrackets(self):
        element = parse_line("[  -x|--ex   int=3  ]  Padded.")
        self.assertTrue(element.optional)
        self.assertEqual(element.body, FlagsAndTypeElem(("-x", "--ex"), TypeElem("int", None, "3")))
        self.assertEqual(element.help, "Padded.")

    def testFlagsWithoutSpaces(self):
        self.assertEqual(parse_line("-a|--bee|-c flag").body.flags, ("-a", "--bee", "-c"))

    def testSequenceDelimiter(self):
        self.assertEqual(parse_line("  --things  seq([-|])  Things.").body.type, TypeElem("seq", "[-|]", None))
        self.assertEqual(parse_line("  [--things  seq(:)=a:b]  Things.").body.type, TypeElem("seq", ":", "a:b"))

    def testRemainingLines(self):
        self.assertEqual(parse_line("    [others]    Other stuff."), OptElem(True, RemainingElem("others"), "Other stuff."))
        self.assertEqual(parse_line("  others  Other stuff."), OptElem(False, RemainingElem("others"), "Other stuff."))
        self.assertEqual(parse_line("  9_rest-x"), OptElem(False, RemainingElem("9_rest-x"), ""))

    def testHelpMayBeEmpty(self):
        self.assertEqual(parse_line("  [-q flag]").help, "")

    def testEveryType(self):
        for token in ("flag", "~flag", "string", "byte", "char", "int", "long", "float", "double", "path"):
            with self.subTest(token=token):
                self.assertEqual(parse_line(f"  [--v {token}]  V.").body.type.token, token)

    def testNameIsLastFlagWithoutDashes(self):
        args = parse_spec("prog\n  [-l | --log | --log-level int=3]  Log.\n  [--x | -y string]  Odd.\n")
        self.assertEqual([opt.name for opt in args.opts][1:3], ["log-level", "y"])

    def testTypedInitialValues(self):
        args = parse_spec(
            "prog\n"
            "  [-b byte=-3]  B.\n"
            "  [-c char=xyz]  C.\n"
            "  [-L long=9000000000]  L.\n"
            "  [-f float=1.5]  F.\n"
            "  [-d double=2.5e2]  D.\n"
            "  [-s seq(:)=a:b:c]  S.\n"
            f"  [-p path=a{os.pathsep}b]  P.\n"
        )
        self.assertEqual(
            dict(args.defaults),
            {"help": False, "b": -3, "c": "x", "L": 9000000000, "f": 1.5, "d": 250.0, "s": ("a", "b", "c"), "p": ("a", "b")},
        )


class TestGrammarErrors(TestCase):
    """Behavioral tests for rejected option lines."""

    def assertGrammarError(self, line, fragment):
        with self.assertRaises(GrammarError) as context:
            parse_spec("prog\n" + line + "\n")
        self.assertIn(fragment, context.exception.reason)
        self.assertEqual(context.exception.line, line)
        return context.exception

    def testMissingType(self):
        self.assertGrammarError("  [-a | --all]  All.", "missing type")
        self.assertGrammarError("  -a", "missing type")

    def testUnknownType(self):
        error = self.assertGrammarError("  [-a  bool]  All.", "unknown type 'bool'")
        self.assertEqual(error.column, 5)

    def testTypeMustEndAtBoundary(self):
        self.assertGrammarError("  [-a  stringy]  All.", "unknown type")
        self.assertGrammarError("  [-a  seq(:)x]  All.", "unexpected character")

    def testSeqWithoutDelimiter(self):
        self.assertGrammarError("  [-a  seq]  All.", "requires a delimiter")
        self.assertGrammarError("  [-a  seq()]  All.", "requires a delimiter")

    def testFlagInitialValueRejected(self):
        self.assertGrammarError("  [-a  flag=true]  All.", "does not take an initial value")
        self.assertGrammarError("  -a  ~flag=false  All.", "does not take an initial value")

    def testUnclosedBracket(self):
        self.assertGrammarError("  [-a  int  All.", "expected ']'")

    def testUnmatchedClosingBracket(self):
        error = self.assertGrammarError("   -i | --input string]  Path.", "unmatched ']'")
        self.assertEqual(error.column, 19)
        self.assertGrammarError("  others]  Other stuff.", "unmatched ']'")

    def testMalformedFlag(self):
        self.assertGrammarError("  [--  int]  All.", "malformed flag")
        self.assertGrammarError("  [-a | int]  All.", "expected a flag")

    def testMissingInitialValue(self):
        self.assertGrammarError("  [-a  int=]  All.", "missing initial value")

    def testInvalidInitialValue(self):
        error = self.assertGrammarError("  [-a  int=abc]  All.", "invalid initial value")
        self.assertIsInstance(error.__cause__, ValueError)

    def testInvalidSeqDelimiter(self):
        self.assertGrammarError("  [-a  seq([)]  All.", "not a valid regular expression")

    def testNotAFlagOrName(self):
        self.assertGrammarError("  [=x]  All.", "expected a flag or a name")

    def testGrammarErrorIsValueError(self):
        self.assertTrue(issubclass(GrammarError, ValueError))


if __name__ == "__main__":
    unittest.main()
