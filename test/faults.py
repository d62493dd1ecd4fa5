"""
Faults behavioral tests (codes, rendering, trigger, docs lookup).

Scope
- Validate FaultCode.normalize() with and without a host __codes__ mapping.
- Validate rich rendering of errors and warnings (plain and fancy).
- Validate trigger(): raise / warn outside shell mode, print / exit in shell mode.
- Validate copy.replace() keeps the fault type, message and cause.
- Validate getdoc() lookups through a host __docs__ mapping.

Conventions
- Test method names follow CamelCase per project convention.
- Host hooks are patched on __main__ with mock.patch.object(..., create=True).
"""

from __future__ import annotations

import contextlib
import copy
import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from sargparse import (
    FaultCode,
    ParserException,
    ParserWarning,
    MissingArgumentError,
    UnknownOptionWarning,
    trigger,
    getdoc,
)


def render(fault):
    console = Console(file=io.StringIO(), width=120)
    console.print(fault)
    return console.file.getvalue()


def patched(name, value):
    return mock.patch.object(sys.modules["__main__"], name, value, create=True)


class TestFaultCode(TestCase):
    """Behavioral tests for code normalization."""

    def testNumericByDefault(self):
        self.assertEqual(FaultCode.MISSING_ARGUMENT.normalize(), "21121")

    def testHostRelabel(self):
        with patched("__codes__", {FaultCode.MISSING_ARGUMENT: "E-MISSING"}):
            self.assertEqual(FaultCode.MISSING_ARGUMENT.normalize(), "E-MISSING")
            self.assertEqual(FaultCode.MALFORMED_TOKEN.normalize(), "21111")


class TestRendering(TestCase):
    """Behavioral tests for __rich__ rendering."""

    def testErrorHeaderAndHint(self):
        fault = MissingArgumentError(
            "missing required argument 'count'",
            prog="tool",
            title="missing required argument",
            code=FaultCode.MISSING_ARGUMENT,
            hint="pass it as -c or --count <integer>",
        )
        output = render(fault)
        self.assertIn("tool", output)
        self.assertIn("21121", output)
        self.assertIn("Missing Required Argument", output)
        self.assertIn("missing required argument 'count'", output)
        self.assertIn("→ pass it as -c or --count <integer>", output)

    def testWarningWithoutCode(self):
        output = render(UnknownOptionWarning("unknown option '--x' at first position is ignored", prog="tool"))
        self.assertIn("Warning", output)
        self.assertIn("unknown option '--x'", output)

    def testFancyUsesPanel(self):
        output = render(ParserException("boom", prog="tool", fancy=True))
        self.assertIn("╭", output)
        self.assertIn("boom", output)

    def testHostProgName(self):
        with patched("__prog__", "host"):
            self.assertIn("host", render(ParserException("boom")))

    def testExplicitProgBeatsHostProg(self):
        with patched("__prog__", "host"):
            output = render(ParserException("boom", prog="tool"))
        self.assertIn("tool", output)
        self.assertNotIn("host", output)

    def testStrIsMessage(self):
        self.assertEqual(str(ParserException("boom", code=FaultCode.MALFORMED_TOKEN)), "boom")


class TestReplace(TestCase):
    """Behavioral tests for copy.replace() support."""

    def testExceptionKeepsTypeMessageAndCause(self):
        fault = MissingArgumentError("missing", title="missing")
        fault.__cause__ = ValueError("inner")
        replaced = copy.replace(fault, prog="tool")
        self.assertIsInstance(replaced, MissingArgumentError)
        self.assertEqual(replaced.message, "missing")
        self.assertEqual(replaced.options["title"], "missing")
        self.assertEqual(replaced.options["prog"], "tool")
        self.assertIs(replaced.__cause__, fault.__cause__)

    def testWarningKeepsType(self):
        replaced = copy.replace(UnknownOptionWarning("unknown"), shell=True)
        self.assertIsInstance(replaced, UnknownOptionWarning)
        self.assertTrue(replaced.options["shell"])

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            ParserException("boom").options["prog"] = "tool"


class TestTrigger(TestCase):
    """Behavioral tests for trigger()."""

    def testRaisesOutsideShell(self):
        with self.assertRaises(MissingArgumentError) as context:
            trigger(MissingArgumentError("missing"), prog="tool")
        self.assertEqual(context.exception.options["prog"], "tool")

    def testWarnsOutsideShell(self):
        with self.assertWarns(UnknownOptionWarning):
            trigger(UnknownOptionWarning("unknown"), prog="tool")

    def testShellPrintsAndExits(self):
        with contextlib.redirect_stderr(io.StringIO()) as stderr, self.assertRaises(SystemExit) as context:
            trigger(MissingArgumentError("missing"), prog="tool", shell=True)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("missing", stderr.getvalue())

    def testShellWarningOnlyPrints(self):
        with contextlib.redirect_stderr(io.StringIO()) as stderr:
            trigger(ParserWarning("careful"), shell=True)
        self.assertIn("careful", stderr.getvalue())

    def testRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


class TestGetdoc(TestCase):
    """Behavioral tests for documentation lookup."""

    def testMissingDocs(self):
        self.assertIsNone(getdoc(FaultCode.UNKNOWN_OPTION))

    def testHostDocs(self):
        with patched("__docs__", {FaultCode.UNKNOWN_OPTION: "see the manual"}):
            self.assertEqual(getdoc(FaultCode.UNKNOWN_OPTION), "see the manual")

    def testRejectsNonCodes(self):
        with self.assertRaises(TypeError):
            getdoc(22111)


if __name__ == "__main__":
    unittest.main()
