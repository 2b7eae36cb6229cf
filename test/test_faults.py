"""
Faults module behavioral tests (error taxonomy, sentences, rendering, triggers).

Scope
- Validate error identity: equality by tag and key, copy.replace() options.
- Validate default sentences, including the variants for unnamed values.
- Validate format_parsing_errors(): ordering, request filtering, mutex block.
- Validate rich rendering, ParseExit exit codes and trigger() outcomes.
- Validate __main__ hooks (__codes__, __docs__, __sentences__).

Conventions
- Test method names follow CamelCase per project convention.
- Rich output is captured with a colorless console.
"""

from __future__ import annotations

import copy
import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from clarion import faults
from clarion.faults import (
    BadFormatConversionError,
    BadFormatTokenError,
    BadVerbSelectedError,
    ErrorTag,
    HelpRequestedError,
    HelpVerbRequestedError,
    MissingRequiredOptionError,
    MissingValueOptionError,
    MutuallyExclusiveSetError,
    NoVerbSelectedError,
    ParseExit,
    RepeatedOptionError,
    SentenceBuilder,
    SequenceOutOfRangeError,
    SetValueExceptionError,
    UnknownOptionError,
    UnknownOptionWarning,
    VersionRequestedError,
    format_parsing_errors,
    getdoc,
    trigger,
)
from clarion.specs import NameInfo


def capture(renderable):
    console = Console(color_system=None, force_terminal=False, width=120)
    with console.capture() as captured:
        console.print(renderable)
    return captured.get().splitlines()


def main_hook(name, value):
    return mock.patch.object(sys.modules["__main__"], name, value, create=True)


class TestErrors(TestCase):
    """Behavioral tests for ParsingError identity."""

    def testEqualityByTagAndKey(self):
        self.assertEqual(BadFormatTokenError("x"), BadFormatTokenError("x"))
        self.assertNotEqual(BadFormatTokenError("x"), UnknownOptionError("x"))
        self.assertNotEqual(RepeatedOptionError(NameInfo("a", "")), RepeatedOptionError(NameInfo("b", "")))
        self.assertEqual(len({NoVerbSelectedError(), NoVerbSelectedError()}), 1)

    def testHelpVerbKey(self):
        self.assertEqual(HelpVerbRequestedError("add", matched=True), HelpVerbRequestedError("add", matched=True))
        self.assertNotEqual(HelpVerbRequestedError("add", matched=True), HelpVerbRequestedError())

    def testArgumentTypesChecked(self):
        with self.assertRaises(TypeError):
            BadFormatTokenError(3)  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            MissingValueOptionError("x")  # type: ignore[arg-type]

    def testReplaceKeepsIdentity(self):
        error = UnknownOptionError("--nope")
        clone = copy.replace(error, prog="demo")
        self.assertEqual(clone, error)
        self.assertEqual(clone.options["prog"], "demo")
        self.assertNotIn("prog", error.options)

    def testStopsProcessing(self):
        self.assertTrue(BadVerbSelectedError("push").stops_processing)
        self.assertTrue(VersionRequestedError().stops_processing)
        self.assertFalse(BadFormatTokenError("x").stops_processing)

    def testStrIsMessage(self):
        self.assertEqual(str(NoVerbSelectedError()), "No verb selected.")


class TestSentences(TestCase):
    """Behavioral tests for the default error sentences."""

    def testNamedSentences(self):
        name = NameInfo("n", "num")
        cases = (
            (BadFormatTokenError("-"), "Token '-' is not recognized."),
            (UnknownOptionError("zz"), "Option 'zz' is unknown."),
            (MissingValueOptionError(name), "Option 'n, num' has no value."),
            (MissingRequiredOptionError(name), "Required option 'n, num' is missing."),
            (BadFormatConversionError(name), "Option 'n, num' is defined with a bad format."),
            (SequenceOutOfRangeError(name), "A sequence option 'n, num' has a number of items out of the allowed range."),
            (RepeatedOptionError(name), "Option 'n, num' is defined multiple times."),
            (MutuallyExclusiveSetError(name, "out"), "Option 'n, num' is defined along with an incompatible one."),
            (SetValueExceptionError(name, ValueError("boom")), "Error setting value to option 'n, num': boom"),
            (BadVerbSelectedError("push"), "Verb 'push' is not recognized."),
        )
        for error, message in cases:
            with self.subTest(tag=error.tag.name):
                self.assertEqual(error.message, message)

    def testUnnamedValueSentences(self):
        self.assertEqual(
            MissingRequiredOptionError(NameInfo.EMPTY).message,
            "A required value not bound to option name is missing.",
        )
        self.assertEqual(
            BadFormatConversionError(NameInfo.EMPTY).message,
            "A value not bound to option name is defined with a bad format.",
        )
        self.assertEqual(
            SequenceOutOfRangeError(NameInfo.EMPTY).message,
            "A sequence value not bound to option name has a number of items out of the allowed range.",
        )

    def testRequestsHaveNoSentence(self):
        for error in (HelpRequestedError(), HelpVerbRequestedError(), VersionRequestedError()):
            with self.subTest(tag=error.tag.name):
                self.assertEqual(error.message, "")

    def testSentenceTemplatesFromMain(self):
        with main_hook("__sentences__", {ErrorTag.UNKNOWN_OPTION: "no such option: {token}"}):
            self.assertEqual(UnknownOptionError("zz").message, "no such option: zz")
            self.assertEqual(BadFormatTokenError("-").message, "Token '-' is not recognized.")

    def testCustomBuilder(self):
        class Terse(SentenceBuilder):
            def format_error(self, error, /):
                return error.tag.name

        with mock.patch.object(faults, "sentences", Terse()):
            self.assertEqual(NoVerbSelectedError().message, "NO_VERB_SELECTED")


class TestFormatParsingErrors(TestCase):
    """Behavioral tests for format_parsing_errors()."""

    @staticmethod
    def renderer(error):
        key = getattr(error, "token", None)
        if key is None:
            key = getattr(error, "name", NameInfo.EMPTY).text or error.tag.name.lower().replace("_", "-")
        return f"ERR {key}"

    @staticmethod
    def mutex_renderer(errors):
        return "\n".join(f"MUTEX {error.name.text} ({error.set})" for error in errors)

    def testOrderAndFiltering(self):
        errors = (
            BadFormatTokenError("badtoken"),
            MutuallyExclusiveSetError(NameInfo("a", ""), "out"),
            MissingValueOptionError(NameInfo("x", "switch")),
            HelpRequestedError(),
            UnknownOptionError("unknown"),
            MissingRequiredOptionError(NameInfo("", "missing")),
            MutuallyExclusiveSetError(NameInfo("b", ""), "out"),
            SequenceOutOfRangeError(NameInfo("s", "sequence")),
            VersionRequestedError(),
            NoVerbSelectedError(),
            BadVerbSelectedError("badverb"),
            HelpVerbRequestedError(),
        )
        text = format_parsing_errors(errors, self.renderer, self.mutex_renderer, 2)
        self.assertEqual(text.split("\n"), [
            "  ERR badtoken",
            "  ERR x, switch",
            "  ERR unknown",
            "  ERR missing",
            "  ERR s, sequence",
            "  ERR no-verb-selected",
            "  ERR badverb",
            "  MUTEX a (out)",
            "  MUTEX b (out)",
        ])

    def testOnlyRequests(self):
        self.assertEqual(format_parsing_errors((HelpRequestedError(), VersionRequestedError())), "")
        self.assertEqual(format_parsing_errors(()), "")

    def testDefaultRenderers(self):
        errors = (UnknownOptionError("zz"), MutuallyExclusiveSetError(NameInfo("a", "all"), "out"))
        self.assertEqual(format_parsing_errors(errors), "\n".join((
            "Option 'zz' is unknown.",
            "Option 'a, all' is defined along with an incompatible one.",
        )))

    def testIndentMustBeNonNegative(self):
        with self.assertRaises(ValueError):
            format_parsing_errors((), indent=-1)


class TestRendering(TestCase):
    """Behavioral tests for rich rendering of faults."""

    def testErrorRendering(self):
        error = BadFormatTokenError("-", prog="demo", colorful=False)
        self.assertEqual(capture(error), [
            "[ demo — 11101 | Malformed Token ]",
            "Token '-' is not recognized.",
            " → options are spelled -x, -xVALUE, --name or --name=value",
        ])

    def testCustomHint(self):
        error = NoVerbSelectedError(prog="git", colorful=False, hint="try 'git help'")
        self.assertEqual(capture(error)[-1], " → try 'git help'")

    def testCodesFromMain(self):
        with main_hook("__codes__", {ErrorTag.UNKNOWN_OPTION: "E-UNKNOWN"}):
            self.assertEqual(ErrorTag.UNKNOWN_OPTION.normalize(), "E-UNKNOWN")
            self.assertEqual(ErrorTag.BAD_FORMAT_TOKEN.normalize(), "11101")
            header = capture(UnknownOptionError("zz", prog="demo", colorful=False))[0]
        self.assertEqual(header, "[ demo — E-UNKNOWN | Unknown Option ]")

    def testGroupRendering(self):
        fault = ParseExit((UnknownOptionError("zz"),), prog="demo", colorful=False)
        lines = capture(fault)
        self.assertEqual(lines[0], "[ demo — Parse Failure ]")
        self.assertEqual(lines[1], "[ demo — 11102 | Unknown Option ]")
        self.assertEqual(lines[2], "Option 'zz' is unknown.")

    def testWarningRendering(self):
        warning = UnknownOptionWarning("Option 'zz' is unknown.", prog="demo", colorful=False)
        self.assertEqual(capture(warning), [
            "[ demo — 12101 | Unknown Option Ignored ]",
            "Option 'zz' is unknown.",
        ])


class TestTriggers(TestCase):
    """Behavioral tests for ParseExit and trigger()."""

    def testExitCode(self):
        self.assertEqual(ParseExit((HelpRequestedError(),)).exit_code, 0)
        self.assertEqual(ParseExit((HelpRequestedError(), UnknownOptionError("zz"))).exit_code, 1)

    def testTriggerRaises(self):
        with self.assertRaises(ParseExit) as context:
            trigger(ParseExit((UnknownOptionError("zz"),)))
        self.assertEqual(list(context.exception.exceptions), [UnknownOptionError("zz")])

    def testTriggerShellExits(self):
        stream = io.StringIO()
        with mock.patch.object(faults, "console", Console(file=stream, color_system=None, width=120)):
            with self.assertRaises(SystemExit) as context:
                trigger(ParseExit((UnknownOptionError("zz"),)), shell=True, prog="demo")
        self.assertEqual(context.exception.code, 1)
        self.assertIn("Option 'zz' is unknown.", stream.getvalue())

    def testTriggerWarns(self):
        with self.assertWarns(UnknownOptionWarning):
            trigger(UnknownOptionWarning("Option 'zz' is unknown."))

    def testTriggerWarningInShell(self):
        stream = io.StringIO()
        with mock.patch.object(faults, "console", Console(file=stream, color_system=None, width=120)):
            trigger(UnknownOptionWarning("Option 'zz' is unknown."), shell=True, prog="demo")
        self.assertIn("Unknown Option Ignored", stream.getvalue())

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))


class TestDocs(TestCase):
    """Behavioral tests for getdoc()."""

    def testMissingDoc(self):
        with main_hook("__docs__", {}):
            self.assertIsNone(getdoc(ErrorTag.NO_VERB_SELECTED))

    def testDocFromMain(self):
        with main_hook("__docs__", {ErrorTag.NO_VERB_SELECTED: "A verb must come first."}):
            self.assertEqual(getdoc(ErrorTag.NO_VERB_SELECTED), "A verb must come first.")

    def testTagRequired(self):
        with self.assertRaises(TypeError):
            getdoc(11402)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
