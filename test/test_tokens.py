"""
Tokens module behavioral tests (classification and cursor contract).

Scope
- Validate classify(): numeric literals and bare dash are values, dashes
  select long options and short groups.
- Validate ArgumentCursor: positioning, peek/is_last, over-read and the
  single-step push_back rollback.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from clarion.tokens import ArgumentCursor, CursorError, TokenKind, classify, isvalue


class TestClassify(TestCase):
    """Behavioral tests for classify()."""

    def testLongOption(self):
        self.assertIs(classify("--verbose"), TokenKind.LONG_OPTION)
        self.assertIs(classify("--output=file.txt"), TokenKind.LONG_OPTION)

    def testShortGroup(self):
        self.assertIs(classify("-x"), TokenKind.SHORT_GROUP)
        self.assertIs(classify("-xyz"), TokenKind.SHORT_GROUP)
        self.assertIs(classify("-ifile"), TokenKind.SHORT_GROUP)

    def testNegativeNumbersAreValues(self):
        for token in ("-1", "-12.5", "+3", "-.5", "10.", "0"):
            with self.subTest(token=token):
                self.assertIs(classify(token), TokenKind.VALUE)

    def testBareDashIsValue(self):
        self.assertIs(classify("-"), TokenKind.VALUE)

    def testPlainTokensAreValues(self):
        for token in ("file.txt", "", "a-b", "value=1"):
            with self.subTest(token=token):
                self.assertIs(classify(token), TokenKind.VALUE)

    def testNumberLikeButNotNumeric(self):
        self.assertIs(classify("-1x"), TokenKind.SHORT_GROUP)
        self.assertIs(classify("-1e5"), TokenKind.SHORT_GROUP)

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            classify(1)  # type: ignore[arg-type]

    def testIsValueNone(self):
        self.assertFalse(isvalue(None))
        self.assertTrue(isvalue("x"))
        self.assertFalse(isvalue("--x"))


class TestArgumentCursor(TestCase):
    """Behavioral tests for ArgumentCursor."""

    def testCurrentBeforeAdvanceFails(self):
        cursor = ArgumentCursor(["a"])
        with self.assertRaises(CursorError):
            cursor.current()

    def testAdvanceAndPeek(self):
        cursor = ArgumentCursor(["a", "b"])
        self.assertEqual(cursor.peek(), "a")
        self.assertTrue(cursor.advance())
        self.assertEqual(cursor.current(), "a")
        self.assertEqual(cursor.peek(), "b")
        self.assertFalse(cursor.is_last())
        self.assertTrue(cursor.advance())
        self.assertTrue(cursor.is_last())
        self.assertIsNone(cursor.peek())

    def testAdvanceAtEndReturnsFalse(self):
        cursor = ArgumentCursor(["a"])
        cursor.advance()
        self.assertFalse(cursor.advance())
        self.assertFalse(cursor.advance())

    def testPushBackAfterOverRead(self):
        cursor = ArgumentCursor(["a"])
        cursor.advance()
        self.assertFalse(cursor.advance())
        self.assertTrue(cursor.push_back())
        self.assertEqual(cursor.current(), "a")

    def testPushBackRestoresPreviousToken(self):
        cursor = ArgumentCursor(["a", "-b"])
        cursor.advance()
        cursor.advance()
        self.assertTrue(cursor.push_back())
        self.assertEqual(cursor.current(), "a")
        self.assertTrue(cursor.advance())
        self.assertEqual(cursor.current(), "-b")

    def testPushBackTwiceFails(self):
        cursor = ArgumentCursor(["a", "b"])
        cursor.advance()
        cursor.advance()
        cursor.push_back()
        with self.assertRaises(CursorError):
            cursor.push_back()

    def testPushBackWithoutAdvanceFails(self):
        with self.assertRaises(CursorError):
            ArgumentCursor(["a"]).push_back()

    def testRemaining(self):
        cursor = ArgumentCursor(["a", "b", "c"])
        self.assertEqual(cursor.remaining(), ("a", "b", "c"))
        cursor.advance()
        self.assertEqual(cursor.remaining(), ("b", "c"))

    def testEmptyVector(self):
        cursor = ArgumentCursor([])
        self.assertFalse(cursor.advance())
        self.assertIsNone(cursor.peek())

    def testNonStringTokensRejected(self):
        with self.assertRaises(TypeError):
            ArgumentCursor(["a", 1])  # type: ignore[list-item]


if __name__ == "__main__":
    unittest.main()
