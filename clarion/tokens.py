r"""
Clarion token classification and argument cursor.

Scope
- classify(): decide, without any schema knowledge, whether one raw argument
  reads as a long option, a short option group or a plain value.
- ArgumentCursor: the sequential view over the argument vector used by the
  matchers, with a single step of rollback.

Classification rules (first match wins)
- numeric literal (sign, digits, optional decimal point) → VALUE, so negative
  numbers can be passed as positional values or option values.
- a bare "-" → VALUE (conventionally stdin/stdout).
- "--…" → LONG_OPTION.
- "-…" → SHORT_GROUP.
- anything else, the empty string included → VALUE.

Cursor contract
- The cursor starts before the first token: current() fails until advance()
  succeeded once.
- advance() never raises. Stepping past the last token returns False and is
  remembered as an over-read, so a greedy scan can always push it back.
- push_back() undoes exactly one advance(). Calling it twice in a row, or
  before any advance(), is a programming error (CursorError).
"""
import re
from enum import Enum

_NUMERIC = re.compile(r"[-+]?(\d+(\.\d*)?|\.\d+)")


class TokenKind(Enum):
    """
    kinds of raw tokens, see classify().
    """
    LONG_OPTION = "long-option"
    SHORT_GROUP = "short-group"
    VALUE = "value"


def classify(token, /):
    """
    Classify one raw argument string. Pure function.

    Examples
    - classify("--output=x") -> TokenKind.LONG_OPTION
    - classify("-vx")        -> TokenKind.SHORT_GROUP
    - classify("-12.5")      -> TokenKind.VALUE
    - classify("-")          -> TokenKind.VALUE
    """
    if not isinstance(token, str):
        raise TypeError("classify() argument must be a string")
    if _NUMERIC.fullmatch(token) or token == "-":
        return TokenKind.VALUE
    if token.startswith("--"):
        return TokenKind.LONG_OPTION
    if token.startswith("-"):
        return TokenKind.SHORT_GROUP
    return TokenKind.VALUE


def isvalue(token, /):
    """
    Shortcut for classify(token) is TokenKind.VALUE; None is never a value.
    """
    return token is not None and classify(token) is TokenKind.VALUE


class CursorError(RuntimeError):
    """
    Raised on cursor misuse (reading before positioning, unbalanced rollback).
    """


class ArgumentCursor:
    """
    One-directional iterator over an argument vector with one-token rollback.

    The position starts at -1 (before the first token) and may reach
    len(tokens) (one past the end) after an over-reading advance().
    """

    def __init__(self, tokens, /):
        self._tokens = tuple(tokens)
        for token in self._tokens:
            if not isinstance(token, str):
                raise TypeError("argument-cursor tokens must be strings")
        self._position = -1
        self._rewindable = False

    def __len__(self):
        return len(self._tokens)

    def __repr__(self):
        return f"argument-cursor(position={self._position}, tokens={list(self._tokens)!r})"

    @property
    def position(self):
        return self._position

    def current(self):
        if not 0 <= self._position < len(self._tokens):
            raise CursorError("argument-cursor is not positioned on a token")
        return self._tokens[self._position]

    def peek(self):
        """
        Return the token after the current one, or None at the end.
        """
        if self._position + 1 < len(self._tokens):
            return self._tokens[self._position + 1]
        return None

    def is_last(self):
        return self._position + 1 >= len(self._tokens)

    def advance(self):
        if self._position >= len(self._tokens):
            # Already past the end; nothing left to over-read.
            self._rewindable = False
            return False
        self._position += 1
        self._rewindable = True
        return self._position < len(self._tokens)

    def push_back(self):
        if not self._rewindable:
            raise CursorError("argument-cursor can only push back a single prior advance")
        self._position -= 1
        self._rewindable = False
        return True

    def remaining(self):
        """
        Return the tokens after the current position as a tuple.
        """
        return self._tokens[self._position + 1:]


__all__ = (
    "TokenKind",
    "classify",
    "isvalue",
    "CursorError",
    "ArgumentCursor",
)
