"""
Clarion parsing errors, warnings and their rendering.

Scope
- ErrorTag: stable numeric identifiers for every parsing error, grouped by
  domain (tokens, options, constraints, verbs, requests, warnings).
- ParsingError: the flat error taxonomy. Errors are accumulated, never raised,
  while a parse runs; each carries the offending token text or the option's
  NameInfo, and compares equal by (tag, token|name).
- ParsingWarning: soft conditions surfaced through the warnings module.
- ParseExit: an ExceptionGroup over the errors of one failed parse, raised by
  ParseResult.unwrap() or printed by trigger() in shell mode.
- SentenceBuilder: the English text of every error and help sentence.
- format_parsing_errors(): error list → indented text block for help output.

Integration
- Errors know how to render themselves with rich (__rich__) and can be
  adjusted with copy.replace(error, **options) (prog, colorful, fancy, shell).
- Hosts may customize presentation from __main__:
  • __styles__:    palette overrides for rich rendering.
  • __codes__:     ErrorTag → label used instead of the numeric code.
  • __docs__:      ErrorTag → short documentation string (see getdoc()).
  • __sentences__: ErrorTag → message template, formatted with the error's
    token, name, set, verb and exception fields.
"""
import copy
import os.path
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .specs import NameInfo
from .utils import Unset, coalesce

console = Console(stderr=True)


class ErrorTag(IntEnum):
    """
    canonical error tags (stable identifiers).

    grouping
    - tokens (111xx): BAD_FORMAT_TOKEN, UNKNOWN_OPTION
    - options (112xx): MISSING_VALUE_OPTION, BAD_FORMAT_CONVERSION,
      REPEATED_OPTION, SET_VALUE_EXCEPTION
    - constraints (113xx): MISSING_REQUIRED_OPTION, MUTUALLY_EXCLUSIVE_SET,
      SEQUENCE_OUT_OF_RANGE
    - verbs (114xx): BAD_VERB_SELECTED, NO_VERB_SELECTED
    - requests (115xx): HELP_REQUESTED, HELP_VERB_REQUESTED, VERSION_REQUESTED
    - warnings (121xx): UNKNOWN_OPTION_IGNORED
    """
    # --- token errors (111xx) ---
    BAD_FORMAT_TOKEN        = 11101
    UNKNOWN_OPTION          = 11102

    # --- option errors (112xx) ---
    MISSING_VALUE_OPTION    = 11201
    BAD_FORMAT_CONVERSION   = 11202
    REPEATED_OPTION         = 11203
    SET_VALUE_EXCEPTION     = 11204

    # --- constraint errors (113xx) ---
    MISSING_REQUIRED_OPTION = 11301
    MUTUALLY_EXCLUSIVE_SET  = 11302
    SEQUENCE_OUT_OF_RANGE   = 11303

    # --- verb errors (114xx) ---
    BAD_VERB_SELECTED       = 11401
    NO_VERB_SELECTED        = 11402

    # --- requests (115xx) ---
    HELP_REQUESTED          = 11501
    HELP_VERB_REQUESTED     = 11502
    VERSION_REQUESTED       = 11503

    # --- warnings (121xx) ---
    UNKNOWN_OPTION_IGNORED  = 12101

    def normalize(self):
        """
        return the host-normalized label for this tag.

        __main__.__codes__ may map tags to friendlier labels; otherwise the
        numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


# Tags that mean "render help" rather than "the command line is wrong".
REQUESTS = frozenset({
    ErrorTag.HELP_REQUESTED,
    ErrorTag.HELP_VERB_REQUESTED,
    ErrorTag.VERSION_REQUESTED,
})


def _styler(options, defaults, /):
    # returns text(fragment, style) -> Text, honouring colorful= and __main__.__styles__
    palette = defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))
    colorful = options.get("colorful", True)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        return Text(str(fragment), palette[style] if colorful else "")

    return text


def _prog(options, /):
    main = __import__("__main__")
    return getattr(main, "__prog__", options.get("prog") or os.path.basename(sys.argv[0]) or "clarion")


class ParsingError(Exception):
    """
    Base of every parsing error.

    Class attributes
    - tag: ErrorTag of the concrete error.
    - title: short lowercase title used in rendered headers.
    - hint: default one-line advice shown under the message.
    - stops_processing: True when parsing stops as soon as the error occurs.

    Instance
    - options: read-only rendering options (prog, colorful, fancy, shell, hint, ...).
    - message: the sentence for this error (see SentenceBuilder).
    """
    tag = Unset
    title = "parsing error"
    hint = "run with --help to see the accepted options"
    stops_processing = False

    def __init__(self, /, **options):
        self.options = MappingProxyType(options)
        super().__init__()

    def _key(self):
        return ()

    def __eq__(self, other):
        if not isinstance(other, ParsingError):
            return NotImplemented
        return self.tag == other.tag and self._key() == other._key()

    def __hash__(self):
        return hash((self.tag, self._key()))

    def __repr__(self):
        return f"{type(self).__name__}({", ".join(map(repr, self._key()))})"

    def __str__(self):
        return self.message

    @property
    def message(self):
        return sentences.format_error(self)

    def __rich__(self):
        text = _styler(self.options, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), "prog-name"),
            " — ",
            text(self.tag.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.options.get("hint", self.hint), "hint"))

        if self.options.get("fancy", False):
            return Panel(Group(message, hint), title=header, title_align="left")
        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        clone = type(self).__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone.options = MappingProxyType({**self.options, **overrides})
        return clone


class TokenError(ParsingError):
    """
    Error about a raw token (carries token text).
    """

    def __init__(self, token, /, **options):
        if not isinstance(token, str):
            raise TypeError(f"{type(self).__name__} token must be a string")
        self.token = token
        super().__init__(**options)

    def _key(self):
        return (self.token,)


class NamedError(ParsingError):
    """
    Error about a descriptor (carries its NameInfo).
    """

    def __init__(self, name, /, **options):
        if not isinstance(name, NameInfo):
            raise TypeError(f"{type(self).__name__} name must be a name-info")
        self.name = name
        super().__init__(**options)

    def _key(self):
        return (self.name,)


class BadFormatTokenError(TokenError):
    tag = ErrorTag.BAD_FORMAT_TOKEN
    title = "malformed token"
    hint = "options are spelled -x, -xVALUE, --name or --name=value"


class UnknownOptionError(TokenError):
    tag = ErrorTag.UNKNOWN_OPTION
    title = "unknown option"


class MissingValueOptionError(NamedError):
    tag = ErrorTag.MISSING_VALUE_OPTION
    title = "missing option value"
    hint = "pass a value right after the option, or inline as --name=value"


class BadFormatConversionError(NamedError):
    tag = ErrorTag.BAD_FORMAT_CONVERSION
    title = "bad value format"
    hint = "check the value against the type the option expects"


class RepeatedOptionError(NamedError):
    tag = ErrorTag.REPEATED_OPTION
    title = "repeated option"
    hint = "pass the option once; only sequences accept repetitions"


class SetValueExceptionError(NamedError):
    tag = ErrorTag.SET_VALUE_EXCEPTION
    title = "value rejected"
    hint = "the converter of this option failed unexpectedly"

    def __init__(self, name, exception, /, **options):
        self.exception = exception
        super().__init__(name, **options)


class MissingRequiredOptionError(NamedError):
    tag = ErrorTag.MISSING_REQUIRED_OPTION
    title = "missing required option"


class MutuallyExclusiveSetError(NamedError):
    tag = ErrorTag.MUTUALLY_EXCLUSIVE_SET
    title = "incompatible options"
    hint = "pass at most one option of the same set"

    def __init__(self, name, set="", /, **options):
        self.set = set
        super().__init__(name, **options)


class SequenceOutOfRangeError(NamedError):
    tag = ErrorTag.SEQUENCE_OUT_OF_RANGE
    title = "sequence out of range"
    hint = "check how many values the sequence accepts"


class BadVerbSelectedError(TokenError):
    tag = ErrorTag.BAD_VERB_SELECTED
    title = "unknown verb"
    hint = "run 'help' to list the available verbs"
    stops_processing = True


class NoVerbSelectedError(ParsingError):
    tag = ErrorTag.NO_VERB_SELECTED
    title = "no verb"
    hint = "run 'help' to list the available verbs"
    stops_processing = True


class HelpRequestedError(ParsingError):
    tag = ErrorTag.HELP_REQUESTED
    title = "help requested"
    stops_processing = True


class HelpVerbRequestedError(ParsingError):
    """
    Help for the verb index (verb is None) or for one verb (matched is True).
    """
    tag = ErrorTag.HELP_VERB_REQUESTED
    title = "help requested"
    stops_processing = True

    def __init__(self, verb=None, /, matched=False, **options):
        self.verb = verb
        self.matched = bool(matched)
        super().__init__(**options)

    def _key(self):
        return (self.verb, self.matched)


class VersionRequestedError(ParsingError):
    tag = ErrorTag.VERSION_REQUESTED
    title = "version requested"
    stops_processing = True


class ParsingWarning(ABC, Warning):
    """
    Base of soft parsing conditions; emitted through the warnings module, or
    printed with rich in shell mode.
    """
    tag = Unset
    title = "parsing warning"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    def __rich__(self):
        text = _styler(self.options, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
        })

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), "prog-name"),
            " — ",
            text(self.tag.normalize(), "code"),
            " | ",
            text(self.title.title(), "warning-title"),
            " ]"
        )
        return Group(header, text(self.message, "warning-message"))

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=3)
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionWarning(ParsingWarning):
    tag = ErrorTag.UNKNOWN_OPTION_IGNORED
    title = "unknown option ignored"


class ParseExit(ExceptionGroup[ParsingError]):
    """
    The errors of one failed parse, as a single raisable/printable fault.

    exit_code is 0 when every error is a help/version request, 1 otherwise.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "parse failure", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("parse failure", tuple(exceptions))
        self.options = MappingProxyType(options)

    @property
    def exit_code(self):
        return 0 if all(error.tag in REQUESTS for error in self.exceptions) else 1

    def __rich__(self):
        text = _styler(self.options, {
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        })

        header = Text.assemble("[ ", text(_prog(self.options), "prog-name"), " — ", text(self.message.title(), "title"), " ]")
        renders = [copy.replace(error, **self.options) for error in self.exceptions]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(self.exit_code)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


class SentenceBuilder:
    """
    English sentences for errors and help entries.

    Subclass and install an instance as clarion.faults.sentences to change
    the wording globally, or provide __main__.__sentences__ templates to
    override single tags.
    """

    def required_word(self):
        return "Required."

    def errors_heading(self):
        return "ERROR(S):"

    def help_command_text(self, option):
        return "Display this help screen." if option else "Display more information on a specific command."

    def version_command_text(self, option):
        return "Display version information."

    def format_error(self, error, /):
        templates = getattr(__import__("__main__"), "__sentences__", {})
        if (template := templates.get(error.tag)) is not None:
            return template.format(
                token=getattr(error, "token", ""),
                name=getattr(error, "name", NameInfo.EMPTY).text,
                set=getattr(error, "set", ""),
                verb=getattr(error, "verb", None) or "",
                exception=getattr(error, "exception", ""),
            )

        match error.tag:
            case ErrorTag.BAD_FORMAT_TOKEN:
                return f"Token '{error.token}' is not recognized."
            case ErrorTag.MISSING_VALUE_OPTION:
                return f"Option '{error.name.text}' has no value."
            case ErrorTag.UNKNOWN_OPTION:
                return f"Option '{error.token}' is unknown."
            case ErrorTag.MISSING_REQUIRED_OPTION:
                if not error.name.text:
                    return "A required value not bound to option name is missing."
                return f"Required option '{error.name.text}' is missing."
            case ErrorTag.BAD_FORMAT_CONVERSION:
                if not error.name.text:
                    return "A value not bound to option name is defined with a bad format."
                return f"Option '{error.name.text}' is defined with a bad format."
            case ErrorTag.SEQUENCE_OUT_OF_RANGE:
                if not error.name.text:
                    return "A sequence value not bound to option name has a number of items out of the allowed range."
                return f"A sequence option '{error.name.text}' has a number of items out of the allowed range."
            case ErrorTag.REPEATED_OPTION:
                return f"Option '{error.name.text}' is defined multiple times."
            case ErrorTag.MUTUALLY_EXCLUSIVE_SET:
                return f"Option '{error.name.text}' is defined along with an incompatible one."
            case ErrorTag.SET_VALUE_EXCEPTION:
                return f"Error setting value to option '{error.name.text}': {error.exception}"
            case ErrorTag.BAD_VERB_SELECTED:
                return f"Verb '{error.token}' is not recognized."
            case ErrorTag.NO_VERB_SELECTED:
                return "No verb selected."
            case ErrorTag.HELP_REQUESTED | ErrorTag.HELP_VERB_REQUESTED | ErrorTag.VERSION_REQUESTED:
                return ""
        raise ValueError(f"unknown error tag {error.tag!r}")

    def format_mutually_exclusive_set_errors(self, errors, /):
        return "\n".join(self.format_error(error) for error in errors)


sentences = SentenceBuilder()


def format_parsing_errors(errors, renderer=Unset, mutex_renderer=Unset, indent=0):
    """
    Render parsing errors as a text block, one error per line.

    behavior
    - help/version requests are dropped (they are not usage mistakes).
    - every other non-mutex error becomes indent spaces + renderer(error),
      in the order the errors were reported.
    - mutually exclusive errors are handed to mutex_renderer as one list; each
      line of its text is indented and appended after the other errors.
    - an empty string is returned when nothing meaningful remains.

    defaults
    - renderer: sentences.format_error
    - mutex_renderer: sentences.format_mutually_exclusive_set_errors
    """
    renderer = coalesce(renderer, sentences.format_error)
    mutex_renderer = coalesce(mutex_renderer, sentences.format_mutually_exclusive_set_errors)
    if not isinstance(indent, int) or indent < 0:
        raise ValueError("format_parsing_errors() 'indent' must be a non-negative integer")

    lines = []
    mutex = []
    for error in errors:
        if error.tag in REQUESTS:
            continue
        if error.tag is ErrorTag.MUTUALLY_EXCLUSIVE_SET:
            mutex.append(error)
            continue
        lines.append(" " * indent + renderer(error))

    if mutex:
        lines.extend(" " * indent + line for line in mutex_renderer(mutex).splitlines() if line)

    return "\n".join(lines)


def trigger(fault, /, **options):
    """
    surface a fault (error group or warning) with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__.
    - options are merged into the fault before triggering; with shell=True the
      fault is printed with rich to stderr (errors then exit), otherwise it is
      raised (errors) or warned (warnings).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(tag, /):
    """
    optional documentation for an error tag, from __main__.__docs__ (None when absent).
    """
    if not isinstance(tag, ErrorTag):
        raise TypeError("getdoc() argument must be an error-tag")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[tag]
    except KeyError:
        return None


__all__ = (
    "ErrorTag",
    "ParsingError",
    "TokenError",
    "NamedError",
    "BadFormatTokenError",
    "UnknownOptionError",
    "MissingValueOptionError",
    "BadFormatConversionError",
    "RepeatedOptionError",
    "SetValueExceptionError",
    "MissingRequiredOptionError",
    "MutuallyExclusiveSetError",
    "SequenceOutOfRangeError",
    "BadVerbSelectedError",
    "NoVerbSelectedError",
    "HelpRequestedError",
    "HelpVerbRequestedError",
    "VersionRequestedError",
    "ParsingWarning",
    "UnknownOptionWarning",
    "ParseExit",
    "SentenceBuilder",
    "sentences",
    "format_parsing_errors",
    "trigger",
    "getdoc",
)
