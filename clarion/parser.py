"""
Clarion parser: the entry points tying every stage together.

Pipeline (one call to Parser.parse)
1. verb routing, when the schema is a Verbs map (see clarion.verbs).
2. matching: every token is classified and handed to the long-option,
   short-group or positional matcher; a help/version request stops here.
3. constraints: required → mutually exclusive → sequence ranges.
4. result: Success(values, ...) when no error was recorded, else
   Failure(errors, ...). With a help_writer configured, failures also print
   the auto-built help screen to it.

Every call builds its own registry and context; Parser instances and
schemas are read-only, so one parser may serve concurrent parses.

Settings (keyword arguments of Parser/parse)
- case_sensitive=True, mutually_exclusive=False, culture=Culture.INVARIANT,
  ignore_unknown=False, dash_dash=False, auto_help=True, auto_version=True,
  help_writer=None (rich Console), width=80, heading=Unset, copyright=Unset.
"""
from collections import namedtuple
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .constraints import enforce
from .converters import Binder, Culture
from .faults import *
from .faults import REQUESTS
from .help import CopyrightInfo, HeadingInfo, auto_build
from .matchers import *
from .specs import Schema, Verbs
from .tokens import ArgumentCursor, TokenKind, classify
from .utils import Unset, coalesce
from .verbs import VerbRouter

Settings = namedtuple("Settings", (
    "case_sensitive",
    "mutually_exclusive",
    "culture",
    "ignore_unknown",
    "dash_dash",
    "auto_help",
    "auto_version",
    "help_writer",
    "width",
    "heading",
    "copyright",
))

_DEFAULTS = {
    "case_sensitive": True,
    "mutually_exclusive": False,
    "culture": Culture.INVARIANT,
    "ignore_unknown": False,
    "dash_dash": False,
    "auto_help": True,
    "auto_version": True,
    "help_writer": None,
    "width": 80,
    "heading": Unset,
    "copyright": Unset,
}


def _sanitize_settings(settings, /):
    """
    Internal: validate parser settings and fill in the defaults.

    - flags must be booleans; culture a Culture; help_writer None or a rich Console.
    - width: integer of at least 20 columns.
    - heading/copyright: Unset, strings, HeadingInfo or CopyrightInfo.
    """
    if unknown := sorted(settings.keys() - _DEFAULTS.keys()):
        raise TypeError(f"parser got an unexpected setting {unknown[0]!r}")

    settings = _DEFAULTS | settings

    for name in ("case_sensitive", "mutually_exclusive", "ignore_unknown", "dash_dash", "auto_help", "auto_version"):
        if not isinstance(settings[name], bool):
            raise TypeError(f"parser {name!r} must be a boolean")

    if not isinstance(settings["culture"], Culture):
        raise TypeError("parser 'culture' must be a culture")

    if not isinstance(settings["help_writer"], Console | None):
        raise TypeError("parser 'help_writer' must be a rich console")

    if not isinstance(width := settings["width"], int) or isinstance(width, bool):
        raise TypeError("parser 'width' must be an integer")
    elif width < 20:
        raise ValueError("parser 'width' must be at least 20 columns")

    if not isinstance(settings["heading"], str | HeadingInfo | Unset):
        raise TypeError("parser 'heading' must be a string or a heading-info")
    if not isinstance(settings["copyright"], str | CopyrightInfo | Unset):
        raise TypeError("parser 'copyright' must be a string or a copyright-info")

    return Settings(**settings)


class ParseResult:
    """
    Outcome of one parse; never mutated after creation.

    Attributes
    - values: read-only mapping dest → bound value (defaults and zero values
      included). On failure it only holds what was bound before failing.
    - errors: tuple of ParsingError, empty on success.
    - schema: the Schema or Verbs the parse ran against.
    - verb: the selected Verb, or None.
    - remainder: positional tokens no value slot accepted.
    """

    def __init__(self, values, schema, /, verb=None, errors=(), remainder=()):
        self._values = MappingProxyType(dict(values))
        self._schema = schema
        self._verb = verb
        self._errors = tuple(errors)
        self._remainder = tuple(remainder)

    values = property(lambda self: self._values)
    schema = property(lambda self: self._schema)
    verb = property(lambda self: self._verb)
    errors = property(lambda self: self._errors)
    remainder = property(lambda self: self._remainder)

    @property
    def ok(self):
        return not self._errors

    def __bool__(self):
        return self.ok

    def __repr__(self):
        return f"{type(self).__name__}(values={dict(self._values)!r}, errors={list(self._errors)!r})"

    def __rich_repr__(self):
        yield "values", dict(self._values)
        yield "errors", list(self._errors)
        yield "verb", getattr(self._verb, "name", None)
        yield "remainder", list(self._remainder)

    def unwrap(self, **options):
        return self._values


class Success(ParseResult):

    def __init__(self, values, schema, /, verb=None, remainder=()):
        super().__init__(values, schema, verb=verb, remainder=remainder)


class Failure(ParseResult):
    """
    A failed parse. unwrap() surfaces the errors as a ParseExit.
    """

    def __init__(self, errors, schema, /, verb=None, values=Unset):
        if not errors:
            raise ValueError("failure requires at least one error")
        super().__init__(coalesce(values, {}), schema, verb=verb, errors=errors)

    @property
    def exit_code(self):
        return 0 if all(error.tag in REQUESTS for error in self._errors) else 1

    def unwrap(self, **options):
        """
        Raise ParseExit, or with shell=True print it with rich and exit.
        """
        trigger(ParseExit(self._errors), **options)


class Parser:
    """
    Reusable parser configured once with settings (see module notes).

    Example
        >>> parser = Parser(case_sensitive=False, mutually_exclusive=True)
        >>> result = parser.parse(["-x", "--name=value"], schema)
    """

    def __init__(self, **settings):
        self._settings = _sanitize_settings(settings)

    @property
    def settings(self):
        return self._settings

    def __repr__(self):
        return f"parser({", ".join(f"{name}={value!r}" for name, value in self._settings._asdict().items())})"

    def parse(self, args, schema, /):
        """
        Parse an argument vector against a Schema or a Verbs map.
        """
        if isinstance(args, str):
            raise TypeError("parse() 'args' must be a sequence of strings, not a string")
        args = tuple(args)
        for arg in args:
            if not isinstance(arg, str):
                raise TypeError("parse() 'args' must contain strings only")

        if isinstance(schema, Verbs):
            router = VerbRouter(
                schema,
                case_sensitive=self._settings.case_sensitive,
                auto_help=self._settings.auto_help,
                auto_version=self._settings.auto_version,
            )
            verb, rest, error = router.route(args)
            if error is not None:
                result = Failure((error,), schema)
            else:
                result = self._run(rest, verb.schema, schema, verb)
        elif isinstance(schema, Schema):
            result = self._run(args, schema, schema, None)
        else:
            raise TypeError("parse() 'schema' must be a schema or verbs")

        if self._settings.help_writer is not None and not result.ok:
            self._report(result)
        return result

    def _run(self, args, active, schema, verb, /):
        context = Context(active, self._settings)
        cursor = ArgumentCursor(args)
        literal = False

        while cursor.advance():
            token = cursor.current()
            if literal:
                match_value(cursor, context, literal=True)
                continue
            if token == "--" and self._settings.dash_dash:
                literal = True
                continue

            match classify(token):
                case TokenKind.LONG_OPTION:
                    match_long_option(cursor, context)
                case TokenKind.SHORT_GROUP:
                    match_short_group(cursor, context)
                case _:
                    match_value(cursor, context)

            if context.halted is not None:
                return Failure((context.halted,), schema, verb=verb, values=context.values())

        enforce(context)
        if context.errors:
            return Failure(context.errors, schema, verb=verb, values=context.values())
        return Success(context.values(), schema, verb=verb, remainder=context.remainder)

    def _report(self, result, /):
        settings = self._settings
        heading = coalesce(settings.heading, HeadingInfo.default())

        if any(error.tag is ErrorTag.VERSION_REQUESTED for error in result.errors):
            return settings.help_writer.print(Text(str(heading)))

        settings.help_writer.print(auto_build(
            result,
            heading=heading,
            copyright=settings.copyright,
            width=settings.width,
            auto_help=settings.auto_help,
            auto_version=settings.auto_version,
        ))


def parse(args, schema, /, **settings):
    """
    Parse args against schema with a one-off Parser(**settings).
    """
    return Parser(**settings).parse(args, schema)


def unparse(values, schema, /, *, culture=Culture.INVARIANT):
    """
    Format bound values back into an argument vector.

    - positional values come first, in index order, up to the first unbound one.
    - options follow in declaration order, as --long=value (or -sVALUE without
      a long name); a switch bound to True is its bare name, one bound to False
      is "--long=false" (ValueError for a short-only switch); sequences repeat
      their values or join them with their separator.
    - values equal to the descriptor's default (or zero value) are skipped.

    Parsing the result against the same schema yields the same values, as
    long as no string value reads like an option.
    """
    if not isinstance(schema, Schema):
        raise TypeError("unparse() 'schema' must be a schema")
    binder = Binder(culture)
    args = []

    def pristine(descriptor, bound):
        return bound == coalesce(descriptor.default, binder.zero(descriptor))

    positional = []
    for value in schema.values:
        if (bound := values.get(value.dest)) is None:
            break
        positional.append((value, bound))
    while positional and pristine(*positional[-1]) and not positional[-1][0].required:
        positional.pop()

    for value, bound in positional:
        if value.sequence:
            args.extend(binder.format(value, item) for item in bound)
        else:
            args.append(binder.format(value, bound))

    for option in schema.options:
        if option.dest not in values:
            continue
        bound = values[option.dest]
        if bound is None or pristine(option, bound) and not option.required:
            continue

        if option.switch:
            if bound:
                args.append(f"--{option.long}" if option.long else f"-{option.short}")
            elif option.long:
                args.append(f"--{option.long}=false")
            else:
                raise ValueError(f"unparse() cannot express {option.short!r} as false without a long name")
            continue

        items = bound if option.sequence else (bound,)
        texts = [binder.format(option, item) for item in items]
        if option.sequence and not option.separator:
            args.append(f"--{option.long}" if option.long else f"-{option.short}")
            args.extend(texts)
        elif option.long:
            args.append(f"--{option.long}={(option.separator or "").join(texts)}")
        else:
            args.append(f"-{option.short}{(option.separator or "").join(texts)}")

    return args


__all__ = (
    "Settings",
    "ParseResult",
    "Success",
    "Failure",
    "Parser",
    "parse",
    "unparse",
)
