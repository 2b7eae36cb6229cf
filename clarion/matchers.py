r"""
Clarion matchers: the token-consuming half of a parse.

What this module provides
- Context: all mutable state of one parse (registry bits, bound values,
  accumulated errors, free value slots, surplus tokens). One Context per
  parse; nothing here is shared between parses.
- match_long_option(): "--name" and "--name=value".
- match_short_group(): "-x", "-xVALUE" and packed switches "-xyz".
- match_value(): positional tokens into value slots, by index.

Consumption rules
- switch (bool, not a sequence): presence binds True and consumes nothing
  else; "--switch=text" converts text as a boolean.
- scalar: an attached value ("--name=v", "-nv") is used as-is; otherwise the
  next token is consumed when it reads as a value, else MissingValueOption.
- sequence: with a separator, the attached value (or the next value token)
  is split on it; without one, value tokens are taken greedily up to 'max'
  by over-reading one token and pushing it back. No value at all is
  MissingValueOption.
- a short group walks its characters: switches bind True, the first
  non-switch takes the rest of the token as its value, and an unknown
  character ends the group with UnknownOption.
- a repeated non-sequence option still consumes its value but keeps the
  first one (RepeatedOption); repeated sequences keep accumulating.

Nothing here raises on bad input: every problem becomes an error appended to
Context.errors in encounter order.
"""
from collections import deque

from .converters import Binder
from .faults import *
from .registry import OptionRegistry
from .tokens import isvalue
from .utils import Unset, fold


class Context:
    """
    Per-parse state shared by the matchers and the constraint pass.

    Attributes
    - registry: OptionRegistry over the schema's options.
    - binder: Binder for the configured culture.
    - errors: accumulated ParsingError list (encounter order).
    - halted: the request error that stopped processing, or None.
    - remainder: positional tokens no value slot accepted.
    """

    def __init__(self, schema, settings, /):
        self.schema = schema
        self.settings = settings
        self.registry = OptionRegistry(schema.options, case_sensitive=settings.case_sensitive)
        self.binder = Binder(settings.culture)
        self.errors = []
        self.halted = None
        self.remainder = []
        self._bound = {}
        self._present = set()
        self._slots = deque(schema.values)

    def matched(self, descriptor, /):
        return descriptor in self._present or self.registry.matched(descriptor)

    def count(self, descriptor, /):
        """
        Number of elements bound to a sequence descriptor so far.
        """
        return len(self._bound.get(descriptor.dest, ()))

    def _mark(self, descriptor, /):
        if descriptor in self.schema.options:
            return self.registry.mark(descriptor)
        if descriptor in self._present:
            return False
        self._present.add(descriptor)
        return True

    def bind_switch(self, option, /):
        if not self._mark(option):
            return self.errors.append(RepeatedOptionError(option.identity))
        self._bound[option.dest] = True

    def bind(self, descriptor, texts, /):
        """
        Convert raw texts and store them under descriptor.dest.

        A failing scalar conversion leaves the descriptor unbound; a failing
        sequence element is reported and the remaining elements still bind.
        """
        if not self._mark(descriptor) and not descriptor.sequence:
            return self.errors.append(RepeatedOptionError(descriptor.identity))

        converted = []
        for text in texts:
            try:
                converted.append(self.binder.convert(descriptor, text))
            except (ValueError, TypeError, ArithmeticError):
                self.errors.append(BadFormatConversionError(descriptor.identity))
            except Exception as exception:
                self.errors.append(SetValueExceptionError(descriptor.identity, exception))

        if descriptor.sequence:
            self._bound.setdefault(descriptor.dest, []).extend(converted)
        elif converted:
            self._bound[descriptor.dest] = converted[0]

    def fail_missing_value(self, option, /):
        if not self._mark(option) and not option.sequence:
            return self.errors.append(RepeatedOptionError(option.identity))
        self.errors.append(MissingValueOptionError(option.identity))

    def request(self, name, /):
        """
        Handle the synthetic --help/--version names; True when handled.
        """
        folded = fold(name, self.settings.case_sensitive)
        if self.settings.auto_help and folded == fold("help", self.settings.case_sensitive):
            self.halted = HelpRequestedError()
        elif self.settings.auto_version and folded == fold("version", self.settings.case_sensitive):
            self.halted = VersionRequestedError()
        return self.halted is not None

    def values(self):
        """
        Materialize the bound values: bound, else default, else zero value.
        """
        values = {}
        for descriptor in self.schema:
            if descriptor.dest in self._bound:
                value = self._bound[descriptor.dest]
                values[descriptor.dest] = tuple(value) if descriptor.sequence else value
            elif descriptor.default is not Unset:
                values[descriptor.dest] = descriptor.default
            else:
                values[descriptor.dest] = self.binder.zero(descriptor)
        return values


def _scan(cursor, limit, taken=0, /, *, literal=False):
    """
    Greedily read value tokens after the current one, up to limit in total.

    The first token that does not read as a value is pushed back.
    """
    texts = []
    while limit is None or taken + len(texts) < limit:
        if not cursor.advance():
            break
        if not (literal or isvalue(cursor.current())):
            cursor.push_back()
            break
        texts.append(cursor.current())
    return texts


def _gather(cursor, option, attached, /):
    """
    Collect the raw texts of a sequence option (attached is the inline text or None).
    """
    separator = option.separator
    if attached is not None:
        texts = attached.split(separator) if separator else [attached]
    elif separator and isvalue(cursor.peek()):
        cursor.advance()
        texts = cursor.current().split(separator)
    else:
        texts = []
    if not separator:
        texts.extend(_scan(cursor, option.max, len(texts)))
    return texts


def _bind_sequence(cursor, context, option, attached, /):
    if not (texts := _gather(cursor, option, attached)):
        return context.fail_missing_value(option)
    context.bind(option, texts)


def _bind_next(cursor, context, option, /):
    if not isvalue(cursor.peek()):
        return context.fail_missing_value(option)
    cursor.advance()
    context.bind(option, [cursor.current()])


def _unknown(cursor, context, name, /):
    if not context.settings.ignore_unknown:
        return context.errors.append(UnknownOptionError(name))
    trigger(UnknownOptionWarning("unknown option %r was ignored" % cursor.current(), token=cursor.current()))
    match_value(cursor, context)


def match_long_option(cursor, context, /):
    """
    Consume a "--name[=value]" token (and, depending on arity, what follows).
    """
    token = cursor.current()
    name, equals, inline = token[2:].partition("=")
    attached = inline if equals else None

    if not name:
        return context.errors.append(BadFormatTokenError(token))

    if (option := context.registry.long(name)) is None:
        if context.request(name):
            return
        return _unknown(cursor, context, name)

    if option.switch:
        if attached is None:
            return context.bind_switch(option)
        return context.bind(option, [attached])

    if option.sequence:
        return _bind_sequence(cursor, context, option, attached)

    if attached is not None:
        return context.bind(option, [attached])
    _bind_next(cursor, context, option)


def match_short_group(cursor, context, /):
    """
    Consume a "-x", "-xVALUE" or "-xyz" token.

    The tie-break between packed switches and an adjacent value depends only
    on the character being read: switches keep the walk going, the first
    non-switch claims the rest of the token.
    """
    body = cursor.current()[1:]

    for position, char in enumerate(body):
        if (option := context.registry.short(char)) is None:
            if position == 0:
                return _unknown(cursor, context, char)
            if context.settings.ignore_unknown:
                return trigger(UnknownOptionWarning("unknown option %r was ignored" % char, token=char))
            return context.errors.append(UnknownOptionError(char))

        if option.switch:
            context.bind_switch(option)
            continue

        rest = body[position + 1:] or None
        if option.sequence:
            return _bind_sequence(cursor, context, option, rest)
        if rest is not None:
            return context.bind(option, [rest])
        return _bind_next(cursor, context, option)


def match_value(cursor, context, /, *, literal=False):
    """
    Bind the current token to the next free value slot.

    A sequence slot keeps reading value tokens (all tokens when literal) up to
    its 'max'; tokens arriving when every slot is taken go to the remainder.
    """
    if not context._slots:
        return context.remainder.append(cursor.current())

    value = context._slots.popleft()
    texts = [cursor.current()]
    if value.sequence:
        texts.extend(_scan(cursor, value.max, 1, literal=literal))
    context.bind(value, texts)


__all__ = (
    "Context",
    "match_long_option",
    "match_short_group",
    "match_value",
)
