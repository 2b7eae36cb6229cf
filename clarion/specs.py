r"""
Clarion schema descriptors.

Overview
- Descriptors
  • Option: a named (short and/or long) option; a switch when its kind is bool.
  • Value: a positional value slot bound by index.
  • Schema: the finalized, ordered descriptor set one parse runs against.
  • Verb / Verbs: named schemas selected by the first positional token.

- Identity
  • NameInfo(short, long): the name pair errors refer to; NameInfo.EMPTY for values.

- Kinds (ValueKind, derived from the 'kind' converter)
  • bool → BOOL, str → STRING, int/float/Decimal → NUMERIC,
    enum.Enum subclasses → ENUM (case-insensitive member names), anything
    else callable → CUSTOM.

Metadata (sanitized on construction)
- Shared (Option/Value)
  • kind: Callable (see ValueKind).
  • required: bool; default: Unset | Any (a sequence default becomes a tuple).
  • sequence: bool; min/max: Unset | int (>= 0, min <= max), only for sequences.
  • nullable: bool, not for sequences.
  • metavar/help: Unset | str, non-empty after trimming when provided.
  • hidden: bool (suppressed from help).
- Option only
  • short: Unset | str, exactly one character, not whitespace.
  • long: Unset | str, no whitespace, no '=', not starting with '-'.
  • separator: Unset | str (one character), only for sequences.
  • set: Unset | str, the mutually exclusive set the option belongs to.
  • dest: Unset | str, key of the bound value (defaults from the names).
- Value only
  • name: Unset | str, key of the bound value (defaults to "value{index}").
  • index: Unset | int (>= 0); assigned in declaration order by Schema.

Validation failures are programming errors and raise TypeError/ValueError
immediately, with messages prefixed by the descriptor's typename.

Immutability
- Sanitized metadata lives in private fields exposed through read-only
  properties (see mirror()). copy.replace(descriptor, **changes) builds a
  modified copy through the same sanitation.

Quick example:
    >>> from clarion.specs import Option, Value, Schema
    >>> schema = Schema(
    ...     Option(long="stringvalue", help="Define a string value here."),
    ...     Option("i", kind=int, sequence=True, min=3, max=4),
    ...     Option("x", kind=bool),
    ...     Value(kind=int),
    ... )
"""
import copy
import decimal
import enum
import functools
import operator
import re
from collections import namedtuple
from collections.abc import Iterable, Mapping

from .utils import *


class ValueKind(enum.Enum):
    """
    value kinds, derived from a descriptor's 'kind' converter.
    """
    BOOL = "bool"
    STRING = "string"
    NUMERIC = "numeric"
    ENUM = "enum"
    CUSTOM = "custom"


def _kindof(kind, /):
    if kind is bool:
        return ValueKind.BOOL
    if kind is str:
        return ValueKind.STRING
    if kind in (int, float, decimal.Decimal):
        return ValueKind.NUMERIC
    if isinstance(kind, type) and issubclass(kind, enum.Enum):
        return ValueKind.ENUM
    return ValueKind.CUSTOM


class NameInfo(namedtuple("NameInfo", ("short", "long"))):
    """
    The (short, long) identity of an option, empty strings when absent.

    text joins both names as "x, switch" when both are present.
    """
    __slots__ = ()

    @property
    def text(self):
        if self.short and self.long:
            return f"{self.short}, {self.long}"
        return self.short or self.long


NameInfo.EMPTY = NameInfo("", "")


class SpecType(type):
    """
    Metaclass for descriptors: typename, read-only properties and reprs.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and prefixes every validation message.
    - every name in __introspectable__ becomes a read-only property over "_{name}".
    - __displayable__ (if set) narrows what __repr__/__rich_repr__ show.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_text(cls, metadata, key, /):
    if not isinstance(text := metadata[key], str | Unset):
        raise TypeError(f"{cls.__typename__} {key!r} must be a string")
    elif isinstance(text, str) and not (text := text.strip()):
        raise ValueError(f"{cls.__typename__} {key!r} cannot be empty")
    metadata[key] = text


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate presentation and presence metadata shared by Option and Value.

    - metavar/help: Unset or non-empty strings (trimmed).
    - required/hidden: coerced to bool by the caller.
    - a hidden descriptor cannot be required, since help would never mention it.
    """
    _sanitize_text(cls, metadata, "metavar")
    _sanitize_text(cls, metadata, "help")

    if metadata["required"] and metadata["hidden"]:
        raise TypeError(f"required {cls.__typename__} cannot be hidden")


def _sanitize_arity_metadata(cls, metadata, /):
    """
    Internal: validate kind, arity and nullability.

    Responsibilities
    - kind: must be callable.
    - min/max/separator: only for sequences; min/max non-negative integers with
      min <= max; separator a single non-whitespace character.
    - nullable: not for sequences.
    - default: a sequence default must be iterable (not a string) and becomes a tuple.
    """
    if not callable(metadata["kind"]):
        raise TypeError(f"{cls.__typename__} 'kind' must be callable")

    sequence = metadata["sequence"]
    for key in ("min", "max"):
        if not isinstance(bound := metadata[key], int | Unset) or isinstance(bound, bool):
            raise TypeError(f"{cls.__typename__} {key!r} must be an integer")
        if bound is Unset:
            continue
        if not sequence:
            raise TypeError(f"only sequence {cls.__typename__} can specify {key!r}")
        if bound < 0:
            raise ValueError(f"{cls.__typename__} {key!r} cannot be negative")

    if metadata["min"] is not Unset and metadata["max"] is not Unset and metadata["min"] > metadata["max"]:
        raise ValueError(f"{cls.__typename__} 'min' cannot be greater than 'max'")

    if (separator := metadata.get("separator", Unset)) is not Unset:
        if not isinstance(separator, str):
            raise TypeError(f"{cls.__typename__} 'separator' must be a string")
        if len(separator) != 1 or separator.isspace():
            raise ValueError(f"{cls.__typename__} 'separator' must be a single visible character")
        if not sequence:
            raise TypeError(f"only sequence {cls.__typename__} can specify 'separator'")

    if metadata["nullable"] and sequence:
        raise TypeError(f"sequence {cls.__typename__} cannot be nullable")

    if sequence and (default := metadata["default"]) is not Unset:
        if not isinstance(default, Iterable) or isinstance(default, str):
            raise TypeError(f"sequence {cls.__typename__} 'default' must be an iterable")
        metadata["default"] = tuple(default)


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate the names of an Option.

    - short: one character, not whitespace (line terminators included).
    - long: non-empty, no whitespace, no '=', not starting with '-'.
    - at least one of short/long.
    - set/dest: Unset or non-empty strings; dest must be an identifier-like key.
    """
    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and (len(short) != 1 or short.isspace() or short == "-"):
        raise ValueError(f"{cls.__typename__} 'short' must be a single non-whitespace character")

    if not isinstance(long := metadata["long"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'long' must be a string")
    elif isinstance(long, str) and not re.fullmatch(r"[^\s=\-][^\s=]*", long):
        raise ValueError(f"{cls.__typename__} 'long' must be a non-empty name without whitespace or '='")

    if short is Unset and long is Unset:
        raise TypeError(f"{cls.__typename__} must specify a short or a long name")

    _sanitize_text(cls, metadata, "set")
    _sanitize_text(cls, metadata, "dest")


class Option(metaclass=SpecType):
    """
    Named option descriptor.

    An Option whose kind is bool and which is not a sequence is a switch: its
    presence binds True and it never consumes a value token. Every other
    option carries one value (scalar) or a bounded-or-unbounded run of values
    (sequence).

    Properties
    - the names listed in __introspectable__ are read-only attributes.
    - identity: NameInfo; value_kind: ValueKind; switch: bool.
    """

    __introspectable__ = (
        "short",
        "long",
        "kind",
        "required",
        "default",
        "sequence",
        "min",
        "max",
        "separator",
        "set",
        "nullable",
        "metavar",
        "help",
        "dest",
        "hidden",
    )

    __displayable__ = (
        "short",
        "long",
        "kind",
        "required",
        "sequence",
        "set",
        "dest",
    )

    def __init__(
            self,
            short=Unset,
            long=Unset,
            kind=str,
            *,
            required=False,
            default=Unset,
            sequence=False,
            min=Unset,
            max=Unset,
            separator=Unset,
            set=Unset,
            nullable=False,
            metavar=Unset,
            help=Unset,
            dest=Unset,
            hidden=False
    ):
        metadata = {
            "short": short,
            "long": long,
            "kind": kind,
            "required": bool(required),
            "default": default,
            "sequence": bool(sequence),
            "min": min,
            "max": max,
            "separator": separator,
            "set": set,
            "nullable": bool(nullable),
            "metavar": metavar,
            "help": help,
            "dest": dest,
            "hidden": bool(hidden),
        }
        self._source = dict(metadata)

        _sanitize_metadata(type(self), metadata)
        _sanitize_named_metadata(type(self), metadata)
        _sanitize_arity_metadata(type(self), metadata)

        if metadata["dest"] is Unset:
            metadata["dest"] = metadata["long"].replace("-", "_") if metadata["long"] else metadata["short"]

        for name, object in metadata.items():
            # default keeps Unset to tell "no default" apart from a None default
            setattr(self, "_" + name, object if name == "default" else coalesce(object))

    @property
    def identity(self):
        return NameInfo(self._short or "", self._long or "")

    @property
    def value_kind(self):
        return _kindof(self._kind)

    @property
    def switch(self):
        return self.value_kind is ValueKind.BOOL and not self._sequence

    def __replace__(self, /, **changes):
        return type(self)(**{**self._source, **changes})


class Value(metaclass=SpecType):
    """
    Positional value descriptor, bound by index.

    A scalar Value takes exactly one positional token; a sequence Value takes
    every following value token up to 'max'.
    """

    __introspectable__ = (
        "name",
        "kind",
        "index",
        "required",
        "default",
        "sequence",
        "min",
        "max",
        "nullable",
        "metavar",
        "help",
        "hidden",
    )

    __displayable__ = (
        "name",
        "kind",
        "index",
        "required",
        "sequence",
    )

    def __init__(
            self,
            name=Unset,
            kind=str,
            *,
            index=Unset,
            required=False,
            default=Unset,
            sequence=False,
            min=Unset,
            max=Unset,
            nullable=False,
            metavar=Unset,
            help=Unset,
            hidden=False
    ):
        metadata = {
            "name": name,
            "kind": kind,
            "index": index,
            "required": bool(required),
            "default": default,
            "sequence": bool(sequence),
            "min": min,
            "max": max,
            "nullable": bool(nullable),
            "metavar": metavar,
            "help": help,
            "hidden": bool(hidden),
        }
        self._source = dict(metadata)

        _sanitize_text(type(self), metadata, "name")
        if not isinstance(index, int | Unset) or isinstance(index, bool):
            raise TypeError(f"{type(self).__typename__} 'index' must be an integer")
        elif isinstance(index, int) and index < 0:
            raise ValueError(f"{type(self).__typename__} 'index' cannot be negative")

        _sanitize_metadata(type(self), metadata)
        _sanitize_arity_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object if name in ("default", "index") else coalesce(object))

    @property
    def dest(self):
        if self._name is not None:
            return self._name
        if self._index is Unset:
            raise ValueError(f"{type(self).__typename__} without a name has no key until it is indexed")
        return f"value{self._index}"

    @property
    def value_kind(self):
        return _kindof(self._kind)

    @property
    def switch(self):
        return False

    @property
    def set(self):
        return None

    @property
    def separator(self):
        return None

    identity = property(lambda self: NameInfo.EMPTY)

    def __replace__(self, /, **changes):
        return type(self)(**{**self._source, **changes})


class Schema(metaclass=SpecType):
    """
    A finalized descriptor set: the options and positional values of one verb
    (or of the top level).

    Construction
    - Option and Value descriptors may be given in any order; option order is
      declaration order (used by help), values are sorted by index.
    - Values without an explicit index take the lowest free indices in
      declaration order.

    Raises
    - TypeError for anything that is not an Option or a Value.
    - ValueError for duplicate short names, long names, destinations or indices.
    """

    __introspectable__ = (
        "options",
        "values",
    )

    def __init__(self, *descriptors):
        options = []
        values = []
        for descriptor in descriptors:
            if isinstance(descriptor, Option):
                options.append(descriptor)
            elif isinstance(descriptor, Value):
                values.append(descriptor)
            else:
                raise TypeError(f"{type(self).__typename__} descriptors must be options or values")

        shorts = set()
        longs = set()
        for option in options:
            if option.short is not None:
                if option.short in shorts:
                    raise ValueError(f"{type(self).__typename__} short name {option.short!r} is already in use")
                shorts.add(option.short)
            if option.long is not None:
                if option.long in longs:
                    raise ValueError(f"{type(self).__typename__} long name {option.long!r} is already in use")
                longs.add(option.long)

        taken = {value.index for value in values if value.index is not Unset}
        if len(taken) != sum(value.index is not Unset for value in values):
            raise ValueError(f"{type(self).__typename__} value indices must be unique")

        free = (index for index in range(len(values) + len(taken)) if index not in taken)
        values = [
            value if value.index is not Unset else copy.replace(value, index=next(free))
            for value in values
        ]
        values.sort(key=operator.attrgetter("index"))

        dests = set()
        for descriptor in (*options, *values):
            if descriptor.dest in dests:
                raise ValueError(f"{type(self).__typename__} destination {descriptor.dest!r} is already in use")
            dests.add(descriptor.dest)

        self._options = tuple(options)
        self._values = tuple(values)

    def __iter__(self):
        yield from self._options
        yield from self._values


class Verb(metaclass=SpecType):
    """
    A named schema (sub-command), e.g. "commit" with its own options.

    The name must be a non-empty token without whitespace that does not start
    with '-'; "help" is reserved for the help index.
    """

    __introspectable__ = (
        "name",
        "help",
        "hidden",
        "schema",
    )

    def __init__(self, name, /, *descriptors, help=Unset, hidden=False):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not re.fullmatch(r"[^\s\-]\S*", name):
            raise ValueError(f"{type(self).__typename__} 'name' must be a non-empty token not starting with '-'")
        elif name.casefold() == "help":
            raise ValueError(f"{type(self).__typename__} name 'help' is reserved")

        metadata = {"help": help}
        _sanitize_text(type(self), metadata, "help")

        self._name = name
        self._help = coalesce(metadata["help"])
        self._hidden = bool(hidden)
        if len(descriptors) == 1 and isinstance(descriptors[0], Schema):
            self._schema = descriptors[0]
        else:
            self._schema = Schema(*descriptors)


class Verbs(metaclass=SpecType):
    """
    The verb map of a verb-driven command line, in declaration order.

    default names the verb that receives the whole argument vector when its
    first token is not a verb (and the empty vector when there is none).
    """

    __introspectable__ = (
        "verbs",
        "default",
    )

    def __init__(self, *verbs, default=Unset):
        if isinstance(mapping := (verbs[0] if len(verbs) == 1 else None), Mapping):
            verbs = tuple(Verb(name, schema) for name, schema in mapping.items())

        names = set()
        for verb in verbs:
            if not isinstance(verb, Verb):
                raise TypeError(f"{type(self).__typename__} items must be verbs")
            if verb.name in names:
                raise ValueError(f"{type(self).__typename__} name {verb.name!r} is already in use")
            names.add(verb.name)

        if not verbs:
            raise ValueError(f"{type(self).__typename__} must declare at least one verb")

        if not isinstance(default, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'default' must be a string")
        elif isinstance(default, str) and default not in names:
            raise ValueError(f"{type(self).__typename__} 'default' must name a declared verb")

        self._verbs = tuple(verbs)
        self._default = coalesce(default)

    def __iter__(self):
        return iter(self._verbs)

    def __getitem__(self, name):
        for verb in self._verbs:
            if verb.name == name:
                return verb
        raise KeyError(name)


__all__ = (
    # Identity and kinds
    "NameInfo",
    "ValueKind",

    # Descriptors
    "Option",
    "Value",
    "Schema",
    "Verb",
    "Verbs",
)

del SpecType
