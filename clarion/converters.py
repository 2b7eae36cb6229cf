"""
Clarion value conversion (raw strings → typed values, and back).

Kinds (see clarion.specs.ValueKind)
- BOOL: "true"/"false", case-insensitive.
- STRING: the text unchanged.
- NUMERIC: int, float or decimal.Decimal written with the configured culture;
  integers take an optional sign and digits only, floating kinds also accept
  the culture's decimal separator, group separators and an exponent.
- ENUM: case-insensitive match against the member names of the enum.
- CUSTOM: the kind is called with the raw text.

Failures
- ValueError, TypeError and ArithmeticError (overflow included) mean "bad
  format" and surface as BadFormatConversion; anything else a custom
  converter raises is reported as SetValueException by the matchers.

Zero values (absent descriptor, no default)
- nullable → None; sequence → (); bool → False; numeric → kind(0); else None.
"""
import decimal
import math
import re

from .specs import ValueKind

_INTEGER = re.compile(r"[-+]?\d+")
_FLOATING = re.compile(r"[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?")


class Culture:
    """
    Number formatting conventions used for numeric conversion.

    Only the separators matter to conversion; the name is informative.

    Examples
    - Culture.INVARIANT                          → "1,234.5"
    - Culture("de-DE", decimal=",", group=".")   → "1.234,5"
    """

    def __init__(self, name="", /, decimal=".", group=","):
        if not isinstance(name, str):
            raise TypeError("culture 'name' must be a string")
        for key, separator in (("decimal", decimal), ("group", group)):
            if not isinstance(separator, str):
                raise TypeError(f"culture {key!r} must be a string")
            if len(separator) != 1 or separator.isdigit() or separator in "+-eE":
                raise ValueError(f"culture {key!r} must be a single non-digit character")
        if decimal == group:
            raise ValueError("culture 'decimal' and 'group' separators must differ")
        self._name = name
        self._decimal = decimal
        self._group = group

    name = property(lambda self: self._name)
    decimal = property(lambda self: self._decimal)
    group = property(lambda self: self._group)

    def __repr__(self):
        return f"culture(name={self._name!r}, decimal={self._decimal!r}, group={self._group!r})"

    def __eq__(self, other):
        if not isinstance(other, Culture):
            return NotImplemented
        return (self._decimal, self._group) == (other._decimal, other._group)

    def __hash__(self):
        return hash((self._decimal, self._group))

    def delocalize(self, text, /):
        """
        Rewrite a localized floating literal into Python's notation.
        """
        return text.replace(self._group, "").replace(self._decimal, ".")

    def localize(self, text, /):
        return text.replace(".", self._decimal)


Culture.INVARIANT = Culture("invariant")


class Binder:
    """
    Converts raw strings into a descriptor's kind under one culture.
    """

    def __init__(self, culture=Culture.INVARIANT, /):
        if not isinstance(culture, Culture):
            raise TypeError("binder 'culture' must be a culture")
        self._culture = culture

    @property
    def culture(self):
        return self._culture

    def convert(self, descriptor, text, /):
        """
        Convert one raw string; raises on failure (see module notes).
        """
        kind = descriptor.kind
        match descriptor.value_kind:
            case ValueKind.BOOL:
                match text.casefold():
                    case "true":
                        return True
                    case "false":
                        return False
                raise ValueError(f"{text!r} is not a boolean")
            case ValueKind.STRING:
                return text
            case ValueKind.NUMERIC if kind is int:
                if not _INTEGER.fullmatch(text):
                    raise ValueError(f"{text!r} is not an integer")
                return int(text)
            case ValueKind.NUMERIC:
                if not _FLOATING.fullmatch(normalized := self._culture.delocalize(text)):
                    raise ValueError(f"{text!r} is not a number")
                try:
                    number = kind(normalized)
                except decimal.InvalidOperation:
                    raise ValueError(f"{text!r} is not a number") from None
                if kind is float and not math.isfinite(number):
                    raise OverflowError(f"{text!r} is out of range")
                return number
            case ValueKind.ENUM:
                folded = text.casefold()
                for name, member in kind.__members__.items():
                    if name.casefold() == folded:
                        return member
                raise ValueError(f"{text!r} is not one of {", ".join(kind.__members__)}")
            case _:
                return kind(text)

    def format(self, descriptor, value, /):
        """
        Inverse of convert() for values convert() can produce.
        """
        match descriptor.value_kind:
            case ValueKind.BOOL:
                return "true" if value else "false"
            case ValueKind.ENUM:
                return value.name
            case ValueKind.NUMERIC if descriptor.kind is not int:
                return self._culture.localize(str(value))
            case _:
                return str(value)

    def zero(self, descriptor, /):
        if descriptor.nullable:
            return None
        if descriptor.sequence:
            return ()
        match descriptor.value_kind:
            case ValueKind.BOOL:
                return False
            case ValueKind.NUMERIC:
                return descriptor.kind(0)
        return None


__all__ = (
    "Culture",
    "Binder",
)
