"""
Clarion utilities shared by the descriptor, parser and help layers.

Contents
- Unset: the "not provided" marker. It differs from None, which is a valid
  default for many descriptors. Unset is falsy, prints as "Unset" and can
  take part in isinstance() unions (``str | Unset``).
- coalesce(value, default): replace Unset with a default and pass anything
  else through unchanged, falsy values included.
- rename(name): decorator fixing __name__/__qualname__ of generated functions.
- mirror(attr): read-only property over ``self._attr`` that hands out copies
  of containers.
- fold(text, sensitive): lookup key for names under a case-sensitivity mode.
"""
from collections.abc import Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker; there is exactly one instance.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def _union(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    __or__ = __ror__ = _union

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(value, default=None, /):
    """
    coalesce(Unset, 1) -> 1; coalesce(None, 1) -> None; coalesce(0, 1) -> 0
    """
    if value is Unset:
        return default
    return value


def rename(name, /):
    """
    Decorator giving the wrapped function the public name it is exposed as.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() must decorate a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _copy(value):
    match value:
        case str() | bytes():
            return value
        case tuple():
            return tuple(_copy(item) for item in value)
        case list():
            return [_copy(item) for item in value]
        case Mapping():
            return {key: _copy(item) for key, item in value.items()}
        case Set():
            return {_copy(item) for item in value}
    return value


def mirror(attribute, /):
    """
    Read-only property over the private field ``_<attribute>``.

    Lists, sets and mappings are copied on every read so a caller can never
    reach the stored container.
    """
    if not isinstance(attribute, str):
        raise TypeError("mirror() argument must be a string")
    field = "_" + attribute

    @rename(attribute)
    def read(self):
        return _copy(getattr(self, field))

    return property(read)


def fold(text, /, sensitive=True):
    """
    Key used to compare names: the text itself, or its casefold() when
    matching ignores case.
    """
    if not isinstance(text, str):
        raise TypeError("fold() argument must be a string")
    return text if sensitive else text.casefold()


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "fold",
)
