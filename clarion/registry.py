"""
Clarion option registry: per-parse name index over one schema's options.

Lifecycle
- Built once per parse from a Schema; lookups are read-only from then on.
- The only mutable state is the per-descriptor matched bit and the tally of
  matched options per mutually exclusive set, both local to this instance,
  so concurrent parses never share anything but the immutable descriptors.

Names
- Lookups honour the case-sensitivity setting through fold().
- Two options whose names collide after folding are a schema error
  (ValueError), reported when the registry is built.
"""
from .utils import fold


class OptionRegistry:
    """
    Index of options by short and long name, plus match bookkeeping.
    """

    def __init__(self, options, /, case_sensitive=True):
        self._sensitive = bool(case_sensitive)
        self._options = tuple(options)
        self._shorts = {}
        self._longs = {}
        self._matched = set()
        self._sets = {}

        for option in self._options:
            if option.short is not None:
                if self._shorts.setdefault(key := fold(option.short, self._sensitive), option) is not option:
                    raise ValueError(f"option-registry short name {key!r} is already in use")
            if option.long is not None:
                if self._longs.setdefault(key := fold(option.long, self._sensitive), option) is not option:
                    raise ValueError(f"option-registry long name {key!r} is already in use")

    def __iter__(self):
        return iter(self._options)

    def __len__(self):
        return len(self._options)

    @property
    def case_sensitive(self):
        return self._sensitive

    def short(self, name, /):
        """
        Return the option registered under the short name, or None.
        """
        return self._shorts.get(fold(name, self._sensitive))

    def long(self, name, /):
        """
        Return the option registered under the long name, or None.
        """
        return self._longs.get(fold(name, self._sensitive))

    def contains(self, name, /):
        return self.short(name) is not None or self.long(name) is not None

    def mark(self, option, /):
        """
        Flag the option as matched and count it in its mutually exclusive set.

        Returns False when the option had already been matched.
        """
        if option in self._matched:
            return False
        self._matched.add(option)
        if option.set is not None:
            self._sets.setdefault(option.set, []).append(option)
        return True

    def matched(self, option, /):
        return option in self._matched

    def tallies(self):
        """
        Return {set name: options matched in that set, first-bound first}.
        """
        return {name: tuple(options) for name, options in self._sets.items()}


__all__ = (
    "OptionRegistry",
)
