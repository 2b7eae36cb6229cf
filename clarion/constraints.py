"""
Clarion post-parse constraints.

Runs once every token has been consumed, in a fixed order:
1. required: every required descriptor that was never matched (and has no
   default) → MissingRequiredOption.
2. mutually exclusive sets (only when the setting is on): one error per set
   with more than one matched option, naming the option bound first.
3. sequence range: every matched sequence whose element count falls outside
   [min, max] → SequenceOutOfRange.
"""
from .faults import *
from .utils import Unset


def _required(context, /):
    for descriptor in context.schema:
        if descriptor.required and descriptor.default is Unset and not context.matched(descriptor):
            yield MissingRequiredOptionError(descriptor.identity)


def _exclusive(context, /):
    for name, options in context.registry.tallies().items():
        if len(options) > 1:
            yield MutuallyExclusiveSetError(options[0].identity, name)


def _ranges(context, /):
    for descriptor in context.schema:
        if not descriptor.sequence or not context.matched(descriptor):
            continue
        count = context.count(descriptor)
        if descriptor.min is not None and count < descriptor.min:
            yield SequenceOutOfRangeError(descriptor.identity)
        elif descriptor.max is not None and count > descriptor.max:
            yield SequenceOutOfRangeError(descriptor.identity)


def enforce(context, /):
    """
    Append every constraint violation of a finished parse to context.errors.
    """
    context.errors.extend(_required(context))
    if context.settings.mutually_exclusive:
        context.errors.extend(_exclusive(context))
    context.errors.extend(_ranges(context))


__all__ = (
    "enforce",
)
