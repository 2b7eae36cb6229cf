"""
Clarion verb routing: pick the schema a verb-driven command line runs against.

States
- AWAITING_VERB_TOKEN: initial; also terminal for "no verb" and version requests.
- VERB_SELECTED: the first token named a verb (or the default verb applies);
  the remaining tokens are parsed against that verb's schema.
- HELP_INDEX_REQUESTED: "help" alone, "help <unknown>", or an unknown verb.
- HELP_FOR_VERB_REQUESTED: "help <verb>" naming a declared verb.

Reserved tokens
- "help" (and "--help" when auto-help is on) routes to help.
- "version" (and "--version") requests the version when auto-version is on
  and no declared verb is called "version".
"""
import enum

from .faults import *
from .utils import fold


class RouterState(enum.Enum):
    AWAITING_VERB_TOKEN = "awaiting-verb-token"
    VERB_SELECTED = "verb-selected"
    HELP_INDEX_REQUESTED = "help-index-requested"
    HELP_FOR_VERB_REQUESTED = "help-for-verb-requested"


class VerbRouter:
    """
    One-shot router over a Verbs map.

    route(args) inspects the first token only and returns (verb, arguments,
    error): the selected Verb or None, the tokens left for it, and the error
    that ends the parse (None when a verb was selected).
    """

    def __init__(self, verbs, /, *, case_sensitive=True, auto_help=True, auto_version=True):
        self._verbs = verbs
        self._sensitive = bool(case_sensitive)
        self._auto_help = bool(auto_help)
        self._auto_version = bool(auto_version)
        self.state = RouterState.AWAITING_VERB_TOKEN

    def find(self, name, /):
        """
        Return the declared verb called name (per case sensitivity), or None.
        """
        if name is None:
            return None
        for verb in self._verbs:
            if fold(verb.name, self._sensitive) == fold(name, self._sensitive):
                return verb
        return None

    def _reserved(self, token, name, /):
        return fold(token, self._sensitive) == fold(name, self._sensitive)

    def route(self, args, /):
        if self.state is not RouterState.AWAITING_VERB_TOKEN:
            raise RuntimeError("verb-router can route only once")

        args = tuple(args)
        default = self.find(self._verbs.default)

        if not args:
            if default is not None:
                self.state = RouterState.VERB_SELECTED
                return default, (), None
            return None, (), NoVerbSelectedError()

        token, *rest = args

        if (verb := self.find(token)) is not None:
            self.state = RouterState.VERB_SELECTED
            return verb, tuple(rest), None

        if self._reserved(token, "help") or (self._auto_help and self._reserved(token, "--help")):
            if rest and (verb := self.find(rest[0])) is not None:
                self.state = RouterState.HELP_FOR_VERB_REQUESTED
                return None, (), HelpVerbRequestedError(verb.name, matched=True)
            self.state = RouterState.HELP_INDEX_REQUESTED
            return None, (), HelpVerbRequestedError()

        if self._auto_version and (self._reserved(token, "version") or self._reserved(token, "--version")):
            return None, (), VersionRequestedError()

        if default is not None:
            self.state = RouterState.VERB_SELECTED
            return default, args, None

        self.state = RouterState.HELP_INDEX_REQUESTED
        return None, (), BadVerbSelectedError(token)


__all__ = (
    "RouterState",
    "VerbRouter",
)
