r"""
Clarion help rendering.

Layout (render() → list of lines)
- heading ("{title} {version}"), copyright, pre-lines, a blank line followed
  by the option/value (or verb) table when there is one, then post-lines.
- pre/post lines are word-wrapped to the full width.
- table rows are "  " + name.ljust(column) + "    " + text, where column is
  the widest name of the table; the text is wrapped to the room left and its
  continuation lines are indented by column + 6 spaces.

Word wrap (wrap())
- while the text is wider than the room: cut at the last space that fits
  (the space itself is dropped, the pieces are trimmed), or, when no space
  fits, hard-split at exactly the room without trimming.

A HelpDocument only records what was added; lines are produced on demand,
so rendering the same document twice yields the same lines.
"""
import enum
import os.path
import sys

from rich.text import Text

from . import faults
from .faults import REQUESTS, ErrorTag, format_parsing_errors
from .specs import Schema, Verbs
from .utils import Unset, coalesce


class HeadingInfo:
    """
    Program title and version, rendered as "{title} {version}".
    """

    def __init__(self, title, version=Unset, /):
        if not isinstance(title, str):
            raise TypeError("heading-info 'title' must be a string")
        if not isinstance(version, str | Unset):
            raise TypeError("heading-info 'version' must be a string")
        self._title = title
        self._version = coalesce(version, "")

    title = property(lambda self: self._title)
    version = property(lambda self: self._version)

    def __str__(self):
        return f"{self._title} {self._version}" if self._version else self._title

    def __repr__(self):
        return f"heading-info(title={self._title!r}, version={self._version!r})"

    @classmethod
    def default(cls):
        """
        Heading derived from the host program (__main__.__title__/__version__ or argv[0]).
        """
        main = __import__("__main__")
        title = getattr(main, "__title__", os.path.basename(sys.argv[0]) or "clarion")
        return cls(str(title), str(getattr(main, "__version__", "")) or Unset)


class CopyrightInfo:
    """
    A copyright line: "Copyright (C) 2005 - 2013 Author".

    Consecutive years are joined with ", " and gaps with " - ".
    """

    def __init__(self, author, /, *years, upper=True):
        if not isinstance(author, str):
            raise TypeError("copyright-info 'author' must be a string")
        for year in years:
            if not isinstance(year, int) or isinstance(year, bool):
                raise TypeError("copyright-info years must be integers")
        self._author = author
        self._years = tuple(years)
        self._upper = bool(upper)

    author = property(lambda self: self._author)
    years = property(lambda self: self._years)

    def _format_years(self):
        parts = []
        for position, year in enumerate(self._years):
            parts.append(str(year))
            if position + 1 < len(self._years):
                parts.append(" - " if self._years[position + 1] - year > 1 else ", ")
        return "".join(parts)

    def __str__(self):
        symbol = "(C)" if self._upper else "(c)"
        if not self._years:
            return f"Copyright {symbol} {self._author}"
        return f"Copyright {symbol} {self._format_years()} {self._author}"

    def __repr__(self):
        return f"copyright-info(author={self._author!r}, years={self._years!r})"


def wrap(text, width, /):
    """
    Split text into lines no wider than width (see module notes).
    """
    if not isinstance(width, int) or width < 1:
        raise ValueError("wrap() 'width' must be a positive integer")
    lines = []
    while len(text) > width:
        space = text.rfind(" ", 0, width + 1)
        if space > 0:
            lines.append(text[:space].rstrip())
            text = text[space + 1:].lstrip()
        else:
            lines.append(text[:width])
            text = text[width:]
    lines.append(text)
    return lines


def _display(value):
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, tuple):
        return " ".join(map(_display, value))
    return str(value)


class HelpDocument:
    """
    An incrementally built help screen.

    Usage
        document = HelpDocument(HeadingInfo("git", "2.0"), CopyrightInfo("Author", 2005, 2013))
        document.add_pre_line("usage: git [options]").add_options(schema)
        print(document)

    add_dashes controls whether option names render as "-x, --name" or "x, name";
    additional_newline puts a blank line after every row of the table.
    """

    def __init__(self, heading=Unset, copyright=Unset, /, *, width=80, add_dashes=True, additional_newline=False):
        if not isinstance(width, int) or isinstance(width, bool) or width < 1:
            raise ValueError("help-document 'width' must be a positive integer")
        self._heading = str(coalesce(heading, ""))
        self._copyright = str(coalesce(copyright, ""))
        self._width = width
        self._dashes = bool(add_dashes)
        self._spaced = bool(additional_newline)
        self._pre = []
        self._post = []
        self._rows = []

    heading = property(lambda self: self._heading)
    copyright = property(lambda self: self._copyright)
    width = property(lambda self: self._width)

    def add_pre_line(self, text, /):
        self._pre.append(str(text))
        return self

    def add_post_line(self, text, /):
        self._post.append(str(text))
        return self

    def _name(self, short, long, metavar):
        parts = []
        if short:
            parts.append(("-" if self._dashes else "") + short + (f" {metavar}" if metavar else ""))
        if long:
            parts.append(("--" if self._dashes else "") + long + (f"={metavar}" if metavar else ""))
        return ", ".join(parts)

    def _text(self, descriptor):
        text = descriptor.help or ""
        if descriptor.default is not Unset:
            text = f"(Default: {_display(descriptor.default)}) " + text
        if descriptor.required:
            text = f"{faults.sentences.required_word()} " + text
        return text.rstrip()

    def add_options(self, schema, /, *, auto_help=True, auto_version=True):
        """
        Append the rows of a schema: options, documented values, then --help/--version.
        """
        if not isinstance(schema, Schema):
            raise TypeError("help-document add_options() argument must be a schema")

        for option in schema.options:
            if not option.hidden:
                self._rows.append((self._name(option.short, option.long, option.metavar), self._text(option)))

        for value in schema.values:
            if value.hidden or (value.help is None and value.metavar is None):
                continue
            name = value.metavar or value.name or f"value pos. {value.index}"
            self._rows.append((name, self._text(value)))

        longs = {option.long for option in schema.options}
        if auto_help and "help" not in longs:
            self._rows.append((self._name("", "help", None), faults.sentences.help_command_text(self._dashes)))
        if auto_version and "version" not in longs:
            self._rows.append((self._name("", "version", None), faults.sentences.version_command_text(self._dashes)))
        return self

    def add_verbs(self, verbs, /, *, auto_version=True):
        """
        Append the verb index: every visible verb, then help and version.
        """
        if not isinstance(verbs, Verbs):
            raise TypeError("help-document add_verbs() argument must be verbs")

        for verb in verbs:
            if not verb.hidden:
                self._rows.append((verb.name, verb.help or ""))

        self._rows.append(("help", faults.sentences.help_command_text(False)))
        if auto_version and all(verb.name != "version" for verb in verbs):
            self._rows.append(("version", faults.sentences.version_command_text(False)))
        return self

    def _layout(self):
        # yields one list of (fragment, style) pairs per output line
        if self._heading:
            yield [(self._heading, "help-heading")]
        if self._copyright:
            yield [(self._copyright, "help-copyright")]
        for line in self._pre:
            for piece in wrap(line, self._width):
                yield [(piece, "help-line")]

        if self._rows:
            column = max(len(name) for name, _ in self._rows)
            room = max(self._width - (column + 6), 1)
            yield []
            for name, text in self._rows:
                first, *rest = wrap(text, room) if text else [""]
                if first:
                    yield [("  ", ""), (name.ljust(column), "help-name"), ("    ", ""), (first, "help-text")]
                else:
                    yield [("  ", ""), (name, "help-name")]
                for piece in rest:
                    yield [(" " * (column + 6), ""), (piece, "help-text")]
                if self._spaced:
                    yield []

        for line in self._post:
            for piece in wrap(line, self._width):
                yield [(piece, "help-line")]

    def render(self):
        return ["".join(fragment for fragment, _ in line) for line in self._layout()]

    def __str__(self):
        return "\n".join(self.render())

    def __rich__(self):
        main = __import__("__main__")
        styles = {
            "help-heading": "bold #E6E6F0",
            "help-copyright": "dim #C8C8D0",
            "help-line": "#C8C8D0",
            "help-name": "bold #00E5FF",
            "help-text": "#D6D6DE",
            "": "",
        } | getattr(main, "__styles__", {})

        return Text("\n").join(
            Text.assemble(*((fragment, styles.get(style, "")) for fragment, style in line))
            for line in self._layout()
        )


def render(document, /):
    """
    Lines of a help document (pure; repeated calls return equal lists).
    """
    if not isinstance(document, HelpDocument):
        raise TypeError("render() argument must be a help-document")
    return document.render()


def auto_build(
        result,
        /,
        *,
        heading=Unset,
        copyright=Unset,
        width=80,
        auto_help=True,
        auto_version=True,
        additional_newline=False,
        renderer=Unset,
        mutex_renderer=Unset,
        on_error=Unset,
):
    """
    Build the help screen that answers a parse result.

    - meaningful errors are listed under "ERROR(S):", indented by two spaces;
      renderer and mutex_renderer are handed to format_parsing_errors().
    - on_error(document), when given, is called once the error block is in
      place and may add lines to (or replace) the document.
    - a verb-driven result shows the verb named by "help <verb>", or the verb
      that was being parsed, or else the verb index.
    - any other result shows the table of its schema.
    """
    heading = coalesce(heading, HeadingInfo.default())
    errors = getattr(result, "errors", ())
    schema = result.schema
    verb = result.verb

    for error in errors:
        if error.tag is ErrorTag.HELP_VERB_REQUESTED and error.matched:
            verb = schema[error.verb]

    index = isinstance(schema, Verbs) and verb is None
    document = HelpDocument(heading, copyright, width=width, add_dashes=not index, additional_newline=additional_newline)

    if any(error.tag not in REQUESTS for error in errors):
        if text := format_parsing_errors(errors, renderer, mutex_renderer, indent=2):
            document.add_pre_line("")
            document.add_pre_line(faults.sentences.errors_heading())
            for line in text.split("\n"):
                document.add_pre_line(line)
        if on_error is not Unset:
            document = on_error(document)
            if not isinstance(document, HelpDocument):
                raise TypeError("auto_build() 'on_error' must return a help-document")

    if index:
        return document.add_verbs(schema, auto_version=auto_version)
    if verb is not None:
        schema = verb.schema
    return document.add_options(schema, auto_help=auto_help, auto_version=auto_version)


__all__ = (
    "HeadingInfo",
    "CopyrightInfo",
    "wrap",
    "HelpDocument",
    "render",
    "auto_build",
)
