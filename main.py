import sys

from rich.console import Console
from rich.pretty import pprint

from clarion import *

__title__ = "clarion-demo"
__version__ = "0.0.0"

schema = Verbs(
    Verb(
        "add",
        Option("p", "patch", bool, help="Interactively choose hunks."),
        Option("n", "dry-run", bool, help="Don't actually add the files."),
        Value("paths", sequence=True, help="Files to add content from."),
        help="Add file contents to the index.",
    ),
    Verb(
        "commit",
        Option("m", "message", required=True, help="Use the given message as the commit message."),
        Option(long="author", metavar="AUTHOR", help="Override the commit author."),
        help="Record changes to the repository.",
    ),
)


if __name__ == '__main__':
    result = parse(sys.argv[1:], schema, help_writer=Console(stderr=True))
    if not result:
        result.unwrap(shell=True, prog=__title__)
    pprint(result)
