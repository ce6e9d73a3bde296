"""bp-cli — manage community signups and private messages from the shell.

Built on a SQLite-backed data layer with a strict layered architecture.
"""

from bp_cli.version import __version__

__all__: list[str] = ["__version__"]
