"""Infrastructure layer — the storage backend.

Every raw ``sqlite3`` exception must be caught here and re-raised as a
:class:`~bp_cli.exceptions.BpCliError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from bp_cli.infra.sqlite_backend import SqliteBackend

__all__: list[str] = ["SqliteBackend"]
