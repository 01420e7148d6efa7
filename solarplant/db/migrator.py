"""Schema migrations from numbered SQL files."""

from __future__ import annotations

import os
import re
import sqlite3
from pathlib import Path

_VERSION = re.compile(r"^(\d+)[-_]")


class MigrationError(RuntimeError):
    """A migration could not be read or applied."""


def migration_version(filename: str) -> int:
    """The version number leading a migration file name such as ``003_add_log.sql``."""
    match = _VERSION.match(filename)
    if match is None:
        raise MigrationError(f"couldn't parse version from migration file: {filename}")
    return int(match.group(1))


def migrate(conn: sqlite3.Connection, migrations_dir: str | os.PathLike) -> list[int]:
    """Apply the ``.sql`` files newer than the database's user_version, in name order.

    Each file runs in its own transaction together with the version update.
    Returns the versions applied.
    """
    directory = Path(migrations_dir)
    try:
        current = conn.execute("PRAGMA user_version").fetchone()[0]
    except sqlite3.Error as err:
        raise MigrationError(f"can't get current version: {err}") from err

    try:
        names = sorted(p.name for p in directory.iterdir() if p.is_file() and p.suffix == ".sql")
    except OSError as err:
        raise MigrationError(f"failed to read migrations directory: {err}") from err

    applied = []
    for name in names:
        version = migration_version(name)
        if version <= current:
            continue
        try:
            script = (directory / name).read_text(encoding="utf-8")
        except OSError as err:
            raise MigrationError(f"failed to read migration file {name}: {err}") from err
        try:
            conn.executescript(
                f"BEGIN;\n{script}\n;\nPRAGMA user_version = {version};\nCOMMIT;"
            )
        except sqlite3.Error as err:
            if conn.in_transaction:
                conn.rollback()
            raise MigrationError(f"failed to apply migration {version}: {err}") from err
        applied.append(version)
    return applied