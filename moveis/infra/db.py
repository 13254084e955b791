# moveis/infra/db.py
"""
Conexão SQLite da persistência opcional da CLI.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from moveis.infra.logger import log_database_operation


@contextmanager
def connect(db_path: Union[str, Path]) -> Iterator[sqlite3.Connection]:
    """
    Abre o banco em ``db_path`` e entrega a conexão dentro de uma transação.

    - foreign_keys ON
    - row_factory = sqlite3.Row
    - commit ao sair; rollback (registrado no log) em caso de exceção
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except Exception as e:
        conn.rollback()
        log_database_operation("*", "ROLLBACK", error=str(e), db=str(db_path))
        raise
    finally:
        conn.close()
