# moveis/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: produto (estado e detalhes como JSON) e histórico somente de inclusão
V2: produto_removido (auditoria das remoções) e índices de consulta
"""

from __future__ import annotations

from typing import List

from .db import connect
from .logger import log_database_operation


SCHEMA_V1: List[str] = [
    # Catálogo de produtos (uma linha por unidade física)
    """
    CREATE TABLE IF NOT EXISTS produto (
        id TEXT PRIMARY KEY,
        sku TEXT NOT NULL UNIQUE,
        nome TEXT NOT NULL,
        categoria TEXT NOT NULL,
        unidade TEXT NOT NULL,
        status TEXT NOT NULL,
        cor TEXT,
        fabricante TEXT,
        nota_id TEXT,
        descricao TEXT,
        criado_em TEXT NOT NULL,
        criado_por TEXT NOT NULL,
        atualizado_em TEXT NOT NULL,
        estado_json TEXT NOT NULL,     -- variante de status com seus dados
        sofa_json TEXT,
        entrega_json TEXT,
        imagens_json TEXT,
        ordem INTEGER NOT NULL DEFAULT 0 -- posição na lista (0 = mais recente)
    );
    """,
    # Histórico de auditoria: linhas nunca são alteradas
    """
    CREATE TABLE IF NOT EXISTS historico (
        id TEXT PRIMARY KEY,
        produto_id TEXT NOT NULL,
        seq INTEGER NOT NULL,
        acao TEXT NOT NULL,
        usuario TEXT NOT NULL,
        timestamp TEXT NOT NULL,
        detalhes_json TEXT
    );
    """,
]


def _ensure_column(conn, table: str, column: str, ddl: str) -> None:
    """Adiciona coluna se não existir."""
    cur = conn.execute(f"PRAGMA table_info({table});")
    cols = [r[1] for r in cur.fetchall()]  # r[1] é o nome da coluna
    if column not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {ddl};")


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS produto_removido (
            id TEXT PRIMARY KEY,
            sku TEXT NOT NULL,
            nome TEXT,
            removido_por TEXT,
            removido_em TEXT
        );
        CREATE INDEX IF NOT EXISTS ix_historico_produto ON historico (produto_id, seq);
        CREATE INDEX IF NOT EXISTS ix_produto_status ON produto (status);
        """
    )
    # bancos V1 antigos podem não ter a coluna de ordenação
    _ensure_column(conn, "produto", "ordem", "ordem INTEGER NOT NULL DEFAULT 0")


def apply_migrations(db_path: str) -> int:
    """Aplica migrações incrementais de acordo com PRAGMA user_version.

    Retorna a versão final do schema.
    """
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0
        inicial = ver

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2

    if ver != inicial:
        log_database_operation("schema", "MIGRATE", de=inicial, para=ver)
    return ver
