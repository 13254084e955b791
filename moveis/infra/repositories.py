# moveis/infra/repositories.py
"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Classes:
- ProdutoRepo
- HistoricoRepo
- EstoqueRepo (carrega/salva um Estoque inteiro)
"""

from __future__ import annotations

import sqlite3
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from .db import connect
from .logger import log_database_operation
from .serializacao import (
    dumps,
    entrada_from_dict,
    entrega_to_dict,
    estado_to_dict,
    loads,
    produto_from_dict,
    sofa_to_dict,
)
from moveis.domain.models import EntradaHistorico, Produto


# -------------------------
# Helpers
# -------------------------

@contextmanager
def _usar(db_path: str, conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Connection]:
    """Usa a conexão recebida (transação do chamador) ou abre uma nova."""
    if conn is not None:
        yield conn
        return
    with connect(db_path) as c:
        yield c


def _rows(cur) -> List[Dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


def _produto_row(p: Produto, ordem: int) -> Dict[str, Any]:
    return {
        "id": p.id,
        "sku": p.sku,
        "nome": p.nome,
        "categoria": p.categoria.value,
        "unidade": p.unidade.value,
        "status": p.status.value,
        "cor": p.cor,
        "fabricante": p.fabricante,
        "nota_id": p.nota_id,
        "descricao": p.descricao,
        "criado_em": p.criado_em.isoformat(),
        "criado_por": p.criado_por,
        "atualizado_em": p.atualizado_em.isoformat(),
        "estado_json": dumps(estado_to_dict(p.estado)),
        "sofa_json": dumps(sofa_to_dict(p.detalhes_sofa)),
        "entrega_json": dumps(entrega_to_dict(p.entrega)),
        "imagens_json": dumps(list(p.imagens)),
        "ordem": ordem,
    }


def _produto_from_row(row: Dict[str, Any], historico: List[EntradaHistorico]) -> Produto:
    return produto_from_dict(
        {
            **row,
            "estado": loads(row["estado_json"]),
            "detalhes_sofa": loads(row["sofa_json"]),
            "entrega": loads(row["entrega_json"]),
            "imagens": loads(row["imagens_json"]) or [],
        },
        historico=historico,
    )


# -------------------------
# Produto
# -------------------------

class ProdutoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, produtos: Sequence[Produto], conn: Optional[sqlite3.Connection] = None) -> None:
        """Grava a lista inteira, na ordem recebida (0 = mais recente)."""
        with _usar(self.db_path, conn) as c:
            # libera os SKUs antes de regravar: permite trocas de SKU entre produtos
            ids = [p.id for p in produtos]
            c.executemany("UPDATE produto SET sku = '#' || id WHERE id = ?", [(i,) for i in ids])
            for ordem, p in enumerate(produtos):
                c.execute(
                    """
                    INSERT INTO produto
                        (id, sku, nome, categoria, unidade, status, cor, fabricante, nota_id,
                         descricao, criado_em, criado_por, atualizado_em, estado_json,
                         sofa_json, entrega_json, imagens_json, ordem)
                    VALUES
                        (:id, :sku, :nome, :categoria, :unidade, :status, :cor, :fabricante, :nota_id,
                         :descricao, :criado_em, :criado_por, :atualizado_em, :estado_json,
                         :sofa_json, :entrega_json, :imagens_json, :ordem)
                    ON CONFLICT(id) DO UPDATE SET
                        sku=excluded.sku,
                        nome=excluded.nome,
                        categoria=excluded.categoria,
                        unidade=excluded.unidade,
                        status=excluded.status,
                        cor=excluded.cor,
                        fabricante=excluded.fabricante,
                        nota_id=excluded.nota_id,
                        descricao=excluded.descricao,
                        atualizado_em=excluded.atualizado_em,
                        estado_json=excluded.estado_json,
                        sofa_json=excluded.sofa_json,
                        entrega_json=excluded.entrega_json,
                        imagens_json=excluded.imagens_json,
                        ordem=excluded.ordem
                    """,
                    _produto_row(p, ordem),
                )
        log_database_operation("produto", "UPSERT", len(produtos))

    def remover(self, produtos: Iterable[Produto], conn: Optional[sqlite3.Connection] = None) -> int:
        """Apaga produtos removidos e guarda o registro da remoção."""
        n = 0
        with _usar(self.db_path, conn) as c:
            for p in produtos:
                ultima = p.historico.ultima
                c.execute(
                    """
                    INSERT OR IGNORE INTO produto_removido (id, sku, nome, removido_por, removido_em)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (p.id, p.sku, p.nome,
                     ultima.usuario if ultima else None,
                     ultima.timestamp.isoformat() if ultima else None),
                )
                n += c.execute("DELETE FROM produto WHERE id = ?", (p.id,)).rowcount
        if n:
            log_database_operation("produto", "DELETE", n)
        return n

    def get_all(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            cur = c.execute("SELECT * FROM produto ORDER BY ordem, criado_em DESC")
            return _rows(cur)

    def removidos(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            cur = c.execute("SELECT * FROM produto_removido ORDER BY removido_em DESC")
            return _rows(cur)


# -------------------------
# Histórico
# -------------------------

class HistoricoRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def append(self, produtos: Iterable[Produto], conn: Optional[sqlite3.Connection] = None) -> int:
        """Insere as entradas ainda não gravadas. Entradas existentes nunca mudam."""
        inseridas = 0
        with _usar(self.db_path, conn) as c:
            for p in produtos:
                for seq, e in enumerate(p.historico.cronologico):
                    cur = c.execute(
                        """
                        INSERT OR IGNORE INTO historico
                            (id, produto_id, seq, acao, usuario, timestamp, detalhes_json)
                        VALUES (?, ?, ?, ?, ?, ?, ?)
                        """,
                        (e.id, p.id, seq, e.acao.value, e.usuario, e.timestamp.isoformat(),
                         dumps(dict(e.detalhes))),
                    )
                    inseridas += cur.rowcount
        if inseridas:
            log_database_operation("historico", "INSERT", inseridas)
        return inseridas

    def por_produto(self, produto_id: Optional[str] = None) -> Dict[str, List[EntradaHistorico]]:
        """Entradas agrupadas por produto, em ordem cronológica."""
        sql = "SELECT * FROM historico"
        params: tuple = ()
        if produto_id:
            sql += " WHERE produto_id = ?"
            params = (produto_id,)
        sql += " ORDER BY produto_id, seq"
        out: Dict[str, List[EntradaHistorico]] = defaultdict(list)
        with connect(self.db_path) as c:
            for r in _rows(c.execute(sql, params)):
                out[r["produto_id"]].append(entrada_from_dict({
                    "id": r["id"],
                    "acao": r["acao"],
                    "usuario": r["usuario"],
                    "timestamp": r["timestamp"],
                    "detalhes": loads(r["detalhes_json"]) or {},
                }))
        return out


# -------------------------
# Estoque completo
# -------------------------

class EstoqueRepo:
    """Carrega e salva o estoque em memória no SQLite."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.produtos = ProdutoRepo(db_path)
        self.historico = HistoricoRepo(db_path)

    def carregar(self, **kwargs):
        """Monta um ``Estoque`` com o conteúdo do banco (kwargs vão para o construtor)."""
        # import local: usecases depende de infra, não o contrário
        from moveis.usecases.estoque import Estoque

        hist = self.historico.por_produto()
        produtos = [_produto_from_row(r, hist.get(r["id"], [])) for r in self.produtos.get_all()]
        log_database_operation("produto", "SELECT", len(produtos))
        return Estoque(produtos, **kwargs)

    def salvar(self, estoque) -> None:
        """Persiste produtos, novas entradas de histórico e remoções numa única transação."""
        produtos = estoque.produtos
        removidos = list(estoque.removidos)
        with connect(self.db_path) as c:
            # o histórico dos removidos (com a entrada DELETED) também é gravado
            self.historico.append(removidos, conn=c)
            self.produtos.remover(removidos, conn=c)
            self.produtos.upsert(produtos, conn=c)
            self.historico.append(produtos, conn=c)
