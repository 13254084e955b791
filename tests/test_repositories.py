from pathlib import Path

import pytest

from moveis.domain.models import Acao, Status, StatusEntrega, Unidade
from moveis.infra.db import connect
from moveis.infra.migrations import apply_migrations
from moveis.infra.repositories import EstoqueRepo, HistoricoRepo, ProdutoRepo
from moveis.usecases.estoque import Estoque


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    path = str(tmp_path / "moveis_test.sqlite")
    apply_migrations(path)
    return path


def test_migrations_idempotentes(db_path):
    assert apply_migrations(db_path) == 2
    with connect(db_path) as c:
        tabelas = {r[0] for r in c.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"produto", "historico", "produto_removido"} <= tabelas


def test_salvar_e_carregar_preserva_estoque(db_path, estoque, novo_rascunho):
    a = estoque.adicionar_produto(novo_rascunho(sku="A"))
    b = estoque.adicionar_produto(novo_rascunho(sku="B"))
    estoque.alterar_status(a.id, Status.VENDIDO, "ANA", preco_venda=1500)
    estoque.registrar_entrega(a.id, "Rua A, 10", "ANA")
    estoque.agendar_entrega(a.id, "2025-03-20", "ANA")

    repo = EstoqueRepo(db_path)
    repo.salvar(estoque)
    carregado = repo.carregar()

    assert [p.id for p in carregado.produtos] == [b.id, a.id]
    a2 = carregado.obter(a.id)
    assert a2.preco_venda == 1500.0
    assert a2.entrega.status is StatusEntrega.AGENDADA
    assert [e.acao for e in a2.historico] == [e.acao for e in a.historico]
    assert a2.historico[0].detalhes["scope"] == "entrega"


def test_salvar_duas_vezes_nao_duplica_historico(db_path, estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    repo = EstoqueRepo(db_path)
    repo.salvar(estoque)
    estoque.transferir_produto(p.id, Unidade.ESTOQUE, "ANA")
    repo.salvar(estoque)

    entradas = HistoricoRepo(db_path).por_produto(p.id)[p.id]
    assert [e.acao for e in entradas] == [Acao.CREATED, Acao.TRANSFERRED]


def test_troca_de_sku_entre_produtos(db_path, estoque, novo_rascunho):
    a = estoque.adicionar_produto(novo_rascunho(sku="A"))
    b = estoque.adicionar_produto(novo_rascunho(sku="B"))
    repo = EstoqueRepo(db_path)
    repo.salvar(estoque)

    estoque.atualizar_produto(a.id, {"sku": "TMP"}, "ANA")
    estoque.atualizar_produto(b.id, {"sku": "A"}, "ANA")
    estoque.atualizar_produto(a.id, {"sku": "B"}, "ANA")
    repo.salvar(estoque)

    skus = {r["id"]: r["sku"] for r in ProdutoRepo(db_path).get_all()}
    assert skus == {a.id: "B", b.id: "A"}


def test_remocao_persistida(db_path, estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    repo = EstoqueRepo(db_path)
    repo.salvar(estoque)

    carregado = repo.carregar(admins=["ADMIN"])
    carregado.remover_produto(p.id, "ADMIN")
    repo.salvar(carregado)

    assert len(repo.carregar()) == 0
    removidos = ProdutoRepo(db_path).removidos()
    assert removidos[0]["id"] == p.id and removidos[0]["removido_por"] == "ADMIN"
    # o histórico da remoção continua gravado
    entradas = HistoricoRepo(db_path).por_produto(p.id)[p.id]
    assert entradas[-1].acao is Acao.DELETED


def test_falha_no_meio_do_salvar_nao_grava_nada(db_path, estoque, novo_rascunho, monkeypatch):
    p = estoque.adicionar_produto(novo_rascunho(sku="A"))
    repo = EstoqueRepo(db_path)
    repo.salvar(estoque)

    carregado = repo.carregar(admins=["ADMIN"])
    carregado.remover_produto(p.id, "ADMIN")
    carregado.adicionar_produto(novo_rascunho(sku="B"))

    def falha(*args, **kwargs):
        raise RuntimeError("disco cheio")

    monkeypatch.setattr(repo.produtos, "upsert", falha)
    with pytest.raises(RuntimeError):
        repo.salvar(carregado)

    # remoção e histórico desfeitos junto com a gravação dos produtos
    assert [x.id for x in repo.carregar().produtos] == [p.id]
    assert ProdutoRepo(db_path).removidos() == []
    entradas = HistoricoRepo(db_path).por_produto(p.id)[p.id]
    assert [e.acao for e in entradas] == [Acao.CREATED]


def test_carregar_repassa_argumentos(db_path, relogio):
    estoque = EstoqueRepo(db_path).carregar(relogio=relogio)
    assert isinstance(estoque, Estoque)
    assert len(estoque) == 0
