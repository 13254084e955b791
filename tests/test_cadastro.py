from datetime import date

import pytest

from moveis.domain.models import Acao, Categoria, DetalhesSofa, Status, Unidade
from moveis.exceptions import InventarioError
from moveis.usecases.cadastro import ItemPedido, run_cadastro, run_cadastro_pedido, run_cadastro_planilha


def test_cadastro_de_nota_com_varias_unidades(estoque):
    produtos = run_cadastro(estoque, "Cadeira Eames", Categoria.CADEIRA, Unidade.CAMOBI, "ANA",
                            sku="CE", quantidade=3, nota_id="NF-100")
    assert [p.sku for p in produtos] == ["NF-100-CE-001", "NF-100-CE-002", "NF-100-CE-003"]
    assert {p.nota_id for p in produtos} == {"NF-100"}
    assert len({p.id for p in produtos}) == 3
    assert all(p.historico[0].acao is Acao.CREATED for p in produtos)


def test_cadastro_sem_nota_gera_uma(estoque):
    (p,) = run_cadastro(estoque, "Mesa Oslo", "Mesa", "Estoque", "ANA", sku="MO")
    assert p.nota_id.startswith("nota-")
    assert p.sku == f"{p.nota_id}-MO-001"


def test_cadastro_com_codigos_exclusivos(estoque):
    produtos = run_cadastro(estoque, "Banqueta", Categoria.BANQUETA, Unidade.CAMOBI, "ANA",
                            quantidade=2, nota_id="NF-1", skus_exclusivos=["BQ-A", "BQ-B"])
    assert [p.sku for p in produtos] == ["NF-1-BQ-A-001", "NF-1-BQ-B-002"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"nome": "", "sku": "X"},
        {"nome": "Mesa", "sku": ""},
        {"nome": "Mesa", "sku": "X", "quantidade": 0},
        {"nome": "Mesa", "sku": "X", "status": Status.VENDIDO},
    ],
)
def test_cadastro_invalido(estoque, kwargs):
    kwargs = dict(kwargs)
    nome = kwargs.pop("nome")
    with pytest.raises(InventarioError):
        run_cadastro(estoque, nome, Categoria.MESA, Unidade.CAMOBI, "ANA", **kwargs)
    assert len(estoque) == 0


def test_cadastro_reservado(estoque):
    (p,) = run_cadastro(estoque, "Poltrona Oslo", Categoria.POLTRONA, Unidade.CAMOBI, "DEISE",
                        sku="PO", status=Status.RESERVADO)
    assert p.status is Status.RESERVADO
    assert p.estado.reservado_por == "DEISE"


def test_cadastro_como_pedido(estoque):
    sofa = DetalhesSofa(tamanho="2.30m", tecido="Veludo", fabricante="Artesano", lugares=3)
    produtos = run_cadastro(estoque, "Sofá Nápoles", Categoria.SOFA, Unidade.ESTOQUE, "ANA",
                            quantidade=2, nota_id="PED-9", status=Status.PEDIDO, detalhes_sofa=sofa,
                            data_pedido=date(2025, 3, 1), previsao_entrega=date(2025, 4, 1))
    assert [p.sku for p in produtos] == ["PED-9-001-001", "PED-9-001-002"]
    assert all(p.status is Status.PEDIDO for p in produtos)
    assert produtos[0].detalhes_pedido.quantidade == 2


def test_pedido_com_varios_itens(estoque):
    itens = [
        ItemPedido(nome="Cadeira Bertoia", categoria=Categoria.CADEIRA, quantidade=2, sku="CB"),
        ItemPedido(nome="Mesa Jantar", categoria=Categoria.MESA, skus_exclusivos=["MJ-1"], unidade=Unidade.CAMOBI),
    ]
    produtos = run_cadastro_pedido(estoque, itens, "ANA", Unidade.ESTOQUE,
                                   date(2025, 3, 1), date(2025, 3, 20), pedido_id="PED-2", fornecedor="Oppa")
    assert [p.sku for p in produtos] == ["PED-2-CB-001", "PED-2-CB-002", "PED-2-MJ-1"]
    assert produtos[2].unidade is Unidade.CAMOBI
    detalhes = produtos[0].detalhes_pedido
    assert detalhes.quantidade == 3 and detalhes.fornecedor == "Oppa"


def test_pedido_exige_datas_coerentes(estoque):
    item = ItemPedido(nome="Mesa")
    with pytest.raises(InventarioError):
        run_cadastro_pedido(estoque, [item], "ANA", Unidade.ESTOQUE, None, date(2025, 3, 20))
    with pytest.raises(InventarioError):
        run_cadastro_pedido(estoque, [item], "ANA", Unidade.ESTOQUE, date(2025, 3, 20), date(2025, 3, 1))
    with pytest.raises(InventarioError):
        run_cadastro_pedido(estoque, [], "ANA", Unidade.ESTOQUE, date(2025, 3, 1), date(2025, 3, 20))
    assert len(estoque) == 0


def test_cadastro_por_planilha(tmp_path, estoque):
    path = tmp_path / "cadastro.csv"
    path.write_text(
        "nome;sku;categoria;unidade;quantidade;nota;tamanho;tecido;lugares\n"
        "Sofá Lisboa;SL;Sofá;Camobi;2;NF-5;2.10m;Linho;3\n"
        "Cadeira Oslo;CO;Cadeira;;1;;;;\n",
        encoding="utf-8",
    )
    info = run_cadastro_planilha(estoque, str(path), "ANA")
    assert info["linhas"] == 2 and info["produtos"] == 3
    sofa = estoque.buscar_sku("NF-5-SL-001")
    assert sofa.detalhes_sofa.tecido == "Linho"
    cadeira = [p for p in estoque.produtos if p.nome == "Cadeira Oslo"][0]
    assert cadeira.unidade is Unidade.ESTOQUE


def test_planilha_com_sofa_incompleto_nao_cadastra_nada(tmp_path, estoque):
    path = tmp_path / "cadastro.csv"
    path.write_text("nome;sku;categoria\nMesa;M;Mesa\nSofá;S;Sofá\n", encoding="utf-8")
    with pytest.raises(InventarioError) as exc:
        run_cadastro_planilha(estoque, str(path), "ANA")
    assert exc.value.code == "DETALHES_SOFA"
    assert len(estoque) == 0
