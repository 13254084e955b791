from datetime import date, datetime, timedelta

import pytest

from moveis.domain.models import (
    Acao,
    Acesso,
    Categoria,
    DadosAssistencia,
    DetalhesPedido,
    DetalhesSofa,
    Status,
    StatusEntrega,
    TipoMoradia,
    Unidade,
)
from moveis.exceptions import InventarioError
from moveis.usecases.estoque import Estoque


def test_adicionar_produto_registra_created(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho(nota_id="NF-1"))

    assert p.id.startswith("p-")
    assert p.status is Status.DISPONIVEL
    assert p.criado_em == p.atualizado_em
    assert len(p.historico) == 1
    criado = p.historico[0]
    assert criado.acao is Acao.CREATED
    assert criado.usuario == "ANA"
    assert criado.motivo == "Produto cadastrado na unidade Camobi"
    assert criado.detalhes["noteId"] == "NF-1"


def test_novos_produtos_entram_no_inicio(estoque, novo_rascunho):
    a = estoque.adicionar_produto(novo_rascunho(sku="A"))
    b = estoque.adicionar_produto(novo_rascunho(sku="B"))
    assert [p.id for p in estoque.produtos] == [b.id, a.id]
    assert a.id in estoque and len(estoque) == 2


def test_sku_duplicado_cancela_lote_inteiro(estoque, novo_rascunho):
    estoque.adicionar_produto(novo_rascunho(sku="LC-1"))
    with pytest.raises(InventarioError) as exc:
        estoque.adicionar_lote([novo_rascunho(sku="LC-2"), novo_rascunho(sku="LC-1")])
    assert exc.value.code == "SKU_DUPLICADO"
    assert len(estoque) == 1

    with pytest.raises(InventarioError) as exc:
        estoque.adicionar_lote([novo_rascunho(sku="X"), novo_rascunho(sku="X")])
    assert exc.value.code == "SKU_DUPLICADO"
    assert len(estoque) == 1


def test_detalhes_sofa_somente_para_sofa(estoque, novo_rascunho):
    with pytest.raises(InventarioError) as exc:
        estoque.adicionar_produto(novo_rascunho(categoria=Categoria.SOFA))
    assert exc.value.code == "DETALHES_SOFA"

    sofa = DetalhesSofa(tamanho="2.10m", tecido="Linho", fabricante="Artesano", lugares=3)
    with pytest.raises(InventarioError):
        estoque.adicionar_produto(novo_rascunho(detalhes_sofa=sofa))

    p = estoque.adicionar_produto(novo_rascunho(categoria=Categoria.SOFA, detalhes_sofa=sofa))
    assert p.detalhes_sofa.lugares == 3


def test_nome_e_sku_obrigatorios(estoque, novo_rascunho):
    for rascunho in (novo_rascunho(nome="  "), novo_rascunho(sku="")):
        with pytest.raises(InventarioError) as exc:
            estoque.adicionar_produto(rascunho)
        assert exc.value.code == "DADOS_INVALIDOS"
    assert len(estoque) == 0


def test_atualizar_produto_registra_mudancas(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho(cor="Preto"))
    estoque.atualizar_produto(p.id, {"cor": "Branco", "nome": "Cadeira Eames"}, "LUIZA")

    assert p.cor == "Branco"
    entrada = p.historico[0]
    assert entrada.acao is Acao.UPDATED
    # só o campo que mudou aparece
    assert dict(entrada.detalhes["changes"]) == {"cor": {"old": "Preto", "new": "Branco"}}
    assert p.atualizado_em > p.criado_em


def test_atualizar_campo_nao_editavel(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    with pytest.raises(InventarioError) as exc:
        estoque.atualizar_produto(p.id, {"unidade": Unidade.ESTOQUE}, "ANA")
    assert exc.value.code == "DADOS_INVALIDOS"
    assert len(p.historico) == 1


def test_atualizar_sku_para_sku_existente(estoque, novo_rascunho):
    estoque.adicionar_produto(novo_rascunho(sku="A"))
    b = estoque.adicionar_produto(novo_rascunho(sku="B"))
    with pytest.raises(InventarioError) as exc:
        estoque.atualizar_produto(b.id, {"sku": "A"}, "ANA")
    assert exc.value.code == "SKU_DUPLICADO"
    assert b.sku == "B"


def test_venda_usa_usuario_e_unidade_atual(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    estoque.alterar_status(p.id, Status.VENDIDO, "LUIZA", preco_venda=1500)

    assert p.status is Status.VENDIDO
    assert p.vendido_por == "LUIZA"
    assert p.unidade_venda is Unidade.CAMOBI
    assert p.preco_venda == 1500.0
    entrada = p.historico[0]
    assert entrada.acao is Acao.STATUS_CHANGED
    assert entrada.detalhes["oldStatus"] == "Disponível"
    assert entrada.detalhes["newStatus"] == "Vendido"
    assert entrada.detalhes["soldBy"] == "LUIZA"
    assert entrada.detalhes["soldPrice"] == 1500.0


def test_venda_com_preco_negativo(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    with pytest.raises(InventarioError):
        estoque.alterar_status(p.id, Status.VENDIDO, "ANA", preco_venda=-1)
    assert p.status is Status.DISPONIVEL


def test_voltar_para_disponivel_limpa_venda(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    estoque.alterar_status(p.id, Status.VENDIDO, "ANA", preco_venda=900)
    estoque.alterar_status(p.id, Status.DISPONIVEL, "ANA", motivo="Cliente desistiu")
    assert p.venda is None
    assert p.historico[0].motivo == "Cliente desistiu"


def test_pedido_exige_detalhes(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    with pytest.raises(InventarioError):
        estoque.alterar_status(p.id, Status.PEDIDO, "ANA")

    detalhes = DetalhesPedido(pedido_id="PED-7", data_pedido=datetime(2025, 3, 1))
    estoque.alterar_status(p.id, Status.PEDIDO, "ANA", detalhes_pedido=detalhes)
    assert p.detalhes_pedido is detalhes
    assert p.historico[0].detalhes["orderId"] == "PED-7"


def test_reserva_guarda_quem_reservou(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    estoque.alterar_status(p.id, Status.RESERVADO, "DEISE")
    assert p.estado.reservado_por == "DEISE"


def test_assistencia_preserva_venda(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    estoque.alterar_status(p.id, Status.VENDIDO, "ANA", preco_venda=2000)
    estoque.alterar_status(
        p.id, Status.ASSISTENCIA, "ANA",
        assistencia={"motivo": "Pé quebrado", "data_contato": "2025-03-12", "cliente": "Maria"},
    )

    assert p.status is Status.ASSISTENCIA
    assert p.assistencia.cliente == "Maria"
    assert p.assistencia.aberto_em is not None
    assert p.vendido_por == "ANA" and p.preco_venda == 2000
    assert p.historico[0].acao is Acao.ASSISTANCE_OPENED


def test_assistencia_sem_dados(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    with pytest.raises(InventarioError):
        estoque.alterar_status(p.id, Status.ASSISTENCIA, "ANA")
    with pytest.raises(InventarioError):
        estoque.alterar_status(p.id, Status.ASSISTENCIA, "ANA",
                               assistencia=DadosAssistencia(motivo="x", data_contato="", cliente="y"))
    assert len(p.historico) == 1


def test_transferir_produto(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    estoque.transferir_produto(p.id, Unidade.ESTOQUE, "ANA")
    assert p.unidade is Unidade.ESTOQUE
    entrada = p.historico[0]
    assert entrada.acao is Acao.TRANSFERRED
    assert (entrada.detalhes["oldUnit"], entrada.detalhes["newUnit"]) == ("Camobi", "Estoque")

    with pytest.raises(InventarioError):
        estoque.transferir_produto(p.id, Unidade.ESTOQUE, "ANA")


def test_operacao_nao_afeta_produtos_da_mesma_nota(estoque, novo_rascunho):
    a, b = estoque.adicionar_lote([novo_rascunho(sku="N-1", nota_id="N"), novo_rascunho(sku="N-2", nota_id="N")])
    estoque.alterar_status(a.id, Status.VENDIDO, "ANA")
    assert b.status is Status.DISPONIVEL
    assert len(b.historico) == 1


def test_registrar_entrega_apartamento_e_casa(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    estoque.registrar_entrega(p.id, "Rua A, 10", "ANA", tipo=TipoMoradia.APARTAMENTO,
                              numero_apartamento="301", andar="3", acesso=Acesso.ELEVADOR)
    assert p.entrega.status is StatusEntrega.PENDENTE
    assert p.entrega.numero_apartamento == "301"
    assert p.historico[0].acao is Acao.DELIVERY_INFO_SET
    assert p.historico[0].motivo.endswith("Rua A, 10")

    estoque.registrar_entrega(p.id, "Rua B, 20", "ANA", tipo=TipoMoradia.CASA,
                              numero_apartamento="301", andar="3", acesso=Acesso.ESCADA)
    assert p.entrega.endereco == "Rua B, 20"
    assert p.entrega.numero_apartamento is None
    assert p.entrega.andar is None and p.entrega.acesso is None


def test_registrar_entrega_sem_endereco(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    with pytest.raises(InventarioError) as exc:
        estoque.registrar_entrega(p.id, "   ", "ANA")
    assert exc.value.code == "DADOS_INVALIDOS"
    assert p.entrega is None


def test_fluxo_da_entrega(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    with pytest.raises(InventarioError) as exc:
        estoque.agendar_entrega(p.id, date(2025, 3, 20), "ANA")
    assert exc.value.code == "ENTREGA_NAO_REGISTRADA"

    estoque.registrar_entrega(p.id, "Rua A, 10", "ANA")
    estoque.agendar_entrega(p.id, date(2025, 3, 20), "ANA")
    assert p.entrega.status is StatusEntrega.AGENDADA
    assert p.entrega.data_agendada == "2025-03-20"
    # reagendar é permitido
    estoque.agendar_entrega(p.id, "2025-03-22", "ANA")
    assert p.entrega.data_agendada == "2025-03-22"

    estoque.marcar_entregue(p.id, "ANA")
    assert p.entrega.status is StatusEntrega.ENTREGUE
    assert p.entrega.entregue_em is not None
    assert p.historico[0].detalhes["scope"] == "entrega"

    for acao in (lambda: estoque.agendar_entrega(p.id, "2025-04-01", "ANA"),
                 lambda: estoque.marcar_entregue(p.id, "ANA")):
        with pytest.raises(InventarioError) as exc:
            acao()
        assert exc.value.code == "TRANSICAO_INVALIDA"


def test_novo_endereco_substitui_entrega_concluida(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    estoque.registrar_entrega(p.id, "Rua A", "ANA")
    estoque.marcar_entregue(p.id, "ANA")

    estoque.registrar_entrega(p.id, "Rua C", "ANA")
    assert p.entrega.endereco == "Rua C"
    assert p.entrega.status is StatusEntrega.PENDENTE
    assert p.entrega.entregue_em is None
    assert p.historico[0].acao is Acao.DELIVERY_INFO_SET


def test_remover_exige_admin(estoque, novo_rascunho):
    p = estoque.adicionar_produto(novo_rascunho())
    with pytest.raises(InventarioError) as exc:
        estoque.remover_produto(p.id, "ANA")
    assert exc.value.code == "PERMISSAO_NEGADA"
    assert p.id in estoque

    assert estoque.remover_produto(p.id, "admin") is True
    assert p.id not in estoque
    assert estoque.removidos[0].historico[0].acao is Acao.DELETED
    # idempotente
    assert estoque.remover_produto(p.id, "ADMIN") is True


def test_id_inexistente(estoque):
    with pytest.raises(InventarioError) as exc:
        estoque.alterar_status("p-x", Status.VENDIDO, "ANA")
    assert exc.value.code == "PRODUTO_NAO_ENCONTRADO"
    assert estoque.obter("p-x") is None


def test_relogio_nunca_retrocede(novo_rascunho):
    leituras = iter([datetime(2025, 3, 10, 10), datetime(2025, 3, 10, 9), datetime(2025, 3, 10, 11)])
    estoque = Estoque(relogio=lambda: next(leituras))
    p = estoque.adicionar_produto(novo_rascunho())
    estoque.alterar_status(p.id, Status.RESERVADO, "ANA")
    estoque.alterar_status(p.id, Status.DISPONIVEL, "ANA")
    tempos = [e.timestamp for e in p.historico.cronologico]
    assert tempos == sorted(tempos)
    assert tempos[1] == datetime(2025, 3, 10, 10)


def test_estatisticas(estoque, novo_rascunho):
    a = estoque.adicionar_produto(novo_rascunho(sku="A"))
    estoque.adicionar_produto(novo_rascunho(sku="B", unidade=Unidade.ESTOQUE))
    estoque.alterar_status(a.id, Status.VENDIDO, "ANA")
    estoque.registrar_entrega(a.id, "Rua A", "ANA")

    st = estoque.estatisticas()
    assert st.total == 2
    assert st.vendidos == 1 and st.disponiveis == 1
    assert st.entregas_pendentes == 1
    assert st.por_unidade[Unidade.CAMOBI] == 1
    assert st.por_unidade[Unidade.PRACA_NOVA] == 0
    assert [p.id for p in estoque.produtos_por_status(Status.VENDIDO)] == [a.id]
    assert [p.id for p in estoque.produtos_por_unidade(Unidade.CAMOBI)] == [a.id]
    assert [p.sku for p in estoque.produtos_por_unidade("Estoque")] == ["B"]
    assert estoque.produtos_por_unidade(Unidade.PRACA_NOVA) == []
    assert sum(st.por_unidade.values()) == st.total
