# moveis/usecases/relatorios.py
"""
Relatórios da loja:
- resumo do estoque (contagens por status e unidade)
- lista de produtos filtrada
- vendas (lista, por unidade, série temporal e ranking de vendedores)
- entregas pendentes e concluídas
- histórico de um produto

Todas as funções retornam ``(colunas, linhas, mensagem)`` para exibição
tabular (Rich na CLI, DataTable na TUI). ``mensagem`` é None quando há
linhas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional, Tuple

from moveis.domain.estatisticas import (
    entregas_concluidas,
    entregas_pendentes,
    filtrar_produtos,
    participacao_por_unidade,
    ranking_vendedores,
    serie_vendas,
    vendas,
    vendas_por_unidade,
)
from moveis.domain.models import Status, Unidade
from moveis.exceptions import InventarioError
from moveis.infra.logger import log_system_event, system_logger
from moveis.usecases.estoque import Estoque

Relatorio = Tuple[List[str], List[List[Any]], Optional[str]]


# ----------------------
# util
# ----------------------

def formatar_moeda(valor: Optional[float]) -> str:
    """1500.5 → "R$ 1.500,50"."""
    if valor is None:
        return ""
    txt = f"{valor:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {txt}"


def _data(v: Optional[datetime]) -> str:
    return v.strftime("%d/%m/%Y %H:%M") if v else ""


def _vazio(rows: List[List[Any]], msg: str) -> Optional[str]:
    return None if rows else msg


# ----------------------
# estoque
# ----------------------

def relatorio_resumo(estoque: Estoque) -> Relatorio:
    """Contagens do estoque (uma linha por indicador)."""
    st = estoque.estatisticas()
    system_logger.info(f"REPORT_RESUMO: total={st.total}")
    columns = ["Indicador", "Quantidade"]
    rows: List[List[Any]] = [
        ["Total de produtos", st.total],
        ["Disponíveis", st.disponiveis],
        ["Vendidos", st.vendidos],
        ["Pedidos", st.pedidos],
        ["Reservados", st.reservados],
        ["Em assistência", st.assistencias],
        ["Entregas pendentes", st.entregas_pendentes],
    ]
    rows += [[f"Unidade: {u.value}", n] for u, n in st.por_unidade.items()]
    return columns, rows, None


def relatorio_produtos(
    estoque: Estoque,
    status: Optional[Status] = None,
    unidade: Optional[Unidade] = None,
    vendedor: Optional[str] = None,
    busca: Optional[str] = None,
) -> Relatorio:
    """Lista de produtos (mais recentes primeiro) com filtros opcionais."""
    produtos = filtrar_produtos(estoque.produtos, status, unidade, vendedor, busca)
    columns = ["ID", "SKU", "Nome", "Categoria", "Unidade", "Status", "Vendedor", "Entrega"]
    rows = [
        [p.id, p.sku, p.nome, p.categoria.value, p.unidade.value, p.status.value,
         p.vendido_por or "", p.entrega.status.value if p.entrega else ""]
        for p in produtos
    ]
    return columns, rows, _vazio(rows, "Nenhum produto encontrado.")


def relatorio_historico(estoque: Estoque, produto_id: str) -> Relatorio:
    """Histórico do produto, do mais novo para o mais antigo."""
    p = estoque.obter(produto_id)
    if p is None:
        raise InventarioError("PRODUTO_NAO_ENCONTRADO", produto_id=produto_id)
    columns = ["Data", "Ação", "Usuário", "Detalhes"]
    rows = []
    for e in p.historico:
        extras = [f"{k}={v}" for k, v in e.detalhes.items() if k != "reason"]
        rows.append([_data(e.timestamp), e.acao.value, e.usuario, "; ".join([e.motivo or ""] + extras).strip("; ")])
    return columns, rows, _vazio(rows, "Produto sem histórico.")


# ----------------------
# vendas
# ----------------------

def relatorio_vendas(
    estoque: Estoque,
    vendedor: Optional[str] = None,
    inicio: Optional[date] = None,
    fim: Optional[date] = None,
) -> Relatorio:
    """Vendas da mais recente para a mais antiga."""
    lista = vendas(estoque.produtos, vendedor, inicio, fim)
    columns = ["Data", "SKU", "Produto", "Vendedor", "Unidade", "Valor"]
    rows = [
        [_data(p.vendido_em), p.sku, p.nome, p.vendido_por,
         (p.unidade_venda or p.unidade).value, formatar_moeda(p.preco_venda)]
        for p in lista
    ]
    total = sum(p.preco_venda or 0.0 for p in lista)
    msg = _vazio(rows, "Nenhuma venda no período.")
    if rows:
        rows.append(["", "", "TOTAL", "", "", formatar_moeda(total)])
    return columns, rows, msg


def relatorio_vendas_por_unidade(estoque: Estoque) -> Relatorio:
    totais = vendas_por_unidade(estoque.produtos)
    perc = participacao_por_unidade(totais)
    columns = ["Unidade", "Total vendido", "Participação"]
    rows = [[u.value, formatar_moeda(v), f"{perc[u]}%"] for u, v in totais.items()]
    msg = None if sum(totais.values()) > 0 else "Nenhuma venda com valor registrado."
    return columns, rows, msg


def relatorio_serie_vendas(
    estoque: Estoque,
    periodo: str = "dias",
    agora: Optional[datetime] = None,
    inicio: Optional[date] = None,
    fim: Optional[date] = None,
) -> Relatorio:
    log_system_event("relatorio_serie_vendas_start", {"periodo": periodo})
    try:
        pontos = serie_vendas(estoque.produtos, periodo, agora, inicio, fim)
    except Exception as e:
        log_system_event("relatorio_serie_vendas_error", {"periodo": periodo, "error": str(e)}, level="error")
        raise
    columns = ["Período", "Total"]
    rows = [[pt.rotulo, formatar_moeda(pt.total)] for pt in pontos]
    msg = None if any(pt.total for pt in pontos) else "Nenhuma venda no período."
    return columns, rows, msg


def relatorio_ranking(estoque: Estoque, vendedor: Optional[str] = None) -> Relatorio:
    ranking = ranking_vendedores(estoque.produtos, vendedor=vendedor)
    columns = ["Posição", "Vendedor", "Total vendido"]
    rows = [[i, r.vendedor, formatar_moeda(r.total)] for i, r in enumerate(ranking, start=1)]
    return columns, rows, _vazio(rows, "Vendedor não encontrado.")


# ----------------------
# entregas
# ----------------------

def relatorio_entregas_pendentes(
    estoque: Estoque,
    data_venda: Optional[date] = None,
    ordem: str = "recentes",
) -> Relatorio:
    lista = entregas_pendentes(estoque.produtos, data_venda, ordem)
    columns = ["ID", "Produto", "Venda", "Endereço", "Tipo", "Status", "Agendada para"]
    rows = []
    for p in lista:
        e = p.entrega
        tipo = e.tipo.value if e.tipo else ""
        if e.numero_apartamento:
            tipo += f" {e.numero_apartamento}"
            if e.andar:
                tipo += f" ({e.andar}º andar, {e.acesso.value if e.acesso else '-'})"
        rows.append([p.id, p.nome, _data(p.vendido_em), e.endereco, tipo.strip(), e.status.value, e.data_agendada or ""])
    return columns, rows, _vazio(rows, "Nenhuma entrega pendente.")


def relatorio_entregas_concluidas(estoque: Estoque) -> Relatorio:
    lista = entregas_concluidas(estoque.produtos)
    columns = ["ID", "Produto", "Endereço", "Entregue em"]
    rows = [[p.id, p.nome, p.entrega.endereco, _data(p.entrega.entregue_em)] for p in lista]
    return columns, rows, _vazio(rows, "Nenhuma entrega concluída.")
