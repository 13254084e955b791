"""
Estatísticas e visões derivadas do estoque.

Tudo aqui é calculado a partir da lista atual de produtos a cada
leitura; não há cache. As funções são puras: recebem os produtos (e o
instante de referência, quando necessário) e não alteram nada.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from moveis.config import SYSTEM_USERS
from moveis.domain.models import Produto, Status, StatusEntrega, Unidade
from moveis.exceptions import InventarioError


PERIODOS = ("dias", "semanas", "meses", "anos", "personalizado")

DIAS_SEMANA = ["seg", "ter", "qua", "qui", "sex", "sáb", "dom"]
MESES = ["jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"]


@dataclass
class Estatisticas:
    total: int = 0
    disponiveis: int = 0
    vendidos: int = 0
    pedidos: int = 0
    reservados: int = 0
    assistencias: int = 0
    entregas_pendentes: int = 0
    por_unidade: Dict[Unidade, int] = field(default_factory=lambda: {u: 0 for u in Unidade})

    def as_dict(self) -> Dict[str, object]:
        return {
            "total": self.total,
            "disponiveis": self.disponiveis,
            "vendidos": self.vendidos,
            "pedidos": self.pedidos,
            "reservados": self.reservados,
            "assistencias": self.assistencias,
            "entregas_pendentes": self.entregas_pendentes,
            "por_unidade": {u.value: n for u, n in self.por_unidade.items()},
        }


@dataclass(frozen=True)
class PontoSerie:
    rotulo: str
    inicio: datetime
    fim: datetime   # exclusivo
    total: float


@dataclass(frozen=True)
class PosicaoRanking:
    vendedor: str
    total: float


# ----------------------
# contagens
# ----------------------

def entrega_pendente(p: Produto) -> bool:
    return p.entrega is not None and p.entrega.status is not StatusEntrega.ENTREGUE


def calcular_estatisticas(produtos: Iterable[Produto]) -> Estatisticas:
    """Contagens totais, por status, entregas pendentes e por unidade."""
    st = Estatisticas()
    por_status = {
        Status.DISPONIVEL: "disponiveis",
        Status.VENDIDO: "vendidos",
        Status.PEDIDO: "pedidos",
        Status.RESERVADO: "reservados",
        Status.ASSISTENCIA: "assistencias",
    }
    for p in produtos:
        st.total += 1
        attr = por_status[p.status]
        setattr(st, attr, getattr(st, attr) + 1)
        if entrega_pendente(p):
            st.entregas_pendentes += 1
        st.por_unidade[p.unidade] += 1
    return st


# ----------------------
# vendas
# ----------------------

def _vendidos(produtos: Iterable[Produto]) -> List[Produto]:
    return [p for p in produtos if p.status is Status.VENDIDO and p.vendido_em and p.preco_venda]


def vendas_por_unidade(produtos: Iterable[Produto]) -> Dict[Unidade, float]:
    """Soma de ``preco_venda`` dos produtos vendidos, pela unidade da venda."""
    totais: Dict[Unidade, float] = {u: 0.0 for u in Unidade}
    for p in produtos:
        if p.status is not Status.VENDIDO or not p.preco_venda:
            continue
        unidade = p.unidade_venda or p.unidade
        totais[unidade] += float(p.preco_venda)
    return totais


def participacao_por_unidade(totais: Dict[Unidade, float]) -> Dict[Unidade, int]:
    """Percentual (arredondado) de cada unidade no total vendido."""
    soma = sum(totais.values())
    if soma <= 0:
        return {u: 0 for u in totais}
    return {u: round(v / soma * 100) for u, v in totais.items()}


def _inicio_dia(d: date) -> datetime:
    return datetime.combine(d, time.min)


def _primeiro_do_mes(d: date, deslocamento: int = 0) -> date:
    idx = d.year * 12 + (d.month - 1) + deslocamento
    return date(idx // 12, idx % 12 + 1, 1)


def _somar(vendidos: Sequence[Produto], inicio: datetime, fim: datetime) -> float:
    return float(sum(p.preco_venda or 0.0 for p in vendidos if inicio <= p.vendido_em < fim))


def serie_vendas(
    produtos: Iterable[Produto],
    periodo: str = "dias",
    agora: Optional[datetime] = None,
    inicio: Optional[date] = None,
    fim: Optional[date] = None,
) -> List[PontoSerie]:
    """Série temporal das vendas (soma de ``preco_venda`` por intervalo).

    Períodos relativos a ``agora``:
        - ``dias``: últimos 7 dias, um ponto por dia
        - ``semanas``: últimas 4 semanas (segunda a domingo)
        - ``meses``: últimos 12 meses
        - ``anos``: últimos 5 anos
        - ``personalizado``: de ``inicio`` a ``fim`` (inclusive); até 31
          dias por dia, até 366 dias por semana, acima disso por mês
    """
    if periodo not in PERIODOS:
        raise InventarioError("DADOS_INVALIDOS", f"Período inválido: {periodo}", periodo=periodo)
    agora = agora or datetime.now()
    hoje = agora.date()
    vendidos = _vendidos(produtos)
    pontos: List[PontoSerie] = []

    def ponto(rotulo: str, ini: datetime, fim_: datetime) -> None:
        pontos.append(PontoSerie(rotulo, ini, fim_, _somar(vendidos, ini, fim_)))

    if periodo == "dias":
        for i in range(6, -1, -1):
            dia = hoje - timedelta(days=i)
            ponto(DIAS_SEMANA[dia.weekday()], _inicio_dia(dia), _inicio_dia(dia + timedelta(days=1)))
    elif periodo == "semanas":
        for i in range(3, -1, -1):
            ref = hoje - timedelta(days=7 * i)
            seg = ref - timedelta(days=ref.weekday())
            ponto(f"Sem {seg.day} {MESES[seg.month - 1]}", _inicio_dia(seg), _inicio_dia(seg + timedelta(days=7)))
    elif periodo == "meses":
        for i in range(11, -1, -1):
            m = _primeiro_do_mes(hoje, -i)
            ponto(MESES[m.month - 1], _inicio_dia(m), _inicio_dia(_primeiro_do_mes(m, 1)))
    elif periodo == "anos":
        for i in range(4, -1, -1):
            ano = hoje.year - i
            ponto(str(ano), datetime(ano, 1, 1), datetime(ano + 1, 1, 1))
    else:
        if inicio is None or fim is None:
            raise InventarioError("DADOS_INVALIDOS", "Período personalizado exige data inicial e final")
        if fim < inicio:
            raise InventarioError("DADOS_INVALIDOS", "Data final anterior à data inicial",
                                  inicio=inicio.isoformat(), fim=fim.isoformat())
        limite = _inicio_dia(fim + timedelta(days=1))
        dias = (fim - inicio).days + 1
        if dias <= 31:
            for i in range(dias):
                dia = inicio + timedelta(days=i)
                ponto(dia.strftime("%d/%m"), _inicio_dia(dia), _inicio_dia(dia + timedelta(days=1)))
        elif dias <= 366:
            atual = _inicio_dia(inicio)
            while atual < limite:
                prox = atual + timedelta(days=7)
                ponto(f"{atual.day} {MESES[atual.month - 1]}", atual, prox)
                atual = prox
        else:
            m = _primeiro_do_mes(inicio)
            while _inicio_dia(m) < limite:
                prox = _primeiro_do_mes(m, 1)
                ponto(f"{MESES[m.month - 1]}/{m.strftime('%y')}", _inicio_dia(m), _inicio_dia(prox))
                m = prox
    return pontos


def ranking_vendedores(
    produtos: Iterable[Produto],
    vendedores: Sequence[str] = SYSTEM_USERS,
    vendedor: Optional[str] = None,
) -> List[PosicaoRanking]:
    """Total vendido por vendedor (toda a equipe, inclusive quem não vendeu).

    Ordenado do maior para o menor; empates mantêm a ordem da equipe.
    """
    totais: Dict[str, float] = {v: 0.0 for v in vendedores}
    for p in produtos:
        if p.status is not Status.VENDIDO or not p.vendido_por:
            continue
        totais[p.vendido_por] = totais.get(p.vendido_por, 0.0) + float(p.preco_venda or 0.0)
    ranking = sorted((PosicaoRanking(v, t) for v, t in totais.items()), key=lambda r: -r.total)
    if vendedor:
        ranking = [r for r in ranking if r.vendedor == vendedor]
    return ranking


# ----------------------
# visões filtradas
# ----------------------

def filtrar_produtos(
    produtos: Iterable[Produto],
    status: Optional[Status] = None,
    unidade: Optional[Unidade] = None,
    vendedor: Optional[str] = None,
    busca: Optional[str] = None,
) -> List[Produto]:
    """Filtra por status, unidade, vendedor e texto (nome ou SKU)."""
    termo = (busca or "").strip().lower()
    out: List[Produto] = []
    for p in produtos:
        if status is not None and p.status is not status:
            continue
        if unidade is not None and p.unidade is not unidade:
            continue
        if vendedor and p.vendido_por != vendedor:
            continue
        if termo and termo not in p.nome.lower() and termo not in p.sku.lower():
            continue
        out.append(p)
    return out


def vendas(
    produtos: Iterable[Produto],
    vendedor: Optional[str] = None,
    inicio: Optional[date] = None,
    fim: Optional[date] = None,
) -> List[Produto]:
    """Produtos vendidos, da venda mais recente para a mais antiga."""
    out = [p for p in produtos if p.status is Status.VENDIDO and p.vendido_em]
    if vendedor:
        out = [p for p in out if p.vendido_por == vendedor]
    if inicio:
        out = [p for p in out if p.vendido_em.date() >= inicio]
    if fim:
        out = [p for p in out if p.vendido_em.date() <= fim]
    out.sort(key=lambda p: p.vendido_em, reverse=True)
    return out


def entregas_pendentes(
    produtos: Iterable[Produto],
    data_venda: Optional[date] = None,
    ordem: str = "recentes",
) -> List[Produto]:
    """Entregas com endereço e ainda não entregues.

    ``data_venda`` restringe ao dia da venda; ``ordem`` é ``recentes``
    ou ``antigas`` (pela data da venda).
    """
    if ordem not in ("recentes", "antigas"):
        raise InventarioError("DADOS_INVALIDOS", f"Ordem inválida: {ordem}")
    out = [p for p in produtos if entrega_pendente(p)]
    if data_venda:
        out = [p for p in out if p.vendido_em and p.vendido_em.date() == data_venda]
    out.sort(key=lambda p: p.vendido_em or datetime.min, reverse=(ordem == "recentes"))
    return out


def entregas_concluidas(produtos: Iterable[Produto]) -> List[Produto]:
    out = [p for p in produtos if p.entrega is not None and p.entrega.status is StatusEntrega.ENTREGUE]
    out.sort(key=lambda p: p.entrega.entregue_em or datetime.min, reverse=True)
    return out
