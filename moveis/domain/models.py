# moveis/domain/models.py
"""
Modelos (dataclasses) do domínio da loja de móveis.

Observação importante:
- O status do produto é modelado como uma união de variantes
  (Disponivel | Vendido | Pedido | Reservado | EmAssistencia). Cada
  variante carrega apenas os dados que fazem sentido para ela, de modo
  que um produto vendido sem vendedor não pode ser representado.
- O histórico é um log somente de inclusão; a leitura é do mais novo
  para o mais antigo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Optional, Tuple, Union


class Categoria(str, Enum):
    SOFA = "Sofá"
    POLTRONA = "Poltrona"
    CADEIRA = "Cadeira"
    BANQUETA = "Banqueta"
    MESA = "Mesa"
    OUTROS = "Outros"


class Unidade(str, Enum):
    PRACA_NOVA = "Shopping Praça Nova"
    CAMOBI = "Camobi"
    ESTOQUE = "Estoque"


class Status(str, Enum):
    DISPONIVEL = "Disponível"
    VENDIDO = "Vendido"
    PEDIDO = "Pedido"
    RESERVADO = "Reservado"
    ASSISTENCIA = "Assistência"


class Acao(str, Enum):
    CREATED = "CREATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    TRANSFERRED = "TRANSFERRED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    DELIVERY_INFO_SET = "DELIVERY_INFO_SET"
    ASSISTANCE_OPENED = "ASSISTANCE_OPENED"


class StatusEntrega(str, Enum):
    PENDENTE = "Pendente"
    AGENDADA = "Agendada"
    ENTREGUE = "Entregue"

    @property
    def ordem(self) -> int:
        return list(StatusEntrega).index(self)


class TipoMoradia(str, Enum):
    CASA = "Casa"
    APARTAMENTO = "Apartamento"


class Acesso(str, Enum):
    ESCADA = "Escada"
    ELEVADOR = "Elevador"


# -------------------------
# Objetos de valor
# -------------------------

@dataclass(frozen=True)
class DetalhesSofa:
    """Detalhes exigidos apenas para a categoria Sofá."""
    tamanho: str
    tecido: str
    fabricante: str
    lugares: int


@dataclass(frozen=True)
class DetalhesPedido:
    """Pedido de fábrica/fornecedor ainda não recebido."""
    pedido_id: str
    data_pedido: datetime
    previsao_entrega: Optional[datetime] = None
    quantidade: int = 1
    moeda: str = "BRL"
    fornecedor: Optional[str] = None
    observacoes: Optional[str] = None


@dataclass(frozen=True)
class DadosAssistencia:
    """Chamado de assistência pós-venda."""
    motivo: str
    data_contato: str
    cliente: str
    aberto_em: Optional[datetime] = None


@dataclass(frozen=True)
class InfoEntrega:
    """Endereço e andamento da entrega ao cliente."""
    endereco: str
    status: StatusEntrega = StatusEntrega.PENDENTE
    ponto_referencia: Optional[str] = None
    tipo: Optional[TipoMoradia] = None
    numero_apartamento: Optional[str] = None   # apenas apartamento
    andar: Optional[str] = None                # apenas apartamento
    acesso: Optional[Acesso] = None            # apenas apartamento
    data_agendada: Optional[str] = None
    entregue_em: Optional[datetime] = None


# -------------------------
# Variantes de status
# -------------------------

@dataclass(frozen=True)
class Disponivel:
    status: ClassVar[Status] = Status.DISPONIVEL


@dataclass(frozen=True)
class Vendido:
    vendido_por: str
    vendido_em: datetime
    unidade_venda: Unidade
    preco_venda: Optional[float] = None
    status: ClassVar[Status] = Status.VENDIDO


@dataclass(frozen=True)
class Pedido:
    detalhes: DetalhesPedido
    status: ClassVar[Status] = Status.PEDIDO


@dataclass(frozen=True)
class Reservado:
    reservado_por: str
    reservado_em: datetime
    status: ClassVar[Status] = Status.RESERVADO


@dataclass(frozen=True)
class EmAssistencia:
    dados: DadosAssistencia
    venda: Optional[Vendido] = None
    status: ClassVar[Status] = Status.ASSISTENCIA


EstadoProduto = Union[Disponivel, Vendido, Pedido, Reservado, EmAssistencia]


# -------------------------
# Histórico
# -------------------------

@dataclass(frozen=True)
class EntradaHistorico:
    """Registro de auditoria imutável."""
    id: str
    acao: Acao
    usuario: str
    timestamp: datetime
    detalhes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "detalhes", MappingProxyType(dict(self.detalhes)))

    @property
    def motivo(self) -> Optional[str]:
        return self.detalhes.get("reason")


class Historico:
    """Log de auditoria somente de inclusão.

    Internamente as entradas ficam em ordem cronológica; a iteração e
    ``entradas`` devolvem a visão do mais novo para o mais antigo.
    """

    def __init__(self, entradas: Optional[List[EntradaHistorico]] = None) -> None:
        # `entradas` chega em ordem cronológica (mais antiga primeiro)
        self._log: List[EntradaHistorico] = list(entradas or [])

    def registrar(self, entrada: EntradaHistorico) -> None:
        self._log.append(entrada)

    @property
    def entradas(self) -> Tuple[EntradaHistorico, ...]:
        return tuple(reversed(self._log))

    @property
    def cronologico(self) -> Tuple[EntradaHistorico, ...]:
        return tuple(self._log)

    @property
    def ultima(self) -> Optional[EntradaHistorico]:
        return self._log[-1] if self._log else None

    def __iter__(self) -> Iterator[EntradaHistorico]:
        return iter(self.entradas)

    def __len__(self) -> int:
        return len(self._log)

    def __getitem__(self, idx: int) -> EntradaHistorico:
        return self.entradas[idx]


# -------------------------
# Produto
# -------------------------

@dataclass
class RascunhoProduto:
    """Dados de entrada do cadastro (sem id, datas e histórico)."""
    sku: str
    nome: str
    categoria: Categoria
    unidade: Unidade
    criado_por: str
    cor: str = ""
    fabricante: str = ""
    nota_id: Optional[str] = None
    descricao: str = ""
    detalhes_sofa: Optional[DetalhesSofa] = None
    estado: EstadoProduto = field(default_factory=Disponivel)
    imagens: List[str] = field(default_factory=list)


@dataclass
class Produto:
    """Item do catálogo."""
    id: str
    sku: str
    nome: str
    categoria: Categoria
    unidade: Unidade
    estado: EstadoProduto
    criado_em: datetime
    criado_por: str
    atualizado_em: datetime
    historico: Historico = field(default_factory=Historico)
    cor: str = ""
    fabricante: str = ""
    nota_id: Optional[str] = None
    descricao: str = ""
    detalhes_sofa: Optional[DetalhesSofa] = None
    entrega: Optional[InfoEntrega] = None
    imagens: List[str] = field(default_factory=list)

    @property
    def status(self) -> Status:
        return self.estado.status

    @property
    def venda(self) -> Optional[Vendido]:
        if isinstance(self.estado, Vendido):
            return self.estado
        if isinstance(self.estado, EmAssistencia):
            return self.estado.venda
        return None

    @property
    def vendido_por(self) -> Optional[str]:
        return self.venda.vendido_por if self.venda else None

    @property
    def vendido_em(self) -> Optional[datetime]:
        return self.venda.vendido_em if self.venda else None

    @property
    def unidade_venda(self) -> Optional[Unidade]:
        return self.venda.unidade_venda if self.venda else None

    @property
    def preco_venda(self) -> Optional[float]:
        return self.venda.preco_venda if self.venda else None

    @property
    def detalhes_pedido(self) -> Optional[DetalhesPedido]:
        return self.estado.detalhes if isinstance(self.estado, Pedido) else None

    @property
    def assistencia(self) -> Optional[DadosAssistencia]:
        return self.estado.dados if isinstance(self.estado, EmAssistencia) else None

    def resumo(self) -> Dict[str, Any]:
        """Linha resumida para tabelas."""
        return {
            "id": self.id,
            "sku": self.sku,
            "nome": self.nome,
            "categoria": self.categoria.value,
            "unidade": self.unidade.value,
            "status": self.status.value,
            "vendido_por": self.vendido_por or "",
            "preco_venda": self.preco_venda,
            "entrega": self.entrega.status.value if self.entrega else "",
        }
