"""
Políticas de negócio da loja de móveis.

Este módulo contém as regras que não dependem do armazenamento:
geração de SKUs para cadastros em lote, verificação de permissão de
remoção, progressão do status de entrega e os invariantes do produto.
As funções aqui expostas são usadas pelo ``Estoque`` e pelos casos de uso.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from moveis.domain.models import Categoria, InfoEntrega, Produto, RascunhoProduto, StatusEntrega
from moveis.exceptions import InventarioError


def _seq(n: int) -> str:
    return str(n).zfill(3)


def _limpo(valor: Optional[str]) -> str:
    return (valor or "").strip()


def gerar_skus_nota(
    nota_id: str,
    quantidade: int,
    sku_base: Optional[str] = None,
    skus_exclusivos: Optional[Sequence[Optional[str]]] = None,
) -> List[str]:
    """Gera os SKUs de um cadastro com ``quantidade`` unidades na mesma nota.

    Cada unidade recebe ``{nota}-{codigo}-{seq}``, onde ``codigo`` é o
    código exclusivo informado para aquela unidade ou o SKU base. Sem
    nenhum código, o formato é ``{nota}-{seq}``.

    Exemplos:
        gerar_skus_nota("NF10", 2, "LC19") → ["NF10-LC19-001", "NF10-LC19-002"]
        gerar_skus_nota("NF10", 1)         → ["NF10-001"]
    """
    if quantidade < 1:
        raise InventarioError("DADOS_INVALIDOS", "Quantidade deve ser pelo menos 1")
    exclusivos = list(skus_exclusivos or [])
    base = _limpo(sku_base)
    skus: List[str] = []
    for i in range(quantidade):
        codigo = _limpo(exclusivos[i]) if i < len(exclusivos) else ""
        codigo = codigo or base
        if codigo:
            skus.append(f"{nota_id}-{codigo}-{_seq(i + 1)}")
        else:
            skus.append(f"{nota_id}-{_seq(i + 1)}")
    return skus


def gerar_skus_pedido(
    pedido_id: str,
    quantidade: int,
    indice_item: int,
    sku_base: Optional[str] = None,
    skus_exclusivos: Optional[Sequence[Optional[str]]] = None,
) -> List[str]:
    """Gera os SKUs de um item de pedido de fábrica.

    ``indice_item`` começa em 1. Um código exclusivo vira
    ``{pedido}-{exclusivo}``; senão ``{pedido}-{base}-{seq}`` com a base
    sendo o SKU do item ou o número sequencial do item.
    """
    if quantidade < 1:
        raise InventarioError("DADOS_INVALIDOS", "Quantidade deve ser pelo menos 1")
    exclusivos = list(skus_exclusivos or [])
    base = _limpo(sku_base) or _seq(indice_item)
    skus: List[str] = []
    for j in range(quantidade):
        exclusivo = _limpo(exclusivos[j]) if j < len(exclusivos) else ""
        if exclusivo:
            skus.append(f"{pedido_id}-{exclusivo}")
        else:
            skus.append(f"{pedido_id}-{base}-{_seq(j + 1)}")
    return skus


def skus_repetidos(skus: Iterable[str]) -> List[str]:
    """Retorna os SKUs que aparecem mais de uma vez (na ordem da primeira repetição)."""
    vistos = set()
    repetidos: List[str] = []
    for s in skus:
        if s in vistos and s not in repetidos:
            repetidos.append(s)
        vistos.add(s)
    return repetidos


def pode_remover(usuario: Optional[str], admins: Iterable[str]) -> bool:
    """Somente usuários do grupo de administradores removem produtos."""
    if not usuario:
        return False
    return usuario.strip().upper() in {a.strip().upper() for a in admins}


def validar_transicao_entrega(atual: Optional[InfoEntrega], nova: StatusEntrega) -> None:
    """Garante a progressão Pendente → Agendada → Entregue.

    Reagendar (Agendada → Agendada) é permitido; nada sai de Entregue.
    """
    if atual is None:
        raise InventarioError("ENTREGA_NAO_REGISTRADA")
    if atual.status is StatusEntrega.ENTREGUE:
        raise InventarioError(
            "TRANSICAO_INVALIDA",
            f"Entrega já concluída; não é possível mudar para {nova.value}",
            atual=atual.status.value, nova=nova.value,
        )
    if nova.ordem < atual.status.ordem:
        raise InventarioError(
            "TRANSICAO_INVALIDA",
            f"Entrega não pode voltar de {atual.status.value} para {nova.value}",
            atual=atual.status.value, nova=nova.value,
        )


def validar_detalhes_sofa(item: RascunhoProduto | Produto) -> None:
    """Detalhes de sofá existem se, e somente se, a categoria for Sofá."""
    eh_sofa = item.categoria is Categoria.SOFA
    if eh_sofa and item.detalhes_sofa is None:
        raise InventarioError("DETALHES_SOFA", "Sofás exigem tamanho, tecido, fabricante e lugares", sku=item.sku)
    if not eh_sofa and item.detalhes_sofa is not None:
        raise InventarioError("DETALHES_SOFA", sku=item.sku, categoria=item.categoria.value)


def validar_produto(item: RascunhoProduto | Produto) -> None:
    """Verifica os invariantes de um produto (ou rascunho) antes de gravar."""
    if not _limpo(item.nome):
        raise InventarioError("DADOS_INVALIDOS", "Nome do produto é obrigatório")
    if not _limpo(item.sku):
        raise InventarioError("DADOS_INVALIDOS", "Código (SKU) é obrigatório")
    validar_detalhes_sofa(item)
