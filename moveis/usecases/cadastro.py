# moveis/usecases/cadastro.py
"""
UC: Cadastrar produtos (nota com várias unidades, pedido de fábrica e planilha).

Cada unidade física vira um produto com SKU próprio; as unidades de um
mesmo cadastro compartilham ``nota_id``. O cadastro é tudo ou nada.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from moveis.adapters.planilha_loader import load_cadastro_from_planilha
from moveis.domain.models import (
    Categoria,
    DetalhesPedido,
    DetalhesSofa,
    Disponivel,
    EstadoProduto,
    Pedido,
    Produto,
    RascunhoProduto,
    Reservado,
    Status,
    Unidade,
)
from moveis.domain.politicas import gerar_skus_nota, gerar_skus_pedido
from moveis.exceptions import InventarioError
from moveis.infra.logger import log_file_operation, log_system_event, log_transaction, print_system
from moveis.usecases.estoque import Estoque


@dataclass
class ItemPedido:
    """Um item de um pedido de fábrica (``quantidade`` unidades iguais)."""
    nome: str
    categoria: Categoria = Categoria.OUTROS
    quantidade: int = 1
    sku: Optional[str] = None
    skus_exclusivos: List[str] = field(default_factory=list)
    cor: str = ""
    fabricante: str = ""
    descricao: str = ""
    detalhes_sofa: Optional[DetalhesSofa] = None
    unidade: Optional[Unidade] = None


def _nova_nota() -> str:
    return f"nota-{int(time.time() * 1000)}"


def _novo_pedido() -> str:
    return f"PED-{date.today().year}-{int(time.time() * 1000)}"


def _como_datetime(d: Union[date, datetime]) -> datetime:
    if isinstance(d, datetime):
        return d
    return datetime(d.year, d.month, d.day)


def _estado_inicial(status: Status, usuario: str, relogio=datetime.now) -> EstadoProduto:
    if status is Status.DISPONIVEL:
        return Disponivel()
    if status is Status.RESERVADO:
        return Reservado(reservado_por=usuario, reservado_em=relogio())
    raise InventarioError(
        "DADOS_INVALIDOS",
        f"Produtos são cadastrados como Disponível, Reservado ou Pedido (recebido: {status.value})",
    )


def run_cadastro(
    estoque: Estoque,
    nome: str,
    categoria: Union[Categoria, str],
    unidade: Union[Unidade, str],
    usuario: str,
    sku: Optional[str] = None,
    quantidade: int = 1,
    nota_id: Optional[str] = None,
    skus_exclusivos: Optional[Sequence[str]] = None,
    cor: str = "",
    fabricante: str = "",
    descricao: str = "",
    detalhes_sofa: Optional[DetalhesSofa] = None,
    status: Union[Status, str] = Status.DISPONIVEL,
    data_pedido: Optional[date] = None,
    previsao_entrega: Optional[date] = None,
    imagens: Optional[Sequence[str]] = None,
) -> List[Produto]:
    """Cadastra ``quantidade`` unidades de um produto sob a mesma nota.

    Com status Pedido o cadastro vira um pedido de fábrica de um item
    (``nota_id`` é o número do pedido).
    """
    status = Status(status)
    dados = {"nome": nome, "sku": sku, "quantidade": quantidade, "nota_id": nota_id, "status": status.value}
    log_system_event("cadastro_start", dados)
    try:
        if not (nome or "").strip():
            raise InventarioError("DADOS_INVALIDOS", "Nome do produto é obrigatório")
        if quantidade < 1:
            raise InventarioError("DADOS_INVALIDOS", "Quantidade deve ser pelo menos 1")

        if status is Status.PEDIDO:
            item = ItemPedido(
                nome=nome, categoria=Categoria(categoria), quantidade=quantidade, sku=sku,
                skus_exclusivos=list(skus_exclusivos or []), cor=cor, fabricante=fabricante,
                descricao=descricao, detalhes_sofa=detalhes_sofa,
            )
            return run_cadastro_pedido(
                estoque, [item], usuario, unidade, data_pedido, previsao_entrega, pedido_id=nota_id,
            )

        if not (sku or "").strip() and not any((s or "").strip() for s in skus_exclusivos or []):
            raise InventarioError("DADOS_INVALIDOS", "Código (SKU) é obrigatório")
        nota = (nota_id or "").strip() or _nova_nota()
        skus = gerar_skus_nota(nota, quantidade, sku, skus_exclusivos)
        rascunhos = [
            RascunhoProduto(
                sku=s,
                nome=nome.strip(),
                categoria=Categoria(categoria),
                unidade=Unidade(unidade),
                criado_por=usuario,
                cor=cor,
                fabricante=fabricante,
                nota_id=nota,
                descricao=descricao,
                detalhes_sofa=detalhes_sofa,
                estado=_estado_inicial(status, usuario),
                imagens=list(imagens or []),
            )
            for s in skus
        ]
        produtos = estoque.adicionar_lote(rascunhos)
        print_system(f">> {len(produtos)} produto(s) cadastrado(s) na nota {nota}.")
        log_transaction("cadastro", dados, result={"nota_id": nota, "skus": skus})
        return produtos
    except Exception as e:
        log_transaction("cadastro", dados, error=str(e))
        log_system_event("cadastro_error", {"error": str(e)}, level="error")
        raise


def run_cadastro_pedido(
    estoque: Estoque,
    itens: Sequence[ItemPedido],
    usuario: str,
    unidade: Union[Unidade, str],
    data_pedido: Optional[date],
    previsao_entrega: Optional[date],
    pedido_id: Optional[str] = None,
    fornecedor: Optional[str] = None,
    observacoes: Optional[str] = None,
) -> List[Produto]:
    """Cadastra um pedido de fábrica com vários itens.

    Todas as unidades ficam com status Pedido e recebem os mesmos
    detalhes do pedido (a quantidade é a soma dos itens).
    """
    pedido = (pedido_id or "").strip() or _novo_pedido()
    dados = {"pedido_id": pedido, "itens": len(itens)}
    log_system_event("cadastro_pedido_start", dados)
    try:
        if not itens:
            raise InventarioError("DADOS_INVALIDOS", "Pedido sem itens")
        if data_pedido is None or previsao_entrega is None:
            raise InventarioError("DADOS_INVALIDOS", "Data do pedido e data esperada são obrigatórias")
        if previsao_entrega < data_pedido:
            raise InventarioError("DADOS_INVALIDOS", "Previsão de entrega anterior à data do pedido")
        for item in itens:
            if not (item.nome or "").strip():
                raise InventarioError("DADOS_INVALIDOS", "Todo item do pedido precisa de nome")
            if item.quantidade < 1:
                raise InventarioError("DADOS_INVALIDOS", "Quantidade deve ser pelo menos 1", item=item.nome)

        detalhes = DetalhesPedido(
            pedido_id=pedido,
            data_pedido=_como_datetime(data_pedido),
            previsao_entrega=_como_datetime(previsao_entrega),
            quantidade=sum(i.quantidade for i in itens),
            fornecedor=fornecedor,
            observacoes=observacoes,
        )
        rascunhos: List[RascunhoProduto] = []
        for idx, item in enumerate(itens, start=1):
            for sku in gerar_skus_pedido(pedido, item.quantidade, idx, item.sku, item.skus_exclusivos):
                rascunhos.append(RascunhoProduto(
                    sku=sku,
                    nome=item.nome.strip(),
                    categoria=Categoria(item.categoria),
                    unidade=Unidade(item.unidade or unidade),
                    criado_por=usuario,
                    cor=item.cor,
                    fabricante=item.fabricante,
                    nota_id=pedido,
                    descricao=item.descricao,
                    detalhes_sofa=item.detalhes_sofa,
                    estado=Pedido(detalhes),
                ))
        produtos = estoque.adicionar_lote(rascunhos)
        print_system(f">> Pedido {pedido}: {len(produtos)} unidade(s) cadastrada(s).")
        log_transaction("cadastro_pedido", dados, result={"unidades": len(produtos)})
        return produtos
    except Exception as e:
        log_transaction("cadastro_pedido", dados, error=str(e))
        log_system_event("cadastro_pedido_error", {"error": str(e)}, level="error")
        raise


def _detalhes_sofa_da_linha(row: Dict[str, Any]) -> Optional[DetalhesSofa]:
    if row["categoria"] is not Categoria.SOFA:
        return None
    if not row.get("tamanho") or not row.get("tecido") or not row.get("lugares"):
        raise InventarioError(
            "DETALHES_SOFA",
            f"Linha {row['linha']}: sofás exigem tamanho, tecido e lugares",
            linha=row["linha"],
        )
    return DetalhesSofa(
        tamanho=row["tamanho"],
        tecido=row["tecido"],
        fabricante=row.get("fabricante") or "",
        lugares=int(row["lugares"]),
    )


def run_cadastro_planilha(
    estoque: Estoque,
    path: str,
    usuario: str,
    unidade_padrao: Unidade = Unidade.ESTOQUE,
) -> Dict[str, Any]:
    """Lê uma planilha de cadastro (XLSX/CSV) e cadastra todas as linhas.

    Linhas sem ``nota`` usam uma nota gerada para o arquivo todo. Qualquer
    linha inválida cancela a importação inteira.
    """
    log_system_event("cadastro_planilha_start", {"file_path": path})
    log_file_operation("import", path)
    try:
        rows = load_cadastro_from_planilha(path)
        log_file_operation("import", path, rows_processed=len(rows))
        nota_arquivo = _nova_nota()

        rascunhos: List[RascunhoProduto] = []
        for row in rows:
            if not row.get("nome"):
                raise InventarioError("DADOS_INVALIDOS", f"Linha {row['linha']}: nome é obrigatório",
                                      linha=row["linha"])
            if row["quantidade"] < 1:
                raise InventarioError("DADOS_INVALIDOS", f"Linha {row['linha']}: quantidade deve ser pelo menos 1",
                                      linha=row["linha"])
            nota = row.get("nota_id") or nota_arquivo
            sofa = _detalhes_sofa_da_linha(row)
            for sku in gerar_skus_nota(nota, row["quantidade"], row.get("sku")):
                rascunhos.append(RascunhoProduto(
                    sku=sku,
                    nome=row["nome"],
                    categoria=row["categoria"],
                    unidade=row.get("unidade") or unidade_padrao,
                    criado_por=usuario,
                    cor=row.get("cor") or "",
                    fabricante=row.get("fabricante") or "",
                    nota_id=nota,
                    descricao=row.get("descricao") or "",
                    detalhes_sofa=sofa,
                ))

        produtos = estoque.adicionar_lote(rascunhos)
        result = {"arquivo": path, "linhas": len(rows), "produtos": len(produtos)}
        log_transaction("cadastro_planilha", {"file": path, "rows_count": len(rows)}, result=result)
        log_system_event("cadastro_planilha_success", result)
        return result
    except Exception as e:
        log_transaction("cadastro_planilha", {"file": path}, error=str(e))
        log_system_event("cadastro_planilha_error", {"file_path": path, "error": str(e)}, level="error")
        raise
