# moveis/usecases/movimentacoes.py
"""
UC: Movimentar produtos já cadastrados.

Venda (com endereço de entrega opcional), mudança de status,
transferência entre unidades, edição, remoção, andamento da entrega,
leitura de etiqueta e rota até o cliente.

Cada função registra a transação no log e repassa a exceção em caso de
falha; a validação de negócio fica no ``Estoque``.
"""
from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from moveis.adapters.parsers import DadosEtiqueta, extrair_dados_etiqueta
from moveis.config import DEFAULTS, DefaultConfig
from moveis.domain.models import (
    Acesso,
    DadosAssistencia,
    DetalhesPedido,
    Produto,
    Status,
    TipoMoradia,
    Unidade,
)
from moveis.exceptions import InventarioError
from moveis.infra.logger import log_system_event, log_transaction, print_system
from moveis.infra.ocr import reconhecer_texto
from moveis.infra.rotas import Coordenadas, InfoRota, link_busca, link_navegacao, rota_para_endereco
from moveis.usecases.estoque import Estoque

T = TypeVar("T")


def _registrar(operacao: str, dados: Dict[str, Any], fn: Callable[[], T]) -> T:
    """Executa ``fn`` registrando sucesso ou falha da transação."""
    try:
        result = fn()
    except Exception as e:
        log_transaction(operacao, dados, error=str(e))
        log_system_event(f"{operacao}_error", {"error": str(e), **dados}, level="error")
        raise
    resumo = result.resumo() if isinstance(result, Produto) else result
    log_transaction(operacao, dados, result=resumo)
    return result


def run_venda(
    estoque: Estoque,
    produto_id: str,
    usuario: str,
    vendido_por: Optional[str] = None,
    unidade_venda: Optional[Union[Unidade, str]] = None,
    preco_venda: Optional[float] = None,
    endereco: Optional[str] = None,
    ponto_referencia: Optional[str] = None,
    tipo: Optional[Union[TipoMoradia, str]] = None,
    numero_apartamento: Optional[str] = None,
    andar: Optional[str] = None,
    acesso: Optional[Union[Acesso, str]] = None,
) -> Produto:
    """Marca o produto como vendido e, se houver endereço, registra a entrega."""
    dados = {"produto_id": produto_id, "vendido_por": vendido_por or usuario, "preco_venda": preco_venda}

    def _vender() -> Produto:
        # tipo e acesso convertidos antes de mudar o status
        moradia = TipoMoradia(tipo) if tipo else None
        forma_acesso = Acesso(acesso) if acesso else None
        p = estoque.alterar_status(
            produto_id, Status.VENDIDO, usuario,
            vendido_por=vendido_por, unidade_venda=unidade_venda, preco_venda=preco_venda,
        )
        if endereco and endereco.strip():
            p = estoque.registrar_entrega(
                produto_id, endereco, usuario,
                ponto_referencia=ponto_referencia, tipo=moradia,
                numero_apartamento=numero_apartamento, andar=andar, acesso=forma_acesso,
            )
        print_system(f">> {p.nome} ({p.sku}) vendido por {p.vendido_por}.")
        return p

    return _registrar("venda", dados, _vender)


def run_alterar_status(
    estoque: Estoque,
    produto_id: str,
    status: Union[Status, str],
    usuario: str,
    motivo: Optional[str] = None,
    detalhes_pedido: Optional[DetalhesPedido] = None,
    assistencia: Optional[DadosAssistencia] = None,
) -> Produto:
    status = Status(status)
    dados = {"produto_id": produto_id, "status": status.value}
    return _registrar("alterar_status", dados, lambda: estoque.alterar_status(
        produto_id, status, usuario, motivo=motivo,
        detalhes_pedido=detalhes_pedido, assistencia=assistencia,
    ))


def run_abrir_assistencia(
    estoque: Estoque,
    produto_id: str,
    usuario: str,
    motivo: str,
    data_contato: str,
    cliente: str,
) -> Produto:
    """Abre um chamado de assistência (mantém os dados da venda)."""
    dados = {"produto_id": produto_id, "cliente": cliente}
    return _registrar("assistencia", dados, lambda: estoque.alterar_status(
        produto_id, Status.ASSISTENCIA, usuario,
        motivo=f"Assistência aberta: {motivo}",
        assistencia=DadosAssistencia(motivo=motivo, data_contato=data_contato, cliente=cliente),
    ))


def run_transferencia(
    estoque: Estoque,
    produto_id: str,
    destino: Union[Unidade, str],
    usuario: str,
    motivo: Optional[str] = None,
) -> Produto:
    destino = Unidade(destino)
    dados = {"produto_id": produto_id, "destino": destino.value}
    return _registrar("transferencia", dados,
                      lambda: estoque.transferir_produto(produto_id, destino, usuario, motivo))


def run_edicao(
    estoque: Estoque,
    produto_id: str,
    alteracoes: Dict[str, Any],
    usuario: str,
    motivo: Optional[str] = None,
) -> Produto:
    dados = {"produto_id": produto_id, "campos": sorted(alteracoes)}
    return _registrar("edicao", dados,
                      lambda: estoque.atualizar_produto(produto_id, alteracoes, usuario, motivo))


def run_remocao(estoque: Estoque, produto_id: str, usuario: str) -> bool:
    dados = {"produto_id": produto_id, "usuario": usuario}
    return _registrar("remocao", dados, lambda: estoque.remover_produto(produto_id, usuario))


# ----------------------
# entregas
# ----------------------

def run_registrar_entrega(
    estoque: Estoque,
    produto_id: str,
    endereco: str,
    usuario: str,
    ponto_referencia: Optional[str] = None,
    tipo: Optional[Union[TipoMoradia, str]] = None,
    numero_apartamento: Optional[str] = None,
    andar: Optional[str] = None,
    acesso: Optional[Union[Acesso, str]] = None,
) -> Produto:
    dados = {"produto_id": produto_id, "endereco": endereco}
    return _registrar("registrar_entrega", dados, lambda: estoque.registrar_entrega(
        produto_id, endereco, usuario,
        ponto_referencia=ponto_referencia, tipo=tipo,
        numero_apartamento=numero_apartamento, andar=andar, acesso=acesso,
    ))


def run_agendar_entrega(estoque: Estoque, produto_id: str, data: date, usuario: str) -> Produto:
    dados = {"produto_id": produto_id, "data": data.isoformat()}
    return _registrar("agendar_entrega", dados, lambda: estoque.agendar_entrega(produto_id, data, usuario))


def run_marcar_entregue(estoque: Estoque, produto_id: str, usuario: str) -> Produto:
    dados = {"produto_id": produto_id}
    return _registrar("marcar_entregue", dados, lambda: estoque.marcar_entregue(produto_id, usuario))


def run_rota_entrega(
    estoque: Estoque,
    produto_id: str,
    origem: Coordenadas,
    config: DefaultConfig = DEFAULTS,
) -> Dict[str, Any]:
    """Calcula a rota de ``origem`` até o endereço de entrega do produto.

    Retorna a rota e os links do Google Maps (busca e navegação).
    """
    p = estoque.obter(produto_id)
    if p is None:
        raise InventarioError("PRODUTO_NAO_ENCONTRADO", produto_id=produto_id)
    if p.entrega is None:
        raise InventarioError("ENTREGA_NAO_REGISTRADA", produto_id=produto_id)
    dados = {"produto_id": produto_id, "endereco": p.entrega.endereco}

    def _rota() -> Dict[str, Any]:
        rota: InfoRota = rota_para_endereco(origem, p.entrega.endereco, config)
        return {
            "produto": p.nome,
            "endereco": p.entrega.endereco,
            "distancia": rota.distancia,
            "duracao": rota.duracao,
            "destino": str(rota.destino),
            "link_mapa": link_busca(p.entrega.endereco),
            "link_navegacao": link_navegacao(origem, rota.destino),
        }

    return _registrar("rota_entrega", dados, _rota)


# ----------------------
# etiquetas
# ----------------------

def run_ler_etiqueta(
    caminho: Union[str, Path],
    idioma: str = "por",
    config: DefaultConfig = DEFAULTS,
) -> DadosEtiqueta:
    """Reconhece o texto da foto e sugere nome, código e tamanho.

    O resultado é só uma sugestão para o cadastro; sem nome e sem código
    a leitura é considerada ilegível.
    """
    dados = {"arquivo": str(caminho)}

    def _ler() -> DadosEtiqueta:
        texto = reconhecer_texto(caminho, idioma, config)
        if not texto.strip():
            raise InventarioError("ETIQUETA_ILEGIVEL", "Nenhum texto foi extraído. Tente com outra imagem.")
        etiqueta = extrair_dados_etiqueta(texto)
        if etiqueta.vazio:
            raise InventarioError("ETIQUETA_ILEGIVEL")
        return etiqueta

    return _registrar("ler_etiqueta", dados, _ler)
