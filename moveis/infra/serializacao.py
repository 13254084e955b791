# moveis/infra/serializacao.py
"""
Conversão de produtos para dicionários simples (JSON) e de volta.

Usado pelo repositório SQLite e pela saída ``--json`` da CLI. As chaves
seguem os nomes dos atributos; datas em ISO 8601 e enums pelo valor.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from moveis.domain.models import (
    Acao,
    Acesso,
    Categoria,
    DadosAssistencia,
    DetalhesPedido,
    DetalhesSofa,
    Disponivel,
    EmAssistencia,
    EntradaHistorico,
    EstadoProduto,
    Historico,
    InfoEntrega,
    Pedido,
    Produto,
    Reservado,
    Status,
    StatusEntrega,
    TipoMoradia,
    Unidade,
    Vendido,
)


def _iso(v: Optional[datetime]) -> Optional[str]:
    return v.isoformat() if v else None


def _dt(v: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(v) if v else None


# -------------------------
# Estado (variantes de status)
# -------------------------

def _venda_to_dict(v: Vendido) -> Dict[str, Any]:
    return {
        "vendido_por": v.vendido_por,
        "vendido_em": _iso(v.vendido_em),
        "unidade_venda": v.unidade_venda.value,
        "preco_venda": v.preco_venda,
    }


def _venda_from_dict(d: Dict[str, Any]) -> Vendido:
    return Vendido(
        vendido_por=d["vendido_por"],
        vendido_em=_dt(d["vendido_em"]),
        unidade_venda=Unidade(d["unidade_venda"]),
        preco_venda=d.get("preco_venda"),
    )


def estado_to_dict(estado: EstadoProduto) -> Dict[str, Any]:
    out: Dict[str, Any] = {"status": estado.status.value}
    if isinstance(estado, Vendido):
        out.update(_venda_to_dict(estado))
    elif isinstance(estado, Pedido):
        d = estado.detalhes
        out["pedido"] = {
            "pedido_id": d.pedido_id,
            "data_pedido": _iso(d.data_pedido),
            "previsao_entrega": _iso(d.previsao_entrega),
            "quantidade": d.quantidade,
            "moeda": d.moeda,
            "fornecedor": d.fornecedor,
            "observacoes": d.observacoes,
        }
    elif isinstance(estado, Reservado):
        out["reservado_por"] = estado.reservado_por
        out["reservado_em"] = _iso(estado.reservado_em)
    elif isinstance(estado, EmAssistencia):
        out["assistencia"] = {
            "motivo": estado.dados.motivo,
            "data_contato": estado.dados.data_contato,
            "cliente": estado.dados.cliente,
            "aberto_em": _iso(estado.dados.aberto_em),
        }
        out["venda"] = _venda_to_dict(estado.venda) if estado.venda else None
    return out


def estado_from_dict(d: Dict[str, Any]) -> EstadoProduto:
    status = Status(d["status"])
    if status is Status.VENDIDO:
        return _venda_from_dict(d)
    if status is Status.PEDIDO:
        p = d["pedido"]
        return Pedido(DetalhesPedido(
            pedido_id=p["pedido_id"],
            data_pedido=_dt(p["data_pedido"]),
            previsao_entrega=_dt(p.get("previsao_entrega")),
            quantidade=p.get("quantidade", 1),
            moeda=p.get("moeda", "BRL"),
            fornecedor=p.get("fornecedor"),
            observacoes=p.get("observacoes"),
        ))
    if status is Status.RESERVADO:
        return Reservado(reservado_por=d["reservado_por"], reservado_em=_dt(d["reservado_em"]))
    if status is Status.ASSISTENCIA:
        a = d["assistencia"]
        return EmAssistencia(
            dados=DadosAssistencia(
                motivo=a["motivo"],
                data_contato=a["data_contato"],
                cliente=a["cliente"],
                aberto_em=_dt(a.get("aberto_em")),
            ),
            venda=_venda_from_dict(d["venda"]) if d.get("venda") else None,
        )
    return Disponivel()


# -------------------------
# Entrega / sofá / histórico
# -------------------------

def entrega_to_dict(e: Optional[InfoEntrega]) -> Optional[Dict[str, Any]]:
    if e is None:
        return None
    return {
        "endereco": e.endereco,
        "status": e.status.value,
        "ponto_referencia": e.ponto_referencia,
        "tipo": e.tipo.value if e.tipo else None,
        "numero_apartamento": e.numero_apartamento,
        "andar": e.andar,
        "acesso": e.acesso.value if e.acesso else None,
        "data_agendada": e.data_agendada,
        "entregue_em": _iso(e.entregue_em),
    }


def entrega_from_dict(d: Optional[Dict[str, Any]]) -> Optional[InfoEntrega]:
    if not d:
        return None
    return InfoEntrega(
        endereco=d["endereco"],
        status=StatusEntrega(d.get("status") or StatusEntrega.PENDENTE.value),
        ponto_referencia=d.get("ponto_referencia"),
        tipo=TipoMoradia(d["tipo"]) if d.get("tipo") else None,
        numero_apartamento=d.get("numero_apartamento"),
        andar=d.get("andar"),
        acesso=Acesso(d["acesso"]) if d.get("acesso") else None,
        data_agendada=d.get("data_agendada"),
        entregue_em=_dt(d.get("entregue_em")),
    )


def sofa_to_dict(s: Optional[DetalhesSofa]) -> Optional[Dict[str, Any]]:
    if s is None:
        return None
    return {"tamanho": s.tamanho, "tecido": s.tecido, "fabricante": s.fabricante, "lugares": s.lugares}


def sofa_from_dict(d: Optional[Dict[str, Any]]) -> Optional[DetalhesSofa]:
    if not d:
        return None
    return DetalhesSofa(tamanho=d["tamanho"], tecido=d["tecido"], fabricante=d["fabricante"], lugares=int(d["lugares"]))


def entrada_to_dict(e: EntradaHistorico) -> Dict[str, Any]:
    return {
        "id": e.id,
        "acao": e.acao.value,
        "usuario": e.usuario,
        "timestamp": _iso(e.timestamp),
        "detalhes": dict(e.detalhes),
    }


def entrada_from_dict(d: Dict[str, Any]) -> EntradaHistorico:
    return EntradaHistorico(
        id=d["id"],
        acao=Acao(d["acao"]),
        usuario=d["usuario"],
        timestamp=_dt(d["timestamp"]),
        detalhes=d.get("detalhes") or {},
    )


# -------------------------
# Produto
# -------------------------

def produto_to_dict(p: Produto, com_historico: bool = True) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": p.id,
        "sku": p.sku,
        "nome": p.nome,
        "categoria": p.categoria.value,
        "unidade": p.unidade.value,
        "cor": p.cor,
        "fabricante": p.fabricante,
        "nota_id": p.nota_id,
        "descricao": p.descricao,
        "criado_em": _iso(p.criado_em),
        "criado_por": p.criado_por,
        "atualizado_em": _iso(p.atualizado_em),
        "estado": estado_to_dict(p.estado),
        "detalhes_sofa": sofa_to_dict(p.detalhes_sofa),
        "entrega": entrega_to_dict(p.entrega),
        "imagens": list(p.imagens),
    }
    if com_historico:
        # cronológico, como é gravado
        out["historico"] = [entrada_to_dict(e) for e in p.historico.cronologico]
    return out


def produto_from_dict(d: Dict[str, Any], historico: Optional[List[EntradaHistorico]] = None) -> Produto:
    if historico is None:
        historico = [entrada_from_dict(e) for e in d.get("historico") or []]
    return Produto(
        id=d["id"],
        sku=d["sku"],
        nome=d["nome"],
        categoria=Categoria(d["categoria"]),
        unidade=Unidade(d["unidade"]),
        estado=estado_from_dict(d["estado"]),
        criado_em=_dt(d["criado_em"]),
        criado_por=d["criado_por"],
        atualizado_em=_dt(d["atualizado_em"]),
        historico=Historico(historico),
        cor=d.get("cor") or "",
        fabricante=d.get("fabricante") or "",
        nota_id=d.get("nota_id"),
        descricao=d.get("descricao") or "",
        detalhes_sofa=sofa_from_dict(d.get("detalhes_sofa")),
        entrega=entrega_from_dict(d.get("entrega")),
        imagens=list(d.get("imagens") or []),
    )


def dumps(valor: Any) -> str:
    return json.dumps(valor, ensure_ascii=False, default=str)


def loads(texto: Optional[str]) -> Any:
    return json.loads(texto) if texto else None
