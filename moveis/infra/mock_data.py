# moveis/infra/mock_data.py
"""
Produtos de demonstração para a TUI, a CLI (``seed``) e os testes.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import List, Optional

from moveis.config import FABRICANTES, SYSTEM_USERS
from moveis.domain.models import (
    Acao,
    Categoria,
    DetalhesPedido,
    DetalhesSofa,
    Disponivel,
    EntradaHistorico,
    EstadoProduto,
    Historico,
    Pedido,
    Produto,
    Reservado,
    Status,
    Unidade,
    Vendido,
)

NOMES = [
    "Sofá Retrátil Florença", "Poltrona Giratória Oslo", "Cadeira de Jantar Milão",
    "Banqueta Alta Industrial", "Sofá 3 Lugares Nápoles", "Poltrona Decorativa Berna",
    "Cadeira Eames Réplica", "Banqueta Rústica Madeira", "Sofá Cama Zurique",
    "Poltrona Charles Eames", "Cadeira Estofada Paris", "Mesa de Centro Viena",
    "Sofá Chesterfield", "Poltrona Egg Swan", "Banqueta Tolix Metal",
    "Cadeira Bertoia Cromada", "Sofá Modular Lisboa", "Poltrona Barcelona",
]

CORES = ["Cinza", "Bege", "Marrom", "Preto", "Azul", "Verde", "Terracota"]
TECIDOS = ["Veludo", "Linho", "Suede", "Couro", "Chenille", "Boucle"]

IMAGENS = {
    Categoria.SOFA: [
        "https://images.unsplash.com/photo-1555041469-a586c61ea9bc?w=400&h=300&fit=crop",
        "https://images.unsplash.com/photo-1493663284031-b7e3aefcae8e?w=400&h=300&fit=crop",
        "https://images.unsplash.com/photo-1506439773649-6e0eb8cfb237?w=400&h=300&fit=crop",
    ],
    Categoria.POLTRONA: [
        "https://images.unsplash.com/photo-1586023492125-27b2c045efd7?w=400&h=300&fit=crop",
        "https://images.unsplash.com/photo-1567538096630-e0c55bd6374c?w=400&h=300&fit=crop",
    ],
    Categoria.CADEIRA: [
        "https://images.unsplash.com/photo-1592078615290-033ee584e267?w=400&h=300&fit=crop",
        "https://images.unsplash.com/photo-1503602642458-232111445657?w=400&h=300&fit=crop",
    ],
    Categoria.BANQUETA: [
        "https://images.unsplash.com/photo-1503602642458-232111445657?w=400&h=300&fit=crop",
    ],
    Categoria.MESA: [
        "https://images.unsplash.com/photo-1533090161767-e6ffed986c88?w=400&h=300&fit=crop",
    ],
}

# Status sorteados para a demonstração (Assistência só acontece depois de uma venda real)
STATUS_DEMO = [Status.DISPONIVEL, Status.VENDIDO, Status.PEDIDO, Status.RESERVADO]


def categoria_pelo_nome(nome: str) -> Categoria:
    """Primeira categoria cujo nome aparece no nome do produto; senão Outros."""
    baixo = nome.lower()
    for c in Categoria:
        if c.value.lower() in baixo:
            return c
    return Categoria.OUTROS


def _data_entre(rng: random.Random, ini: datetime, fim: datetime) -> datetime:
    if fim <= ini:
        return ini
    return ini + timedelta(seconds=rng.random() * (fim - ini).total_seconds())


def gerar_produtos_demo(seed: Optional[int] = None, agora: Optional[datetime] = None) -> List[Produto]:
    """Gera os 18 produtos de demonstração (determinístico com ``seed``).

    Cada produto tem a entrada CREATED; os vendidos também têm a entrada
    STATUS_CHANGED da venda e um preço de venda.
    """
    rng = random.Random(seed)
    agora = agora or datetime.now()
    ini_cadastro = datetime(2024, 9, 1)
    fim_cadastro = min(datetime(2025, 1, 15), agora)
    produtos: List[Produto] = []

    for i, nome in enumerate(NOMES):
        status = rng.choice(STATUS_DEMO)
        unidade = rng.choice(list(Unidade))
        categoria = categoria_pelo_nome(nome)
        criado_em = _data_entre(rng, ini_cadastro, fim_cadastro)
        criado_por = rng.choice(SYSTEM_USERS)

        entradas = [EntradaHistorico(
            id=f"h-{i}-1",
            acao=Acao.CREATED,
            usuario=criado_por,
            timestamp=criado_em,
            detalhes={"reason": f"Produto cadastrado na unidade {unidade.value}"},
        )]

        estado: EstadoProduto = Disponivel()
        atualizado_em = criado_em
        if status is Status.VENDIDO:
            vendido_em = _data_entre(rng, criado_em, agora)
            vendedor = rng.choice(SYSTEM_USERS)
            estado = Vendido(
                vendido_por=vendedor,
                vendido_em=vendido_em,
                unidade_venda=unidade,
                preco_venda=float(rng.randrange(800, 6000, 50)),
            )
            entradas.append(EntradaHistorico(
                id=f"h-{i}-2",
                acao=Acao.STATUS_CHANGED,
                usuario=vendedor,
                timestamp=vendido_em,
                detalhes={"oldStatus": Status.DISPONIVEL.value, "newStatus": Status.VENDIDO.value,
                          "reason": "Marcado como vendido", "soldBy": vendedor},
            ))
            atualizado_em = vendido_em
        elif status is Status.PEDIDO:
            estado = Pedido(DetalhesPedido(
                pedido_id=f"PED-{i + 1:04d}",
                data_pedido=criado_em,
                previsao_entrega=criado_em + timedelta(days=30),
                fornecedor=rng.choice(FABRICANTES),
            ))
        elif status is Status.RESERVADO:
            estado = Reservado(reservado_por=criado_por, reservado_em=criado_em)

        imagens = IMAGENS.get(categoria, IMAGENS[Categoria.SOFA][:1])
        produtos.append(Produto(
            id=f"p-{i + 1}",
            sku=f"LC-{i + 1:04d}",
            nome=nome,
            categoria=categoria,
            unidade=unidade,
            estado=estado,
            criado_em=criado_em,
            criado_por=criado_por,
            atualizado_em=atualizado_em,
            historico=Historico(entradas),
            cor=rng.choice(CORES),
            fabricante=rng.choice(FABRICANTES),
            descricao=f"{nome} de alta qualidade. Perfeito para ambientes modernos e aconchegantes.",
            detalhes_sofa=DetalhesSofa(
                tamanho=f"{rng.random() * 1.5 + 1.5:.2f}m",
                tecido=rng.choice(TECIDOS),
                fabricante=rng.choice(FABRICANTES),
                lugares=rng.randint(2, 5),
            ) if categoria is Categoria.SOFA else None,
            imagens=[rng.choice(imagens)],
        ))
    return produtos
