from datetime import datetime, timedelta

import pytest

from moveis.domain.models import Categoria, RascunhoProduto, Unidade
from moveis.usecases.estoque import Estoque

INICIO = datetime(2025, 3, 10, 9, 0)  # segunda-feira


class RelogioFixo:
    """Relógio de teste: cada leitura avança ``passo``."""

    def __init__(self, inicio: datetime = INICIO, passo: timedelta = timedelta(minutes=1)):
        self.atual = inicio
        self.passo = passo

    def __call__(self) -> datetime:
        agora = self.atual
        self.atual += self.passo
        return agora


@pytest.fixture
def relogio():
    return RelogioFixo()


@pytest.fixture
def estoque(relogio):
    return Estoque(relogio=relogio, admins=["ADMIN"])


@pytest.fixture
def novo_rascunho():
    def _novo(sku="LC-1", nome="Cadeira Eames", categoria=Categoria.CADEIRA,
              unidade=Unidade.CAMOBI, criado_por="ANA", **kwargs):
        return RascunhoProduto(sku=sku, nome=nome, categoria=categoria, unidade=unidade,
                               criado_por=criado_por, **kwargs)
    return _novo
