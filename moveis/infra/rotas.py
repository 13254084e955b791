# moveis/infra/rotas.py
"""
Busca de endereço (Nominatim), rota de carro (OSRM) e links do Google Maps.

Chamadas de melhor esforço: sem novas tentativas e sem cancelamento;
qualquer falha vira ``ServicoExternoError`` com código.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote, urlencode

import httpx

from moveis.config import DEFAULTS, DefaultConfig
from moveis.exceptions import ServicoExternoError
from moveis.infra.logger import log_servico


@dataclass(frozen=True)
class Coordenadas:
    lat: float
    lng: float

    def __str__(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass(frozen=True)
class InfoRota:
    distancia: str      # "12.3 km"
    duracao: str        # "45 min" ou "1h 5min"
    destino: Coordenadas
    distancia_m: float
    duracao_s: float


def formatar_distancia(metros: float) -> str:
    return f"{metros / 1000:.1f} km"


def formatar_duracao(segundos: float) -> str:
    minutos = round(segundos / 60)
    if minutos < 60:
        return f"{minutos} min"
    return f"{minutos // 60}h {minutos % 60}min"


def _get(servico: str, url: str, params: Optional[dict], config: DefaultConfig) -> httpx.Response:
    headers = {"User-Agent": config.user_agent}
    try:
        with httpx.Client(timeout=config.http_timeout, headers=headers) as client:
            response = client.get(url, params=params)
    except httpx.RequestError as exc:
        log_servico(servico, url, error=str(exc))
        raise ServicoExternoError("SERVICO_INDISPONIVEL", f"{servico} indisponível: {exc}", servico=servico) from exc
    log_servico(servico, url, status=response.status_code)
    return response


def geocodificar(endereco: str, config: DefaultConfig = DEFAULTS) -> Coordenadas:
    """Converte um endereço em coordenadas (primeiro resultado do Nominatim)."""
    endereco = (endereco or "").strip()
    if not endereco:
        raise ServicoExternoError("ENDERECO_NAO_ENCONTRADO", "Endereço vazio")
    response = _get("nominatim", config.nominatim_url, {"q": endereco, "format": "json", "limit": 1}, config)
    if response.status_code >= 400:
        raise ServicoExternoError("SERVICO_INDISPONIVEL", f"Nominatim respondeu HTTP {response.status_code}",
                                  servico="nominatim")
    dados = response.json()
    if not dados:
        raise ServicoExternoError("ENDERECO_NAO_ENCONTRADO", endereco=endereco)
    return Coordenadas(lat=float(dados[0]["lat"]), lng=float(dados[0]["lon"]))


def calcular_rota(origem: Coordenadas, destino: Coordenadas, config: DefaultConfig = DEFAULTS) -> InfoRota:
    """Rota de carro entre dois pontos (OSRM)."""
    # OSRM usa lng,lat
    url = f"{config.osrm_url}/{origem.lng},{origem.lat};{destino.lng},{destino.lat}"
    response = _get("osrm", url, {"overview": "false"}, config)
    if response.status_code >= 400:
        raise ServicoExternoError("ROTA_INDISPONIVEL", f"OSRM respondeu HTTP {response.status_code}")
    rotas = response.json().get("routes") or []
    if not rotas:
        raise ServicoExternoError("ROTA_INDISPONIVEL", "Nenhuma rota encontrada")
    rota = rotas[0]
    return InfoRota(
        distancia=formatar_distancia(rota["distance"]),
        duracao=formatar_duracao(rota["duration"]),
        destino=destino,
        distancia_m=float(rota["distance"]),
        duracao_s=float(rota["duration"]),
    )


def rota_para_endereco(origem: Coordenadas, endereco: str, config: DefaultConfig = DEFAULTS) -> InfoRota:
    return calcular_rota(origem, geocodificar(endereco, config), config)


# ----------------------
# links do Google Maps
# ----------------------

def link_busca(endereco: str) -> str:
    return "https://www.google.com/maps/search/?" + urlencode({"api": 1, "query": endereco})


def link_embed(endereco: str) -> str:
    return f"https://www.google.com/maps?q={quote(endereco)}&output=embed"


def link_navegacao(origem: Coordenadas, destino: Coordenadas) -> str:
    return "https://www.google.com/maps/dir/?" + urlencode({
        "api": 1,
        "origin": str(origem),
        "destination": str(destino),
        "travelmode": "driving",
    })
