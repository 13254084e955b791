"""
Utilidades de parsing para textos digitados ou reconhecidos.

Este módulo reúne as funções que transformam texto livre em valores do
domínio: a leitura heurística de etiquetas (texto vindo do OCR), preços
no formato brasileiro ("R$ 1.500,00"), datas e coordenadas. A leitura de
etiquetas é apenas uma sugestão para preencher o cadastro; nada aqui é
considerado autoritativo.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Type, TypeVar

from moveis.exceptions import InventarioError
from moveis.infra.rotas import Coordenadas

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class DadosEtiqueta:
    nome: str = ""
    sku: str = ""
    tamanho: str = ""

    @property
    def vazio(self) -> bool:
        """Sem nome e sem código não há o que aproveitar."""
        return not self.nome and not self.sku


_CODIGO_RE = re.compile(r"\b([A-Z0-9]{4,})\b")
_NUMERICO_RE = re.compile(r"\b(\d{6,})\b")
_EAN_INICIO_RE = re.compile(r"^\d{10,}")
# palavras longas primeiro para que "gg" não seja lido como "g"
_PALAVRAS_TAMANHO = ["tamanho", "size", "medida", "med", "gg", "pp", "p", "m", "g"]
_VALOR_TAMANHO = r"\s*[:\-]?\s*([A-Za-z0-9][A-Za-z0-9 /.,\-]*)"


def _linhas(texto: str) -> List[str]:
    return [l.strip() for l in (texto or "").splitlines() if l.strip()]


def _extrair_nome(linhas: List[str]) -> str:
    for linha in linhas:
        if len(linha) > 5 and not _EAN_INICIO_RE.match(linha):
            return linha[:100]
    return ""


def _extrair_sku(texto: str) -> str:
    candidatos = _CODIGO_RE.findall(texto)
    # códigos com dígito têm prioridade sobre palavras em caixa alta ("SOFA")
    for c in candidatos:
        if any(ch.isdigit() for ch in c):
            return c
    if candidatos:
        return candidatos[0]
    m = _NUMERICO_RE.search(texto)
    return m.group(1) if m else ""


def _extrair_tamanho(linhas: List[str]) -> str:
    for palavra in _PALAVRAS_TAMANHO:
        padrao = re.compile(rf"\b{palavra}\b{_VALOR_TAMANHO}", re.IGNORECASE)
        for linha in linhas:
            m = padrao.search(linha)
            if m:
                return m.group(1).strip().upper()
    return ""


def extrair_dados_etiqueta(texto: str) -> DadosEtiqueta:
    """Sugere nome, código e tamanho a partir do texto de uma etiqueta.

    Heurísticas:
        - nome: primeira linha com mais de 5 caracteres que não começa
          com um código de barras (10+ dígitos), limitada a 100 caracteres
        - código: primeiro token alfanumérico em maiúsculas com 4+
          caracteres; na falta, a primeira sequência de 6+ dígitos
        - tamanho: o que vem depois de uma palavra-chave (tamanho, size,
          medida, med, gg, pp, p, m, g) na mesma linha

    Exemplo:
        "Sofá Retrátil Florença\\nREF LC1920\\nTamanho: 2,10m"
        → DadosEtiqueta("Sofá Retrátil Florença", "LC1920", "2,10M")
    """
    linhas = _linhas(texto)
    return DadosEtiqueta(
        nome=_extrair_nome(linhas),
        sku=_extrair_sku(texto or ""),
        tamanho=_extrair_tamanho(linhas),
    )


# ----------------------
# valores digitados
# ----------------------

_MILHAR_RE = re.compile(r"^\d{1,3}(\.\d{3})+$")


def parse_preco(txt: Optional[str]) -> Optional[float]:
    """Interpreta um valor em reais.

    Exemplos:
        "R$ 1.500,00" → 1500.0
        "1500.5"      → 1500.5
        "1.500"       → 1500.0
        ""            → None
    """
    if txt is None:
        return None
    s = str(txt).strip().replace("R$", "").replace(" ", "").replace(" ", "")
    if not s:
        return None
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    elif _MILHAR_RE.match(s):
        s = s.replace(".", "")
    try:
        valor = float(s)
    except ValueError:
        raise InventarioError("DADOS_INVALIDOS", f"Preço inválido: {txt}", valor=txt) from None
    if valor < 0:
        raise InventarioError("DADOS_INVALIDOS", "Preço não pode ser negativo", valor=txt)
    return valor


def parse_data(txt: Optional[str]) -> Optional[date]:
    """Aceita AAAA-MM-DD ou DD/MM/AAAA."""
    if txt is None or not str(txt).strip():
        return None
    s = str(txt).strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    raise InventarioError("DADOS_INVALIDOS", f"Data inválida: {txt} (use AAAA-MM-DD ou DD/MM/AAAA)", valor=txt)


def parse_coordenadas(txt: str) -> Coordenadas:
    """Lê "lat,lng" (ponto como separador decimal)."""
    partes = [p.strip() for p in (txt or "").split(",")]
    if len(partes) != 2:
        raise InventarioError("DADOS_INVALIDOS", f"Coordenadas inválidas: {txt} (use lat,lng)", valor=txt)
    try:
        lat, lng = float(partes[0]), float(partes[1])
    except ValueError:
        raise InventarioError("DADOS_INVALIDOS", f"Coordenadas inválidas: {txt}", valor=txt) from None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise InventarioError("DADOS_INVALIDOS", f"Coordenadas fora do intervalo: {txt}", valor=txt)
    return Coordenadas(lat, lng)


def _sem_acento(txt: str) -> str:
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    return "".join(acentos.get(ch, ch) for ch in txt.strip().lower()).replace("_", " ")


def parse_opcao(txt: Optional[str], tipo: Type[E], campo: str) -> Optional[E]:
    """Escolhe o membro do enum pelo valor ou nome, sem acento e sem caixa.

    Exemplo: parse_opcao("disponivel", Status, "status") → Status.DISPONIVEL
    """
    if txt is None or not str(txt).strip():
        return None
    alvo = _sem_acento(str(txt))
    for membro in tipo:
        if alvo in (_sem_acento(membro.value), _sem_acento(membro.name)):
            return membro
    opcoes = ", ".join(m.value for m in tipo)
    raise InventarioError("DADOS_INVALIDOS", f"{campo} inválido: {txt} (opções: {opcoes})", valor=txt)
