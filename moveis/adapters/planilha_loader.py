# moveis/adapters/planilha_loader.py
"""
Loader de planilhas de cadastro (XLSX ou CSV) de produtos recebidos.

Essas funções:
- leem a planilha usando pandas;
- normalizam cabeçalhos (acentos, variações, sinônimos);
- retornam listas de dicionários com as chaves esperadas pelo caso de uso
  de cadastro.

Observações:
- Categoria e unidade são reconhecidas sem acento e sem diferenciar
  maiúsculas ("sofa", "praca nova", "camobi").
- Quantidade vazia vale 1; quantidade inválida é erro da linha.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from moveis.domain.models import Categoria, Unidade
from moveis.exceptions import InventarioError


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: Any) -> str:
    """Normaliza textos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    return re.sub(r"\s+", " ", s).strip()


def _safe_get(row, key) -> Optional[str]:
    """Valor da célula como texto, ou None para vazio/NA."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    val = str(val).strip()
    return val or None


_ALIASES = {
    "nome": "nome",
    "produto": "nome",
    "descricao do produto": "nome",

    "sku": "sku",
    "codigo": "sku",
    "cod": "sku",
    "referencia": "sku",
    "ref": "sku",

    "categoria": "categoria",
    "tipo": "categoria",

    "unidade": "unidade",
    "loja": "unidade",
    "local": "unidade",

    "cor": "cor",
    "fabricante": "fabricante",
    "fornecedor": "fabricante",
    "marca": "fabricante",

    "quantidade": "quantidade",
    "qtde": "quantidade",
    "qtd": "quantidade",

    "nota": "nota_id",
    "nota fiscal": "nota_id",
    "nf": "nota_id",

    "descricao": "descricao",
    "observacao": "descricao",
    "obs": "descricao",

    "tamanho": "tamanho",
    "medida": "tamanho",
    "tecido": "tecido",
    "lugares": "lugares",
    "assentos": "lugares",
}

_CATEGORIAS = {_slug(c.value): c for c in Categoria}
_UNIDADES = {_slug(u.value): u for u in Unidade}
_UNIDADES.update({"praca nova": Unidade.PRACA_NOVA, "praca": Unidade.PRACA_NOVA, "shopping": Unidade.PRACA_NOVA})


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    new_cols = {}
    for col in df.columns:
        key = _slug(col)
        new_cols[col] = _ALIASES.get(key, key)  # se não houver alias, mantém slug
    return df.rename(columns=new_cols)


def normalizar_categoria(txt: Optional[str]) -> Categoria:
    """Categoria pelo nome sem acento; vazio ou desconhecido vira Outros."""
    return _CATEGORIAS.get(_slug(txt), Categoria.OUTROS)


def normalizar_unidade(txt: Optional[str]) -> Optional[Unidade]:
    if not txt:
        return None
    return _UNIDADES.get(_slug(txt))


def _to_int(val: Optional[str], linha: int, campo: str) -> Optional[int]:
    if val is None:
        return None
    try:
        return int(float(val.replace(",", ".")))
    except ValueError:
        raise InventarioError("DADOS_INVALIDOS", f"Linha {linha}: {campo} inválido ({val})",
                              linha=linha, campo=campo) from None


def _ler(path: str) -> pd.DataFrame:
    caminho = Path(path)
    if not caminho.is_file():
        raise InventarioError("DADOS_INVALIDOS", f"Planilha não encontrada: {path}", arquivo=str(path))
    try:
        if caminho.suffix.lower() == ".csv":
            # separador detectado (vírgula ou ponto e vírgula)
            return pd.read_csv(caminho, dtype="string", sep=None, engine="python")
        return pd.read_excel(caminho, dtype="string")
    except (ValueError, OSError) as e:
        raise InventarioError("DADOS_INVALIDOS", f"Não foi possível ler a planilha {caminho.name}: {e}",
                              arquivo=str(path)) from e


# ---------------------------
# loader público
# ---------------------------

def load_cadastro_from_planilha(path: str) -> List[Dict[str, Any]]:
    """Lê a planilha de cadastro e retorna um registro por linha preenchida.

    Campos de saída (chaves do dict por linha):
      - linha: número da linha na planilha (cabeçalho = 1)
      - nome, sku, cor, fabricante, nota_id, descricao: str | None
      - categoria: Categoria (Outros quando vazia ou desconhecida)
      - unidade: Unidade | None (texto não reconhecido é erro)
      - quantidade: int (padrão 1)
      - tamanho, tecido: str | None; lugares: int | None (sofás)
    """
    df = _normalize_columns(_ler(path))
    out: List[Dict[str, Any]] = []
    for idx, row in df.iterrows():
        linha = int(idx) + 2
        nome = _safe_get(row, "nome")
        sku = _safe_get(row, "sku")
        if nome is None and sku is None:
            continue  # linha em branco
        unidade_txt = _safe_get(row, "unidade")
        unidade = normalizar_unidade(unidade_txt)
        if unidade_txt and unidade is None:
            raise InventarioError("DADOS_INVALIDOS", f"Linha {linha}: unidade desconhecida ({unidade_txt})",
                                  linha=linha)
        quantidade = _to_int(_safe_get(row, "quantidade"), linha, "quantidade")
        out.append({
            "linha": linha,
            "nome": nome,
            "sku": sku,
            "categoria": normalizar_categoria(_safe_get(row, "categoria")),
            "unidade": unidade,
            "cor": _safe_get(row, "cor"),
            "fabricante": _safe_get(row, "fabricante"),
            "quantidade": 1 if quantidade is None else quantidade,
            "nota_id": _safe_get(row, "nota_id"),
            "descricao": _safe_get(row, "descricao"),
            "tamanho": _safe_get(row, "tamanho"),
            "tecido": _safe_get(row, "tecido"),
            "lugares": _to_int(_safe_get(row, "lugares"), linha, "lugares"),
        })
    return out
