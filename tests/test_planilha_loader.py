from pathlib import Path

import pandas as pd
import pytest

from moveis.adapters.planilha_loader import load_cadastro_from_planilha, normalizar_categoria, normalizar_unidade
from moveis.domain.models import Categoria, Unidade
from moveis.exceptions import InventarioError


def _csv(tmp_path: Path, conteudo: str) -> str:
    path = tmp_path / "cadastro.csv"
    path.write_text(conteudo, encoding="utf-8")
    return str(path)


def test_csv_com_cabecalhos_variados(tmp_path):
    path = _csv(tmp_path, (
        "Produto;Código;Tipo;Loja;Qtde;NF;Tamanho;Tecido;Lugares\n"
        "Sofá Lisboa;SF-1;sofa;Praça Nova;2;NF-9;2.10m;Linho;3\n"
        ";;;;;;;;\n"
        "Cadeira Oslo;CD-1;Cadeira;camobi;;;;;\n"
    ))
    rows = load_cadastro_from_planilha(path)

    assert len(rows) == 2
    sofa, cadeira = rows
    assert sofa["linha"] == 2
    assert sofa["nome"] == "Sofá Lisboa" and sofa["sku"] == "SF-1"
    assert sofa["categoria"] is Categoria.SOFA
    assert sofa["unidade"] is Unidade.PRACA_NOVA
    assert sofa["quantidade"] == 2 and sofa["nota_id"] == "NF-9"
    assert sofa["lugares"] == 3
    assert cadeira["linha"] == 4
    assert cadeira["quantidade"] == 1
    assert cadeira["unidade"] is Unidade.CAMOBI


def test_xlsx(tmp_path):
    path = tmp_path / "cadastro.xlsx"
    pd.DataFrame({"Nome": ["Mesa Jantar"], "SKU": ["MS-1"], "Categoria": ["Mesa"], "Quantidade": [3]}).to_excel(
        path, index=False)
    rows = load_cadastro_from_planilha(str(path))
    assert rows[0]["categoria"] is Categoria.MESA
    assert rows[0]["quantidade"] == 3
    assert rows[0]["unidade"] is None


def test_unidade_desconhecida(tmp_path):
    path = _csv(tmp_path, "nome,sku,unidade\nMesa,M-1,Centro\n")
    with pytest.raises(InventarioError) as exc:
        load_cadastro_from_planilha(path)
    assert exc.value.data["linha"] == 2


def test_quantidade_invalida(tmp_path):
    path = _csv(tmp_path, "nome,sku,quantidade\nMesa,M-1,muitas\n")
    with pytest.raises(InventarioError):
        load_cadastro_from_planilha(path)


def test_normalizacoes():
    assert normalizar_categoria("POLTRONA") is Categoria.POLTRONA
    assert normalizar_categoria("Rack") is Categoria.OUTROS
    assert normalizar_categoria(None) is Categoria.OUTROS
    assert normalizar_unidade("Shopping Praça Nova") is Unidade.PRACA_NOVA
    assert normalizar_unidade("") is None


def test_planilha_inexistente(tmp_path):
    with pytest.raises(InventarioError) as exc:
        load_cadastro_from_planilha(str(tmp_path / "nao-existe.xlsx"))
    assert exc.value.code == "DADOS_INVALIDOS"


def test_arquivo_que_nao_e_planilha(tmp_path):
    path = tmp_path / "foto.xlsx"
    path.write_bytes(b"\x89PNG\r\n")
    with pytest.raises(InventarioError) as exc:
        load_cadastro_from_planilha(str(path))
    assert exc.value.code == "DADOS_INVALIDOS"
