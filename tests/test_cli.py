import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from moveis.adapters.cli import app
from moveis.infra.repositories import EstoqueRepo

runner = CliRunner()


@pytest.fixture
def db(tmp_path: Path) -> str:
    db_path = str(tmp_path / "moveis_test.sqlite")
    result = runner.invoke(app, ["migrate", "--db", db_path])
    assert result.exit_code == 0, result.output
    return db_path


def _cadastrar(db: str, *extra: str) -> list:
    result = runner.invoke(app, ["cadastrar", "Cadeira Eames", "--categoria", "Cadeira", "--unidade", "Camobi",
                                 "--json", "-u", "ANA", "--db", db, *extra])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_cli_migrate(tmp_path: Path):
    db_path = tmp_path / "novo.sqlite"
    result = runner.invoke(app, ["migrate", "--db", str(db_path)])
    assert result.exit_code == 0, result.output
    assert "schema v2" in result.stdout
    assert db_path.exists()


def test_cli_seed_apenas_em_banco_vazio(db):
    result = runner.invoke(app, ["seed", "--seed", "7", "--db", db])
    assert result.exit_code == 0, result.output
    assert ">> 18 produtos" in result.stdout

    result = runner.invoke(app, ["seed", "--db", db])
    assert result.exit_code == 1
    assert len(EstoqueRepo(db).carregar()) == 18


def test_cli_cadastrar_json(db):
    produtos = _cadastrar(db, "--sku", "CE", "--quantidade", "2", "--nota", "NF-100")
    assert [p["sku"] for p in produtos] == ["NF-100-CE-001", "NF-100-CE-002"]
    assert all(p["estado"]["status"] == "Disponível" for p in produtos)
    assert "historico" not in produtos[0]

    estoque = EstoqueRepo(db).carregar()
    assert len(estoque) == 2


def test_cli_cadastrar_sem_usuario(db):
    result = runner.invoke(app, ["cadastrar", "Mesa", "--db", db], env={"MOVEIS_USUARIO": ""})
    assert result.exit_code != 0


def test_cli_venda_e_entrega(db):
    pid = _cadastrar(db, "--sku", "X")[0]["id"]

    result = runner.invoke(app, ["vender", pid, "--preco", "1.500,00", "--unidade", "Praça Nova",
                                 "-u", "LUIZA", "--db", db])
    assert result.exit_code == 0, result.output

    p = EstoqueRepo(db).carregar().obter(pid)
    assert p.status.value == "Vendido"
    assert p.vendido_por == "LUIZA"
    assert p.preco_venda == 1500.0
    assert p.entrega is None

    result = runner.invoke(app, ["entrega", "registrar", pid, "Rua das Flores, 10", "--tipo", "casa",
                                 "-u", "LUIZA", "--db", db])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["entrega", "agendar", pid, "20/03/2025", "-u", "LUIZA", "--db", db])
    assert result.exit_code == 0, result.output
    assert "agendada para 2025-03-20" in result.stdout

    result = runner.invoke(app, ["entrega", "concluir", pid, "-u", "LUIZA", "--db", db])
    assert result.exit_code == 0, result.output
    assert ">> Cadeira Eames entregue." in result.stdout

    p = EstoqueRepo(db).carregar().obter(pid)
    assert p.entrega.status.value == "Entregue"

    for cmd in (["entrega", "pendentes"], ["entrega", "concluidas"], ["historico", pid]):
        result = runner.invoke(app, [*cmd, "--db", db])
        assert result.exit_code == 0, result.output


def test_cli_produtos_filtro_json(db):
    vendido = _cadastrar(db, "--sku", "A")[0]["id"]
    livre = _cadastrar(db, "--sku", "B")[0]["id"]
    runner.invoke(app, ["vender", vendido, "-u", "ANA", "--db", db])

    result = runner.invoke(app, ["produtos", "--status", "disponivel", "--json", "--db", db])
    assert result.exit_code == 0, result.output
    assert [p["id"] for p in json.loads(result.stdout)] == [livre]

    result = runner.invoke(app, ["produtos", "--vendedor", "ANA", "--json", "--db", db])
    assert [p["id"] for p in json.loads(result.stdout)] == [vendido]


def test_cli_status_invalido(db):
    pid = _cadastrar(db, "--sku", "A")[0]["id"]
    result = runner.invoke(app, ["status", pid, "Quebrado", "-u", "ANA", "--db", db])
    assert result.exit_code == 1
    assert "DADOS_INVALIDOS" in result.stdout

    result = runner.invoke(app, ["status", pid, "Assistência", "-u", "ANA", "--db", db])
    assert result.exit_code == 1


def test_cli_relatorios(db):
    runner.invoke(app, ["seed", "--seed", "3", "--db", db])
    comandos = [
        ["rel", "resumo"],
        ["rel", "vendas"],
        ["rel", "unidades"],
        ["rel", "serie", "--periodo", "meses"],
        ["rel", "ranking"],
        ["produtos"],
    ]
    for cmd in comandos:
        result = runner.invoke(app, [*cmd, "--db", db])
        assert result.exit_code == 0, (cmd, result.output)

    result = runner.invoke(app, ["rel", "serie", "--periodo", "trimestres", "--db", db])
    assert result.exit_code == 1


def test_cli_remover_exige_admin(db):
    pid = _cadastrar(db, "--sku", "A")[0]["id"]

    result = runner.invoke(app, ["remover", pid, "-u", "ANA", "--db", db])
    assert result.exit_code == 1
    assert "PERMISSAO_NEGADA" in result.stdout
    assert EstoqueRepo(db).carregar().obter(pid) is not None

    result = runner.invoke(app, ["remover", pid, "-u", "ADMIN", "--db", db])
    assert result.exit_code == 0, result.output
    assert EstoqueRepo(db).carregar().obter(pid) is None


def test_cli_produto_inexistente(db):
    result = runner.invoke(app, ["vender", "nao-existe", "-u", "ANA", "--db", db])
    assert result.exit_code == 1
    assert "PRODUTO_NAO_ENCONTRADO" in result.stdout


def test_cli_editar_sem_campos(db):
    pid = _cadastrar(db, "--sku", "A")[0]["id"]
    result = runner.invoke(app, ["editar", pid, "-u", "ANA", "--db", db])
    assert result.exit_code == 1


def test_cli_cadastrar_lote_sem_arquivo(db, tmp_path):
    result = runner.invoke(app, ["cadastrar-lote", str(tmp_path / "nao-existe.csv"), "-u", "ANA", "--db", db])
    assert result.exit_code == 1
    assert "DADOS_INVALIDOS" in result.stdout
