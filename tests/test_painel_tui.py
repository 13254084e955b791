"""
Testes do painel (TUI).
"""

import asyncio
from unittest.mock import Mock

import pytest

from moveis.adapters.painel_tui import (
    CAMPOS_OPERACAO,
    MenuTreeWidget,
    OperacaoForm,
    OutputDataTableScreen,
    OutputScreen,
    PainelLojaApp,
    StatusDisplay,
)
from moveis.domain.models import Status, StatusEntrega
from moveis.infra.mock_data import gerar_produtos_demo
from moveis.usecases.estoque import Estoque


@pytest.fixture
def app():
    app = PainelLojaApp(Estoque(gerar_produtos_demo(seed=1), admins=["ADMIN"]), usuario="ANA")
    app.notify = Mock()
    app.push_screen = Mock()
    return app


def _disponivel(app):
    return next(p for p in app.estoque.produtos if p.status is Status.DISPONIVEL)


class TestWidgets:

    def test_status_display(self):
        status = StatusDisplay(Estoque(gerar_produtos_demo(seed=1)), "ANA")
        assert status.usuario == "ANA"
        # não deve levantar exceção
        status.refresh_status()

    def test_menu_structure(self):
        tree = MenuTreeWidget()
        labels = [str(child.label) for child in tree.root.children]
        for esperado in ["📦 Produtos", "🔄 Movimentação", "🚚 Entregas", "📊 Relatórios", "⚙️ Sistema"]:
            assert any(esperado in label for label in labels)

    def test_menu_aponta_para_acoes_conhecidas(self):
        tree = MenuTreeWidget()
        diretas = {"ver-produtos", "entregas-pendentes", "entregas-concluidas",
                   "rel-resumo", "rel-vendas", "rel-unidades"}
        for node in tree.root.children:
            for folha in node.children:
                assert folha.data in CAMPOS_OPERACAO or folha.data in diretas or folha.data.startswith("log-")

    def test_form_campos_obrigatorios(self):
        form = OperacaoForm("vender")
        assert form.operation == "vender"
        assert form.obrigatorios == {"id"}
        assert OperacaoForm("assistencia").obrigatorios == {"id", "motivo", "cliente", "data_contato"}


class TestPainelLojaApp:

    def test_app_creation(self):
        app = PainelLojaApp()
        assert "Loja de Móveis" in app.TITLE
        assert len(app.estoque) == 18

    def test_execute_action_abre_formulario(self, app):
        app.execute_action("vender")
        form = app.push_screen.call_args[0][0]
        assert isinstance(form, OperacaoForm)
        assert form.operation == "vender"

    def test_execute_action_relatorio(self, app):
        app.execute_action("rel-resumo")
        tela = app.push_screen.call_args[0][0]
        assert isinstance(tela, OutputDataTableScreen)
        assert tela.rows[0][0] == "Total de produtos"

    def test_relatorio_vazio_mostra_mensagem(self):
        app = PainelLojaApp(Estoque([]), usuario="ANA")
        app.push_screen = Mock()
        app.execute_action("entregas-concluidas")
        tela = app.push_screen.call_args[0][0]
        assert isinstance(tela, OutputScreen)
        assert tela.content == "Nenhuma entrega concluída."

    def test_venda_e_entrega(self, app):
        p = _disponivel(app)
        app.executar_operacao({"op": "vender", "id": p.id, "vendedor": "", "preco": "1.200,00",
                               "endereco": "Rua A, 10"})
        assert p.status is Status.VENDIDO
        assert p.vendido_por == "ANA"
        assert p.preco_venda == 1200.0
        app.notify.assert_called_with(f"✅ {p.nome} vendido por ANA")

        app.executar_operacao({"op": "entrega-agendar", "id": p.id, "data": "20/03/2025"})
        app.executar_operacao({"op": "entrega-concluir", "id": p.id})
        assert p.entrega.status is StatusEntrega.ENTREGUE

    def test_erro_vira_notificacao(self, app):
        app.executar_operacao({"op": "vender", "id": "nao-existe", "vendedor": "", "preco": "", "endereco": ""})
        args, kwargs = app.notify.call_args
        assert kwargs["severity"] == "error"

    def test_remover_exige_admin(self, app):
        p = _disponivel(app)
        app.executar_operacao({"op": "remover", "id": p.id})
        assert app.estoque.obter(p.id) is not None
        assert app.notify.call_args[1]["severity"] == "error"

    def test_status_assistencia_recusado(self, app):
        p = _disponivel(app)
        app.executar_operacao({"op": "status", "id": p.id, "status": "Assistência", "motivo": ""})
        assert p.status is Status.DISPONIVEL

    def test_cadastrar_salva_no_repo(self, app):
        app.repo = Mock()
        antes = len(app.estoque)
        app.executar_operacao({"op": "cadastrar", "nome": "Banqueta Alta", "sku": "BQ-1",
                               "categoria": "banqueta", "unidade": "", "quantidade": "2"})
        assert len(app.estoque) == antes + 2
        app.repo.salvar.assert_called_once_with(app.estoque)

    def test_planilha_inexistente_vira_notificacao(self, app):
        antes = len(app.estoque)
        app.executar_operacao({"op": "cadastrar-lote", "arquivo": "/nao/existe.xlsx"})
        args, kwargs = app.notify.call_args
        assert kwargs["severity"] == "error"
        assert "Planilha não encontrada" in args[0]
        assert len(app.estoque) == antes

    def test_erro_inesperado_vira_notificacao(self, app):
        app.repo = Mock()
        app.repo.salvar.side_effect = OSError("disco cheio")
        app.executar_operacao({"op": "vender", "id": _disponivel(app).id, "vendedor": "", "preco": "", "endereco": ""})
        args, kwargs = app.notify.call_args
        assert kwargs["severity"] == "error"
        assert "disco cheio" in args[0]

    def test_consulta_nao_salva(self, app):
        app.repo = Mock()
        app.executar_operacao({"op": "rel-ranking", "vendedor": ""})
        app.repo.salvar.assert_not_called()
        assert isinstance(app.push_screen.call_args[0][0], (OutputDataTableScreen, OutputScreen))


def test_painel_abre_e_fecha():
    async def rodar():
        app = PainelLojaApp(Estoque(gerar_produtos_demo(seed=2)), usuario="LUIZA")
        async with app.run_test() as pilot:
            assert app.status_display is not None
            assert app.menu_tree is not None
            await pilot.press("r")
            app.execute_action("rel-resumo")
            await pilot.pause()
            assert isinstance(app.screen, OutputDataTableScreen)
            await pilot.press("escape")

    asyncio.run(rodar())
