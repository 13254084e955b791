from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, ScrollableContainer, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Header, Input, Label, Static, Tree

from moveis.adapters.parsers import parse_data, parse_opcao, parse_preco
from moveis.config import DEFAULTS, SYSTEM_USERS
from moveis.domain.models import Categoria, Status, Unidade
from moveis.exceptions import InventarioError
from moveis.infra.logger import ENABLE_LOGGING, ENABLE_OUTPUT, get_log_summary, log_system_event
from moveis.infra.mock_data import gerar_produtos_demo
from moveis.infra.repositories import EstoqueRepo
from moveis.usecases.cadastro import run_cadastro, run_cadastro_planilha
from moveis.usecases.estoque import Estoque
from moveis.usecases.movimentacoes import (
    run_abrir_assistencia,
    run_agendar_entrega,
    run_alterar_status,
    run_marcar_entregue,
    run_registrar_entrega,
    run_remocao,
    run_transferencia,
    run_venda,
)
from moveis.usecases.relatorios import (
    relatorio_entregas_concluidas,
    relatorio_entregas_pendentes,
    relatorio_historico,
    relatorio_produtos,
    relatorio_ranking,
    relatorio_resumo,
    relatorio_serie_vendas,
    relatorio_vendas,
    relatorio_vendas_por_unidade,
)


class OutputDataTableScreen(Screen):
    """Tela com o resultado de um relatório em DataTable."""
    BINDINGS = [
        ("escape", "app.pop_screen", "Voltar"),
        ("q", "app.pop_screen", "Voltar"),
    ]

    def __init__(self, title: str, columns: list, rows: list) -> None:
        super().__init__()
        self.title = title
        self.columns = columns
        self.rows = rows

    def compose(self) -> ComposeResult:
        yield Header()
        with ScrollableContainer():
            yield Static(f"📋 {self.title}", classes="output-title")
            dt = DataTable(zebra_stripes=True)
            dt.add_columns(*self.columns)
            for row in self.rows:
                dt.add_row(*[str(cell) if cell is not None else "" for cell in row])
            yield dt
        yield Footer()


class OutputScreen(Screen):
    """Tela de texto (mensagens e logs)."""

    BINDINGS = [
        ("escape", "app.pop_screen", "Voltar"),
        ("q", "app.pop_screen", "Voltar"),
    ]

    def __init__(self, title: str, content: str) -> None:
        super().__init__()
        self.title = title
        self.content = content

    def compose(self) -> ComposeResult:
        yield Header()
        with ScrollableContainer():
            yield Static(f"📋 {self.title}", classes="output-title")
            yield Static(self.content, markup=False)
        yield Footer()


class StatusDisplay(Static):
    """Painel com os números do estoque."""

    def __init__(self, estoque: Estoque, usuario: str) -> None:
        super().__init__()
        self.estoque = estoque
        self.usuario = usuario
        self.refresh_status()

    def refresh_status(self) -> None:
        st = self.estoque.estatisticas()
        linhas = [
            f"👤 Usuário: {self.usuario}",
            f"📦 Total: {st.total}",
            f"✅ Disponíveis: {st.disponiveis}",
            f"💰 Vendidos: {st.vendidos}",
            f"🏭 Pedidos: {st.pedidos}",
            f"🔒 Reservados: {st.reservados}",
            f"🛠️ Assistência: {st.assistencias}",
            f"🚚 Entregas pendentes: {st.entregas_pendentes}",
        ]
        linhas += [f"🏬 {u.value}: {n}" for u, n in st.por_unidade.items()]
        if DEFAULTS.imagem_fundo():
            linhas.append(f"🖼️ Fundo: {DEFAULTS.imagem_fundo()}")
        linhas.append("✅ Logging: Ativo" if ENABLE_LOGGING else "❌ Logging: Desativado")
        linhas.append("✅ Output: Ativo" if ENABLE_OUTPUT else "❌ Output: Desativado")
        self.update("\n".join(linhas))


class MenuTreeWidget(Tree):
    """Árvore de navegação do painel."""

    def __init__(self) -> None:
        super().__init__("🛋️ Loja de Móveis - Menu Principal")
        self.setup_menu_tree()

    def setup_menu_tree(self) -> None:
        prod_node = self.root.add("📦 Produtos", data="produtos")
        prod_node.add_leaf("📋 Ver Produtos", data="ver-produtos")
        prod_node.add_leaf("🔍 Buscar / Filtrar", data="filtrar-produtos")
        prod_node.add_leaf("➕ Cadastrar Produto", data="cadastrar")
        prod_node.add_leaf("📥 Cadastrar por Planilha", data="cadastrar-lote")
        prod_node.add_leaf("📜 Histórico do Produto", data="historico")

        mov_node = self.root.add("🔄 Movimentação", data="movimentacao")
        mov_node.add_leaf("💰 Registrar Venda", data="vender")
        mov_node.add_leaf("🏷️ Alterar Status", data="status")
        mov_node.add_leaf("🛠️ Abrir Assistência", data="assistencia")
        mov_node.add_leaf("🏬 Transferir", data="transferir")
        mov_node.add_leaf("🗑️ Remover Produto", data="remover")

        ent_node = self.root.add("🚚 Entregas", data="entregas")
        ent_node.add_leaf("📍 Registrar Endereço", data="entrega-registrar")
        ent_node.add_leaf("📅 Agendar Entrega", data="entrega-agendar")
        ent_node.add_leaf("✅ Concluir Entrega", data="entrega-concluir")
        ent_node.add_leaf("⏳ Entregas Pendentes", data="entregas-pendentes")
        ent_node.add_leaf("📦 Entregas Concluídas", data="entregas-concluidas")

        rel_node = self.root.add("📊 Relatórios", data="reports")
        rel_node.add_leaf("📊 Resumo do Estoque", data="rel-resumo")
        rel_node.add_leaf("💵 Vendas", data="rel-vendas")
        rel_node.add_leaf("🏬 Vendas por Unidade", data="rel-unidades")
        rel_node.add_leaf("📈 Série de Vendas", data="rel-serie")
        rel_node.add_leaf("🏆 Ranking de Vendedores", data="rel-ranking")

        sys_node = self.root.add("⚙️ Sistema", data="sistema")
        sys_node.add_leaf("📋 Logs de Transações", data="log-transactions")
        sys_node.add_leaf("🚚 Logs de Entregas", data="log-entregas")
        sys_node.add_leaf("🌐 Logs de Serviços", data="log-servicos")


# campos de cada formulário: (chave, rótulo, placeholder)
CAMPOS_OPERACAO: Dict[str, Tuple[str, List[Tuple[str, str, str]]]] = {
    "cadastrar": ("➕ Cadastrar Produto", [
        ("nome", "Nome:", "Sofá Retrátil Florença"),
        ("sku", "Código (SKU):", "LC-1920"),
        ("categoria", "Categoria (opcional):", "Sofá, Poltrona, Cadeira, Banqueta, Mesa, Outros"),
        ("unidade", "Unidade (opcional):", "Shopping Praça Nova, Camobi, Estoque"),
        ("quantidade", "Quantidade (opcional):", "1"),
    ]),
    "cadastrar-lote": ("📥 Cadastrar por Planilha", [
        ("arquivo", "Arquivo (.xlsx ou .csv):", "cadastro.xlsx"),
    ]),
    "historico": ("📜 Histórico do Produto", [
        ("id", "ID do produto:", "p-1"),
    ]),
    "filtrar-produtos": ("🔍 Buscar / Filtrar", [
        ("busca", "Nome ou SKU (opcional):", "sofá"),
        ("status", "Status (opcional):", "Disponível"),
        ("unidade", "Unidade (opcional):", "Camobi"),
    ]),
    "vender": ("💰 Registrar Venda", [
        ("id", "ID do produto:", "p-1"),
        ("vendedor", "Vendedor (vazio = usuário atual):", "LUIZA"),
        ("preco", "Preço (opcional):", "1.500,00"),
        ("endereco", "Endereço de entrega (opcional):", "Rua Exemplo, 100"),
    ]),
    "status": ("🏷️ Alterar Status", [
        ("id", "ID do produto:", "p-1"),
        ("status", "Novo status:", "Disponível, Reservado"),
        ("motivo", "Motivo (opcional):", ""),
    ]),
    "assistencia": ("🛠️ Abrir Assistência", [
        ("id", "ID do produto:", "p-1"),
        ("motivo", "Motivo:", "Tecido rasgado"),
        ("cliente", "Cliente:", "Maria"),
        ("data_contato", "Data do contato:", "10/03/2025"),
    ]),
    "transferir": ("🏬 Transferir", [
        ("id", "ID do produto:", "p-1"),
        ("destino", "Unidade de destino:", "Camobi"),
    ]),
    "remover": ("🗑️ Remover Produto", [
        ("id", "ID do produto:", "p-1"),
    ]),
    "entrega-registrar": ("📍 Registrar Endereço", [
        ("id", "ID do produto:", "p-1"),
        ("endereco", "Endereço:", "Rua Exemplo, 100"),
        ("referencia", "Ponto de referência (opcional):", ""),
    ]),
    "entrega-agendar": ("📅 Agendar Entrega", [
        ("id", "ID do produto:", "p-1"),
        ("data", "Data:", "2025-03-20"),
    ]),
    "entrega-concluir": ("✅ Concluir Entrega", [
        ("id", "ID do produto:", "p-1"),
    ]),
    "rel-serie": ("📈 Série de Vendas", [
        ("periodo", "Período:", "dias, semanas, meses, anos"),
    ]),
    "rel-ranking": ("🏆 Ranking de Vendedores", [
        ("vendedor", "Vendedor (opcional):", ""),
    ]),
}


class OperacaoForm(ModalScreen):
    """Formulário modal genérico de uma operação do menu."""

    BINDINGS = [
        ("escape", "app.pop_screen", "Cancelar"),
    ]

    def __init__(self, operation: str) -> None:
        super().__init__()
        self.operation = operation
        self.inputs: Dict[str, Input] = {}
        _, campos = CAMPOS_OPERACAO[operation]
        # campos sem "opcional" no rótulo são obrigatórios
        self.obrigatorios = {c for c, rotulo, _ in campos if "opcional" not in rotulo and "vazio" not in rotulo}

    def compose(self) -> ComposeResult:
        titulo, campos = CAMPOS_OPERACAO[self.operation]
        with Container(id="operacao-modal"):
            yield Static(titulo, classes="modal-title")
            with Vertical():
                for chave, rotulo, placeholder in campos:
                    yield Label(rotulo)
                    self.inputs[chave] = Input(placeholder=placeholder, id=f"{chave}-input")
                    yield self.inputs[chave]
                with Horizontal():
                    yield Button("✅ Confirmar", variant="primary", id="confirm-btn")
                    yield Button("❌ Cancelar", id="cancel-btn")

    def valores(self) -> Dict[str, str]:
        return {chave: inp.value.strip() for chave, inp in self.inputs.items()}

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "confirm-btn":
            valores = self.valores()
            faltando = [k for k, v in valores.items() if k in self.obrigatorios and not v]
            if faltando:
                self.notify(f"❌ Informe: {', '.join(faltando)}", severity="warning")
                return
            self.dismiss({"op": self.operation, **valores})
        elif event.button.id == "cancel-btn":
            self.app.pop_screen()


class PainelLojaApp(App):
    """Painel da loja: estoque, vendas e entregas."""

    CSS = """
    Screen {
        background: #1a1208;
    }

    .modal-title {
        background: #5a3a1a;
        color: #ffffff;
        text-align: center;
        padding: 1;
        margin-bottom: 1;
    }

    .output-title {
        background: #7a4f24;
        color: #ffffff;
        text-align: center;
        padding: 1;
        margin-bottom: 1;
    }

    Container#operacao-modal {
        background: #2b1d0e;
        border: solid #d9a45b;
        width: 70;
        height: 32;
        margin: 2;
    }

    Tree {
        background: #22170b;
        color: #f2e0c9;
    }

    StatusDisplay {
        background: #5a3a1a;
        color: #ffffff;
        padding: 1;
    }

    Button {
        margin: 1;
    }
    """

    TITLE = "🛋️ Loja de Móveis - Painel"
    BINDINGS = [
        ("q", "quit", "Sair"),
        ("d", "toggle_dark", "Modo Escuro"),
        ("r", "refresh", "Atualizar"),
    ]

    def __init__(self, estoque: Optional[Estoque] = None, usuario: str = SYSTEM_USERS[0],
                 repo: Optional[EstoqueRepo] = None) -> None:
        super().__init__()
        self.estoque = estoque if estoque is not None else Estoque(gerar_produtos_demo())
        self.usuario = usuario
        self.repo = repo
        self.menu_tree: Optional[MenuTreeWidget] = None
        self.status_display: Optional[StatusDisplay] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Container(classes="left-panel"):
                self.menu_tree = MenuTreeWidget()
                yield self.menu_tree
            with Vertical(classes="right-panel"):
                self.status_display = StatusDisplay(self.estoque, self.usuario)
                yield self.status_display
                yield Static("""
🛋️ **LOJA DE MÓVEIS**

**Como usar:**
- Use as setas ↑↓ para navegar no menu
- Pressione ENTER para executar uma ação
- Pressione 'r' para atualizar os números
- Pressione 'q' para sair
                """, classes="info-panel")
        yield Footer()

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        if not event.node.data:
            return
        self.execute_action(event.node.data)

    def execute_action(self, action: str) -> None:
        """Abre o formulário da ação ou mostra o relatório direto."""
        log_system_event("tui_action_start", {"action": action})
        try:
            if action in CAMPOS_OPERACAO:
                self.push_screen(OperacaoForm(action), self.on_operacao_result)
            elif action == "ver-produtos":
                self.show_report("Produtos", relatorio_produtos(self.estoque))
            elif action == "entregas-pendentes":
                self.show_report("Entregas Pendentes", relatorio_entregas_pendentes(self.estoque))
            elif action == "entregas-concluidas":
                self.show_report("Entregas Concluídas", relatorio_entregas_concluidas(self.estoque))
            elif action == "rel-resumo":
                self.show_report("Resumo do Estoque", relatorio_resumo(self.estoque))
            elif action == "rel-vendas":
                self.show_report("Vendas", relatorio_vendas(self.estoque))
            elif action == "rel-unidades":
                self.show_report("Vendas por Unidade", relatorio_vendas_por_unidade(self.estoque))
            elif action.startswith("log-"):
                self.show_log_content(action[len("log-"):])
        except InventarioError as e:
            self.notify(f"❌ {e.message}", severity="error")

    def show_report(self, titulo: str, resultado) -> None:
        colunas, rows, msg = resultado
        if not rows:
            self.push_screen(OutputScreen(titulo, msg or "Nenhum dado encontrado."))
            return
        self.push_screen(OutputDataTableScreen(titulo, colunas, rows))

    def show_log_content(self, log_type: str) -> None:
        log_system_event("view_logs", {"log_type": log_type})
        content = get_log_summary(log_type, lines=500)
        self.push_screen(OutputScreen(f"📋 Logs - {log_type}", content or "Logging desativado."))

    def on_operacao_result(self, result: Optional[Dict[str, str]]) -> None:
        if result:
            self.executar_operacao(result)

    def executar_operacao(self, dados: Dict[str, str]) -> None:
        """Executa a operação do formulário e atualiza o painel."""
        op = dados["op"]
        try:
            handler = self._handlers()[op]
            mensagem = handler(dados)
            if self.repo is not None and op not in ("historico", "filtrar-produtos", "rel-serie", "rel-ranking"):
                self.repo.salvar(self.estoque)
        except InventarioError as e:
            log_system_event("tui_action_error", {"action": op, "error": e.code}, level="error")
            self.notify(f"❌ {e.message}", severity="error")
            return
        except Exception as e:
            log_system_event("tui_action_error", {"action": op, "error": str(e)}, level="error")
            self.notify(f"❌ Erro: {str(e)}", severity="error")
            return
        if mensagem:
            self.notify(f"✅ {mensagem}")
        self.action_refresh()

    def _handlers(self) -> Dict[str, Callable[[Dict[str, str]], Optional[str]]]:
        return {
            "cadastrar": self.op_cadastrar,
            "cadastrar-lote": self.op_cadastrar_lote,
            "historico": self.op_historico,
            "filtrar-produtos": self.op_filtrar,
            "vender": self.op_vender,
            "status": self.op_status,
            "assistencia": self.op_assistencia,
            "transferir": self.op_transferir,
            "remover": self.op_remover,
            "entrega-registrar": self.op_entrega_registrar,
            "entrega-agendar": self.op_entrega_agendar,
            "entrega-concluir": self.op_entrega_concluir,
            "rel-serie": self.op_serie,
            "rel-ranking": self.op_ranking,
        }

    # -----------------------
    # operações (retornam a mensagem de sucesso)
    # -----------------------

    def op_cadastrar(self, d: Dict[str, str]) -> str:
        qtd = d.get("quantidade") or "1"
        if not qtd.isdigit():
            raise InventarioError("DADOS_INVALIDOS", f"Quantidade inválida: {qtd}")
        produtos = run_cadastro(
            self.estoque, d["nome"],
            categoria=parse_opcao(d.get("categoria"), Categoria, "categoria") or Categoria.OUTROS,
            unidade=parse_opcao(d.get("unidade"), Unidade, "unidade") or Unidade.ESTOQUE,
            usuario=self.usuario,
            sku=d.get("sku") or None,
            quantidade=int(qtd),
        )
        return f"{len(produtos)} produto(s) cadastrado(s)"

    def op_cadastrar_lote(self, d: Dict[str, str]) -> str:
        info = run_cadastro_planilha(self.estoque, d["arquivo"], self.usuario)
        return f"{info['produtos']} produto(s) importado(s)"

    def op_historico(self, d: Dict[str, str]) -> None:
        self.show_report(f"Histórico {d['id']}", relatorio_historico(self.estoque, d["id"]))

    def op_filtrar(self, d: Dict[str, str]) -> None:
        self.show_report("Produtos", relatorio_produtos(
            self.estoque,
            status=parse_opcao(d.get("status"), Status, "status"),
            unidade=parse_opcao(d.get("unidade"), Unidade, "unidade"),
            busca=d.get("busca") or None,
        ))

    def op_vender(self, d: Dict[str, str]) -> str:
        p = run_venda(
            self.estoque, d["id"], self.usuario,
            vendido_por=d.get("vendedor") or None,
            preco_venda=parse_preco(d.get("preco")),
            endereco=d.get("endereco") or None,
        )
        return f"{p.nome} vendido por {p.vendido_por}"

    def op_status(self, d: Dict[str, str]) -> str:
        status = parse_opcao(d["status"], Status, "status")
        if status in (Status.PEDIDO, Status.ASSISTENCIA):
            raise InventarioError("DADOS_INVALIDOS", "Use o cadastro de pedido ou a abertura de assistência")
        p = run_alterar_status(self.estoque, d["id"], status, self.usuario, motivo=d.get("motivo") or None)
        return f"Status de {p.nome}: {p.status.value}"

    def op_assistencia(self, d: Dict[str, str]) -> str:
        p = run_abrir_assistencia(self.estoque, d["id"], self.usuario, d["motivo"], d["data_contato"], d["cliente"])
        return f"Assistência aberta para {p.nome}"

    def op_transferir(self, d: Dict[str, str]) -> str:
        p = run_transferencia(self.estoque, d["id"], parse_opcao(d["destino"], Unidade, "unidade"), self.usuario)
        return f"{p.nome} transferido para {p.unidade.value}"

    def op_remover(self, d: Dict[str, str]) -> str:
        run_remocao(self.estoque, d["id"], self.usuario)
        return "Produto removido"

    def op_entrega_registrar(self, d: Dict[str, str]) -> str:
        p = run_registrar_entrega(
            self.estoque, d["id"], d["endereco"], self.usuario,
            ponto_referencia=d.get("referencia") or None,
        )
        return f"Entrega registrada para {p.nome}"

    def op_entrega_agendar(self, d: Dict[str, str]) -> str:
        p = run_agendar_entrega(self.estoque, d["id"], parse_data(d["data"]), self.usuario)
        return f"Entrega de {p.nome} agendada para {p.entrega.data_agendada}"

    def op_entrega_concluir(self, d: Dict[str, str]) -> str:
        p = run_marcar_entregue(self.estoque, d["id"], self.usuario)
        return f"{p.nome} entregue"

    def op_serie(self, d: Dict[str, str]) -> None:
        self.show_report(f"Vendas ({d['periodo']})", relatorio_serie_vendas(self.estoque, d["periodo"]))

    def op_ranking(self, d: Dict[str, str]) -> None:
        self.show_report("Ranking de Vendedores", relatorio_ranking(self.estoque, d.get("vendedor") or None))

    def action_refresh(self) -> None:
        """Atualiza os números do painel."""
        if self.status_display:
            self.status_display.refresh_status()


def main(db_path: Optional[str] = None, usuario: str = SYSTEM_USERS[0]) -> None:
    """Abre o painel. Sem ``db_path`` usa os produtos de demonstração em memória."""
    estoque, repo = None, None
    if db_path:
        from moveis.infra.migrations import apply_migrations
        apply_migrations(db_path)
        repo = EstoqueRepo(db_path)
        estoque = repo.carregar()
    app = PainelLojaApp(estoque, usuario, repo)
    app.run()


if __name__ == "__main__":
    main()
