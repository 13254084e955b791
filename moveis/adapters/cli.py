# moveis/adapters/cli.py
"""
CLI da loja de móveis (Typer).

O estoque fica em memória; a CLI carrega o SQLite (``--db``) antes de
cada comando e grava de volta depois das alterações.

Comandos principais:
- migrate                     -> aplica migrações
- seed                        -> carrega os produtos de demonstração
- produtos                    -> lista produtos (filtros por status, unidade, vendedor, busca)
- cadastrar <nome>            -> cadastra N unidades sob uma nota (ou um pedido de fábrica)
- cadastrar-lote <planilha>   -> cadastra a partir de XLSX/CSV
- editar / vender / status / assistencia / transferir / remover
- historico <id>              -> histórico do produto
- entrega registrar|agendar|concluir|pendentes|concluidas|rota
- rel resumo|vendas|unidades|serie|ranking
- etiqueta <imagem>           -> lê a etiqueta (OCR) e sugere nome, código e tamanho
- tui                         -> painel interativo
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from moveis.adapters.parsers import parse_coordenadas, parse_data, parse_opcao, parse_preco
from moveis.config import DB_PATH
from moveis.domain.estatisticas import filtrar_produtos
from moveis.domain.models import (
    Acesso,
    Categoria,
    DetalhesPedido,
    DetalhesSofa,
    Produto,
    Status,
    TipoMoradia,
    Unidade,
)
from moveis.exceptions import InventarioError
from moveis.infra.migrations import apply_migrations
from moveis.infra.mock_data import gerar_produtos_demo
from moveis.infra.repositories import EstoqueRepo
from moveis.infra.serializacao import produto_to_dict
from moveis.usecases.cadastro import run_cadastro, run_cadastro_planilha
from moveis.usecases.estoque import Estoque
from moveis.usecases.movimentacoes import (
    run_abrir_assistencia,
    run_agendar_entrega,
    run_alterar_status,
    run_edicao,
    run_ler_etiqueta,
    run_marcar_entregue,
    run_registrar_entrega,
    run_remocao,
    run_rota_entrega,
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


app = typer.Typer(help="Loja de Móveis: estoque, vendas e entregas")
console = Console()

DB_OPT = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")
USUARIO_OPT = typer.Option(..., "--usuario", "-u", envvar="MOVEIS_USUARIO", help="Usuário que executa a operação")


# -----------------------
# util
# -----------------------

def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


def _display_table(columns: List[str], rows: List[List[Any]], msg: Optional[str] = None,
                   title: str = "Resultado") -> None:
    """Exibe colunas/linhas de um relatório em tabela Rich."""
    if not rows:
        console.print(Panel(msg or "Nenhum dado encontrado", title=title, border_style="yellow"))
        return
    table = Table(title=title, box=box.ROUNDED)
    for column in columns:
        if column.lower() in ("valor", "total", "total vendido", "quantidade"):
            table.add_column(column, justify="right")
        elif column.lower() in ("data", "venda", "entregue em", "agendada para"):
            table.add_column(column, justify="center")
        else:
            table.add_column(column)
    for row in rows:
        valores = []
        for val in row:
            txt = "" if val is None else str(val)
            # Colorir status
            if txt == Status.DISPONIVEL.value:
                txt = f"[bold green]{txt}[/]"
            elif txt == Status.VENDIDO.value:
                txt = f"[bold blue]{txt}[/]"
            elif txt == Status.ASSISTENCIA.value:
                txt = f"[bold red]{txt}[/]"
            valores.append(txt)
        table.add_row(*valores)
    console.print(table)


def _display_produto(p: Produto, title: str) -> None:
    table = Table(title=title, box=box.ROUNDED, show_header=False)
    table.add_column("Campo")
    table.add_column("Valor")
    for chave, valor in p.resumo().items():
        if valor not in (None, ""):
            table.add_row(chave, str(valor))
    if p.entrega:
        table.add_row("endereco", p.entrega.endereco)
    console.print(table)


def _erro(e: InventarioError) -> None:
    console.print(f"[bold red]Erro ({e.code}):[/] {e.message}")
    raise typer.Exit(code=1)


@contextmanager
def _estoque(db_path: str, salvar: bool = True) -> Iterator[Estoque]:
    """Carrega o estoque do banco; grava de volta se o bloco terminar sem erro."""
    apply_migrations(db_path)
    repo = EstoqueRepo(db_path)
    estoque = repo.carregar()
    try:
        yield estoque
    except InventarioError as e:
        _erro(e)
    if salvar:
        repo.salvar(estoque)


def _meia_noite(d: date) -> datetime:
    return datetime(d.year, d.month, d.day)


def _sofa(tamanho: Optional[str], tecido: Optional[str], lugares: Optional[int],
          fabricante: Optional[str]) -> Optional[DetalhesSofa]:
    if not any([tamanho, tecido, lugares]):
        return None
    if not (tamanho and tecido and lugares):
        raise InventarioError("DETALHES_SOFA", "Informe --tamanho, --tecido e --lugares")
    return DetalhesSofa(tamanho=tamanho, tecido=tecido, fabricante=fabricante or "", lugares=lugares)


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = DB_OPT):
    """Aplica as migrações do banco."""
    ver = apply_migrations(db_path)
    typer.echo(f">> Migrações aplicadas (schema v{ver}) em: {db_path}")


@app.command("seed")
def cmd_seed(
    seed: Optional[int] = typer.Option(None, help="Semente para gerar sempre os mesmos dados"),
    db_path: str = DB_OPT,
):
    """Carrega os 18 produtos de demonstração em um banco vazio."""
    apply_migrations(db_path)
    repo = EstoqueRepo(db_path)
    if len(repo.carregar()):
        console.print("[bold yellow]Banco já possui produtos; nada foi carregado.[/]")
        raise typer.Exit(code=1)
    estoque = Estoque(gerar_produtos_demo(seed=seed))
    repo.salvar(estoque)
    typer.echo(f">> {len(estoque)} produtos de demonstração carregados em: {db_path}")


# -----------------------
# consultas
# -----------------------

@app.command("produtos")
def cmd_produtos(
    status: Optional[str] = typer.Option(None, help="Disponível, Vendido, Pedido, Reservado, Assistência"),
    unidade: Optional[str] = typer.Option(None, help="Shopping Praça Nova, Camobi, Estoque"),
    vendedor: Optional[str] = typer.Option(None, help="Apenas vendas deste vendedor"),
    busca: Optional[str] = typer.Option(None, help="Texto no nome ou SKU"),
    como_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = DB_OPT,
):
    """Lista os produtos (mais recentes primeiro)."""
    with _estoque(db_path, salvar=False) as estoque:
        st = parse_opcao(status, Status, "status")
        un = parse_opcao(unidade, Unidade, "unidade")
        if como_json:
            _print_json([produto_to_dict(p, com_historico=False)
                         for p in filtrar_produtos(estoque.produtos, st, un, vendedor, busca)])
            return
        _display_table(*relatorio_produtos(estoque, st, un, vendedor, busca), title="Produtos")


@app.command("historico")
def cmd_historico(produto_id: str = typer.Argument(...), db_path: str = DB_OPT):
    """Mostra o histórico do produto (mais recente primeiro)."""
    with _estoque(db_path, salvar=False) as estoque:
        _display_table(*relatorio_historico(estoque, produto_id), title=f"Histórico {produto_id}")


# -----------------------
# cadastro
# -----------------------

@app.command("cadastrar")
def cmd_cadastrar(
    nome: str = typer.Argument(..., help="Nome do produto"),
    categoria: str = typer.Option(Categoria.OUTROS.value, help="Sofá, Poltrona, Cadeira, Banqueta, Mesa, Outros"),
    unidade: str = typer.Option(Unidade.ESTOQUE.value, help="Unidade de destino"),
    sku: Optional[str] = typer.Option(None, help="Código base do produto"),
    quantidade: int = typer.Option(1, help="Unidades recebidas (um produto por unidade)"),
    nota: Optional[str] = typer.Option(None, help="Número da nota (ou do pedido, com --status Pedido)"),
    exclusivo: Optional[List[str]] = typer.Option(None, help="Código exclusivo por unidade (repetível)"),
    cor: str = typer.Option("", help="Cor"),
    fabricante: str = typer.Option("", help="Fabricante"),
    descricao: str = typer.Option("", help="Descrição"),
    status: str = typer.Option(Status.DISPONIVEL.value, help="Disponível, Reservado ou Pedido"),
    data_pedido: Optional[str] = typer.Option(None, help="Pedido: data do pedido"),
    previsao: Optional[str] = typer.Option(None, help="Pedido: previsão de entrega"),
    tamanho: Optional[str] = typer.Option(None, help="Sofá: tamanho (ex.: 2.10m)"),
    tecido: Optional[str] = typer.Option(None, help="Sofá: tecido"),
    lugares: Optional[int] = typer.Option(None, help="Sofá: lugares"),
    como_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Cadastra um produto recebido (uma entrada por unidade física)."""
    with _estoque(db_path) as estoque:
        produtos = run_cadastro(
            estoque, nome,
            categoria=parse_opcao(categoria, Categoria, "categoria"),
            unidade=parse_opcao(unidade, Unidade, "unidade"),
            usuario=usuario,
            sku=sku,
            quantidade=quantidade,
            nota_id=nota,
            skus_exclusivos=exclusivo,
            cor=cor,
            fabricante=fabricante,
            descricao=descricao,
            detalhes_sofa=_sofa(tamanho, tecido, lugares, fabricante),
            status=parse_opcao(status, Status, "status"),
            data_pedido=parse_data(data_pedido),
            previsao_entrega=parse_data(previsao),
        )
    if como_json:
        _print_json([produto_to_dict(p, com_historico=False) for p in produtos])
        return
    rows = [[p.id, p.sku, p.nome, p.unidade.value, p.status.value] for p in produtos]
    _display_table(["ID", "SKU", "Nome", "Unidade", "Status"], rows, title="Produtos Cadastrados")


@app.command("cadastrar-lote")
def cmd_cadastrar_lote(
    path: str = typer.Argument(..., help="Planilha XLSX ou CSV"),
    unidade: str = typer.Option(Unidade.ESTOQUE.value, help="Unidade para linhas sem unidade"),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Cadastra todos os produtos de uma planilha (tudo ou nada)."""
    with _estoque(db_path) as estoque:
        info = run_cadastro_planilha(estoque, path, usuario, parse_opcao(unidade, Unidade, "unidade"))
    console.print(Panel(
        f"Linhas lidas: {info['linhas']}\nProdutos cadastrados: {info['produtos']}",
        title="Cadastro em Lote",
    ))


# -----------------------
# movimentação
# -----------------------

@app.command("editar")
def cmd_editar(
    produto_id: str = typer.Argument(...),
    nome: Optional[str] = typer.Option(None),
    sku: Optional[str] = typer.Option(None),
    cor: Optional[str] = typer.Option(None),
    fabricante: Optional[str] = typer.Option(None),
    descricao: Optional[str] = typer.Option(None),
    motivo: Optional[str] = typer.Option(None, help="Motivo registrado no histórico"),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Edita os dados cadastrais do produto."""
    campos = {"nome": nome, "sku": sku, "cor": cor, "fabricante": fabricante, "descricao": descricao}
    alteracoes = {k: v for k, v in campos.items() if v is not None}
    if not alteracoes:
        typer.echo("Nada a alterar. Informe pelo menos um campo.")
        raise typer.Exit(code=1)
    with _estoque(db_path) as estoque:
        p = run_edicao(estoque, produto_id, alteracoes, usuario, motivo)
    _display_produto(p, "Produto Editado")


@app.command("vender")
def cmd_vender(
    produto_id: str = typer.Argument(...),
    vendedor: Optional[str] = typer.Option(None, help="Vendedor (padrão: o usuário)"),
    unidade: Optional[str] = typer.Option(None, help="Unidade da venda (padrão: unidade do produto)"),
    preco: Optional[str] = typer.Option(None, help="Preço de venda (ex.: 1.500,00)"),
    endereco: Optional[str] = typer.Option(None, help="Endereço de entrega"),
    referencia: Optional[str] = typer.Option(None, help="Ponto de referência"),
    tipo: Optional[str] = typer.Option(None, help="Casa ou Apartamento"),
    apto: Optional[str] = typer.Option(None, help="Número do apartamento"),
    andar: Optional[str] = typer.Option(None, help="Andar"),
    acesso: Optional[str] = typer.Option(None, help="Escada ou Elevador"),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Registra a venda do produto (e a entrega, se houver endereço)."""
    with _estoque(db_path) as estoque:
        p = run_venda(
            estoque, produto_id, usuario,
            vendido_por=vendedor,
            unidade_venda=parse_opcao(unidade, Unidade, "unidade"),
            preco_venda=parse_preco(preco),
            endereco=endereco,
            ponto_referencia=referencia,
            tipo=parse_opcao(tipo, TipoMoradia, "tipo"),
            numero_apartamento=apto,
            andar=andar,
            acesso=parse_opcao(acesso, Acesso, "acesso"),
        )
    _display_produto(p, "Venda Registrada")


@app.command("status")
def cmd_status(
    produto_id: str = typer.Argument(...),
    novo: str = typer.Argument(..., help="Disponível, Vendido, Pedido, Reservado"),
    motivo: Optional[str] = typer.Option(None),
    pedido_id: Optional[str] = typer.Option(None, help="Pedido: número do pedido"),
    data_pedido: Optional[str] = typer.Option(None, help="Pedido: data do pedido"),
    previsao: Optional[str] = typer.Option(None, help="Pedido: previsão de entrega"),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Altera o status do produto."""
    with _estoque(db_path) as estoque:
        status = parse_opcao(novo, Status, "status")
        detalhes = None
        if status is Status.PEDIDO:
            if not pedido_id or not data_pedido:
                raise InventarioError("DADOS_INVALIDOS", "Pedido exige --pedido-id e --data-pedido")
            dp, prev = parse_data(data_pedido), parse_data(previsao)
            detalhes = DetalhesPedido(
                pedido_id=pedido_id,
                data_pedido=_meia_noite(dp),
                previsao_entrega=_meia_noite(prev) if prev else None,
            )
        if status is Status.ASSISTENCIA:
            raise InventarioError("DADOS_INVALIDOS", "Use o comando 'assistencia' para abrir um chamado")
        p = run_alterar_status(estoque, produto_id, status, usuario, motivo=motivo, detalhes_pedido=detalhes)
    _display_produto(p, "Status Alterado")


@app.command("assistencia")
def cmd_assistencia(
    produto_id: str = typer.Argument(...),
    motivo: str = typer.Option(..., help="Motivo do chamado"),
    cliente: str = typer.Option(..., help="Nome do cliente"),
    data_contato: str = typer.Option(..., help="Data do contato do cliente"),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Abre um chamado de assistência para o produto."""
    with _estoque(db_path) as estoque:
        p = run_abrir_assistencia(estoque, produto_id, usuario, motivo, data_contato, cliente)
    _display_produto(p, "Assistência Aberta")


@app.command("transferir")
def cmd_transferir(
    produto_id: str = typer.Argument(...),
    destino: str = typer.Argument(..., help="Unidade de destino"),
    motivo: Optional[str] = typer.Option(None),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Transfere o produto para outra unidade."""
    with _estoque(db_path) as estoque:
        p = run_transferencia(estoque, produto_id, parse_opcao(destino, Unidade, "unidade"), usuario, motivo)
    _display_produto(p, "Produto Transferido")


@app.command("remover")
def cmd_remover(
    produto_id: str = typer.Argument(...),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Remove o produto (apenas administradores)."""
    with _estoque(db_path) as estoque:
        run_remocao(estoque, produto_id, usuario)
    typer.echo(f">> Produto {produto_id} removido.")


# -----------------------
# entregas
# -----------------------

entrega_app = typer.Typer(help="Entregas ao cliente")
app.add_typer(entrega_app, name="entrega")


@entrega_app.command("registrar")
def cmd_entrega_registrar(
    produto_id: str = typer.Argument(...),
    endereco: str = typer.Argument(...),
    referencia: Optional[str] = typer.Option(None),
    tipo: Optional[str] = typer.Option(None, help="Casa ou Apartamento"),
    apto: Optional[str] = typer.Option(None),
    andar: Optional[str] = typer.Option(None),
    acesso: Optional[str] = typer.Option(None, help="Escada ou Elevador"),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Registra (ou substitui) o endereço de entrega."""
    with _estoque(db_path) as estoque:
        p = run_registrar_entrega(
            estoque, produto_id, endereco, usuario,
            ponto_referencia=referencia,
            tipo=parse_opcao(tipo, TipoMoradia, "tipo"),
            numero_apartamento=apto,
            andar=andar,
            acesso=parse_opcao(acesso, Acesso, "acesso"),
        )
    _display_produto(p, "Entrega Registrada")


@entrega_app.command("agendar")
def cmd_entrega_agendar(
    produto_id: str = typer.Argument(...),
    data: str = typer.Argument(..., help="AAAA-MM-DD ou DD/MM/AAAA"),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Agenda a entrega."""
    with _estoque(db_path) as estoque:
        p = run_agendar_entrega(estoque, produto_id, parse_data(data), usuario)
    typer.echo(f">> Entrega de {p.nome} agendada para {p.entrega.data_agendada}.")


@entrega_app.command("concluir")
def cmd_entrega_concluir(
    produto_id: str = typer.Argument(...),
    usuario: str = USUARIO_OPT,
    db_path: str = DB_OPT,
):
    """Marca a entrega como concluída."""
    with _estoque(db_path) as estoque:
        p = run_marcar_entregue(estoque, produto_id, usuario)
    typer.echo(f">> {p.nome} entregue.")


@entrega_app.command("pendentes")
def cmd_entrega_pendentes(
    data_venda: Optional[str] = typer.Option(None, help="Apenas vendas deste dia"),
    ordem: str = typer.Option("recentes", help="recentes ou antigas"),
    db_path: str = DB_OPT,
):
    """Lista as entregas pendentes."""
    with _estoque(db_path, salvar=False) as estoque:
        _display_table(*relatorio_entregas_pendentes(estoque, parse_data(data_venda), ordem),
                       title="Entregas Pendentes")


@entrega_app.command("concluidas")
def cmd_entrega_concluidas(db_path: str = DB_OPT):
    """Lista as entregas concluídas."""
    with _estoque(db_path, salvar=False) as estoque:
        _display_table(*relatorio_entregas_concluidas(estoque), title="Entregas Concluídas")


@entrega_app.command("rota")
def cmd_entrega_rota(
    produto_id: str = typer.Argument(...),
    origem: str = typer.Option(..., help="Ponto de partida: lat,lng"),
    db_path: str = DB_OPT,
):
    """Calcula a rota até o endereço de entrega."""
    with _estoque(db_path, salvar=False) as estoque:
        info: Dict[str, Any] = run_rota_entrega(estoque, produto_id, parse_coordenadas(origem))
    table = Table(title=f"Rota até {info['produto']}", box=box.ROUNDED, show_header=False)
    for chave in ("endereco", "distancia", "duracao", "link_mapa", "link_navegacao"):
        table.add_row(chave, info[chave])
    console.print(table)


# -----------------------
# relatórios
# -----------------------

rel_app = typer.Typer(help="Relatórios de vendas e estoque")
app.add_typer(rel_app, name="rel")


@rel_app.command("resumo")
def rel_resumo(db_path: str = DB_OPT):
    """Contagens por status e unidade."""
    with _estoque(db_path, salvar=False) as estoque:
        _display_table(*relatorio_resumo(estoque), title="Resumo do Estoque")


@rel_app.command("vendas")
def rel_vendas(
    vendedor: Optional[str] = typer.Option(None),
    inicio: Optional[str] = typer.Option(None, help="Data inicial"),
    fim: Optional[str] = typer.Option(None, help="Data final"),
    db_path: str = DB_OPT,
):
    """Vendas no período (mais recentes primeiro)."""
    with _estoque(db_path, salvar=False) as estoque:
        _display_table(*relatorio_vendas(estoque, vendedor, parse_data(inicio), parse_data(fim)), title="Vendas")


@rel_app.command("unidades")
def rel_unidades(db_path: str = DB_OPT):
    """Total vendido por unidade."""
    with _estoque(db_path, salvar=False) as estoque:
        _display_table(*relatorio_vendas_por_unidade(estoque), title="Vendas por Unidade")


@rel_app.command("serie")
def rel_serie(
    periodo: str = typer.Option("dias", help="dias, semanas, meses, anos ou personalizado"),
    inicio: Optional[str] = typer.Option(None, help="Personalizado: data inicial"),
    fim: Optional[str] = typer.Option(None, help="Personalizado: data final"),
    db_path: str = DB_OPT,
):
    """Série temporal das vendas."""
    with _estoque(db_path, salvar=False) as estoque:
        _display_table(*relatorio_serie_vendas(estoque, periodo, inicio=parse_data(inicio), fim=parse_data(fim)),
                       title=f"Vendas ({periodo})")


@rel_app.command("ranking")
def rel_ranking(vendedor: Optional[str] = typer.Option(None), db_path: str = DB_OPT):
    """Ranking de vendedores."""
    with _estoque(db_path, salvar=False) as estoque:
        _display_table(*relatorio_ranking(estoque, vendedor), title="Ranking de Vendedores")


# -----------------------
# etiqueta / TUI
# -----------------------

@app.command("etiqueta")
def cmd_etiqueta(
    imagem: str = typer.Argument(..., help="Foto da etiqueta"),
    idioma: str = typer.Option("por", help="Idioma do OCR"),
):
    """Lê a etiqueta e sugere nome, código e tamanho para o cadastro."""
    try:
        dados = run_ler_etiqueta(imagem, idioma)
    except InventarioError as e:
        _erro(e)
    table = Table(title="Dados da Etiqueta (sugestão)", box=box.ROUNDED, show_header=False)
    table.add_row("nome", dados.nome or "-")
    table.add_row("sku", dados.sku or "-")
    table.add_row("tamanho", dados.tamanho or "-")
    console.print(table)


@app.command("tui")
def cmd_tui(
    db_path: Optional[str] = typer.Option(None, "--db", help="SQLite (sem --db usa dados de demonstração)"),
    usuario: str = typer.Option("ANA", "--usuario", "-u", envvar="MOVEIS_USUARIO"),
):
    """
    Inicia o painel interativo (TUI).
    """
    from moveis.adapters.painel_tui import main as tui_main
    typer.echo("Iniciando painel...")
    try:
        tui_main(db_path, usuario)
    except KeyboardInterrupt:
        typer.echo("\nSaindo do painel...")
        raise typer.Exit(0)


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
