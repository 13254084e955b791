# moveis/usecases/estoque.py
"""
Estoque: a interface única para todas as operações sobre produtos.

Uso:
    estoque = Estoque(gerar_produtos_demo())
    p = estoque.adicionar_produto(rascunho)
    estoque.alterar_status(p.id, Status.VENDIDO, "ANA", preco_venda=1500)
    estoque.estatisticas().vendidos

Regras gerais:
- toda mutação bem-sucedida registra exatamente uma entrada no histórico
  do produto e atualiza ``atualizado_em``;
- nenhuma operação afeta outro produto (nem os da mesma nota);
- id inexistente gera ``InventarioError('PRODUTO_NAO_ENCONTRADO')``,
  exceto na remoção, que é idempotente.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from moveis.config import DEFAULTS
from moveis.domain.estatisticas import Estatisticas, calcular_estatisticas
from moveis.domain.models import (
    Acao,
    Acesso,
    Categoria,
    DadosAssistencia,
    DetalhesPedido,
    Disponivel,
    EmAssistencia,
    EntradaHistorico,
    EstadoProduto,
    Historico,
    InfoEntrega,
    Pedido,
    Produto,
    RascunhoProduto,
    Reservado,
    Status,
    StatusEntrega,
    TipoMoradia,
    Unidade,
    Vendido,
)
from moveis.domain.politicas import (
    pode_remover,
    skus_repetidos,
    validar_produto,
    validar_transicao_entrega,
)
from moveis.exceptions import InventarioError
from moveis.infra.logger import log_entrega, log_produto


# Campos que a edição livre pode alterar; unidade, status e entrega têm operações próprias
CAMPOS_EDITAVEIS = ("sku", "nome", "categoria", "cor", "fabricante", "nota_id", "descricao", "detalhes_sofa", "imagens")


def _novo_id(prefixo: str) -> str:
    return f"{prefixo}-{uuid.uuid4().hex[:12]}"


def _texto(valor: Any) -> Any:
    if valor is None:
        return None
    if hasattr(valor, "value"):
        return valor.value
    if isinstance(valor, (str, int, float, bool)):
        return valor
    return str(valor)


class Estoque:
    """
    Coleção canônica de produtos em memória.

    A lista é mantida do mais recente para o mais antigo (novos cadastros
    entram no início). ``relogio`` permite fixar o tempo nos testes.
    """

    def __init__(
        self,
        produtos: Optional[Iterable[Produto]] = None,
        relogio: Optional[Callable[[], datetime]] = None,
        admins: Optional[Sequence[str]] = None,
    ) -> None:
        self._produtos: List[Produto] = list(produtos or [])
        self._relogio = relogio or datetime.now
        self._admins: List[str] = list(admins if admins is not None else DEFAULTS.admins)
        self._removidos: List[Produto] = []
        self._ultimo: Optional[datetime] = None

    # ══════════════════════════════════════════════════════════════
    # CONSULTAS
    # ══════════════════════════════════════════════════════════════

    @property
    def produtos(self) -> List[Produto]:
        return list(self._produtos)

    @property
    def removidos(self) -> Tuple[Produto, ...]:
        """Produtos removidos, com o histórico encerrado por DELETED."""
        return tuple(self._removidos)

    def obter(self, produto_id: str) -> Optional[Produto]:
        for p in self._produtos:
            if p.id == produto_id:
                return p
        return None

    def buscar_sku(self, sku: str) -> Optional[Produto]:
        alvo = (sku or "").strip()
        for p in self._produtos:
            if p.sku == alvo:
                return p
        return None

    def produtos_por_unidade(self, unidade: Union[Unidade, str]) -> List[Produto]:
        unidade = Unidade(unidade)
        return [p for p in self._produtos if p.unidade is unidade]

    def produtos_por_status(self, status: Union[Status, str]) -> List[Produto]:
        status = Status(status)
        return [p for p in self._produtos if p.status is status]

    def estatisticas(self) -> Estatisticas:
        return calcular_estatisticas(self._produtos)

    def __len__(self) -> int:
        return len(self._produtos)

    def __iter__(self) -> Iterator[Produto]:
        return iter(list(self._produtos))

    def __contains__(self, produto_id: object) -> bool:
        return any(p.id == produto_id for p in self._produtos)

    # ══════════════════════════════════════════════════════════════
    # CADASTRO
    # ══════════════════════════════════════════════════════════════

    def adicionar_produto(self, rascunho: RascunhoProduto) -> Produto:
        """Cadastra um produto: id, datas e entrada CREATED no histórico."""
        return self.adicionar_lote([rascunho])[0]

    def adicionar_lote(self, rascunhos: Sequence[RascunhoProduto]) -> List[Produto]:
        """Cadastra vários produtos de uma vez (tudo ou nada).

        Todos os rascunhos são validados antes do primeiro ser incluído;
        SKUs repetidos no lote ou já existentes no estoque abortam o lote.
        """
        for r in rascunhos:
            validar_produto(r)
        skus = [r.sku.strip() for r in rascunhos]
        repetidos = skus_repetidos(skus)
        if repetidos:
            raise InventarioError("SKU_DUPLICADO", f"SKU repetido no cadastro: {repetidos[0]}", sku=repetidos[0])
        for sku in skus:
            if self.buscar_sku(sku) is not None:
                raise InventarioError("SKU_DUPLICADO", f"Já existe um produto com o código {sku}", sku=sku)

        criados: List[Produto] = []
        for r in rascunhos:
            agora = self._agora()
            produto = Produto(
                id=_novo_id("p"),
                sku=r.sku.strip(),
                nome=r.nome.strip(),
                categoria=Categoria(r.categoria),
                unidade=Unidade(r.unidade),
                estado=r.estado,
                criado_em=agora,
                criado_por=r.criado_por,
                atualizado_em=agora,
                cor=r.cor,
                fabricante=r.fabricante,
                nota_id=r.nota_id,
                descricao=(r.descricao or "").strip(),
                detalhes_sofa=r.detalhes_sofa,
                imagens=list(r.imagens),
            )
            detalhes: Dict[str, Any] = {
                "reason": f"Produto cadastrado na unidade {produto.unidade.value}",
                "newStatus": produto.status.value,
            }
            if produto.nota_id:
                detalhes["noteId"] = produto.nota_id
            produto.historico.registrar(self._entrada(Acao.CREATED, r.criado_por, agora, detalhes))
            self._produtos.insert(0, produto)
            criados.append(produto)
            log_produto("created", produto.id, produto.sku, r.criado_por,
                        unidade=produto.unidade.value, status=produto.status.value, nota_id=produto.nota_id)
        return criados

    # ══════════════════════════════════════════════════════════════
    # MUTAÇÕES
    # ══════════════════════════════════════════════════════════════

    def atualizar_produto(
        self,
        produto_id: str,
        alteracoes: Dict[str, Any],
        usuario: str,
        motivo: Optional[str] = None,
    ) -> Produto:
        """Aplica uma edição livre dos campos cadastrais (entrada UPDATED)."""
        p = self._exigir(produto_id)
        invalidos = sorted(set(alteracoes) - set(CAMPOS_EDITAVEIS))
        if invalidos:
            raise InventarioError(
                "DADOS_INVALIDOS",
                f"Campos não editáveis: {', '.join(invalidos)}",
                campos=",".join(invalidos),
            )
        valores = dict(alteracoes)
        if "categoria" in valores:
            valores["categoria"] = Categoria(valores["categoria"])
        if "sku" in valores:
            valores["sku"] = (valores["sku"] or "").strip()
        candidato = replace(p, **valores)
        validar_produto(candidato)
        if candidato.sku != p.sku:
            outro = self.buscar_sku(candidato.sku)
            if outro is not None and outro.id != p.id:
                raise InventarioError("SKU_DUPLICADO", f"Já existe um produto com o código {candidato.sku}",
                                      sku=candidato.sku)

        mudancas = {
            campo: {"old": _texto(getattr(p, campo)), "new": _texto(valor)}
            for campo, valor in valores.items()
            if getattr(p, campo) != valor
        }
        agora = self._agora()
        for campo, valor in valores.items():
            setattr(p, campo, valor)
        p.atualizado_em = agora
        p.historico.registrar(self._entrada(Acao.UPDATED, usuario, agora, {
            "reason": motivo or "Produto editado",
            "changes": mudancas,
        }))
        log_produto("updated", p.id, p.sku, usuario, campos=list(mudancas))
        return p

    def alterar_status(
        self,
        produto_id: str,
        status: Union[Status, str],
        usuario: str,
        motivo: Optional[str] = None,
        vendido_por: Optional[str] = None,
        unidade_venda: Optional[Union[Unidade, str]] = None,
        detalhes_pedido: Optional[DetalhesPedido] = None,
        preco_venda: Optional[float] = None,
        assistencia: Optional[Union[DadosAssistencia, Dict[str, str]]] = None,
    ) -> Produto:
        """
        Muda o status do produto e monta o estado correspondente.

        - Vendido: vendedor (padrão: ``usuario``), data da venda, unidade da
          venda (padrão: unidade atual) e preço opcional
        - Pedido: exige ``detalhes_pedido``, anexados sem alteração
        - Reservado: registra quem reservou e quando
        - Assistência: exige motivo, data de contato e cliente; preserva a
          venda anterior, se houver

        Registra STATUS_CHANGED (ou ASSISTANCE_OPENED) com oldStatus/newStatus.
        """
        p = self._exigir(produto_id)
        novo = Status(status)
        agora = self._agora()
        anterior = p.status
        detalhes: Dict[str, Any] = {
            "oldStatus": anterior.value,
            "newStatus": novo.value,
            "reason": motivo or f"Status alterado para {novo.value}",
        }

        estado: EstadoProduto
        if novo is Status.DISPONIVEL:
            estado = Disponivel()
        elif novo is Status.VENDIDO:
            vendedor = vendido_por or usuario
            if not vendedor:
                raise InventarioError("DADOS_INVALIDOS", "Venda exige o vendedor")
            if preco_venda is not None and float(preco_venda) < 0:
                raise InventarioError("DADOS_INVALIDOS", "Preço de venda não pode ser negativo",
                                      preco_venda=preco_venda)
            estado = Vendido(
                vendido_por=vendedor,
                vendido_em=agora,
                unidade_venda=Unidade(unidade_venda) if unidade_venda else p.unidade,
                preco_venda=float(preco_venda) if preco_venda is not None else None,
            )
            detalhes["soldBy"] = estado.vendido_por
            detalhes["soldUnit"] = estado.unidade_venda.value
            if estado.preco_venda is not None:
                detalhes["soldPrice"] = estado.preco_venda
        elif novo is Status.PEDIDO:
            if detalhes_pedido is None:
                raise InventarioError("DADOS_INVALIDOS", "Pedido exige os detalhes do pedido")
            estado = Pedido(detalhes_pedido)
            detalhes["orderId"] = detalhes_pedido.pedido_id
        elif novo is Status.RESERVADO:
            estado = Reservado(reservado_por=usuario, reservado_em=agora)
        else:
            dados = self._dados_assistencia(assistencia, agora)
            estado = EmAssistencia(dados=dados, venda=p.venda)
            detalhes.update({
                "assistenciaMotivo": dados.motivo,
                "assistenciaDataContato": dados.data_contato,
                "assistenciaCliente": dados.cliente,
            })

        acao = Acao.ASSISTANCE_OPENED if novo is Status.ASSISTENCIA else Acao.STATUS_CHANGED
        p.estado = estado
        p.atualizado_em = agora
        p.historico.registrar(self._entrada(acao, usuario, agora, detalhes))
        log_produto("status_changed", p.id, p.sku, usuario, de=anterior.value, para=novo.value)
        return p

    def transferir_produto(
        self,
        produto_id: str,
        nova_unidade: Union[Unidade, str],
        usuario: str,
        motivo: Optional[str] = None,
    ) -> Produto:
        """Move o produto para outra unidade (entrada TRANSFERRED)."""
        p = self._exigir(produto_id)
        destino = Unidade(nova_unidade)
        if destino is p.unidade:
            raise InventarioError("DADOS_INVALIDOS", f"Produto já está na unidade {destino.value}",
                                  unidade=destino.value)
        origem = p.unidade
        agora = self._agora()
        p.unidade = destino
        p.atualizado_em = agora
        p.historico.registrar(self._entrada(Acao.TRANSFERRED, usuario, agora, {
            "oldUnit": origem.value,
            "newUnit": destino.value,
            "reason": motivo or f"Transferido de {origem.value} para {destino.value}",
        }))
        log_produto("transferred", p.id, p.sku, usuario, de=origem.value, para=destino.value)
        return p

    def registrar_entrega(
        self,
        produto_id: str,
        endereco: str,
        usuario: str,
        ponto_referencia: Optional[str] = None,
        tipo: Optional[Union[TipoMoradia, str]] = None,
        numero_apartamento: Optional[str] = None,
        andar: Optional[str] = None,
        acesso: Optional[Union[Acesso, str]] = None,
    ) -> Produto:
        """Registra o endereço de entrega; o status da entrega volta a Pendente.

        Um endereço novo substitui a entrega anterior, mesmo já concluída
        (produto devolvido e vendido de novo).

        Número do apartamento, andar e acesso só são guardados para
        apartamentos.
        """
        p = self._exigir(produto_id)
        endereco = (endereco or "").strip()
        if not endereco:
            raise InventarioError("DADOS_INVALIDOS", "Endereço de entrega é obrigatório")
        moradia = TipoMoradia(tipo) if tipo else None
        apto = moradia is TipoMoradia.APARTAMENTO
        agora = self._agora()
        p.entrega = InfoEntrega(
            endereco=endereco,
            status=StatusEntrega.PENDENTE,
            ponto_referencia=(ponto_referencia or "").strip() or None,
            tipo=moradia,
            numero_apartamento=numero_apartamento if apto else None,
            andar=andar if apto else None,
            acesso=Acesso(acesso) if apto and acesso else None,
        )
        p.atualizado_em = agora
        p.historico.registrar(self._entrada(Acao.DELIVERY_INFO_SET, usuario, agora, {
            "reason": f"Venda finalizada - Endereço de entrega registrado: {endereco}",
            "newValue": endereco,
        }))
        log_entrega("registrada", p.id, StatusEntrega.PENDENTE.value, endereco=endereco, usuario=usuario)
        return p

    def agendar_entrega(self, produto_id: str, data: Union[date, str], usuario: str) -> Produto:
        """Agenda a entrega para ``data`` (Pendente/Agendada → Agendada)."""
        p = self._exigir(produto_id)
        validar_transicao_entrega(p.entrega, StatusEntrega.AGENDADA)
        data_txt = data.isoformat() if isinstance(data, date) else str(data).strip()
        if not data_txt:
            raise InventarioError("DADOS_INVALIDOS", "Data de agendamento é obrigatória")
        return self._mudar_entrega(
            p, usuario,
            replace(p.entrega, status=StatusEntrega.AGENDADA, data_agendada=data_txt),
            f"Entrega agendada para {data_txt}",
        )

    def marcar_entregue(self, produto_id: str, usuario: str) -> Produto:
        """Conclui a entrega e registra ``entregue_em``."""
        p = self._exigir(produto_id)
        validar_transicao_entrega(p.entrega, StatusEntrega.ENTREGUE)
        return self._mudar_entrega(
            p, usuario,
            replace(p.entrega, status=StatusEntrega.ENTREGUE, entregue_em=self._agora()),
            "Entregue ao cliente",
        )

    def remover_produto(self, produto_id: str, usuario: str) -> bool:
        """Remove o produto. Apenas administradores; id inexistente não é erro."""
        if not pode_remover(usuario, self._admins):
            raise InventarioError("PERMISSAO_NEGADA", usuario=usuario, produto_id=produto_id)
        p = self.obter(produto_id)
        if p is None:
            return True
        agora = self._agora()
        p.atualizado_em = agora
        p.historico.registrar(self._entrada(Acao.DELETED, usuario, agora, {
            "reason": "Produto removido",
            "oldStatus": p.status.value,
        }))
        self._produtos = [x for x in self._produtos if x.id != produto_id]
        self._removidos.append(p)
        log_produto("deleted", p.id, p.sku, usuario)
        return True

    # ══════════════════════════════════════════════════════════════
    # INTERNOS
    # ══════════════════════════════════════════════════════════════

    def _agora(self) -> datetime:
        # Nunca retrocede, mesmo que o relógio seja ajustado
        agora = self._relogio()
        if self._ultimo is not None and agora < self._ultimo:
            agora = self._ultimo
        self._ultimo = agora
        return agora

    def _exigir(self, produto_id: str) -> Produto:
        p = self.obter(produto_id)
        if p is None:
            raise InventarioError("PRODUTO_NAO_ENCONTRADO", produto_id=produto_id)
        return p

    @staticmethod
    def _entrada(acao: Acao, usuario: str, quando: datetime, detalhes: Dict[str, Any]) -> EntradaHistorico:
        return EntradaHistorico(id=_novo_id("h"), acao=acao, usuario=usuario, timestamp=quando, detalhes=detalhes)

    @staticmethod
    def _dados_assistencia(
        assistencia: Optional[Union[DadosAssistencia, Dict[str, str]]],
        agora: datetime,
    ) -> DadosAssistencia:
        if assistencia is None:
            raise InventarioError("DADOS_INVALIDOS", "Assistência exige motivo, data de contato e cliente")
        if isinstance(assistencia, dict):
            assistencia = DadosAssistencia(
                motivo=assistencia.get("motivo", ""),
                data_contato=assistencia.get("data_contato", ""),
                cliente=assistencia.get("cliente", ""),
            )
        faltando = [nome for nome in ("motivo", "data_contato", "cliente")
                    if not (getattr(assistencia, nome) or "").strip()]
        if faltando:
            raise InventarioError("DADOS_INVALIDOS", f"Assistência sem: {', '.join(faltando)}")
        return replace(assistencia, aberto_em=agora)

    def _mudar_entrega(self, p: Produto, usuario: str, nova: InfoEntrega, motivo: str) -> Produto:
        anterior = p.entrega.status
        agora = self._agora()
        p.entrega = nova
        p.atualizado_em = agora
        p.historico.registrar(self._entrada(Acao.STATUS_CHANGED, usuario, agora, {
            "scope": "entrega",
            "oldStatus": anterior.value,
            "newStatus": nova.status.value,
            "reason": motivo,
        }))
        log_entrega(nova.status.value.lower(), p.id, nova.status.value, usuario=usuario)
        return p
