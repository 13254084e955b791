"""
Exceções do sistema da loja de móveis.

Todos os erros de regra de negócio são InventarioError com um código
estruturado para tratamento programático.
"""

from typing import Any, Dict, Optional


class InventarioError(Exception):
    """
    Exceção estruturada para operações de estoque.

    Uso:
        try:
            estoque.alterar_status(pid, Status.VENDIDO, "ANA")
        except InventarioError as e:
            if e.code == 'PRODUTO_NAO_ENCONTRADO':
                ...

    Attributes:
        code: Código do erro
        message: Mensagem legível
        data: Dados adicionais de contexto
    """

    _default_messages = {
        'PRODUTO_NAO_ENCONTRADO': 'Produto não encontrado',
        'SKU_DUPLICADO': 'Já existe um produto com este código',
        'PERMISSAO_NEGADA': 'Apenas administradores podem remover produtos',
        'TRANSICAO_INVALIDA': 'Transição de status inválida',
        'DADOS_INVALIDOS': 'Dados inválidos',
        'DETALHES_SOFA': 'Detalhes de sofá devem existir apenas para a categoria Sofá',
        'ENTREGA_NAO_REGISTRADA': 'Produto sem endereço de entrega registrado',
        'ETIQUETA_ILEGIVEL': 'Não foi possível extrair informações válidas da etiqueta',
    }

    def __init__(self, code: str, message: Optional[str] = None, **data: Any) -> None:
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data: Dict[str, Any] = data
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def as_dict(self) -> Dict[str, Any]:
        """Serializa para dicionário (útil para saída JSON)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {k: str(v) if not isinstance(v, (int, float, bool, type(None))) else v
                     for k, v in self.data.items()},
        }


class ServicoExternoError(InventarioError):
    """Falha em serviço externo (geocodificação, rotas, OCR)."""

    _default_messages = {
        'ENDERECO_NAO_ENCONTRADO': 'Endereço não encontrado',
        'ROTA_INDISPONIVEL': 'Erro ao calcular rota',
        'SERVICO_INDISPONIVEL': 'Serviço externo indisponível',
        'CHAVE_AUSENTE': 'Chave de acesso do serviço não configurada',
        'OCR_FALHOU': 'Erro ao processar imagem. Tente novamente com uma foto mais clara.',
    }
