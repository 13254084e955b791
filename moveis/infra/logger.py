# moveis/infra/logger.py
"""
Sistema de logging das operações da loja.

Este módulo configura e fornece loggers para registrar as operações
críticas do sistema: cadastros e alterações de produtos, entregas,
chamadas a serviços externos e operações no banco de dados.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "sim", "yes", "on"}


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = _env_flag("MOVEIS_LOGGING")
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = _env_flag("MOVEIS_OUTPUT")

def print_system(*args, **kwargs):
    """Print controlado pelo ENABLE_OUTPUT."""
    if ENABLE_OUTPUT:
        print(*args, **kwargs)

# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger específico com arquivo de saída.

    O arquivo só é aberto na primeira mensagem gravada.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configurado
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    file_handler = _LazyDirFileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


class _LazyDirFileHandler(logging.FileHandler):
    """FileHandler que cria o diretório de logs ao abrir o arquivo."""

    def _open(self):
        Path(self.baseFilename).parent.mkdir(parents=True, exist_ok=True)
        return super()._open()


# Diretório base para logs
BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = Path(os.getenv("MOVEIS_LOGS_DIR", str(BASE_DIR / "logs")))

LOG_FILES = {
    "transactions": LOGS_DIR / "transactions.log",
    "produtos": LOGS_DIR / "produtos.log",
    "entregas": LOGS_DIR / "entregas.log",
    "database": LOGS_DIR / "database.log",
    "servicos": LOGS_DIR / "servicos.log",
    "system": LOGS_DIR / "system.log",
}

# Loggers específicos para cada operação
transaction_logger = setup_logger('moveis.transactions', str(LOG_FILES["transactions"]))
produto_logger = setup_logger('moveis.produtos', str(LOG_FILES["produtos"]))
entrega_logger = setup_logger('moveis.entregas', str(LOG_FILES["entregas"]))
database_logger = setup_logger('moveis.database', str(LOG_FILES["database"]))
servico_logger = setup_logger('moveis.servicos', str(LOG_FILES["servicos"]))
system_logger = setup_logger('moveis.system', str(LOG_FILES["system"]))


def _ativo() -> bool:
    return ENABLE_LOGGING or ENABLE_OUTPUT


def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Registra uma transação completa no log.

    Args:
        operation: Tipo de operação (cadastro, venda, transferencia, etc.)
        data: Dados da transação
        result: Resultado da operação (opcional)
        error: Mensagem de erro (opcional)
    """
    if not _ativo():
        return
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - Data: {data}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - Result: {result} - Data: {data}")

def log_produto(action: str, produto_id: str, sku: Optional[str] = None, usuario: Optional[str] = None, **kwargs) -> None:
    """
    Log específico para mutações de produto.

    Args:
        action: Ação realizada (created, updated, status_changed, transferred, deleted)
        produto_id: Id do produto
        sku: Código do produto (opcional)
        usuario: Usuário responsável (opcional)
        **kwargs: Dados adicionais
    """
    if not _ativo():
        return
    log_data = {
        "action": action,
        "produto_id": produto_id,
        "sku": sku,
        "usuario": usuario,
        **kwargs
    }
    produto_logger.info(f"PRODUTO_{action.upper()}: {log_data}")

def log_entrega(action: str, produto_id: str, status: Optional[str] = None, **kwargs) -> None:
    """
    Log específico para o andamento das entregas.

    Args:
        action: Ação realizada (registrada, agendada, entregue)
        produto_id: Id do produto
        status: Status da entrega após a ação
        **kwargs: Dados adicionais
    """
    if not _ativo():
        return
    log_data = {
        "action": action,
        "produto_id": produto_id,
        "status": status,
        **kwargs
    }
    entrega_logger.info(f"ENTREGA_{action.upper()}: {log_data}")

def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log específico para operações no banco de dados.

    Args:
        table: Nome da tabela
        operation: Operação SQL (INSERT, UPDATE, DELETE, SELECT)
        affected_rows: Número de linhas afetadas
        **kwargs: Dados adicionais
    """
    if not _ativo():
        return
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs
    }
    database_logger.info(f"DB_{operation}: {log_data}")

def log_servico(servico: str, url: str, status: Optional[int] = None, error: Optional[str] = None, **kwargs) -> None:
    """
    Log para chamadas a serviços externos (geocodificação, rotas, OCR).

    Args:
        servico: Nome do serviço
        url: Endpoint chamado
        status: Código HTTP da resposta (opcional)
        error: Mensagem de erro (opcional)
        **kwargs: Dados adicionais
    """
    if not _ativo():
        return
    log_data = {
        "servico": servico,
        "url": url,
        "status": status,
        **kwargs
    }
    if error:
        servico_logger.warning(f"SERVICO_FALHOU: {servico} - {error} - {log_data}")
    else:
        servico_logger.info(f"SERVICO_OK: {log_data}")

def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """
    Log para eventos do sistema.

    Args:
        event: Descrição do evento
        details: Detalhes adicionais (opcional)
        level: Nível do log (info, warning, error)
    """
    if not _ativo():
        return
    log_data = {
        "event": event,
        "details": details or {}
    }
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")

def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """
    Log para operações de arquivo (importação/exportação).
    """
    if not _ativo():
        return
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        "at": datetime.now().isoformat(),
        **kwargs
    }
    system_logger.info(f"FILE_{operation.upper()}: {log_data}")

def get_log_summary(log_type: str = "transactions", lines: int = 100) -> Optional[str]:
    """
    Obtém um resumo dos logs recentes.

    Args:
        log_type: Tipo de log (transactions, produtos, entregas, database, servicos, system)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string (None com o logging desativado)
    """
    if not _ativo():
        return None

    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    try:
        with open(log_file, 'r', encoding='utf-8') as f:
            all_lines = f.readlines()
    except OSError as e:
        return f"Erro ao ler log {log_type}: {e}"
    recent_lines = all_lines[-lines:] if len(all_lines) > lines else all_lines
    return ''.join(recent_lines)
