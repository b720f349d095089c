# orcamentos/infra/logger.py
"""
Sistema de logging das operações de orçamentos.

Este módulo configura e fornece loggers para registrar as operações
críticas do sistema: salvamento de orçamentos, edição de cadastros,
operações no banco de dados e eventos gerais (login, exportações).
"""

import logging
from pathlib import Path
from typing import Dict, Any, Optional


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = False
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = False


def print_system(*args, **kwargs):
    """Print controlado pelo ENABLE_OUTPUT."""
    if ENABLE_OUTPUT:
        print(*args, **kwargs)


# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger com arquivo de saída próprio.

    O arquivo só é aberto na primeira mensagem (``delay=True``), então
    importar o módulo com o logging desligado não cria arquivos.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configurado
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


# Diretório base para logs (na pasta do pacote)
BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = BASE_DIR / "logs"

transaction_logger = setup_logger('orcamentos.transactions', str(LOGS_DIR / 'transactions.log'))
orcamento_logger = setup_logger('orcamentos.orcamentos', str(LOGS_DIR / 'orcamentos.log'))
database_logger = setup_logger('orcamentos.database', str(LOGS_DIR / 'database.log'))
system_logger = setup_logger('orcamentos.system', str(LOGS_DIR / 'system.log'))

_LOG_FILES = {
    "transactions": LOGS_DIR / "transactions.log",
    "orcamentos": LOGS_DIR / "orcamentos.log",
    "database": LOGS_DIR / "database.log",
    "system": LOGS_DIR / "system.log",
}


def _ativo() -> bool:
    return ENABLE_LOGGING or ENABLE_OUTPUT


def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Registra uma transação completa (sucesso ou falha).

    Args:
        operation: Tipo de operação (salvar_orcamento, excluir_cliente, ...)
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


def log_orcamento(action: str, numero: str, total: Optional[float] = None, **kwargs) -> None:
    """
    Log específico para operações em orçamentos.

    Args:
        action: Ação realizada (create, edit, save, status, pdf)
        numero: Número do orçamento (MA-AAAA-NNNN)
        total: Total do orçamento no momento da ação
        **kwargs: Dados adicionais
    """
    if not _ativo():
        return
    log_data = {"action": action, "numero": numero, "total": total, **kwargs}
    orcamento_logger.info(f"ORCAMENTO_{action.upper()}: {log_data}")


def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log específico para operações no armazenamento.

    Args:
        table: Nome da tabela/coleção
        operation: Operação (INSERT, UPSERT, DELETE, SELECT)
        affected_rows: Número de registros afetados
        **kwargs: Dados adicionais
    """
    if not _ativo():
        return
    log_data = {"table": table, "operation": operation, "affected_rows": affected_rows, **kwargs}
    database_logger.info(f"DB_{operation}: {log_data}")


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
    log_data = {"event": event, "details": details or {}}
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """
    Log para operações de arquivo (importação, exportação XLSX, PDF).

    Args:
        operation: Tipo de operação (import, export, pdf)
        file_path: Caminho do arquivo
        rows_processed: Número de linhas processadas
        **kwargs: Dados adicionais
    """
    if not _ativo():
        return
    log_data = {"operation": operation, "file_path": file_path, "rows_processed": rows_processed, **kwargs}
    system_logger.info(f"FILE_{operation.upper()}: {log_data}")


def get_log_summary(log_type: str = "transactions", lines: int = 100) -> Optional[str]:
    """
    Obtém as linhas mais recentes de um log.

    Args:
        log_type: Tipo de log (transactions, orcamentos, database, system)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string (None com o logging desligado)
    """
    if not _ativo():
        return None

    log_file = _LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    try:
        with open(log_file, 'r', encoding='utf-8') as f:
            all_lines = f.readlines()
        return ''.join(all_lines[-lines:])
    except OSError as e:
        return f"Erro ao ler log {log_type}: {e}"
