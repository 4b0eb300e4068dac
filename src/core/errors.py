"""
Erros do domínio de análise de boletos.

Toda falha que atravessa o core é uma subclasse de BoletoAnalysisError,
para que a camada de UI possa tratar tudo num único `except`.
"""

from enum import Enum


class ErrorSide(str, Enum):
    CLIENT_SIDE = "CLIENT_SIDE"    # nenhuma resposta recebida
    SERVER_SIDE = "SERVER_SIDE"    # resposta de erro do servidor


class BoletoAnalysisError(Exception):
    """Base de todos os erros do client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(BoletoAnalysisError):
    """Falha de rede ou resposta de erro da API."""

    def __init__(self, message: str, side: ErrorSide, status_code: int | None = None):
        super().__init__(message)
        self.side = side
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.side == ErrorSide.CLIENT_SIDE


class AnalysisFailedError(BoletoAnalysisError):
    """O servidor reportou falha terminal da análise. Reenvie o arquivo."""

    def __init__(self, analysis_id: str):
        super().__init__("Análise falhou no servidor")
        self.analysis_id = analysis_id


class PollingTimeoutError(BoletoAnalysisError):
    """Resultado não ficou pronto dentro do limite de tentativas."""

    def __init__(self, analysis_id: str, attempts: int):
        super().__init__("Tempo limite excedido")
        self.analysis_id = analysis_id
        self.attempts = attempts


class MalformedResponseError(BoletoAnalysisError):
    """Resposta com formato desconhecido (versão incompatível da API)."""


class InvalidDocumentError(BoletoAnalysisError):
    """Arquivo rejeitado localmente antes do envio."""
