"""
Contract: Analysis Transport

Executa as chamadas remotas da API de análise de boletos.
Qualquer implementação (httpx, fake em memória, outro protocolo)
deve implementar este contrato.
"""

from abc import ABC, abstractmethod

from src.core.entities.document import DocumentFile, SubmissionHandle


class IAnalysisTransport(ABC):
    """
    Port: Analysis Transport

    Sem retry e sem estado entre chamadas. Toda falha sai como
    TransportError (CLIENT_SIDE ou SERVER_SIDE).
    """

    @abstractmethod
    async def submit_sync(self, file: DocumentFile) -> dict:
        """
        Envia o boleto e espera o resultado completo.

        Args:
            file: Boleto validado.

        Returns:
            JSON bruto no formato síncrono. `success: false` é um
            resultado válido, não um erro.
        """
        ...

    @abstractmethod
    async def submit_async(self, file: DocumentFile) -> SubmissionHandle:
        """
        Envia o boleto para processamento em background.

        Returns:
            SubmissionHandle com o id para polling.
        """
        ...

    @abstractmethod
    async def fetch_by_id(self, analysis_id: str) -> dict:
        """
        Consulta o último status conhecido de uma análise.

        Returns:
            JSON bruto no formato assíncrono.
        """
        ...

    @abstractmethod
    async def health_check(self) -> dict:
        """Liveness da API (conteúdo opaco)."""
        ...
