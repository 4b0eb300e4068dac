"""
Use Case: Analyze Boleto

Orquestra: Transport.submit → (síncrono: Normalizer) ou
(assíncrono: Polling Coordinator → Normalizer) → NormalizedAnalysis.
Mede latência de cada operação.
"""

import logging
import time
from pathlib import Path

from src.config.settings import Settings
from src.core.entities.analysis_result import NormalizedAnalysis
from src.core.entities.document import DocumentFile, SubmissionHandle
from src.core.interfaces.analysis_transport import IAnalysisTransport
from src.core.use_cases.normalize_result import ResultNormalizer
from src.core.use_cases.poll_analysis import PollingCoordinator, PollSession

logger = logging.getLogger(__name__)


class AnalyzeBoletoUseCase:
    """
    Use Case: recebe o boleto → devolve o veredito normalizado.

    Dependency Injection: transport, normalizer e settings vêm pelo
    construtor. Defaults de polling saem de Settings e podem ser
    sobrescritos a cada chamada.
    """

    def __init__(
        self,
        transport: IAnalysisTransport,
        settings: Settings,
        normalizer: ResultNormalizer | None = None,
    ):
        self._transport = transport
        self._settings = settings
        self._normalizer = normalizer or ResultNormalizer()
        self._coordinator = PollingCoordinator(
            transport=transport,
            normalizer=self._normalizer,
            max_attempts=settings.poll_max_attempts,
            interval_ms=settings.poll_interval_ms,
        )

    def load_document(self, path: str | Path) -> DocumentFile:
        """Lê e valida um boleto do disco (tipo e tamanho máximo)."""
        return DocumentFile.from_path(path, max_bytes=self._settings.max_upload_bytes)

    async def analyze_sync(self, file: DocumentFile) -> NormalizedAnalysis:
        """POST /api/test-ocr → resultado imediato."""
        t0 = time.perf_counter()
        raw = await self._transport.submit_sync(file)
        result = self._normalizer.normalize(raw)
        elapsed = round((time.perf_counter() - t0) * 1000, 2)
        logger.info(f"Sync analysis of {file.file_name}: {result.status.value} in {elapsed}ms")
        return result

    async def submit(self, file: DocumentFile) -> SubmissionHandle:
        """POST /api/analisar → handle para polling."""
        return await self._transport.submit_async(file)

    def start_polling(
        self,
        handle: SubmissionHandle,
        max_attempts: int | None = None,
        interval_ms: int | None = None,
    ) -> PollSession:
        """Sessão de polling cancelável; o caller faz `await session.run()`."""
        return self._coordinator.start(handle, max_attempts=max_attempts, interval_ms=interval_ms)

    async def analyze_async(
        self,
        file: DocumentFile,
        max_attempts: int | None = None,
        interval_ms: int | None = None,
    ) -> NormalizedAnalysis:
        """
        Envia o boleto e aguarda o resultado via polling.

        1. POST /api/analisar, devolve id
        2. GET /api/analise/{id} a cada `interval_ms` até concluir
        3. Normaliza o resultado
        """
        t0 = time.perf_counter()
        handle = await self.submit(file)
        result = await self._coordinator.poll(handle, max_attempts=max_attempts, interval_ms=interval_ms)
        elapsed = round((time.perf_counter() - t0) * 1000, 2)
        logger.info(f"Async analysis {handle.id}: {result.status.value} in {elapsed}ms")
        return result

    async def health(self) -> dict:
        return await self._transport.health_check()
