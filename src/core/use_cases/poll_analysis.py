"""
Use Case: Poll Analysis — aguarda o resultado de uma análise assíncrona.

Máquina de estados explícita por sessão:

    PENDING → POLLING → COMPLETED | FAILED | TIMED_OUT | CANCELLED

Cada sessão faz no máximo `max_attempts` consultas, nunca duas ao
mesmo tempo, e espera `interval_ms` entre uma e outra. Só o status
"processing" é repetido; falha da própria consulta encerra a sessão.
"""

import asyncio
import logging
from enum import Enum

from src.api.schemas.responses import JobStatus
from src.core.entities.analysis_result import NormalizedAnalysis
from src.core.entities.document import SubmissionHandle
from src.core.errors import (
    AnalysisFailedError,
    BoletoAnalysisError,
    MalformedResponseError,
    PollingTimeoutError,
)
from src.core.interfaces.analysis_transport import IAnalysisTransport
from src.core.use_cases.normalize_result import ResultNormalizer

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_INTERVAL_MS = 2000


class PollState(str, Enum):
    PENDING = "PENDING"
    POLLING = "POLLING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"


TERMINAL_STATES = {
    PollState.COMPLETED,
    PollState.FAILED,
    PollState.TIMED_OUT,
    PollState.CANCELLED,
}


def read_job_status(raw: dict) -> JobStatus:
    """Extrai o status do job de uma resposta de GET /api/analise/{id}."""
    status = raw.get("status") if isinstance(raw, dict) else None
    try:
        return JobStatus(status)
    except ValueError:
        raise MalformedResponseError(f"Status de análise desconhecido: {status!r}") from None


class PollSession:
    """
    Uma tentativa limitada de observar o fim de uma análise.

    A sessão é dona exclusiva do contador e do timer. `run()` só pode
    ser chamado uma vez; `cancel()` pode ser chamado de qualquer task.
    """

    def __init__(
        self,
        handle: SubmissionHandle,
        transport: IAnalysisTransport,
        normalizer: ResultNormalizer,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        if interval_ms < 0:
            raise ValueError(f"interval_ms must be >= 0, got {interval_ms}")

        self.handle = handle
        self.max_attempts = max_attempts
        self.interval_ms = interval_ms
        self.attempt = 0
        self.state = PollState.PENDING

        self._transport = transport
        self._normalizer = normalizer
        self._cancel_requested = asyncio.Event()

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def cancel(self) -> bool:
        """
        Abandona a sessão. Nenhuma nova consulta é agendada; uma consulta
        já em voo termina e seu resultado é descartado.

        Returns:
            False se a sessão já estava num estado terminal.
        """
        if self.done:
            return False
        self._cancel_requested.set()
        return True

    async def run(self) -> NormalizedAnalysis:
        """
        Executa o polling até um estado terminal.

        Raises:
            AnalysisFailedError: servidor reportou status "failed".
            PollingTimeoutError: `max_attempts` consultas sem conclusão.
            TransportError: a consulta em si falhou (sem retry).
            MalformedResponseError: resposta com formato desconhecido.
            asyncio.CancelledError: sessão cancelada antes do fim.
        """
        if self.state != PollState.PENDING:
            raise RuntimeError(f"PollSession {self.handle.id} already started ({self.state.value})")

        try:
            return await self._loop()
        except asyncio.CancelledError:
            self.state = PollState.CANCELLED
            logger.info(f"Polling {self.handle.id} cancelled after {self.attempt} attempt(s)")
            raise
        finally:
            self._transport = None
            self._normalizer = None

    async def _loop(self) -> NormalizedAnalysis:
        analysis_id = self.handle.id

        while True:
            self._raise_if_cancelled()
            self.state = PollState.POLLING
            self.attempt += 1
            logger.debug(f"Polling {analysis_id}: attempt {self.attempt}/{self.max_attempts}")

            try:
                raw = await self._transport.fetch_by_id(analysis_id)
                self._raise_if_cancelled()
                status = read_job_status(raw)
            except BoletoAnalysisError as e:
                self._raise_if_cancelled()
                self.state = PollState.FAILED
                logger.warning(f"Polling {analysis_id} aborted: {e.message}")
                raise

            if status == JobStatus.COMPLETED:
                try:
                    result = self._normalizer.normalize(raw)
                except BoletoAnalysisError:
                    self.state = PollState.FAILED
                    raise
                self.state = PollState.COMPLETED
                logger.info(f"Analysis {analysis_id} completed after {self.attempt} attempt(s) [{result.status.value}]")
                return result

            if status == JobStatus.FAILED:
                self.state = PollState.FAILED
                logger.info(f"Analysis {analysis_id} failed on server (attempt {self.attempt})")
                raise AnalysisFailedError(analysis_id)

            if self.attempt >= self.max_attempts:
                self.state = PollState.TIMED_OUT
                logger.info(f"Polling {analysis_id} timed out after {self.attempt} attempt(s)")
                raise PollingTimeoutError(analysis_id, self.attempt)

            await self._wait_interval()

    async def _wait_interval(self):
        """Dorme `interval_ms`, acordando na hora se a sessão for cancelada."""
        try:
            await asyncio.wait_for(self._cancel_requested.wait(), timeout=self.interval_ms / 1000)
        except asyncio.TimeoutError:
            return
        self._raise_if_cancelled()

    def _raise_if_cancelled(self):
        if self._cancel_requested.is_set():
            raise asyncio.CancelledError()


class PollingCoordinator:
    """
    Use Case: transforma consultas repetidas em um único resultado.

    Dependency Injection: transport e normalizer vêm pelo construtor.
    Sessões são independentes; o transport é compartilhado entre elas.
    """

    def __init__(
        self,
        transport: IAnalysisTransport,
        normalizer: ResultNormalizer | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
    ):
        self._transport = transport
        self._normalizer = normalizer or ResultNormalizer()
        self._max_attempts = max_attempts
        self._interval_ms = interval_ms

    def start(
        self,
        handle: SubmissionHandle,
        max_attempts: int | None = None,
        interval_ms: int | None = None,
    ) -> PollSession:
        """Cria uma sessão nova (ainda PENDING). Use `await session.run()`."""
        return PollSession(
            handle=handle,
            transport=self._transport,
            normalizer=self._normalizer,
            max_attempts=max_attempts if max_attempts is not None else self._max_attempts,
            interval_ms=interval_ms if interval_ms is not None else self._interval_ms,
        )

    async def poll(
        self,
        handle: SubmissionHandle,
        max_attempts: int | None = None,
        interval_ms: int | None = None,
    ) -> NormalizedAnalysis:
        """Consulta até o resultado ficar pronto e devolve já normalizado."""
        session = self.start(handle, max_attempts=max_attempts, interval_ms=interval_ms)
        return await session.run()
