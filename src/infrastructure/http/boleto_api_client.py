"""
Adapter: Boleto API Client (httpx)

Implementação concreta do contrato IAnalysisTransport contra a API
Python de análise de boletos. Sem retry: toda falha vira TransportError,
classificada em CLIENT_SIDE (nenhuma resposta) ou SERVER_SIDE.
"""

import logging

import httpx
from pydantic import ValidationError

from src.api.schemas.responses import JobStatus, SubmitAnalysisResponse
from src.core.entities.document import DocumentFile, FileType, SubmissionHandle
from src.core.errors import ErrorSide, MalformedResponseError, TransportError
from src.core.interfaces.analysis_transport import IAnalysisTransport

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = "Não foi possível conectar ao servidor. Verifique sua conexão."
SERVER_ERROR_MESSAGE = "Erro no servidor"
INVALID_BODY_MESSAGE = "Resposta inválida do servidor"

VERDICT_KEYS = {"resultado_final", "fraudeAnalise"}
JOB_STATUSES = {s.value for s in JobStatus}


class BoletoApiClient(IAnalysisTransport):
    """
    Client HTTP assíncrono da API de análise.

    Endpoints:
        POST /api/test-ocr         análise síncrona
        POST /api/analisar         análise assíncrona (devolve id)
        GET  /api/analise/{id}     status / resultado
        GET  /health               liveness

    Pode receber um httpx.AsyncClient pronto (testes, proxies, etc.);
    nesse caso quem criou o client é quem fecha.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def __aenter__(self) -> "BoletoApiClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    # ─── Operações ──────────────────────────────────────────

    async def submit_sync(self, file: DocumentFile) -> dict:
        return await self._request("POST", "/api/test-ocr", files=self._multipart(file))

    async def submit_async(self, file: DocumentFile) -> SubmissionHandle:
        data = await self._request("POST", "/api/analisar", files=self._multipart(file))
        try:
            body = SubmitAnalysisResponse.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(f"Resposta de /api/analisar inválida: {e}") from e

        logger.info(f"Submitted {file.file_name} ({file.size} bytes) -> analysis {body.id}")
        return SubmissionHandle(
            id=body.id,
            file_name=body.fileName,
            file_size=body.fileSize,
            file_type=FileType(body.fileType),
            status=body.status,
            message=body.message,
        )

    async def fetch_by_id(self, analysis_id: str) -> dict:
        return await self._request("GET", f"/api/analise/{analysis_id}")

    async def health_check(self) -> dict:
        return await self._request("GET", "/health")

    # ─── Internos ───────────────────────────────────────────

    @staticmethod
    def _multipart(file: DocumentFile) -> dict:
        return {"file": (file.file_name, file.content, file.content_type)}

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        """Faz a chamada e devolve o JSON (objeto), ou levanta TransportError."""
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed without response: {type(e).__name__}: {e}")
            raise TransportError(CONNECTION_ERROR_MESSAGE, ErrorSide.CLIENT_SIDE) from e

        if response.is_error:
            message = _server_message(response) or SERVER_ERROR_MESSAGE
            logger.warning(f"{method} {path} -> HTTP {response.status_code}: {message}")
            raise TransportError(message, ErrorSide.SERVER_SIDE, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.warning(f"{method} {path} -> HTTP {response.status_code} with non-object body")
            raise TransportError(INVALID_BODY_MESSAGE, ErrorSide.SERVER_SIDE, status_code=response.status_code)

        if _is_error_body(data):
            message = _as_message(data.get("error")) or _as_message(data.get("detail")) or SERVER_ERROR_MESSAGE
            logger.warning(f"{method} {path} -> error body: {message}")
            raise TransportError(message, ErrorSide.SERVER_SIDE, status_code=response.status_code)

        return data


def _is_error_body(data: dict) -> bool:
    """2xx com `error`/`detail` e sem veredito nem status de job conhecido."""
    if "error" not in data and "detail" not in data:
        return False
    if data.keys() & VERDICT_KEYS:
        return False
    return data.get("status") not in JOB_STATUSES


def _as_message(value) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _server_message(response: httpx.Response) -> str | None:
    """Mensagem do servidor (`detail`, `message` ou `error`), se houver."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in ("detail", "message", "error"):
        message = _as_message(body.get(key))
        if message:
            return message
    return None
