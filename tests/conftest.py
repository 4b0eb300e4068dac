"""
Fixtures compartilhadas.

A API remota é simulada por um app FastAPI servido in-process via
httpx.ASGITransport — o client real roda sem rede.
"""

import asyncio

import httpx
import pytest
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response

from src.config.settings import Settings
from src.core.entities.document import DocumentFile
from src.infrastructure.http.boleto_api_client import BoletoApiClient
from tests.payloads import ANALYSIS_ID, PNG_BYTES, async_payload, sync_payload

BASE_URL = "http://fake-boleto-api"


# ─── Fake server ─────────────────────────────────────────────

class FakeAnalysisServer:
    """Simula a API Python de análise de boletos."""

    def __init__(self):
        self.sync_response: Response | dict = sync_payload()
        self.poll_bodies: list[dict] = [async_payload(fraude={"isFraudulento": False})]
        self.uploads: list[dict] = []
        self.fetched_ids: list[str] = []
        self.app = self._build_app()

    async def _record(self, file: UploadFile) -> bytes:
        content = await file.read()
        self.uploads.append({
            "filename": file.filename,
            "content_type": file.content_type,
            "size": len(content),
        })
        return content

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.post("/api/test-ocr")
        async def test_ocr(file: UploadFile = File(...)):
            await self._record(file)
            if isinstance(self.sync_response, Response):
                return self.sync_response
            return JSONResponse(content=self.sync_response)

        @app.post("/api/analisar")
        async def analisar(file: UploadFile = File(...)):
            content = await self._record(file)
            return {
                "id": ANALYSIS_ID,
                "status": "processing",
                "message": "Análise iniciada",
                "fileName": file.filename,
                "fileSize": len(content),
                "fileType": file.content_type,
            }

        @app.get("/api/analise/{analise_id}")
        async def consultar(analise_id: str):
            if analise_id != ANALYSIS_ID:
                raise HTTPException(status_code=404, detail="Análise não encontrada")
            self.fetched_ids.append(analise_id)
            idx = min(len(self.fetched_ids), len(self.poll_bodies)) - 1
            return self.poll_bodies[idx]

        @app.get("/health")
        async def health():
            return {"status": "ok", "version": "1.0.0"}

        return app


@pytest.fixture
def server() -> FakeAnalysisServer:
    return FakeAnalysisServer()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, api_base_url=BASE_URL, poll_interval_ms=0)


@pytest.fixture
def png_file() -> DocumentFile:
    return DocumentFile(file_name="boleto.png", content=PNG_BYTES, content_type="image/png")


@pytest.fixture
def run_api(server):
    """Roda `fn(api)` com um BoletoApiClient ligado ao fake server."""

    def _run(fn, transport: httpx.AsyncBaseTransport | None = None):
        async def _main():
            async with httpx.AsyncClient(
                transport=transport or httpx.ASGITransport(app=server.app),
                base_url=BASE_URL,
            ) as http:
                api = BoletoApiClient(BASE_URL, client=http)
                return await fn(api)

        return asyncio.run(_main())

    return _run
