"""
Factory — monta o use case com os adapters concretos.

Ponto de entrada da UI: `build_analyzer()` devolve o client HTTP
(para fechar no fim) e o use case pronto.
"""

import httpx

from src.config.settings import Settings, get_settings
from src.core.use_cases.analyze_boleto import AnalyzeBoletoUseCase
from src.infrastructure.http.boleto_api_client import BoletoApiClient


def build_analyzer(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> tuple[BoletoApiClient, AnalyzeBoletoUseCase]:
    """
    Settings → BoletoApiClient → AnalyzeBoletoUseCase.

    Uso:
        api, analyzer = build_analyzer()
        async with api:
            result = await analyzer.analyze_sync(file)
    """
    settings = settings or get_settings()
    api = BoletoApiClient(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout_s,
        client=http_client,
    )
    return api, AnalyzeBoletoUseCase(transport=api, settings=settings)
