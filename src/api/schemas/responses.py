"""
Pydantic schemas — contrato da API remota de análise de boletos.

Os nomes dos campos seguem exatamente o JSON do servidor
(mistura de camelCase e snake_case é do próprio servidor).
"""

from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, Field, field_validator


class JobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class SubmitAnalysisResponse(BaseModel):
    """POST /api/analisar"""
    id: str
    status: str = JobStatus.PROCESSING.value
    message: str = ""
    fileName: str
    fileSize: int = Field(ge=0)
    fileType: Literal["image/jpeg", "image/png", "application/pdf"]


class DadosExtraidos(BaseModel):
    codigo_barras: str | None = None
    linha_digitavel: str | None = None
    valor: float | None = None
    vencimento: str | None = None
    beneficiario_nome: str | None = None
    beneficiario_cnpj: str | None = None
    codigo_banco: str | None = None
    banco_nome: str | None = None
    agencia: str | None = None

    @field_validator(
        "codigo_barras", "linha_digitavel", "vencimento", "beneficiario_nome",
        "beneficiario_cnpj", "codigo_banco", "banco_nome", "agencia",
        mode="before",
    )
    @classmethod
    def _numbers_as_text(cls, v):
        # números vindos do OCR viram texto
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class ExplicacaoSimples(BaseModel):
    status: str
    confianca: str = ""
    resumo: str
    principal_motivo: str = ""
    acao_recomendada: str = ""
    emoji: str = ""


class ExplicacaoAvancada(BaseModel):
    analise_tecnica: Any = None
    metricas: Any = None
    detalhes_tecnicos: Any = None


class Razao(BaseModel):
    gravidade: Literal["critica", "alta", "media", "baixa"]
    categoria: str = ""
    categoria_nome: str = ""
    icone: str = ""
    cor: str = ""
    titulo: str
    descricao_simples: str = ""
    descricao_avancada: str = ""
    impacto: float = 0.0
    fonte: str = ""


class Recomendacao(BaseModel):
    nivel_risco: str
    emoji: str = ""
    cor: str = ""
    acao_principal: str
    mensagem: str = ""
    proximos_passos: list[str] = []


class ExplicacaoCompleta(BaseModel):
    simples: ExplicacaoSimples
    avancado: ExplicacaoAvancada = ExplicacaoAvancada()
    razoes: list[Razao] = []
    recomendacao: Recomendacao
    gerado_em: str | None = None


class FraudeAnalise(BaseModel):
    """Sinais brutos de fraude. O flag aparece com duas grafias."""
    isFraudulento: bool | None = None
    is_fraudulento: bool | None = None
    score: float | None = None
    confianca: float | None = None
    metodos: list[str] | None = None
    motivos: list[str] | None = None
    explicacao: ExplicacaoCompleta | None = None


class SyncAnalysisResponse(BaseModel):
    """POST /api/test-ocr"""
    shape: Literal["sync"] = "sync"
    success: bool = True
    dados_extraidos: DadosExtraidos | None = None
    resultado_final: FraudeAnalise | None = None


class AsyncAnalysisResponse(BaseModel):
    """GET /api/analise/{id}"""
    shape: Literal["async"] = "async"
    id: str | None = None
    status: JobStatus | None = None
    processingTime: float | None = None
    dadosExtraidos: DadosExtraidos | None = None
    fraudeAnalise: FraudeAnalise | None = None
    predicaoML: dict | None = None
    validacaoTecnica: dict | None = None


RawAnalysisResponse = Union[SyncAnalysisResponse, AsyncAnalysisResponse]
