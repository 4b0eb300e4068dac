"""
Entity: Analysis Result

Resultado canônico de uma análise de boleto, independente de qual
endpoint (síncrono ou assíncrono) o produziu. Pronto para a UI.
"""

from dataclasses import dataclass, field
from enum import Enum


class AnalysisStatus(str, Enum):
    VALID = "Valid"
    FRAUDULENT = "Fraudulent"


class ResponseShape(str, Enum):
    SYNC = "sync"      # POST /api/test-ocr
    ASYNC = "async"    # GET /api/analise/{id}


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(str, Enum):
    HIGH = "High"
    LOW = "Low"


class MainAction(str, Enum):
    DO_NOT_PAY = "DoNotPay"
    CAN_PAY = "CanPay"


@dataclass
class ExtractedFields:
    """Campos extraídos pelo OCR. Tudo opcional: extração é best-effort."""
    barcode: str | None = None          # codigo_barras
    digit_line: str | None = None       # linha_digitavel
    amount: float | None = None         # valor
    due_date: str | None = None         # vencimento
    payee: str | None = None            # beneficiario_nome
    payee_tax_id: str | None = None     # beneficiario_cnpj
    bank_code: str | None = None        # codigo_banco
    bank_name: str | None = None        # banco_nome
    branch: str | None = None           # agencia


@dataclass
class PlainSummary:
    """Explicação em linguagem simples."""
    status: str
    confidence: str
    summary: str
    main_reason: str
    recommended_action: str
    emoji: str


@dataclass
class AdvancedDetail:
    technical_analysis: dict = field(default_factory=dict)
    metrics: dict = field(default_factory=dict)
    technical_details: dict = field(default_factory=dict)


@dataclass
class Reason:
    """Motivo individual do veredito, na ordem devolvida pelo servidor."""
    severity: Severity
    category: str
    title: str
    plain_text: str
    advanced_text: str
    impact_score: float
    source: str


@dataclass
class Recommendation:
    risk_level: RiskLevel
    main_action: MainAction
    message: str
    next_steps: list[str] = field(default_factory=list)


@dataclass
class Explanation:
    plain_summary: PlainSummary
    advanced_detail: AdvancedDetail
    reasons: list[Reason]
    recommendation: Recommendation


@dataclass
class NormalizedAnalysis:
    """Resultado consolidado de uma análise de boleto."""
    status: AnalysisStatus
    extracted_fields: ExtractedFields
    explanation: Explanation
    source: ResponseShape

    # Meta (quando o servidor informa)
    analysis_id: str | None = None
    fraud_score: float | None = None
    confidence: float | None = None
    processing_time: float | None = None
    ml_prediction: dict | None = None          # predicaoML
    technical_validation: dict | None = None   # validacaoTecnica

    @property
    def is_fraudulent(self) -> bool:
        return self.status == AnalysisStatus.FRAUDULENT
