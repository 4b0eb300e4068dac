"""
Use Case: Normalize Result

Converte qualquer um dos dois formatos de resposta da API
(síncrono /api/test-ocr ou assíncrono /api/analise/{id}) em um
NormalizedAnalysis completo. Quando o servidor não manda explicação
estruturada, ela é sintetizada a partir do flag de fraude.

Função pura: sem I/O, sem estado.
"""

import unicodedata

from pydantic import ValidationError

from src.api.schemas.responses import (
    AsyncAnalysisResponse,
    DadosExtraidos,
    ExplicacaoCompleta,
    FraudeAnalise,
    RawAnalysisResponse,
    SyncAnalysisResponse,
)
from src.core.entities.analysis_result import (
    AdvancedDetail,
    AnalysisStatus,
    Explanation,
    ExtractedFields,
    MainAction,
    NormalizedAnalysis,
    PlainSummary,
    Reason,
    Recommendation,
    ResponseShape,
    RiskLevel,
    Severity,
)
from src.core.errors import MalformedResponseError


SYNC_KEYS = ("success", "resultado_final")
ASYNC_KEYS = ("status", "fraudeAnalise")

SEVERITY_MAP = {
    "critica": Severity.CRITICAL,
    "alta": Severity.HIGH,
    "media": Severity.MEDIUM,
    "baixa": Severity.LOW,
}

LOW_RISK_LEVELS = {"BAIXO", "BAIXA", "LOW"}
CAN_PAY_ACTIONS = {"PODE PAGAR", "CAN PAY", "CANPAY"}
DO_NOT_PAY_ACTIONS = {"NAO PAGAR", "NAO PAGUE", "DO NOT PAY", "DONOTPAY"}


# ─── Templates de explicação (chaveados só pelo flag) ──────────

FRAUD_TEMPLATE = {
    "status": "FRAUDULENTO",
    "summary": "Este boleto foi identificado como falso",
    "recommended_action": "NÃO PAGUE este boleto",
    "emoji": "🚨",
    "risk_level": RiskLevel.HIGH,
    "main_action": MainAction.DO_NOT_PAY,
    "message": "Este boleto apresenta características suspeitas.",
    "next_steps": (
        "Não efetue o pagamento",
        "Entre em contato com o emissor",
        "Reporte a fraude",
    ),
}

VALID_TEMPLATE = {
    "status": "VÁLIDO",
    "summary": "Este boleto aparenta ser autêntico",
    "recommended_action": "Você pode pagar, mas sempre confira os dados",
    "emoji": "✅",
    "risk_level": RiskLevel.LOW,
    "main_action": MainAction.CAN_PAY,
    "message": "Este boleto passou nas verificações de segurança.",
    "next_steps": (
        "Confira os dados",
        "Efetue o pagamento com segurança",
    ),
}

SYNTHESIZED_CONFIDENCE = "Média"
DEFAULT_MAIN_REASON = "Análise completa"


def detect_shape(raw: dict) -> RawAnalysisResponse:
    """
    Detecta o formato pela presença de chaves e devolve o modelo tipado.

    Formato síncrono tem precedência quando as duas famílias de
    chaves aparecem.

    Raises:
        MalformedResponseError: nenhum formato reconhecido, ou o
            payload não valida contra o formato detectado.
    """
    if not isinstance(raw, dict):
        raise MalformedResponseError("Resposta da API não é um objeto JSON")

    if any(k in raw for k in SYNC_KEYS):
        model, shape = SyncAnalysisResponse, "sync"
    elif any(k in raw for k in ASYNC_KEYS):
        model, shape = AsyncAnalysisResponse, "async"
    else:
        raise MalformedResponseError(
            f"Formato de resposta desconhecido (chaves: {sorted(raw)[:10]})"
        )

    try:
        return model.model_validate({**raw, "shape": shape})
    except ValidationError as e:
        raise MalformedResponseError(
            f"Resposta {shape} inválida: {e.error_count()} erro(s) de validação"
        ) from e


def resolve_fraud_flag(analise: FraudeAnalise) -> bool | None:
    """Lê isFraudulento / is_fraudulento. Valores divergentes são erro."""
    camel, snake = analise.isFraudulento, analise.is_fraudulento
    if camel is not None and snake is not None and camel != snake:
        raise MalformedResponseError(
            "isFraudulento e is_fraudulento com valores divergentes"
        )
    return camel if camel is not None else snake


def synthesize_explanation(is_fraudulent: bool, analise: FraudeAnalise | None = None) -> Explanation:
    """
    Monta a explicação mínima quando o servidor não mandou `explicacao`.

    Resumo, emoji, ação e próximos passos dependem só do flag. O único
    motivo possível vem do primeiro método bruto do servidor.
    """
    tpl = FRAUD_TEMPLATE if is_fraudulent else VALID_TEMPLATE
    metodos = (analise.metodos if analise else None) or []
    motivos = (analise.motivos if analise else None) or []

    reasons: list[Reason] = []
    if metodos:
        metodo = metodos[0]
        reasons.append(Reason(
            severity=Severity.HIGH if is_fraudulent else Severity.LOW,
            category="metodo",
            title=metodo,
            plain_text=motivos[0] if motivos else metodo,
            advanced_text=metodo,
            impact_score=analise.score if analise.score is not None else 0.0,
            source="metodos",
        ))

    return Explanation(
        plain_summary=PlainSummary(
            status=tpl["status"],
            confidence=SYNTHESIZED_CONFIDENCE,
            summary=tpl["summary"],
            main_reason=metodos[0] if metodos else DEFAULT_MAIN_REASON,
            recommended_action=tpl["recommended_action"],
            emoji=tpl["emoji"],
        ),
        advanced_detail=AdvancedDetail(),
        reasons=reasons,
        recommendation=Recommendation(
            risk_level=tpl["risk_level"],
            main_action=tpl["main_action"],
            message=tpl["message"],
            next_steps=list(tpl["next_steps"]),
        ),
    )


def _fold(text: str) -> str:
    """'Não Pagar' -> 'NAO PAGAR'"""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).strip().upper()


def _as_dict(value) -> dict:
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    return {"value": value}


def map_server_explanation(explicacao: ExplicacaoCompleta) -> Explanation:
    """Converte a explicação do servidor campo a campo, sem reordenar motivos."""
    simples = explicacao.simples
    rec = explicacao.recomendacao

    risk_level = RiskLevel.LOW if _fold(rec.nivel_risco) in LOW_RISK_LEVELS else RiskLevel.HIGH
    action = _fold(rec.acao_principal)
    if action in CAN_PAY_ACTIONS:
        main_action = MainAction.CAN_PAY
    elif action in DO_NOT_PAY_ACTIONS:
        main_action = MainAction.DO_NOT_PAY
    else:
        main_action = MainAction.CAN_PAY if risk_level == RiskLevel.LOW else MainAction.DO_NOT_PAY

    return Explanation(
        plain_summary=PlainSummary(
            status=simples.status,
            confidence=simples.confianca,
            summary=simples.resumo,
            main_reason=simples.principal_motivo,
            recommended_action=simples.acao_recomendada,
            emoji=simples.emoji,
        ),
        advanced_detail=AdvancedDetail(
            technical_analysis=_as_dict(explicacao.avancado.analise_tecnica),
            metrics=_as_dict(explicacao.avancado.metricas),
            technical_details=_as_dict(explicacao.avancado.detalhes_tecnicos),
        ),
        reasons=[
            Reason(
                severity=SEVERITY_MAP[r.gravidade],
                category=r.categoria,
                title=r.titulo,
                plain_text=r.descricao_simples,
                advanced_text=r.descricao_avancada,
                impact_score=r.impacto,
                source=r.fonte,
            )
            for r in explicacao.razoes
        ],
        recommendation=Recommendation(
            risk_level=risk_level,
            main_action=main_action,
            message=rec.mensagem,
            next_steps=list(rec.proximos_passos),
        ),
    )


def extract_fields(dados: DadosExtraidos | None) -> ExtractedFields:
    if dados is None:
        return ExtractedFields()
    return ExtractedFields(
        barcode=dados.codigo_barras,
        digit_line=dados.linha_digitavel,
        amount=dados.valor,
        due_date=dados.vencimento,
        payee=dados.beneficiario_nome,
        payee_tax_id=dados.beneficiario_cnpj,
        bank_code=dados.codigo_banco,
        bank_name=dados.banco_nome,
        branch=dados.agencia,
    )


class ResultNormalizer:
    """
    Use Case: resposta bruta da API → NormalizedAnalysis.

    1. Detecta o formato (síncrono / assíncrono)
    2. Copia os campos extraídos
    3. Usa a explicação do servidor ou sintetiza uma
    """

    def normalize(self, raw: dict) -> NormalizedAnalysis:
        parsed = detect_shape(raw)
        if isinstance(parsed, SyncAnalysisResponse):
            return self._from_sync(parsed)
        return self._from_async(parsed)

    def _from_sync(self, resp: SyncAnalysisResponse) -> NormalizedAnalysis:
        if resp.resultado_final is None:
            raise MalformedResponseError("Resposta síncrona sem resultado_final")
        analise = resp.resultado_final
        is_fraud = bool(resolve_fraud_flag(analise))

        return NormalizedAnalysis(
            status=AnalysisStatus.FRAUDULENT if is_fraud else AnalysisStatus.VALID,
            extracted_fields=extract_fields(resp.dados_extraidos),
            explanation=synthesize_explanation(is_fraud, analise),
            source=ResponseShape.SYNC,
            fraud_score=analise.score,
            confidence=analise.confianca,
        )

    def _from_async(self, resp: AsyncAnalysisResponse) -> NormalizedAnalysis:
        if resp.fraudeAnalise is None:
            raise MalformedResponseError("Resposta assíncrona sem fraudeAnalise")
        analise = resp.fraudeAnalise
        flag = resolve_fraud_flag(analise)

        if analise.explicacao is not None:
            explanation = map_server_explanation(analise.explicacao)
            if flag is None:
                flag = _fold(analise.explicacao.simples.status) == "FRAUDULENTO"
        else:
            flag = bool(flag)
            explanation = synthesize_explanation(flag, analise)

        return NormalizedAnalysis(
            status=AnalysisStatus.FRAUDULENT if flag else AnalysisStatus.VALID,
            extracted_fields=extract_fields(resp.dadosExtraidos),
            explanation=explanation,
            source=ResponseShape.ASYNC,
            analysis_id=resp.id,
            fraud_score=analise.score,
            confidence=analise.confianca,
            processing_time=resp.processingTime,
            ml_prediction=resp.predicaoML,
            technical_validation=resp.validacaoTecnica,
        )


_default_normalizer = ResultNormalizer()


def normalize_result(raw: dict) -> NormalizedAnalysis:
    """Atalho para ResultNormalizer().normalize(raw)."""
    return _default_normalizer.normalize(raw)
