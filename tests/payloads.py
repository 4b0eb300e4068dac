"""Payloads de exemplo no formato da API remota."""

ANALYSIS_ID = "an-123"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def dados_extraidos(**overrides) -> dict:
    data = {
        "codigo_barras": "23793381286000782713695000063305975520000150000",
        "linha_digitavel": "23793.38128 60007.827136 95000.063305 9 75520000150000",
        "valor": 150.0,
        "vencimento": "2025-03-10",
        "beneficiario_nome": "Loja Exemplo LTDA",
        "beneficiario_cnpj": "12.345.678/0001-90",
        "codigo_banco": "237",
        "banco_nome": "Bradesco",
        "agencia": "3381",
    }
    data.update(overrides)
    return data


def sync_payload(is_fraud: bool = False, **resultado) -> dict:
    return {
        "success": True,
        "dados_extraidos": dados_extraidos(),
        "resultado_final": {"isFraudulento": is_fraud, **resultado},
    }


def server_explanation() -> dict:
    return {
        "simples": {
            "status": "FRAUDULENTO",
            "confianca": "Alta",
            "resumo": "O código de barras não bate com o valor",
            "principal_motivo": "Linha digitável adulterada",
            "acao_recomendada": "NÃO PAGUE este boleto",
            "emoji": "🚨",
        },
        "avancado": {
            "analise_tecnica": {"modelo": "rf-v2"},
            "metricas": {"score": 0.93},
            "detalhes_tecnicos": None,
        },
        "razoes": [
            {"gravidade": "alta", "categoria": "banco", "titulo": "Banco divergente",
             "descricao_simples": "O banco do código não é o do beneficiário",
             "descricao_avancada": "codigo_banco=237 vs cnpj registrado em 341",
             "impacto": 0.4, "fonte": "validacao_tecnica"},
            {"gravidade": "critica", "categoria": "valor", "titulo": "Valor adulterado",
             "descricao_simples": "O valor impresso difere do código de barras",
             "descricao_avancada": "valor=150.00 vs campo livre=1500.00",
             "impacto": 0.9, "fonte": "ml"},
            {"gravidade": "baixa", "categoria": "layout", "titulo": "Fonte incomum",
             "descricao_simples": "Fonte diferente do padrão do banco",
             "descricao_avancada": "font-match=0.61",
             "impacto": 0.1, "fonte": "ocr"},
        ],
        "recomendacao": {
            "nivel_risco": "ALTO",
            "emoji": "⚠️",
            "cor": "danger",
            "acao_principal": "NÃO PAGAR",
            "mensagem": "Há fortes indícios de fraude.",
            "proximos_passos": ["Não pague", "Avise o banco"],
        },
        "gerado_em": "2025-03-01T12:00:00",
    }


def async_payload(status: str = "completed", fraude: dict | None = None, **extra) -> dict:
    payload = {
        "id": ANALYSIS_ID,
        "status": status,
        "uploadedAt": "2025-03-01T11:59:50",
        "fileName": "boleto.png",
        "fileSize": len(PNG_BYTES),
        "fileType": "image/png",
    }
    if fraude is not None:
        payload["dadosExtraidos"] = dados_extraidos()
        payload["fraudeAnalise"] = fraude
        payload["processedAt"] = "2025-03-01T12:00:00"
        payload["processingTime"] = 4.2
    payload.update(extra)
    return payload


