"""Smoke test: send a boleto to the live API and print the normalized verdict."""
import argparse
import asyncio
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env"))

from src.api.factory import build_analyzer
from src.config.settings import get_settings
from src.core.errors import BoletoAnalysisError


async def run(path: str, use_async: bool, max_attempts: int | None, interval_ms: int | None):
    api, analyzer = build_analyzer()
    async with api:
        health = await analyzer.health()
        print(f"  Health: {health}")

        file = analyzer.load_document(path)
        print(f"  File: {file.file_name} ({file.content_type}, {file.size} bytes)")

        if use_async:
            print(f"\n  Submitting to {api.base_url}/api/analisar and polling...")
            result = await analyzer.analyze_async(file, max_attempts=max_attempts, interval_ms=interval_ms)
        else:
            print(f"\n  Submitting to {api.base_url}/api/test-ocr...")
            result = await analyzer.analyze_sync(file)

    summary = result.explanation.plain_summary
    rec = result.explanation.recommendation
    print(f"\n{'─'*70}")
    print(f"  {summary.emoji} {result.status.value} — {summary.summary}")
    print(f"  Ação: {rec.main_action.value} | Risco: {rec.risk_level.value}")
    print(f"  {rec.message}")
    for step in rec.next_steps:
        print(f"    • {step}")

    if result.explanation.reasons:
        print(f"\n  Motivos:")
        for r in result.explanation.reasons:
            print(f"    [{r.severity.value:8s}] {r.title}: {r.plain_text}")

    fields = result.extracted_fields
    print(f"\n  Valor: {fields.amount}  Vencimento: {fields.due_date}")
    print(f"  Banco: {fields.bank_code} {fields.bank_name}")
    print(f"  Beneficiário: {fields.payee} ({fields.payee_tax_id})")
    print(f"  Linha digitável: {fields.digit_line}")

    if result.ml_prediction:
        print(f"\n  Predição ML: {result.ml_prediction}")
    if result.technical_validation:
        print(f"  Validação técnica: {result.technical_validation}")


def main():
    parser = argparse.ArgumentParser(description="Analyze a boleto against the live API")
    parser.add_argument("file", help="JPEG, PNG or PDF of the boleto")
    parser.add_argument("--async", dest="use_async", action="store_true", help="Use submit + polling")
    parser.add_argument("--max-attempts", type=int, default=None)
    parser.add_argument("--interval-ms", type=int, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=get_settings().effective_log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("=" * 70)
    print("  Boleto Fraud Analysis — API Test")
    print("=" * 70)

    try:
        asyncio.run(run(args.file, args.use_async, args.max_attempts, args.interval_ms))
    except BoletoAnalysisError as e:
        print(f"  ❌ {type(e).__name__}: {e.message}")
        sys.exit(1)

    print(f"\n{'='*70}")
    print("DONE")


if __name__ == "__main__":
    main()
