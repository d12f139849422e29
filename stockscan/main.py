import argparse
import json
import mimetypes
import sys
from collections.abc import Sequence
from pathlib import Path

from stockscan.cache.postgres_cache import PostgresAnalysisCache
from stockscan.config.settings import Settings
from stockscan.database.connection import close_pool, init_pool
from stockscan.knowledge.assistant import InventoryAssistant
from stockscan.knowledge.exceptions import InventoryFormatError
from stockscan.knowledge.inventory_loader import load_inventory
from stockscan.logging.logger import Log
from stockscan.ocr.exceptions import LocalOcrError
from stockscan.preprocessing.exceptions import PreprocessingError
from stockscan.processor.exceptions import ExtractionError
from stockscan.processor.models import AnalysisOutcome, DocumentType
from stockscan.processor.orchestrator import build_orchestrator
from stockscan.processor.serialization import payload_to_json
from stockscan.providers.exceptions import ProviderChainError, RemoteUnavailableError
from stockscan.providers.factory import ProviderChainFactory


def outcome_to_json(outcome: AnalysisOutcome) -> dict[str, object]:
    return {
        "contentHash": outcome.content_hash,
        "documentType": outcome.document_type.value,
        "source": outcome.source.value,
        "fromCache": outcome.from_cache,
        "provider": outcome.provider,
        "analyzedAt": outcome.analyzed_at.isoformat() if outcome.analyzed_at else None,
        "payload": payload_to_json(outcome.payload),
    }


def _analyze(ns: argparse.Namespace, settings: Settings) -> int:
    path = Path(ns.file)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        print(f"Cannot read {path}: {exc.strerror or exc}", file=sys.stderr)
        return 2
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    orchestrator = build_orchestrator(settings)
    try:
        outcome = orchestrator.analyze(
            raw,
            DocumentType(ns.type),
            mime_type=mime_type,
            allow_remote=not ns.no_remote,
        )
    except (ExtractionError, PreprocessingError, LocalOcrError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(json.dumps(outcome_to_json(outcome), ensure_ascii=False, indent=2))
    return 0


def _ask(ns: argparse.Namespace, settings: Settings) -> int:
    try:
        items, transactions, partners = load_inventory(Path(ns.inventory))
    except InventoryFormatError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    assistant = InventoryAssistant(
        ProviderChainFactory.create(settings),
        recent_limit=settings.assistant_recent_transactions,
    )
    assistant.refresh(items, transactions, partners)
    try:
        reply = assistant.ask(ns.question, allow_remote=not ns.no_remote)
    except (RemoteUnavailableError, ProviderChainError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(reply.text)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stockscan", description="Inventory document extraction")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Extract a transaction or control sheet from a photo")
    analyze.add_argument("file")
    analyze.add_argument("--type", required=True, choices=[t.value for t in DocumentType])
    analyze.add_argument("--no-remote", action="store_true", help="Never call remote AI providers")
    analyze.set_defaults(handler=_analyze)

    ask = subparsers.add_parser("ask", help="Ask a question about an inventory export")
    ask.add_argument("question")
    ask.add_argument("--inventory", required=True, help="JSON file with items, transactions and partners")
    ask.add_argument("--no-remote", action="store_true", help="Only answer from local rules")
    ask.set_defaults(handler=_ask)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse args -> configure logging -> run the command."""
    ns = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    use_pool = ns.command == "analyze" and settings.cache_backend.lower() == "postgres"
    if use_pool:
        init_pool(settings)
    try:
        if use_pool:
            PostgresAnalysisCache().ensure_schema()
        return ns.handler(ns, settings)
    finally:
        if use_pool:
            close_pool()


if __name__ == "__main__":
    sys.exit(main())
