from collections.abc import Callable
from datetime import datetime, timezone

from stockscan.cache.base import BaseAnalysisCache
from stockscan.cache.models import AuditEntry, CacheEntry
from stockscan.hashing.content_hasher import ContentHasher
from stockscan.logging.logger import Log
from stockscan.normalization.merge import normalize_payload
from stockscan.ocr.base import BaseLocalOcrAnalyzer
from stockscan.preprocessing.base import BasePreprocessor
from stockscan.processor.exceptions import (
    ExtractionValidationError,
    NoDataError,
    RemoteExtractionError,
)
from stockscan.processor.models import AnalysisSource, ProcessedDocument, payload_size
from stockscan.processor.pipeline import (
    ExtractionContext,
    ExtractionState,
    PipelineStep,
    StageResult,
)
from stockscan.providers.chain import ProviderFallbackChain
from stockscan.providers.exceptions import ProviderChainError, RemoteUnavailableError
from stockscan.qr.extractor import QrExtractor

Clock = Callable[[], datetime]

MANUAL_ENTRY_HINT = "Please enter the data manually."


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_document(context: ExtractionContext) -> ProcessedDocument:
    if context.document is None:
        raise ValueError("ExtractionContext.document must be set before this step")
    return context.document


class PreprocessStep(PipelineStep):
    def __init__(self, preprocessor: BasePreprocessor) -> None:
        self._preprocessor = preprocessor

    def run(self, context: ExtractionContext) -> ExtractionContext:
        context.document = self._preprocessor.preprocess(context.raw_bytes, context.mime_type)
        Log.info(
            f"Preprocessed {len(context.raw_bytes)} bytes into "
            f"{context.document.size_bytes} bytes ({context.document.mime_type})"
        )
        return context


class HashStep(PipelineStep):
    def __init__(self, hasher: ContentHasher) -> None:
        self._hasher = hasher

    def run(self, context: ExtractionContext) -> ExtractionContext:
        document = _require_document(context)
        context.content_hash = self._hasher.hash(document.content)
        context.state = ExtractionState.HASHED
        Log.info(f"Document hashed: {context.content_hash}")
        return context


class CacheLookupStep(PipelineStep):
    def __init__(self, cache: BaseAnalysisCache) -> None:
        self._cache = cache

    def run(self, context: ExtractionContext) -> ExtractionContext:
        entry = self._cache.get(context.content_hash, context.document_type)
        if entry is None:
            context.state = ExtractionState.CACHE_MISS
            Log.info(f"Cache miss for {context.content_hash} ({context.document_type.value})")
            return context
        context.from_cache = True
        context.saved_at = entry.saved_at
        context.resolve(entry.source, entry.payload, ExtractionState.CACHE_HIT)
        Log.info(
            f"Cache hit for {context.content_hash} ({context.document_type.value}), "
            f"source={entry.source.value}"
        )
        return context


class QrStep(PipelineStep):
    def __init__(self, extractor: QrExtractor) -> None:
        self._extractor = extractor

    def run(self, context: ExtractionContext) -> ExtractionContext:
        if context.resolved:
            return context
        context.qr = self._extractor.extract(_require_document(context), context.document_type)
        if context.qr.found and context.qr.payload is not None:
            context.resolve(AnalysisSource.QR, context.qr.payload, ExtractionState.QR_RESOLVED)
            Log.info(f"QR resolved {payload_size(context.qr.payload)} rows")
        else:
            context.state = ExtractionState.QR_EMPTY
        return context


class LocalOcrStep(PipelineStep):
    def __init__(self, analyzer: BaseLocalOcrAnalyzer) -> None:
        self._analyzer = analyzer

    def run(self, context: ExtractionContext) -> ExtractionContext:
        if context.resolved:
            return context
        payload = self._analyzer.analyze(_require_document(context), context.document_type)
        context.local = StageResult.of(normalize_payload(payload))
        if context.local.found and context.local.payload is not None:
            context.resolve(AnalysisSource.OCR, context.local.payload, ExtractionState.LOCAL_NON_EMPTY)
            Log.info(f"Local OCR found {payload_size(context.local.payload)} rows")
        else:
            context.state = ExtractionState.LOCAL_EMPTY
            Log.info("Local OCR found nothing usable")
        return context


class RemoteStep(PipelineStep):
    """Runs the provider chain only when every local stage came back empty."""

    def __init__(self, chain: ProviderFallbackChain) -> None:
        self._chain = chain

    def run(self, context: ExtractionContext) -> ExtractionContext:
        if context.resolved:
            return context
        if not context.allow_remote:
            self._skip(context, "remote analysis was not allowed for this document")
        if not self._chain.is_available:
            self._skip(context, f"remote analysis is unavailable ({self._chain.label})")

        Log.info(f"Local stages empty, trying remote providers: {self._chain.label}")
        try:
            payload = self._chain.extract(_require_document(context), context.document_type)
        except RemoteUnavailableError as exc:
            self._skip(context, str(exc))
        except ProviderChainError as exc:
            context.state = ExtractionState.REMOTE_FAILED
            context.error_message = f"All remote providers failed: {exc}"
            raise RemoteExtractionError(context.error_message) from exc

        context.provider = self._chain.last_successful_provider
        context.remote = StageResult.of(normalize_payload(payload))
        if context.remote.found and context.remote.payload is not None:
            context.resolve(AnalysisSource.REMOTE, context.remote.payload, ExtractionState.REMOTE_RESOLVED)
            Log.info(
                f"Remote provider {context.provider} found "
                f"{payload_size(context.remote.payload)} rows"
            )
        return context

    @staticmethod
    def _skip(context: ExtractionContext, reason: str) -> None:
        context.state = ExtractionState.REMOTE_SKIPPED
        context.error_message = f"No data found locally and {reason}. {MANUAL_ENTRY_HINT}"
        raise NoDataError(context.error_message)


class ValidateStep(PipelineStep):
    def run(self, context: ExtractionContext) -> ExtractionContext:
        if not context.resolved:
            context.state = ExtractionState.FAILED
            context.error_message = (
                "No valid rows or items could be extracted from the document. "
                f"{MANUAL_ENTRY_HINT}"
            )
            raise ExtractionValidationError(context.error_message)
        return context


class PersistCacheStep(PipelineStep):
    def __init__(self, cache: BaseAnalysisCache, clock: Clock = utcnow) -> None:
        self._cache = cache
        self._clock = clock

    def run(self, context: ExtractionContext) -> ExtractionContext:
        if context.from_cache:
            return context
        if context.source is None or context.payload is None:
            raise ValueError("ExtractionContext must be resolved before persisting")
        context.saved_at = self._clock()
        self._cache.put(
            CacheEntry(
                content_hash=context.content_hash,
                document_type=context.document_type,
                source=context.source,
                payload=context.payload,
                saved_at=context.saved_at,
            )
        )
        Log.info(f"Cached {context.source.value} result for {context.content_hash}")
        return context


class AuditStep(PipelineStep):
    def __init__(self, cache: BaseAnalysisCache, clock: Clock = utcnow) -> None:
        self._cache = cache
        self._clock = clock

    def run(self, context: ExtractionContext) -> ExtractionContext:
        if context.source is None:
            raise ValueError("ExtractionContext must be resolved before auditing")
        document = _require_document(context)
        self._cache.append_audit(
            AuditEntry(
                content_hash=context.content_hash,
                document_type=context.document_type,
                source=context.source,
                saved_at=self._clock(),
                size_bytes=document.size_bytes,
            )
        )
        context.state = ExtractionState.COMMITTED
        return context
