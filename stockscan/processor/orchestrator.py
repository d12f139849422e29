from collections.abc import Sequence

from stockscan.cache.base import BaseAnalysisCache
from stockscan.cache.factory import AnalysisCacheFactory
from stockscan.config.settings import Settings
from stockscan.hashing.content_hasher import ContentHasher
from stockscan.logging.logger import Log
from stockscan.ocr.base import BaseLocalOcrAnalyzer
from stockscan.ocr.factory import LocalOcrAnalyzerFactory
from stockscan.preprocessing.base import BasePreprocessor
from stockscan.preprocessing.factory import PreprocessorFactory
from stockscan.processor.exceptions import ExtractionError
from stockscan.processor.models import AnalysisOutcome, DocumentType
from stockscan.processor.pipeline import ExtractionContext, ExtractionState, PipelineStep
from stockscan.processor.steps import (
    AuditStep,
    CacheLookupStep,
    Clock,
    HashStep,
    LocalOcrStep,
    PersistCacheStep,
    PreprocessStep,
    QrStep,
    RemoteStep,
    ValidateStep,
    utcnow,
)
from stockscan.providers.chain import ProviderFallbackChain
from stockscan.providers.factory import ProviderChainFactory
from stockscan.qr.extractor import QrExtractor
from stockscan.qr.factory import QrDecoderFactory


class ExtractionOrchestrator:
    """Drives one document through the extraction pipeline.

    Pipeline: preprocess -> hash -> cache lookup -> QR -> local OCR ->
    remote (only if everything local was empty) -> validate -> cache -> audit.
    Stages run strictly in sequence. Failures are never cached or audited.
    """

    def __init__(self, steps: Sequence[PipelineStep]) -> None:
        self._steps = list(steps)

    def analyze(
        self,
        raw: bytes,
        document_type: DocumentType,
        *,
        mime_type: str = "image/jpeg",
        allow_remote: bool = True,
    ) -> AnalysisOutcome:
        """Extract a payload from an uploaded document.

        Raises:
            NoDataError: local stages were empty and remote could not be used.
            RemoteExtractionError: every configured provider failed.
            ExtractionValidationError: nothing valid survived normalization.
        """
        context = ExtractionContext(
            raw_bytes=raw,
            mime_type=mime_type,
            document_type=document_type,
            allow_remote=allow_remote,
        )
        Log.info(
            f"Analyzing {len(raw)} bytes as {document_type.value} "
            f"(remote {'allowed' if allow_remote else 'not allowed'})"
        )
        try:
            for step in self._steps:
                context = step.run(context)
        except ExtractionError as exc:
            reached = context.state
            if context.state is not ExtractionState.REMOTE_FAILED:
                context.state = ExtractionState.FAILED
            Log.error(f"Extraction failed after {reached.value}: {exc}")
            raise
        except Exception as exc:
            reached = context.state
            context.state = ExtractionState.FAILED
            Log.error(f"Extraction aborted after {reached.value}: {type(exc).__name__}: {exc}")
            raise

        if context.source is None or context.payload is None or context.document is None:
            raise RuntimeError("Extraction pipeline finished without a result")

        Log.info(
            f"Extraction committed for {context.content_hash}: "
            f"source={context.source.value}, from_cache={context.from_cache}"
        )
        return AnalysisOutcome(
            content_hash=context.content_hash,
            document_type=context.document_type,
            source=context.source,
            payload=context.payload,
            from_cache=context.from_cache,
            document=context.document,
            provider=context.provider,
            analyzed_at=context.saved_at,
        )


def build_steps(
    *,
    preprocessor: BasePreprocessor,
    hasher: ContentHasher,
    cache: BaseAnalysisCache,
    qr_extractor: QrExtractor,
    local_ocr: BaseLocalOcrAnalyzer,
    chain: ProviderFallbackChain,
    clock: Clock = utcnow,
) -> list[PipelineStep]:
    return [
        PreprocessStep(preprocessor),
        HashStep(hasher),
        CacheLookupStep(cache),
        QrStep(qr_extractor),
        LocalOcrStep(local_ocr),
        RemoteStep(chain),
        ValidateStep(),
        PersistCacheStep(cache, clock),
        AuditStep(cache, clock),
    ]


def build_orchestrator(
    settings: Settings,
    *,
    cache: BaseAnalysisCache | None = None,
    chain: ProviderFallbackChain | None = None,
    clock: Clock = utcnow,
) -> ExtractionOrchestrator:
    """Build an ExtractionOrchestrator with the configured adapters."""
    steps = build_steps(
        preprocessor=PreprocessorFactory.create(settings),
        hasher=ContentHasher(),
        cache=cache if cache is not None else AnalysisCacheFactory.create(settings),
        qr_extractor=QrExtractor(QrDecoderFactory.create(settings)),
        local_ocr=LocalOcrAnalyzerFactory.create(settings),
        chain=chain if chain is not None else ProviderChainFactory.create(settings),
        clock=clock,
    )
    return ExtractionOrchestrator(steps)
