"""
Hybrid OCR Coordinator - primary/fallback policy over two OCR backends.

The primary engine (vision LLM) is tried first when preferred and ready;
its reading is accepted only above a confidence threshold. Otherwise the
fallback engine (Tesseract) answers. A diagnostic mode runs both engines
concurrently and recommends the more confident reading.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from core.constants import (
    ARITHMETIC_PRECISION,
    OCR_CONFIDENCE_THRESHOLD,
    OCR_ENGINE_FALLBACK,
    OCR_ENGINE_PRIMARY,
)
from core.exceptions import OCRProcessingError, OCRUnavailableError
from core.models import EngineState, HybridOCRResult, OCRReading
from calculation.evaluator import SafeEvaluator
from calculation.extractor import ExpressionExtractor
from utils.image_utils import ImageInput
from utils.text_utils import clean_ocr_text
from .ocr_backends import OCRBackend

logger = logging.getLogger(__name__)


@dataclass
class EngineSlot:
    """Lifecycle bookkeeping for one backend."""
    backend: OCRBackend
    state: EngineState = EngineState.UNINITIALIZED
    task: Optional[asyncio.Future] = None


def accepts_primary(confidence: float, threshold: float = OCR_CONFIDENCE_THRESHOLD) -> bool:
    """A primary reading is kept only when strictly above the threshold."""
    return confidence > threshold


def select_recommended(
    fallback: HybridOCRResult,
    primary: Optional[HybridOCRResult] = None
) -> HybridOCRResult:
    """Pick the more confident result; ties keep the fallback."""
    if primary is not None and primary.confidence > fallback.confidence:
        return primary
    return fallback


class HybridOCRCoordinator:
    """Coordinate a primary and a fallback OCR backend."""

    def __init__(
        self,
        primary: OCRBackend,
        fallback: OCRBackend,
        confidence_threshold: float = OCR_CONFIDENCE_THRESHOLD,
        preferred_engine: str = OCR_ENGINE_PRIMARY,
        extractor: Optional[ExpressionExtractor] = None
    ):
        """
        Initialize the coordinator.

        Args:
            primary: Optional, higher-quality backend
            fallback: Mandatory backend
            confidence_threshold: Primary confidence needed to skip the fallback
            preferred_engine: "primary" or "fallback"
            extractor: Expression extractor for recognized text (2 dp evaluator by default)
        """
        self._slots: Dict[str, EngineSlot] = {
            OCR_ENGINE_PRIMARY: EngineSlot(primary),
            OCR_ENGINE_FALLBACK: EngineSlot(fallback),
        }
        self.confidence_threshold = confidence_threshold
        self.preferred_engine = OCR_ENGINE_PRIMARY
        self.set_preferred_engine(preferred_engine)
        self.extractor = extractor or ExpressionExtractor(
            SafeEvaluator(precision=ARITHMETIC_PRECISION)
        )
        self._startup: Optional[asyncio.Future] = None

    @property
    def primary(self) -> OCRBackend:
        return self._slots[OCR_ENGINE_PRIMARY].backend

    @property
    def fallback(self) -> OCRBackend:
        return self._slots[OCR_ENGINE_FALLBACK].backend

    def engine_state(self, role: str) -> EngineState:
        """Current lifecycle state of the "primary" or "fallback" engine."""
        return self._slots[role].state

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Initialize both engines once.

        Concurrent and repeated calls share the same startup task.

        Raises:
            OCRUnavailableError: If the fallback engine cannot be initialized
        """
        if self._startup is None:
            self._startup = asyncio.ensure_future(self._startup_sequence())
        await self._startup

    async def _startup_sequence(self) -> None:
        try:
            await self._ensure_ready(OCR_ENGINE_PRIMARY)
            logger.info("Primary OCR engine '%s' initialized", self.primary.engine.value)
        except Exception as e:
            logger.warning(
                "Primary OCR engine '%s' failed to initialize, falling back: %s",
                self.primary.engine.value, e
            )
            self.preferred_engine = OCR_ENGINE_FALLBACK

        try:
            await self._ensure_ready(OCR_ENGINE_FALLBACK)
            logger.info("Fallback OCR engine '%s' initialized", self.fallback.engine.value)
        except Exception as e:
            logger.error("Both OCR engines failed to initialize: %s", e)
            raise OCRUnavailableError("No OCR engine available") from e

    async def _ensure_ready(self, role: str) -> None:
        """Await the engine's shared initialization task, creating it on first use."""
        slot = self._slots[role]
        if slot.state is EngineState.READY:
            return
        if slot.task is None:
            slot.state = EngineState.INITIALIZING
            slot.task = asyncio.ensure_future(self._initialize_slot(slot))
        await slot.task

    @staticmethod
    async def _initialize_slot(slot: EngineSlot) -> None:
        try:
            await slot.backend.initialize()
        except Exception:
            slot.state = EngineState.FAILED
            raise
        slot.state = EngineState.READY

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def process_image(self, image: ImageInput) -> HybridOCRResult:
        """
        Recognize an image with the primary engine, falling back when needed.

        Args:
            image: File path, raw bytes, base64 string or PIL Image

        Returns:
            HybridOCRResult tagged with the engine that produced it

        Raises:
            OCRUnavailableError: If no engine could be initialized
            OCRProcessingError: If the fallback engine fails on the image
        """
        await self.initialize()

        primary_slot = self._slots[OCR_ENGINE_PRIMARY]
        if (self.preferred_engine == OCR_ENGINE_PRIMARY
                and primary_slot.state is EngineState.READY):
            try:
                reading = await primary_slot.backend.recognize(image)
                if accepts_primary(reading.confidence, self.confidence_threshold):
                    return self._build_result(reading, primary_slot.backend)
                logger.info(
                    "Primary OCR confidence %.3f at or below %.2f, trying fallback",
                    reading.confidence, self.confidence_threshold
                )
            except Exception as e:
                logger.warning("Primary OCR processing failed, falling back: %s", e)

        fallback = self.fallback
        try:
            reading = await fallback.recognize(image)
        except Exception as e:
            logger.error("All OCR engines failed: %s", e)
            raise OCRProcessingError("OCR processing failed with all engines") from e

        return self._build_result(reading, fallback)

    async def process_with_both_engines(self, image: ImageInput) -> Dict[str, HybridOCRResult]:
        """
        Run both engines concurrently and report both results.

        Args:
            image: File path, raw bytes, base64 string or PIL Image

        Returns:
            Dict keyed by engine name, plus ``"recommended"``. The primary
            entry is omitted when that engine is unavailable or fails.

        Raises:
            OCRProcessingError: If the fallback engine fails
        """
        await self.initialize()

        primary_slot = self._slots[OCR_ENGINE_PRIMARY]
        backends = [self.fallback]
        if primary_slot.state is EngineState.READY:
            backends.append(primary_slot.backend)

        outcomes = await asyncio.gather(
            *(backend.recognize(image) for backend in backends),
            return_exceptions=True
        )

        fallback_outcome = outcomes[0]
        if isinstance(fallback_outcome, BaseException):
            logger.error("Fallback OCR engine failed: %s", fallback_outcome)
            raise OCRProcessingError("All OCR engines failed") from fallback_outcome

        fallback_result = self._build_result(fallback_outcome, self.fallback)
        results = {fallback_result.engine.value: fallback_result}

        primary_result = None
        if len(outcomes) > 1:
            primary_outcome = outcomes[1]
            if isinstance(primary_outcome, BaseException):
                logger.warning("Primary OCR engine failed: %s", primary_outcome)
            else:
                primary_result = self._build_result(primary_outcome, primary_slot.backend)
                results[primary_result.engine.value] = primary_result

        results['recommended'] = select_recommended(fallback_result, primary_result)
        return results

    def _build_result(self, reading: OCRReading, backend: OCRBackend) -> HybridOCRResult:
        """Clean the reading and attach the extracted expression and value."""
        text = clean_ocr_text(reading.text)
        expression = self.extractor.extract(text)

        result = None
        if expression is not None:
            result = self.extractor.evaluator.evaluate(expression).result

        boxes = [list(box) for box in reading.boxes] if reading.boxes else None
        return HybridOCRResult(
            text=text,
            confidence=reading.confidence,
            expression=expression,
            result=result,
            engine=backend.engine,
            boxes=boxes,
        )

    # ------------------------------------------------------------------
    # Engine management
    # ------------------------------------------------------------------

    def set_preferred_engine(self, engine: str) -> None:
        """
        Choose which engine ``process_image`` tries first.

        Args:
            engine: "primary", "fallback", or a backend's engine name
        """
        if engine in self._slots:
            self.preferred_engine = engine
            return
        for role, slot in self._slots.items():
            if slot.backend.engine.value == engine:
                self.preferred_engine = role
                return
        raise ValueError(f"Unknown OCR engine: {engine}")

    def get_available_engines(self) -> List[str]:
        """Engine names in preference order; the fallback is always listed."""
        engines = [self.fallback.engine.value]
        if self._slots[OCR_ENGINE_PRIMARY].state is EngineState.READY:
            engines.insert(0, self.primary.engine.value)
        return engines

    async def cleanup(self) -> None:
        """Release both backends and return every engine to uninitialized."""
        try:
            await asyncio.gather(*(slot.backend.cleanup() for slot in self._slots.values()))
        finally:
            for slot in self._slots.values():
                slot.state = EngineState.UNINITIALIZED
                slot.task = None
            self._startup = None
