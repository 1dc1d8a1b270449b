"""
API Dependencies - Dependency injection for FastAPI.

Provides reusable constructors for the OCR backends, the coordinator and
the calculation service, all configured from settings.
"""
from functools import lru_cache

from openai import AsyncOpenAI

from config.settings import settings
from services.calculation_service import CalculationService
from services.ocr_backends import TesseractOCRBackend, VisionLLMOCRBackend
from services.ocr_coordinator import HybridOCRCoordinator


def get_ocr_client() -> AsyncOpenAI:
    """
    Dependency for OCR client.

    Returns:
        AsyncOpenAI client configured for vLLM
    """
    return AsyncOpenAI(
        api_key=settings.vllm_api_key,
        base_url=settings.vllm_server_url
    )


def get_ocr_coordinator(client: AsyncOpenAI = None) -> HybridOCRCoordinator:
    """
    Build the hybrid OCR coordinator.

    Args:
        client: AsyncOpenAI client (optional, will create if not provided)

    Returns:
        HybridOCRCoordinator with the vision model as primary and Tesseract as fallback
    """
    if client is None:
        client = get_ocr_client()

    primary = VisionLLMOCRBackend(
        client=client,
        model=settings.vllm_model,
        **settings.get_ocr_params()
    )
    fallback = TesseractOCRBackend(
        lang=settings.tesseract_lang,
        psm=settings.tesseract_psm
    )
    return HybridOCRCoordinator(
        primary=primary,
        fallback=fallback,
        confidence_threshold=settings.ocr_confidence_threshold,
        preferred_engine=settings.ocr_preferred_engine
    )


@lru_cache()
def get_calculation_service() -> CalculationService:
    """
    Dependency for the calculation service.

    One instance is shared so OCR engines initialize once per process.

    Returns:
        CalculationService instance
    """
    return CalculationService(
        coordinator=get_ocr_coordinator(),
        arithmetic_precision=settings.arithmetic_precision,
        formula_precision=settings.formula_precision
    )
