"""Core package - Domain models, constants and exceptions."""

from .models import (
    OCREngine,
    EngineState,
    SuggestionType,
    OCRReading,
    CalculationResult,
    Variable,
    UnitSystem,
    FormulaExample,
    EngineeringFormula,
    Suggestion,
    CalculationStep,
    CalculationResponse,
    HybridOCRResult,
)
from .constants import (
    ALLOWED_EXPRESSION_PATTERN,
    ARITHMETIC_PRECISION,
    FORMULA_PRECISION,
    EVALUATION_CONFIDENCE,
    OCR_CONFIDENCE_THRESHOLD,
    KNOWN_CONSTANTS,
    UNIT_CONVERSIONS,
)
from .exceptions import OCRError, OCRUnavailableError, OCRProcessingError

__all__ = [
    'OCREngine',
    'EngineState',
    'SuggestionType',
    'OCRReading',
    'CalculationResult',
    'Variable',
    'UnitSystem',
    'FormulaExample',
    'EngineeringFormula',
    'Suggestion',
    'CalculationStep',
    'CalculationResponse',
    'HybridOCRResult',
    'ALLOWED_EXPRESSION_PATTERN',
    'ARITHMETIC_PRECISION',
    'FORMULA_PRECISION',
    'EVALUATION_CONFIDENCE',
    'OCR_CONFIDENCE_THRESHOLD',
    'KNOWN_CONSTANTS',
    'UNIT_CONVERSIONS',
    'OCRError',
    'OCRUnavailableError',
    'OCRProcessingError',
]
