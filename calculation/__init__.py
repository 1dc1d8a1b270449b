"""
Calculation package - expression recovery and suggestion engine.

Provides:
- Safe arithmetic evaluation of OCR text
- Expression extraction and OCR error correction
- Unit conversion and engineering formula matching
- Ranked recommendation lists
"""

from .parser import ExpressionSyntaxError, evaluate_arithmetic
from .evaluator import SafeEvaluator, normalize_expression, extract_unit
from .extractor import ExpressionExtractor, extract_expression
from .corrections import CorrectionGenerator
from .units import (
    UnitConverter,
    convert_value,
    extract_units_and_values,
    rpm_to_linear_speed,
    rpm_to_fpm,
    belt_ratio,
    motor_power,
)
from .formulas import ENGINEERING_FORMULAS, FormulaCatalog, get_default_catalog
from .formula_matcher import FormulaMatcher, detect_calculation_type
from .ranker import ConstantMatcher, RecommendationRanker, rank_suggestions

__all__ = [
    'ExpressionSyntaxError',
    'evaluate_arithmetic',
    'SafeEvaluator',
    'normalize_expression',
    'extract_unit',
    'ExpressionExtractor',
    'extract_expression',
    'CorrectionGenerator',
    'UnitConverter',
    'convert_value',
    'extract_units_and_values',
    'rpm_to_linear_speed',
    'rpm_to_fpm',
    'belt_ratio',
    'motor_power',
    'ENGINEERING_FORMULAS',
    'FormulaCatalog',
    'get_default_catalog',
    'FormulaMatcher',
    'detect_calculation_type',
    'ConstantMatcher',
    'RecommendationRanker',
    'rank_suggestions',
]
