"""
Safe evaluator for OCR-derived arithmetic and substituted formulas.

Fails closed: text that does not pass the character allow-list after
normalization is rejected without being parsed.
"""
import logging
import re
from typing import Dict, Mapping, Optional, Pattern

from core.constants import (
    ALLOWED_EXPRESSION_PATTERN,
    ARITHMETIC_PRECISION,
    EVALUATION_CONFIDENCE,
    KNOWN_CONSTANTS,
    UNIT_CONVERSIONS,
)
from core.models import CalculationResult
from utils.text_utils import expand_superscripts, normalize_operator_glyphs
from .parser import ExpressionSyntaxError, evaluate_arithmetic

logger = logging.getLogger(__name__)

_ALLOWED = re.compile(ALLOWED_EXPRESSION_PATTERN)

# Longest spellings first so 'mm' wins over 'm'
_UNIT_SUFFIXES = sorted(
    {unit for units in UNIT_CONVERSIONS.values() for unit in units},
    key=len,
    reverse=True,
)
_UNIT_SUFFIX_PATTERN = re.compile(
    r'(?<=[\d).\s])(' + '|'.join(re.escape(u) for u in _UNIT_SUFFIXES) + r')\s*$',
    re.IGNORECASE,
)

# Symbols that stand for named constants on the formula path
CONSTANT_SYMBOLS = {
    'π': KNOWN_CONSTANTS['pi'],
    'pi': KNOWN_CONSTANTS['pi'],
}


def normalize_expression(expression: str) -> str:
    """
    Normalize an expression before validation.

    Removes whitespace, maps operator glyphs and superscripts to ASCII,
    rewrites ``^`` as ``**`` and lower-cases the result. A trailing unit
    suffix is kept as written so ``m²`` does not turn into ``m**2``.

    Args:
        expression: Raw expression text

    Returns:
        Normalized expression
    """
    unit = extract_unit(expression)
    if unit:
        expression = strip_unit(expression)

    normalized = re.sub(r'\s+', '', expression)
    normalized = normalize_operator_glyphs(normalized)
    normalized = expand_superscripts(normalized)
    normalized = normalized.replace('^', '**').lower()
    return normalized + unit if unit else normalized


def extract_unit(expression: str) -> Optional[str]:
    """
    Find a recognized unit suffix at the end of an expression.

    Args:
        expression: Raw expression text, e.g. ``"5 + 3 cm"``

    Returns:
        Lower-cased unit, or None
    """
    match = _UNIT_SUFFIX_PATTERN.search(expression.strip())
    return match.group(1).lower() if match else None


def strip_unit(expression: str) -> str:
    """Remove a trailing unit suffix, if any."""
    return _UNIT_SUFFIX_PATTERN.sub('', expression.strip()).strip()


def symbol_pattern(symbol: str) -> Pattern:
    """Whole-word pattern for a symbol; a trailing superscript power still counts as a boundary."""
    return re.compile(rf'(?<![\w.]){re.escape(symbol)}(?![^\W²³]|\.)')


def substitute_symbols(expression: str, bindings: Mapping[str, float]) -> str:
    """
    Replace whole-word symbols with numeric literals.

    Longer symbols are replaced first so ``RPM1`` is never clobbered by
    ``RPM``.

    Args:
        expression: Text containing symbols
        bindings: Symbol to value map

    Returns:
        Text with each bound symbol replaced by its value
    """
    for symbol in sorted(bindings, key=len, reverse=True):
        literal = _format_literal(bindings[symbol])
        expression = symbol_pattern(symbol).sub(lambda _m: literal, expression)
    return expression


def _format_literal(value: float) -> str:
    literal = repr(float(value))
    if 'e' in literal or 'inf' in literal or 'nan' in literal:
        # keep the allow-list intact for very large or small magnitudes
        literal = f"{float(value):.15f}".rstrip('0').rstrip('.')
    return f"({literal})" if literal.startswith('-') else literal


class SafeEvaluator:
    """
    Evaluate arithmetic restricted to numbers, ``+ - * / **`` and parentheses.

    Args:
        precision: Decimal places kept in results
        success_confidence: Confidence attached to successful evaluations
    """

    def __init__(
        self,
        precision: int = ARITHMETIC_PRECISION,
        success_confidence: float = EVALUATION_CONFIDENCE
    ):
        self.precision = precision
        self.success_confidence = success_confidence

    def evaluate(
        self,
        expression: str,
        bindings: Optional[Dict[str, float]] = None
    ) -> CalculationResult:
        """
        Evaluate an expression, never raising.

        Args:
            expression: Expression text, possibly with a unit suffix
            bindings: Optional symbol values substituted before validation

        Returns:
            CalculationResult; ``result`` is None on any failure
        """
        if expression is None or not expression.strip():
            return CalculationResult.failure(expression or "", "Empty expression")

        if bindings is not None:
            # unbound trailing symbols such as 'l' must not read as units
            unit = None
            text = substitute_symbols(expression, bindings)
            text = substitute_symbols(text, CONSTANT_SYMBOLS)
        else:
            unit = extract_unit(expression)
            text = strip_unit(expression) if unit else expression

        normalized = normalize_expression(text)

        if not _ALLOWED.match(normalized):
            return CalculationResult.failure(normalized, "Invalid characters in expression")

        try:
            value = evaluate_arithmetic(normalized)
        except ZeroDivisionError:
            return CalculationResult.failure(normalized, "Division by zero")
        except (ExpressionSyntaxError, ArithmeticError) as e:
            return CalculationResult.failure(normalized, str(e) or e.__class__.__name__)
        except RecursionError:
            return CalculationResult.failure(normalized, "Expression too deeply nested")

        value = round(value, self.precision)
        if value == 0:
            value = 0.0  # drop negative zero

        logger.debug("Evaluated %r -> %s", normalized, value)
        return CalculationResult(
            expression=normalized,
            result=value,
            confidence=self.success_confidence,
            unit=unit,
        )

    def is_valid(self, expression: str) -> bool:
        """Check whether an expression evaluates successfully."""
        return self.evaluate(expression).ok
