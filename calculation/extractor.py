"""
Expression extraction from raw OCR text.

Patterns are tried in a fixed priority order and the first match wins;
there is no scoring between patterns.
"""
import re
from typing import List, Optional

from core.models import CalculationResult
from utils.text_utils import clean_ocr_text, normalize_operator_glyphs, split_lines
from .evaluator import SafeEvaluator

NUMBER = r'(\d+(?:\.\d+)?%?)'
OPERATOR = r'(\*\*|\^|[+\-*/])'

EXPRESSION_PATTERNS = [
    # operand operator operand = result
    re.compile(rf'{NUMBER}\s*{OPERATOR}\s*{NUMBER}\s*=\s*{NUMBER}'),
    # operand operator operand
    re.compile(rf'{NUMBER}\s*{OPERATOR}\s*{NUMBER}'),
    # operand = operand
    re.compile(rf'{NUMBER}\s*=\s*{NUMBER}'),
]


def _resolve_percent(operand: str) -> str:
    """Turn ``15%`` into ``(15/100)`` so it survives the evaluator."""
    if operand.endswith('%'):
        return f"({operand[:-1]}/100)"
    return operand


def extract_expression(text: str) -> Optional[str]:
    """
    Locate the first arithmetic expression in raw text.

    Args:
        text: Raw OCR text, possibly with labels, units and layout noise

    Returns:
        ``"a op b"`` for operator matches (a trailing ``= result`` is not
        echoed back), the left operand for a bare equality, or None
    """
    if not text:
        return None

    normalized = normalize_operator_glyphs(text)

    for pattern in EXPRESSION_PATTERNS:
        match = pattern.search(normalized)
        if not match:
            continue

        groups = match.groups()
        if len(groups) >= 3:
            left, op, right = groups[0], groups[1], groups[2]
            if op == '^':
                op = '**'
            return f"{_resolve_percent(left)} {op} {_resolve_percent(right)}"
        return _resolve_percent(groups[0])

    return None


class ExpressionExtractor:
    """Extract and evaluate expressions found in recognized text."""

    def __init__(self, evaluator: Optional[SafeEvaluator] = None):
        self.evaluator = evaluator or SafeEvaluator()

    def extract(self, text: str) -> Optional[str]:
        """Return the first candidate expression in ``text``."""
        return extract_expression(text)

    def extract_and_evaluate(self, text: str) -> Optional[CalculationResult]:
        """
        Extract the first expression and evaluate it.

        Returns:
            CalculationResult, or None when no expression was found
        """
        expression = extract_expression(text)
        if expression is None:
            return None
        return self.evaluator.evaluate(expression)

    def parse_from_ocr(self, ocr_text: str) -> List[CalculationResult]:
        """
        Evaluate one expression per line of OCR output.

        Args:
            ocr_text: Multi-line OCR text

        Returns:
            Successful evaluations in line order
        """
        results: List[CalculationResult] = []

        for line in split_lines(clean_ocr_text(ocr_text)):
            expression = extract_expression(line)
            if expression is None:
                continue
            result = self.evaluator.evaluate(expression)
            if result.ok:
                results.append(result)

        return results
