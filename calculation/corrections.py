"""
Correction and alternative-interpretation suggestions.

Every rule is applied on its own to the original text (rules are never
combined) and a suggestion is only emitted when the rewrite evaluates.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern

from core.constants import SUGGESTION_CONFIDENCE
from core.models import Suggestion, SuggestionType
from .evaluator import SafeEvaluator


@dataclass(frozen=True)
class RewriteRule:
    """A single regex rewrite with a user-facing description."""
    pattern: Pattern
    replacement: str
    description: str

    def apply(self, text: str) -> Optional[str]:
        """Return the rewritten text, or None when the pattern is absent."""
        if not self.pattern.search(text):
            return None
        return self.pattern.sub(self.replacement, text)


# Visually confusable characters and operator glyphs
CORRECTION_RULES = [
    RewriteRule(re.compile(r'\bO\b'), '0', 'Replace O with 0'),
    RewriteRule(re.compile(r'\bl\b'), '1', 'Replace l with 1'),
    RewriteRule(re.compile(r'\bI\b'), '1', 'Replace I with 1'),
    RewriteRule(re.compile(r'\bS\b'), '5', 'Replace S with 5'),
    RewriteRule(re.compile(r'\bG\b'), '6', 'Replace G with 6'),
    RewriteRule(re.compile(r'x'), '*', 'Replace x with multiplication'),
    RewriteRule(re.compile(r'÷'), '/', 'Replace ÷ with division'),
    RewriteRule(re.compile(r'×'), '*', 'Replace × with multiplication'),
]

# Implicit multiplication insertions
ALTERNATIVE_RULES = [
    RewriteRule(re.compile(r'(\d)(\()'), r'\1*\2', 'Add multiplication before parentheses'),
    RewriteRule(re.compile(r'(\))(\d)'), r'\1*\2', 'Add multiplication after parentheses'),
    RewriteRule(re.compile(r'(\d)([a-z])', re.IGNORECASE), r'\1*\2', 'Add multiplication before variable'),
    RewriteRule(re.compile(r'([a-z])(\d)', re.IGNORECASE), r'\1*\2', 'Add multiplication after variable'),
]


class CorrectionGenerator:
    """Propose rewrites of misrecognized expressions."""

    def __init__(self, evaluator: Optional[SafeEvaluator] = None):
        self.evaluator = evaluator or SafeEvaluator()

    def suggest_corrections(self, text: str) -> List[Suggestion]:
        """
        Suggest fixes for common OCR character confusions.

        Args:
            text: Recognized expression text

        Returns:
            One correction per rule whose rewrite evaluates
        """
        suggestions: List[Suggestion] = []
        seen = set()

        for rule in CORRECTION_RULES:
            corrected = rule.apply(text)
            if corrected is None or corrected in seen:
                continue

            calculation = self.evaluator.evaluate(corrected)
            if not calculation.ok:
                continue

            seen.add(corrected)
            suggestions.append(Suggestion(
                type=SuggestionType.CORRECTION,
                title=f"OCR Correction: {rule.description}",
                description=f"Did you mean: {corrected}",
                expression=corrected,
                result=calculation.result,
                confidence=SUGGESTION_CONFIDENCE['correction'],
                reasoning='Common OCR character recognition error',
                category='arithmetic',
            ))

        return suggestions

    def suggest_alternatives(self, text: str) -> List[Suggestion]:
        """
        Suggest readings with an implicit multiplication made explicit.

        Args:
            text: Recognized expression text

        Returns:
            One alternative per rule whose rewrite differs and evaluates
        """
        suggestions: List[Suggestion] = []
        seen = set()

        for rule in ALTERNATIVE_RULES:
            alternative = rule.apply(text)
            if alternative is None or alternative == text or alternative in seen:
                continue

            calculation = self.evaluator.evaluate(alternative)
            if not calculation.ok:
                continue

            seen.add(alternative)
            suggestions.append(Suggestion(
                type=SuggestionType.ALTERNATIVE,
                title='Missing Operator',
                description=rule.description,
                expression=alternative,
                result=calculation.result,
                confidence=SUGGESTION_CONFIDENCE['alternative'],
                reasoning='Implicit multiplication detected',
                category='arithmetic',
            ))

        return suggestions
