"""
Recommendation ranking.

Merges the output of the individual generators, sorts it by confidence
(stable, so equal confidences keep generator order) and truncates.
"""
import logging
from typing import Dict, Iterable, List, Optional

from core.constants import (
    CONSTANT_MATCH_LOWER,
    CONSTANT_MATCH_UPPER,
    KNOWN_CONSTANTS,
    MAX_CANVAS_SUGGESTIONS,
    MAX_QUERY_RECOMMENDATIONS,
    SUGGESTION_CONFIDENCE,
)
from core.models import Suggestion, SuggestionType
from .corrections import CorrectionGenerator
from .evaluator import SafeEvaluator
from .extractor import extract_expression
from .formula_matcher import FormulaMatcher
from .units import UnitConverter, extract_units_and_values

logger = logging.getLogger(__name__)


def rank_suggestions(suggestions: Iterable[Suggestion], limit: int) -> List[Suggestion]:
    """
    Sort by non-increasing confidence and keep the first ``limit``.

    ``sorted`` is stable, so ties stay in emission order.
    """
    return sorted(suggestions, key=lambda s: s.confidence, reverse=True)[:limit]


class ConstantMatcher:
    """Flag results that lie within ±10% of a well-known constant."""

    def __init__(
        self,
        evaluator: Optional[SafeEvaluator] = None,
        constants: Optional[Dict[str, float]] = None
    ):
        self.evaluator = evaluator or SafeEvaluator()
        self.constants = constants or KNOWN_CONSTANTS

    def suggest_constants(self, expression: str) -> List[Suggestion]:
        """
        Compare the evaluated expression with each known constant.

        Args:
            expression: Arithmetic text

        Returns:
            One suggestion per nearby constant
        """
        calculation = self.evaluator.evaluate(expression)
        if not calculation.ok:
            return []

        suggestions: List[Suggestion] = []
        for name, value in self.constants.items():
            ratio = calculation.result / value
            if CONSTANT_MATCH_LOWER < ratio < CONSTANT_MATCH_UPPER:
                suggestions.append(Suggestion(
                    type=SuggestionType.CONSTANT,
                    title=f"Similar to {name}",
                    description=(
                        f"Your result ({calculation.result:.6f}) is close to "
                        f"{name} ({value:.6f})"
                    ),
                    expression=name,
                    result=value,
                    confidence=SUGGESTION_CONFIDENCE['constant'],
                    reasoning=f"Mathematical constant {name} detected",
                    category='arithmetic',
                ))
        return suggestions


class RecommendationRanker:
    """
    Produce the final suggestion lists returned to callers.

    All collaborators are injected; defaults are built when omitted.
    """

    def __init__(
        self,
        corrections: Optional[CorrectionGenerator] = None,
        units: Optional[UnitConverter] = None,
        formulas: Optional[FormulaMatcher] = None,
        constants: Optional[ConstantMatcher] = None
    ):
        self.corrections = corrections or CorrectionGenerator()
        self.units = units or UnitConverter()
        self.formulas = formulas or FormulaMatcher()
        self.constants = constants or ConstantMatcher()

    def analyze_query(self, query: str, context: Optional[dict] = None) -> List[Suggestion]:
        """
        Recommendations for a conversational engineering query.

        Args:
            query: Free-text question, e.g. "1800 rpm motor, 6 inch pulley, fpm?"
            context: Optional ``discipline``, ``preferred_units``, ``complexity``

        Returns:
            At most eight suggestions, highest confidence first
        """
        query_text = query.lower()
        context = context or {}

        categories = self.formulas.detect_categories(query_text)
        discipline = context.get('discipline')
        if discipline and discipline not in categories:
            categories.insert(0, discipline)

        extracted = extract_units_and_values(query_text)

        recommendations: List[Suggestion] = []
        for formula in self.formulas.find_relevant_formulas(query_text, categories):
            recommendations.append(
                self.formulas.create_formula_recommendation(formula, query_text, extracted)
            )

        recommendations.extend(self.units.suggest_keyword_conversions(query_text))
        recommendations.extend(self.formulas.create_explanations(query_text, categories))

        expression = extract_expression(query)
        if expression:
            recommendations.extend(self.constants.suggest_constants(expression))

        logger.debug(
            "Query %r: categories=%s, %d candidates",
            query, categories, len(recommendations)
        )
        return rank_suggestions(recommendations, MAX_QUERY_RECOMMENDATIONS)

    def generate_suggestions(self, text: str) -> List[Suggestion]:
        """
        Suggestions for text recognized from a whiteboard or display.

        Args:
            text: Recognized expression text

        Returns:
            At most ten suggestions, highest confidence first
        """
        suggestions: List[Suggestion] = []
        suggestions.extend(self.corrections.suggest_corrections(text))
        suggestions.extend(self.corrections.suggest_alternatives(text))
        suggestions.extend(self.units.suggest_unit_conversions(text))
        suggestions.extend(self.formulas.suggest_common_formulas(text))
        suggestions.extend(self.constants.suggest_constants(text))

        return rank_suggestions(suggestions, MAX_CANVAS_SUGGESTIONS)
