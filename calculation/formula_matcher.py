"""
Formula matching and execution.

Matches query keywords against the formula catalog, scores the matches,
and executes a formula with bound inputs while recording a step trace.
"""
import logging
import re
from typing import Dict, List, Optional, Sequence

from core.constants import (
    CALCULATION_TYPE_PATTERNS,
    CATEGORY_KEYWORDS,
    COMMON_FORMULAS,
    FORMULA_BASE_CONFIDENCE,
    FORMULA_KEYWORD_BOOST,
    FORMULA_MAX_CONFIDENCE,
    FORMULA_MIN_WORD_LENGTH,
    FORMULA_PRECISION,
    FORMULA_VALUES_BOOST,
    KNOWN_CONSTANTS,
    MAX_COMMON_FORMULA_SUGGESTIONS,
    MAX_FORMULA_EXAMPLES,
    MAX_RELEVANT_FORMULAS,
    RESERVED_WORDS,
    SAMPLE_VARIABLE_VALUES,
    SUGGESTION_CONFIDENCE,
)
from core.models import (
    CalculationResponse,
    CalculationStep,
    EngineeringFormula,
    Suggestion,
    SuggestionType,
)
from .evaluator import CONSTANT_SYMBOLS, SafeEvaluator, symbol_pattern
from .formulas import FormulaCatalog, get_default_catalog
from .units import ExtractedQueryData

logger = logging.getLogger(__name__)


def extract_variables(expression: str) -> List[str]:
    """
    Collect distinct lower-cased identifiers, skipping functions and constants.

    Args:
        expression: Expression or formula text

    Returns:
        Identifiers in first-seen order
    """
    variables: List[str] = []
    for word in re.findall(r'\b[a-z_]+\b', expression, re.IGNORECASE):
        word = word.lower()
        if word not in RESERVED_WORDS and word not in variables:
            variables.append(word)
    return variables


def categorize_formula(formula_name: str) -> str:
    """Map a common-formula key to a suggestion category."""
    if any(key in formula_name for key in ('circle', 'triangle', 'rectangle', 'sphere', 'cylinder')):
        return 'geometry'
    if any(key in formula_name for key in ('energy', 'force', 'momentum')):
        return 'physics'
    if any(key in formula_name for key in ('beam', 'stress', 'strain', 'pressure')):
        return 'engineering'
    if any(key in formula_name for key in ('interest', 'value')):
        return 'finance'
    return 'arithmetic'


def detect_calculation_type(query: str) -> List[str]:
    """
    Name the kinds of calculation a query is asking for.

    Args:
        query: Free-text query

    Returns:
        Matching keys of ``CALCULATION_TYPE_PATTERNS``
    """
    return [
        calc_type
        for calc_type, pattern in CALCULATION_TYPE_PATTERNS.items()
        if re.search(pattern, query, re.IGNORECASE)
    ]


def _display_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


class FormulaMatcher:
    """
    Find, score and execute catalog formulas.

    Args:
        catalog: Formula catalog (defaults to the built-in one)
        evaluator: Evaluator used for formula substitution
    """

    def __init__(
        self,
        catalog: Optional[FormulaCatalog] = None,
        evaluator: Optional[SafeEvaluator] = None
    ):
        self.catalog = catalog if catalog is not None else get_default_catalog()
        self.evaluator = evaluator or SafeEvaluator(precision=FORMULA_PRECISION)

    def detect_categories(self, query_text: str) -> List[str]:
        """Engineering categories implied by keywords in the query."""
        categories: List[str] = []
        for keyword, keyword_categories in CATEGORY_KEYWORDS.items():
            if keyword in query_text:
                for category in keyword_categories:
                    if category not in categories:
                        categories.append(category)
        return categories

    def find_relevant_formulas(
        self,
        query_text: str,
        categories: Sequence[str]
    ) -> List[EngineeringFormula]:
        """
        Search the catalog, falling back to detected categories.

        Args:
            query_text: Lower-cased query
            categories: Categories detected from the query

        Returns:
            Up to five distinct formulas
        """
        formulas = self.catalog.search(query_text)

        if not formulas and categories:
            for category in categories:
                formulas.extend(self.catalog.get_by_category(category))

        unique: List[EngineeringFormula] = []
        seen_ids = set()
        for formula in formulas:
            if formula.id not in seen_ids:
                seen_ids.add(formula.id)
                unique.append(formula)

        return unique[:MAX_RELEVANT_FORMULAS]

    def score_formula(
        self,
        formula: EngineeringFormula,
        query_text: str,
        extracted: ExtractedQueryData
    ) -> float:
        """
        Confidence that a formula answers the query, clamped to 0.95.

        Args:
            formula: Candidate formula
            query_text: Lower-cased query
            extracted: Numbers and units found in the query

        Returns:
            Confidence in [0.5, 0.95]
        """
        confidence = FORMULA_BASE_CONFIDENCE
        formula_text = formula.search_text

        for word in query_text.split():
            if len(word) >= FORMULA_MIN_WORD_LENGTH and word in formula_text:
                confidence += FORMULA_KEYWORD_BOOST

        if extracted.values and len(formula.variables) > 1:
            confidence += FORMULA_VALUES_BOOST

        logger.debug("Formula %s raw score %.2f", formula.id, confidence)
        return min(round(confidence, 10), FORMULA_MAX_CONFIDENCE)

    def create_formula_recommendation(
        self,
        formula: EngineeringFormula,
        query_text: str,
        extracted: ExtractedQueryData
    ) -> Suggestion:
        """Build the recommendation for one matched formula."""
        variable_names = ', '.join(variable.name for variable in formula.variables)
        return Suggestion(
            type=SuggestionType.FORMULA,
            title=formula.name,
            description=formula.description,
            expression=formula.formula,
            result=None,
            confidence=self.score_formula(formula, query_text, extracted),
            reasoning=(
                f"Formula matches your query about {formula.category} engineering. "
                f"Variables: {variable_names}"
            ),
            category=formula.category,
            formula=formula,
            examples=tuple(self.generate_examples(formula, extracted)),
        )

    def generate_examples(
        self,
        formula: EngineeringFormula,
        extracted: ExtractedQueryData
    ) -> List[str]:
        """
        Worked examples for a formula.

        Catalog examples come first; when the query contained numbers they
        are bound to the formula's input variables in order.
        """
        examples = [
            f"{example.description}: {_display_number(example.expected_output)} {example.output_unit}"
            for example in formula.examples
        ]

        if extracted.values and len(formula.variables) >= 2:
            input_variables = formula.variables[1:len(extracted.values) + 1]
            inputs = {
                variable.symbol: extracted.values[index]
                for index, variable in enumerate(input_variables)
            }
            response = self.calculate_formula(formula, inputs)
            if response.confidence > 0:
                examples.append(f"With your values: {response.result:.2f} {response.unit}")

        return examples[:MAX_FORMULA_EXAMPLES]

    def calculate_formula(
        self,
        formula: EngineeringFormula,
        inputs: Dict[str, float],
        output_unit: Optional[str] = None
    ) -> CalculationResponse:
        """
        Execute a formula with bound inputs.

        Steps: the original formula, one cumulative textual substitution per
        bound symbol, then the final rounded result. For chained equalities
        (``ratio = D2 / D1 = RPM1 / RPM2``) the first right-hand side that
        evaluates with the given inputs is used.

        Args:
            formula: Catalog formula
            inputs: Symbol to numeric value
            output_unit: Unit label for the result (default: first variable's unit)

        Returns:
            CalculationResponse; on failure result 0, confidence 0 and a
            single error step
        """
        steps = [CalculationStep(description='Original Formula', equation=formula.formula, result=0)]

        substituted = formula.formula
        for symbol, value in inputs.items():
            literal = _display_number(value)
            substituted = symbol_pattern(symbol).sub(lambda _m: literal, substituted)
            variable = formula.get_variable(symbol)
            steps.append(CalculationStep(
                description=f"Substitute {symbol} = {literal}",
                equation=substituted,
                result=float(value),
                unit=variable.unit if variable else '',
            ))

        calculation = None
        errors: List[str] = []
        for candidate in self._right_hand_sides(formula.formula):
            calculation = self.evaluator.evaluate(candidate, bindings=dict(inputs))
            if calculation.ok:
                break
            errors.append(self._describe_failure(candidate, inputs, calculation.error))

        if calculation is None or not calculation.ok:
            message = errors[0] if errors else 'Calculation failed'
            logger.info("Formula %s failed: %s", formula.id, message)
            return CalculationResponse(
                result=0,
                unit='',
                steps=[CalculationStep(description='Error', equation=message, result=0)],
                formula=formula,
                confidence=0,
            )

        if output_unit:
            final_unit = output_unit
        elif formula.variables:
            final_unit = formula.variables[0].unit
        else:
            final_unit = ''

        steps.append(CalculationStep(
            description='Final Result',
            equation=f"= {_display_number(calculation.result)}",
            result=calculation.result,
            unit=final_unit,
        ))

        return CalculationResponse(
            result=calculation.result,
            unit=final_unit,
            steps=steps,
            formula=formula,
            confidence=calculation.confidence,
        )

    @staticmethod
    def _right_hand_sides(formula_text: str) -> List[str]:
        parts = [part.strip() for part in formula_text.split('=')]
        if len(parts) == 1:
            return parts
        return [part for part in parts[1:] if part]

    @staticmethod
    def _describe_failure(candidate: str, inputs: Dict[str, float], error: Optional[str]) -> str:
        unbound = [
            name for name in re.findall(r'[^\W\d]\w*', candidate)
            if name not in inputs and name not in CONSTANT_SYMBOLS
        ]
        if unbound:
            return f"Missing values for: {', '.join(dict.fromkeys(unbound))}"
        return error or 'Calculation failed'

    def suggest_common_formulas(self, expression: str) -> List[Suggestion]:
        """
        Suggest textbook formulas sharing variables with the expression.

        Args:
            expression: Whiteboard text

        Returns:
            Up to three formula suggestions previewed with sample values
        """
        variables = extract_variables(expression)
        if not variables:
            return []

        suggestions: List[Suggestion] = []
        for name, formula_text in COMMON_FORMULAS.items():
            formula_variables = extract_variables(formula_text)
            overlap = [variable for variable in variables if variable in formula_variables]
            if not overlap:
                continue

            bindings = dict(KNOWN_CONSTANTS)
            for variable in formula_variables:
                bindings[variable] = SAMPLE_VARIABLE_VALUES.get(variable, 1)
            preview = self.evaluator.evaluate(formula_text, bindings=bindings)

            suggestions.append(Suggestion(
                type=SuggestionType.FORMULA,
                title=name.replace('_', ' ').upper(),
                description=f"Formula: {formula_text}",
                expression=formula_text,
                result=preview.result,
                confidence=SUGGESTION_CONFIDENCE['formula_common'],
                reasoning=f"Detected variables {', '.join(overlap)} commonly used in this formula",
                category=categorize_formula(name),
            ))

        return suggestions[:MAX_COMMON_FORMULA_SUGGESTIONS]

    def create_explanations(self, query_text: str, categories: Sequence[str]) -> List[Suggestion]:
        """Background explanations for motor and power questions."""
        suggestions: List[Suggestion] = []

        if 'motor' in query_text or 'rpm' in query_text:
            suggestions.append(Suggestion(
                type=SuggestionType.EXPLANATION,
                title='Motor Speed Calculations',
                description='Understanding motor RPM and speed conversions',
                expression='',
                result=None,
                confidence=SUGGESTION_CONFIDENCE['explanation'],
                reasoning='Educational content about motor calculations',
                category='mechanical',
                examples=(
                    'Motor RPM is revolutions per minute',
                    'Linear speed depends on wheel/pulley diameter',
                    'Higher RPM = higher linear speed for same diameter',
                    'Gear ratios can change effective speed',
                ),
            ))

        if 'power' in query_text or 'horsepower' in query_text or 'watts' in query_text:
            suggestions.append(Suggestion(
                type=SuggestionType.EXPLANATION,
                title='Power Calculations in Engineering',
                description='Mechanical and electrical power relationships',
                expression='',
                result=None,
                confidence=SUGGESTION_CONFIDENCE['explanation'],
                reasoning='Fundamental power concepts in engineering',
                category='electrical' if 'electrical' in categories else 'mechanical',
                examples=(
                    'Mechanical Power: P = T × ω (Torque × Angular velocity)',
                    'Electrical Power: P = V × I (Voltage × Current)',
                    '1 HP = 746 Watts = 550 ft⋅lb/s',
                    'Efficiency = Output Power / Input Power',
                ),
            ))

        return suggestions
