"""
Unit tests for calculation.formula_matcher module.
"""
import pytest
from calculation.formula_matcher import (
    FormulaMatcher,
    categorize_formula,
    detect_calculation_type,
    extract_variables,
)
from calculation.units import ExtractedQueryData
from core.models import SuggestionType


@pytest.fixture
def matcher(catalog, formula_evaluator):
    return FormulaMatcher(catalog, formula_evaluator)


NO_VALUES = ExtractedQueryData(values=[], units=[])


class TestHelpers:
    """Tests for module-level helpers."""

    def test_extract_variables_skips_reserved(self):
        """Test functions and constants are not variables."""
        assert extract_variables("pi * r^2 + sin(x)") == ['r', 'x']

    def test_extract_variables_distinct(self):
        """Test repeated identifiers appear once."""
        assert extract_variables("m * v * m") == ['m', 'v']

    def test_categorize_formula(self):
        """Test formula names map to categories."""
        assert categorize_formula("circle_area") == "geometry"
        assert categorize_formula("simple_interest") == "finance"

    def test_detect_calculation_type(self):
        """Test calculation kinds are detected from the query."""
        types = detect_calculation_type("rpm to fpm for a belt pulley with speed")

        assert 'rpm_conversion' in types
        assert 'belt_calculation' in types


class TestFindRelevantFormulas:
    """Tests for formula search and category fallback."""

    def test_detect_categories(self, matcher):
        """Test keywords imply categories."""
        assert matcher.detect_categories("motor torque") == ['mechanical', 'electrical']

    def test_search_hit(self, matcher):
        """Test a catalog search hit is used first."""
        formulas = matcher.find_relevant_formulas("pulley", ['electrical'])

        assert 'belt-ratio' in [f.id for f in formulas]
        assert all(f.category == 'mechanical' for f in formulas)

    def test_category_fallback(self, matcher):
        """Test categories are used when search finds nothing."""
        formulas = matcher.find_relevant_formulas("what about my motor?", ['mechanical', 'electrical'])

        assert len(formulas) == 5
        assert len({f.id for f in formulas}) == 5

    def test_nothing(self, matcher):
        """Test no search hit and no category yields nothing."""
        assert matcher.find_relevant_formulas("hello there", []) == []


class TestScoreFormula:
    """Tests for formula confidence scoring."""

    def test_base_score(self, matcher, catalog):
        """Test a query with no matching words scores 0.5."""
        formula = catalog.get_by_id('ohms-law-voltage')

        assert matcher.score_formula(formula, "xyz", NO_VALUES) == 0.5

    def test_keyword_boost(self, matcher, catalog):
        """Test each matching word adds 0.1."""
        formula = catalog.get_by_id('torque-power-rpm')

        assert matcher.score_formula(formula, "motor rpm torque power", NO_VALUES) == pytest.approx(0.9)

    def test_clamped(self, matcher, catalog):
        """Test the score never exceeds 0.95."""
        formula = catalog.get_by_id('torque-power-rpm')
        extracted = ExtractedQueryData(values=[100.0], units=[])

        score = matcher.score_formula(formula, "motor rpm torque power horsepower", extracted)

        assert score == 0.95

    def test_short_words_ignored(self, matcher, catalog):
        """Test words shorter than three characters never boost."""
        formula = catalog.get_by_id('ohms-law-voltage')

        assert matcher.score_formula(formula, "to of a", NO_VALUES) == 0.5


class TestFormulaRecommendation:
    """Tests for formula recommendations."""

    def test_recommendation_shape(self, matcher, catalog):
        """Test the recommendation references its formula."""
        formula = catalog.get_by_id('belt-ratio')

        suggestion = matcher.create_formula_recommendation(formula, "belt", NO_VALUES)

        assert suggestion.type == SuggestionType.FORMULA
        assert suggestion.formula is formula
        assert suggestion.expression == formula.formula
        assert suggestion.result is None
        assert suggestion.to_dict()['formula_id'] == 'belt-ratio'

    def test_examples_with_user_values(self, matcher, catalog):
        """Test query numbers are bound to input variables."""
        formula = catalog.get_by_id('ohms-law-voltage')
        extracted = ExtractedQueryData(values=[2.0, 3.0], units=[])

        examples = matcher.generate_examples(formula, extracted)

        assert examples[-1] == "With your values: 6.00 V"
        assert len(examples) <= 3


class TestCalculateFormula:
    """Tests for formula execution."""

    def test_rpm_to_fpm(self, matcher, catalog):
        """Test 1800 RPM with a 0.5 ft pulley."""
        formula = catalog.get_by_id('rpm-to-fpm')

        response = matcher.calculate_formula(formula, {'RPM': 1800, 'D_ft': 0.5})

        assert response.result == pytest.approx(2827.433388)
        assert response.unit == 'ft/min'
        assert response.confidence == 0.95

    def test_step_trace(self, matcher, catalog):
        """Test original, one substitution per input, and final steps."""
        formula = catalog.get_by_id('ohms-law-voltage')

        response = matcher.calculate_formula(formula, {'I': 5, 'R': 10})

        descriptions = [step.description for step in response.steps]
        assert descriptions == ['Original Formula', 'Substitute I = 5', 'Substitute R = 10', 'Final Result']
        assert response.steps[0].equation == 'V = I * R'
        assert response.steps[1].equation == 'V = 5 * R'
        assert response.steps[2].equation == 'V = 5 * 10'
        assert response.steps[-1].result == 50
        assert response.steps[-1].unit == 'V'

    def test_chained_equality(self, matcher, catalog):
        """Test the first evaluable right-hand side is used."""
        formula = catalog.get_by_id('belt-ratio')

        response = matcher.calculate_formula(formula, {'D1': 6, 'D2': 12})

        assert response.result == 2

    def test_second_right_hand_side(self, matcher, catalog):
        """Test a later right-hand side is used when the first cannot bind."""
        formula = catalog.get_by_id('flow-rate-pipe')

        response = matcher.calculate_formula(formula, {'D': 0.1, 'v': 2})

        assert response.result == pytest.approx(0.015708)

    def test_output_unit_override(self, matcher, catalog):
        """Test an explicit output unit wins."""
        formula = catalog.get_by_id('ohms-law-voltage')

        response = matcher.calculate_formula(formula, {'I': 1, 'R': 1000}, output_unit='kV')

        assert response.unit == 'kV'

    def test_missing_inputs(self, matcher, catalog):
        """Test failure gives result 0, confidence 0 and one error step."""
        formula = catalog.get_by_id('ohms-law-voltage')

        response = matcher.calculate_formula(formula, {'I': 5})

        assert response.result == 0
        assert response.confidence == 0
        assert len(response.steps) == 1
        assert response.steps[0].description == 'Error'
        assert 'R' in response.steps[0].equation


class TestCommonFormulas:
    """Tests for common-formula suggestions."""

    def test_shared_variable(self, matcher):
        """Test 'r' suggests circle formulas at 0.6."""
        suggestions = matcher.suggest_common_formulas("r + 1")

        assert 0 < len(suggestions) <= 3
        assert all(s.confidence == 0.6 for s in suggestions)
        circle = next(s for s in suggestions if s.title == 'CIRCLE AREA')
        assert circle.result == pytest.approx(78.539816)
        assert circle.category == 'geometry'

    def test_no_variables(self, matcher):
        """Test plain arithmetic suggests nothing."""
        assert matcher.suggest_common_formulas("2 + 3") == []


class TestExplanations:
    """Tests for explanation suggestions."""

    def test_motor_explanation(self, matcher):
        """Test motor queries get the motor explanation."""
        suggestions = matcher.create_explanations("motor at 1800 rpm", ['mechanical'])

        assert [s.title for s in suggestions] == ['Motor Speed Calculations']
        assert suggestions[0].confidence == 0.7

    def test_power_explanation_category(self, matcher):
        """Test power explanation follows the electrical category."""
        suggestions = matcher.create_explanations("power in watts", ['electrical'])

        assert suggestions[0].category == 'electrical'
