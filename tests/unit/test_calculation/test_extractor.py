"""
Unit tests for calculation.extractor module.
"""
import pytest
from calculation.extractor import ExpressionExtractor, extract_expression


class TestExtractExpression:
    """Tests for extract_expression function."""

    def test_drops_echoed_result(self):
        """Test '2 + 3 = 5' yields the operation only."""
        assert extract_expression("2 + 3 = 5") == "2 + 3"

    def test_operation_without_result(self):
        """Test a bare operation is returned as-is."""
        assert extract_expression("12.5 * 4") == "12.5 * 4"

    def test_surrounding_noise(self):
        """Test labels around the expression are ignored."""
        assert extract_expression("Total: 7 - 2 units") == "7 - 2"

    def test_glyph_operators(self):
        """Test × is read as multiplication."""
        assert extract_expression("6 × 7") == "6 * 7"

    def test_caret_becomes_power(self):
        """Test ^ is rewritten as **."""
        assert extract_expression("2^8") == "2 ** 8"

    def test_percent_operand(self):
        """Test percentages become fractions."""
        assert extract_expression("200 * 15%") == "200 * (15/100)"

    def test_bare_equality(self):
        """Test 'a = b' yields the left operand."""
        assert extract_expression("42 = 42") == "42"

    def test_first_match_wins(self):
        """Test only the first expression is returned."""
        assert extract_expression("1 + 1 and 2 + 2") == "1 + 1"

    @pytest.mark.parametrize("text", ["", "hello", "42", None])
    def test_no_expression(self, text):
        """Test text without an operation yields None."""
        assert extract_expression(text) is None


class TestExpressionExtractor:
    """Tests for ExpressionExtractor class."""

    def test_extract_and_evaluate(self, evaluator):
        """Test the extracted expression is evaluated."""
        extractor = ExpressionExtractor(evaluator)

        result = extractor.extract_and_evaluate("2 + 3 = 5")

        assert result.result == 5

    def test_extract_and_evaluate_nothing(self, evaluator):
        """Test None when nothing is extractable."""
        extractor = ExpressionExtractor(evaluator)

        assert extractor.extract_and_evaluate("no numbers") is None

    def test_percent_evaluates(self, evaluator):
        """Test percent operands evaluate numerically."""
        extractor = ExpressionExtractor(evaluator)

        assert extractor.extract_and_evaluate("200 * 15%").result == 30

    def test_parse_from_ocr_keeps_successful_lines(self, evaluator):
        """Test one result per evaluable line, failures dropped."""
        extractor = ExpressionExtractor(evaluator)
        text = "12 + 8\nTOTAL\n9 / 0\n3 × 3"

        results = extractor.parse_from_ocr(text)

        assert [r.result for r in results] == [20, 9]

    def test_parse_from_ocr_empty(self, evaluator):
        """Test empty OCR text yields no results."""
        assert ExpressionExtractor(evaluator).parse_from_ocr("") == []
