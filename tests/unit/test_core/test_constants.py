"""
Unit tests for core.constants module.
"""
import math
import re

from core.constants import (
    ALLOWED_EXPRESSION_PATTERN,
    CONSTANT_MATCH_LOWER,
    CONSTANT_MATCH_UPPER,
    DEFAULT_OCR_PARAMS,
    KNOWN_CONSTANTS,
    OCR_CONFIDENCE_THRESHOLD,
    OCR_PROMPTS,
    SUGGESTION_CONFIDENCE,
    TESSERACT_CHAR_WHITELIST,
    UNIT_CONVERSIONS,
)


class TestAllowedExpressionPattern:
    """Tests for the evaluator character gate."""

    def test_accepts_arithmetic(self):
        """Test plain arithmetic passes."""
        assert re.match(ALLOWED_EXPRESSION_PATTERN, '(12.5 + 3) * 2 / 4 - 1')

    def test_rejects_names(self):
        """Test identifiers and other symbols are rejected."""
        for text in ('__import__', 'x + 1', '2 ^ 3', '5 % 2'):
            assert not re.match(ALLOWED_EXPRESSION_PATTERN, text)


class TestUnitConversions:
    """Tests for UNIT_CONVERSIONS tables."""

    def test_base_units(self):
        """Test each category has a base unit with factor 1."""
        assert UNIT_CONVERSIONS['length']['mm'] == 1
        assert UNIT_CONVERSIONS['area']['mm²'] == 1
        assert UNIT_CONVERSIONS['volume']['ml'] == 1
        assert UNIT_CONVERSIONS['mass']['g'] == 1

    def test_factors_positive(self):
        """Test every factor is positive."""
        for category, table in UNIT_CONVERSIONS.items():
            for unit, factor in table.items():
                assert factor > 0, f"{category}/{unit}"

    def test_inch(self):
        """Test the inch is exactly 25.4 mm."""
        assert UNIT_CONVERSIONS['length']['in'] == 25.4


class TestConfidences:
    """Tests for confidence constants."""

    def test_suggestion_confidences_in_range(self):
        """Test all rule confidences are probabilities."""
        for rule, confidence in SUGGESTION_CONFIDENCE.items():
            assert 0.0 < confidence <= 1.0, rule

    def test_unit_sweep_highest(self):
        """Test unit sweeps outrank every other rule."""
        assert SUGGESTION_CONFIDENCE['unit_sweep'] == max(SUGGESTION_CONFIDENCE.values())

    def test_ocr_threshold(self):
        """Test the primary engine acceptance threshold."""
        assert OCR_CONFIDENCE_THRESHOLD == 0.7


class TestKnownConstants:
    """Tests for KNOWN_CONSTANTS."""

    def test_values(self):
        """Test the constants match their definitions."""
        assert KNOWN_CONSTANTS['pi'] == math.pi
        assert KNOWN_CONSTANTS['g'] == 9.81

    def test_band(self):
        """Test the match band is ten percent either side."""
        assert CONSTANT_MATCH_LOWER == 0.9
        assert CONSTANT_MATCH_UPPER == 1.1


class TestOCRConstants:
    """Tests for OCR prompt and parameter constants."""

    def test_prompts_reference_image(self):
        """Test prompts start with the image placeholder."""
        for prompt in OCR_PROMPTS.values():
            assert prompt.startswith('<image>')

    def test_default_params(self):
        """Test default OCR parameters."""
        assert DEFAULT_OCR_PARAMS['max_tokens'] > 0
        assert DEFAULT_OCR_PARAMS['temperature'] == 0.0

    def test_whitelist_has_operators(self):
        """Test Tesseract may emit digits and arithmetic symbols."""
        for char in '0123456789+-*/=.':
            assert char in TESSERACT_CHAR_WHITELIST
