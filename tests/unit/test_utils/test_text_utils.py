"""
Unit tests for utils.text_utils module.
"""
from utils.text_utils import (
    clean_ocr_text,
    expand_superscripts,
    normalize_operator_glyphs,
    split_lines,
)


class TestNormalizeOperatorGlyphs:
    """Tests for normalize_operator_glyphs function."""

    def test_multiplication_and_division(self):
        """Test × and ÷ become * and /."""
        assert normalize_operator_glyphs("6 × 7 ÷ 2") == "6 * 7 / 2"

    def test_dashes(self):
        """Test minus look-alikes become hyphen-minus."""
        assert normalize_operator_glyphs("9 − 4 – 1") == "9 - 4 - 1"

    def test_empty(self):
        """Test empty or None input."""
        assert normalize_operator_glyphs("") == ""
        assert normalize_operator_glyphs(None) == ""


class TestExpandSuperscripts:
    """Tests for expand_superscripts function."""

    def test_square_and_cube(self):
        """Test superscripts become exponent operators."""
        assert expand_superscripts("r² + h³") == "r**2 + h**3"

    def test_no_superscripts(self):
        """Test plain text is unchanged."""
        assert expand_superscripts("r * r") == "r * r"


class TestCleanOCRText:
    """Tests for clean_ocr_text function."""

    def test_removes_letters(self):
        """Test non-arithmetic characters are dropped."""
        assert clean_ocr_text("Total: 12 × 3 = 36") == "12 * 3 = 36"

    def test_collapses_whitespace(self):
        """Test runs of spaces collapse to one."""
        assert clean_ocr_text("2    +\t3") == "2 + 3"

    def test_drops_empty_lines(self):
        """Test lines that clean to nothing disappear."""
        assert clean_ocr_text("4 + 4\nnoise\n10 / 4") == "4 + 4\n10 / 4"

    def test_keeps_special_symbols(self):
        """Test root, power and percent survive cleaning."""
        assert clean_ocr_text("√9 ^ 2 %") == "√9 ^ 2 %"

    def test_empty(self):
        """Test empty input."""
        assert clean_ocr_text("") == ""
        assert clean_ocr_text("ERROR") == ""


class TestSplitLines:
    """Tests for split_lines function."""

    def test_strips_and_filters(self):
        """Test lines are stripped and blanks removed."""
        assert split_lines("  1 + 1 \n\n 2 * 2\n") == ["1 + 1", "2 * 2"]

    def test_single_line(self):
        """Test text without newlines."""
        assert split_lines("3 - 1") == ["3 - 1"]
