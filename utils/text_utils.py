"""
Text utilities for OCR output.

Handles glyph normalization and cleaning of recognized text.
"""
import re
from typing import List

# OCR look-alikes for the four arithmetic operators
OPERATOR_GLYPHS = {
    '×': '*',
    '·': '*',
    '∙': '*',
    '÷': '/',
    '⁄': '/',
    '−': '-',
    '–': '-',
    '—': '-',
}

SUPERSCRIPT_POWERS = {
    '²': '**2',
    '³': '**3',
}


def normalize_operator_glyphs(text: str) -> str:
    """
    Replace operator look-alike glyphs with ASCII operators.

    Args:
        text: Raw recognized text

    Returns:
        Text using only ``+ - * /`` for operators
    """
    if not text:
        return ""

    for glyph, replacement in OPERATOR_GLYPHS.items():
        text = text.replace(glyph, replacement)
    return text


def expand_superscripts(text: str) -> str:
    """Rewrite superscript squares and cubes as ``**2`` / ``**3``."""
    for glyph, replacement in SUPERSCRIPT_POWERS.items():
        text = text.replace(glyph, replacement)
    return text


def clean_ocr_text(text: str) -> str:
    """
    Keep only characters that can appear in arithmetic.

    Args:
        text: Raw recognized text

    Returns:
        Cleaned text with normalized operators and collapsed whitespace
    """
    if not text:
        return ""

    cleaned = re.sub(r'[^\d+\-*/=.()×÷√^%\s]', '', text)
    cleaned = normalize_operator_glyphs(cleaned)
    cleaned = re.sub(r'[ \t]+', ' ', cleaned)
    lines = [line.strip() for line in cleaned.splitlines()]
    return '\n'.join(line for line in lines if line).strip()


def split_lines(text: str) -> List[str]:
    """
    Split text into stripped, non-empty lines.

    Args:
        text: Multi-line text

    Returns:
        List of lines
    """
    return [line.strip() for line in text.split('\n') if line.strip()]
