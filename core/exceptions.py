"""
Exceptions raised across the OCR coordination boundary.

Evaluation problems never surface as exceptions; they are reported as
failed CalculationResult values instead.
"""


class OCRError(RuntimeError):
    """Base class for OCR failures that reach the caller."""


class OCRUnavailableError(OCRError):
    """No OCR engine could be initialized."""


class OCRProcessingError(OCRError):
    """Every OCR engine failed on the same image."""
