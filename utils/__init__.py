"""Utilities package - Helper functions for image and OCR text processing."""

from .image_utils import (
    ImageInput,
    load_image,
    image_to_base64,
    decode_base64_image,
    get_image_dimensions
)

from .text_utils import (
    normalize_operator_glyphs,
    expand_superscripts,
    clean_ocr_text,
    split_lines
)

__all__ = [
    # Image utils
    'ImageInput',
    'load_image',
    'image_to_base64',
    'decode_base64_image',
    'get_image_dimensions',

    # Text utils
    'normalize_operator_glyphs',
    'expand_superscripts',
    'clean_ocr_text',
    'split_lines'
]
