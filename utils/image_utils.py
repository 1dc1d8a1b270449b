"""
Image utilities for OCR backends.

Handles image loading, normalization and base64 encoding.
"""
import base64
import binascii
import os
from io import BytesIO
from typing import Tuple, Union

from PIL import Image, ImageOps

ImageInput = Union[str, bytes, bytearray, Image.Image]


def load_image(image: ImageInput) -> Image.Image:
    """
    Load an image from any supported input.

    Args:
        image: File path, raw bytes, base64 string (plain or data URL) or PIL Image

    Returns:
        RGB PIL Image with EXIF orientation applied

    Raises:
        ValueError: If the input cannot be decoded as an image
    """
    if isinstance(image, Image.Image):
        img = image
    elif isinstance(image, (bytes, bytearray)):
        img = _open_bytes(bytes(image))
    elif isinstance(image, str):
        if os.path.isfile(image):
            img = Image.open(image)
        else:
            img = decode_base64_image(image)
    else:
        raise ValueError(f"Unsupported image input: {type(image).__name__}")

    # Fix EXIF orientation
    img = ImageOps.exif_transpose(img)

    if img.mode != 'RGB':
        img = img.convert('RGB')
    return img


def _open_bytes(data: bytes) -> Image.Image:
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except OSError as exc:
        raise ValueError(f"Cannot decode image data: {exc}") from exc
    return img


def decode_base64_image(b64_string: str) -> Image.Image:
    """
    Decode base64 string to PIL Image.

    Args:
        b64_string: Base64-encoded image string, optionally a ``data:`` URL

    Returns:
        PIL Image object
    """
    if b64_string.startswith('data:'):
        b64_string = b64_string.split(',', 1)[-1]

    try:
        img_data = base64.b64decode(b64_string, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Image string is neither a file path nor base64 data") from exc
    return _open_bytes(img_data)


def image_to_base64(image: ImageInput, max_size: int = 2048) -> str:
    """
    Load an image and convert to base64-encoded PNG.

    Args:
        image: Any input accepted by :func:`load_image`
        max_size: Maximum dimension (width or height) before resizing

    Returns:
        Base64-encoded PNG string
    """
    img = load_image(image)

    # Resize if needed
    if max(img.size) > max_size:
        img = img.copy()
        img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

    buf = BytesIO()
    img.save(buf, format='PNG')
    return base64.b64encode(buf.getvalue()).decode()


def get_image_dimensions(image: ImageInput) -> Tuple[int, int]:
    """Get image dimensions (width, height)."""
    return load_image(image).size
