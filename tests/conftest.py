"""
Pytest configuration and global fixtures.
"""
import asyncio
import sys
from pathlib import Path
from typing import Optional

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from calculation.evaluator import SafeEvaluator
from calculation.formulas import FormulaCatalog
from core.models import OCREngine, OCRReading
from services.ocr_backends import OCRBackend


class ScriptedOCRBackend(OCRBackend):
    """
    OCR backend double returning scripted readings.

    Args:
        engine: Engine tag reported by the backend
        text: Text returned by every ``recognize`` call
        confidence: Confidence returned by every ``recognize`` call
        init_error: Raised from ``initialize`` when set
        recognize_error: Raised from ``recognize`` when set
        init_delay: Seconds ``initialize`` sleeps, to expose races
    """

    def __init__(
        self,
        engine: OCREngine,
        text: str = "2 + 3 = 5",
        confidence: float = 0.9,
        init_error: Optional[Exception] = None,
        recognize_error: Optional[Exception] = None,
        init_delay: float = 0.0,
        boxes=None
    ):
        self.engine = engine
        self.text = text
        self.confidence = confidence
        self.init_error = init_error
        self.recognize_error = recognize_error
        self.init_delay = init_delay
        self.boxes = boxes
        self.init_calls = 0
        self.recognize_calls = 0
        self.cleanup_calls = 0

    async def initialize(self) -> None:
        self.init_calls += 1
        if self.init_delay:
            await asyncio.sleep(self.init_delay)
        if self.init_error is not None:
            raise self.init_error

    async def recognize(self, image) -> OCRReading:
        self.recognize_calls += 1
        await asyncio.sleep(0)
        if self.recognize_error is not None:
            raise self.recognize_error
        return OCRReading(
            text=self.text,
            confidence=self.confidence,
            engine=self.engine,
            boxes=self.boxes,
        )

    async def cleanup(self) -> None:
        self.cleanup_calls += 1


@pytest.fixture
def make_primary():
    """Factory for a scripted vision-model backend."""
    def _make(**kwargs) -> ScriptedOCRBackend:
        return ScriptedOCRBackend(OCREngine.VLLM, **kwargs)
    return _make


@pytest.fixture
def make_fallback():
    """Factory for a scripted Tesseract backend."""
    def _make(**kwargs) -> ScriptedOCRBackend:
        kwargs.setdefault('confidence', 0.6)
        return ScriptedOCRBackend(OCREngine.TESSERACT, **kwargs)
    return _make


@pytest.fixture
def evaluator():
    """Evaluator with arithmetic (2 dp) precision."""
    return SafeEvaluator()


@pytest.fixture
def formula_evaluator():
    """Evaluator with formula (6 dp) precision."""
    return SafeEvaluator(precision=6)


@pytest.fixture
def catalog():
    """Fresh catalog over the built-in formulas."""
    return FormulaCatalog()


@pytest.fixture
def temp_dir(tmp_path):
    """Provide temporary directory for test files."""
    return tmp_path


@pytest.fixture
def sample_image_path(temp_dir):
    """Create a sample test image."""
    from PIL import Image

    img_path = temp_dir / "test_image.png"
    img = Image.new('RGB', (800, 600), color='white')
    img.save(img_path)

    return str(img_path)


@pytest.fixture
def sample_image_bytes():
    """Provide PNG bytes for a small image."""
    from io import BytesIO
    from PIL import Image

    img = Image.new('RGB', (120, 40), color='white')
    buf = BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()


@pytest.fixture
def sample_base64_image(sample_image_bytes):
    """Provide base64 encoded sample image."""
    import base64

    return base64.b64encode(sample_image_bytes).decode()
