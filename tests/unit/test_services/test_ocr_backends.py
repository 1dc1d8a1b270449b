"""
Unit tests for services.ocr_backends module.
"""
import asyncio
import math
from types import SimpleNamespace

import pytesseract
import pytest
from core.models import OCREngine
from services.ocr_backends import (
    TesseractOCRBackend,
    VisionLLMOCRBackend,
    parse_tesseract_data,
)


class FakeCompletions:
    """Records chat completion requests and returns a canned response."""

    def __init__(self, content, logprobs):
        self.content = content
        self.logprobs = logprobs
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        tokens = None
        if self.logprobs is not None:
            tokens = SimpleNamespace(content=[SimpleNamespace(logprob=lp) for lp in self.logprobs])
        choice = SimpleNamespace(
            message=SimpleNamespace(content=self.content),
            logprobs=tokens,
        )
        return SimpleNamespace(choices=[choice])


class FakeModels:
    def __init__(self, served):
        self.served = served

    async def list(self):
        return SimpleNamespace(data=[SimpleNamespace(id=name) for name in self.served])


def make_client(content="2 + 3 = 5", logprobs=(-0.1, -0.2), served=("ocr",)):
    completions = FakeCompletions(content, list(logprobs) if logprobs is not None else None)
    return SimpleNamespace(
        chat=SimpleNamespace(completions=completions),
        models=FakeModels(list(served)),
    )


class TestParseTesseractData:
    """Tests for parse_tesseract_data function."""

    def test_groups_words_by_line(self):
        """Test words on separate lines stay on separate lines."""
        data = {
            'text': ['', '12', '+', '8', '20'],
            'conf': ['-1', '90', '80', '70', '60'],
            'left': [0, 10, 40, 60, 10],
            'top': [0, 5, 5, 5, 40],
            'width': [0, 20, 10, 10, 20],
            'height': [0, 15, 15, 15, 15],
            'block_num': [0, 1, 1, 1, 1],
            'par_num': [0, 1, 1, 1, 1],
            'line_num': [0, 1, 1, 1, 2],
        }

        text, confidence, boxes = parse_tesseract_data(data)

        assert text == "12 + 8\n20"
        assert confidence == pytest.approx(0.75)
        assert boxes[0] == (10, 5, 30, 20)
        assert len(boxes) == 4

    def test_empty(self):
        """Test no words yields empty text and zero confidence."""
        text, confidence, boxes = parse_tesseract_data({})

        assert text == ""
        assert confidence == 0.0
        assert boxes == ()


class TestTesseractOCRBackend:
    """Tests for TesseractOCRBackend configuration."""

    def test_whitelist_in_config(self):
        """Test the math whitelist is passed to Tesseract."""
        backend = TesseractOCRBackend(psm=7)

        assert '--psm 7' in backend.config
        assert 'tessedit_char_whitelist=0123456789' in backend.config
        assert backend.engine == OCREngine.TESSERACT

    def test_recognize(self, monkeypatch, sample_image_bytes):
        """Test recognition goes through image_to_data."""
        captured = {}

        def fake_image_to_data(image, lang, config, output_type):
            captured['size'] = image.size
            captured['lang'] = lang
            return {
                'text': ['6', '*', '7'],
                'conf': [95, 85, 90],
                'left': [0, 10, 20],
                'top': [0, 0, 0],
                'width': [5, 5, 5],
                'height': [8, 8, 8],
                'block_num': [1, 1, 1],
                'par_num': [1, 1, 1],
                'line_num': [1, 1, 1],
            }

        monkeypatch.setattr(pytesseract, 'image_to_data', fake_image_to_data)
        backend = TesseractOCRBackend(lang='eng')

        reading = asyncio.run(backend.recognize(sample_image_bytes))

        assert reading.text == "6 * 7"
        assert reading.confidence == pytest.approx(0.9)
        assert reading.engine == OCREngine.TESSERACT
        assert captured == {'size': (120, 40), 'lang': 'eng'}


class TestVisionLLMOCRBackend:
    """Tests for VisionLLMOCRBackend."""

    def test_recognize(self, sample_image_bytes):
        """Test text and logprob-derived confidence."""
        client = make_client(content=" 2 + 3 = 5 \n", logprobs=(-0.1, -0.3))
        backend = VisionLLMOCRBackend(client=client, model="ocr")

        async def run():
            await backend.initialize()
            return await backend.recognize(sample_image_bytes)

        reading = asyncio.run(run())

        assert reading.text == "2 + 3 = 5"
        assert reading.confidence == pytest.approx(math.exp(-0.2))
        assert reading.engine == OCREngine.VLLM

    def test_request_shape(self, sample_image_bytes):
        """Test the image is sent as a PNG data URL with logprobs enabled."""
        client = make_client()
        backend = VisionLLMOCRBackend(client=client, model="ocr", max_tokens=64)

        asyncio.run(backend.recognize(sample_image_bytes))

        request = client.chat.completions.requests[0]
        image_part = request['messages'][0]['content'][1]
        assert image_part['image_url']['url'].startswith("data:image/png;base64,")
        assert request['logprobs'] is True
        assert request['max_tokens'] == 64

    def test_missing_logprobs(self, sample_image_bytes):
        """Test zero confidence when the server returns no logprobs."""
        backend = VisionLLMOCRBackend(client=make_client(logprobs=None))

        reading = asyncio.run(backend.recognize(sample_image_bytes))

        assert reading.confidence == 0.0

    def test_unserved_model(self):
        """Test initialization fails when the model is not served."""
        backend = VisionLLMOCRBackend(client=make_client(served=("other",)), model="ocr")

        with pytest.raises(RuntimeError):
            asyncio.run(backend.initialize())

    def test_recognize_before_initialize_without_client(self, sample_image_bytes):
        """Test a backend with no client refuses to recognize."""
        backend = VisionLLMOCRBackend()

        with pytest.raises(RuntimeError):
            asyncio.run(backend.recognize(sample_image_bytes))
