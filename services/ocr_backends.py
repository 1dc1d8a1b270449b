"""
OCR backends used by the hybrid coordinator.

Every backend exposes the same small async interface so the coordinator can
treat them as opaque text recognizers:

- ``initialize()`` loads or connects to the model (may be slow)
- ``recognize(image)`` returns an OCRReading with a 0-1 confidence
- ``cleanup()`` releases model sessions
"""
import asyncio
import logging
import math
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

import pytesseract
from openai import AsyncOpenAI
from pytesseract import Output

from core.constants import DEFAULT_OCR_PARAMS, OCR_PROMPTS, TESSERACT_CHAR_WHITELIST
from core.models import OCREngine, OCRReading
from utils.image_utils import ImageInput, image_to_base64, load_image

logger = logging.getLogger(__name__)


class OCRBackend(ABC):
    """
    Abstract base class for OCR backends.

    Implementations must be safe to ``initialize()`` once and then serve
    any number of concurrent ``recognize()`` calls.
    """

    engine: OCREngine

    @abstractmethod
    async def initialize(self) -> None:
        """
        Prepare the backend for recognition.

        Raises:
            Exception: If the engine cannot be loaded or reached
        """
        pass

    @abstractmethod
    async def recognize(self, image: ImageInput) -> OCRReading:
        """
        Recognize text in an image.

        Args:
            image: File path, raw bytes, base64 string or PIL Image

        Returns:
            OCRReading tagged with this backend's engine
        """
        pass

    async def cleanup(self) -> None:
        """Release backend resources. Default is a no-op."""
        return None


class VisionLLMOCRBackend(OCRBackend):
    """
    Primary backend: a vision language model served by vLLM.

    The model is called through the OpenAI-compatible chat completions API
    with the image attached as a data URL. Confidence is the geometric mean
    of the generated tokens' probabilities.
    """

    engine = OCREngine.VLLM

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        api_key: Optional[str] = None,
        server_url: Optional[str] = None,
        model: str = "ocr",
        prompt: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize the vision OCR backend.

        Args:
            client: AsyncOpenAI client instance (created on initialize if omitted)
            api_key: API key for vLLM
            server_url: vLLM server URL
            model: Served model name (default: "ocr")
            prompt: Custom prompt (default: calculator transcription)
            **kwargs: max_tokens, temperature, max_image_size overrides
        """
        self.client = client
        self.api_key = api_key
        self.server_url = server_url
        self.model = model
        self.prompt = prompt or OCR_PROMPTS['calculator']
        self.params = {**DEFAULT_OCR_PARAMS, **kwargs}
        self._owns_client = client is None

    async def initialize(self) -> None:
        if self.client is None:
            self.client = AsyncOpenAI(api_key=self.api_key, base_url=self.server_url)

        # Fails fast when the server is unreachable
        models = await self.client.models.list()
        served = [model.id for model in models.data]
        if served and self.model not in served:
            raise RuntimeError(
                f"Model '{self.model}' is not served (available: {', '.join(served)})"
            )
        logger.info("Vision OCR model '%s' ready", self.model)

    async def recognize(self, image: ImageInput) -> OCRReading:
        if self.client is None:
            raise RuntimeError("VisionLLMOCRBackend used before initialize()")

        img_b64 = image_to_base64(image, max_size=self.params['max_image_size'])
        response = await self._call_vllm(img_b64)

        choice = response.choices[0]
        text = (choice.message.content or '').strip()
        confidence = self._confidence_from_logprobs(choice)

        return OCRReading(text=text, confidence=confidence, engine=self.engine)

    async def _call_vllm(self, img_b64: str):
        """Call vLLM API with image and prompt."""
        return await self.client.chat.completions.create(
            model=self.model,
            messages=[{
                "role": "user",
                "content": [
                    {"type": "text", "text": self.prompt},
                    {"type": "image_url", "image_url": {"url": f"data:image/png;base64,{img_b64}"}}
                ]
            }],
            max_tokens=self.params['max_tokens'],
            temperature=self.params['temperature'],
            logprobs=True,
            extra_body={
                "skip_special_tokens": True,
            },
        )

    @staticmethod
    def _confidence_from_logprobs(choice) -> float:
        """exp(mean token logprob); 0.0 when the server returned none."""
        logprobs = getattr(choice, 'logprobs', None)
        tokens = getattr(logprobs, 'content', None) if logprobs is not None else None
        if not tokens:
            return 0.0

        mean_logprob = sum(token.logprob for token in tokens) / len(tokens)
        return min(max(math.exp(mean_logprob), 0.0), 1.0)

    async def cleanup(self) -> None:
        if self.client is not None and self._owns_client:
            await self.client.close()
            self.client = None


class TesseractOCRBackend(OCRBackend):
    """
    Fallback backend: local Tesseract through pytesseract.

    Args:
        lang: Language hint passed to Tesseract
        oem: OCR Engine Mode (3 = LSTM)
        psm: Page segmentation mode (7 = single text line)
        whitelist: Characters Tesseract may emit
    """

    engine = OCREngine.TESSERACT

    def __init__(
        self,
        lang: str = "eng",
        oem: int = 3,
        psm: int = 7,
        whitelist: str = TESSERACT_CHAR_WHITELIST
    ):
        self.lang = lang
        config = f"--oem {oem} --psm {psm}"
        if whitelist:
            config = f"{config} -c tessedit_char_whitelist={whitelist}"
        self.config = config
        self.version = None

    async def initialize(self) -> None:
        # Raises TesseractNotFoundError when the binary is missing
        self.version = await asyncio.to_thread(pytesseract.get_tesseract_version)
        logger.info("Tesseract %s ready (lang=%s)", self.version, self.lang)

    async def recognize(self, image: ImageInput) -> OCRReading:
        img = load_image(image)
        data = await asyncio.to_thread(
            pytesseract.image_to_data,
            img,
            lang=self.lang,
            config=self.config,
            output_type=Output.DICT,
        )
        text, confidence, boxes = parse_tesseract_data(data)
        return OCRReading(
            text=text,
            confidence=confidence,
            engine=self.engine,
            boxes=boxes or None,
        )


def parse_tesseract_data(
    data: Dict[str, list]
) -> Tuple[str, float, Tuple[Tuple[int, int, int, int], ...]]:
    """
    Collapse ``image_to_data`` output into text, confidence and word boxes.

    Words are grouped back into their Tesseract lines so multi-line
    displays keep one expression per line.

    Args:
        data: ``pytesseract.image_to_data(..., output_type=Output.DICT)``

    Returns:
        Tuple of (text, mean word confidence 0-1, ``(x1, y1, x2, y2)`` boxes)
    """
    lines: Dict[Tuple[int, int, int], List[str]] = {}
    confidences: List[float] = []
    boxes: List[Tuple[int, int, int, int]] = []

    rows = zip(
        data.get("text", []),
        data.get("conf", []),
        data.get("left", []),
        data.get("top", []),
        data.get("width", []),
        data.get("height", []),
        data.get("block_num", []),
        data.get("par_num", []),
        data.get("line_num", []),
    )
    for word, conf, left, top, width, height, block, par, line in rows:
        word = (word or '').strip()
        if not word or conf is None or float(conf) < 0:
            continue

        confidences.append(float(conf) / 100.0)
        x1, y1 = int(left), int(top)
        boxes.append((x1, y1, x1 + int(width), y1 + int(height)))
        lines.setdefault((int(block), int(par), int(line)), []).append(word)

    text = "\n".join(" ".join(words) for _, words in sorted(lines.items()))
    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    return text, confidence, tuple(boxes)
