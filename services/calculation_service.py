"""
Calculation Service - Facade over the calculation engine and OCR coordinator.

Every public method returns plain JSON-ready dicts so the HTTP layer and
the CLI can share one entry point.
"""
import logging
from typing import Dict, List, Optional

from core.constants import ARITHMETIC_PRECISION, FORMULA_PRECISION
from core.models import EngineeringFormula
from calculation.corrections import CorrectionGenerator
from calculation.evaluator import SafeEvaluator
from calculation.extractor import ExpressionExtractor
from calculation.formula_matcher import FormulaMatcher
from calculation.formulas import FormulaCatalog, get_default_catalog
from calculation.ranker import ConstantMatcher, RecommendationRanker
from calculation.units import UnitConverter
from utils.image_utils import ImageInput
from .ocr_coordinator import HybridOCRCoordinator

logger = logging.getLogger(__name__)


class CalculationService:
    """Service for expression recovery, suggestions and formula execution."""

    def __init__(
        self,
        coordinator: Optional[HybridOCRCoordinator] = None,
        catalog: Optional[FormulaCatalog] = None,
        arithmetic_precision: int = ARITHMETIC_PRECISION,
        formula_precision: int = FORMULA_PRECISION
    ):
        """
        Initialize calculation service.

        Args:
            coordinator: OCR coordinator (only needed for image processing)
            catalog: Formula catalog (default: built-in catalog)
            arithmetic_precision: Decimal places for plain arithmetic
            formula_precision: Decimal places for formula results
        """
        self.coordinator = coordinator
        self.catalog = catalog if catalog is not None else get_default_catalog()

        evaluator = SafeEvaluator(precision=arithmetic_precision)
        self.extractor = ExpressionExtractor(evaluator)
        self.matcher = FormulaMatcher(
            self.catalog, SafeEvaluator(precision=formula_precision)
        )
        self.ranker = RecommendationRanker(
            corrections=CorrectionGenerator(evaluator),
            units=UnitConverter(evaluator),
            formulas=self.matcher,
            constants=ConstantMatcher(evaluator),
        )

    def analyze_query(self, query: str, context: Optional[dict] = None) -> List[Dict]:
        """
        Ranked recommendations for a conversational query.

        Args:
            query: Free-text engineering question
            context: Optional dict with ``discipline``, ``preferred_units``, ``complexity``

        Returns:
            List of suggestion dicts (at most 8)
        """
        return [suggestion.to_dict() for suggestion in self.ranker.analyze_query(query, context)]

    def generate_suggestions(self, text: str) -> List[Dict]:
        """Ranked suggestions for recognized whiteboard text (at most 10)."""
        return [suggestion.to_dict() for suggestion in self.ranker.generate_suggestions(text)]

    def calculate_formula(
        self,
        inputs: Dict[str, float],
        formula: Optional[EngineeringFormula] = None,
        formula_id: Optional[str] = None,
        output_unit: Optional[str] = None
    ) -> Dict:
        """
        Execute a catalog formula.

        Args:
            inputs: Symbol to numeric value
            formula: Formula object (takes precedence over ``formula_id``)
            formula_id: Catalog id, e.g. ``"belt-ratio"``
            output_unit: Unit label for the result

        Returns:
            Dict with result, unit, steps, formula_id and confidence

        Raises:
            ValueError: If no formula is given or the id is unknown
        """
        if formula is None:
            if formula_id is None:
                raise ValueError("Either formula or formula_id is required")
            formula = self.catalog.get_by_id(formula_id)
            if formula is None:
                raise ValueError(f"Unknown formula: {formula_id}")

        logger.debug("Calculating formula '%s' with %s", formula.id, inputs)
        return self.matcher.calculate_formula(formula, inputs, output_unit).to_dict()

    def parse_text(self, text: str) -> List[Dict]:
        """Evaluate one expression per line of OCR text; failures are dropped."""
        return [
            {'expression': result.expression, 'result': result.result, 'unit': result.unit}
            for result in self.extractor.parse_from_ocr(text)
        ]

    def list_formulas(self, category: Optional[str] = None) -> List[Dict]:
        """Catalog formulas, optionally restricted to one category."""
        formulas = self.catalog.get_by_category(category) if category else tuple(self.catalog)
        return [formula.to_dict() for formula in formulas]

    async def process_image(self, image: ImageInput) -> Dict:
        """
        Recognize a calculator display or whiteboard photo.

        Returns:
            Dict with text, confidence, expression, result, engine and optional boxes

        Raises:
            RuntimeError: If no OCR coordinator was configured
            OCRError: If OCR fails on every engine
        """
        coordinator = self._require_coordinator()
        result = await coordinator.process_image(image)
        return result.to_dict()

    async def compare_engines(self, image: ImageInput) -> Dict[str, Dict]:
        """Run both OCR engines and report each result plus the recommended one."""
        coordinator = self._require_coordinator()
        results = await coordinator.process_with_both_engines(image)
        return {name: result.to_dict() for name, result in results.items()}

    def get_available_engines(self) -> List[str]:
        """OCR engines currently usable, in preference order."""
        if self.coordinator is None:
            return []
        return self.coordinator.get_available_engines()

    async def cleanup(self) -> None:
        """Release OCR backend resources."""
        if self.coordinator is not None:
            await self.coordinator.cleanup()

    def _require_coordinator(self) -> HybridOCRCoordinator:
        if self.coordinator is None:
            raise RuntimeError("Image processing requires an OCR coordinator")
        return self.coordinator
