"""
Core domain models for the calculation engine.

These are pure data structures without business logic.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple


class OCREngine(str, Enum):
    """Tag identifying the OCR backend that produced a reading."""
    VLLM = "vllm"
    TESSERACT = "tesseract"


class EngineState(str, Enum):
    """Readiness of a single OCR backend."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class SuggestionType(str, Enum):
    """Kind of rule that produced a suggestion."""
    CORRECTION = "correction"
    ALTERNATIVE = "alternative"
    UNIT_CONVERSION = "unit_conversion"
    FORMULA = "formula_suggestion"
    CONSTANT = "constant"
    EXPLANATION = "explanation"


@dataclass(frozen=True)
class OCRReading:
    """Output of one OCR attempt."""
    text: str
    confidence: float
    engine: OCREngine
    boxes: Optional[Tuple[Tuple[int, int, int, int], ...]] = None


@dataclass(frozen=True)
class CalculationResult:
    """Outcome of evaluating one expression.

    ``result`` is None if and only if evaluation failed or the expression
    was rejected by the safety check.
    """
    expression: str
    result: Optional[float]
    confidence: float
    error: Optional[str] = None
    unit: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    @classmethod
    def failure(cls, expression: str, error: str) -> "CalculationResult":
        return cls(expression=expression, result=None, confidence=0.0, error=error)


@dataclass(frozen=True)
class Variable:
    """A symbol used inside an engineering formula."""
    symbol: str
    name: str
    description: str
    unit: str
    default_value: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None


@dataclass(frozen=True)
class UnitSystem:
    """Conversion table for a formula output in one unit system."""
    system: str  # 'metric', 'imperial' or 'both'
    base_unit: str
    conversions: Mapping[str, float] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, 'conversions', MappingProxyType(dict(self.conversions)))


@dataclass(frozen=True)
class FormulaExample:
    """Worked example: input bindings and the expected output."""
    description: str
    inputs: Mapping[str, float] = field(hash=False)
    expected_output: float
    output_unit: str

    def __post_init__(self):
        object.__setattr__(self, 'inputs', MappingProxyType(dict(self.inputs)))


@dataclass(frozen=True)
class EngineeringFormula:
    """Static catalog entry."""
    id: str
    name: str
    formula: str
    description: str
    category: str
    variables: Tuple[Variable, ...]
    units: Tuple[UnitSystem, ...] = ()
    examples: Tuple[FormulaExample, ...] = ()
    tags: Tuple[str, ...] = ()

    def get_variable(self, symbol: str) -> Optional[Variable]:
        """Find a variable by symbol."""
        for variable in self.variables:
            if variable.symbol == symbol:
                return variable
        return None

    @property
    def search_text(self) -> str:
        """Lower-cased name, description and tags used for keyword scoring."""
        return f"{self.name} {self.description} {' '.join(self.tags)}".lower()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'formula': self.formula,
            'description': self.description,
            'category': self.category,
            'variables': [
                {
                    'symbol': v.symbol,
                    'name': v.name,
                    'description': v.description,
                    'unit': v.unit,
                    'default_value': v.default_value,
                    'min_value': v.min_value,
                    'max_value': v.max_value,
                }
                for v in self.variables
            ],
            'units': [
                {'system': u.system, 'base_unit': u.base_unit, 'conversions': dict(u.conversions)}
                for u in self.units
            ],
            'examples': [
                {
                    'description': e.description,
                    'inputs': dict(e.inputs),
                    'expected_output': e.expected_output,
                    'output_unit': e.output_unit,
                }
                for e in self.examples
            ],
            'tags': list(self.tags),
        }


@dataclass(frozen=True)
class Suggestion:
    """A single proposed action for the user."""
    type: SuggestionType
    title: str
    description: str
    expression: str
    result: Optional[float]
    confidence: float
    reasoning: str
    category: str
    formula: Optional[EngineeringFormula] = None
    calculation: Optional[str] = None
    examples: Tuple[str, ...] = ()
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> dict:
        """Convert to the JSON shape returned to callers."""
        data = {
            'id': self.id,
            'type': self.type.value,
            'title': self.title,
            'description': self.description,
            'expression': self.expression,
            'result': self.result,
            'confidence': self.confidence,
            'reasoning': self.reasoning,
            'category': self.category,
        }
        if self.formula is not None:
            data['formula_id'] = self.formula.id
        if self.calculation:
            data['calculation'] = self.calculation
        if self.examples:
            data['examples'] = list(self.examples)
        return data


@dataclass
class CalculationStep:
    """One line of a formula evaluation trace."""
    description: str
    equation: str
    result: float
    unit: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        data = {
            'description': self.description,
            'equation': self.equation,
            'result': self.result,
        }
        if self.unit is not None:
            data['unit'] = self.unit
        return data


@dataclass
class CalculationResponse:
    """Result of executing a formula with bound inputs.

    Failures carry ``confidence == 0`` and a single error step.
    """
    result: float
    unit: str
    steps: List[CalculationStep]
    formula: EngineeringFormula
    confidence: float

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'result': self.result,
            'unit': self.unit,
            'steps': [step.to_dict() for step in self.steps],
            'formula_id': self.formula.id,
            'confidence': self.confidence,
        }


@dataclass
class HybridOCRResult:
    """Single chosen OCR outcome for one image."""
    text: str
    confidence: float
    expression: Optional[str]
    result: Optional[float]
    engine: OCREngine
    boxes: Optional[List[List[int]]] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        data = {
            'text': self.text,
            'confidence': self.confidence,
            'expression': self.expression,
            'result': self.result,
            'engine': self.engine.value,
        }
        if self.boxes is not None:
            data['boxes'] = self.boxes
        return data
