"""
Pydantic schemas for API request/response validation.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class QueryContext(BaseModel):
    """Optional hints accompanying a conversational query."""
    discipline: Optional[str] = None
    preferred_units: Optional[str] = None
    complexity: Optional[str] = None


class AnalyzeRequest(BaseModel):
    """Request body for query analysis."""
    query: str
    context: Optional[QueryContext] = None


class SuggestionsRequest(BaseModel):
    """Request body for whiteboard/canvas suggestions."""
    text: str


class CalculateRequest(BaseModel):
    """Request body for formula execution."""
    formula_id: str
    inputs: Dict[str, float] = Field(default_factory=dict)
    output_unit: Optional[str] = None


class SuggestionResponse(BaseModel):
    """Response for one ranked suggestion."""
    id: str
    type: str
    title: str
    description: str
    expression: str
    result: Optional[float] = None
    confidence: float
    reasoning: str
    category: str
    formula_id: Optional[str] = None
    calculation: Optional[str] = None
    examples: Optional[List[str]] = None


class CalculationStepResponse(BaseModel):
    """Response for one step of a formula trace."""
    description: str
    equation: str
    result: float
    unit: Optional[str] = None


class CalculationResponse(BaseModel):
    """Response for formula execution."""
    result: float
    unit: str
    steps: List[CalculationStepResponse]
    formula_id: str
    confidence: float


class OCRResultResponse(BaseModel):
    """Response for image processing."""
    text: str
    confidence: float
    expression: Optional[str] = None
    result: Optional[float] = None
    engine: str
    boxes: Optional[List[List[int]]] = None


class EnginesResponse(BaseModel):
    """Response listing OCR engines."""
    engines: List[str]
    preferred: Optional[str] = None
