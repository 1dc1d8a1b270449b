"""
Calculation API for the snap-a-calculator workflow.

Provides endpoints for:
- Conversational query analysis
- Whiteboard/canvas suggestions
- Engineering formula execution
- Calculator display / whiteboard photo OCR
"""
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, UploadFile

from api.dependencies import get_calculation_service
from api.schemas import (
    AnalyzeRequest,
    CalculateRequest,
    CalculationResponse,
    EnginesResponse,
    OCRResultResponse,
    SuggestionResponse,
    SuggestionsRequest,
)
from config.settings import settings
from core.exceptions import OCRProcessingError, OCRUnavailableError
from services.calculation_service import CalculationService
from utils.image_utils import load_image

logger = logging.getLogger(__name__)


# Create FastAPI app
calc_app = FastAPI(
    title="SnapCalc API",
    description="Expression recovery, engineering formulas and hybrid OCR for calculator photos",
    version="1.0.0"
)


@calc_app.on_event("startup")
async def startup_event():
    """Configure logging on startup."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logger.info("Calculation API initialized")


@calc_app.on_event("shutdown")
async def shutdown_event():
    """Release OCR backends."""
    await get_calculation_service().cleanup()


@calc_app.post("/analyze", response_model=List[SuggestionResponse])
async def analyze_query(
    request: AnalyzeRequest,
    service: CalculationService = Depends(get_calculation_service)
):
    """
    Ranked recommendations for a conversational engineering query.

    Args:
        request: Query text and optional context

    Returns:
        Up to 8 suggestions, highest confidence first
    """
    context = request.context.model_dump() if request.context else None
    return service.analyze_query(request.query, context)


@calc_app.post("/suggestions", response_model=List[SuggestionResponse])
async def generate_suggestions(
    request: SuggestionsRequest,
    service: CalculationService = Depends(get_calculation_service)
):
    """Up to 10 suggestions for recognized whiteboard text."""
    return service.generate_suggestions(request.text)


@calc_app.post("/calculate", response_model=CalculationResponse)
async def calculate_formula(
    request: CalculateRequest,
    service: CalculationService = Depends(get_calculation_service)
):
    """
    Execute a catalog formula with the given inputs.

    Failed evaluations are returned with confidence 0, not as errors.
    """
    try:
        return service.calculate_formula(
            inputs=request.inputs,
            formula_id=request.formula_id,
            output_unit=request.output_unit
        )
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@calc_app.get("/formulas")
async def list_formulas(
    category: Optional[str] = Query(None, description="Restrict to one category"),
    service: CalculationService = Depends(get_calculation_service)
):
    """List catalog formulas."""
    return {"formulas": service.list_formulas(category)}


@calc_app.post("/process-image")
async def process_image(
    file: UploadFile = File(...),
    both_engines: bool = Query(False, description="Run both engines and report each result"),
    service: CalculationService = Depends(get_calculation_service)
):
    """
    Recognize a calculator display or whiteboard photo.

    Args:
        file: Image file
        both_engines: Diagnostic mode comparing both OCR engines

    Returns:
        OCR result with extracted expression and value, or one result per
        engine plus ``recommended`` in diagnostic mode
    """
    content = await file.read()
    try:
        load_image(content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid image: {str(e)}")

    try:
        if both_engines:
            return await service.compare_engines(content)
        return OCRResultResponse(**await service.process_image(content))
    except OCRUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except OCRProcessingError as e:
        raise HTTPException(status_code=502, detail=str(e))


@calc_app.get("/engines", response_model=EnginesResponse)
async def list_engines(service: CalculationService = Depends(get_calculation_service)):
    """OCR engines currently usable, in preference order."""
    coordinator = service.coordinator
    return EnginesResponse(
        engines=service.get_available_engines(),
        preferred=coordinator.preferred_engine if coordinator else None
    )


@calc_app.get("/")
async def root():
    """API information."""
    return {
        "name": "SnapCalc API",
        "version": "1.0.0",
        "endpoints": {
            "analyze": "POST /analyze",
            "suggestions": "POST /suggestions",
            "calculate": "POST /calculate",
            "formulas": "GET /formulas",
            "process_image": "POST /process-image",
            "engines": "GET /engines"
        }
    }


# Export app for uvicorn
app = calc_app
