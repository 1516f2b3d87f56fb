from datetime import date

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, Field

from tailor_engine.core.config import settings
from tailor_engine.core.rate_limit import rate_limit
from tailor_engine.schemas import AnalysisResult, JobPosting, ResumeDocument, TailoringOptions
from tailor_engine.services.tailoring_service import TailoringValidationError, analyze

router = APIRouter()


class TailorAnalyzeRequest(BaseModel):
    resume: ResumeDocument
    posting: JobPosting
    options: TailoringOptions = Field(default_factory=TailoringOptions)
    reference_date: date | None = None


@router.post("/tailor/analyze", response_model=AnalysisResult)
@rate_limit(settings.analyze_rate_limit)
def tailor_analyze(request: Request, payload: TailorAnalyzeRequest) -> AnalysisResult:
    _ = request
    try:
        return analyze(
            payload.resume,
            payload.posting,
            options=payload.options,
            reference_date=payload.reference_date,
        )
    except TailoringValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"field": exc.field, "message": exc.message},
        ) from exc
