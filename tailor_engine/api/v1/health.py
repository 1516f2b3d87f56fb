from fastapi import APIRouter

from tailor_engine.taxonomy import get_default_lexicon

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the tailoring engine.")
async def health_check():
    return {"status": "healthy", "lexicon_version": get_default_lexicon().version}
