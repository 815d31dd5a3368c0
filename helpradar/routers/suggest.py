from fastapi import APIRouter, HTTPException
import logging
from helpradar.models.post import ClassificationSuggestion, SuggestRequest
from helpradar.services.keyword_classifier import classify

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("", response_model=ClassificationSuggestion)
async def suggest(body: SuggestRequest):
    """Suggest category and urgency while the author types"""
    if not body.title and not body.description:
        raise HTTPException(status_code=400, detail="Title or description is required")

    return classify(body.title or "", body.description or "")
