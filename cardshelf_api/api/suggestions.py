"""Title suggestion endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..core import SuggestionClient, SuggestionError, SuggestionsNotConfigured
from ..models import Suggestion

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/suggestions", tags=["suggestions"])


def get_suggestion_client(request: Request) -> SuggestionClient:
    """Dependency returning the SuggestionClient built at start-up."""
    return request.app.state.suggestions


@router.get("", response_model=list[Suggestion])
async def get_suggestions(
    query: str = Query(..., min_length=1, description="Partial title to search for"),
    client: SuggestionClient = Depends(get_suggestion_client),
) -> list[Suggestion]:
    """Search the RAWG catalogue for titles to pre-fill a new card."""
    query = query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Missing query parameter")

    try:
        return await client.search(query)
    except SuggestionsNotConfigured as e:
        logger.error("RAWG_API_KEY is not configured")
        raise HTTPException(status_code=500, detail=str(e)) from e
    except SuggestionError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
