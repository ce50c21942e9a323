"""Decision framework API.

Recommends SDDD tools and methodologies from questionnaire answers.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.api.rate_limit import LLM_LIMIT, limiter
from src.api.routes.documents import PARSE_STATUS_HEADER
from src.api.schemas import RecommendRequest
from src.services.review import ReviewService
from src.storage import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/decision-framework", tags=["Decision Framework"])


@router.post("/recommend")
@limiter.limit(LLM_LIMIT)
async def recommend(request: Request, body: RecommendRequest) -> JSONResponse:
    """Ranked tool recommendations for the described project.

    Rate limited to 10/minute (LLM-backed).
    """
    async with get_session() as session:
        result = await ReviewService(session).recommend_framework(body.answers)
    return JSONResponse(
        content=result.data,
        headers={PARSE_STATUS_HEADER: "ok" if result.ok else "failed"},
    )
