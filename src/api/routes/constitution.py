"""Constitution API.

The constitution is a singleton governance document appended to every
agent prompt and used by document validation.
"""

import logging

from fastapi import APIRouter

from src.api.schemas import ConstitutionBody, SuccessFlag
from src.dal import AppSettingsRepository
from src.storage import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/constitution", tags=["Constitution"])


@router.get("", response_model=ConstitutionBody)
async def get_constitution() -> ConstitutionBody:
    """Current constitution; empty when never saved."""
    async with get_session() as session:
        content = await AppSettingsRepository(session).get_constitution()
    return ConstitutionBody(content=content)


@router.put("", response_model=SuccessFlag)
async def save_constitution(body: ConstitutionBody) -> SuccessFlag:
    """Overwrite the constitution."""
    async with get_session() as session:
        await AppSettingsRepository(session).set_constitution(body.content or "")
        await session.commit()
    return SuccessFlag(success=True)
