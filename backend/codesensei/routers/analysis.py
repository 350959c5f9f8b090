"""
Mistake analysis route.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select
import logging

from ..constants import ANALYSIS_PROMPT
from ..database import get_db
from ..errors import ValidationError
from ..models.question import MistakeRecord
from ..models.user import User
from ..schemas.chat import ChatTurn, CompletionRequest
from ..schemas.question import AnalysisRequest, AnalysisResponse
from ..services.auth_service import AuthService
from ..services.llm_factory import ClientFactory, get_client_factory, resolve_provider_config
from ..utils.security import get_current_user


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analysis", tags=["Analysis"])


@router.post("", response_model=AnalysisResponse)
async def analyze_mistake(
    request: AnalysisRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    factory: ClientFactory = Depends(get_client_factory)
):
    """
    Generate a short Markdown report on a question answered wrong.

    With ``questionId`` the question must be in the caller's mistake log, and
    the report is saved on that entry.
    """
    record = None
    title = (request.question_title or "").strip()

    if request.question_id is not None:
        result = await db.execute(
            select(MistakeRecord)
            .options(selectinload(MistakeRecord.question))
            .filter(
                MistakeRecord.user_id == current_user.id,
                MistakeRecord.question_id == request.question_id
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise ValidationError("Question is not in the mistake log", field="questionId")
        title = title or record.question.title

    if not title:
        raise ValidationError("questionTitle is required", field="questionTitle")

    user_settings = await AuthService(db).get_user_settings(current_user.id)
    client = factory(resolve_provider_config(request, user_settings))

    response = await client.chat(CompletionRequest(
        messages=[ChatTurn(role="user", content=ANALYSIS_PROMPT.format(title=title))]
    ))

    if record is not None and response.content:
        record.ai_analysis = response.content
        await db.commit()
        logger.debug("Stored analysis on mistake record %s", record.id)

    return {"analysis": response.content}
