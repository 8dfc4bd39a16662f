# gpt_habits/services/survey.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from gpt_habits.core.timeutils import utcnow
from gpt_habits.models.live import LiveAnswer
from gpt_habits.models.survey_response import SurveyResponse
from gpt_habits.schemas.survey import SurveySubmitIn
from gpt_habits.services.live_session import LOBBY, get_session_row

logger = logging.getLogger(__name__)

RECENT_LIMIT = 300


def submit_survey(db: Session, data: SurveySubmitIn, now: Optional[datetime] = None) -> SurveyResponse:
    r = SurveyResponse(
        q1=data.q1,
        q2=data.q2,
        q3=data.q3,
        q4=data.q4,
        q5=data.q5,
        user_id=data.user_id,
        created_at=now or utcnow(),
    )
    db.add(r)
    db.flush()
    return r


def get_recent(db: Session, limit: int = RECENT_LIMIT) -> list[SurveyResponse]:
    stmt = select(SurveyResponse).order_by(SurveyResponse.created_at.desc()).limit(limit)
    return list(db.scalars(stmt).all())


def clear_all(db: Session) -> dict[str, int]:
    """Borra TODO (favoritas incluidas) y deja la sesión apagada en el lobby."""
    n_responses = db.execute(delete(SurveyResponse)).rowcount or 0
    n_live = db.execute(delete(LiveAnswer)).rowcount or 0

    s = get_session_row(db, lock=True)
    if s is not None:
        s.current_question = LOBBY
        s.is_active = False
        s.question_start_time = None
    db.flush()

    logger.warning("All data cleared: %s responses, %s live answers", n_responses, n_live)
    return {"responses": n_responses, "live_answers": n_live}
