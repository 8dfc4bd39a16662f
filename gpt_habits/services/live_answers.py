# gpt_habits/services/live_answers.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gpt_habits.core.errors import InappropriateContent, TimeExpired
from gpt_habits.core.timeutils import utcnow
from gpt_habits.models.live import LiveAnswer
from gpt_habits.services.live_session import get_session_row, is_expired, require_session
from gpt_habits.services.moderation import is_inappropriate

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _find_answer(db: Session, session_id, user_id: str, question_number: int, fresh: bool = False) -> Optional[LiveAnswer]:
    q = db.query(LiveAnswer)
    if fresh:
        # el upsert va por Core: refresca lo que haya en el identity map
        q = q.populate_existing()
    return (
        q
        .filter(
            LiveAnswer.user_id == user_id,
            LiveAnswer.session_id == session_id,
            LiveAnswer.question_number == question_number,
        )
        .first()
    )


def _upsert_answer(db: Session, *, session_id, user_id: str, question_number: int, answer: str, now: datetime) -> None:
    """INSERT .. ON CONFLICT DO UPDATE sobre (user_id, session_id, question_number).

    Sólo cambian answer y submitted_at: id e is_favorited se conservan.
    """
    insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)
    if insert is not None:
        stmt = insert(LiveAnswer).values(
            id=uuid.uuid4(),
            user_id=user_id,
            question_number=question_number,
            answer=answer,
            submitted_at=now,
            session_id=session_id,
            is_favorited=False,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "session_id", "question_number"],
            set_={"answer": stmt.excluded.answer, "submitted_at": stmt.excluded.submitted_at},
        )
        db.execute(stmt)
        return

    # Otros motores: lookup + write, reintento si perdimos la carrera con el índice único
    for attempt in range(2):
        existing = _find_answer(db, session_id, user_id, question_number)
        if existing is not None:
            existing.answer = answer
            existing.submitted_at = now
            db.flush()
            return
        try:
            with db.begin_nested():
                db.add(LiveAnswer(
                    user_id=user_id,
                    question_number=question_number,
                    answer=answer,
                    submitted_at=now,
                    session_id=session_id,
                    is_favorited=False,
                ))
            return
        except IntegrityError:
            if attempt:
                raise


def submit_live_answer(
    db: Session,
    question_number: int,
    answer: str,
    user_id: str,
    now: Optional[datetime] = None,
) -> LiveAnswer:
    now = now or utcnow()
    s = require_session(db)

    if is_expired(s, now):
        logger.info("Late answer rejected: user=%s question=%s", user_id, question_number)
        raise TimeExpired()

    if is_inappropriate(answer):
        logger.info("Inappropriate answer rejected: user=%s question=%s", user_id, question_number)
        raise InappropriateContent()

    _upsert_answer(
        db,
        session_id=s.id,
        user_id=user_id,
        question_number=question_number,
        answer=answer,
        now=now,
    )
    return _find_answer(db, s.id, user_id, question_number, fresh=True)


# -------------------- consultas -------------------- #

def get_live_answers(db: Session, question_number: Optional[int] = None) -> list[LiveAnswer]:
    s = get_session_row(db)
    if s is None:
        return []
    qn = s.current_question if question_number is None else question_number
    stmt = (
        select(LiveAnswer)
        .where(LiveAnswer.session_id == s.id, LiveAnswer.question_number == qn)
        .order_by(LiveAnswer.submitted_at.asc())
    )
    return list(db.scalars(stmt).all())


def get_user_answer(db: Session, user_id: str, question_number: int) -> Optional[LiveAnswer]:
    s = get_session_row(db)
    if s is None:
        return None
    return _find_answer(db, s.id, user_id, question_number)
