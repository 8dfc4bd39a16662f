# gpt_habits/api/v1/endpoints/live.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from gpt_habits.api.deps.admin import require_admin
from gpt_habits.db.session import get_db
from gpt_habits.schemas.common import OkOut
from gpt_habits.schemas.live import (
    LAST_QUESTION,
    LiveAnswerOut,
    LiveSessionOut,
    StartQuestionIn,
    StartSessionOut,
    SubmitLiveAnswerIn,
)
from gpt_habits.services import live_answers, live_session
from gpt_habits.services.audit import audit_log

router = APIRouter(prefix="/live", tags=["live"])


# ----------------------- sesión (admin) -----------------------

@router.post("/session/start", response_model=StartSessionOut)
def start_session(request: Request, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    session_id = live_session.start_session(db)
    audit_log(db, accion="live.session.start", payload={"session_id": str(session_id)}, request=request)
    return StartSessionOut(session_id=session_id)


@router.post("/session/question", response_model=OkOut)
def start_question(
    payload: StartQuestionIn,
    request: Request,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    live_session.start_question(db, payload.question_number)
    audit_log(db, accion="live.question.start", payload={"question": payload.question_number}, request=request)
    return OkOut()


@router.post("/session/next", response_model=OkOut)
def next_question(request: Request, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    s = live_session.next_question(db)
    audit_log(
        db,
        accion="live.question.next",
        payload={"question": s.current_question, "is_active": s.is_active},
        request=request,
    )
    return OkOut()


@router.post("/session/end", response_model=OkOut)
def end_session(request: Request, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    live_session.end_session(db)
    audit_log(db, accion="live.session.end", request=request)
    return OkOut()


# ----------------------- público -----------------------

@router.get("/session", response_model=Optional[LiveSessionOut])
def get_live_session(db: Session = Depends(get_db)):
    """Sesión actual + timeRemaining (ms) calculado al momento; null si nunca se abrió."""
    return live_session.get_live_session(db)


@router.post("/answers", response_model=LiveAnswerOut)
def submit_live_answer(payload: SubmitLiveAnswerIn, db: Session = Depends(get_db)):
    return live_answers.submit_live_answer(
        db,
        question_number=payload.question_number,
        answer=payload.answer,
        user_id=payload.user_id,
    )


@router.get("/answers", response_model=list[LiveAnswerOut])
def get_live_answers(
    question_number: Optional[int] = Query(None, alias="questionNumber", ge=0, le=LAST_QUESTION),
    db: Session = Depends(get_db),
):
    return live_answers.get_live_answers(db, question_number)


@router.get("/answers/mine", response_model=Optional[LiveAnswerOut])
def get_user_answer(
    user_id: str = Query(..., alias="userId"),
    question_number: int = Query(..., alias="questionNumber", ge=0, le=LAST_QUESTION),
    db: Session = Depends(get_db),
):
    return live_answers.get_user_answer(db, user_id, question_number)
