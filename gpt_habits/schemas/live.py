# gpt_habits/schemas/live.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from gpt_habits.schemas.common import CamelModel

LAST_QUESTION = 4


class LiveSessionOut(CamelModel):
    id: UUID
    current_question: int
    is_active: bool
    question_start_time: Optional[datetime] = None
    timer_duration: int
    session_start_time: Optional[datetime] = None
    time_remaining: int = 0  # ms, calculado en cada lectura


class StartSessionOut(CamelModel):
    session_id: UUID


class StartQuestionIn(CamelModel):
    question_number: int = Field(..., ge=0, le=LAST_QUESTION)


class SubmitLiveAnswerIn(CamelModel):
    question_number: int = Field(..., ge=0, le=LAST_QUESTION)
    answer: str
    user_id: str


class LiveAnswerOut(CamelModel):
    id: UUID
    user_id: str
    question_number: int
    answer: str
    submitted_at: datetime
    session_id: UUID
    is_favorited: bool = False


class FavoriteOut(CamelModel):
    id: UUID
    is_favorited: bool


class DeleteAnswerOut(CamelModel):
    id: UUID
    deleted: bool
