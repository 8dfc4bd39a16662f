# gpt_habits/schemas/survey.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from gpt_habits.schemas.common import CamelModel


class SurveySubmitIn(CamelModel):
    q1: str
    q2: str
    q3: str
    q4: str
    q5: str
    user_id: str


class SurveyResponseOut(CamelModel):
    id: UUID
    q1: str
    q2: str
    q3: str
    q4: str
    q5: str
    user_id: str
    created_at: datetime


class ChartItem(CamelModel):
    label: str
    value: int
    percentage: int
    color: Optional[str] = None


class StatsOut(CamelModel):
    total: int = 0
    q3_data: List[ChartItem] = Field(default_factory=list)
    q4_data: List[ChartItem] = Field(default_factory=list)
    q5_data: List[ChartItem] = Field(default_factory=list)
    daily_stats: List[ChartItem] = Field(default_factory=list)
