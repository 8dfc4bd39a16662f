# gpt_habits/services/stats.py
from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from gpt_habits.core.config import settings
from gpt_habits.core.timeutils import as_utc, utcnow
from gpt_habits.models.survey_response import SurveyResponse
from gpt_habits.schemas.survey import ChartItem, StatsOut

# (label, color) en el orden en que los pinta el dashboard
Q3_OPTIONS = (("Yes", "#818cf8"), ("No", "#f472b6"), ("Sometimes", "#34d399"))
Q4_OPTIONS = ("1-3 times", "4-7 times", "8-15 times", "16-30 times", "30+ times")
Q5_OPTIONS = (("Yes", "#38bdf8"), ("No", "#fb7185"), ("Depends", "#c084fc"))

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
DAILY_WINDOW_DAYS = 7


def percentage(value: int, total: int) -> int:
    """Redondeo half-up (12.5 -> 13), igual que el dashboard."""
    if not total:
        return 0
    return int(math.floor(value * 100 / total + 0.5))


def _counts(db: Session, column) -> dict[str, int]:
    rows = db.execute(select(column, func.count()).group_by(column)).all()
    return {label: int(n) for label, n in rows}


def _chart(counts: dict[str, int], options, total: int) -> list[ChartItem]:
    items = []
    for opt in options:
        label, color = opt if isinstance(opt, tuple) else (opt, None)
        value = counts.get(label, 0)
        items.append(ChartItem(label=label, value=value, percentage=percentage(value, total), color=color))
    return items


def _daily(db: Session, total: int, now: datetime, tz: ZoneInfo) -> list[ChartItem]:
    """
    Histograma por día de la semana. Las etiquetas son los últimos 7 días (el más
    viejo primero, hoy al final); cada respuesta, sin importar su antigüedad, suma
    en la etiqueta de su día de la semana.
    """
    today = as_utc(now).astimezone(tz).date()
    labels = [WEEKDAYS[(today - timedelta(days=i)).weekday()] for i in range(DAILY_WINDOW_DAYS - 1, -1, -1)]
    buckets = {label: 0 for label in labels}

    for ts in db.scalars(select(SurveyResponse.created_at)).all():
        label = WEEKDAYS[as_utc(ts).astimezone(tz).weekday()]
        if label in buckets:
            buckets[label] += 1

    return [ChartItem(label=label, value=n, percentage=percentage(n, total)) for label, n in buckets.items()]


def get_stats(db: Session, now: Optional[datetime] = None) -> StatsOut:
    total = db.scalar(select(func.count(SurveyResponse.id))) or 0
    if total == 0:
        return StatsOut()

    tz = ZoneInfo(settings.STATS_TIMEZONE)
    return StatsOut(
        total=total,
        q3_data=_chart(_counts(db, SurveyResponse.q3), Q3_OPTIONS, total),
        q4_data=_chart(_counts(db, SurveyResponse.q4), Q4_OPTIONS, total),
        q5_data=_chart(_counts(db, SurveyResponse.q5), Q5_OPTIONS, total),
        daily_stats=_daily(db, total, now or utcnow(), tz),
    )
