# gpt_habits/services/exports.py
from __future__ import annotations

import csv
import io
from io import BytesIO
from typing import Iterator
from zoneinfo import ZoneInfo

from openpyxl import Workbook
from sqlalchemy import select
from sqlalchemy.orm import Session

from gpt_habits.core.timeutils import as_utc
from gpt_habits.models.live import LiveAnswer
from gpt_habits.models.survey_response import SurveyResponse
from gpt_habits.services.stats import get_stats

RESPONSE_HEADERS = ["id", "user_id", "created_at", "q1", "q2", "q3", "q4", "q5"]
LIVE_HEADERS = ["id", "session_id", "question", "user_id", "answer", "submitted_at", "favorited"]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _local(ts, tz: ZoneInfo) -> str:
    return as_utc(ts).astimezone(tz).strftime("%Y-%m-%d %H:%M:%S")


def _responses(db: Session):
    return db.scalars(select(SurveyResponse).order_by(SurveyResponse.created_at.asc())).all()


def iter_responses_csv(db: Session, tz: str = "UTC") -> Iterator[str]:
    zone = ZoneInfo(tz)
    rows = _responses(db)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(RESPONSE_HEADERS); yield output.getvalue(); output.seek(0); output.truncate(0)

    for r in rows:
        writer.writerow([str(r.id), r.user_id, _local(r.created_at, zone), r.q1, r.q2, r.q3, r.q4, r.q5])
        yield output.getvalue(); output.seek(0); output.truncate(0)


def build_workbook(db: Session, tz: str = "UTC") -> bytes:
    """Libro con hojas Resumen, Respuestas y En vivo."""
    zone = ZoneInfo(tz)
    stats = get_stats(db)

    wb = Workbook()
    ws = wb.active
    ws.title = "Resumen"
    ws.append(["total", stats.total])
    for title, items in (
        ("q3", stats.q3_data),
        ("q4", stats.q4_data),
        ("q5", stats.q5_data),
        ("daily", stats.daily_stats),
    ):
        ws.append([])
        ws.append([title, "value", "percentage"])
        for it in items:
            ws.append([it.label, it.value, it.percentage])

    ws_r = wb.create_sheet("Respuestas")
    ws_r.append(RESPONSE_HEADERS)
    for r in _responses(db):
        ws_r.append([str(r.id), r.user_id, _local(r.created_at, zone), r.q1, r.q2, r.q3, r.q4, r.q5])

    ws_l = wb.create_sheet("En vivo")
    ws_l.append(LIVE_HEADERS)
    live = db.scalars(
        select(LiveAnswer).order_by(LiveAnswer.question_number.asc(), LiveAnswer.submitted_at.asc())
    ).all()
    for a in live:
        ws_l.append([
            str(a.id), str(a.session_id), a.question_number + 1, a.user_id, a.answer,
            _local(a.submitted_at, zone), bool(a.is_favorited),
        ])

    buf = BytesIO(); wb.save(buf)
    return buf.getvalue()
