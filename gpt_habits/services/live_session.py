# gpt_habits/services/live_session.py
"""
Máquina de estados de la sesión en vivo.

Estados: sin sesión -> lobby (current_question = -1) -> pregunta k corriendo
(0..4) -> terminada (is_active = False). Sólo existe una fila en live_session
(slot 'main'); todas las transiciones operan sobre ella.

El tiempo restante nunca se guarda: se recalcula en cada lectura contra el
reloj, así que cualquier lector ve el mismo valor sin importar la latencia.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gpt_habits.core.config import settings
from gpt_habits.core.errors import NoActiveSession, NotFound
from gpt_habits.core.timeutils import elapsed_ms, utcnow
from gpt_habits.models.live import SESSION_SLOT, LiveAnswer, LiveSession
from gpt_habits.schemas.live import LAST_QUESTION, LiveSessionOut

logger = logging.getLogger(__name__)

LOBBY = -1
GRACE_PERIOD_MS = 2000


# -------------------- helpers -------------------- #

def get_session_row(db: Session, *, lock: bool = False) -> Optional[LiveSession]:
    q = db.query(LiveSession).filter(LiveSession.slot == SESSION_SLOT)
    if lock:
        # Serializa transiciones concurrentes (dos 'next' a la vez) en Postgres.
        # populate_existing: lo que ya estaba en el identity map puede ser viejo
        q = q.with_for_update().populate_existing()
    return q.first()


def require_session(db: Session, *, lock: bool = False) -> LiveSession:
    s = get_session_row(db, lock=lock)
    if s is None:
        raise NoActiveSession()
    return s


def _get_or_create_session(db: Session, **defaults) -> tuple[LiveSession, bool]:
    """Devuelve (sesión, creada). Debe llamarse antes de cualquier otra escritura de la transacción."""
    s = get_session_row(db, lock=True)
    if s is not None:
        return s, False
    s = LiveSession(slot=SESSION_SLOT, **defaults)
    db.add(s)
    try:
        db.flush()
    except IntegrityError:
        # Otro proceso creó el slot entre el SELECT y el INSERT
        db.rollback()
        return require_session(db, lock=True), False
    return s, True


def time_remaining_ms(session: LiveSession, now: Optional[datetime] = None) -> int:
    if session.question_start_time and session.is_active and session.current_question >= 0:
        now = now or utcnow()
        return max(0, session.timer_duration * 1000 - elapsed_ms(session.question_start_time, now))
    return 0


def is_expired(session: LiveSession, now: Optional[datetime] = None, extra_ms: int = 0) -> bool:
    """True cuando la pregunta en curso superó timer + gracia (+ extra_ms)."""
    if not (session.is_active and session.question_start_time):
        return False
    now = now or utcnow()
    limit = session.timer_duration * 1000 + GRACE_PERIOD_MS + extra_ms
    return elapsed_ms(session.question_start_time, now) > limit


# -------------------- transiciones -------------------- #

def start_session(db: Session, now: Optional[datetime] = None) -> UUID:
    """Deja la sesión en el lobby. No borra respuestas de rondas anteriores."""
    now = now or utcnow()
    fields = dict(
        current_question=LOBBY,
        is_active=True,
        question_start_time=None,
        timer_duration=settings.LIVE_TIMER_SECONDS,
        session_start_time=now,
    )
    s, created = _get_or_create_session(db, **fields)
    if not created:
        for k, v in fields.items():
            setattr(s, k, v)
        db.flush()
    logger.info("Live session %s started (created=%s)", s.id, created)
    return s.id


def start_question(db: Session, question_number: int, now: Optional[datetime] = None) -> LiveSession:
    s = require_session(db, lock=True)
    s.current_question = question_number
    s.question_start_time = now or utcnow()
    db.flush()
    logger.info("Live session %s: question %s started", s.id, question_number)
    return s


def next_question(db: Session, now: Optional[datetime] = None) -> LiveSession:
    s = require_session(db, lock=True)

    # Las favoritas sobreviven al cambio de pregunta
    if s.current_question >= 0:
        purged = (
            db.query(LiveAnswer)
            .filter(
                LiveAnswer.session_id == s.id,
                LiveAnswer.question_number == s.current_question,
                LiveAnswer.is_favorited.is_(False),
            )
            .delete(synchronize_session="fetch")
        )
        logger.info("Live session %s: purged %s answers of question %s", s.id, purged, s.current_question)

    nxt = s.current_question + 1
    if nxt > LAST_QUESTION:
        s.is_active = False
        s.current_question = LAST_QUESTION
        logger.info("Live session %s finished after last question", s.id)
    else:
        s.current_question = nxt
        s.question_start_time = now or utcnow()
        logger.info("Live session %s: advanced to question %s", s.id, nxt)
    db.flush()
    return s


def end_session(db: Session) -> LiveSession:
    s = require_session(db, lock=True)
    if s.is_active or s.question_start_time is not None:
        s.is_active = False
        s.question_start_time = None
        db.flush()
        logger.info("Live session %s ended", s.id)
    return s


def get_live_session(db: Session, now: Optional[datetime] = None) -> Optional[LiveSessionOut]:
    s = get_session_row(db)
    if s is None:
        return None
    out = LiveSessionOut.model_validate(s)
    out.time_remaining = time_remaining_ms(s, now)
    return out


def advance_if_expired(
    db: Session, now: Optional[datetime] = None, delay_seconds: int = 0
) -> Optional[tuple[int, LiveSession]]:
    """
    Avance automático: pasa a la siguiente pregunta cuando la actual venció (con gracia).
    Devuelve (pregunta vencida, sesión ya avanzada) o None si no había nada que hacer.

    La decisión se toma sobre la fila bloqueada y recién leída: si un admin hizo
    reset / start_question / end_session mientras tanto, se evalúa su estado, no el viejo.
    """
    now = now or utcnow()
    s = get_session_row(db, lock=True)
    if s is None or s.current_question < 0:
        return None
    if not is_expired(s, now, extra_ms=delay_seconds * 1000):
        return None
    expired = s.current_question
    return expired, next_question(db, now=now)


# -------------------- moderación / curaduría -------------------- #

def toggle_favorite(db: Session, answer_id: UUID) -> LiveAnswer:
    a = db.get(LiveAnswer, answer_id)
    if a is None:
        raise NotFound()
    a.is_favorited = not a.is_favorited
    db.flush()
    return a


def delete_answer(db: Session, answer_id: UUID) -> bool:
    """Borrado idempotente: un id inexistente no es error. Devuelve si se borró algo."""
    a = db.get(LiveAnswer, answer_id)
    if a is None:
        return False
    db.delete(a)
    db.flush()
    return True


def reset_game(db: Session, now: Optional[datetime] = None) -> LiveSession:
    """Borra todas las respuestas no favoritas y salta directo a la pregunta 1."""
    now = now or utcnow()
    s, created = _get_or_create_session(
        db,
        current_question=0,
        is_active=True,
        question_start_time=now,
        timer_duration=settings.LIVE_TIMER_SECONDS,
        session_start_time=now,
    )
    if not created:
        s.current_question = 0
        s.question_start_time = now
        s.is_active = True

    purged = (
        db.query(LiveAnswer)
        .filter(LiveAnswer.is_favorited.is_(False))
        .delete(synchronize_session="fetch")
    )
    db.flush()
    logger.info("Live game reset: purged %s answers, session %s back to question 1", purged, s.id)
    return s
