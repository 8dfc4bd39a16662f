# gpt_habits/services/auto_advance.py
"""
Avance automático de preguntas en el servidor.

El admin ya no necesita tener la pestaña abierta para que la sesión avance:
una tarea asyncio, arrancada en el lifespan de FastAPI, revisa la sesión cada
LIVE_AUTO_ADVANCE_POLL_SECONDS y llama a next_question cuando la pregunta en
curso venció (timer + gracia + LIVE_AUTO_ADVANCE_DELAY_SECONDS).
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from gpt_habits.services.live_session import advance_if_expired

logger = logging.getLogger(__name__)


def run_tick(session_factory: Callable[[], Session], delay_seconds: int = 0) -> bool:
    """Una revisión, en su propia transacción."""
    with session_factory() as db:
        try:
            advanced = advance_if_expired(db, delay_seconds=delay_seconds)
            if advanced is not None:
                expired, s = advanced
                now_on, still_active = s.current_question, s.is_active
            db.commit()
        except Exception:
            db.rollback()
            raise
    if advanced is None:
        return False
    if still_active:
        logger.info("Auto-advance: question %s expired, moved to question %s", expired, now_on)
    else:
        logger.info("Auto-advance: question %s expired, it was the last one; session finished", expired)
    return True


async def auto_advance_loop(
    session_factory: Callable[[], Session],
    poll_seconds: float = 1.0,
    delay_seconds: int = 0,
) -> None:
    logger.info("Auto-advance loop started (poll=%ss, delay=%ss)", poll_seconds, delay_seconds)
    try:
        while True:
            try:
                await asyncio.to_thread(run_tick, session_factory, delay_seconds)
            except Exception:
                # Un tick fallido no detiene el loop; el siguiente reintenta
                logger.exception("Auto-advance tick failed")
            await asyncio.sleep(poll_seconds)
    except asyncio.CancelledError:
        logger.info("Auto-advance loop stopped")
        raise


def start_auto_advance(
    session_factory: Callable[[], Session],
    poll_seconds: float = 1.0,
    delay_seconds: int = 0,
) -> asyncio.Task:
    return asyncio.create_task(auto_advance_loop(session_factory, poll_seconds, delay_seconds))


async def stop_auto_advance(task: Optional[asyncio.Task]) -> None:
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
