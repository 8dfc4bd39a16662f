"""
Máquina de estados de la sesión en vivo (start / question / next / end / reset / curaduría).
"""
import uuid
from datetime import timedelta

import pytest

from conftest import T0
from gpt_habits.core.errors import NoActiveSession, NotFound
from gpt_habits.core.timeutils import as_utc
from gpt_habits.models.live import LiveAnswer, LiveSession
from gpt_habits.services import live_answers, live_session


def _answers(db):
    return db.query(LiveAnswer).all()


def test_no_session_reads_as_none(db):
    assert live_session.get_live_session(db) is None


def test_start_session_goes_to_lobby(db):
    sid = live_session.start_session(db, now=T0)
    out = live_session.get_live_session(db, now=T0 + timedelta(seconds=5))

    assert out.id == sid
    assert out.current_question == -1
    assert out.is_active is True
    assert out.question_start_time is None
    assert out.timer_duration == 30
    assert as_utc(out.session_start_time) == T0
    assert out.time_remaining == 0


def test_start_session_reuses_the_single_row(db):
    first = live_session.start_session(db, now=T0)
    live_session.start_question(db, 2, now=T0)
    second = live_session.start_session(db, now=T0 + timedelta(minutes=5))

    assert first == second
    assert db.query(LiveSession).count() == 1
    s = live_session.get_session_row(db)
    assert s.current_question == -1
    assert s.question_start_time is None


def test_start_session_keeps_leftover_answers(db):
    live_session.start_session(db, now=T0)
    live_session.start_question(db, 0, now=T0)
    live_answers.submit_live_answer(db, 0, "Debugging code", "u1", now=T0)

    live_session.start_session(db, now=T0 + timedelta(minutes=1))

    assert len(_answers(db)) == 1


@pytest.mark.parametrize("op", [
    lambda db: live_session.start_question(db, 0, now=T0),
    lambda db: live_session.next_question(db, now=T0),
    lambda db: live_session.end_session(db),
])
def test_transitions_require_a_session(db, op):
    with pytest.raises(NoActiveSession):
        op(db)


def test_time_remaining_counts_down_from_question_start(db):
    live_session.start_session(db, now=T0)
    live_session.start_question(db, 0, now=T0)

    assert live_session.get_live_session(db, now=T0).time_remaining == 30000
    assert live_session.get_live_session(db, now=T0 + timedelta(seconds=10)).time_remaining == 20000
    assert live_session.get_live_session(db, now=T0 + timedelta(seconds=45)).time_remaining == 0


def test_time_remaining_is_zero_once_session_ended(db):
    live_session.start_session(db, now=T0)
    live_session.start_question(db, 1, now=T0)
    live_session.end_session(db)

    out = live_session.get_live_session(db, now=T0 + timedelta(seconds=1))
    assert out.is_active is False
    assert out.question_start_time is None
    assert out.time_remaining == 0


def test_end_session_twice_is_a_no_op(db):
    live_session.start_session(db, now=T0)
    live_session.start_question(db, 3, now=T0)
    live_session.end_session(db)
    before = live_session.get_live_session(db, now=T0)

    live_session.end_session(db)
    after = live_session.get_live_session(db, now=T0)

    assert before == after


def test_next_question_purges_only_unfavorited_answers_of_current_question(db):
    live_session.start_session(db, now=T0)
    live_session.start_question(db, 0, now=T0)
    keep = live_answers.submit_live_answer(db, 0, "Recipes", "u1", now=T0)
    live_answers.submit_live_answer(db, 0, "Emails", "u2", now=T0)
    other_q = live_answers.submit_live_answer(db, 1, "Homework", "u3", now=T0)
    live_session.toggle_favorite(db, keep.id)

    s = live_session.next_question(db, now=T0 + timedelta(seconds=40))

    remaining = {a.id for a in _answers(db)}
    assert remaining == {keep.id, other_q.id}
    assert s.current_question == 1
    assert as_utc(s.question_start_time) == T0 + timedelta(seconds=40)


def test_next_question_keeps_favorites_from_every_question(db):
    live_session.start_session(db, now=T0)
    favs = []
    for q in range(5):
        live_session.start_question(db, q, now=T0)
        a = live_answers.submit_live_answer(db, q, f"answer {q}", "u1", now=T0)
        live_session.toggle_favorite(db, a.id)
        favs.append(a.id)
        live_answers.submit_live_answer(db, q, "meh", "u2", now=T0)
        live_session.next_question(db, now=T0)

    assert {a.id for a in _answers(db)} == set(favs)


def test_next_question_from_lobby_starts_first_question(db):
    live_session.start_session(db, now=T0)
    s = live_session.next_question(db, now=T0)
    assert s.current_question == 0
    assert s.is_active is True


def test_next_question_past_last_question_ends_session(db):
    live_session.start_session(db, now=T0)
    live_session.start_question(db, 4, now=T0)

    s = live_session.next_question(db, now=T0 + timedelta(seconds=31))

    assert s.is_active is False
    assert s.current_question == 4
    assert live_session.get_live_session(db, now=T0).time_remaining == 0


def test_toggle_favorite_flips_flag(db):
    live_session.start_session(db, now=T0)
    live_session.start_question(db, 0, now=T0)
    a = live_answers.submit_live_answer(db, 0, "Travel plans", "u1", now=T0)

    assert live_session.toggle_favorite(db, a.id).is_favorited is True
    assert live_session.toggle_favorite(db, a.id).is_favorited is False
    assert db.get(LiveAnswer, a.id).answer == "Travel plans"


def test_toggle_favorite_unknown_answer(db):
    with pytest.raises(NotFound):
        live_session.toggle_favorite(db, uuid.uuid4())


def test_delete_answer_is_idempotent(db):
    live_session.start_session(db, now=T0)
    live_session.start_question(db, 0, now=T0)
    a = live_answers.submit_live_answer(db, 0, "Poems", "u1", now=T0)
    live_session.toggle_favorite(db, a.id)

    assert live_session.delete_answer(db, a.id) is True
    assert live_session.delete_answer(db, a.id) is False
    assert live_session.delete_answer(db, uuid.uuid4()) is False
    assert _answers(db) == []


def test_reset_game_purges_all_unfavorited_and_jumps_to_first_question(db):
    live_session.start_session(db, now=T0)
    live_session.start_question(db, 0, now=T0)
    fav = live_answers.submit_live_answer(db, 0, "Recipes", "u1", now=T0)
    live_session.toggle_favorite(db, fav.id)
    live_answers.submit_live_answer(db, 0, "Emails", "u2", now=T0)
    live_session.start_question(db, 3, now=T0)
    live_answers.submit_live_answer(db, 3, "4-7 times", "u2", now=T0)
    live_session.end_session(db)

    later = T0 + timedelta(minutes=10)
    s = live_session.reset_game(db, now=later)

    assert [a.id for a in _answers(db)] == [fav.id]
    assert s.current_question == 0
    assert s.is_active is True
    assert as_utc(s.question_start_time) == later
    assert live_session.get_live_session(db, now=later).time_remaining == 30000


def test_reset_game_creates_session_when_missing(db):
    s = live_session.reset_game(db, now=T0)

    assert db.query(LiveSession).count() == 1
    assert s.current_question == 0
    assert s.is_active is True
    assert s.timer_duration == 30
    assert as_utc(s.session_start_time) == T0


def test_advance_if_expired_waits_for_grace_period(db):
    live_session.start_session(db, now=T0)
    assert live_session.advance_if_expired(db, now=T0 + timedelta(minutes=5)) is None  # lobby

    live_session.start_question(db, 0, now=T0)
    assert live_session.advance_if_expired(db, now=T0 + timedelta(seconds=31)) is None
    assert live_session.advance_if_expired(db, now=T0 + timedelta(seconds=32)) is None

    expired, s = live_session.advance_if_expired(db, now=T0 + timedelta(seconds=33))
    assert expired == 0
    assert s.current_question == 1
    assert live_session.get_session_row(db).current_question == 1


def test_advance_if_expired_honours_extra_delay(db):
    live_session.start_session(db, now=T0)
    live_session.start_question(db, 2, now=T0)

    assert live_session.advance_if_expired(db, now=T0 + timedelta(seconds=40), delay_seconds=10) is None
    expired, s = live_session.advance_if_expired(db, now=T0 + timedelta(seconds=43), delay_seconds=10)
    assert (expired, s.current_question) == (2, 3)


# -------------------- dos sesiones intercaladas -------------------- #

def _stale_tick_setup(session_factory):
    """Pregunta 2 vencida; 'tick' ya la leyó (sin lock) antes de que el admin actúe."""
    with session_factory() as admin:
        live_session.start_session(admin, now=T0)
        live_session.start_question(admin, 2, now=T0)
        admin.commit()

    tick = session_factory()
    stale = live_session.get_session_row(tick)
    assert stale.current_question == 2
    assert live_session.is_expired(stale, T0 + timedelta(seconds=60))
    return tick


def _committed_state(session_factory):
    with session_factory() as fresh:
        s = live_session.get_session_row(fresh)
        return s.current_question, s.is_active


def test_tick_sees_admin_reset_made_after_its_first_read(session_factory):
    tick = _stale_tick_setup(session_factory)
    reset_at = T0 + timedelta(seconds=50)
    with session_factory() as admin:
        live_session.reset_game(admin, now=reset_at)
        admin.commit()

    # la pregunta 0 del reset todavía corre: no hay nada que avanzar
    assert live_session.advance_if_expired(tick, now=reset_at + timedelta(seconds=5)) is None
    tick.commit()
    assert _committed_state(session_factory) == (0, True)

    # ya vencida: avanza desde la pregunta del reset, no desde la vieja
    expired, s = live_session.advance_if_expired(tick, now=reset_at + timedelta(seconds=40))
    tick.commit()
    tick.close()
    assert (expired, s.current_question) == (0, 1)
    assert _committed_state(session_factory) == (1, True)


def test_tick_does_not_reopen_a_session_the_admin_ended(session_factory):
    tick = _stale_tick_setup(session_factory)
    with session_factory() as admin:
        live_session.end_session(admin)
        admin.commit()

    assert live_session.advance_if_expired(tick, now=T0 + timedelta(seconds=60)) is None
    tick.commit()
    tick.close()
    assert _committed_state(session_factory) == (2, False)


def test_tick_follows_admin_start_question(session_factory):
    tick = _stale_tick_setup(session_factory)
    restarted = T0 + timedelta(seconds=55)
    with session_factory() as admin:
        live_session.start_question(admin, 4, now=restarted)
        admin.commit()

    assert live_session.advance_if_expired(tick, now=T0 + timedelta(seconds=60)) is None
    expired, s = live_session.advance_if_expired(tick, now=restarted + timedelta(seconds=33))
    tick.commit()
    tick.close()
    assert expired == 4
    assert _committed_state(session_factory) == (4, False)


def test_two_next_calls_in_separate_sessions_advance_twice(session_factory):
    with session_factory() as admin:
        live_session.start_session(admin, now=T0)
        live_session.start_question(admin, 1, now=T0)
        admin.commit()

    first, second = session_factory(), session_factory()
    # las dos leen la pregunta 1 antes de que ninguna escriba
    assert live_session.get_session_row(first).current_question == 1
    assert live_session.get_session_row(second).current_question == 1

    live_session.next_question(first, now=T0)
    first.commit()
    s = live_session.next_question(second, now=T0)
    second.commit()
    first.close()
    second.close()

    assert s.current_question == 3
    assert _committed_state(session_factory) == (3, True)
