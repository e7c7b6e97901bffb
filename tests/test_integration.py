# tests/test_integration.py
"""End-to-end test of the core workflow."""
import random

from netquiz.bank import draw_questions, load_bank
from netquiz.dashboard import get_history_stats
from netquiz.history import HistoryLog
from netquiz.session import SessionEngine
from netquiz.store import SQLiteStore
from netquiz.timer import ManualTicker


def test_suspend_resume_finish_across_restarts(tmp_db):
    """Quit an exam midway, reopen the store, resume, and finish into the history."""
    bank = load_bank()
    questions = draw_questions(bank, "Mixed", "Network", rng=random.Random(1))
    assert all(q.category == "Network" for q in questions)

    store = SQLiteStore(tmp_db)
    history = HistoryLog(store)
    ticker = ManualTicker()
    engine = SessionEngine.start_new(
        store, questions, "exam", "Mixed", "Network",
        ticker=ticker, on_finish=history.record_result,
    )
    engine.select_option(questions[0].correct_answer_id)
    engine.advance()
    ticker.advance(30)
    engine.quit()
    assert not ticker.running

    # "Restart" the application
    store = SQLiteStore(tmp_db)
    history = HistoryLog(store)
    payload = SessionEngine.load_saved(store)
    assert payload is not None
    ticker = ManualTicker()
    engine = SessionEngine.resume(store, payload, ticker=ticker, on_finish=history.record_result)
    assert engine.current_index == 1
    assert engine.remaining_seconds == 570

    while engine.is_active:
        q = engine.current_question
        wrong = next(o.id for o in q.options if o.id != q.correct_answer_id)
        engine.select_option(wrong)
        engine.advance()

    assert engine.result.score == 1
    assert engine.result.total == len(questions)
    assert SessionEngine.load_saved(store) is None

    reloaded = HistoryLog(SQLiteStore(tmp_db))
    stats = get_history_stats(reloaded)
    assert stats["tests_taken"] == 1
    assert stats["categories"][0].name == "Network"
    assert stats["average_percent"] == round(100 / len(questions))
