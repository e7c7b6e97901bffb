"""Quiz session engine.

One engine drives one attempt: question sequencing, answer recording, the
exam countdown and scoring. After every state change the full snapshot is
written to the store's session slot, so a quit attempt can be resumed
later from a fresh engine.
"""
import json
import logging
import time
from typing import Any, Callable

from netquiz.config import settings
from netquiz.errors import EmptyQuestionSet, InvalidSessionData, InvalidTransition, StoreError
from netquiz.models import EXAM, MIXED, MODES, STUDY, Feedback, Question, SessionResult, SessionState
from netquiz.store import KeyValueStore, read_json, write_json
from netquiz.timer import Ticker

logger = logging.getLogger(__name__)

ACTIVE = "active"
FINISHED = "finished"
SUSPENDED = "suspended"
DISCARDED = "discarded"

FinishListener = Callable[[SessionResult], Any]


def now_millis() -> int:
    return int(time.time() * 1000)


class SessionEngine:
    def __init__(
        self,
        store: KeyValueStore,
        state: SessionState,
        *,
        ticker: Ticker | None = None,
        clock: Callable[[], int] = now_millis,
        on_finish: FinishListener | None = None,
        session_key: str = settings.SESSION_KEY,
        exam_duration: int = settings.EXAM_DURATION_SECONDS,
    ):
        self.store = store
        self.state = state
        self.ticker = ticker
        self.clock = clock
        self.session_key = session_key
        self.exam_duration = exam_duration
        self.status = ACTIVE
        self.result: SessionResult | None = None
        self.save_error: StoreError | None = None
        self._listeners: list[FinishListener] = [on_finish] if on_finish else []
        self._selected: str | None = None
        self._revealed = False
        self._sync_current()
        if ticker is not None and state.mode == EXAM:
            ticker.start(self.tick)

    # --- Entry points ---

    @classmethod
    def start_new(
        cls,
        store: KeyValueStore,
        questions: list[Question],
        mode: str,
        difficulty: str = MIXED,
        category_filter: str = MIXED,
        **kwargs,
    ) -> "SessionEngine":
        """Begin a fresh attempt, replacing whatever session was saved."""
        if not questions:
            raise EmptyQuestionSet("Cannot start a session without questions")
        if mode not in MODES:
            raise ValueError(f"Unknown quiz mode {mode!r}")
        if len({q.id for q in questions}) != len(questions):
            raise ValueError("Question ids must be unique within a session")

        session_key = kwargs.get("session_key", settings.SESSION_KEY)
        clock = kwargs.get("clock", now_millis)
        state = SessionState(
            questions=tuple(questions),
            mode=mode,
            remaining_seconds=kwargs.get("exam_duration", settings.EXAM_DURATION_SECONDS),
            category_filter=category_filter,
            difficulty=difficulty,
            last_mutated=clock(),
        )
        cls.clear_saved(store, session_key)
        engine = cls(store, state, **kwargs)
        engine._save()
        logger.info(
            f"New {mode} session: {len(questions)} questions "
            f"[Difficulty: {difficulty}, Category: {category_filter}]"
        )
        return engine

    @classmethod
    def resume(cls, store: KeyValueStore, payload: dict | str, **kwargs) -> "SessionEngine":
        """Rebuild an engine from a saved snapshot. Nothing is adopted if the shape is wrong."""
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except ValueError as e:
                raise InvalidSessionData(f"session payload is not valid JSON: {e}") from e
        state = SessionState.from_dict(payload)
        engine = cls(store, state, **kwargs)
        logger.info(
            f"Resumed {state.mode} session at question {state.current_index + 1}/{len(state.questions)}"
        )
        return engine

    @staticmethod
    def load_saved(store: KeyValueStore, session_key: str = settings.SESSION_KEY) -> Any:
        return read_json(store, session_key)

    @staticmethod
    def clear_saved(store: KeyValueStore, session_key: str = settings.SESSION_KEY) -> None:
        try:
            store.delete(session_key)
        except StoreError as e:
            logger.warning(f"Could not clear saved session: {e}")

    def add_finish_listener(self, listener: FinishListener) -> None:
        self._listeners.append(listener)

    # --- Read-only view ---

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE

    @property
    def mode(self) -> str:
        return self.state.mode

    @property
    def current_question(self) -> Question:
        return self.state.questions[self.state.current_index]

    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def total(self) -> int:
        return len(self.state.questions)

    @property
    def is_last_question(self) -> bool:
        return self.state.current_index == len(self.state.questions) - 1

    @property
    def answered_count(self) -> int:
        return len(self.state.answers)

    @property
    def remaining_seconds(self) -> int:
        return self.state.remaining_seconds

    @property
    def selected_option(self) -> str | None:
        return self._selected

    @property
    def is_revealed(self) -> bool:
        return self._revealed

    @property
    def feedback(self) -> Feedback | None:
        if not self._revealed:
            return None
        question = self.current_question
        return Feedback(
            selected_option_id=self.state.answers[question.id],
            correct_option_id=question.correct_answer_id,
            explanation=question.explanation,
        )

    # --- Intents ---

    def select_option(self, option_id: str) -> bool:
        self._require_active()
        if not self.current_question.has_option(option_id):
            raise ValueError(f"Option {option_id!r} does not belong to question {self.current_question.id}")
        if self.state.mode == STUDY and self._revealed:
            return False
        self._selected = option_id
        return True

    def check_answer(self) -> Feedback | None:
        """Commit the study-mode selection and reveal the correct option."""
        self._require_active()
        if self.state.mode != STUDY:
            raise InvalidTransition("Answers are only checked in study mode")
        if self._revealed:
            return self.feedback
        if self._selected is None:
            return None
        self.state.answers[self.current_question.id] = self._selected
        self._revealed = True
        self._touch()
        return self.feedback

    def advance(self) -> SessionResult | None:
        """Move to the next question, or finish on the last one."""
        self._require_active()
        if self.state.mode == STUDY and not self._revealed:
            raise InvalidTransition("Check the answer before moving on")
        if self.state.mode == EXAM:
            self._commit_selection()
        if self.is_last_question:
            return self.finish()
        self.state.current_index += 1
        self._sync_current()
        self._touch()
        return None

    def retreat(self) -> bool:
        self._require_active()
        if self.state.current_index == 0:
            return False
        self.state.current_index -= 1
        self._sync_current()
        self._touch()
        return True

    def restart(self) -> None:
        """Drop all progress but keep the drawn question order."""
        self._require_active()
        self.state.current_index = 0
        self.state.answers = {}
        self.state.remaining_seconds = self.exam_duration
        self._sync_current()
        self._touch()
        logger.info("Session restarted")

    def tick(self) -> SessionResult | None:
        """Charge one elapsed second to the exam clock."""
        if self.status != ACTIVE or self.state.mode != EXAM:
            return None
        self.state.remaining_seconds = max(0, self.state.remaining_seconds - 1)
        if self.state.remaining_seconds == 0:
            logger.info("Exam time expired")
            self._commit_selection()
            return self.finish()
        self._touch()
        return None

    def finish(self) -> SessionResult:
        self._require_active()
        answers = self.state.answers
        score = sum(1 for q in self.state.questions if answers.get(q.id) == q.correct_answer_id)
        self._stop_ticker()
        self.status = FINISHED
        self._clear()
        self.result = SessionResult(
            score=score,
            total=len(self.state.questions),
            answers=dict(answers),
            mode=self.state.mode,
            difficulty=self.state.difficulty,
            category_filter=self.state.category_filter,
            finished_at=self.clock(),
        )
        logger.info(f"Session finished: {score}/{self.result.total} [{self.state.mode}]")
        for listener in list(self._listeners):
            listener(self.result)
        return self.result

    def quit(self) -> None:
        """Leave the quiz but keep the saved slot for a later resume."""
        self._require_active()
        self._stop_ticker()
        if self.save_error is not None:
            self._save()
        self.status = SUSPENDED
        logger.info(f"Session suspended at question {self.state.current_index + 1}/{self.total}")

    def discard(self) -> None:
        self._require_active()
        self._stop_ticker()
        self.status = DISCARDED
        self._clear()
        logger.info("Session discarded")

    # --- Internals ---

    def _require_active(self) -> None:
        if self.status != ACTIVE:
            raise InvalidTransition(f"Session is {self.status}; start or resume a new one")

    def _commit_selection(self) -> None:
        if self._selected is not None:
            self.state.answers[self.current_question.id] = self._selected

    def _sync_current(self) -> None:
        saved = self.state.answers.get(self.current_question.id)
        self._selected = saved
        self._revealed = self.state.mode == STUDY and saved is not None

    def _stop_ticker(self) -> None:
        if self.ticker is not None:
            self.ticker.stop()

    def _touch(self) -> None:
        self.state.last_mutated = self.clock()
        self._save()

    def _save(self) -> None:
        try:
            write_json(self.store, self.session_key, self.state.to_dict())
            self.save_error = None
        except StoreError as e:
            self.save_error = e
            logger.warning(f"Session progress not saved: {e}")

    def _clear(self) -> None:
        try:
            self.store.delete(self.session_key)
        except StoreError as e:
            self.save_error = e
            logger.warning(f"Could not clear saved session: {e}")
