"""Data classes for questions, quiz sessions and score history."""
from dataclasses import dataclass, field
from typing import Any

from netquiz.errors import InvalidSessionData

STUDY = "study"
EXAM = "exam"
MODES = (STUDY, EXAM)

MIXED = "Mixed"
CATEGORIES = ("Hardware", "Network", "Security", "Troubleshooting")
DIFFICULTIES = ("Easy", "Medium", "Hard")


@dataclass(frozen=True)
class Option:
    id: str
    text: str

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True)
class Question:
    id: int
    category: str
    difficulty: str
    text: str
    options: tuple[Option, ...]
    correct_answer_id: str
    explanation: str = ""

    def __post_init__(self):
        if self.category not in CATEGORIES:
            raise ValueError(f"Question {self.id}: unknown category {self.category!r}")
        if self.difficulty not in DIFFICULTIES:
            raise ValueError(f"Question {self.id}: unknown difficulty {self.difficulty!r}")
        option_ids = [o.id for o in self.options]
        if len(option_ids) < 2 or len(set(option_ids)) != len(option_ids):
            raise ValueError(f"Question {self.id}: needs at least 2 distinct option ids")
        if option_ids.count(self.correct_answer_id) != 1:
            raise ValueError(
                f"Question {self.id}: correct answer {self.correct_answer_id!r} is not an option"
            )

    def has_option(self, option_id: str) -> bool:
        return any(o.id == option_id for o in self.options)

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        if isinstance(data["id"], bool) or not isinstance(data["id"], int):
            raise TypeError(f"Question id must be an integer, got {data['id']!r}")
        return cls(
            id=data["id"],
            category=data["category"],
            difficulty=data["difficulty"],
            text=data["text"],
            options=tuple(Option(id=str(o["id"]), text=o["text"]) for o in data["options"]),
            correct_answer_id=str(data["correctAnswerId"]),
            explanation=data.get("explanation", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "difficulty": self.difficulty,
            "text": self.text,
            "options": [o.to_dict() for o in self.options],
            "correctAnswerId": self.correct_answer_id,
            "explanation": self.explanation,
        }


def _field(payload: dict, key: str, kind) -> Any:
    if key not in payload:
        raise InvalidSessionData(f"missing field {key!r}")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, kind):
        raise InvalidSessionData(f"field {key!r} has unexpected type {type(value).__name__}")
    return value


@dataclass
class SessionState:
    questions: tuple[Question, ...]
    mode: str
    remaining_seconds: int
    category_filter: str = MIXED
    difficulty: str = MIXED
    answers: dict[int, str] = field(default_factory=dict)
    current_index: int = 0
    last_mutated: int = 0

    def to_dict(self) -> dict:
        return {
            "questions": [q.to_dict() for q in self.questions],
            "answers": {str(qid): opt for qid, opt in self.answers.items()},
            "currentIdx": self.current_index,
            "mode": self.mode,
            "timer": self.remaining_seconds,
            "categoryFilter": self.category_filter,
            "difficulty": self.difficulty,
            "timestamp": self.last_mutated,
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "SessionState":
        """Rebuild a state from its persisted form, or raise InvalidSessionData."""
        if not isinstance(payload, dict):
            raise InvalidSessionData("session payload is not an object")

        raw_questions = _field(payload, "questions", list)
        if not raw_questions:
            raise InvalidSessionData("session has no questions")
        try:
            questions = tuple(Question.from_dict(q) for q in raw_questions)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InvalidSessionData(f"invalid question in session: {e}") from e
        question_ids = {q.id for q in questions}
        if len(question_ids) != len(questions):
            raise InvalidSessionData("duplicate question ids in session")

        answers = {}
        for key, option_id in _field(payload, "answers", dict).items():
            try:
                qid = int(key)
            except (TypeError, ValueError) as e:
                raise InvalidSessionData(f"answer key {key!r} is not a question id") from e
            if qid not in question_ids:
                raise InvalidSessionData(f"answer for unknown question {qid}")
            if not isinstance(option_id, str):
                raise InvalidSessionData(f"answer for question {qid} is not an option id")
            answers[qid] = option_id

        current_index = _field(payload, "currentIdx", int)
        if not 0 <= current_index < len(questions):
            raise InvalidSessionData(f"currentIdx {current_index} out of range")

        mode = _field(payload, "mode", str)
        if mode not in MODES:
            raise InvalidSessionData(f"unknown mode {mode!r}")

        timer = _field(payload, "timer", int)
        if timer < 0:
            raise InvalidSessionData("timer is negative")

        category_filter = _field(payload, "categoryFilter", str)
        if category_filter != MIXED and category_filter not in CATEGORIES:
            raise InvalidSessionData(f"unknown category filter {category_filter!r}")
        difficulty = _field(payload, "difficulty", str)
        if difficulty != MIXED and difficulty not in DIFFICULTIES:
            raise InvalidSessionData(f"unknown difficulty {difficulty!r}")

        return cls(
            questions=questions,
            mode=mode,
            remaining_seconds=timer,
            category_filter=category_filter,
            difficulty=difficulty,
            answers=answers,
            current_index=current_index,
            last_mutated=int(_field(payload, "timestamp", (int, float))),
        )


@dataclass(frozen=True)
class Feedback:
    selected_option_id: str
    correct_option_id: str
    explanation: str

    @property
    def is_correct(self) -> bool:
        return self.selected_option_id == self.correct_option_id


@dataclass(frozen=True)
class SessionResult:
    score: int
    total: int
    answers: dict
    mode: str
    difficulty: str
    category_filter: str
    finished_at: int


@dataclass(frozen=True)
class HistoryRecord:
    id: str
    timestamp: int
    score: int
    total: int
    mode: str
    difficulty: str
    category: str

    @property
    def ratio(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.score / self.total

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryRecord":
        record = cls(
            id=str(data["id"]),
            timestamp=int(data["timestamp"]),
            score=int(data["score"]),
            total=int(data["total"]),
            mode=data["mode"],
            difficulty=data["difficulty"],
            category=data["category"],
        )
        for name in ("mode", "difficulty", "category"):
            if not isinstance(getattr(record, name), str):
                raise TypeError(f"{name} must be a string")
        if record.mode not in MODES:
            raise ValueError(f"unknown mode {record.mode!r}")
        if record.score < 0 or record.total < 0:
            raise ValueError("negative score or total")
        return record

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "score": self.score,
            "total": self.total,
            "mode": self.mode,
            "difficulty": self.difficulty,
            "category": self.category,
        }
