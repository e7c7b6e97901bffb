import pytest

from netquiz.errors import StoreError
from netquiz.models import Option, Question
from netquiz.store import MemoryStore


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_netquiz.db")
    return db_path


@pytest.fixture
def memory_store():
    return MemoryStore()


class FailingStore(MemoryStore):
    """MemoryStore whose writes fail, as when the disk is full."""

    def set(self, key, value):
        raise StoreError("disk full")

    def delete(self, key):
        raise StoreError("disk full")


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def make_question():
    def _make(qid, correct="a", category="Network", difficulty="Easy", option_ids=("a", "b", "c")):
        return Question(
            id=qid,
            category=category,
            difficulty=difficulty,
            text=f"Question {qid}?",
            options=tuple(Option(id=o, text=f"Option {o}") for o in option_ids),
            correct_answer_id=correct,
            explanation=f"Because {correct}.",
        )
    return _make


@pytest.fixture
def questions(make_question):
    """Three questions whose correct answers are a, b, c."""
    return [make_question(1, "a"), make_question(2, "b"), make_question(3, "c")]
