"""Question bank loading, filtering and drawing."""
import json
import logging
import random
from pathlib import Path

from netquiz.errors import EmptyQuestionSet
from netquiz.models import MIXED, Question

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"
DEFAULT_BANK_PATH = CONTENT_DIR / "questions.json"


def load_bank(path: str | Path | None = None) -> list[Question]:
    """Load and validate the question bank from a JSON file."""
    path = Path(path) if path else DEFAULT_BANK_PATH
    data = json.loads(path.read_text(encoding="utf-8"))
    questions = [Question.from_dict(item) for item in data["questions"]]
    seen = set()
    for q in questions:
        if q.id in seen:
            raise ValueError(f"Duplicate question id {q.id} in {path.name}")
        seen.add(q.id)
    logger.info(f"Loaded {len(questions)} questions from {path.name}")
    return questions


def filter_questions(bank: list[Question], difficulty: str = MIXED, category: str = MIXED) -> list[Question]:
    filtered = bank
    if difficulty != MIXED:
        filtered = [q for q in filtered if q.difficulty == difficulty]
    if category != MIXED:
        filtered = [q for q in filtered if q.category == category]
    return list(filtered)


def draw_questions(
    bank: list[Question],
    difficulty: str = MIXED,
    category: str = MIXED,
    rng: random.Random | None = None,
) -> list[Question]:
    """Filter the bank and return the matches in shuffled order."""
    filtered = filter_questions(bank, difficulty, category)
    if not filtered:
        raise EmptyQuestionSet(
            f"No questions available for difficulty {difficulty} and category {category}"
        )
    (rng or random).shuffle(filtered)
    return filtered
