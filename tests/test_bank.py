# tests/test_bank.py
import json
import random

import pytest

from netquiz.bank import draw_questions, filter_questions, load_bank
from netquiz.errors import EmptyQuestionSet
from netquiz.models import CATEGORIES


def test_load_packaged_bank():
    bank = load_bank()
    assert len(bank) >= 16
    assert len({q.id for q in bank}) == len(bank)
    assert {q.category for q in bank} == set(CATEGORIES)


def test_load_bank_rejects_duplicate_ids(tmp_path, make_question):
    path = tmp_path / "bank.json"
    q = make_question(1).to_dict()
    path.write_text(json.dumps({"questions": [q, q]}))
    with pytest.raises(ValueError):
        load_bank(path)


def test_load_bank_rejects_invalid_question(tmp_path, make_question):
    path = tmp_path / "bank.json"
    q = make_question(1).to_dict()
    q["correctAnswerId"] = "z"
    path.write_text(json.dumps({"questions": [q]}))
    with pytest.raises(ValueError):
        load_bank(path)


def test_filter_mixed_keeps_everything(make_question):
    bank = [make_question(1, category="Network"), make_question(2, category="Security", difficulty="Hard")]
    assert filter_questions(bank) == bank


def test_filter_by_difficulty_and_category(make_question):
    bank = [
        make_question(1, category="Network", difficulty="Easy"),
        make_question(2, category="Network", difficulty="Hard"),
        make_question(3, category="Security", difficulty="Hard"),
    ]
    assert [q.id for q in filter_questions(bank, difficulty="Hard")] == [2, 3]
    assert [q.id for q in filter_questions(bank, category="Network")] == [1, 2]
    assert [q.id for q in filter_questions(bank, "Hard", "Network")] == [2]


def test_draw_questions_shuffles_a_copy(make_question):
    bank = [make_question(i) for i in range(1, 11)]
    drawn = draw_questions(bank, rng=random.Random(4))
    assert sorted(q.id for q in drawn) == list(range(1, 11))
    assert [q.id for q in bank] == list(range(1, 11))


def test_draw_questions_empty_combination(make_question):
    bank = [make_question(1, category="Network", difficulty="Easy")]
    with pytest.raises(EmptyQuestionSet):
        draw_questions(bank, difficulty="Hard", category="Network")
