# tests/test_dashboard.py
import pytest

from netquiz.dashboard import get_history_stats, is_passing, performance_band
from netquiz.history import HistoryLog
from netquiz.models import HistoryRecord


@pytest.mark.parametrize("percent, expected", [
    (100, ("STRONG", "green")),
    (80, ("STRONG", "green")),
    (79, ("FAIR", "yellow")),
    (60, ("FAIR", "yellow")),
    (59, ("WEAK", "red")),
    (0, ("WEAK", "red")),
])
def test_performance_band(percent, expected):
    assert performance_band(percent) == expected


def test_performance_band_below_zero_is_weakest():
    assert performance_band(-5) == ("WEAK", "red")


def test_is_passing():
    assert is_passing(70)
    assert not is_passing(69)


def test_history_stats_empty(memory_store):
    stats = get_history_stats(HistoryLog(memory_store))
    assert stats == {
        "tests_taken": 0,
        "average_percent": 0,
        "best_percent": 0,
        "trend": [],
        "categories": [],
    }


def test_history_stats_with_data(memory_store):
    history = HistoryLog(memory_store)
    for n, score in enumerate([2, 4]):
        history.append(HistoryRecord(
            id=str(n), timestamp=n, score=score, total=4,
            mode="exam", difficulty="Easy", category="Hardware",
        ))
    stats = get_history_stats(history, series_limit=1)
    assert stats["tests_taken"] == 2
    assert stats["average_percent"] == 75
    assert stats["best_percent"] == 100
    assert len(stats["trend"]) == 1
    assert stats["trend"][0].percent == 100
    assert stats["categories"][0].name == "Hardware"
