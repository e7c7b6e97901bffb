"""Statistics dashboard built from the score history."""
from netquiz.config import settings
from netquiz.history import HistoryLog

# (lowest percent, label, colour), best band first
PERFORMANCE_BANDS = (
    (80, "STRONG", "green"),
    (60, "FAIR", "yellow"),
    (0, "WEAK", "red"),
)
PASS_PERCENT = 70


def performance_band(percent: float) -> tuple[str, str]:
    """Label and rich colour for a score percentage."""
    for floor, label, color in PERFORMANCE_BANDS:
        if percent >= floor:
            return label, color
    _, label, color = PERFORMANCE_BANDS[-1]
    return label, color


def is_passing(percent: float) -> bool:
    return percent >= PASS_PERCENT


def get_history_stats(history: HistoryLog, series_limit: int = settings.TREND_LIMIT) -> dict:
    return {
        "tests_taken": len(history),
        "average_percent": history.average_score_percent(),
        "best_percent": history.best_score_percent(),
        "trend": history.time_series(series_limit),
        "categories": history.by_category(),
    }
