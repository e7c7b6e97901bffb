"""Score history: a bounded, newest-first log of finished sessions and its statistics."""
import logging
import math
import uuid
from dataclasses import dataclass

from netquiz.config import settings
from netquiz.errors import StoreError
from netquiz.models import MIXED, HistoryRecord, SessionResult
from netquiz.store import KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)

GENERAL_LABEL = "General"


@dataclass(frozen=True)
class TrendPoint:
    timestamp: int
    percent: int
    mode: str


@dataclass(frozen=True)
class CategoryStat:
    name: str
    average_percent: int
    count: int


def round_percent(ratio: float) -> int:
    """Ratio to a whole percent, rounding halves up."""
    return math.floor(ratio * 100 + 0.5)


class HistoryLog:
    def __init__(
        self,
        store: KeyValueStore,
        limit: int = settings.HISTORY_LIMIT,
        history_key: str = settings.HISTORY_KEY,
    ):
        self.store = store
        self.limit = limit
        self.history_key = history_key
        self.save_error: StoreError | None = None
        self._records = self._load()

    def _load(self) -> list[HistoryRecord]:
        raw = read_json(self.store, self.history_key, default=[])
        if not isinstance(raw, list):
            logger.warning(f"Ignoring history under {self.history_key}: not a list")
            return []
        records = []
        for item in raw:
            try:
                records.append(HistoryRecord.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed history entry: {e}")
        return records[: self.limit]

    def _persist(self) -> None:
        try:
            write_json(self.store, self.history_key, [r.to_dict() for r in self._records])
            self.save_error = None
        except StoreError as e:
            self.save_error = e
            logger.warning(f"History not saved: {e}")

    @property
    def records(self) -> list[HistoryRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: HistoryRecord) -> None:
        self._records = ([record] + self._records)[: self.limit]
        self._persist()

    def record_result(self, result: SessionResult) -> HistoryRecord:
        record = HistoryRecord(
            id=uuid.uuid4().hex,
            timestamp=result.finished_at,
            score=result.score,
            total=result.total,
            mode=result.mode,
            difficulty=result.difficulty,
            category=result.category_filter,
        )
        self.append(record)
        return record

    def clear(self) -> None:
        self._records = []
        self._persist()
        logger.info("History cleared")

    # --- Statistics ---

    def average_score_percent(self) -> int:
        if not self._records:
            return 0
        return round_percent(sum(r.ratio for r in self._records) / len(self._records))

    def best_score_percent(self) -> int:
        if not self._records:
            return 0
        return max(round_percent(r.ratio) for r in self._records)

    def time_series(self, limit: int = settings.TREND_LIMIT) -> list[TrendPoint]:
        """The most recent `limit` results, oldest first."""
        recent = self._records[:limit] if limit > 0 else []
        return [
            TrendPoint(timestamp=r.timestamp, percent=round_percent(r.ratio), mode=r.mode)
            for r in reversed(recent)
        ]

    def by_category(self) -> list[CategoryStat]:
        """Average of per-test percentages per category, best first."""
        groups: dict[str, list[float]] = {}
        for r in self._records:
            name = GENERAL_LABEL if r.category == MIXED else r.category
            groups.setdefault(name, []).append(r.ratio)
        stats = [
            CategoryStat(name=name, average_percent=round_percent(sum(ratios) / len(ratios)), count=len(ratios))
            for name, ratios in groups.items()
        ]
        stats.sort(key=lambda s: s.average_percent, reverse=True)
        return stats
