import json
import os
import time
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from loguru import logger

HISTORY_LIMIT = 50


class HistoryError(Exception):
    """Raised when the history file cannot be written or removed."""


@dataclass(frozen=True)
class HistoryItem:
    id: int
    question: str
    suggestion: str
    timestamp: str

    @classmethod
    def create(cls, question: str, suggestion: str, *, now: Optional[datetime] = None) -> "HistoryItem":
        now = now or datetime.now()
        return cls(
            id=int(now.timestamp() * 1000),
            question=question,
            suggestion=suggestion,
            timestamp=now.strftime("%m/%d/%Y, %I:%M:%S %p"),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        raw_id = data.get("id")
        try:
            item_id = int(raw_id)
        except (TypeError, ValueError):
            item_id = int(time.time() * 1000)
        return cls(
            id=item_id,
            question=str(data.get("question") or ""),
            suggestion=str(data.get("suggestion") or ""),
            timestamp=str(data.get("timestamp") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def add_item(history: List[HistoryItem], item: HistoryItem, limit: int = HISTORY_LIMIT) -> List[HistoryItem]:
    """Return a new list with ``item`` first, keeping the newest ``limit`` entries."""
    return [item, *history][:limit]


def to_json(items: List[HistoryItem]) -> str:
    return json.dumps([it.to_dict() for it in items], ensure_ascii=False, indent=2)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"interview-history-{today.isoformat()}.json"


class HistoryStore:
    """Interview history persisted as a JSON array in a single local file."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> List[HistoryItem]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            # Unreadable is not corrupted; the file stays for the next attempt.
            logger.error(f"Error reading interview history {self.path}: {exc}")
            return []
        except ValueError as exc:
            logger.error(f"Error loading interview history: {exc}")
            self._discard_corrupted()
            return []

        if not isinstance(data, list):
            logger.warning(f"Ignoring interview history in {self.path}: expected a JSON array")
            return []
        items = [HistoryItem.from_dict(it) for it in data if isinstance(it, dict)]
        return items[:HISTORY_LIMIT]

    def save(self, items: List[HistoryItem]) -> None:
        if not items:
            return
        tmp_path = self.path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(to_json(items))
            os.replace(tmp_path, self.path)
        except OSError as exc:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.warning(f"Could not remove temporary history file {tmp_path}")
            raise HistoryError(f"Could not save interview history: {exc}") from exc

    def clear(self) -> None:
        try:
            if os.path.exists(self.path):
                os.remove(self.path)
        except OSError as exc:
            raise HistoryError(f"Could not clear interview history: {exc}") from exc

    def _discard_corrupted(self) -> None:
        try:
            os.remove(self.path)
        except OSError as exc:
            logger.warning(f"Could not remove corrupted history file {self.path}: {exc}")
