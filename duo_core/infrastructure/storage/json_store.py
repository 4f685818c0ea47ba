import json
import os
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

from duo_core.config.settings import settings
from duo_core.domain.exceptions import BusinessError
from duo_core.domain.stars import StarStore


def week_start(day: date) -> date:
    """所在周的周一。"""

    return day - timedelta(days=day.weekday())


class JsonStarStore(StarStore):
    """以单个 JSON 文件保存每日星星数：{"YYYY-MM-DD": count}。"""

    def __init__(self, root: str | Path | None = None, filename: str = "stars.json"):
        self._root = Path(root or settings.storage_root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._path = self._root / filename

    @property
    def path(self) -> Path:
        return self._path

    def increment(self, count: int, day: Optional[date] = None) -> int:
        key = (day or date.today()).isoformat()
        data = self._read()
        data[key] = data.get(key, 0) + count
        self._write(data)
        return data[key]

    def decrement(self, count: int, day: Optional[date] = None) -> int:
        key = (day or date.today()).isoformat()
        data = self._read()
        if key not in data:
            return 0
        data[key] = max(0, data[key] - count)
        self._write(data)
        return data[key]

    def get(self, day: Optional[date] = None) -> int:
        return self._read().get((day or date.today()).isoformat(), 0)

    def weekly_report(self, today: Optional[date] = None) -> List[Tuple[date, int]]:
        start = week_start(today or date.today())
        end = start + timedelta(days=7)
        items: List[Tuple[date, int]] = []
        for key, count in self._read().items():
            day = date.fromisoformat(key)
            if start <= day < end:
                items.append((day, count))
        items.sort(key=lambda item: item[0])
        return items

    def reset_week(self, today: Optional[date] = None) -> None:
        start = week_start(today or date.today())
        data = {k: v for k, v in self._read().items() if date.fromisoformat(k) < start}
        self._write(data)

    def _read(self) -> Dict[str, int]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except Exception as e:
            raise BusinessError(code="STORE_READ_ERROR", message=str(e))
        if not isinstance(data, dict):
            raise BusinessError(code="STORE_READ_ERROR", message=f"{self._path} is not a mapping")
        return {str(k): int(v) for k, v in data.items()}

    def _write(self, data: Dict[str, int]) -> None:
        tmp_path = self._root / f"{self._path.stem}.{uuid4().hex}.json.tmp"
        try:
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, sort_keys=True), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except Exception as e:
            raise BusinessError(code="STORE_WRITE_ERROR", message=str(e))
