from datetime import date
from typing import List, Optional, Protocol, Tuple


class StarStore(Protocol):
    """按天计数的星星奖励存储。"""

    def increment(self, count: int, day: Optional[date] = None) -> int:
        ...

    def decrement(self, count: int, day: Optional[date] = None) -> int:
        ...

    def get(self, day: Optional[date] = None) -> int:
        ...

    def weekly_report(self, today: Optional[date] = None) -> List[Tuple[date, int]]:
        ...

    def reset_week(self, today: Optional[date] = None) -> None:
        ...
