"""星星奖励指令。

孩子或家长说出包含"星星"的指令时，在本地直接应答，不走大模型：

- "给我加一颗星星" / "增加星星" → +1
- "减一颗星星" / "扣除星星" → -1
- "我有多少星星" / "查看星星" → 本周统计表
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from duo_core.domain.exceptions import BusinessError
from duo_core.domain.stars import StarStore
from duo_core.infrastructure.logging.logger import log_event

WEEKDAY_NAMES = ("一", "二", "三", "四", "五", "六", "日")

ADD_REPLY = "已经帮你增加了1颗星星！"
ADD_FAILED_REPLY = "抱歉，增加星星时出现错误"
REMOVE_REPLY = "已经减少了1颗星星。"
REMOVE_FAILED_REPLY = "抱歉，减少星星时出现错误"


def _mentions(text: str, *words: str) -> bool:
    return "星星" in text and any(w in text for w in words)


def format_weekly_report(report: List[Tuple[date, int]]) -> str:
    """渲染本周星星统计表。"""

    total = sum(count for _, count in report)
    lines = [
        "本周星星统计表 ⭐️",
        "┌──────┬──────┐",
        "│ 日期 │ 星星 │",
        "├──────┼──────┤",
    ]
    for day, count in report:
        lines.append(f"│ 周{WEEKDAY_NAMES[day.weekday()]}   │  {count}   │")
    lines.append("└──────┴──────┘")
    lines.append("")
    lines.append(f"总计：{total}颗星星 ✨")
    return "\n".join(lines)


def handle_star_command(text: str, store: StarStore, today: Optional[date] = None) -> Optional[str]:
    """处理星星指令，返回应答文本；不是星星指令时返回 None。"""

    if _mentions(text, "加", "增加"):
        try:
            total = store.increment(1, day=today)
        except BusinessError as e:
            log_event(logging.ERROR, "Failed to add star", {}, error=str(e), error_code=e.code)
            return ADD_FAILED_REPLY
        log_event(logging.INFO, "Star added", {}, today_total=total)
        return ADD_REPLY

    if _mentions(text, "减", "扣除"):
        try:
            total = store.decrement(1, day=today)
        except BusinessError as e:
            log_event(logging.ERROR, "Failed to remove star", {}, error=str(e), error_code=e.code)
            return REMOVE_FAILED_REPLY
        log_event(logging.INFO, "Star removed", {}, today_total=total)
        return REMOVE_REPLY

    if _mentions(text, "查看", "多少"):
        report = store.weekly_report(today=today)
        log_event(logging.INFO, "Star report queried", {}, days=len(report))
        return format_weekly_report(report)

    return None
