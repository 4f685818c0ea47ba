import tempfile
from datetime import date
from pathlib import Path

import pytest

from duo_core.agents.star_commands import format_weekly_report, handle_star_command
from duo_core.domain.exceptions import BusinessError
from duo_core.infrastructure.storage.json_store import JsonStarStore, week_start

# 2025-03-05 是周三
WED = date(2025, 3, 5)


def test_json_star_store_counts_per_day():
    with tempfile.TemporaryDirectory() as d:
        store = JsonStarStore(root=Path(d) / ".storage")
        assert store.get(WED) == 0
        assert store.increment(2, day=WED) == 2
        assert store.increment(1, day=WED) == 3
        assert store.decrement(5, day=WED) == 0
        # 没有记录的日期不创建记录
        assert store.decrement(1, day=date(2025, 3, 6)) == 0
        assert store.get(date(2025, 3, 6)) == 0

        reopened = JsonStarStore(root=Path(d) / ".storage")
        assert reopened.get(WED) == 0
        assert not list((Path(d) / ".storage").glob("*.tmp"))


def test_json_star_store_weekly_report_and_reset():
    with tempfile.TemporaryDirectory() as d:
        store = JsonStarStore(root=d)
        store.increment(1, day=date(2025, 3, 2))  # 上周日
        store.increment(3, day=date(2025, 3, 5))
        store.increment(2, day=date(2025, 3, 3))
        store.increment(4, day=date(2025, 3, 9))  # 本周日

        assert week_start(WED) == date(2025, 3, 3)
        assert store.weekly_report(today=WED) == [
            (date(2025, 3, 3), 2),
            (date(2025, 3, 5), 3),
            (date(2025, 3, 9), 4),
        ]

        store.reset_week(today=WED)
        assert store.weekly_report(today=WED) == []
        assert store.get(date(2025, 3, 2)) == 1


def test_json_star_store_read_error():
    with tempfile.TemporaryDirectory() as d:
        store = JsonStarStore(root=d)
        store.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(BusinessError) as exc:
            store.get(WED)
        assert exc.value.code == "STORE_READ_ERROR"


def test_star_commands_add_remove_query():
    with tempfile.TemporaryDirectory() as d:
        store = JsonStarStore(root=d)
        assert handle_star_command("给朵朵加一颗星星", store, today=WED) == "已经帮你增加了1颗星星！"
        assert handle_star_command("增加星星", store, today=WED) == "已经帮你增加了1颗星星！"
        assert store.get(WED) == 2
        assert handle_star_command("扣除一颗星星", store, today=WED) == "已经减少了1颗星星。"
        assert store.get(WED) == 1

        report = handle_star_command("我有多少星星", store, today=WED)
        assert report.startswith("本周星星统计表 ⭐️")
        assert "│ 周三   │  1   │" in report
        assert report.endswith("总计：1颗星星 ✨")


def test_star_commands_ignore_other_text():
    with tempfile.TemporaryDirectory() as d:
        store = JsonStarStore(root=d)
        assert handle_star_command("天上有多少颗星", store) is None
        assert handle_star_command("讲个故事", store) is None


def test_star_command_store_failure_returns_apology():
    class BrokenStore:
        def increment(self, count, day=None):
            raise BusinessError(code="STORE_WRITE_ERROR", message="disk full")

    assert handle_star_command("加星星", BrokenStore()) == "抱歉，增加星星时出现错误"


def test_format_weekly_report_rows():
    text = format_weekly_report([(date(2025, 3, 3), 2), (date(2025, 3, 9), 5)])
    lines = text.split("\n")
    assert lines[4] == "│ 周一   │  2   │"
    assert lines[5] == "│ 周日   │  5   │"
    assert lines[-1] == "总计：7颗星星 ✨"
