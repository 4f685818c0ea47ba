"""从已解码的 JSON 事件中取出增量文本。"""

from typing import Any, Optional, Sequence

from .profile import PathKey, ProviderProfile


def extract_delta(value: Any, profile: ProviderProfile) -> Optional[str]:
    """按 profile.delta_path 取出增量文本。

    任意一级键缺失、类型不对或值为 null 都返回 None（表示"没有增量"，不是错误）。
    空字符串是合法增量，原样返回，调用方不能跳过。
    """

    return _navigate(value, profile.delta_path)


def extract_reply(value: Any, profile: ProviderProfile) -> Optional[str]:
    """按 profile.reply_path 取出非流式的完整回复。"""

    return _navigate(value, profile.reply_path)


def _navigate(value: Any, path: Sequence[PathKey]) -> Optional[str]:
    current = value
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
    return current if isinstance(current, str) else None
