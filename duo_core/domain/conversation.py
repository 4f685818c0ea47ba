"""有界对话历史。

ConversationHistory 按插入顺序保存对话轮次，超出容量时按 FIFO
淘汰最早的非 system 轮次。它由一个 ChatService 实例独占，
在连续的多次流式会话之间共享，只应在回调投递上下文中被修改。
"""

from typing import List, Optional, Tuple

from .exceptions import ValidationError
from .models import ROLES, ChatTurn

DEFAULT_MAX_TURNS = 10


class ConversationHistory:
    """有界、按插入顺序排列的对话历史。

    不变式：
    - len(history) <= max_turns；
    - system 轮次（若存在）总在第一位，且永不被淘汰。
    """

    def __init__(self, max_turns: int = DEFAULT_MAX_TURNS, turns: Optional[List[ChatTurn]] = None):
        if max_turns < 2:
            raise ValidationError(code="INVALID_MAX_TURNS", message="max_turns must be >= 2")
        self._max_turns = max_turns
        self._turns: List[ChatTurn] = []
        for turn in turns or []:
            self.append(turn.role, turn.content)

    @property
    def max_turns(self) -> int:
        return self._max_turns

    def __len__(self) -> int:
        return len(self._turns)

    def append(self, role: str, content: str) -> ChatTurn:
        """追加一条轮次，超过容量时淘汰最早的非 system 轮次。"""

        if role not in ROLES:
            raise ValidationError(code="INVALID_ROLE", message=f"Unknown role: {role!r}")
        if role == "system" and self._turns:
            # system 只能作为第一条，保证它永远不会被淘汰
            raise ValidationError(code="SYSTEM_TURN_NOT_FIRST", message="system turn must be the first turn")
        turn = ChatTurn(role=role, content=content)
        self._turns.append(turn)
        if len(self._turns) > self._max_turns:
            self._evict_oldest()
        return turn

    def snapshot(self) -> Tuple[ChatTurn, ...]:
        """返回当前轮次的只读快照（按对话顺序）。"""

        return tuple(self._turns)

    def clear(self) -> None:
        """清空全部轮次（包括 system）。"""

        self._turns.clear()

    def _evict_oldest(self) -> None:
        for idx, turn in enumerate(self._turns):
            if turn.role != "system":
                del self._turns[idx]
                return
