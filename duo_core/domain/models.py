"""统一的对话与流式事件数据模型。

本模块定义了各 Provider 之间共享的标准数据结构：

- ChatTurn: 一条对话轮次（system/user/assistant），创建后不可变。
- StreamEvent: 流式响应中每一行被分类后的事件，产生后立即被消费，不做持久化。
- SessionState: StreamSession 的生命周期状态。

所有 Provider 适配器都只依赖这些模型，
由 ProviderProfile 描述各家 API 的行格式差异。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional


# LLM 消息角色类型（与 OpenAI / DashScope / Ollama 的 role 字段对应）
Role = Literal["system", "user", "assistant"]

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class ChatTurn:
    """一条对话轮次。

    - role: 消息角色，如 system/user/assistant。
    - content: 纯文本内容。
    """

    role: Role
    content: str

    def to_payload(self) -> dict:
        return {"role": self.role, "content": self.content}


StreamEventKind = Literal["delta", "done", "malformed", "ignorable"]


@dataclass(frozen=True)
class StreamEvent:
    """流式响应中单行对应的协议事件。

    kind:
        - "delta": 内容增量，text 为本次新增文本（可能是空字符串）。
        - "done": 结束哨兵（如 `data: [DONE]`），只终止当前分片的行处理。
        - "malformed": 无法解析的行，raw_line 保存原始内容用于日志。
        - "ignorable": 空行、心跳行或没有增量的合法事件。
    """

    kind: StreamEventKind
    text: Optional[str] = None
    raw_line: Optional[str] = None

    @classmethod
    def delta(cls, text: str) -> "StreamEvent":
        return cls(kind="delta", text=text)

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(kind="done")

    @classmethod
    def malformed(cls, raw_line: str) -> "StreamEvent":
        return cls(kind="malformed", raw_line=raw_line)

    @classmethod
    def ignorable(cls) -> "StreamEvent":
        return cls(kind="ignorable")


class SessionState(str, Enum):
    """StreamSession 状态：IDLE → ACTIVE → {COMPLETED, FAILED, CANCELLED}。"""

    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.COMPLETED, SessionState.FAILED, SessionState.CANCELLED)
