"""Provider 抽象接口。

上层 ChatService 不直接依赖具体厂商的 HTTP 细节，而是依赖此协议：

- 每个厂商实现一个 ProviderClient（如 DashScopeClient、OllamaClient）。
- 负责：将对话轮次转成具体 API 请求体，把响应字节推给 StreamSession。
- 流式行格式的差异由 profile（ProviderProfile）描述，解析器只有一份。

这样可以在不改 ChatService 代码的前提下接入更多厂商。
"""

from typing import Protocol, Sequence

from duo_core.domain.models import ChatTurn
from duo_core.streaming.profile import ProviderProfile
from duo_core.streaming.session import StreamSession


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志/统计。
    - profile: 流式行格式描述。
    - build_payload(turns, stream): 构造请求体。
    - stream(turns, session): 执行一次流式调用，字节交给 session，结束时调用 session.finish。
    - chat(turns): 执行一次非流式调用，返回完整回复文本。
    """

    name: str
    profile: ProviderProfile

    def build_payload(self, turns: Sequence[ChatTurn], stream: bool) -> dict:
        ...

    def stream(self, turns: Sequence[ChatTurn], session: StreamSession) -> None:
        ...

    def chat(self, turns: Sequence[ChatTurn]) -> str:
        ...
