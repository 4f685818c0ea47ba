"""Provider 流式协议描述。

不同厂商的流式响应只在三处不同：
- 行前缀（SSE 的 "data: "，或者没有前缀）；
- 是否存在结束哨兵（"[DONE]"）；
- 增量文本在 JSON 中的路径。

用一个 ProviderProfile 描述这些差异，解析器只保留一份实现。
"""

from dataclasses import dataclass
from typing import Literal, Optional, Tuple, Union

PathKey = Union[str, int]
StreamKind = Literal["sse", "lines"]


@dataclass(frozen=True)
class ProviderProfile:
    """单个 Provider 的流式行格式配置。

    - name: Provider 名称，用于日志。
    - kind: "sse" 表示 `data: {...}` 信封格式，"lines" 表示每行一个裸 JSON。
    - line_prefix: SSE 行前缀；lines 模式下为 None。
    - done_sentinel: 结束哨兵；没有哨兵的协议为 None（依赖连接关闭）。
    - delta_path: 流式增量文本的 JSON 路径。
    - reply_path: 非流式完整回复的 JSON 路径。
    """

    name: str
    kind: StreamKind
    delta_path: Tuple[PathKey, ...]
    reply_path: Tuple[PathKey, ...]
    line_prefix: Optional[str] = None
    done_sentinel: Optional[str] = None


SSE_CHAT_PROFILE = ProviderProfile(
    name="openai-compatible",
    kind="sse",
    line_prefix="data: ",
    done_sentinel="[DONE]",
    delta_path=("choices", 0, "delta", "content"),
    reply_path=("choices", 0, "message", "content"),
)

OLLAMA_GENERATE_PROFILE = ProviderProfile(
    name="ollama-generate",
    kind="lines",
    delta_path=("response",),
    reply_path=("response",),
)
