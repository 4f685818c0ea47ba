"""增量流式响应解析与会话累积。

- buffer: ChunkBuffer，跨网络分片拼接完整行。
- parser: classify，将行归类为 StreamEvent。
- extractor: 按 ProviderProfile 路径取出增量文本。
- session: StreamSession，单次请求的状态机。
"""

from duo_core.streaming.buffer import ChunkBuffer
from duo_core.streaming.extractor import extract_delta, extract_reply
from duo_core.streaming.parser import classify
from duo_core.streaming.profile import OLLAMA_GENERATE_PROFILE, SSE_CHAT_PROFILE, ProviderProfile
from duo_core.streaming.session import StreamSession, inline_dispatch

__all__ = [
    "ChunkBuffer",
    "ProviderProfile",
    "SSE_CHAT_PROFILE",
    "OLLAMA_GENERATE_PROFILE",
    "StreamSession",
    "classify",
    "extract_delta",
    "extract_reply",
    "inline_dispatch",
]
