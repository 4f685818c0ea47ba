"""Ollama Provider 适配器（本地模型服务）。

使用 /api/generate 端点，请求体是单个 prompt 字符串：
对话轮次按 "System: / Human: / Assistant:" 前缀逐行拼接。

流式响应是逐行的裸 JSON，没有 SSE 信封也没有结束哨兵::

    {"model":"qwen2.5:7b","response":"你","done":false}
    {"model":"qwen2.5:7b","response":"好","done":false}
    {"model":"qwen2.5:7b","response":"","done":true}

连接关闭即表示结束。
"""

from typing import Any, Dict, Optional, Sequence

from duo_core.config.settings import settings
from duo_core.domain.exceptions import ApiError
from duo_core.domain.models import ChatTurn
from duo_core.providers.registry import DEFAULT_LOGICAL_MODEL, OLLAMA_CONFIG, ModelConfig
from duo_core.providers.transport import HttpxTransport
from duo_core.streaming.extractor import extract_reply
from duo_core.streaming.session import StreamSession

_ROLE_PREFIX = {
    "system": "System: ",
    "user": "Human: ",
    "assistant": "Assistant: ",
}


def build_prompt(turns: Sequence[ChatTurn]) -> str:
    """把对话轮次渲染为 Ollama 的单段 prompt。"""

    return "\n".join(f"{_ROLE_PREFIX.get(t.role, '')}{t.content}" for t in turns)


class OllamaClient:
    """Ollama 提供方客户端实现。"""

    name = "ollama"
    profile = OLLAMA_CONFIG.profile

    def __init__(self, cfg=settings, model: str = DEFAULT_LOGICAL_MODEL, transport: Optional[HttpxTransport] = None):
        self._settings = cfg
        self._model_cfg: ModelConfig = OLLAMA_CONFIG.models[model]
        self._transport = transport or HttpxTransport(
            provider=self.name,
            timeout=getattr(cfg, "http_timeout", 30.0),
        )

    def stream(self, turns: Sequence[ChatTurn], session: StreamSession) -> None:
        payload = self.build_payload(turns, stream=True)
        self._transport.stream_into(self._url(), payload, self._headers(), session)

    def chat(self, turns: Sequence[ChatTurn]) -> str:
        data = self._transport.post_json(self._url(), self.build_payload(turns, stream=False), self._headers())
        reply = extract_reply(data, self.profile)
        if reply is None:
            raise ApiError(code="INVALID_RESPONSE", message="解析响应失败", http_status=502, provider=self.name)
        return reply

    def build_payload(self, turns: Sequence[ChatTurn], stream: bool) -> Dict[str, Any]:
        # 配置里的模型名优先于 registry 默认值
        model = getattr(self._settings, "ollama_model", None) or self._model_cfg.provider_model
        return {
            "model": model,
            "prompt": build_prompt(turns),
            "stream": stream,
            "options": {"temperature": self._model_cfg.default_temperature},
        }

    @staticmethod
    def _headers() -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def _url(self) -> str:
        base = getattr(self._settings, "ollama_base_url", None) or OLLAMA_CONFIG.base_url
        return f"{base.rstrip('/')}{OLLAMA_CONFIG.endpoint}"
