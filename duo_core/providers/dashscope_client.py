"""DashScope Provider 适配器（阿里云百炼 OpenAI 兼容模式）。

接口风格与 OpenAI 一致，使用 chat/completions 端点：
- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>
- 流式响应: `data: {"choices":[{"delta":{"content":"..."}}]}`，以 `data: [DONE]` 结尾

本实现只依赖公共字段：model/messages/temperature/max_tokens/stream。
"""

from typing import Any, Dict, Optional, Sequence

from duo_core.config.settings import settings
from duo_core.domain.exceptions import ApiError, ValidationError
from duo_core.domain.models import ChatTurn
from duo_core.providers.registry import DASHSCOPE_CONFIG, DEFAULT_LOGICAL_MODEL, ModelConfig
from duo_core.providers.transport import HttpxTransport
from duo_core.streaming.extractor import extract_reply
from duo_core.streaming.session import StreamSession


class DashScopeClient:
    """DashScope Provider 客户端实现。"""

    name = "dashscope"
    profile = DASHSCOPE_CONFIG.profile

    def __init__(self, cfg=settings, model: str = DEFAULT_LOGICAL_MODEL, transport: Optional[HttpxTransport] = None):
        self._settings = cfg
        self._model_cfg: ModelConfig = DASHSCOPE_CONFIG.models[model]
        self._transport = transport or HttpxTransport(
            provider=self.name,
            timeout=getattr(cfg, "http_timeout", 30.0),
        )

    # ---- 流式 ----

    def stream(self, turns: Sequence[ChatTurn], session: StreamSession) -> None:
        headers = self._headers()
        payload = self.build_payload(turns, stream=True)
        self._transport.stream_into(self._url(), payload, headers, session)

    # ---- 非流式 ----

    def chat(self, turns: Sequence[ChatTurn]) -> str:
        headers = self._headers()
        data = self._transport.post_json(self._url(), self.build_payload(turns, stream=False), headers)
        reply = extract_reply(data, self.profile)
        if reply is None:
            raise ApiError(code="INVALID_RESPONSE", message="解析响应失败", http_status=502, provider=self.name)
        return reply

    # ---- 辅助方法 ----

    def build_payload(self, turns: Sequence[ChatTurn], stream: bool) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self._model_cfg.provider_model,
            "messages": [t.to_payload() for t in turns],
            "temperature": self._model_cfg.default_temperature,
            "stream": stream,
        }
        if self._model_cfg.max_tokens:
            payload["max_tokens"] = self._model_cfg.max_tokens
        return payload

    def _headers(self) -> Dict[str, str]:
        api_key = getattr(self._settings, "dashscope_api_key", None)
        if not api_key:
            raise ValidationError(code="MISSING_API_KEY", message="DASHSCOPE_API_KEY not set")
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _url(self) -> str:
        base = getattr(self._settings, "dashscope_base_url", None) or DASHSCOPE_CONFIG.base_url
        return f"{base.rstrip('/')}{DASHSCOPE_CONFIG.endpoint}"
