"""对话记录上传客户端。

把用户消息和 AI 回复同步到后端的会话服务，接口约定：

- POST /conversations/add.json      创建会话 {title, llmModel}
- POST /conversations/addChat.json  追加消息 {content, conversationId, type, role}

响应统一为 {"success": bool, "resultCode": "SUCCESS", "data": {...}, "values": [...]}。
"""

import logging
from typing import Any, Dict, Optional

import httpx

from duo_core.config.settings import settings
from duo_core.domain.exceptions import ConversationError, NetworkError
from duo_core.infrastructure.logging.logger import log_event

DEFAULT_LLM_MODEL = "defaultModel"


class ConversationClient:
    """会话上传服务的同步客户端，持有当前会话 ID。"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self._base_url = (base_url or settings.conversation_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.http_timeout
        self._conversation_id: Optional[int] = None

    @property
    def current_conversation_id(self) -> Optional[int]:
        return self._conversation_id

    def reset_conversation(self) -> None:
        self._conversation_id = None
        log_event(logging.INFO, "Conversation reset", {})

    def create_conversation(self, title: str, llm_model: str = DEFAULT_LLM_MODEL) -> int:
        """创建新会话并记为当前会话，返回会话 ID。"""

        body = self._post("/conversations/add.json", {"title": title, "llmModel": llm_model})
        data = body.get("data") or {}
        conversation_id = data.get("id") if isinstance(data, dict) else None
        if conversation_id is None:
            raise ConversationError(code="INVALID_RESPONSE", message="响应中缺少会话ID")
        self._conversation_id = int(conversation_id)
        log_event(logging.INFO, "Conversation created", {}, conversation_id=self._conversation_id)
        return self._conversation_id

    def add_chat_message(self, content: str, role: str, conversation_id: Optional[int] = None) -> Dict[str, Any]:
        target = conversation_id if conversation_id is not None else self._conversation_id
        if target is None:
            raise ConversationError(code="NO_CONVERSATION", message="没有可用的会话ID")
        payload = {
            "content": content,
            "conversationId": target,
            "type": "TEXT",
            "role": role,
        }
        body = self._post("/conversations/addChat.json", payload)
        log_event(logging.INFO, "Chat message uploaded", {}, conversation_id=target, role=role)
        return body

    def add_user_message(self, content: str) -> Dict[str, Any]:
        return self.add_chat_message(content, role="user")

    def add_ai_message(self, content: str) -> Dict[str, Any]:
        return self.add_chat_message(content, role="assistant")

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "accept": "*/*",
            "accept-language": "zh-CN,zh;q=0.9,en;q=0.8,zh-TW;q=0.7",
        }
        try:
            with httpx.Client(timeout=self._timeout, trust_env=False) as client:
                resp = client.post(f"{self._base_url}{path}", json=payload, headers=headers)
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), provider="conversation")
        try:
            body = resp.json()
        except ValueError as e:
            raise ConversationError(code="INVALID_RESPONSE", message=f"无效的响应格式: {e}", http_status=502)
        if not isinstance(body, dict) or not body.get("success") or body.get("resultCode") != "SUCCESS":
            result_code = body.get("resultCode") if isinstance(body, dict) else None
            raise ConversationError(
                code="INVALID_RESPONSE",
                message=f"服务器返回错误: {result_code}",
                http_status=502,
                result_code=result_code,
            )
        return body
