"""对外 API 服务模块。

提供简化的函数接口供上层应用调用：按配置组装默认的 ChatService，
并把流式对话、非流式对话、取消、清空历史包装成普通函数。
"""

from typing import Any, Dict, List, Optional

from duo_core.agents.chat_service import ChatService
from duo_core.config.settings import settings
from duo_core.domain.conversation import ConversationHistory
from duo_core.domain.exceptions import BusinessError
from duo_core.infrastructure.logging.logger import logger
from duo_core.providers import create_provider
from duo_core.streaming.session import CompletionCallback, DeltaCallback, StreamSession


_service: Optional[ChatService] = None


def get_default_service() -> ChatService:
    """获取默认的 ChatService 实例（单例）。"""
    global _service
    if _service is None:
        _service = ChatService(
            provider_client=create_provider(settings.default_provider),
            history=ConversationHistory(max_turns=settings.max_history_turns),
        )
    return _service


def reset_default_service() -> None:
    """丢弃默认实例（例如切换 provider 配置之后）。"""
    global _service
    if _service is not None:
        _service.cancel()
    _service = None


def stream_chat(
    prompt: str,
    on_delta: DeltaCallback,
    on_complete: CompletionCallback,
    background: bool = False,
) -> StreamSession:
    """流式对话。

    Args:
        prompt: 用户输入内容
        on_delta: 增量文本回调
        on_complete: 完成回调 (完整文本, None) / (None, error)
        background: 是否在后台线程驱动传输

    Returns:
        本次请求的 StreamSession
    """
    return get_default_service().send_message_stream(prompt, on_delta, on_complete, background=background)


def run_chat(prompt: str) -> Dict[str, Any]:
    """非流式对话，返回回复内容与当前历史长度。

    Raises:
        各种 domain.exceptions 中定义的异常
    """
    service = get_default_service()
    try:
        reply = service.send_message(prompt)
    except BusinessError as e:
        logger.error(f"Chat failed: {e}", extra={"extra": {
            "error": str(e),
            "error_code": e.code,
        }})
        raise
    return {"reply": reply, "history_length": len(service.history)}


def get_history() -> List[Dict[str, str]]:
    """当前对话历史（不含固定的 system 提示词）。"""
    return [turn.to_payload() for turn in get_default_service().history.snapshot()]


def cancel_chat() -> bool:
    return get_default_service().cancel()


def clear_history() -> None:
    get_default_service().clear_history()
