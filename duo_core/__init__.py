"""Duo Core 顶层包。

该包提供儿童语音助手"朵朵"的核心实现，
包括配置加载、流式响应解析、有界对话历史、Provider 适配、
星星奖励、应用唤起、语音朗读队列与对话记录上传等能力。
"""

from duo_core.agents.chat_service import ChatService
from duo_core.domain.conversation import ConversationHistory
from duo_core.streaming.session import StreamSession

__all__ = ["ChatService", "ConversationHistory", "StreamSession"]
