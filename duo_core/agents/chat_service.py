"""对话服务核心模块。

ChatService 把一次用户输入变成一次流式请求：
追加历史 → 渲染请求体 → 打开 StreamSession → 驱动传输 →
成功后把完整回复作为 assistant 轮次写回历史。

历史、Provider、回调上下文都通过构造函数显式传入，
同一进程里可以同时存在多个互不干扰的 ChatService。
"""

import logging
import threading
from typing import List, Optional
from uuid import uuid4

from duo_core.config.settings import settings
from duo_core.domain.conversation import ConversationHistory
from duo_core.domain.exceptions import BusinessError
from duo_core.domain.models import ChatTurn
from duo_core.infrastructure.logging.logger import log_event
from duo_core.prompts import load_system_prompt
from duo_core.providers.base import ProviderClient
from duo_core.streaming.session import (
    CompletionCallback,
    DeltaCallback,
    Dispatch,
    StreamSession,
    inline_dispatch,
)


class ChatService:
    """单个对话上下文的流式聊天服务。

    并发策略：同一时刻只有一个活动会话。新的提问到来时，
    仍在进行中的旧会话会被取消（cancel-and-replace），
    旧会话此后不会再回调，也不会写入历史。
    """

    def __init__(
        self,
        provider_client: ProviderClient,
        history: Optional[ConversationHistory] = None,
        system_prompt: Optional[str] = None,
        dispatch: Optional[Dispatch] = None,
    ):
        self._provider = provider_client
        self._history = history if history is not None else ConversationHistory(
            max_turns=getattr(settings, "max_history_turns", 10)
        )
        self._system_prompt = system_prompt if system_prompt is not None else load_system_prompt()
        self._dispatch = dispatch or inline_dispatch
        self._active: Optional[StreamSession] = None
        self._worker: Optional[threading.Thread] = None

    @property
    def history(self) -> ConversationHistory:
        return self._history

    @property
    def active_session(self) -> Optional[StreamSession]:
        session = self._active
        if session is not None and session.is_active:
            return session
        return None

    def build_turns(self) -> List[ChatTurn]:
        """固定 system 提示词 + 历史快照，作为下一次请求的消息列表。"""

        snapshot = self._history.snapshot()
        turns: List[ChatTurn] = []
        if self._system_prompt and not (snapshot and snapshot[0].role == "system"):
            turns.append(ChatTurn(role="system", content=self._system_prompt))
        turns.extend(snapshot)
        return turns

    def send_message_stream(
        self,
        prompt: str,
        on_delta: DeltaCallback,
        on_complete: CompletionCallback,
        background: bool = False,
    ) -> StreamSession:
        """发送消息并以流式方式接收回复。

        Args:
            prompt: 用户输入（通常是语音识别的最终结果）
            on_delta: 每个增量文本的回调，按到达顺序调用
            on_complete: 结束回调，成功为 (完整文本, None)，失败为 (None, error)
            background: True 时在后台线程驱动传输并立即返回

        Returns:
            本次请求对应的 StreamSession，可用于取消
        """
        log_ctx = {"trace_id": f"tr-{uuid4().hex}", "provider": self._provider.name}

        previous = self._active
        if previous is not None and previous.cancel():
            log_event(
                logging.INFO,
                "Cancelled superseded session",
                log_ctx,
                superseded_session_id=previous.session_id,
            )

        self._history.append("user", prompt)
        turns = self.build_turns()

        def _complete(text: Optional[str], error: Optional[BaseException]) -> None:
            # 在回调上下文中执行：只有当前会话才能写历史
            if error is None and text is not None and self._active is session:
                self._history.append("assistant", text)
            if self._active is session:
                self._active = None
            on_complete(text, error)

        session = StreamSession(
            self._provider.profile,
            on_delta=on_delta,
            on_complete=_complete,
            dispatch=self._dispatch,
            log_ctx=log_ctx,
        )
        self._active = session
        session.start()
        log_event(
            logging.INFO,
            "Calling provider (stream)",
            log_ctx,
            session_id=session.session_id,
            message_count=len(turns),
        )

        if background:
            self._worker = threading.Thread(
                target=self._drive,
                args=(turns, session),
                name=f"duo-stream-{session.session_id}",
                daemon=True,
            )
            self._worker.start()
        else:
            self._drive(turns, session)
        return session

    def send_message(self, prompt: str) -> str:
        """非流式发送消息，直接返回完整回复；失败时抛出 BusinessError。"""

        self._history.append("user", prompt)
        reply = self._provider.chat(self.build_turns())
        self._history.append("assistant", reply)
        return reply

    def cancel(self) -> bool:
        """取消当前活动会话。"""

        session = self._active
        self._active = None
        return session.cancel() if session is not None else False

    def clear_history(self) -> None:
        self._history.clear()

    def wait(self, timeout: Optional[float] = None) -> None:
        """等待后台传输线程结束（仅 background=True 时有意义）。"""

        worker = self._worker
        if worker is not None:
            worker.join(timeout)

    def _drive(self, turns: List[ChatTurn], session: StreamSession) -> None:
        try:
            self._provider.stream(turns, session)
        except BusinessError as e:
            # 配置缺失等在开连接前就失败的情况，同样经完成回调交付
            session.finish(e)
        except Exception as e:
            # 传输层未映射的异常或回调自身抛出的异常：会话不能停在 ACTIVE
            if not session.is_active:
                raise
            log_event(
                logging.ERROR,
                "Stream driver raised unexpected error",
                {"session_id": session.session_id, "provider": self._provider.name},
                error=str(e),
                error_type=type(e).__name__,
            )
            session.finish(e)
