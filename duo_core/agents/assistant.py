"""朵朵语音助手的指令编排。

一条最终识别文本（或键盘输入）依次经过：

1. 上传用户消息（尽力而为，失败只记日志）；
2. 星星指令，本地应答；
3. 应用唤起关键词，成功唤起则结束；
4. 流式对话：增量同时交给界面和语音朗读，完成后上传 AI 回复。
"""

import logging
from typing import Optional, Protocol

from duo_core.agents.app_launcher import AppLauncher
from duo_core.agents.chat_service import ChatService
from duo_core.agents.star_commands import handle_star_command
from duo_core.domain.exceptions import BusinessError
from duo_core.domain.stars import StarStore
from duo_core.infrastructure.http.conversation_client import ConversationClient
from duo_core.infrastructure.logging.logger import log_event
from duo_core.speech.tts import SpeechQueue
from duo_core.streaming.session import StreamSession

FRIENDLY_ERROR_MESSAGE = "抱歉，我现在无法回应，请检查AI服务是否正常运行。"
CONVERSATION_TITLE_LENGTH = 20


class ReplySink(Protocol):
    """界面侧的消息展示接口。"""

    def add_user_message(self, text: str) -> None:
        ...

    def add_or_update_ai_message(self, text: str) -> None:
        """追加到当前 AI 气泡；没有进行中的气泡时新建一个。"""
        ...


class DuoAssistant:
    def __init__(
        self,
        chat: ChatService,
        stars: StarStore,
        launcher: AppLauncher,
        speech: SpeechQueue,
        sink: ReplySink,
        uploader: Optional[ConversationClient] = None,
        background: bool = False,
    ):
        self._chat = chat
        self._stars = stars
        self._launcher = launcher
        self._speech = speech
        self._sink = sink
        self._uploader = uploader
        self._background = background

    @property
    def chat(self) -> ChatService:
        return self._chat

    def on_final_transcription(self, text: str) -> Optional[StreamSession]:
        """语音识别的最终结果；空白文本直接忽略。"""

        if not text or not text.strip():
            return None
        return self.process_command(text.strip())

    def process_command(self, text: str) -> Optional[StreamSession]:
        """处理一条指令；只有进入流式对话时才返回会话。"""

        self._sink.add_user_message(text)
        self._upload_user_message(text)

        star_reply = handle_star_command(text, self._stars)
        if star_reply is not None:
            self._sink.add_or_update_ai_message(star_reply)
            return None

        launch = self._launcher.check_and_launch(text)
        if launch is not None:
            self._sink.add_or_update_ai_message(launch.response_message)
            if launch.app_launched:
                return None

        self._speech.reset()
        return self._chat.send_message_stream(
            text,
            on_delta=self._on_delta,
            on_complete=self._on_complete,
            background=self._background,
        )

    def _on_delta(self, delta: str) -> None:
        self._sink.add_or_update_ai_message(delta)
        self._speech.speak_addition(delta)

    def _on_complete(self, full_text: Optional[str], error: Optional[BaseException]) -> None:
        if error is not None:
            log_event(
                logging.ERROR,
                "Chat reply failed",
                {},
                error=str(error),
                error_code=getattr(error, "code", type(error).__name__),
            )
            self._sink.add_or_update_ai_message(FRIENDLY_ERROR_MESSAGE)
            return
        if full_text is not None:
            self._upload_ai_message(full_text)

    def _upload_user_message(self, text: str) -> None:
        if self._uploader is None:
            return
        try:
            if self._uploader.current_conversation_id is None:
                self._uploader.create_conversation(title=text[:CONVERSATION_TITLE_LENGTH])
            self._uploader.add_user_message(text)
        except BusinessError as e:
            log_event(logging.WARNING, "User message upload failed", {}, error=str(e), error_code=e.code)

    def _upload_ai_message(self, text: str) -> None:
        if self._uploader is None:
            return
        try:
            self._uploader.add_ai_message(text)
        except BusinessError as e:
            log_event(logging.WARNING, "AI message upload failed", {}, error=str(e), error_code=e.code)
