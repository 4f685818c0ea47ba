"""单次流式请求的会话状态机。

StreamSession 独占自己的缓冲区和累积文本，驱动
ChunkBuffer → classify → extract_delta 这条流水线，并把每个增量
按到达顺序投递给调用方。

状态流转::

    IDLE --start()--> ACTIVE --finish()--------> COMPLETED
                             --finish(error)---> FAILED
                             --cancel()--------> CANCELLED

终态之后到达的分片、完成信号一律忽略：传输层在取消后
仍可能回调，这里必须安静地丢弃，而不是报错。
"""

import logging
import threading
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Union
from uuid import uuid4

from duo_core.domain.exceptions import MalformedEventError, SessionStateError
from duo_core.domain.models import SessionState
from duo_core.infrastructure.logging.logger import log_event

from .buffer import ChunkBuffer, Line
from .parser import classify
from .profile import ProviderProfile

DeltaCallback = Callable[[str], None]
CompletionCallback = Callable[[Optional[str], Optional[BaseException]], None]
Dispatch = Callable[[Callable[[], None]], None]


def inline_dispatch(fn: Callable[[], None]) -> None:
    """默认回调上下文：在当前线程直接执行。"""

    fn()


class StreamSession:
    """一次请求/响应周期的流式会话。

    - on_delta: 每个增量调用一次，严格按字节到达顺序。
    - on_complete: 成功时 (完整文本, None)，失败时 (None, error)；
      每个会话最多调用一次，被取消的会话不会调用。
    - dispatch: 回调投递上下文（例如 UI 线程队列），默认在当前线程执行。
      dispatch 在会话锁内被调用，只能立即执行或入队后返回，不能阻塞等待
      另一个线程（例如"投递到 UI 线程并等待"），否则与该线程上的 cancel() 互相等待。
    """

    def __init__(
        self,
        profile: ProviderProfile,
        on_delta: DeltaCallback,
        on_complete: CompletionCallback,
        dispatch: Optional[Dispatch] = None,
        log_ctx: Optional[Dict[str, Any]] = None,
    ):
        self.session_id = f"s-{uuid4().hex}"
        self._profile = profile
        self._on_delta = on_delta
        self._on_complete = on_complete
        self._dispatch = dispatch or inline_dispatch
        self._log_ctx: Dict[str, Any] = dict(log_ctx or {})
        self._log_ctx.update({"session_id": self.session_id, "provider": profile.name})
        self._buffer = ChunkBuffer()
        self._pieces: List[str] = []
        self._malformed: List[MalformedEventError] = []
        self._state = SessionState.IDLE
        self._lock = threading.RLock()
        self.delta_count = 0

    # ---- 状态查询 ----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def text(self) -> str:
        """目前为止累积的完整文本。"""

        return "".join(self._pieces)

    @property
    def malformed(self) -> List[MalformedEventError]:
        return list(self._malformed)

    @property
    def malformed_count(self) -> int:
        return len(self._malformed)

    # ---- 生命周期 ----

    def start(self) -> None:
        with self._lock:
            if self._state is not SessionState.IDLE:
                raise SessionStateError(
                    code="SESSION_ALREADY_STARTED",
                    message=f"Session {self.session_id} is {self._state.value}",
                )
            self._buffer.clear()
            self._pieces.clear()
            self._state = SessionState.ACTIVE
        self._log(logging.INFO, "Stream session started")

    def on_chunk(self, chunk: Union[bytes, bytearray, str]) -> None:
        """处理传输层交付的一个原始分片。"""

        with self._lock:
            if self._state is not SessionState.ACTIVE:
                return
            self._buffer.append(chunk)
            self._process_lines(self._buffer.drain_complete_lines())

    def finish(self, error: Optional[BaseException] = None) -> None:
        """传输结束：error 为 None 表示正常关闭。"""

        with self._lock:
            if self._state is not SessionState.ACTIVE:
                return
            if error is not None:
                self._state = SessionState.FAILED
                self._buffer.clear()
                self._deliver(partial(self._on_complete, None, error))
                self._log(
                    logging.ERROR,
                    "Stream session failed",
                    error=str(error),
                    error_code=getattr(error, "code", type(error).__name__),
                    delta_count=self.delta_count,
                )
                return

            self._process_lines(self._buffer.drain_complete_lines(is_final=True))
            if self._state is not SessionState.ACTIVE:
                # 回调里取消了会话
                return
            self._state = SessionState.COMPLETED
            full_text = self.text
            self._deliver(partial(self._on_complete, full_text, None))
        self._log(
            logging.INFO,
            "Stream session completed",
            delta_count=self.delta_count,
            malformed_count=self.malformed_count,
            text_length=len(full_text),
        )

    def cancel(self) -> bool:
        """取消会话；之后不会再有任何回调。返回是否真的发生了取消。"""

        with self._lock:
            if self._state is not SessionState.ACTIVE:
                return False
            self._state = SessionState.CANCELLED
            self._buffer.clear()
        self._log(logging.INFO, "Stream session cancelled", delta_count=self.delta_count)
        return True

    # ---- 内部 ----

    def _process_lines(self, lines: List[Line]) -> None:
        for line in lines:
            if self._state is not SessionState.ACTIVE:
                return
            event = classify(line, self._profile)
            if event.kind == "delta":
                text = event.text or ""
                self._pieces.append(text)
                self.delta_count += 1
                self._deliver(partial(self._on_delta, text))
            elif event.kind == "done":
                # 哨兵只结束本分片的处理，会话何时结束由传输层决定
                return
            elif event.kind == "malformed":
                err = MalformedEventError(
                    code="MALFORMED_EVENT",
                    message="Failed to decode stream line",
                    line=event.raw_line,
                )
                self._malformed.append(err)
                self._log(logging.WARNING, "Skipped malformed stream line", line=event.raw_line)

    def _deliver(self, fn: Callable[[], None]) -> None:
        def run() -> None:
            # 已排队但尚未执行的回调，在取消后同样丢弃
            if self._state is SessionState.CANCELLED:
                return
            fn()

        self._dispatch(run)

    def _log(self, level: int, message: str, **fields: Any) -> None:
        log_event(level, message, self._log_ctx, **fields)
