"""语音识别结果收集。

识别引擎会不断推送中间结果，只有最终结果才作为一条指令交给处理函数。
"""

import logging
from typing import Callable, Optional

from duo_core.infrastructure.logging.logger import log_event


class TranscriptCollector:
    """收集识别结果，仅转发非空的最终文本。"""

    def __init__(self, on_final: Callable[[str], None]):
        self._on_final = on_final
        self._partial: str = ""

    @property
    def partial(self) -> str:
        """最近一次中间结果，供界面实时显示。"""

        return self._partial

    def on_transcript(self, text: Optional[str], is_final: bool) -> None:
        if not is_final:
            self._partial = text or ""
            return
        self._partial = ""
        final = (text or "").strip()
        if not final:
            log_event(logging.DEBUG, "Ignored blank final transcript", {})
            return
        self._on_final(final)

    def reset(self) -> None:
        self._partial = ""
