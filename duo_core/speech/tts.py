"""语音合成朗读队列。

SpeechQueue 接收流式回复的增量文本，按句切分后排队，
交给平台提供的 SpeechSynthesizer 逐句朗读。
一句读完后由平台回调 on_utterance_finished() 推进队列。
"""

import logging
import re
import threading
from collections import deque
from typing import Callable, Deque, List, Optional, Protocol

from duo_core.infrastructure.logging.logger import log_event

SENTENCE_DELIMITERS = "。！？.!?\n"
SHORT_TEXT_LIMIT = 5

# 顺序有意义：长的替换项放在前面
_PAUSE_REPLACEMENTS = (
    ("......", "。"),
    ("！", "。"),
    ("!", "。"),
    ("？", "。"),
    ("?", "。"),
    ("；", "。"),
    (";", "。"),
    ("…", "。"),
    ("，", ", "),
    ("、", ", "),
    ("：", ": "),
    ("——", ", "),
    ("—", ", "),
)
_DROPPED_CHARS = "「」『』（）()《》〈〉\"'"
_ASCII_PUNCT = re.compile(r"([,:])(?! )")
_MULTI_SPACE = re.compile(r" {2,}")


class SpeechSynthesizer(Protocol):
    """平台语音合成引擎接口。"""

    def speak(self, text: str) -> None:
        ...

    def stop(self) -> None:
        ...


def normalize_for_speech(text: str) -> str:
    """把标点替换为合适的停顿，避免引擎把标点名称读出来。"""

    result = text
    for src, dst in _PAUSE_REPLACEMENTS:
        result = result.replace(src, dst)
    result = result.translate({ord(ch): None for ch in _DROPPED_CHARS})
    result = _ASCII_PUNCT.sub(r"\1 ", result)
    return _MULTI_SPACE.sub(" ", result)


def split_sentences(text: str) -> List[str]:
    """按句末标点切分，分隔符保留在句尾；很短的文本不切分。"""

    if len(text) <= SHORT_TEXT_LIMIT:
        return [text]
    sentences: List[str] = []
    current = ""
    for ch in text:
        current += ch
        if ch in SENTENCE_DELIMITERS:
            sentences.append(current)
            current = ""
    if current:
        sentences.append(current)
    return sentences


class SpeechQueue:
    """流式朗读队列。

    - speak(text): 停止当前朗读，整段朗读 text。
    - speak_addition(text): 追加增量，按到达顺序排队朗读。
    - on_utterance_finished(): 平台在一句朗读结束时调用。
    - reset(): 清空队列并停止朗读。
    """

    def __init__(self, synthesizer: SpeechSynthesizer):
        self._synth = synthesizer
        self._queue: Deque[str] = deque()
        self._speaking = False
        self._accumulated = ""
        self._on_done: Optional[Callable[[], None]] = None
        self._lock = threading.Lock()

    @property
    def is_speaking(self) -> bool:
        return self._speaking

    @property
    def pending(self) -> List[str]:
        return list(self._queue)

    @property
    def accumulated_text(self) -> str:
        return self._accumulated

    def speak(self, text: str, on_done: Optional[Callable[[], None]] = None) -> None:
        self.reset()
        with self._lock:
            self._accumulated = text
            self._on_done = on_done
            self._speaking = True
        self._synth.speak(normalize_for_speech(text))

    def speak_addition(self, text: str) -> None:
        with self._lock:
            self._accumulated += text
            if text:
                self._queue.extend(split_sentences(text))
            utterance = self._next_locked()
        if utterance is not None:
            self._synth.speak(utterance)

    def on_utterance_finished(self) -> None:
        with self._lock:
            self._speaking = False
            utterance = self._next_locked()
            callback = None
            if utterance is None:
                callback, self._on_done = self._on_done, None
        if utterance is not None:
            self._synth.speak(utterance)
        elif callback is not None:
            callback()

    def reset(self) -> None:
        with self._lock:
            was_speaking = self._speaking
            self._queue.clear()
            self._accumulated = ""
            self._speaking = False
            self._on_done = None
        if was_speaking:
            self._synth.stop()
            log_event(logging.DEBUG, "Speech stopped", {})

    def _next_locked(self) -> Optional[str]:
        if self._speaking or not self._queue:
            return None
        self._speaking = True
        return normalize_for_speech(self._queue.popleft())
