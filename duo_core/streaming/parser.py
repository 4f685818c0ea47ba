"""流式行分类器。

把 ChunkBuffer 取出的每一行归类为协议事件：

SSE 模式（OpenAI 兼容接口）::

    data: {"choices":[{"delta":{"content":"你"}}]}
    data: [DONE]

行模式（Ollama /api/generate）::

    {"response":"你","done":false}

两种模式共用同一个 classify，差异全部来自 ProviderProfile。
"""

import json
from typing import Union

from duo_core.domain.models import StreamEvent

from .extractor import extract_delta
from .profile import ProviderProfile


def classify(line: Union[str, bytes], profile: ProviderProfile) -> StreamEvent:
    """将一行文本归类为 StreamEvent；无法解码的字节行视为 malformed。"""

    if isinstance(line, bytes):
        return StreamEvent.malformed(line.decode("utf-8", "backslashreplace"))

    if line.endswith("\r"):
        line = line[:-1]

    if profile.line_prefix is not None:
        if not line.startswith(profile.line_prefix):
            return StreamEvent.ignorable()
        body = line[len(profile.line_prefix):]
        if profile.done_sentinel is not None and body == profile.done_sentinel:
            return StreamEvent.done()
    else:
        if not line.strip():
            return StreamEvent.ignorable()
        body = line

    try:
        value = json.loads(body)
    except json.JSONDecodeError:
        return StreamEvent.malformed(line)

    text = extract_delta(value, profile)
    if text is None:
        return StreamEvent.ignorable()
    return StreamEvent.delta(text)
