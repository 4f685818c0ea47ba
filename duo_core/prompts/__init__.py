"""系统提示词加载工具。

当前仅支持儿童语音助手场景，按语言(locale) 从 prompts/zh 目录
读取对应的 system prompt 文本，作为每次请求最前面的 system 轮次。
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent

_PROMPT_FILES = {
    "kid-assistant": "kid_assistant_system.md",
}


def load_system_prompt(assistant_type: str = "kid-assistant", locale: str = "zh") -> str:
    """根据助手类型和语言加载系统提示词文本。"""

    fname = PROMPTS_DIR / locale / _PROMPT_FILES[assistant_type]
    return fname.read_text(encoding="utf-8").strip()
