"""Provider 与模型配置。

本模块将"逻辑模型名"与"具体厂商模型名"解耦：

- 逻辑名（logical_name）：在代码里使用的统一名称，例如 "kid-chat"。
- provider_model：厂商实际提供的模型 ID，例如 "qwen-max"。

同时为每个 Provider 绑定一份 ProviderProfile，描述它的流式行格式。"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from duo_core.streaming.profile import OLLAMA_GENERATE_PROFILE, SSE_CHAT_PROFILE, ProviderProfile

DEFAULT_LOGICAL_MODEL = "kid-chat"


@dataclass
class ModelConfig:
    """单个逻辑模型的配置。"""

    logical_name: str
    provider_model: str
    default_temperature: float
    max_tokens: Optional[int] = None


@dataclass
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    endpoint: str
    profile: ProviderProfile
    models: Dict[str, ModelConfig]


# DashScope（阿里云 OpenAI 兼容模式），SSE 流
DASHSCOPE_CONFIG = ProviderConfig(
    name="dashscope",
    base_url="https://dashscope.aliyuncs.com/compatible-mode/v1",
    endpoint="/chat/completions",
    profile=SSE_CHAT_PROFILE,
    models={
        DEFAULT_LOGICAL_MODEL: ModelConfig(
            logical_name=DEFAULT_LOGICAL_MODEL,
            provider_model="qwen-max",
            default_temperature=0.7,
            max_tokens=800,
        )
    },
)

# Ollama 本地模型服务，逐行 JSON 流，没有结束哨兵
OLLAMA_CONFIG = ProviderConfig(
    name="ollama",
    base_url="http://127.0.0.1:11434",
    endpoint="/api/generate",
    profile=OLLAMA_GENERATE_PROFILE,
    models={
        DEFAULT_LOGICAL_MODEL: ModelConfig(
            logical_name=DEFAULT_LOGICAL_MODEL,
            provider_model="qwen2.5:7b",
            default_temperature=0.7,
        )
    },
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "dashscope": DASHSCOPE_CONFIG,
    "ollama": OLLAMA_CONFIG,
}


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")
