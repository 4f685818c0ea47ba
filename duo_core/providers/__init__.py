"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供 HTTP 传输 (transport)。
- 提供各厂商的具体实现 (如 dashscope_client、ollama_client)。
"""

from typing import Optional

from duo_core.config.settings import settings
from duo_core.providers.base import ProviderClient
from duo_core.providers.dashscope_client import DashScopeClient
from duo_core.providers.ollama_client import OllamaClient


def create_provider(name: Optional[str] = None, cfg=None) -> ProviderClient:
    """根据名称创建 Provider 实例，默认取配置中的 provider。"""

    cfg = cfg or settings
    provider_name = (name or getattr(cfg, "default_provider", "ollama")).lower()
    if provider_name == "dashscope":
        return DashScopeClient(cfg)
    return OllamaClient(cfg)

