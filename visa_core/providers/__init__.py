"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供各厂商的具体实现 (kimi_client、glm_client)。
"""

from typing import Optional

from visa_core.config.settings import settings
from visa_core.providers.base import ProviderClient
from visa_core.providers.kimi_client import KimiClient
from visa_core.providers.glm_client import GlmClient
from visa_core.providers.registry import get_provider_config


def create_provider(name: Optional[str] = None) -> ProviderClient:
    """根据名称创建 Provider 实例，默认取配置中的 provider。

    Raises:
        KeyError: 未在 registry 中登记的 Provider 名称。
    """

    provider_name = get_provider_config(name or getattr(settings, "default_provider", "glm")).name
    if provider_name == "kimi":
        return KimiClient(settings)
    return GlmClient(settings)
