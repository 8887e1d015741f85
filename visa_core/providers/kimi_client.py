"""Kimi Provider 适配器。

Moonshot/Kimi 的 chat/completions 接口与 OpenAI 兼容，
流式解析与错误映射都由 ChatCompletionsClient 完成。
"""

from visa_core.providers.openai_compat import ChatCompletionsClient
from visa_core.providers.registry import KIMI_CONFIG


class KimiClient(ChatCompletionsClient):
    """Kimi 提供方客户端实现。"""

    name = "kimi"
    provider_config = KIMI_CONFIG
    api_key_field = "kimi_api_key"
    base_url_field = "kimi_base_url"
    env_name = "KIMI_API_KEY"
