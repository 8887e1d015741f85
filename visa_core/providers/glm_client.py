"""GLM / BigModel Provider 适配器。

接口风格与 OpenAI/Kimi 类似，均使用 chat/completions 端点，
本实现只依赖公共字段：model/messages/temperature/max_tokens/top_p/stream。
"""

from visa_core.providers.openai_compat import ChatCompletionsClient
from visa_core.providers.registry import GLM_CONFIG


class GlmClient(ChatCompletionsClient):
    """GLM / BigModel Provider 客户端实现。"""

    name = "glm"
    provider_config = GLM_CONFIG
    api_key_field = "glm_api_key"
    base_url_field = "glm_base_url"
    env_name = "GLM_API_KEY"
