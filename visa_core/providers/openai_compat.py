"""OpenAI 兼容的 chat/completions 流式调用。

Kimi 与 GLM 都使用同一套协议：
- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>
- 流式响应为 SSE，每行 "data: {...}"，以 "data: [DONE]" 结束。

子类只需声明 name、ProviderConfig 以及 settings 中对应的 key/base_url 字段名。
"""

import json
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from visa_core.domain.exceptions import ApiError, NetworkError, RateLimitError, ValidationError
from visa_core.domain.models import (
    ChatMessage,
    ChatRequest,
    ChatStreamChoice,
    ChatStreamChunk,
    ChatUsage,
)
from visa_core.providers.registry import ModelConfig, ProviderConfig


class ChatCompletionsClient:
    name = ""
    provider_config: ProviderConfig
    api_key_field = ""
    base_url_field = ""
    env_name = ""

    def __init__(self, settings):
        # Settings 里包含 base_url、api_key、超时等配置
        self._settings = settings

    async def chat_stream(self, req: ChatRequest) -> AsyncIterator[ChatStreamChunk]:
        """执行一次流式对话调用，逐步 yield ChatStreamChunk。"""

        api_key = getattr(self._settings, self.api_key_field, None)
        if not api_key:
            # 配置缺失走 ValidationError，方便上层统一处理
            raise ValidationError(code="MISSING_API_KEY", message=f"{self.env_name} not set")
        model_cfg = self._model_config(req.model)
        payload = self._build_payload(req, model_cfg)
        base = getattr(self._settings, self.base_url_field, None) or self.provider_config.base_url
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                async with client.stream(
                    "POST",
                    f"{base}/chat/completions",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                ) as resp:
                    if resp.status_code == 429:
                        # 限流错误交给用户决定是否重新提交
                        raise RateLimitError(code="RATE_LIMIT", message=f"{self.name} rate limit")
                    if resp.status_code >= 400:
                        body = await resp.aread()
                        raise ApiError(
                            code="API_ERROR",
                            message=body.decode("utf-8", errors="replace"),
                            http_status=resp.status_code,
                        )
                    async for line in resp.aiter_lines():
                        data = self._decode_line(line)
                        if data is None:
                            continue
                        yield self._parse_stream_chunk(data, req)
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e))

    def _model_config(self, logical_name: str) -> ModelConfig:
        try:
            return self.provider_config.models[logical_name]
        except KeyError:
            raise ValidationError(code="UNKNOWN_MODEL", message=f"{self.name} has no model {logical_name!r}")

    def _build_payload(self, req: ChatRequest, model_cfg: ModelConfig) -> dict:
        """将 ChatRequest 转成 chat/completions 所需的请求 JSON。"""

        return {
            "model": model_cfg.provider_model,
            "messages": [self._message_to_payload(m) for m in req.messages],
            "temperature": req.temperature or model_cfg.default_temperature,
            "max_tokens": req.max_tokens or model_cfg.max_tokens,
            "top_p": req.top_p,
            "stream": True,
        }

    @staticmethod
    def _decode_line(line: str) -> Optional[Dict[str, Any]]:
        if not line:
            return None
        data_str = line[5:].strip() if line.startswith("data:") else line.strip()
        if not data_str or data_str == "[DONE]":
            return None
        try:
            data = json.loads(data_str)
        except json.JSONDecodeError:
            return None
        return data if isinstance(data, dict) else None

    def _parse_stream_chunk(self, data: dict, req: ChatRequest) -> ChatStreamChunk:
        """解析流式响应中的单条增量。"""

        choices: list[ChatStreamChoice] = []
        for i, ch in enumerate(data.get("choices", [])):
            delta_payload = ch.get("delta") or {}
            choices.append(
                ChatStreamChoice(
                    index=ch.get("index", i),
                    delta=ChatMessage(
                        role=delta_payload.get("role") or "assistant",
                        content=delta_payload.get("content") or "",
                    ),
                    finish_reason=ch.get("finish_reason"),
                )
            )
        usage_raw = data.get("usage") or {}
        usage = None
        if usage_raw:
            usage = ChatUsage(
                prompt_tokens=usage_raw.get("prompt_tokens", 0),
                completion_tokens=usage_raw.get("completion_tokens", 0),
                total_tokens=usage_raw.get("total_tokens", 0),
            )
        return ChatStreamChunk(
            provider=self.name,
            model=req.model,
            choices=choices,
            usage=usage,
            raw=data,
        )

    @staticmethod
    def _message_to_payload(message: ChatMessage) -> Dict[str, Any]:
        return {"role": message.role, "content": message.content}
